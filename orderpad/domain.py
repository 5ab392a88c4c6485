"""
Domain Records

Plain dataclasses passed between the stores, the order service and the
HTTP layer. Both store implementations return these, never ORM rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Order status workflow."""
    ACTIVE = "active"
    COMPLETED = "completed"


ORDER_ITEM_FIELDS = frozenset({"item_name", "quantity", "price", "total"})


@dataclass
class MenuItem:
    """A known dish, remembered for order suggestions."""
    id: int
    name: str
    price: str
    created_at: datetime


@dataclass
class Order:
    """
    A table order without its line items.

    Attributes:
        order_number: Human readable unique number (e.g. "ORD-007")
        total: Order total as a decimal string, fixed at creation/update
    """
    id: int
    order_number: str
    table_number: int
    customer_name: Optional[str]
    customer_phone: Optional[str]
    status: OrderStatus
    total: str
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == OrderStatus.ACTIVE


@dataclass
class OrderItem:
    """One line of an order. total is price x quantity as a decimal string."""
    id: int
    order_id: int
    item_name: str
    quantity: int
    price: str
    total: str


@dataclass
class OrderWithItems(Order):
    """An order joined with its line items."""
    items: list[OrderItem] = field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order, items: list[OrderItem]) -> "OrderWithItems":
        return cls(
            id=order.id,
            order_number=order.order_number,
            table_number=order.table_number,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
            items=list(items),
        )


def check_order_item_fields(changes: dict) -> None:
    """Reject updates to order item columns that do not exist or are immutable."""
    unknown = set(changes) - ORDER_ITEM_FIELDS
    if unknown:
        raise TypeError(f"Unknown order item fields: {sorted(unknown)}")
