"""
In-Memory Storage Implementation

Keeps menu items, orders and order items in per-entity dictionaries keyed
by auto-incrementing integer identifiers. Used in development mode
(ENV_MODE=development) to:
    - Run the complete order flow without a database
    - Back the test-suite with a fast, isolated store

Behavior:
    - Identifiers start at 1 and are never reused
    - Order numbers come from a per-process counter: ORD-001, ORD-002, ...
    - Records are copied in and out, so callers never share state with the store
    - Everything is lost when the process exits
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from orderpad.domain import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    OrderWithItems,
    check_order_item_fields,
)
from orderpad.storage.base import BaseStorage

logger = logging.getLogger(__name__)


class MemoryStorage(BaseStorage):
    """
    Dictionary-backed order store.

    Attributes:
        order_number_prefix: Prefix of generated order numbers

    Example:
        >>> storage = MemoryStorage()
        >>> await storage.generate_order_number()
        'ORD-001'
    """

    def __init__(self, order_number_prefix: str = "ORD"):
        self.order_number_prefix = order_number_prefix

        self._menu_items: dict[int, MenuItem] = {}
        self._orders: dict[int, Order] = {}
        self._order_items: dict[int, OrderItem] = {}

        self._next_menu_item_id = 1
        self._next_order_id = 1
        self._next_order_item_id = 1
        self._order_counter = 1

        logger.info(f"MemoryStorage initialized (prefix={order_number_prefix})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "memory"

    async def health_check(self) -> bool:
        """The in-memory store is always available."""
        return True

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    async def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        item = self._menu_items.get(item_id)
        return replace(item) if item else None

    async def get_menu_item_by_name(self, name: str) -> Optional[MenuItem]:
        wanted = name.lower()
        for item in self._menu_items.values():
            if item.name.lower() == wanted:
                return replace(item)
        return None

    async def list_menu_items(self) -> list[MenuItem]:
        items = sorted(
            self._menu_items.values(),
            key=lambda item: (item.created_at, item.id),
            reverse=True,
        )
        return [replace(item) for item in items]

    async def create_menu_item(self, name: str, price: str) -> MenuItem:
        item = MenuItem(
            id=self._next_menu_item_id,
            name=name,
            price=price,
            created_at=self._now(),
        )
        self._next_menu_item_id += 1
        self._menu_items[item.id] = item

        logger.debug(f"Memory: Created menu item #{item.id} '{name}' at {price}")
        return replace(item)

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def get_order(self, order_id: int) -> Optional[Order]:
        order = self._orders.get(order_id)
        return replace(order) if order else None

    async def get_order_by_number(self, order_number: str) -> Optional[OrderWithItems]:
        for order in self._orders.values():
            if order.order_number == order_number:
                return OrderWithItems.from_order(order, await self.get_order_items(order.id))
        return None

    async def list_active_orders(self) -> list[OrderWithItems]:
        active = sorted(
            (order for order in self._orders.values() if order.status == OrderStatus.ACTIVE),
            key=lambda order: (order.created_at, order.id),
        )
        return [
            OrderWithItems.from_order(order, await self.get_order_items(order.id))
            for order in active
        ]

    async def create_order(
        self,
        order_number: str,
        table_number: int,
        total: str,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        status: OrderStatus = OrderStatus.ACTIVE,
    ) -> Order:
        order = Order(
            id=self._next_order_id,
            order_number=order_number,
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            status=OrderStatus(status),
            total=total,
            created_at=self._now(),
        )
        self._next_order_id += 1
        self._orders[order.id] = order

        logger.debug(f"Memory: Created order #{order.id} ({order_number})")
        return replace(order)

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        order = self._orders.get(order_id)
        if order is None:
            return None

        updated = replace(order, status=OrderStatus(status))
        self._orders[order_id] = updated
        return replace(updated)

    async def update_order(
        self,
        order_id: int,
        *,
        table_number: int,
        customer_name: Optional[str],
        customer_phone: Optional[str],
        total: str,
        status: OrderStatus,
    ) -> Optional[Order]:
        order = self._orders.get(order_id)
        if order is None:
            return None

        updated = replace(
            order,
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            total=total,
            status=OrderStatus(status),
        )
        self._orders[order_id] = updated
        return replace(updated)

    async def generate_order_number(self) -> str:
        number = self._order_counter
        self._order_counter += 1
        return f"{self.order_number_prefix}-{number:03d}"

    # ==========================================================================
    # ORDER ITEMS
    # ==========================================================================

    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        return [
            replace(item)
            for item in self._order_items.values()
            if item.order_id == order_id
        ]

    async def create_order_item(
        self,
        order_id: int,
        item_name: str,
        quantity: int,
        price: str,
        total: str,
    ) -> OrderItem:
        item = OrderItem(
            id=self._next_order_item_id,
            order_id=order_id,
            item_name=item_name,
            quantity=quantity,
            price=price,
            total=total,
        )
        self._next_order_item_id += 1
        self._order_items[item.id] = item
        return replace(item)

    async def update_order_item(self, item_id: int, **changes) -> Optional[OrderItem]:
        check_order_item_fields(changes)

        item = self._order_items.get(item_id)
        if item is None:
            return None

        updated = replace(item, **changes)
        self._order_items[item_id] = updated
        return replace(updated)

    async def delete_order_item(self, item_id: int) -> bool:
        return self._order_items.pop(item_id, None) is not None
