"""
SQLAlchemy Database Models

Relational layout of the order store:
- menu_items: dishes remembered for suggestions
- orders: one row per table order
- order_items: line items, owned by exactly one order

Identifiers are never reused, also on SQLite (AUTOINCREMENT).
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey, Index
from sqlalchemy.sql import func

from orderpad.database import Base
from orderpad.domain import OrderStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MenuItemModel(Base):
    """
    Menu items learnt from submitted orders.

    Names are unique regardless of case; prices are never updated
    after the first write.
    """
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_menu_items_name_lower", func.lower(name), unique=True),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class OrderModel(Base):
    """
    Main Order table - one row per table order.

    total is fixed when the order is created or edited and is not
    recomputed from order_items afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    table_number = Column(Integer, nullable=False)

    customer_name = Column(String(100), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    status = Column(
        Enum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.ACTIVE,
        nullable=False,
        index=True
    )
    total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<Order {self.order_number} - table {self.table_number} - {self.status.value}>"


class OrderItemModel(Base):
    """Line items of an order. Replaced wholesale when the order is edited."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    item_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<OrderItem #{self.id} - {self.quantity} x {self.item_name}>"
