"""
Relational Storage Implementation

Persists menu items, orders and order items through SQLAlchemy's async
engine. Used in staging and production (ENV_MODE=staging/production) or
whenever STORAGE_BACKEND=database.

Behavior:
    - One session per storage call, committed before returning
    - Order numbers derive from the current time in milliseconds
      (ORD-483920), stepping forward on collision
    - Monetary columns are NUMERIC(10, 2) and come back as "0.00" strings
    - Every SQLAlchemyError is logged and re-raised as StorageError
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Callable, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from orderpad.database import create_session_maker, init_db
from orderpad.domain import (
    MenuItem,
    Order,
    OrderItem,
    OrderStatus,
    OrderWithItems,
    check_order_item_fields,
)
from orderpad.errors import StorageError
from orderpad.models import MenuItemModel, OrderModel, OrderItemModel
from orderpad.storage.base import BaseStorage

logger = logging.getLogger(__name__)

ORDER_NUMBER_SPACE = 1_000_000
MONEY_FIELDS = ("price", "total")


def _money(value) -> str:
    return f"{Decimal(value):.2f}"


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_menu_item(row: MenuItemModel) -> MenuItem:
    return MenuItem(
        id=row.id,
        name=row.name,
        price=_money(row.price),
        created_at=_aware(row.created_at),
    )


def _to_order(row: OrderModel) -> Order:
    return Order(
        id=row.id,
        order_number=row.order_number,
        table_number=row.table_number,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        status=OrderStatus(row.status),
        total=_money(row.total),
        created_at=_aware(row.created_at),
    )


def _to_order_item(row: OrderItemModel) -> OrderItem:
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        item_name=row.item_name,
        quantity=row.quantity,
        price=_money(row.price),
        total=_money(row.total),
    )


class DatabaseStorage(BaseStorage):
    """
    SQLAlchemy-backed order store.

    Attributes:
        engine: Async engine owning the connection pool
        order_number_prefix: Prefix of generated order numbers
        create_tables: Run CREATE TABLE for missing tables at startup
        clock: Seconds since the epoch, source of order number suffixes

    Example:
        >>> storage = DatabaseStorage(create_engine(settings))
        >>> await storage.startup()
        >>> await storage.list_active_orders()
        []
    """

    def __init__(
        self,
        engine: AsyncEngine,
        order_number_prefix: str = "ORD",
        create_tables: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.engine = engine
        self.order_number_prefix = order_number_prefix
        self.create_tables = create_tables
        self.clock = clock
        self._session_maker = create_session_maker(engine)

        logger.info(
            f"DatabaseStorage initialized "
            f"(dialect={engine.dialect.name}, prefix={order_number_prefix})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "database"

    async def startup(self) -> None:
        if self.create_tables:
            try:
                await init_db(self.engine)
            except SQLAlchemyError as e:
                logger.exception("Database: Failed to create tables")
                raise StorageError("Failed to initialize database", original=e) from e

    async def shutdown(self) -> None:
        await self.engine.dispose()
        logger.info("Database: Connection pool released")

    async def health_check(self) -> bool:
        try:
            async with self._session_maker() as session:
                await session.execute(select(func.now()))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        """Open a session and translate driver errors into StorageError."""
        async with self._session_maker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.exception(f"Database: Failed to {action}")
                raise StorageError(f"Failed to {action}", original=e) from e

    async def _items_for(self, session: AsyncSession, order_ids: list[int]) -> dict[int, list[OrderItem]]:
        grouped: dict[int, list[OrderItem]] = {order_id: [] for order_id in order_ids}
        if not order_ids:
            return grouped

        result = await session.execute(
            select(OrderItemModel)
            .where(OrderItemModel.order_id.in_(order_ids))
            .order_by(OrderItemModel.id)
        )
        for row in result.scalars():
            grouped[row.order_id].append(_to_order_item(row))
        return grouped

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    async def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        async with self._session("fetch menu item") as session:
            row = await session.get(MenuItemModel, item_id)
            return _to_menu_item(row) if row else None

    async def get_menu_item_by_name(self, name: str) -> Optional[MenuItem]:
        async with self._session("fetch menu item") as session:
            result = await session.execute(
                select(MenuItemModel).where(func.lower(MenuItemModel.name) == name.lower())
            )
            row = result.scalars().first()
            return _to_menu_item(row) if row else None

    async def list_menu_items(self) -> list[MenuItem]:
        async with self._session("fetch menu items") as session:
            result = await session.execute(
                select(MenuItemModel).order_by(
                    MenuItemModel.created_at.desc(), MenuItemModel.id.desc()
                )
            )
            return [_to_menu_item(row) for row in result.scalars()]

    async def create_menu_item(self, name: str, price: str) -> MenuItem:
        async with self._session("create menu item") as session:
            row = MenuItemModel(name=name, price=Decimal(price))
            session.add(row)
            await session.commit()
            await session.refresh(row)

            logger.debug(f"Database: Created menu item #{row.id} '{name}' at {price}")
            return _to_menu_item(row)

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def get_order(self, order_id: int) -> Optional[Order]:
        async with self._session("fetch order") as session:
            row = await session.get(OrderModel, order_id)
            return _to_order(row) if row else None

    async def get_order_by_number(self, order_number: str) -> Optional[OrderWithItems]:
        async with self._session("fetch order") as session:
            result = await session.execute(
                select(OrderModel).where(OrderModel.order_number == order_number)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None

            items = await self._items_for(session, [row.id])
            return OrderWithItems.from_order(_to_order(row), items[row.id])

    async def list_active_orders(self) -> list[OrderWithItems]:
        async with self._session("fetch active orders") as session:
            result = await session.execute(
                select(OrderModel)
                .where(OrderModel.status == OrderStatus.ACTIVE)
                .order_by(OrderModel.created_at.asc(), OrderModel.id.asc())
            )
            rows = result.scalars().all()

            items = await self._items_for(session, [row.id for row in rows])
            return [OrderWithItems.from_order(_to_order(row), items[row.id]) for row in rows]

    async def create_order(
        self,
        order_number: str,
        table_number: int,
        total: str,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        status: OrderStatus = OrderStatus.ACTIVE,
    ) -> Order:
        async with self._session("create order") as session:
            row = OrderModel(
                order_number=order_number,
                table_number=table_number,
                customer_name=customer_name,
                customer_phone=customer_phone,
                status=OrderStatus(status),
                total=Decimal(total),
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)

            logger.debug(f"Database: Created order #{row.id} ({order_number})")
            return _to_order(row)

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        async with self._session("update order status") as session:
            row = await session.get(OrderModel, order_id)
            if row is None:
                return None

            row.status = OrderStatus(status)
            await session.commit()
            await session.refresh(row)
            return _to_order(row)

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
        async with self._session("update order") as session:
            row = await session.get(OrderModel, order_id)
            if row is None:
                return None

            row.table_number = table_number
            row.customer_name = customer_name
            row.customer_phone = customer_phone
            row.total = Decimal(total)
            row.status = OrderStatus(status)
            await session.commit()
            await session.refresh(row)
            return _to_order(row)

    async def generate_order_number(self) -> str:
        suffix = int(self.clock() * 1000) % ORDER_NUMBER_SPACE

        async with self._session("generate order number") as session:
            for _ in range(ORDER_NUMBER_SPACE):
                candidate = f"{self.order_number_prefix}-{suffix:06d}"
                result = await session.execute(
                    select(OrderModel.id).where(OrderModel.order_number == candidate)
                )
                if result.first() is None:
                    return candidate
                suffix = (suffix + 1) % ORDER_NUMBER_SPACE

        raise StorageError("Order number space exhausted")

    # ==========================================================================
    # ORDER ITEMS
    # ==========================================================================

    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        async with self._session("fetch order items") as session:
            items = await self._items_for(session, [order_id])
            return items[order_id]

    async def create_order_item(
        self,
        order_id: int,
        item_name: str,
        quantity: int,
        price: str,
        total: str,
    ) -> OrderItem:
        async with self._session("create order item") as session:
            row = OrderItemModel(
                order_id=order_id,
                item_name=item_name,
                quantity=quantity,
                price=Decimal(price),
                total=Decimal(total),
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _to_order_item(row)

    async def update_order_item(self, item_id: int, **changes) -> Optional[OrderItem]:
        check_order_item_fields(changes)

        async with self._session("update order item") as session:
            row = await session.get(OrderItemModel, item_id)
            if row is None:
                return None

            for name, value in changes.items():
                setattr(row, name, Decimal(value) if name in MONEY_FIELDS else value)
            await session.commit()
            await session.refresh(row)
            return _to_order_item(row)

    async def delete_order_item(self, item_id: int) -> bool:
        async with self._session("delete order item") as session:
            row = await session.get(OrderItemModel, item_id)
            if row is None:
                return False

            await session.delete(row)
            await session.commit()
            return True
