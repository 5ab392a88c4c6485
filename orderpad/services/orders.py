"""
Order Service

Request handling for the order lifecycle. Validated requests come in from
the HTTP layer; this service computes totals, orchestrates the multi-step
writes against the configured store and enforces the status policy.

Lifecycle:
    create   → order (active) + items + new menu items
    update   → order fields + total rewritten, items replaced wholesale
    complete → active → completed (idempotent)

Multi-step writes are not transactional: if a later step fails the
earlier writes stay in place.
"""

import logging
from datetime import datetime
from typing import Optional

from orderpad.core.config import Settings
from orderpad.domain import MenuItem, OrderItem, OrderStatus, OrderWithItems
from orderpad.errors import OrderNotFoundError, OrderStateError
from orderpad.schemas import OrderCreate, OrderItemCreate
from orderpad.services.tickets import TicketRenderer
from orderpad.storage.base import BaseStorage
from orderpad.utils import format_amount, line_total, order_total, parse_amount

logger = logging.getLogger(__name__)


def calculate_order_total(items: list[OrderItemCreate]) -> str:
    """Order total as a two-decimal string: the sum of the rounded line totals."""
    return format_amount(order_total([(item.price, item.quantity) for item in items]))


class OrderService:
    """
    Order lifecycle operations on top of a BaseStorage.

    Attributes:
        storage: The configured order store
        settings: Application settings (reopen policy, ticket branding)

    Example:
        >>> service = OrderService(MemoryStorage(), settings)
        >>> order = await service.create_order(OrderCreate(table_number=4, items=[...]))
        >>> order.order_number
        'ORD-001'
    """

    def __init__(self, storage: BaseStorage, settings: Settings):
        self.storage = storage
        self.settings = settings
        self.tickets = TicketRenderer(
            restaurant_name=settings.restaurant_name,
            currency_symbol=settings.currency_symbol,
        )

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    async def list_menu_items(self) -> list[MenuItem]:
        return await self.storage.list_menu_items()

    async def create_menu_item(self, name: str, price: str) -> tuple[MenuItem, bool]:
        """
        Remember a menu item unless one with the same name exists.

        The stored price of an existing item is never changed.

        Returns:
            (menu item, created) where created is False for an existing item
        """
        existing = await self.storage.get_menu_item_by_name(name)
        if existing:
            logger.debug(f"Menu item '{name}' already known as #{existing.id}")
            return existing, False

        item = await self.storage.create_menu_item(name, format_amount(parse_amount(price)))
        logger.info(f"Menu item #{item.id} '{item.name}' added at {item.price}")
        return item, True

    async def _remember_menu_items(self, items: list[OrderItemCreate]) -> None:
        # First write wins: later orders never change a known item's price
        seen: set[str] = set()
        for item in items:
            key = item.item_name.lower()
            if key in seen:
                continue
            seen.add(key)
            await self.create_menu_item(item.item_name, item.price)

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def list_active_orders(self) -> list[OrderWithItems]:
        return await self.storage.list_active_orders()

    async def get_order(self, order_number: str) -> OrderWithItems:
        order = await self.storage.get_order_by_number(order_number)
        if order is None:
            raise OrderNotFoundError(order_number)
        return order

    async def _create_items(self, order_id: int, items: list[OrderItemCreate]) -> list[OrderItem]:
        created = []
        for item in items:
            created.append(
                await self.storage.create_order_item(
                    order_id=order_id,
                    item_name=item.item_name,
                    quantity=item.quantity,
                    price=format_amount(parse_amount(item.price)),
                    total=format_amount(line_total(item.price, item.quantity)),
                )
            )
        return created

    async def create_order(self, data: OrderCreate) -> OrderWithItems:
        """
        Create an active order with its items.

        Item names not seen before are remembered as menu items at the
        submitted price.
        """
        total = calculate_order_total(data.items)
        order_number = await self.storage.generate_order_number()

        order = await self.storage.create_order(
            order_number=order_number,
            table_number=data.table_number,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            status=OrderStatus.ACTIVE,
            total=total,
        )
        items = await self._create_items(order.id, data.items)
        await self._remember_menu_items(data.items)

        logger.info(
            f"Order {order.order_number} created for table {order.table_number} "
            f"({len(items)} items, total {total})"
        )
        return OrderWithItems.from_order(order, items)

    async def update_order(self, order_number: str, data: OrderCreate) -> OrderWithItems:
        """
        Replace an order's details and items.

        The total is recomputed and the old items are deleted before the
        new ones are written. A completed order is put back to active only
        when ALLOW_REOPEN_COMPLETED is set; otherwise OrderStateError.

        Like create_order, item names not seen before are remembered as
        menu items, so dishes added while editing show up as suggestions.
        """
        existing = await self.get_order(order_number)

        if not existing.is_active and not self.settings.allow_reopen_completed:
            raise OrderStateError(order_number, existing.status.value, "edit")

        total = calculate_order_total(data.items)
        order = await self.storage.update_order(
            existing.id,
            table_number=data.table_number,
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            total=total,
            status=OrderStatus.ACTIVE,
        )
        if order is None:
            raise OrderNotFoundError(order_number)

        for item in existing.items:
            await self.storage.delete_order_item(item.id)
        items = await self._create_items(order.id, data.items)
        await self._remember_menu_items(data.items)

        logger.info(
            f"Order {order_number} updated "
            f"({len(existing.items)} → {len(items)} items, total {existing.total} → {total})"
        )
        return OrderWithItems.from_order(order, items)

    async def complete_order(self, order_number: str) -> OrderWithItems:
        """
        Mark an order completed.

        The returned items are the ones read before the transition.
        Completing an already completed order changes nothing.
        """
        existing = await self.get_order(order_number)

        if existing.status == OrderStatus.COMPLETED:
            logger.info(f"Order {order_number} already completed")
            return existing

        order = await self.storage.update_order_status(existing.id, OrderStatus.COMPLETED)
        if order is None:
            raise OrderNotFoundError(order_number)

        logger.info(f"Order {order_number} completed (total {order.total})")
        return OrderWithItems.from_order(order, existing.items)

    # ==========================================================================
    # TICKETS
    # ==========================================================================

    async def render_kot(self, order_number: str, now: Optional[datetime] = None) -> str:
        return self.tickets.render_kot(await self.get_order(order_number), now=now)

    async def render_bill(self, order_number: str) -> str:
        return self.tickets.render_bill(await self.get_order(order_number))
