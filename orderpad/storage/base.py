"""
Order Storage Abstract Base Class

Defines the interface contract for all order storage implementations.
Both MemoryStorage and DatabaseStorage must implement these methods,
so the order service behaves the same regardless of which store is active.

Design Pattern: Strategy Pattern
    - The store is chosen once at startup from configuration
    - The order service only ever talks to BaseStorage
    - Tests run the same contract against both implementations

Contract:
    - Every operation is a coroutine
    - "Not found" is an absent result (None, False or []), never an exception
    - Unexpected backend failures raise StorageError
"""

from abc import ABC, abstractmethod
from typing import Optional

from orderpad.domain import MenuItem, Order, OrderItem, OrderStatus, OrderWithItems


class BaseStorage(ABC):
    """
    Abstract base class for order stores.

    The store owns every entity. Entities refer to each other only by
    integer identifier (an OrderItem knows its order_id, nothing more).

    Example:
        >>> storage = create_storage(settings)
        >>> await storage.startup()
        >>> order = await storage.get_order_by_number("ORD-001")
        >>> if order is None:
        ...     print("not found")
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the storage provider.

        Returns:
            str: Provider name (e.g., "memory", "database")
        """
        pass

    async def startup(self) -> None:
        """Acquire resources. Called once from the application lifespan."""
        return None

    async def shutdown(self) -> None:
        """Release resources. Called once from the application lifespan."""
        return None

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the store is usable.

        Returns:
            bool: True if the store answers queries
        """
        pass

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    @abstractmethod
    async def get_menu_item(self, item_id: int) -> Optional[MenuItem]:
        pass

    @abstractmethod
    async def get_menu_item_by_name(self, name: str) -> Optional[MenuItem]:
        """Find a menu item by name, ignoring case."""
        pass

    @abstractmethod
    async def list_menu_items(self) -> list[MenuItem]:
        """All menu items, newest first."""
        pass

    @abstractmethod
    async def create_menu_item(self, name: str, price: str) -> MenuItem:
        pass

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_order_by_number(self, order_number: str) -> Optional[OrderWithItems]:
        """Look up an order by its order number, joined with its items."""
        pass

    @abstractmethod
    async def list_active_orders(self) -> list[OrderWithItems]:
        """Active orders joined with their items, oldest first."""
        pass

    @abstractmethod
    async def create_order(
        self,
        order_number: str,
        table_number: int,
        total: str,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        status: OrderStatus = OrderStatus.ACTIVE,
    ) -> Order:
        pass

    @abstractmethod
    async def update_order_status(self, order_id: int, status: OrderStatus) -> Optional[Order]:
        pass

    @abstractmethod
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
        """
        Overwrite the editable columns of an order.

        order_number and created_at never change.
        """
        pass

    @abstractmethod
    async def generate_order_number(self) -> str:
        """
        Produce an order number not used by any stored order.

        Numbering schemes differ between implementations and are not
        interchangeable.
        """
        pass

    # ==========================================================================
    # ORDER ITEMS
    # ==========================================================================

    @abstractmethod
    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        """Items of one order in insertion order."""
        pass

    @abstractmethod
    async def create_order_item(
        self,
        order_id: int,
        item_name: str,
        quantity: int,
        price: str,
        total: str,
    ) -> OrderItem:
        pass

    @abstractmethod
    async def update_order_item(self, item_id: int, **changes) -> Optional[OrderItem]:
        """Update some of item_name, quantity, price and total."""
        pass

    @abstractmethod
    async def delete_order_item(self, item_id: int) -> bool:
        """Delete one item. Returns False if it did not exist."""
        pass
