"""
                        Services Module

Business logic on top of the configured order store.

Services:
    - orders: order lifecycle (create, edit, complete, menu suggestions)
    - tickets: plain-text KOT and bill rendering
"""

from orderpad.services.orders import OrderService
from orderpad.services.tickets import TicketRenderer

__all__ = ["OrderService", "TicketRenderer"]
