"""
Ticket Rendering

Renders printable plain-text documents for an order:
    - KOT (Kitchen Order Ticket): items and quantities for the kitchen
    - Bill: customer receipt with unit prices, line totals and order total

Templates live in orderpad/templates and are rendered with Jinja2.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from orderpad.domain import OrderWithItems
from orderpad.utils import format_currency, time_since

logger = logging.getLogger(__name__)

TICKET_WIDTH = 36


class TicketRenderer:
    """
    Plain-text KOT and bill renderer.

    Example:
        >>> renderer = TicketRenderer("Spice Route", currency_symbol="₹")
        >>> print(renderer.render_bill(order))
    """

    def __init__(
        self,
        restaurant_name: str,
        currency_symbol: str = "₹",
        width: int = TICKET_WIDTH,
    ):
        self.restaurant_name = restaurant_name
        self.currency_symbol = currency_symbol
        self.width = width

        self.env = Environment(
            loader=PackageLoader("orderpad", "templates"),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["currency"] = lambda amount: format_currency(amount, self.currency_symbol)

    def _context(self, order: OrderWithItems) -> dict:
        return {
            "restaurant_name": self.restaurant_name,
            "width": self.width,
            "order": order,
        }

    def render_kot(self, order: OrderWithItems, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)

        logger.debug(f"Rendering KOT for {order.order_number}")
        return self.env.get_template("kot.txt").render(
            **self._context(order),
            placed_at=order.created_at.strftime("%I:%M %p"),
            elapsed=time_since(order.created_at, now),
        )

    def render_bill(self, order: OrderWithItems) -> str:
        logger.debug(f"Rendering bill for {order.order_number}")
        return self.env.get_template("bill.txt").render(
            **self._context(order),
            placed_at=order.created_at.strftime("%d %b %Y, %I:%M %p"),
        )
