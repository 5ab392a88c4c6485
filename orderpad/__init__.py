"""
                Table Order Desk

Point-of-sale order taking for dine-in restaurants: table orders,
kitchen order tickets, bills and order completion, backed by either
an in-memory store or a relational database.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
