"""
Pydantic Schemas for Request/Response Validation

JSON bodies use camelCase keys (tableNumber, itemName, orderNumber).
snake_case keys are accepted on input as well. Monetary values are
always decimal strings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime

from orderpad.domain import OrderStatus
from orderpad.utils import order_total, parse_amount

MAX_TABLE_NUMBER = 30
MAX_QUANTITY = 1000


class CamelModel(BaseModel):
    """Base schema serialising field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_price(v: str) -> str:
    parse_amount(v)
    return v.strip()


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItemCreate(CamelModel):
    """Single item in an order."""
    item_name: str = Field(..., min_length=1, max_length=200, examples=["Paneer Tikka"])
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY, examples=[2])
    price: str = Field(..., min_length=1, examples=["180.00"])

    @field_validator("item_name")
    @classmethod
    def validate_item_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return _check_price(v)


class OrderCreate(CamelModel):
    """Request schema for creating or replacing an order."""
    table_number: int = Field(..., ge=1, le=MAX_TABLE_NUMBER, examples=[4])
    customer_name: Optional[str] = Field(None, max_length=100, examples=["Asha"])
    customer_phone: Optional[str] = Field(None, max_length=20, examples=["9876543210"])
    items: List[OrderItemCreate] = Field(..., min_length=1)

    @field_validator("customer_name", "customer_phone")
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("items")
    @classmethod
    def validate_order_total(cls, v: List[OrderItemCreate]) -> List[OrderItemCreate]:
        order_total([(item.price, item.quantity) for item in v])
        return v


class MenuItemCreate(CamelModel):
    """Request schema for remembering a menu item."""
    name: str = Field(..., min_length=1, max_length=200, examples=["Masala Dosa"])
    price: str = Field(..., min_length=1, examples=["90.00"])

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return _check_price(v)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class MenuItemResponse(CamelModel):
    id: int
    name: str
    price: str
    created_at: datetime


class OrderItemResponse(CamelModel):
    id: int
    order_id: int
    item_name: str
    quantity: int
    price: str
    total: str


class OrderResponse(CamelModel):
    """Response schema for a single order with its items."""
    id: int
    order_number: str
    table_number: int
    customer_name: Optional[str]
    customer_phone: Optional[str]
    status: OrderStatus
    total: str
    created_at: datetime
    items: List[OrderItemResponse]


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    message: str
    errors: Optional[List[FieldError]] = None
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    storage: str
    storage_status: str
    timestamp: datetime
