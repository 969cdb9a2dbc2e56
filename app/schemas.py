"""
Pydantic Schemas for Request/Response Validation

JSON bodies use camelCase (``menuItemId``, ``totalAmount``); Python code
uses snake_case attributes. Both spellings are accepted on input.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from app.models import Country, OrderStatus, Role


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Money is Decimal in Python and a plain number in JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Upper bound for one cart or order line, merged quantities included
MAX_LINE_QUANTITY = 99


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Thor"])
    email: EmailStr = Field(..., examples=["thor@company.com"])
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Field(default=Role.MEMBER)
    country: Country = Field(..., examples=["INDIA"])


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Resolved identity. Never includes the password hash."""
    id: int
    name: str
    email: str
    role: Role
    country: Country
    created_at: Optional[datetime] = None


class MessageResponse(CamelModel):
    message: str


class LoginResponse(CamelModel):
    message: str
    user_id: int


class MeResponse(CamelModel):
    user: UserResponse


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


# =============================================================================
# CATALOG
# =============================================================================

class RestaurantResponse(CamelModel):
    id: int
    name: str
    country: Country
    description: Optional[str] = None


class MenuItemResponse(CamelModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str] = None
    price: Money
    category: Optional[str] = None
    is_available: bool


class RestaurantListResponse(CamelModel):
    restaurants: List[RestaurantResponse]


class MenuResponse(CamelModel):
    restaurant: RestaurantResponse
    menu: List[MenuItemResponse]


# =============================================================================
# CART
# =============================================================================

class CartAddRequest(CamelModel):
    menu_item_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_LINE_QUANTITY)


class CartUpdateRequest(CamelModel):
    menu_item_id: int
    # Lower bound is enforced by the cart service so the error names the rule
    quantity: int = Field(..., le=MAX_LINE_QUANTITY)


class CartItemResponse(CamelModel):
    menu_item_id: int
    quantity: int
    menu_item: MenuItemResponse


class CartResponse(CamelModel):
    id: Optional[int] = None
    country: Optional[Country] = None
    items: List[CartItemResponse] = Field(default_factory=list)
    total: Money = Decimal("0.00")


class CartEnvelope(CamelModel):
    message: Optional[str] = None
    cart: CartResponse


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(CamelModel):
    menu_item_id: int
    quantity: Optional[int] = Field(default=None, ge=1, le=MAX_LINE_QUANTITY)


class OrderCreate(CamelModel):
    restaurant_id: Optional[int] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderItemResponse(CamelModel):
    menu_item_id: int
    name: str
    price: Money
    quantity: int


class OrderResponse(CamelModel):
    id: int
    user_id: int
    restaurant_id: int
    items: List[OrderItemResponse]
    total_amount: Money
    country: Country
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderEnvelope(CamelModel):
    message: Optional[str] = None
    order: OrderResponse


class OrderListResponse(CamelModel):
    total: int
    orders: List[OrderResponse]


# =============================================================================
# PAYMENT METHODS
# =============================================================================

class PaymentMethodCreate(CamelModel):
    type: str = Field(..., min_length=1, max_length=50, examples=["CARD"])
    details: dict[str, Any] = Field(..., examples=[{"last4": "4242"}])


class PaymentMethodUpdate(CamelModel):
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    details: Optional[dict[str, Any]] = None


class PaymentMethodResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    type: str
    details: dict[str, Any]
    created_at: Optional[datetime] = None


class PaymentMethodEnvelope(CamelModel):
    message: Optional[str] = None
    method: PaymentMethodResponse


class PaymentMethodListResponse(CamelModel):
    methods: List[PaymentMethodResponse]


# =============================================================================
# SYSTEM
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
