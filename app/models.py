"""
SQLAlchemy Database Models

Users, the restaurant catalog, per-user carts, orders with their
line-item snapshots, and stored payment methods.

Carts and orders are versioned: every UPDATE bumps ``version`` and fails
with StaleDataError if the row changed since it was loaded.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    """User roles, most to least privileged."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"


class Country(str, enum.Enum):
    """Countries partitioning restaurants, orders and managers."""
    INDIA = "INDIA"
    AMERICA = "AMERICA"


class OrderStatus(str, enum.Enum):
    """
    Order status workflow.

    CREATED -> PAID, CREATED -> CANCELLED, PAID -> CANCELLED.
    """
    CREATED = "CREATED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(Enum(Role), nullable=False, default=Role.MEMBER)
    country = Column(Enum(Country), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User #{self.id} - {self.email} - {self.role.value}/{self.country.value}>"


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    country = Column(Enum(Country), nullable=False, index=True)
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name} ({self.country.value})>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    restaurant_id = Column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=True)
    # Advisory only, ordering does not check it
    is_available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class Cart(Base):
    """
    One cart per user. Created on first add, deleted on clear or checkout.

    All lines come from one restaurant, whose country the cart inherits.
    """
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    country = Column(Enum(Country), nullable=False)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CartItem.id",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def restaurant_id(self) -> "int | None":
        """Restaurant every line belongs to, or None while the cart is empty."""
        return self.items[0].menu_item.restaurant_id if self.items else None

    def find_item(self, menu_item_id: int) -> "CartItem | None":
        for item in self.items:
            if item.menu_item_id == menu_item_id:
                return item
        return None

    def touch(self) -> None:
        """Mark the cart row dirty so item changes bump its version."""
        self.updated_at = utcnow()

    def __repr__(self):
        return f"<Cart #{self.id} - user {self.user_id} - {len(self.items)} lines>"


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "menu_item_id", name="uq_cart_item_menu_item"),
        CheckConstraint("quantity >= 1", name="ck_cart_item_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    cart = relationship("Cart", back_populates="items")
    menu_item = relationship("MenuItem", lazy="selectin")


class Order(Base):
    """
    An order and its immutable line-item snapshot.

    ``total_amount`` and ``country`` are fixed at creation; only ``status``
    changes afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    country = Column(Enum(Country), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.CREATED,
        nullable=False,
        index=True
    )
    total_amount = Column(Numeric(10, 2), nullable=False)
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Order #{self.id} - {self.country.value} - {self.status.value} - {self.total_amount}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # Kept for reference only; name and price below are the source of truth
    menu_item_id = Column(Integer, nullable=False)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")


class PaymentMethod(Base):
    """Labeled payment instrument metadata. Nothing is ever charged."""
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(String(50), nullable=False)
    details = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<PaymentMethod #{self.id} - {self.type} - user {self.user_id}>"
