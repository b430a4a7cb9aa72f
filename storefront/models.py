# storefront/models.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .status import INITIAL_STATUS, OrderStatus
from .utils import utcnow

MONEY = Numeric(10, 2, asdecimal=True)


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(80), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="admin", nullable=False)   # superadmin | admin | editor
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    slug = Column(String(140), unique=True, index=True, nullable=False)
    description = Column(Text, default="")
    image_url = Column(String(500), default="")
    display_order = Column(Integer, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    name = Column(String(255), nullable=False)
    slug = Column(String(280), unique=True, index=True, nullable=False)
    sku = Column(String(120), unique=True, nullable=True)
    description = Column(Text, default="")
    price = Column(MONEY, nullable=False)
    compare_at_price = Column(MONEY, nullable=True)
    featured = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    category = relationship("Category", back_populates="products")
    images = relationship(
        "ProductImage", back_populates="product",
        cascade="all, delete-orphan", order_by="ProductImage.display_order",
    )
    options = relationship(
        "ProductOption", back_populates="product",
        cascade="all, delete-orphan", order_by="ProductOption.display_order",
    )


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(500), nullable=False)
    alt_text = Column(String(255), default="")
    display_order = Column(Integer, default=0, nullable=False)

    product = relationship("Product", back_populates="images")


class ProductOption(Base):
    __tablename__ = "product_options"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(120), nullable=False)      # e.g. "Talla", "Kilataje"
    values = Column(JSON, default=list)
    display_order = Column(Integer, default=0, nullable=False)

    product = relationship("Product", back_populates="options")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(30), nullable=False)

    street = Column(String(255), default="")
    colony = Column(String(120), default="")
    city = Column(String(120), default="")
    state = Column(String(120), default="")
    zip_code = Column(String(10), default="")
    address_references = Column(Text, default="")

    created_at = Column(DateTime, default=utcnow, nullable=False)

    orders = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(40), unique=True, index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)

    subtotal = Column(MONEY, default=0, nullable=False)
    shipping_cost = Column(MONEY, default=0, nullable=False)
    discount = Column(MONEY, default=0, nullable=False)
    total = Column(MONEY, default=0, nullable=False)
    payment_method = Column(String(30), default="oxxo", nullable=False)
    payment_reference = Column(String(120), nullable=True)
    notes = Column(Text, default="")

    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, length=30,
             values_callable=lambda e: [m.value for m in e]),
        default=INITIAL_STATUS, nullable=False,
    )
    source = Column(String(30), default="whatsapp", nullable=False)
    whatsapp_message = Column(Text, default="")
    tracking_number = Column(String(120), nullable=True)

    admin_confirmed_by = Column(Integer, ForeignKey("admins.id"), nullable=True)
    intent_confirmed_at = Column(DateTime, nullable=True)
    shipped_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    last_status_changed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")

    __table_args__ = (
        Index("idx_orders_status_created", "status", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String(255), nullable=False)
    product_sku = Column(String(120), nullable=True)
    selected_options = Column(JSON, nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    subtotal = Column(MONEY, nullable=False)

    order = relationship("Order", back_populates="items")


class OrderSequence(Base):
    """Counter row backing order numbers; bumped with a row-locking UPDATE."""

    __tablename__ = "order_sequences"

    name = Column(String(40), primary_key=True)
    last_value = Column(Integer, default=0, nullable=False)
