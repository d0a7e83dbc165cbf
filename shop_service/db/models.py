# shop_service/db/models.py
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Enum, DateTime, Numeric, JSON, Text
from sqlalchemy.orm import relationship

from shop_service.db.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enum для ролей пользователя
class RoleEnum(str, PyEnum):
    user = "user"
    admin = "admin"
    seller = "seller"


class SexEnum(str, PyEnum):
    male = "male"
    female = "female"
    others = "others"


class OrderStatus(str, PyEnum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, PyEnum):
    NOT_PAID = "Not Paid"
    PAID = "Paid"
    REFUNDED = "Refunded"


# Модель пользователя
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    sex = Column(Enum(SexEnum), nullable=False)
    role = Column(Enum(RoleEnum), default=RoleEnum.user, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    profile_photo = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    # текущий адрес пользователя
    address_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    address = relationship(
        "Address",
        primaryjoin="foreign(User.address_id) == Address.id",
        viewonly=True,
        uselist=False,
    )
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan",
                             foreign_keys="Address.user_id")
    orders = relationship("Order", back_populates="user")


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    street_address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=True)
    postal_code = Column(String, nullable=False)
    country = Column(String, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="addresses", foreign_keys=[user_id])


class Billing(Base):
    __tablename__ = "billings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    street_address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=True)
    postal_code = Column(String, nullable=False)
    country = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=True)
    parent_category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Связь с товарами
    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    brand = Column(String, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    weight = Column(Numeric(10, 3), nullable=True)
    shipping_class = Column(String, nullable=True)
    meta_title = Column(String, nullable=True)
    meta_description = Column(String, nullable=True)
    seo_url = Column(String, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    # Связи
    category = relationship("Category", back_populates="products")
    images = relationship("ProductImage", back_populates="product", cascade="all, delete-orphan",
                          order_by="ProductImage.created_at.desc()")
    videos = relationship("ProductVideo", back_populates="product", cascade="all, delete-orphan",
                          order_by="ProductVideo.created_at.desc()")
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan")

    @property
    def product_image(self):
        """Newest primary image, else newest image. Needs `images` loaded."""
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    @property
    def product_video(self):
        return self.videos[0] if self.videos else None


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Связь с товаром
    product = relationship("Product", back_populates="images")


class ProductVideo(Base):
    __tablename__ = "product_videos"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    video_url = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    product = relationship("Product", back_populates="videos")


class Cart(Base):
    __tablename__ = "carts"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan")


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=new_id)
    cart_id = Column(String(36), ForeignKey("carts.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    cart = relationship("Cart", back_populates="items")


# Модель заказов
class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    order_status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    payment_status = Column(String, nullable=False, default=PaymentStatus.NOT_PAID.value)
    shipping_address = Column(String, nullable=True)
    # упорядоченный список id позиций заказа
    order_item = Column(JSON, nullable=False, default=list)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="orders")


# Модель элементов в заказе
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    product = relationship("Product")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    payment_method = Column(String, nullable=True)
    transaction_id = Column(String, unique=True, nullable=False)
    amount = Column(Numeric(12, 2), nullable=True)
    payment_status = Column(String, nullable=True)
    payment_date = Column(DateTime(timezone=True), default=utcnow)


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False, default=0)
    review_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    product = relationship("Product", back_populates="reviews")
