import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    Text,
    Index,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .db import Base
from .stock_status import StockStatus, classify_stock, is_low_stock as low_stock_predicate
from .time_utils import local_now


class UserRole(str, enum.Enum):
    admin = "admin"
    kepala_gudang = "kepala_gudang"


class TransactionType(str, enum.Enum):
    stock_in = "in"
    stock_out = "out"
    stock_return = "return"
    cancel = "cancel"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(120))
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.kepala_gudang)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)

    transactions: Mapped[list["Transaction"]] = relationship(back_populates="user")


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    products: Mapped[list["Product"]] = relationship(back_populates="category")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (Index("idx_products_name", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    sku: Mapped[str] = mapped_column(String(64), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)

    category: Mapped[Optional[Category]] = relationship(back_populates="products")
    variations: Mapped[list["Variation"]] = relationship(
        back_populates="product", cascade="all, delete-orphan"
    )


class Variation(Base):
    __tablename__ = "variations"
    __table_args__ = (Index("idx_variations_product", "product_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
    color: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    size: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, default=10)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True)

    product: Mapped[Product] = relationship(back_populates="variations")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="variation")

    @hybrid_property
    def is_low_stock(self):
        return low_stock_predicate(self.stock, self.min_stock)

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.stock, self.min_stock)

    @property
    def label(self) -> str:
        return f"{self.color or ''} {self.size or ''}".strip() or "Default"


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    variation_id: Mapped[int] = mapped_column(ForeignKey("variations.id"))
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, values_callable=_enum_values, name="transactiontype")
    )
    quantity: Mapped[int] = mapped_column(Integer)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, index=True)

    variation: Mapped[Variation] = relationship(back_populates="transactions")
    user: Mapped[User] = relationship(back_populates="transactions")


class SystemSetting(Base):
    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, onupdate=local_now)
