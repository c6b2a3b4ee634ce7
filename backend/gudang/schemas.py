from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Any
from pydantic import BaseModel, Field, EmailStr, model_validator
from pydantic.alias_generators import to_camel
from .models import UserRole, TransactionType
from .stock_status import StockStatus


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; snake_case is accepted on input too."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_expires_in: int


class LoginRequest(BaseModel):
    username: str
    password: str


class UserBase(CamelModel):
    id: int
    username: str
    email: str
    name: str
    role: UserRole
    created_at: datetime


class UserRegister(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    email: EmailStr
    name: str = Field(min_length=1)


class UserCreate(UserRegister):
    role: UserRole = UserRole.kepala_gudang


class UserUpdate(CamelModel):
    role: Optional[UserRole] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class CategoryBase(CamelModel):
    id: int
    name: str
    description: Optional[str]


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class ProductSummary(CamelModel):
    id: int
    name: str
    description: Optional[str]
    category_id: Optional[int]
    sku: str
    created_at: datetime


class VariationBase(CamelModel):
    id: int
    product_id: int
    color: Optional[str]
    size: Optional[str]
    stock: int
    min_stock: int
    price: Optional[Decimal]
    sku: str
    is_low_stock: bool
    stock_status: StockStatus


class ProductBase(ProductSummary):
    category: Optional[CategoryBase] = None


class ProductDetail(ProductBase):
    variations: List[VariationBase] = []


class ProductCreate(CamelModel):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    category_id: Optional[int] = None
    description: Optional[str] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    description: Optional[str] = None


class VariationWithProduct(VariationBase):
    product: ProductSummary


class VariationCreate(CamelModel):
    product_id: int
    sku: str = Field(min_length=1)
    stock: int = 0
    min_stock: Optional[int] = Field(None, ge=0)
    color: Optional[str] = None
    size: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)


class VariationUpdate(CamelModel):
    product_id: Optional[int] = None
    sku: Optional[str] = Field(None, min_length=1)
    stock: Optional[int] = None
    min_stock: Optional[int] = Field(None, ge=0)
    color: Optional[str] = None
    size: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)


class TransactionBase(CamelModel):
    id: int
    variation_id: int
    type: TransactionType
    quantity: int
    notes: Optional[str]
    user_id: int
    created_at: datetime


class TransactionDetail(TransactionBase):
    variation: VariationWithProduct
    user: UserBase


class TransactionCreate(CamelModel):
    variation_id: int
    type: TransactionType
    quantity: int
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_quantity_sign(self):
        # in/out carry a magnitude; return/cancel arrive already signed
        if self.type in {TransactionType.stock_in, TransactionType.stock_out}:
            if self.quantity < 1:
                raise ValueError("quantity must be at least 1")
        elif self.quantity == 0:
            raise ValueError("quantity must not be zero")
        return self


class DashboardStats(CamelModel):
    total_products: int = 0
    low_stock_count: int = 0
    today_stock_in: int = 0
    today_stock_out: int = 0


class TopProduct(CamelModel):
    product_id: int
    product_name: str
    category: str
    total_sold: int = 0


class StockMovementDay(CamelModel):
    day: str
    stock_in: int = 0
    stock_out: int = 0


class PerformanceAnalysis(CamelModel):
    top_performers: List[Any] = []
    under_performers: List[Any] = []
    insights: List[str] = []
    recommendations: List[str] = []


class RestockRecommendations(CamelModel):
    urgent_items: List[Any] = []
    medium_priority: List[Any] = []
    recommendations: List[str] = []
    total_estimated_cost: float = 0


class SystemSettingsUpdate(CamelModel):
    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = None
    stock_alert_threshold: Optional[int] = Field(None, ge=1)


class SystemSettingsOut(CamelModel):
    openai_api_key: str
    openai_model: str
    stock_alert_threshold: int


class SystemSettingsSaved(BaseModel):
    message: str
    settings: SystemSettingsOut
