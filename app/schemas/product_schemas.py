# app/schemas/product_schemas.py
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional, List
from typing_extensions import Annotated

from app.schemas.response_schemas import UTCDateTime

NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]


# -----------------------------
# Category Schemas
# -----------------------------
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    vendor_id: int


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    vendor_id: Optional[int] = None


class VendorSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CategoryOut(BaseModel):
    id: int
    name: str
    vendor_id: int
    vendor: Optional[VendorSummary] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class CategoryResponse(BaseModel):
    message: str
    data: CategoryOut


class CategoryListResponse(BaseModel):
    message: str
    total: int
    data: List[CategoryOut]


# -----------------------------
# Product Schemas
# -----------------------------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    price_base: NonNegativeDecimal
    price: NonNegativeDecimal
    stock: Optional[int] = Field(None, ge=0)
    vendor_id: int
    category_ids: List[int] = []
    description: str = ""
    image_url: str = ""


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price_base: Optional[NonNegativeDecimal] = None
    price: Optional[NonNegativeDecimal] = None
    stock: Optional[int] = Field(None, ge=0)
    vendor_id: Optional[int] = None
    category_ids: Optional[List[int]] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class CategorySummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ProductOut(BaseModel):
    id: int
    name: str
    price_base: Decimal
    price: Decimal
    stock: Optional[int] = None
    description: Optional[str] = ""
    image_url: Optional[str] = ""
    vendor_id: Optional[int] = None
    vendor: Optional[VendorSummary] = None
    categories: List[CategorySummary] = []
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    message: str
    data: ProductOut


class ProductListResponse(BaseModel):
    message: str
    total: int
    data: List[ProductOut]
