from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional

from tienda.modules.products.models import Product


class ProductCreate(BaseModel):
    """Schema para crear producto en una tienda"""
    name: str = Field(..., min_length=1, max_length=200)
    sku: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    price: Decimal = Field(..., ge=0)
    cost: Decimal = Field(default=Decimal("0"), ge=0)
    stock: int = Field(default=0, description="Unidades disponibles")
    min_stock: int = Field(default=0, ge=0, description="Umbral de bajo stock")
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    """Schema para actualización parcial de producto"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = None
    min_stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None


class ProductList(BaseModel):
    products: List[Product]
    total_count: int
