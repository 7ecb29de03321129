"""
Modelo de producto

Sólo los campos que necesitan los efectos de inventario (ventas, separados)
y el indicador de bajo stock del dashboard.
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional
from uuid import uuid4


class Product(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    sku: str
    category: Optional[str] = None
    price: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")
    stock: int = 0
    min_stock: int = 0
    store_id: str
    image_url: Optional[str] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock
