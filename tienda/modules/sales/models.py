"""
Modelos de venta

Una venta es inmutable después de creada; su único efecto colateral es el
descuento de stock en los productos vendidos.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from tienda.core.clock import ensure_aware


class SaleItem(BaseModel):
    """Línea de venta (también usada por los separados)"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str = ""
    quantity: int
    price: Decimal
    total: Decimal


class Sale(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    store_id: str
    employee_id: str
    customer_id: Optional[str] = None
    items: List[SaleItem] = Field(default_factory=list)
    subtotal: Decimal
    discount: Decimal = Decimal("0")
    shipping_cost: Decimal = Decimal("0")
    payment_method: str
    payment_method_discount: Decimal = Decimal("0")  # Porcentaje que cobra el medio de pago
    total: Decimal
    net_total: Decimal
    invoice_number: str
    date: datetime

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)
