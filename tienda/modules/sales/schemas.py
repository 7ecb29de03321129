"""
Esquemas Pydantic para ventas
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import List, Optional
from datetime import datetime

from tienda.modules.sales.models import Sale


class SaleItemCreate(BaseModel):
    product_id: str = Field(..., description="ID del producto")
    product_name: str = Field("", max_length=200, description="Nombre del producto")
    quantity: int = Field(..., gt=0, description="Cantidad vendida")
    price: Decimal = Field(..., ge=0, description="Precio unitario")


class SaleCreate(BaseModel):
    """Esquema para registrar una venta; los totales se calculan en el servicio"""
    employee_id: str = Field(..., min_length=1, description="Empleado que registra la venta")
    customer_id: Optional[str] = Field(None, description="Cliente (vacío = venta rápida)")
    items: List[SaleItemCreate] = Field(..., min_length=1, description="Líneas de venta")
    discount: Decimal = Field(default=Decimal("0"), ge=0, description="Descuento en valor")
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0, description="Costo de envío")
    payment_method: str = Field(..., min_length=1, max_length=50, description="Medio de pago")
    payment_method_discount: Decimal = Field(
        default=Decimal("0"), ge=0, le=100,
        description="Porcentaje que descuenta el medio de pago (comisión)"
    )
    invoice_number: Optional[str] = Field(None, max_length=50, description="Número de factura (automático si se omite)")
    date: Optional[datetime] = Field(None, description="Fecha de la venta (ahora si se omite)")

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El medio de pago no puede estar vacío')
        return cleaned


class SaleList(BaseModel):
    sales: List[Sale] = Field(description="Lista de ventas")
    total: int = Field(description="Total de ventas")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")
