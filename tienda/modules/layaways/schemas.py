"""
Esquemas Pydantic para separados
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime

from tienda.modules.layaways.models import Layaway
from tienda.modules.sales.schemas import SaleItemCreate


class LayawayCreate(BaseModel):
    """Crear separado; el abono inicial (opcional) entra a caja como ingreso"""
    employee_id: str = Field(..., min_length=1, description="Empleado que registra el separado")
    customer_id: Optional[str] = Field(None, description="Cliente que separa")
    items: List[SaleItemCreate] = Field(..., min_length=1, description="Mercancía separada")
    initial_payment: Decimal = Field(default=Decimal("0"), ge=0, description="Abono inicial")
    payment_method: Optional[str] = Field(None, max_length=50, description="Medio de pago del abono inicial")
    notes: Optional[str] = Field(None, max_length=500, description="Notas")


class LayawayPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto del abono")
    employee_id: str = Field(..., min_length=1, description="Empleado que recibe el abono")
    payment_method: Optional[str] = Field(None, max_length=50, description="Medio de pago")
    date: Optional[datetime] = Field(None, description="Fecha del abono (ahora si se omite)")


class LayawayList(BaseModel):
    layaways: List[Layaway] = Field(description="Lista de separados")
    total: int = Field(description="Total de separados")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")
