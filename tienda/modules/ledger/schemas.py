"""
Esquemas Pydantic para movimientos de caja
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Any, Dict, List, Optional
from datetime import datetime

from tienda.modules.ledger.models import CashMovement, MovementType


class CashMovementCreate(BaseModel):
    """Esquema para registrar un movimiento manual de caja"""
    employee_id: str = Field(..., min_length=1, description="Empleado que registra el movimiento")
    type: MovementType = Field(..., description="Tipo de movimiento")
    amount: Decimal = Field(..., ge=0, description="Monto (siempre positivo; los gastos se registran con signo negativo)")
    description: str = Field(default="", max_length=500, description="Descripción")
    reference_id: Optional[str] = Field(None, max_length=100, description="Referencia opcional (venta, gasto, caja)")
    date: Optional[datetime] = Field(None, description="Fecha del movimiento (ahora si se omite)")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        return v.strip()


class CashMovementList(BaseModel):
    """Esquema para lista de movimientos de caja"""
    movements: List[CashMovement] = Field(description="Lista de movimientos")
    summary: Dict[str, Any] = Field(description="Resumen de movimientos")
    total: int = Field(description="Total de movimientos")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")
