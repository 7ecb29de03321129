"""
Modelos del libro de caja (ledger)

CashMovement: un registro por evento financiero (apertura, venta, gasto,
cierre). Inmutable una vez creado.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4
import enum

from tienda.core.clock import ensure_aware


class MovementType(str, enum.Enum):
    """Tipos de movimiento de caja"""
    OPENING = "opening"   # Apertura de caja (monto base)
    SALE = "sale"         # Venta o abono de separado (ingreso)
    EXPENSE = "expense"   # Gasto (monto negativo)
    CLOSING = "closing"   # Cierre de caja (informativo, monto 0)


class CashMovement(BaseModel):
    """Movimiento del libro de caja; el monto lleva signo"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    store_id: str
    employee_id: str
    type: MovementType
    amount: Decimal
    description: str = ""
    date: datetime
    reference_id: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return ensure_aware(v)
