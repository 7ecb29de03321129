"""
Modelo de sesión de caja registradora

Se crea al abrir la caja y se modifica una única vez al cerrarla (arqueo);
nunca se elimina.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4
import enum

from tienda.core.clock import ensure_aware
from tienda.modules.expenses.models import Expense


class CashRegisterStatus(str, enum.Enum):
    """Estados de caja registradora"""
    OPEN = "open"       # Caja abierta
    CLOSED = "closed"   # Caja cerrada


class CashRegister(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    store_id: str
    employee_id: str
    opening_amount: Decimal
    opened_at: datetime
    status: CashRegisterStatus = CashRegisterStatus.OPEN

    # Solo se llenan al cerrar
    closing_amount: Optional[Decimal] = None
    closed_at: Optional[datetime] = None
    expected_amount: Optional[Decimal] = None
    difference: Optional[Decimal] = None
    expenses_turno: Optional[List[Expense]] = None  # Gastos del turno al momento del cierre

    opening_notes: Optional[str] = None
    closing_notes: Optional[str] = None

    @field_validator("opened_at", "closed_at")
    @classmethod
    def validate_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else v

    @property
    def is_open(self) -> bool:
        return self.status == CashRegisterStatus.OPEN
