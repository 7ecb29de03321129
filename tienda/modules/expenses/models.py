from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from tienda.core.clock import ensure_aware


DEFAULT_EXPENSE_CATEGORIES = [
    "Limpieza",
    "Mantenimiento",
    "Marketing",
    "Otros",
    "Seguridad",
    "Servicios",
    "Suministros",
    "Transporte",
]


class Expense(BaseModel):
    """Gasto pagado desde la caja; el monto es siempre positivo"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    store_id: str
    employee_id: str
    amount: Decimal
    description: str
    category: Optional[str] = None
    date: datetime

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return ensure_aware(v)
