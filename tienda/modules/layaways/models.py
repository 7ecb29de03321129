"""
Modelos de separados (layaway)

Un separado reserva mercancía (descuenta stock al crearse) y se paga con
abonos. Cada abono aumenta total_paid; cuando el saldo llega a cero o menos
el separado pasa a COMPLETED.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4
import enum

from tienda.core.clock import ensure_aware
from tienda.modules.sales.models import SaleItem


class LayawayStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class LayawayPayment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    amount: Decimal
    employee_id: str
    date: datetime
    payment_method: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class Layaway(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    store_id: str
    employee_id: str
    customer_id: Optional[str] = None
    items: List[SaleItem] = Field(default_factory=list)
    total: Decimal
    total_paid: Decimal = Decimal("0")
    remaining_balance: Decimal
    status: LayawayStatus = LayawayStatus.ACTIVE
    payments: List[LayawayPayment] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return ensure_aware(v)
