from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import List, Optional
from datetime import datetime

from tienda.modules.expenses.models import Expense


class ExpenseCreate(BaseModel):
    """Esquema para registrar un gasto pagado desde la caja"""
    employee_id: str = Field(..., min_length=1, description="Empleado que registra el gasto")
    amount: Decimal = Field(..., gt=0, description="Monto del gasto (positivo)")
    description: str = Field(..., min_length=1, max_length=500, description="Descripción")
    category: Optional[str] = Field(None, max_length=100, description="Categoría del gasto")
    date: Optional[datetime] = Field(None, description="Fecha del gasto (ahora si se omite)")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('La descripción no puede estar vacía')
        return cleaned


class ExpenseList(BaseModel):
    expenses: List[Expense] = Field(description="Lista de gastos")
    total_amount: Decimal = Field(description="Suma de los gastos filtrados")
    total: int = Field(description="Total de gastos")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")


class ExpenseCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Nombre de la categoría")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El nombre no puede estar vacío')
        return cleaned
