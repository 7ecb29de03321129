"""
Esquemas Pydantic para cajas registradoras

Entrada (apertura/cierre) y salida (sesión, lista, resumen de turno).
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime

from tienda.modules.expenses.schemas import ExpenseCreate
from tienda.modules.registers.models import CashRegister, CashRegisterStatus


class CashRegisterOpen(BaseModel):
    """Esquema para abrir caja registradora"""
    employee_id: str = Field(..., min_length=1, description="Empleado responsable del turno")
    opening_amount: Decimal = Field(..., ge=0, description="Monto base de apertura")
    opening_notes: Optional[str] = Field(None, max_length=500, description="Notas de apertura")


class CashRegisterClose(BaseModel):
    """Esquema para cerrar caja registradora"""
    closing_amount: Decimal = Field(..., ge=0, description="Efectivo contado al cierre")
    closing_notes: Optional[str] = Field(None, max_length=500, description="Notas de cierre")
    expenses_turno: List[ExpenseCreate] = Field(
        default=[], description="Gastos del turno registrados al momento del cierre"
    )


class CashRegisterList(BaseModel):
    """Esquema para lista de cajas registradoras"""
    cash_registers: List[CashRegister] = Field(description="Lista de cajas")
    total: int = Field(description="Total de cajas")
    limit: int = Field(description="Límite aplicado")
    offset: int = Field(description="Offset aplicado")


class ShiftSummary(BaseModel):
    """Arqueo del turno: calculado en vivo si la caja está abierta"""
    register_id: str = Field(description="ID de la caja")
    store_id: str = Field(description="ID de la tienda")
    status: CashRegisterStatus = Field(description="Estado de la caja")
    window_start: datetime = Field(description="Inicio del turno (apertura)")
    window_end: datetime = Field(description="Fin del turno (cierre o ahora)")
    opening_amount: Decimal = Field(description="Monto de apertura")
    sales_count: int = Field(description="Ventas del turno")
    sales_total: Decimal = Field(description="Total de ventas del turno")
    expenses_count: int = Field(description="Gastos del turno")
    expenses_total: Decimal = Field(description="Total de gastos del turno")
    expected_amount: Decimal = Field(description="Efectivo esperado")
    closing_amount: Optional[Decimal] = Field(None, description="Efectivo contado")
    difference: Optional[Decimal] = Field(None, description="Sobrante (+) o faltante (-)")
