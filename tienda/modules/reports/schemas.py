"""
Schemas for Reports module

Response models for the dashboard, revenue figures, sales-by-period and
cash register summary reports.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from tienda.modules.ledger.models import CashMovement
from tienda.modules.products.models import Product
from tienda.modules.registers.models import CashRegisterStatus


class RevenueOut(BaseModel):
    store_id: str
    amount: Decimal = Field(description="Suma de movimientos de venta (incluye abonos de separados)")
    formatted: str = Field(description="Monto en formato COP")
    as_of: datetime


class DashboardOut(BaseModel):
    """Indicadores del tablero principal de la tienda"""
    store_id: str
    today_revenue: Decimal
    today_income_count: int = Field(description="Movimientos de ingreso de hoy (ventas + abonos)")
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    products_count: int
    low_stock_count: int
    low_stock_products: List[Product]
    recent_income: List[CashMovement] = Field(description="Últimos 5 ingresos, más reciente primero")
    as_of: datetime


class SalesByPeriodOut(BaseModel):
    store_id: str
    year: Optional[int] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    search: Optional[str] = None
    total_sales: int
    total_revenue: Decimal
    total_items: int
    average_ticket: Decimal


class RegisterSummaryRow(BaseModel):
    register_id: str
    employee_id: str
    status: CashRegisterStatus
    opened_at: datetime
    closed_at: Optional[datetime] = None
    opening_amount: Decimal
    expected_amount: Optional[Decimal] = None
    closing_amount: Optional[Decimal] = None
    difference: Optional[Decimal] = None


class RegisterSummaryOut(BaseModel):
    """Resumen de sesiones de caja en un rango de fechas"""
    store_id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    open_count: int
    closed_count: int
    total_opening: Decimal
    total_expected: Decimal
    total_closing: Decimal
    total_difference: Decimal
    total_surplus: Decimal
    total_shortage: Decimal
    registers: List[RegisterSummaryRow]
