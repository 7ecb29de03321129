"""
Reports Router

Dashboard, revenue figures, sales by period and cash register summaries.
All figures are recomputed on each request.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query

from tienda.common.csv_export import create_csv_response
from tienda.common.formatting import format_currency
from tienda.dependencies.dataDependencies import data_store_dependency
from tienda.dependencies.storeDependencies import StoreId
from tienda.modules.reports.schemas import (
    DashboardOut, RegisterSummaryOut, RevenueOut, SalesByPeriodOut
)
from tienda.modules.reports.service import ReportService

reports_router = APIRouter(prefix="/reports", tags=["Reports"])

REGISTER_CSV_HEADERS = {
    "register_id": "Caja",
    "employee_id": "Empleado",
    "status": "Estado",
    "opened_at": "Apertura",
    "closed_at": "Cierre",
    "opening_amount": "Monto apertura",
    "expected_amount": "Esperado",
    "closing_amount": "Contado",
    "difference": "Diferencia"
}


@reports_router.get("/dashboard", response_model=DashboardOut)
async def get_dashboard(store_id: StoreId, data: data_store_dependency):
    """
    Indicadores del tablero.

    - Ingresos de hoy y totales (ventas + abonos de separados)
    - Gastos totales y utilidad neta
    - Productos con bajo stock
    """
    return ReportService(data).dashboard(store_id)


@reports_router.get("/revenue/today", response_model=RevenueOut)
async def get_today_revenue(store_id: StoreId, data: data_store_dependency):
    amount = ReportService(data).today_revenue(store_id)
    return RevenueOut(store_id=store_id, amount=amount, formatted=format_currency(amount), as_of=data.clock.now())


@reports_router.get("/revenue/total", response_model=RevenueOut)
async def get_total_revenue(store_id: StoreId, data: data_store_dependency):
    amount = ReportService(data).total_revenue(store_id)
    return RevenueOut(store_id=store_id, amount=amount, formatted=format_currency(amount), as_of=data.clock.now())


@reports_router.get("/sales", response_model=SalesByPeriodOut)
async def get_sales_by_period(
    store_id: StoreId,
    data: data_store_dependency,
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Año"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Mes (1-12)"),
    search: Optional[str] = Query(None, max_length=100, description="Buscar por número de factura o ID")
):
    """Totales de ventas por periodo: cantidad, ingresos, unidades y ticket promedio"""
    return ReportService(data).sales_by_period(store_id, year=year, month=month, search=search)


@reports_router.get("/cash-registers", response_model=RegisterSummaryOut)
async def get_cash_register_summary(
    store_id: StoreId,
    data: data_store_dependency,
    start: Optional[datetime] = Query(None, description="Apertura desde (inclusive)"),
    end: Optional[datetime] = Query(None, description="Apertura hasta (inclusive)")
):
    """Resumen de sesiones de caja con totales de diferencia (sobrantes y faltantes)"""
    return ReportService(data).register_summary(store_id, start=start, end=end)


@reports_router.get("/cash-registers/export")
async def export_cash_register_summary(
    store_id: StoreId,
    data: data_store_dependency,
    start: Optional[datetime] = Query(None, description="Apertura desde (inclusive)"),
    end: Optional[datetime] = Query(None, description="Apertura hasta (inclusive)")
):
    """Exportar resumen de cajas a CSV"""
    service = ReportService(data)
    summary = service.register_summary(store_id, start=start, end=end)
    return create_csv_response(
        service.register_summary_rows(summary),
        f"resumen_cajas_{store_id}.csv",
        REGISTER_CSV_HEADERS
    )
