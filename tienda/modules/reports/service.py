"""
Reports Service

Aggregates computed on demand from the collections and the cash ledger.
Nothing is cached: every call recomputes from the current state.

Revenue comes from the ledger (`sale` movements), so layaway payments
count as revenue when they are received. Expenses come from the expense
collection.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from tienda.core.clock import ensure_aware, same_calendar_day
from tienda.core.data import PosDataStore
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.products.models import Product
from tienda.modules.registers.models import CashRegisterStatus
from tienda.modules.reports.schemas import (
    DashboardOut, RegisterSummaryOut, RegisterSummaryRow, SalesByPeriodOut
)


class ReportService:
    """Service for store-level financial aggregates"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def _income_movements(self, store_id: str) -> List[CashMovement]:
        return self.data.ledger.filter(store_id=store_id, type=MovementType.SALE)

    def _today_income(self, store_id: str) -> List[CashMovement]:
        now = self.data.clock.now()
        return [m for m in self._income_movements(store_id) if same_calendar_day(m.date, now)]

    def today_revenue(self, store_id: str) -> Decimal:
        """Ingresos del día calendario actual (no últimas 24 horas)"""
        return sum((m.amount for m in self._today_income(store_id)), Decimal("0"))

    def today_income_count(self, store_id: str) -> int:
        return len(self._today_income(store_id))

    def total_revenue(self, store_id: str) -> Decimal:
        return sum((m.amount for m in self._income_movements(store_id)), Decimal("0"))

    def total_expenses(self, store_id: str) -> Decimal:
        return sum(
            (e.amount for e in self.data.expenses if e.store_id == store_id),
            Decimal("0")
        )

    def net_profit(self, store_id: str) -> Decimal:
        return self.total_revenue(store_id) - self.total_expenses(store_id)

    def low_stock_products(self, store_id: str) -> List[Product]:
        return [
            p for p in self.data.products.values()
            if p.store_id == store_id and p.is_low_stock
        ]

    def dashboard(self, store_id: str) -> DashboardOut:
        income = self._income_movements(store_id)
        low_stock = self.low_stock_products(store_id)
        total_revenue = self.total_revenue(store_id)
        total_expenses = self.total_expenses(store_id)

        return DashboardOut(
            store_id=store_id,
            today_revenue=self.today_revenue(store_id),
            today_income_count=self.today_income_count(store_id),
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_profit=total_revenue - total_expenses,
            products_count=sum(1 for p in self.data.products.values() if p.store_id == store_id),
            low_stock_count=len(low_stock),
            low_stock_products=low_stock,
            recent_income=list(reversed(income[-5:])),
            as_of=self.data.clock.now()
        )

    def sales_by_period(
        self,
        store_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        search: Optional[str] = None
    ) -> SalesByPeriodOut:
        """
        Totales de ventas filtradas por año, mes (1-12) y búsqueda por
        número de factura o id. Las fechas se evalúan en la zona de la tienda.
        """
        if month is not None and not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")

        tz = self.data.clock.now().tzinfo
        term = search.strip().lower() if search else ""

        sales = []
        for sale in self.data.sales:
            if sale.store_id != store_id:
                continue
            local = ensure_aware(sale.date).astimezone(tz)
            if year is not None and local.year != year:
                continue
            if month is not None and local.month != month:
                continue
            if term and term not in sale.invoice_number.lower() and term not in sale.id.lower():
                continue
            sales.append(sale)

        total_revenue = sum((s.total for s in sales), Decimal("0"))
        average_ticket = Decimal("0")
        if sales:
            average_ticket = (total_revenue / len(sales)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        return SalesByPeriodOut(
            store_id=store_id,
            year=year,
            month=month,
            search=search,
            total_sales=len(sales),
            total_revenue=total_revenue,
            total_items=sum(s.items_count for s in sales),
            average_ticket=average_ticket
        )

    def register_summary(
        self,
        store_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> RegisterSummaryOut:
        """Sesiones de caja abiertas dentro de [start, end], más antigua primero"""
        start = ensure_aware(start) if start else None
        end = ensure_aware(end) if end else None

        registers = [
            r for r in self.data.cash_registers.values()
            if r.store_id == store_id
            and (start is None or r.opened_at >= start)
            and (end is None or r.opened_at <= end)
        ]
        registers.sort(key=lambda r: r.opened_at)

        closed = [r for r in registers if r.status == CashRegisterStatus.CLOSED]
        differences = [r.difference for r in closed if r.difference is not None]

        return RegisterSummaryOut(
            store_id=store_id,
            start=start,
            end=end,
            open_count=len(registers) - len(closed),
            closed_count=len(closed),
            total_opening=sum((r.opening_amount for r in registers), Decimal("0")),
            total_expected=sum((r.expected_amount or Decimal("0") for r in closed), Decimal("0")),
            total_closing=sum((r.closing_amount or Decimal("0") for r in closed), Decimal("0")),
            total_difference=sum(differences, Decimal("0")),
            total_surplus=sum((d for d in differences if d > 0), Decimal("0")),
            total_shortage=sum((-d for d in differences if d < 0), Decimal("0")),
            registers=[
                RegisterSummaryRow(
                    register_id=r.id,
                    employee_id=r.employee_id,
                    status=r.status,
                    opened_at=r.opened_at,
                    closed_at=r.closed_at,
                    opening_amount=r.opening_amount,
                    expected_amount=r.expected_amount,
                    closing_amount=r.closing_amount,
                    difference=r.difference
                )
                for r in registers
            ]
        )

    def register_summary_rows(self, summary: RegisterSummaryOut) -> List[Dict[str, Any]]:
        return [row.model_dump() for row in summary.registers]
