"""
Tests for the Reports module

Revenue by calendar day, dashboard aggregates, sales by period and
cash register summaries (JSON and CSV).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from tienda.modules.expenses.service import ExpenseService
from tienda.modules.layaways.models import LayawayPayment
from tienda.modules.layaways.schemas import LayawayCreate
from tienda.modules.layaways.service import LayawayService
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.products.models import Product
from tienda.modules.registers.service import CashRegisterService
from tienda.modules.reports.service import ReportService
from tienda.modules.sales.models import SaleItem
from tienda.modules.sales.schemas import SaleItemCreate
from tienda.modules.sales.service import SaleService

BOGOTA = ZoneInfo("America/Bogota")
STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


def income(amount, date, store_id=STORE_ID):
    return CashMovement(
        store_id=store_id, employee_id=EMPLOYEE_ID, type=MovementType.SALE,
        amount=Decimal(amount), date=date
    )


@pytest.fixture
def reports(data_store):
    return ReportService(data_store)


class TestRevenue:

    def test_today_revenue_uses_calendar_day(self, reports, data_store, clock):
        # clock: 2024-03-15 10:00 Bogotá
        data_store.append_movement(income("1000", datetime(2024, 3, 14, 23, 59, tzinfo=BOGOTA)))
        data_store.append_movement(income("2000", datetime(2024, 3, 15, 0, 0, tzinfo=BOGOTA)))
        data_store.append_movement(income("4000", datetime(2024, 3, 15, 9, 59, tzinfo=BOGOTA)))

        assert reports.today_revenue(STORE_ID) == Decimal("6000")
        assert reports.today_income_count(STORE_ID) == 2
        assert reports.total_revenue(STORE_ID) == Decimal("7000")

    def test_today_revenue_converts_to_store_timezone(self, reports, data_store):
        # 03:00 UTC del 15 es 22:00 del 14 en Bogotá
        data_store.append_movement(income("1000", datetime(2024, 3, 15, 3, 0, tzinfo=timezone.utc)))
        data_store.append_movement(income("500", datetime(2024, 3, 15, 6, 0, tzinfo=timezone.utc)))

        assert reports.today_revenue(STORE_ID) == Decimal("500")

    def test_revenue_ignores_other_stores_and_non_sale_movements(self, reports, data_store, clock):
        data_store.append_movement(income("1000", clock.now(), store_id="2"))
        data_store.append_movement(CashMovement(
            store_id=STORE_ID, employee_id=EMPLOYEE_ID, type=MovementType.OPENING,
            amount=Decimal("100000"), date=clock.now()
        ))

        assert reports.today_revenue(STORE_ID) == Decimal("0")
        assert reports.total_revenue(STORE_ID) == Decimal("0")

    def test_layaway_payments_count_as_revenue(self, reports, data_store, clock, sample_product):
        service = LayawayService(data_store)
        layaway = service.create_layaway(
            LayawayCreate(employee_id=EMPLOYEE_ID,
                          items=[SaleItemCreate(product_id="p1", quantity=1, price=Decimal("80000"))]),
            STORE_ID
        )
        service.add_layaway_payment(
            layaway.id, LayawayPayment(amount=Decimal("30000"), employee_id=EMPLOYEE_ID, date=clock.now())
        )

        assert reports.today_revenue(STORE_ID) == Decimal("30000")

    def test_net_profit(self, reports, data_store, sale_factory, expense_factory):
        SaleService(data_store).add_sale(sale_factory(90000))
        ExpenseService(data_store).add_expense(expense_factory(25000))

        assert reports.total_expenses(STORE_ID) == Decimal("25000")
        assert reports.net_profit(STORE_ID) == Decimal("65000")

    def test_reports_are_recomputed_on_each_call(self, reports, data_store, sale_factory):
        assert reports.total_revenue(STORE_ID) == Decimal("0")
        SaleService(data_store).add_sale(sale_factory(1000))
        assert reports.total_revenue(STORE_ID) == Decimal("1000")


class TestDashboard:

    def test_dashboard(self, reports, data_store, clock, sample_product, sale_factory, expense_factory):
        data_store.products["p2"] = Product(id="p2", name="Cable", sku="CB1", stock=1, min_stock=3, store_id=STORE_ID)
        sales = SaleService(data_store)
        for index in range(6):
            clock.advance(minutes=1)
            sales.add_sale(sale_factory(1000 * (index + 1), invoice_number=f"FAC-{index:06d}"))
        ExpenseService(data_store).add_expense(expense_factory(500))

        dashboard = reports.dashboard(STORE_ID)

        assert dashboard.today_revenue == Decimal("21000")
        assert dashboard.today_income_count == 6
        assert dashboard.net_profit == Decimal("20500")
        assert dashboard.products_count == 2
        assert [p.id for p in dashboard.low_stock_products] == ["p2"]
        assert [m.amount for m in dashboard.recent_income] == [
            Decimal("6000"), Decimal("5000"), Decimal("4000"), Decimal("3000"), Decimal("2000")
        ]


class TestSalesByPeriod:

    def test_filters_by_year_month_and_search(self, reports, data_store, sale_factory):
        items = [SaleItem(product_id="p1", quantity=3, price=Decimal("1000"), total=Decimal("3000"))]
        sales = SaleService(data_store)
        sales.add_sale(sale_factory(3000, invoice_number="FAC-000001", items=items,
                                    date=datetime(2024, 3, 1, 9, 0, tzinfo=BOGOTA)))
        sales.add_sale(sale_factory(1000, invoice_number="FAC-000002",
                                    date=datetime(2024, 3, 20, 9, 0, tzinfo=BOGOTA)))
        sales.add_sale(sale_factory(5000, invoice_number="FAC-000003",
                                    date=datetime(2024, 2, 28, 9, 0, tzinfo=BOGOTA)))

        march = reports.sales_by_period(STORE_ID, year=2024, month=3)
        assert march.total_sales == 2
        assert march.total_revenue == Decimal("4000")
        assert march.total_items == 4
        assert march.average_ticket == Decimal("2000.00")

        found = reports.sales_by_period(STORE_ID, search="fac-000003")
        assert found.total_sales == 1
        assert found.total_revenue == Decimal("5000")

    def test_month_is_one_based(self, reports, data_store, sale_factory):
        # 1 de marzo 02:00 UTC sigue siendo febrero en Bogotá
        SaleService(data_store).add_sale(
            sale_factory(1000, date=datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc))
        )
        assert reports.sales_by_period(STORE_ID, month=2).total_sales == 1
        assert reports.sales_by_period(STORE_ID, month=3).total_sales == 0

        with pytest.raises(ValueError):
            reports.sales_by_period(STORE_ID, month=0)

    def test_empty_period(self, reports):
        result = reports.sales_by_period(STORE_ID, year=2020)
        assert result.total_sales == 0
        assert result.average_ticket == Decimal("0")


class TestRegisterSummary:

    def test_summary_totals(self, reports, data_store, clock):
        registers = CashRegisterService(data_store)
        first = registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        registers.close_cash_register(first.id, Decimal("98000"))
        clock.advance(hours=1)
        second = registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("50000"))
        registers.close_cash_register(second.id, Decimal("53000"))
        clock.advance(hours=1)
        registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("10000"))

        summary = reports.register_summary(STORE_ID)

        assert summary.open_count == 1
        assert summary.closed_count == 2
        assert summary.total_opening == Decimal("160000")
        assert summary.total_expected == Decimal("150000")
        assert summary.total_difference == Decimal("1000")
        assert summary.total_surplus == Decimal("3000")
        assert summary.total_shortage == Decimal("2000")
        assert [r.register_id for r in summary.registers][:2] == [first.id, second.id]

    def test_summary_date_range(self, reports, data_store, clock):
        registers = CashRegisterService(data_store)
        first = registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("1000"))
        registers.close_cash_register(first.id, Decimal("1000"))
        clock.advance(days=1)
        registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("2000"))

        summary = reports.register_summary(STORE_ID, start=clock.now() - timedelta(hours=1))

        assert summary.open_count == 1
        assert summary.closed_count == 0


class TestReportsAPI:

    def test_dashboard_and_revenue(self, client, data_store, sale_factory):
        SaleService(data_store).add_sale(sale_factory(1234567))

        dashboard = client.get("/api/v1/reports/dashboard", params={"store_id": STORE_ID}).json()
        assert Decimal(dashboard["today_revenue"]) == Decimal("1234567")

        today = client.get("/api/v1/reports/revenue/today", params={"store_id": STORE_ID}).json()
        assert today["formatted"] == "$ 1.234.567"

        total = client.get("/api/v1/reports/revenue/total", headers={"X-Store-ID": STORE_ID}).json()
        assert Decimal(total["amount"]) == Decimal("1234567")

    def test_sales_report_validates_month(self, client):
        response = client.get("/api/v1/reports/sales", params={"store_id": STORE_ID, "month": 13})
        assert response.status_code == 422

        response = client.get("/api/v1/reports/sales", params={"store_id": STORE_ID, "month": 3, "year": 2024})
        assert response.status_code == 200
        assert response.json()["total_sales"] == 0

    def test_cash_register_report_and_export(self, client, data_store):
        registers = CashRegisterService(data_store)
        register = registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("1000"))
        registers.close_cash_register(register.id, Decimal("900"))

        report = client.get("/api/v1/reports/cash-registers", params={"store_id": STORE_ID}).json()
        assert Decimal(report["total_shortage"]) == Decimal("100")

        export = client.get("/api/v1/reports/cash-registers/export", params={"store_id": STORE_ID})
        assert export.status_code == 200
        lines = export.text.strip().splitlines()
        assert lines[0] == "Caja,Empleado,Estado,Apertura,Cierre,Monto apertura,Esperado,Contado,Diferencia"
        assert lines[1].startswith(f"{register.id},{EMPLOYEE_ID},closed,")
        assert lines[1].endswith(",1000,1000,900,-100")
