"""
Tests para el módulo de ventas

- Cálculo de totales (descuento, envío, comisión del medio de pago)
- Efectos de registrar una venta: stock y libro de caja
- Consistencia entre libro de caja y colecciones
- Endpoints HTTP
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from tienda.modules.expenses.service import ExpenseService
from tienda.modules.ledger.models import MovementType
from tienda.modules.sales.schemas import SaleCreate, SaleItemCreate
from tienda.modules.sales.service import SaleService

STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


@pytest.fixture
def sample_sale_data():
    return SaleCreate(
        employee_id=EMPLOYEE_ID,
        items=[
            SaleItemCreate(product_id="p1", quantity=2, price=Decimal("80000")),
            SaleItemCreate(product_id="p2", product_name="Cable USB", quantity=1, price=Decimal("15000")),
        ],
        discount=Decimal("5000"),
        shipping_cost=Decimal("10000"),
        payment_method="tarjeta",
        payment_method_discount=Decimal("3")
    )


class TestBuildSale:

    def test_totals(self, data_store, sample_product, sample_sale_data, clock):
        sale = SaleService(data_store).build_sale(sample_sale_data, STORE_ID)

        assert sale.subtotal == Decimal("175000")
        assert sale.total == Decimal("180000")
        assert sale.net_total == Decimal("174600.00")
        assert sale.items[0].total == Decimal("160000")
        assert sale.items[0].product_name == "Mouse Logitech"
        assert sale.items[1].product_name == "Cable USB"
        assert sale.items_count == 3
        assert sale.date == clock.now()

    def test_invoice_numbers_are_sequential_per_store(self, data_store, sample_sale_data):
        service = SaleService(data_store)
        first = service.add_sale(service.build_sale(sample_sale_data, STORE_ID))
        second = service.build_sale(sample_sale_data, STORE_ID)
        other_store = service.build_sale(sample_sale_data, "2")

        assert first.invoice_number == "FAC-000001"
        assert second.invoice_number == "FAC-000002"
        assert other_store.invoice_number == "FAC-000001"

    def test_empty_sale_is_rejected(self):
        with pytest.raises(ValidationError):
            SaleCreate(employee_id=EMPLOYEE_ID, items=[], payment_method="efectivo")


class TestAddSale:

    def test_sale_decrements_stock_and_records_gross_total(self, data_store, sample_product, sample_sale_data):
        service = SaleService(data_store)
        sale = service.add_sale(service.build_sale(sample_sale_data, STORE_ID))

        assert data_store.products["p1"].stock == 23
        assert data_store.sales == [sale]

        movements = data_store.ledger.by_reference(sale.id)
        assert len(movements) == 1
        assert movements[0].type == MovementType.SALE
        assert movements[0].amount == Decimal("180000")
        assert movements[0].description == f"Venta {sale.invoice_number}"

    def test_unknown_product_line_does_not_block_sale(self, data_store, sale_factory):
        sale = SaleService(data_store).add_sale(sale_factory(1000))
        assert data_store.sales == [sale]
        assert data_store.products == {}

    def test_sale_enqueues_collections_and_ledger_entry(self, data_store, sale_factory):
        SaleService(data_store).add_sale(sale_factory(1000))
        assert data_store.persistence.pending_keys() == [
            "test_sales", "test_products", "test_ledger:00000001", "test_ledger:length"
        ]

    def test_ledger_matches_collections(self, data_store, sale_factory, expense_factory):
        sales = SaleService(data_store)
        expenses = ExpenseService(data_store)
        for total in (50000, 12000, 7300):
            sales.add_sale(sale_factory(total))
        for amount in (4000, 1500):
            expenses.add_expense(expense_factory(amount))

        ledger_income = sum(m.amount for m in data_store.ledger.filter(type=MovementType.SALE))
        ledger_expense = sum(abs(m.amount) for m in data_store.ledger.filter(type=MovementType.EXPENSE))
        collection_income = sum(s.total for s in data_store.sales)
        collection_expense = sum(e.amount for e in data_store.expenses)

        assert ledger_income - ledger_expense == collection_income - collection_expense
        assert ledger_income - ledger_expense == Decimal("63800")


class TestSalesAPI:

    def test_create_and_list(self, client, data_store, sample_product):
        response = client.post(
            "/api/v1/sales/",
            params={"store_id": STORE_ID},
            json={
                "employee_id": EMPLOYEE_ID,
                "items": [{"product_id": "p1", "quantity": 3, "price": "80000"}],
                "payment_method": "efectivo"
            }
        )
        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["total"]) == Decimal("240000")
        assert body["invoice_number"] == "FAC-000001"
        assert data_store.products["p1"].stock == 22

        listing = client.get("/api/v1/sales/", params={"store_id": STORE_ID}).json()
        assert listing["total"] == 1
        assert listing["sales"][0]["id"] == body["id"]

    def test_invalid_payment_discount_is_rejected(self, client):
        response = client.post(
            "/api/v1/sales/",
            params={"store_id": STORE_ID},
            json={
                "employee_id": EMPLOYEE_ID,
                "items": [{"product_id": "p1", "quantity": 1, "price": "1000"}],
                "payment_method": "tarjeta",
                "payment_method_discount": "150"
            }
        )
        assert response.status_code == 422
