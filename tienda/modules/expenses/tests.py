from decimal import Decimal

import pytest

from tienda.common.exceptions import InvalidAmountError
from tienda.modules.expenses.models import DEFAULT_EXPENSE_CATEGORIES
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.ledger.models import MovementType

STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


class TestExpenseService:

    def test_expense_is_recorded_as_negative_movement(self, data_store, expense_factory):
        expense = ExpenseService(data_store).add_expense(expense_factory(12000))

        assert data_store.expenses == [expense]
        movement = data_store.ledger.by_reference(expense.id)[0]
        assert movement.type == MovementType.EXPENSE
        assert movement.amount == Decimal("-12000")

    def test_non_positive_amount_is_rejected(self, data_store, expense_factory):
        with pytest.raises(InvalidAmountError):
            ExpenseService(data_store).add_expense(expense_factory(0))
        assert data_store.expenses == []
        assert len(data_store.ledger) == 0

    def test_list_filters_by_category_and_sums(self, data_store, expense_factory, clock):
        service = ExpenseService(data_store)
        service.add_expense(expense_factory(1000, category="Aseo"))
        clock.advance(minutes=1)
        service.add_expense(expense_factory(2000, category="Transporte"))
        clock.advance(minutes=1)
        service.add_expense(expense_factory(3000, category="Transporte"))

        result = service.get_expenses(store_id=STORE_ID, category="Transporte")

        assert result["total"] == 2
        assert result["total_amount"] == Decimal("5000")
        assert [e.amount for e in result["expenses"]] == [Decimal("3000"), Decimal("2000")]

    def test_categories(self, data_store):
        service = ExpenseService(data_store)
        assert service.get_expense_categories() == DEFAULT_EXPENSE_CATEGORIES

        categories = service.add_expense_category("Arriendo")
        assert categories[0] == "Arriendo"
        assert service.add_expense_category("Arriendo") == categories

        assert "Otros" not in service.delete_expense_category("Otros")


class TestExpensesAPI:

    def test_create_and_list(self, client):
        response = client.post(
            "/api/v1/expenses/",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "amount": "8000", "description": "  Bolsas  ", "category": "Suministros"}
        )
        assert response.status_code == 201
        assert response.json()["description"] == "Bolsas"

        listing = client.get("/api/v1/expenses/", params={"store_id": STORE_ID}).json()
        assert listing["total"] == 1
        assert Decimal(listing["total_amount"]) == Decimal("8000")

    def test_zero_amount_is_rejected(self, client):
        response = client.post(
            "/api/v1/expenses/",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "amount": "0", "description": "Nada"}
        )
        assert response.status_code == 422

    def test_categories_endpoints(self, client, kv_store):
        response = client.post("/api/v1/expenses/categories", json={"name": "Arriendo"})
        assert response.status_code == 201
        assert "Arriendo" in response.json()
        assert "Arriendo" in kv_store.load("test_expense_categories")

        response = client.delete("/api/v1/expenses/categories", params={"name": "Arriendo"})
        assert "Arriendo" not in response.json()
        assert "Arriendo" not in client.get("/api/v1/expenses/categories").json()
