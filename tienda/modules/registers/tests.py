"""
Tests para el módulo de cajas registradoras

Cubren:
- Apertura con validación de monto y política de una caja abierta por tienda
- Arqueo al cierre (esperado y diferencia) dentro de la ventana del turno
- Rechazo de doble cierre sin recalcular
- Gastos del turno informados al cierre
- Resumen del turno (vista previa)
- Endpoints HTTP
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from tienda.common.exceptions import (
    InvalidAmountError, InvalidStateError,
    RegisterAlreadyOpenError, RegisterNotFoundError
)
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.ledger.models import MovementType
from tienda.modules.registers.models import CashRegisterStatus
from tienda.modules.registers.service import CashRegisterService
from tienda.modules.sales.service import SaleService

STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


@pytest.fixture
def service(data_store):
    return CashRegisterService(data_store)


# ===== APERTURA =====

class TestOpenCashRegister:

    def test_open_creates_open_session_and_opening_movement(self, service, data_store, clock):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))

        assert register.status == CashRegisterStatus.OPEN
        assert register.opened_at == clock.now()
        assert data_store.cash_registers[register.id] == register

        movements = data_store.ledger.by_reference(register.id)
        assert len(movements) == 1
        assert movements[0].type == MovementType.OPENING
        assert movements[0].amount == Decimal("100000")
        assert movements[0].description == "Apertura de caja"

    def test_open_with_zero_amount_is_allowed(self, service):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("0"))
        assert register.opening_amount == Decimal("0")

    def test_open_with_negative_amount_fails(self, service, data_store):
        with pytest.raises(InvalidAmountError):
            service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("-1"))
        assert data_store.cash_registers == {}
        assert len(data_store.ledger) == 0

    def test_second_open_register_in_same_store_is_rejected(self, service):
        service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        with pytest.raises(RegisterAlreadyOpenError):
            service.open_cash_register(STORE_ID, "emp-2", Decimal("50000"))

    def test_other_store_can_open_its_own_register(self, service):
        service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        other = service.open_cash_register("2", EMPLOYEE_ID, Decimal("50000"))
        assert other.store_id == "2"

    def test_second_open_register_allowed_when_policy_disabled(self, service, data_store):
        data_store.enforce_single_open_register = False
        service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        service.open_cash_register(STORE_ID, "emp-2", Decimal("50000"))

        open_registers = [r for r in data_store.cash_registers.values() if r.is_open]
        assert len(open_registers) == 2


# ===== CIERRE Y ARQUEO =====

class TestCloseCashRegister:

    def test_reconciliation_without_difference(self, service, data_store, clock, sale_factory, expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))

        clock.advance(hours=1)
        SaleService(data_store).add_sale(sale_factory(50000))
        clock.advance(hours=1)
        ExpenseService(data_store).add_expense(expense_factory(10000))
        clock.advance(hours=1)

        closed = service.close_cash_register(register.id, Decimal("140000"))

        assert closed.status == CashRegisterStatus.CLOSED
        assert closed.expected_amount == Decimal("140000")
        assert closed.difference == Decimal("0")
        assert closed.closing_amount == Decimal("140000")
        assert closed.closed_at == clock.now()

    def test_shortage_is_negative_difference(self, service, data_store, clock, sale_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=30)
        SaleService(data_store).add_sale(sale_factory(50000))

        closed = service.close_cash_register(register.id, Decimal("145000"))

        assert closed.expected_amount == Decimal("150000")
        assert closed.difference == Decimal("-5000")

    def test_surplus_is_positive_difference(self, service):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        closed = service.close_cash_register(register.id, Decimal("102000"))
        assert closed.difference == Decimal("2000")

    def test_only_in_window_and_same_store_activity_counts(self, service, data_store, clock,
                                                          sale_factory, expense_factory):
        sales = SaleService(data_store)
        expenses = ExpenseService(data_store)

        # Antes de la apertura
        sales.add_sale(sale_factory(70000, date=clock.now() - timedelta(hours=2)))
        expenses.add_expense(expense_factory(3000, date=clock.now() - timedelta(hours=2)))

        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))

        # En el instante de apertura (incluido) y en otra tienda (excluido)
        sales.add_sale(sale_factory(20000))
        sales.add_sale(sale_factory(99000, store_id="2"))
        clock.advance(hours=1)
        expenses.add_expense(expense_factory(5000))

        closed = service.close_cash_register(register.id, Decimal("115000"))

        assert closed.expected_amount == Decimal("115000")
        assert closed.difference == Decimal("0")

    def test_expenses_snapshot_is_stored_on_close(self, service, data_store, clock, expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=10)
        expense = ExpenseService(data_store).add_expense(expense_factory(10000))

        closed = service.close_cash_register(register.id, Decimal("90000"))

        assert [e.id for e in closed.expenses_turno] == [expense.id]

    def test_adjustment_expenses_are_registered_before_totals(self, service, data_store, clock,
                                                              expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=10)
        already_recorded = ExpenseService(data_store).add_expense(expense_factory(5000))
        new_expense = expense_factory(8000, description="Domicilio")

        closed = service.close_cash_register(
            register.id, Decimal("87000"), adjustment_expenses=[already_recorded, new_expense]
        )

        assert closed.expected_amount == Decimal("87000")
        assert len(data_store.expenses) == 2
        assert len(data_store.ledger.filter(type=MovementType.EXPENSE)) == 2

    def test_invalid_adjustment_expense_leaves_no_partial_close(self, service, data_store, clock,
                                                                expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=10)

        with pytest.raises(InvalidAmountError):
            service.close_cash_register(
                register.id, Decimal("90000"),
                adjustment_expenses=[expense_factory(10000), expense_factory(0)]
            )

        assert data_store.cash_registers[register.id].status == CashRegisterStatus.OPEN
        assert data_store.expenses == []
        assert [m.type for m in data_store.ledger] == [MovementType.OPENING]

    def test_adjustment_expense_from_other_store_is_rejected(self, service, data_store, clock,
                                                             expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=10)

        with pytest.raises(InvalidStateError):
            service.close_cash_register(
                register.id, Decimal("90000"),
                adjustment_expenses=[expense_factory(10000), expense_factory(5000, store_id="2")]
            )

        assert data_store.expenses == []
        assert data_store.cash_registers[register.id].status == CashRegisterStatus.OPEN

    def test_close_emits_informative_closing_movement(self, service, data_store):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        service.close_cash_register(register.id, Decimal("1234567"))

        closing = data_store.ledger.filter(type=MovementType.CLOSING)
        assert len(closing) == 1
        assert closing[0].amount == Decimal("0")
        assert closing[0].reference_id == register.id
        assert closing[0].description == "Cierre de caja - Conteo: $ 1.234.567"

    def test_closing_twice_is_rejected_without_recompute(self, service, data_store, clock, sale_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        first = service.close_cash_register(register.id, Decimal("100000"))

        clock.advance(minutes=5)
        SaleService(data_store).add_sale(sale_factory(40000))
        ledger_size = len(data_store.ledger)

        with pytest.raises(InvalidStateError):
            service.close_cash_register(register.id, Decimal("140000"))

        assert data_store.cash_registers[register.id] == first
        assert len(data_store.ledger) == ledger_size

    def test_close_unknown_register_fails(self, service):
        with pytest.raises(RegisterNotFoundError):
            service.close_cash_register("missing", Decimal("0"))

    def test_store_can_reopen_after_close(self, service):
        first = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        service.close_cash_register(first.id, Decimal("100000"))

        second = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("80000"))

        assert second.id != first.id
        assert service.get_current_cash_register(STORE_ID) == second


# ===== CONSULTAS =====

class TestCashRegisterQueries:

    def test_current_register_is_none_without_open_session(self, service):
        assert service.get_current_cash_register(STORE_ID) is None

    def test_list_is_filtered_and_sorted_by_opening_desc(self, service, clock):
        first = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("1000"))
        service.close_cash_register(first.id, Decimal("1000"))
        clock.advance(hours=1)
        second = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("2000"))

        result = service.get_cash_registers(store_id=STORE_ID)
        assert [r.id for r in result["cash_registers"]] == [second.id, first.id]
        assert result["total"] == 2

        closed = service.get_cash_registers(store_id=STORE_ID, status=CashRegisterStatus.CLOSED)
        assert [r.id for r in closed["cash_registers"]] == [first.id]

    def test_shift_summary_previews_open_register(self, service, data_store, clock,
                                                  sale_factory, expense_factory):
        register = service.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        clock.advance(minutes=15)
        SaleService(data_store).add_sale(sale_factory(50000))
        ExpenseService(data_store).add_expense(expense_factory(10000))

        summary = service.get_shift_summary(register.id)

        assert summary.status == CashRegisterStatus.OPEN
        assert summary.sales_count == 1
        assert summary.sales_total == Decimal("50000")
        assert summary.expenses_total == Decimal("10000")
        assert summary.expected_amount == Decimal("140000")
        assert summary.difference is None
        assert data_store.cash_registers[register.id].is_open


# ===== API =====

class TestCashRegisterAPI:

    def test_open_close_flow(self, client, data_store, kv_store, clock):
        response = client.post(
            "/api/v1/cash-registers/open",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "100000"}
        )
        assert response.status_code == 201
        register_id = response.json()["id"]

        clock.advance(hours=1)
        response = client.post(
            "/api/v1/sales/",
            params={"store_id": STORE_ID},
            json={
                "employee_id": EMPLOYEE_ID,
                "items": [{"product_id": "p1", "quantity": 1, "price": "50000"}],
                "payment_method": "efectivo"
            }
        )
        assert response.status_code == 201

        clock.advance(hours=1)
        response = client.post(
            f"/api/v1/cash-registers/{register_id}/close",
            json={
                "closing_amount": "140000",
                "expenses_turno": [
                    {"employee_id": EMPLOYEE_ID, "amount": "10000", "description": "Bolsas"}
                ]
            }
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "closed"
        assert Decimal(body["expected_amount"]) == Decimal("140000")
        assert Decimal(body["difference"]) == Decimal("0")
        assert len(body["expenses_turno"]) == 1

        # La background task escribió el cierre en el almacenamiento
        stored = kv_store.load("test_cash_registers")
        assert stored[0]["status"] == "closed"

    def test_store_header_is_accepted(self, client):
        response = client.post(
            "/api/v1/cash-registers/open",
            headers={"X-Store-ID": "2"},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "0"}
        )
        assert response.status_code == 201
        assert response.json()["store_id"] == "2"
        assert response.headers["X-Store-ID"] == "2"

    def test_missing_store_is_bad_request(self, client):
        response = client.post(
            "/api/v1/cash-registers/open",
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "0"}
        )
        assert response.status_code == 400

    def test_negative_opening_amount_is_rejected(self, client):
        response = client.post(
            "/api/v1/cash-registers/open",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "-5"}
        )
        assert response.status_code == 422

    def test_second_open_is_conflict(self, client):
        payload = {"employee_id": EMPLOYEE_ID, "opening_amount": "1000"}
        client.post("/api/v1/cash-registers/open", params={"store_id": STORE_ID}, json=payload)
        response = client.post("/api/v1/cash-registers/open", params={"store_id": STORE_ID}, json=payload)
        assert response.status_code == 409

    def test_double_close_is_conflict(self, client):
        response = client.post(
            "/api/v1/cash-registers/open",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "1000"}
        )
        register_id = response.json()["id"]

        assert client.post(f"/api/v1/cash-registers/{register_id}/close",
                           json={"closing_amount": "1000"}).status_code == 200
        response = client.post(f"/api/v1/cash-registers/{register_id}/close",
                               json={"closing_amount": "1000"})
        assert response.status_code == 409
        assert response.json()["detail"] == "La caja ya está cerrada"

    def test_current_and_unknown_register(self, client):
        assert client.get("/api/v1/cash-registers/current", params={"store_id": STORE_ID}).status_code == 404
        assert client.get("/api/v1/cash-registers/missing").status_code == 404

        client.post(
            "/api/v1/cash-registers/open",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "1000"}
        )
        response = client.get("/api/v1/cash-registers/current", params={"store_id": STORE_ID})
        assert response.status_code == 200
        assert response.json()["status"] == "open"

    def test_list_and_summary(self, client):
        response = client.post(
            "/api/v1/cash-registers/open",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "opening_amount": "1000"}
        )
        register_id = response.json()["id"]

        listing = client.get("/api/v1/cash-registers/", params={"store_id": STORE_ID}).json()
        assert listing["total"] == 1

        summary = client.get(f"/api/v1/cash-registers/{register_id}/summary").json()
        assert Decimal(summary["expected_amount"]) == Decimal("1000")
