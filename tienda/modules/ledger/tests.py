"""
Tests para el libro de caja

- Funciones de registro (evento -> movimiento)
- LedgerStore append-only y filtros
- Movimientos manuales, resumen y exportación CSV
"""

from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from tienda.common.exceptions import DuplicateMovementError
from tienda.modules.layaways.models import Layaway, LayawayPayment
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.ledger.recorder import (
    record_expense, record_layaway_payment, record_register_close,
    record_register_open, record_sale
)
from tienda.modules.ledger.schemas import CashMovementCreate
from tienda.modules.ledger.service import CashMovementService
from tienda.modules.ledger.store import LedgerStore
from tienda.modules.registers.models import CashRegister
from tienda.modules.registers.service import CashRegisterService

BOGOTA = ZoneInfo("America/Bogota")
STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


def make_movement(amount="1000", type=MovementType.SALE, store_id=STORE_ID, date=None, **kwargs):
    return CashMovement(
        store_id=store_id,
        employee_id=EMPLOYEE_ID,
        type=type,
        amount=Decimal(amount),
        date=date or datetime(2024, 3, 15, 10, 0, tzinfo=BOGOTA),
        **kwargs
    )


# ===== RECORDER =====

class TestRecorder:

    def test_sale_movement_uses_gross_total(self, sale_factory):
        sale = sale_factory(50000, invoice_number="FAC-000007")
        sale = sale.model_copy(update={"net_total": Decimal("48500")})

        movement = record_sale(sale)

        assert movement.type == MovementType.SALE
        assert movement.amount == Decimal("50000")
        assert movement.description == "Venta FAC-000007"
        assert movement.reference_id == sale.id
        assert movement.date == sale.date
        assert movement.store_id == sale.store_id

    def test_expense_movement_is_negative(self, expense_factory):
        expense = expense_factory(12000, description="Pago de domicilio")

        movement = record_expense(expense)

        assert movement.type == MovementType.EXPENSE
        assert movement.amount == Decimal("-12000")
        assert movement.description == "Pago de domicilio"
        assert movement.reference_id == expense.id

    def test_layaway_payment_movement_counts_as_sale(self, clock):
        layaway = Layaway(
            id="L1", store_id="2", employee_id="emp-9", total=Decimal("300000"),
            remaining_balance=Decimal("300000"), created_at=clock.now()
        )
        payment = LayawayPayment(amount=Decimal("100000"), employee_id=EMPLOYEE_ID, date=clock.now())

        movement = record_layaway_payment(layaway, payment)

        assert movement.type == MovementType.SALE
        assert movement.amount == Decimal("100000")
        assert movement.description == "Abono separado #L1"
        assert movement.reference_id == "L1"
        assert movement.store_id == "2"
        assert movement.employee_id == EMPLOYEE_ID

    def test_register_open_and_close_movements(self, clock):
        register = CashRegister(
            store_id=STORE_ID, employee_id=EMPLOYEE_ID,
            opening_amount=Decimal("100000"), opened_at=clock.now()
        )

        opening = record_register_open(register)
        closing = record_register_close(register, Decimal("140000"), clock.advance(hours=8))

        assert opening.type == MovementType.OPENING
        assert opening.amount == Decimal("100000")
        assert opening.date == register.opened_at
        assert closing.type == MovementType.CLOSING
        assert closing.amount == Decimal("0")
        assert closing.description == "Cierre de caja - Conteo: $ 140.000"
        assert closing.reference_id == register.id
        assert closing.date == clock.now()

    def test_each_call_creates_a_new_movement(self, sale_factory):
        sale = sale_factory(1000)
        assert record_sale(sale).id != record_sale(sale).id


# ===== LEDGER STORE =====

class TestLedgerStore:

    def test_append_keeps_insertion_order(self):
        ledger = LedgerStore()
        first = ledger.append(make_movement("1"))
        second = ledger.append(make_movement("2"))

        assert len(ledger) == 2
        assert list(ledger) == [first, second]
        assert ledger.entries == (first, second)
        assert first.id in ledger

    def test_duplicate_id_is_rejected(self):
        movement = make_movement()
        ledger = LedgerStore([movement])

        with pytest.raises(DuplicateMovementError):
            ledger.append(movement)
        assert len(ledger) == 1

    def test_entries_are_immutable(self):
        ledger = LedgerStore([make_movement()])

        assert isinstance(ledger.entries, tuple)
        with pytest.raises(ValidationError):
            ledger.entries[0].amount = Decimal("0")
        assert not hasattr(ledger, "remove")
        assert not hasattr(ledger, "update")

    def test_filter_by_store_type_and_inclusive_dates(self):
        base = datetime(2024, 3, 15, 10, 0, tzinfo=BOGOTA)
        ledger = LedgerStore([
            make_movement("1", date=base),
            make_movement("2", date=base + timedelta(hours=1)),
            make_movement("-3", type=MovementType.EXPENSE, date=base + timedelta(hours=1)),
            make_movement("4", store_id="2", date=base + timedelta(hours=1)),
            make_movement("5", date=base + timedelta(hours=2)),
        ])

        result = ledger.filter(
            store_id=STORE_ID, type=MovementType.SALE,
            start=base, end=base + timedelta(hours=1)
        )

        assert [m.amount for m in result] == [Decimal("1"), Decimal("2")]

    def test_filter_by_reference(self):
        ledger = LedgerStore([
            make_movement("1", reference_id="R1"),
            make_movement("2", reference_id="R2"),
            make_movement("3", reference_id="R1"),
        ])
        assert [m.amount for m in ledger.by_reference("R1")] == [Decimal("1"), Decimal("3")]

    def test_naive_dates_are_interpreted_in_store_timezone(self):
        movement = make_movement(date=datetime(2024, 3, 15, 10, 0))
        assert movement.date.utcoffset() == timedelta(hours=-5)


# ===== SERVICE =====

class TestCashMovementService:

    def test_manual_expense_movement_is_signed(self, data_store):
        service = CashMovementService(data_store)
        movement = service.add_cash_movement(service.build_movement(
            CashMovementCreate(employee_id=EMPLOYEE_ID, type=MovementType.EXPENSE,
                               amount=Decimal("2500"), description="Propina domiciliario"),
            STORE_ID
        ))

        assert movement.amount == Decimal("-2500")
        assert data_store.ledger.entries[-1] == movement
        assert data_store.persistence.pending_keys() == ["test_ledger:00000001", "test_ledger:length"]

    def test_movements_summary(self, data_store):
        service = CashMovementService(data_store)
        for movement in (
            make_movement("100000", type=MovementType.OPENING),
            make_movement("50000"),
            make_movement("-10000", type=MovementType.EXPENSE),
            make_movement("0", type=MovementType.CLOSING),
        ):
            service.add_cash_movement(movement)

        result = service.get_movements(store_id=STORE_ID)

        assert result["total"] == 4
        assert result["summary"] == {
            "total_openings": Decimal("100000"),
            "total_sales": Decimal("50000"),
            "total_expenses": Decimal("10000"),
            "net": Decimal("140000"),
        }

    def test_movements_of_a_register_shift(self, data_store, clock):
        service = CashMovementService(data_store)
        service.add_cash_movement(make_movement("999", date=clock.now() - timedelta(days=1)))
        register = CashRegisterService(data_store).open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("1000"))
        clock.advance(minutes=1)
        service.add_cash_movement(make_movement("500", date=clock.now()))

        result = service.get_movements(register_id=register.id)

        assert [m.amount for m in result["movements"]] == [Decimal("500"), Decimal("1000")]


# ===== API =====

class TestCashMovementAPI:

    def test_create_list_and_export(self, client, data_store):
        response = client.post(
            "/api/v1/cash-movements/",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "type": "sale", "amount": "15000", "description": "Ingreso manual"}
        )
        assert response.status_code == 201
        assert Decimal(response.json()["amount"]) == Decimal("15000")

        listing = client.get("/api/v1/cash-movements/", params={"store_id": STORE_ID}).json()
        assert listing["total"] == 1
        assert Decimal(listing["summary"]["total_sales"]) == Decimal("15000")

        export = client.get("/api/v1/cash-movements/export", params={"store_id": STORE_ID})
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        lines = export.text.strip().splitlines()
        assert lines[0].startswith("Fecha,Tipo,Monto")
        assert ",sale,15000,Ingreso manual," in lines[1]

    def test_negative_amount_is_rejected(self, client):
        response = client.post(
            "/api/v1/cash-movements/",
            params={"store_id": STORE_ID},
            json={"employee_id": EMPLOYEE_ID, "type": "expense", "amount": "-1"}
        )
        assert response.status_code == 422
