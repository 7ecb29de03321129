"""
Tests para separados

- Crear separado descuenta stock y registra el abono inicial
- Abonos: saldo, estado COMPLETED, rechazos
- Cada abono es un ingreso en el libro de caja
"""

from decimal import Decimal

import pytest

from tienda.common.exceptions import InvalidAmountError, InvalidStateError, LayawayNotFoundError
from tienda.modules.layaways.models import LayawayPayment, LayawayStatus
from tienda.modules.layaways.schemas import LayawayCreate
from tienda.modules.layaways.service import LayawayService
from tienda.modules.ledger.models import MovementType
from tienda.modules.sales.schemas import SaleItemCreate

STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


@pytest.fixture
def service(data_store):
    return LayawayService(data_store)


@pytest.fixture
def layaway(service, sample_product):
    return service.create_layaway(
        LayawayCreate(
            employee_id=EMPLOYEE_ID,
            customer_id="c1",
            items=[SaleItemCreate(product_id=sample_product.id, product_name=sample_product.name,
                                  quantity=2, price=Decimal("100000"))]
        ),
        STORE_ID
    )


def payment(amount, clock):
    return LayawayPayment(amount=Decimal(amount), employee_id=EMPLOYEE_ID, date=clock.now())


class TestCreateLayaway:

    def test_create_reserves_stock(self, layaway, data_store):
        assert layaway.total == Decimal("200000")
        assert layaway.remaining_balance == Decimal("200000")
        assert layaway.status == LayawayStatus.ACTIVE
        assert data_store.products["p1"].stock == 23
        assert len(data_store.ledger) == 0

    def test_initial_payment_is_recorded(self, service, sample_product, data_store):
        created = service.create_layaway(
            LayawayCreate(
                employee_id=EMPLOYEE_ID,
                items=[SaleItemCreate(product_id="p1", quantity=1, price=Decimal("80000"))],
                initial_payment=Decimal("30000"),
                payment_method="efectivo"
            ),
            STORE_ID
        )

        assert created.total_paid == Decimal("30000")
        assert created.remaining_balance == Decimal("50000")
        assert len(created.payments) == 1
        assert data_store.ledger.by_reference(created.id)[0].amount == Decimal("30000")


class TestLayawayPayments:

    def test_partial_payment_keeps_active(self, service, layaway, clock):
        updated = service.add_layaway_payment(layaway.id, payment("50000", clock))

        assert updated.total_paid == Decimal("50000")
        assert updated.remaining_balance == Decimal("150000")
        assert updated.status == LayawayStatus.ACTIVE

    def test_payment_of_remaining_balance_completes(self, service, layaway, clock):
        service.add_layaway_payment(layaway.id, payment("50000", clock))
        updated = service.add_layaway_payment(layaway.id, payment("150000", clock))

        assert updated.remaining_balance == Decimal("0")
        assert updated.status == LayawayStatus.COMPLETED
        assert len(updated.payments) == 2

    def test_overpayment_completes_with_negative_balance(self, service, layaway, clock):
        updated = service.add_layaway_payment(layaway.id, payment("250000", clock))

        assert updated.status == LayawayStatus.COMPLETED
        assert updated.remaining_balance == Decimal("-50000")

    def test_payment_is_ledger_income(self, service, layaway, data_store, clock):
        service.add_layaway_payment(layaway.id, payment("50000", clock))

        movements = data_store.ledger.by_reference(layaway.id)
        assert len(movements) == 1
        assert movements[0].type == MovementType.SALE
        assert movements[0].amount == Decimal("50000")
        assert movements[0].description == f"Abono separado #{layaway.id}"

    def test_payment_on_completed_layaway_is_rejected(self, service, layaway, data_store, clock):
        service.add_layaway_payment(layaway.id, payment("200000", clock))
        ledger_size = len(data_store.ledger)

        with pytest.raises(InvalidStateError):
            service.add_layaway_payment(layaway.id, payment("1000", clock))
        assert len(data_store.ledger) == ledger_size

    def test_non_positive_payment_is_rejected(self, service, layaway, clock):
        with pytest.raises(InvalidAmountError):
            service.add_layaway_payment(layaway.id, payment("0", clock))
        assert service.get_layaway(layaway.id).total_paid == Decimal("0")

    def test_unknown_layaway_is_not_found(self, service, clock):
        with pytest.raises(LayawayNotFoundError):
            service.add_layaway_payment("missing", payment("1000", clock))


class TestLayawaysAPI:

    def test_create_pay_and_complete(self, client, sample_product):
        response = client.post(
            "/api/v1/layaways/",
            params={"store_id": STORE_ID},
            json={
                "employee_id": EMPLOYEE_ID,
                "items": [{"product_id": "p1", "quantity": 1, "price": "80000"}],
                "initial_payment": "20000"
            }
        )
        assert response.status_code == 201
        layaway_id = response.json()["id"]

        response = client.post(
            f"/api/v1/layaways/{layaway_id}/payments",
            json={"amount": "60000", "employee_id": EMPLOYEE_ID}
        )
        assert response.status_code == 201
        assert response.json()["status"] == "completed"

        response = client.post(
            f"/api/v1/layaways/{layaway_id}/payments",
            json={"amount": "1000", "employee_id": EMPLOYEE_ID}
        )
        assert response.status_code == 409

        listing = client.get("/api/v1/layaways/", params={"store_id": STORE_ID, "status": "completed"}).json()
        assert listing["total"] == 1

    def test_unknown_layaway_payment_is_404(self, client):
        response = client.post(
            "/api/v1/layaways/missing/payments",
            json={"amount": "1000", "employee_id": EMPLOYEE_ID}
        )
        assert response.status_code == 404
        assert client.get("/api/v1/layaways/missing").status_code == 404
