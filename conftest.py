"""
Fixtures compartidos

- clock: reloj fijo (15/03/2024 10:00, America/Bogota) que se puede adelantar
- data_store: PosDataStore en memoria con el reloj fijo
- client: TestClient con el data_store inyectado (sin evento de startup)
"""

from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from tienda.core.data import PosDataStore
from tienda.database.kv_store import InMemoryKeyValueStore
from tienda.dependencies.dataDependencies import get_data_store
from tienda.main import app
from tienda.modules.expenses.models import Expense
from tienda.modules.products.models import Product
from tienda.modules.sales.models import Sale, SaleItem

BOGOTA = ZoneInfo("America/Bogota")
STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


class FixedClock:
    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 15, 10, 0, tzinfo=BOGOTA))


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def data_store(kv_store, clock):
    return PosDataStore(kv_store, clock=clock, key_prefix="test_")


@pytest.fixture
def client(data_store):
    app.dependency_overrides[get_data_store] = lambda: data_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_product(data_store):
    product = Product(
        id="p1", name="Mouse Logitech", sku="MS001", category="Accesorios",
        price=Decimal("80000"), cost=Decimal("60000"), stock=25, min_stock=10, store_id=STORE_ID
    )
    data_store.products[product.id] = product
    return product


@pytest.fixture
def sale_factory(clock):
    """Construir ventas sin pasar por el servicio"""
    def make_sale(total, store_id=STORE_ID, date=None, invoice_number="FAC-000001", items=None):
        total = Decimal(str(total))
        return Sale(
            store_id=store_id,
            employee_id=EMPLOYEE_ID,
            items=items or [SaleItem(product_id="p1", product_name="Mouse Logitech",
                                     quantity=1, price=total, total=total)],
            subtotal=total,
            payment_method="efectivo",
            total=total,
            net_total=total,
            invoice_number=invoice_number,
            date=date or clock.now()
        )
    return make_sale


@pytest.fixture
def expense_factory(clock):
    def make_expense(amount, store_id=STORE_ID, date=None, description="Bolsas", category="Suministros"):
        return Expense(
            store_id=store_id,
            employee_id=EMPLOYEE_ID,
            amount=Decimal(str(amount)),
            description=description,
            category=category,
            date=date or clock.now()
        )
    return make_expense
