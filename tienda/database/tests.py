"""
Tests for the storage layer

- InMemoryKeyValueStore and SQLKeyValueStore (sqlite file)
- PersistenceQueue: coalescing, ordering, failure reporting, no retries
- PosDataStore: incremental ledger writes and load round trip
"""

from decimal import Decimal

import pytest

from tienda.core.data import LEDGER_LENGTH_KEY, PosDataStore, ledger_entry_key
from tienda.core.seed import DEMO_PRODUCTS, seed_demo_data
from tienda.database.kv_store import InMemoryKeyValueStore, SQLKeyValueStore
from tienda.database.persistence import PersistenceQueue
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.layaways.schemas import LayawayCreate
from tienda.modules.layaways.service import LayawayService
from tienda.modules.registers.service import CashRegisterService
from tienda.modules.sales.schemas import SaleItemCreate
from tienda.modules.sales.service import SaleService

STORE_ID = "1"
EMPLOYEE_ID = "emp-1"


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Falla al guardar las claves indicadas"""

    def __init__(self, failing_keys=(), raise_error=False):
        super().__init__()
        self.failing_keys = set(failing_keys)
        self.raise_error = raise_error
        self.save_calls = []

    def save(self, key, value):
        self.save_calls.append(key)
        if key in self.failing_keys:
            if self.raise_error:
                raise ConnectionError("storage unavailable")
            return False
        return super().save(key, value)


# ===== KEY-VALUE STORES =====

class TestInMemoryKeyValueStore:

    def test_load_missing_key_returns_none(self):
        assert InMemoryKeyValueStore().load("missing") is None

    def test_load_returns_independent_copy(self):
        store = InMemoryKeyValueStore()
        store.save("items", [{"a": 1}])

        loaded = store.load("items")
        loaded[0]["a"] = 2

        assert store.load("items") == [{"a": 1}]

    def test_non_serializable_value_is_not_saved(self):
        store = InMemoryKeyValueStore()
        assert store.save("bad", {"value": object()}) is False
        assert store.load("bad") is None


class TestSQLKeyValueStore:

    @pytest.fixture
    def sql_store(self, tmp_path):
        return SQLKeyValueStore(url=f"sqlite:///{tmp_path / 'kv.db'}")

    def test_save_and_load(self, sql_store):
        assert sql_store.save("products", [{"id": "1", "price": "1000"}]) is True
        assert sql_store.load("products") == [{"id": "1", "price": "1000"}]

    def test_overwrite(self, sql_store):
        sql_store.save("ledger:length", 1)
        sql_store.save("ledger:length", 2)
        assert sql_store.load("ledger:length") == 2

    def test_missing_key(self, sql_store):
        assert sql_store.load("missing") is None

    def test_data_survives_new_store_instance(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'kv.db'}"
        SQLKeyValueStore(url=url).save("sales", [])
        assert SQLKeyValueStore(url=url).load("sales") == []


# ===== PERSISTENCE QUEUE =====

class TestPersistenceQueue:

    def test_flush_writes_in_enqueue_order(self):
        kv = FailingKeyValueStore()
        queue = PersistenceQueue(kv)
        queue.enqueue("a", 1)
        queue.enqueue("b", 2)

        results = queue.flush()

        assert [r.key for r in results] == ["a", "b"]
        assert all(r.ok for r in results)
        assert queue.pending == 0
        assert kv.load("b") == 2

    def test_repeated_key_keeps_latest_value_at_latest_position(self):
        kv = FailingKeyValueStore()
        queue = PersistenceQueue(kv)
        queue.enqueue("products", ["v1"])
        queue.enqueue("sales", [])
        queue.enqueue("products", ["v2"])

        assert queue.pending_keys() == ["sales", "products"]
        queue.flush()

        assert kv.save_calls == ["sales", "products"]
        assert kv.load("products") == ["v2"]

    def test_failure_is_reported_and_not_retried(self):
        kv = FailingKeyValueStore(failing_keys={"sales"})
        queue = PersistenceQueue(kv)
        seen = []
        queue.subscribe(seen.append)
        queue.enqueue("sales", [])
        queue.enqueue("products", [])

        results = queue.flush()

        assert [r.ok for r in results] == [False, True]
        assert [r.key for r in seen] == ["sales", "products"]
        assert [f.key for f in queue.failures] == ["sales"]
        assert queue.pending == 0

        assert queue.flush() == []
        assert kv.save_calls == ["sales", "products"]

    def test_exception_while_saving_is_captured(self):
        queue = PersistenceQueue(FailingKeyValueStore(failing_keys={"sales"}, raise_error=True))
        queue.enqueue("sales", [])

        result = queue.flush()[0]

        assert result.ok is False
        assert "storage unavailable" in result.error

    def test_drain_failures(self):
        queue = PersistenceQueue(FailingKeyValueStore(failing_keys={"x"}))
        queue.enqueue("x", 1)
        queue.flush()

        assert [f.key for f in queue.drain_failures()] == ["x"]
        assert queue.drain_failures() == []

    def test_failure_history_is_bounded(self):
        queue = PersistenceQueue(FailingKeyValueStore(failing_keys={"k0", "k1", "k2"}), history_size=2)
        for index in range(3):
            queue.enqueue(f"k{index}", index)
        queue.flush()

        assert [f.key for f in queue.failures] == ["k1", "k2"]


# ===== DATA STORE =====

class TestPosDataStore:

    def test_ledger_is_written_one_entry_at_a_time(self, data_store, kv_store, sale_factory):
        sales = SaleService(data_store)
        sales.add_sale(sale_factory(1000))
        data_store.flush()
        sales.add_sale(sale_factory(2000))

        assert data_store.persistence.pending_keys() == [
            "test_sales", "test_products", f"test_{ledger_entry_key(2)}", f"test_{LEDGER_LENGTH_KEY}"
        ]
        data_store.flush()

        assert kv_store.load("test_ledger:00000001")["amount"] == "1000"
        assert kv_store.load("test_ledger:00000002")["amount"] == "2000"
        assert kv_store.load("test_ledger:length") == 2

    def test_failed_save_keeps_memory_state(self, clock, sale_factory):
        kv = FailingKeyValueStore(failing_keys={"sales"})
        data = PosDataStore(kv, clock=clock)

        SaleService(data).add_sale(sale_factory(1000))
        data.flush()

        assert len(data.sales) == 1
        assert [f.key for f in data.persistence.failures] == ["sales"]

    def test_auto_flush_writes_synchronously(self, kv_store, clock, expense_factory):
        data = PosDataStore(kv_store, clock=clock, auto_flush=True)
        ExpenseService(data).add_expense(expense_factory(1000))

        assert data.persistence.pending == 0
        assert len(kv_store.load("expenses")) == 1
        assert kv_store.load("ledger:length") == 1

    def test_load_round_trip(self, data_store, kv_store, clock, sample_product, sale_factory, expense_factory):
        registers = CashRegisterService(data_store)
        register = registers.open_cash_register(STORE_ID, EMPLOYEE_ID, Decimal("100000"))
        SaleService(data_store).add_sale(sale_factory(50000))
        ExpenseService(data_store).add_expense(expense_factory(10000))
        LayawayService(data_store).create_layaway(
            LayawayCreate(employee_id=EMPLOYEE_ID, initial_payment=Decimal("1000"),
                          items=[SaleItemCreate(product_id="p1", quantity=1, price=Decimal("80000"))]),
            STORE_ID
        )
        registers.close_cash_register(register.id, Decimal("140000"))
        ExpenseService(data_store).add_expense_category("Arriendo")
        data_store.persist("products")
        data_store.flush()

        reloaded = PosDataStore(kv_store, clock=clock, key_prefix="test_")
        reloaded.load()

        assert reloaded.ledger.entries == data_store.ledger.entries
        assert reloaded.sales == data_store.sales
        assert reloaded.expenses == data_store.expenses
        assert reloaded.layaways == data_store.layaways
        assert reloaded.cash_registers == data_store.cash_registers
        assert reloaded.products == data_store.products
        assert "Arriendo" in reloaded.expense_categories
        assert reloaded.cash_registers[register.id].difference == Decimal("0")

    def test_missing_ledger_entry_is_skipped(self, kv_store, clock, sale_factory):
        data = PosDataStore(kv_store, clock=clock)
        sales = SaleService(data)
        sales.add_sale(sale_factory(1000))
        sales.add_sale(sale_factory(2000))
        data.flush()
        kv_store._data.pop(ledger_entry_key(1))

        reloaded = PosDataStore(kv_store, clock=clock)
        reloaded.load()

        assert [m.amount for m in reloaded.ledger] == [Decimal("2000")]

    def test_append_after_gap_does_not_overwrite_stored_entries(self, kv_store, clock, sale_factory):
        data = PosDataStore(kv_store, clock=clock)
        sales = SaleService(data)
        sales.add_sale(sale_factory(1000))
        sales.add_sale(sale_factory(2000))
        data.flush()
        kv_store._data.pop(ledger_entry_key(1))

        reloaded = PosDataStore(kv_store, clock=clock)
        reloaded.load()
        SaleService(reloaded).add_sale(sale_factory(3000))
        reloaded.flush()

        assert kv_store.load(ledger_entry_key(2))["amount"] == "2000"
        assert kv_store.load(ledger_entry_key(3))["amount"] == "3000"
        assert kv_store.load(LEDGER_LENGTH_KEY) == 3

        again = PosDataStore(kv_store, clock=clock)
        again.load()
        assert [m.amount for m in again.ledger] == [Decimal("2000"), Decimal("3000")]

    def test_seed_demo_data_only_for_empty_store(self, data_store, kv_store):
        assert seed_demo_data(data_store) == len(DEMO_PRODUCTS)
        assert seed_demo_data(data_store) == 0

        data_store.flush()
        assert len(kv_store.load("test_products")) == len(DEMO_PRODUCTS)


class TestSystemAPI:

    def test_persistence_status_and_flush(self, client, data_store, sale_factory):
        SaleService(data_store).add_sale(sale_factory(1000))

        status = client.get("/api/v1/system/persistence").json()
        assert status["pending"] == 4
        assert status["ledger_entries"] == 1

        flushed = client.post("/api/v1/system/persistence/flush").json()
        assert flushed["written"] == 4
        assert flushed["failed"] == 0
        assert client.get("/api/v1/system/persistence").json()["pending"] == 0
