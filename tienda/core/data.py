"""
Estado compartido del POS

PosDataStore reúne las colecciones (productos, ventas, gastos, separados,
cajas) y el libro de caja en un único objeto que se inyecta a los servicios.
Es el dueño de la persistencia: los servicios mutan las colecciones y luego
llaman `persist(...)` / `append_movement(...)`, que encolan la escritura.

Persistencia:
- Colecciones: instantánea completa por clave (`products`, `sales`, ...)
- Libro de caja: una clave por entrada (`ledger:00000001`, ...) más
  `ledger:length`; nunca se reescribe el libro completo.
"""
import logging
from typing import Dict, List, Optional, Tuple

from tienda.core.clock import Clock, SystemClock
from tienda.core.config import settings
from tienda.database.kv_store import InMemoryKeyValueStore, KeyValueStore, SQLKeyValueStore
from tienda.database.persistence import PersistenceQueue, PersistResult
from tienda.modules.expenses.models import DEFAULT_EXPENSE_CATEGORIES, Expense
from tienda.modules.layaways.models import Layaway
from tienda.modules.ledger.models import CashMovement
from tienda.modules.ledger.store import LedgerStore
from tienda.modules.products.models import Product
from tienda.modules.registers.models import CashRegister
from tienda.modules.sales.models import Sale

logger = logging.getLogger(__name__)

LEDGER_LENGTH_KEY = "ledger:length"


def ledger_entry_key(sequence: int) -> str:
    return f"ledger:{sequence:08d}"


class PosDataStore:
    """Colecciones del POS con persistencia optimista"""

    COLLECTIONS = ("products", "sales", "expenses", "expense_categories", "layaways", "cash_registers")

    def __init__(
        self,
        kv_store: KeyValueStore,
        clock: Optional[Clock] = None,
        key_prefix: str = "",
        auto_flush: bool = False,
        enforce_single_open_register: bool = True,
        failure_history: int = 50
    ):
        self.kv_store = kv_store
        self.clock = clock or SystemClock()
        self.key_prefix = key_prefix
        self.auto_flush = auto_flush
        self.enforce_single_open_register = enforce_single_open_register
        self.persistence = PersistenceQueue(kv_store, history_size=failure_history)

        self.products: Dict[str, Product] = {}
        self.sales: List[Sale] = []
        self.expenses: List[Expense] = []
        self.expense_categories: List[str] = list(DEFAULT_EXPENSE_CATEGORIES)
        self.layaways: Dict[str, Layaway] = {}
        self.cash_registers: Dict[str, CashRegister] = {}
        self.ledger = LedgerStore()
        self._ledger_sequence = 0

    # ===== CARGA =====

    def _key(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    def load(self) -> None:
        """Cargar todas las colecciones desde el KeyValueStore"""
        products = self.kv_store.load(self._key("products"))
        if products is not None:
            self.products = {p.id: p for p in (Product.model_validate(item) for item in products)}

        sales = self.kv_store.load(self._key("sales"))
        if sales is not None:
            self.sales = [Sale.model_validate(item) for item in sales]

        expenses = self.kv_store.load(self._key("expenses"))
        if expenses is not None:
            self.expenses = [Expense.model_validate(item) for item in expenses]

        categories = self.kv_store.load(self._key("expense_categories"))
        if categories is not None:
            self.expense_categories = list(categories)

        layaways = self.kv_store.load(self._key("layaways"))
        if layaways is not None:
            self.layaways = {l.id: l for l in (Layaway.model_validate(item) for item in layaways)}

        registers = self.kv_store.load(self._key("cash_registers"))
        if registers is not None:
            self.cash_registers = {r.id: r for r in (CashRegister.model_validate(item) for item in registers)}

        self.ledger, self._ledger_sequence = self._load_ledger()

        logger.info(
            f"Data loaded: {len(self.products)} products, {len(self.sales)} sales, "
            f"{len(self.expenses)} expenses, {len(self.cash_registers)} cash registers, "
            f"{len(self.ledger)} ledger entries"
        )

    def _load_ledger(self) -> Tuple[LedgerStore, int]:
        """Leer el libro entrada por entrada; la secuencia sigue a `ledger:length` aunque falten entradas"""
        length = int(self.kv_store.load(self._key(LEDGER_LENGTH_KEY)) or 0)
        ledger = LedgerStore()
        for sequence in range(1, length + 1):
            raw = self.kv_store.load(self._key(ledger_entry_key(sequence)))
            if raw is None:
                logger.warning(f"Ledger entry {sequence} missing from storage, skipping")
                continue
            ledger.append(CashMovement.model_validate(raw))
        return ledger, length

    # ===== PERSISTENCIA =====

    def snapshot(self, name: str):
        if name == "products":
            return [p.model_dump(mode="json") for p in self.products.values()]
        if name == "sales":
            return [s.model_dump(mode="json") for s in self.sales]
        if name == "expenses":
            return [e.model_dump(mode="json") for e in self.expenses]
        if name == "expense_categories":
            return list(self.expense_categories)
        if name == "layaways":
            return [l.model_dump(mode="json") for l in self.layaways.values()]
        if name == "cash_registers":
            return [r.model_dump(mode="json") for r in self.cash_registers.values()]
        raise KeyError(f"Unknown collection: {name}")

    def persist(self, *names: str) -> None:
        """Encolar la instantánea de las colecciones indicadas"""
        for name in names:
            self.persistence.enqueue(self._key(name), self.snapshot(name))
        self._after_mutation()

    def append_movement(self, movement: CashMovement) -> CashMovement:
        """Agregar al libro de caja y encolar sólo la entrada nueva"""
        self.ledger.append(movement)
        self._ledger_sequence += 1
        sequence = self._ledger_sequence
        self.persistence.enqueue(self._key(ledger_entry_key(sequence)), movement.model_dump(mode="json"))
        self.persistence.enqueue(self._key(LEDGER_LENGTH_KEY), sequence)
        self._after_mutation()
        return movement

    def flush(self) -> List[PersistResult]:
        return self.persistence.flush()

    def _after_mutation(self) -> None:
        if self.auto_flush:
            self.flush()


def create_data_store(clock: Optional[Clock] = None) -> PosDataStore:
    """Construir el PosDataStore según settings.STORAGE_BACKEND y cargar datos"""
    if settings.STORAGE_BACKEND == "database":
        kv_store = SQLKeyValueStore(settings.sqlalchemy_url)
    else:
        kv_store = InMemoryKeyValueStore()

    data = PosDataStore(
        kv_store,
        clock=clock,
        key_prefix=settings.KV_KEY_PREFIX,
        auto_flush=settings.AUTO_FLUSH,
        enforce_single_open_register=settings.ENFORCE_SINGLE_OPEN_REGISTER,
        failure_history=settings.PERSISTENCE_FAILURE_HISTORY
    )
    data.load()

    if settings.SEED_DEMO_DATA and not data.products:
        from tienda.core.seed import seed_demo_data
        seed_demo_data(data)

    logger.info(f"Data store ready (backend={settings.STORAGE_BACKEND})")
    return data
