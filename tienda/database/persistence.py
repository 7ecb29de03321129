"""
Cola de persistencia (append-then-flush)

El estado en memoria es la fuente de verdad durante la vida del proceso.
Cada mutación encola la instantánea de la colección afectada (o la entrada
nueva del libro de caja) y `flush()` la escribe en el KeyValueStore.

Reglas:
- Un fallo al guardar se registra en el log y en el canal de resultados,
  nunca revierte el estado en memoria.
- No hay reintentos automáticos.
- Si una clave se encola varias veces antes del flush, sólo se escribe el
  último valor, en la posición de su último encolado.
"""
import logging
import threading
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PersistResult:
    key: str
    ok: bool
    error: Optional[str] = None
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict:
        return {"key": self.key, "ok": self.ok, "error": self.error, "at": self.at.isoformat()}


class PersistenceQueue:
    """Cola de escrituras pendientes con canal de resultados"""

    def __init__(self, kv_store, history_size: int = 50):
        self.kv_store = kv_store
        self._pending: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self.results: Deque[PersistResult] = deque(maxlen=history_size)
        self.failures: Deque[PersistResult] = deque(maxlen=history_size)
        self._listeners: List[Callable[[PersistResult], None]] = []

    def enqueue(self, key: str, value: Any) -> None:
        with self._lock:
            self._pending.pop(key, None)
            self._pending[key] = value

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def pending_keys(self) -> List[str]:
        with self._lock:
            return list(self._pending.keys())

    def subscribe(self, listener: Callable[[PersistResult], None]) -> None:
        """Registrar un observador que recibe cada PersistResult"""
        self._listeners.append(listener)

    def flush(self) -> List[PersistResult]:
        """Escribir todas las entradas pendientes en orden de encolado"""
        with self._flush_lock:
            with self._lock:
                batch = list(self._pending.items())
                self._pending.clear()

            if not batch:
                return []

            results = [self._write(key, value) for key, value in batch]
            failed = sum(1 for r in results if not r.ok)
            if failed:
                logger.warning(f"Persistence flush finished with {failed}/{len(results)} failed writes")
            else:
                logger.debug(f"Persistence flush wrote {len(results)} keys")
            return results

    def _write(self, key: str, value: Any) -> PersistResult:
        try:
            ok = bool(self.kv_store.save(key, value))
            result = PersistResult(key=key, ok=ok, error=None if ok else "save() returned False")
        except Exception as e:
            logger.error(f"Error persisting {key}: {e}")
            result = PersistResult(key=key, ok=False, error=str(e))

        self.results.append(result)
        if not result.ok:
            self.failures.append(result)

        for listener in self._listeners:
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Persistence listener failed for {key}: {e}")
        return result

    def drain_failures(self) -> List[PersistResult]:
        """Devolver y limpiar los fallos registrados"""
        with self._lock:
            failures = list(self.failures)
            self.failures.clear()
        return failures
