"""
Almacenamiento clave-valor del POS

El núcleo sólo necesita dos operaciones: `load(key)` y `save(key, value)`.
Los valores son estructuras JSON (listas/dicts de modelos serializados).

Implementaciones:
- InMemoryKeyValueStore: modo offline, los datos viven en el proceso
- SQLKeyValueStore: tabla `kv_entries` vía SQLAlchemy (postgres o sqlite)
"""
import json
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import Column, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tienda.common.mixins import TimestampMixin
from tienda.database.database import Base, build_engine, build_session_factory, get_engine

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, value: Any) -> bool:
        ...


class KeyValueEntry(Base, TimestampMixin):
    """Una entrada del almacenamiento clave-valor"""
    __tablename__ = "kv_entries"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)


class InMemoryKeyValueStore:
    """
    Almacenamiento en memoria.

    Guarda los valores como JSON para que cada `load` devuelva una copia
    independiente, igual que un almacenamiento real.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
            return True
        except (TypeError, ValueError) as e:
            logger.error(f"Value for key {key} is not JSON serializable: {e}")
            return False

    def keys(self):
        return list(self._data.keys())


class SQLKeyValueStore:
    """Almacenamiento clave-valor sobre una tabla SQL"""

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            engine = build_engine(url) if url else get_engine()
        self.engine = engine
        Base.metadata.create_all(bind=self.engine, tables=[KeyValueEntry.__table__])
        self.SessionLocal = build_session_factory(self.engine)

    def load(self, key: str) -> Optional[Any]:
        try:
            with self.SessionLocal() as db:
                entry = db.get(KeyValueEntry, key)
                return json.loads(entry.value) if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Database error loading {key}: {e}")
            return None

    def save(self, key: str, value: Any) -> bool:
        payload = json.dumps(value)
        try:
            with self.SessionLocal() as db:
                entry = db.get(KeyValueEntry, key)
                if entry:
                    entry.value = payload
                else:
                    db.add(KeyValueEntry(key=key, value=payload))
                db.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database error saving {key}: {e}")
            return False
