from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tienda.core.config import settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str) -> Engine:
    """Crear engine SQLAlchemy para la URL dada (postgres o sqlite)."""
    options = {"pool_pre_ping": True, "echo": settings.SQL_ECHO}
    if url.startswith("sqlite"):
        # La cola de persistencia escribe desde el hilo de background tasks
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = 10
        options["max_overflow"] = 20
    logger.debug(f"Creating engine for {url.split('@')[-1]}")
    return create_engine(url, **options)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine de la aplicación, creado de forma perezosa desde settings."""
    return build_engine(settings.sqlalchemy_url)


def build_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(
        bind=engine or get_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False
    )
