from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pydantic import field_validator

class Settings(BaseSettings):
    APP_NAME: str = 'Tienda POS'

    # Storage backend: "memory" (offline, lost on restart) or "database"
    STORAGE_BACKEND: str = 'memory'
    KV_KEY_PREFIX: str = 'tienda_'

    # Database settings (used when STORAGE_BACKEND == "database")
    POSTGRES_USER: str = 'tienda_user'
    POSTGRES_PASSWORD: str = 'tienda_pass'
    POSTGRES_DB: str = 'tienda_db'
    POSTGRES_HOST: str = 'postgres'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # Overrides POSTGRES_* (e.g. sqlite:///./tienda.db)
    SQL_ECHO: bool = False

    # Persistence queue
    AUTO_FLUSH: bool = False
    PERSISTENCE_FAILURE_HISTORY: int = 50

    # Business rules
    ENFORCE_SINGLE_OPEN_REGISTER: bool = True
    TIMEZONE: str = 'America/Bogota'

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Demo data for empty stores
    SEED_DEMO_DATA: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.DATABASE_URL or self.database_url

    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("DEBUG", "SQL_ECHO", "AUTO_FLUSH", "ENFORCE_SINGLE_OPEN_REGISTER", "SEED_DEMO_DATA", mode="before")
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.lower().strip('"').strip("'") in ("true", "1", "yes", "on")
        return bool(v)

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v):
        backend = str(v).lower().strip()
        if backend not in ("memory", "database"):
            raise ValueError("STORAGE_BACKEND debe ser 'memory' o 'database'")
        return backend

settings = Settings()
