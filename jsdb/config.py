"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Protection lists always contain the reserved metadata table
    - testing_mode redirects the store to test.jsdb; otherwise main.jsdb
    - get_settings() is cached (lru_cache): single instance per process,
      but the core only ever sees the instance it is handed

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - JSDB_ prefix so the store can live inside a larger application's environment
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jsdb.core.domain_types import RESERVED_TABLE


class Settings(BaseSettings):
    """Store settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JSDB_", env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Storage
    data_dir: Path = Path("var/data")
    testing_mode: bool = False

    # Protection; the validator below re-adds the reserved table
    read_protected_tables: list[str] = [RESERVED_TABLE]
    write_protected_tables: list[str] = [RESERVED_TABLE]

    @field_validator("read_protected_tables", "write_protected_tables")
    @classmethod
    def keep_reserved_table(cls, v: list[str]) -> list[str]:
        """The metadata table is never readable or writable through queries."""
        if RESERVED_TABLE not in v:
            return [RESERVED_TABLE, *v]
        return v

    # Locking
    lock_stale_seconds: float = 10
    lock_poll_seconds: float = 1

    # Query semantics
    fold_all_clauses: bool = False

    # Observability
    debug_mode: bool = False
    logging_enabled: bool = True
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def database_file(self) -> Path:
        name = "test.jsdb" if self.testing_mode else "main.jsdb"
        return self.data_dir / name

    @property
    def lock_file(self) -> Path:
        return self.data_dir / "jsdb.lock"

    def is_read_protected(self, table: str) -> bool:
        return table in self.read_protected_tables

    def is_write_protected(self, table: str) -> bool:
        return table in self.write_protected_tables


@lru_cache
def get_settings() -> Settings:
    return Settings()
