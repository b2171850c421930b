from __future__ import annotations

import typing as t

import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PersistentSettings(BaseSettings):
    database: DatabaseSettings


class DatabaseSettings(BaseSettings):
    """Relational store for candidate records.

    Production runs PostgreSQL through psycopg; the sqlite driver exists for
    tests, where `database` may be ":memory:".
    """

    driver: t.Literal["postgresql+psycopg", "sqlite+pysqlite"] = "postgresql+psycopg"
    host: p.IPvAnyAddress | str | None = None
    port: int | None = 5432
    database: str

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")
