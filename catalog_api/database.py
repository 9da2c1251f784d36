from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from .config import DatabaseConfig
from .errors import translate_storage_error
from .models import metadata

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Fully buffered outcome of one statement; safe to use after the connection is returned."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    inserted_id: Optional[int] = None


class Database:
    """Owns the engine (and so the connection pool) for the lifetime of the app."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        engine = create_engine(
            config.url,
            pool_size=config.connection_limit,
            max_overflow=0,
            pool_pre_ping=True,
        )
        logger.info(
            "Connection pool created for %s@%s/%s (limit %d)",
            config.user,
            config.host,
            config.database,
            config.connection_limit,
        )
        return cls(engine)

    def execute(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> ExecutionResult:
        """Run a single statement in its own transaction.

        Raises:
            DuplicateEntryError: if the statement violated a unique constraint.
            StorageError: for any other database failure.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, parameters or {})
                inserted_id = None
                if getattr(statement, "is_insert", False):
                    inserted_id = result.inserted_primary_key[0]
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
                return ExecutionResult(rows=rows, rowcount=result.rowcount, inserted_id=inserted_id)
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc) from exc

    def ping(self) -> None:
        self.execute(text("SELECT 1"))

    def create_tables(self) -> None:
        try:
            metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc) from exc

    def shutdown(self) -> None:
        self.engine.dispose()
        logger.info("Connection pool closed")


def get_db(request: Request) -> Database:
    """Return the application's database; used as a FastAPI dependency."""
    return request.app.state.database
