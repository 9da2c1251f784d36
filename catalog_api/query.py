from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import Column, Table, update
from sqlalchemy.sql.dml import Update


def build_partial_update(
    table: Table,
    key_column: Column,
    key: Any,
    changes: Mapping[str, Any],
    fields: Sequence[str],
) -> Optional[Update]:
    """Build ``UPDATE <table> SET ... WHERE <key_column> = :key`` for the present fields.

    ``changes`` holds only the fields the caller actually supplied (an explicit
    ``None`` counts as supplied); keys outside ``fields`` are ignored.
    ``fields`` must list columns in table order, which is the order the SET
    clause is rendered in. Returns ``None`` when nothing is left to assign, so
    callers can skip the round-trip entirely.
    """
    assignments = {
        table.c[name]: changes[name] for name in fields if name in changes
    }
    if not assignments:
        return None

    return update(table).where(key_column == key).values(assignments)
