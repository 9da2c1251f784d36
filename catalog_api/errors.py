import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

MYSQL_DUPLICATE_ENTRY = 1062
SQLSTATE_UNIQUE_VIOLATION = "23505"


# Storage layer


class StorageError(Exception):
    """Raised by the database layer for any driver or pool failure."""


class DuplicateEntryError(StorageError):
    """A write violated a unique constraint."""


def is_duplicate_entry(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    orig = exc.orig
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    if getattr(orig, "sqlstate", None) == SQLSTATE_UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


def translate_storage_error(exc: SQLAlchemyError) -> StorageError:
    if is_duplicate_entry(exc):
        return DuplicateEntryError(str(exc.orig))
    return StorageError(f"{type(exc).__name__}: {exc}")


# API layer


class ApiError(Exception):
    """An error with a client-safe message, rendered as a failure envelope."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class ServiceUnavailableError(ApiError):
    status_code = 503


@contextmanager
def storage_failures(
    action: str, failure: str, conflict: Optional[str] = None
) -> Iterator[None]:
    """Turn storage errors raised inside the block into API errors.

    Duplicate entries become a 409 when a ``conflict`` message is given, every
    other storage failure becomes a 500 carrying ``failure``. The original
    exception is logged but never sent to the client.
    """
    try:
        yield
    except DuplicateEntryError as exc:
        if conflict is None:
            logger.exception("Error %s", action)
            raise ApiError(failure) from exc
        logger.warning("Duplicate entry while %s: %s", action, exc)
        raise ConflictError(conflict) from exc
    except StorageError as exc:
        logger.exception("Error %s", action)
        raise ApiError(failure) from exc
