from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select

from . import models, schemas
from .database import Database
from .query import build_partial_update

Row = Dict[str, Any]


def _first(rows: List[Row]) -> Optional[Row]:
    return rows[0] if rows else None


# Context CRUD


def get_contexts(db: Database) -> List[Row]:
    stmt = select(models.contexts).order_by(models.contexts.c.context_id_no)
    return db.execute(stmt).rows


def get_context(db: Database, context_id: int) -> Optional[Row]:
    stmt = select(models.contexts).where(models.contexts.c.context_id_no == context_id)
    return _first(db.execute(stmt).rows)


# Product CRUD


def get_products(db: Database) -> List[Row]:
    stmt = select(models.products).order_by(models.products.c.product_id)
    return db.execute(stmt).rows


def get_active_products(db: Database) -> List[Row]:
    stmt = (
        select(models.products)
        .where(models.products.c.is_active.is_(True))
        .order_by(models.products.c.product_id)
    )
    return db.execute(stmt).rows


def get_product(db: Database, product_id: int) -> Optional[Row]:
    stmt = select(models.products).where(models.products.c.product_id == product_id)
    return _first(db.execute(stmt).rows)


def create_product(db: Database, product_in: schemas.ProductCreate) -> int:
    """Insert a product and return the id the database assigned to it.

    ``is_active`` and the timestamps are left to column defaults.
    """
    stmt = insert(models.products).values(
        name=product_in.name,
        description=product_in.description or None,
        price=product_in.price,
        stock_quantity=product_in.stock_quantity or 0,
    )
    return db.execute(stmt).inserted_id


def update_product(db: Database, product_id: int, product_in: schemas.ProductUpdate) -> bool:
    """Apply the fields present in ``product_in``.

    Returns:
        True if a row matched, False if the product does not exist or no
        fields were sent (in which case the database is not contacted).
    """
    stmt = build_partial_update(
        models.products,
        models.products.c.product_id,
        product_id,
        product_in.model_dump(exclude_unset=True),
        models.PRODUCT_MUTABLE_FIELDS,
    )
    if stmt is None:
        return False
    return db.execute(stmt).rowcount > 0


def delete_product(db: Database, product_id: int) -> bool:
    stmt = delete(models.products).where(models.products.c.product_id == product_id)
    return db.execute(stmt).rowcount > 0


# User CRUD


def get_users(db: Database) -> List[Row]:
    stmt = select(models.users).order_by(models.users.c.user_id)
    return db.execute(stmt).rows


def get_user(db: Database, user_id: int) -> Optional[Row]:
    stmt = select(models.users).where(models.users.c.user_id == user_id)
    return _first(db.execute(stmt).rows)


def get_user_by_email(db: Database, email: str) -> Optional[Row]:
    stmt = select(models.users).where(models.users.c.email == email)
    return _first(db.execute(stmt).rows)


def get_user_by_username(db: Database, username: str) -> Optional[Row]:
    stmt = select(models.users).where(models.users.c.username == username)
    return _first(db.execute(stmt).rows)


def create_user(db: Database, user_in: schemas.UserCreate) -> int:
    """Insert a user and return its new id.

    Raises:
        DuplicateEntryError: if the email or username is already taken.
    """
    stmt = insert(models.users).values(
        email=user_in.email,
        username=user_in.username,
        password_hash=user_in.password_hash,
        first_name=user_in.first_name or None,
        last_name=user_in.last_name or None,
    )
    return db.execute(stmt).inserted_id


def update_user(db: Database, user_id: int, user_in: schemas.UserUpdate) -> bool:
    stmt = build_partial_update(
        models.users,
        models.users.c.user_id,
        user_id,
        user_in.model_dump(exclude_unset=True),
        models.USER_MUTABLE_FIELDS,
    )
    if stmt is None:
        return False
    return db.execute(stmt).rowcount > 0


def delete_user(db: Database, user_id: int) -> bool:
    stmt = delete(models.users).where(models.users.c.user_id == user_id)
    return db.execute(stmt).rowcount > 0
