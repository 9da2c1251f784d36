import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert
from sqlalchemy.pool import StaticPool

from catalog_api import models
from catalog_api.database import Database
from catalog_api.main import create_app

# In-memory SQLite database shared across connections via StaticPool.
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture()
def database():
    """Provide a fresh, empty database for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    db.create_tables()
    try:
        yield db
    finally:
        db.shutdown()


@pytest.fixture()
def client(database):
    """TestClient running the app (and its lifespan) against the test database."""
    app = create_app(database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_factory(database):
    """Insert users directly, bypassing the HTTP API."""

    def _create_user(email: str, username: str, password_hash: str = "hash", **extra) -> int:
        stmt = insert(models.users).values(
            email=email, username=username, password_hash=password_hash, **extra
        )
        return database.execute(stmt).inserted_id

    return _create_user


@pytest.fixture()
def product_factory(database):
    def _create_product(name: str, price: float, **extra) -> int:
        stmt = insert(models.products).values(name=name, price=price, **extra)
        return database.execute(stmt).inserted_id

    return _create_product


@pytest.fixture()
def context_factory(database):
    def _create_context(context_id: int, description=None) -> int:
        stmt = insert(models.contexts).values(
            context_id_no=context_id, context_desc=description
        )
        database.execute(stmt)
        return context_id

    return _create_context
