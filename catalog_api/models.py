from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    FetchedValue,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    text,
)

metadata = MetaData()


def _timestamps():
    # updated_at is maintained by the database (ON UPDATE CURRENT_TIMESTAMP in
    # the production schema); the application never writes either column.
    return (
        Column("created_at", DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")),
        Column(
            "updated_at",
            DateTime,
            nullable=False,
            server_default=text("CURRENT_TIMESTAMP"),
            server_onupdate=FetchedValue(),
        ),
    )


users = Table(
    "user",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("first_name", String(100), nullable=True),
    Column("last_name", String(100), nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=text("1")),
    *_timestamps(),
)

products = Table(
    "product",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("price", Numeric(10, 2, asdecimal=False), nullable=False),
    Column("stock_quantity", Integer, nullable=False, server_default=text("0")),
    Column("is_active", Boolean, nullable=False, server_default=text("1")),
    *_timestamps(),
)

# Read-only lookup table
contexts = Table(
    "context",
    metadata,
    Column("context_id_no", Integer, primary_key=True, autoincrement=False),
    Column("context_desc", String(255), nullable=True),
)

# Column order used for partial updates.
USER_MUTABLE_FIELDS = (
    "email",
    "username",
    "password_hash",
    "first_name",
    "last_name",
    "is_active",
)
PRODUCT_MUTABLE_FIELDS = (
    "name",
    "description",
    "price",
    "stock_quantity",
    "is_active",
)
