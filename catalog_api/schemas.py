from datetime import datetime
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from .errors import ClientInputError

DataT = TypeVar("DataT")

# Largest signed 64-bit integer; bigger ids cannot be bound by the drivers.
MAX_ID = 2**63 - 1

# Finite JSON numbers only; "9.99" as a string is rejected.
Price = Annotated[float, Field(ge=0, strict=True, allow_inf_nan=False)]
Quantity = Annotated[int, Field(ge=0)]


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


# ----- Envelope -----


class Envelope(BaseModel, Generic[DataT]):
    """Uniform response body: ``{success, data?, message?, error?}``."""

    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @model_serializer(mode="wrap")
    def drop_empty_keys(self, handler) -> Dict[str, Any]:
        # Only the envelope's own keys; nulls inside ``data`` are kept.
        return {key: value for key, value in handler(self).items() if value is not None}


class ValidationResult(BaseModel):
    loc: str
    msg: str


# ----- Context Schemas -----


class ContextOut(BaseModel):
    context_id_no: int
    context_desc: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ----- Product Schemas -----


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Price
    description: Optional[str] = None
    stock_quantity: Optional[Quantity] = None


class ProductUpdate(BaseModel):
    """Every field optional; only the ones sent are written."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Price] = None
    stock_quantity: Optional[Quantity] = None
    is_active: Optional[bool] = None

    @field_validator("name", "price", "stock_quantity", "is_active")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class ProductCreated(BaseModel):
    product_id: int


class ProductOut(BaseModel):
    product_id: int
    name: str
    description: Optional[str] = None
    price: float
    stock_quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ----- User Schemas -----


class UserCreate(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=100)
    password_hash: str = Field(..., min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class UserUpdate(BaseModel):
    email: Optional[str] = Field(None, min_length=1, max_length=255)
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password_hash: Optional[str] = Field(None, min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None

    @field_validator("email", "username", "password_hash", "is_active")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class UserCreated(BaseModel):
    user_id: int


class UserOut(BaseModel):
    user_id: int
    email: str
    username: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


def format_errors(errors: List[Dict[str, Any]]) -> List[ValidationResult]:
    return [
        ValidationResult(loc=".".join(str(p) for p in error["loc"]), msg=error["msg"])
        for error in errors
    ]


def parse_id(raw: str, entity: str) -> int:
    """Parse a path identifier; only positive decimal integers are accepted."""
    if raw.isascii() and raw.isdigit():
        value = int(raw)
        if 0 < value <= MAX_ID:
            return value
    raise ClientInputError(f"Invalid {entity} ID")
