from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status

from .. import crud, schemas
from ..database import Database, get_db
from ..errors import NotFoundError, storage_failures

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=schemas.Envelope[List[schemas.ProductOut]])
def list_products(active_only: bool = False, db: Database = Depends(get_db)):
    """Return all products, or only the active ones with ``?active_only=true``."""
    with storage_failures("fetching products", "Failed to fetch products"):
        if active_only:
            products = crud.get_active_products(db)
        else:
            products = crud.get_products(db)
    return schemas.Envelope(data=products)


@router.get("/{product_id}", response_model=schemas.Envelope[schemas.ProductOut])
def get_product(product_id: str, db: Database = Depends(get_db)):
    pid = schemas.parse_id(product_id, "product")
    with storage_failures(f"fetching product {pid}", "Failed to fetch product"):
        product = crud.get_product(db, pid)
    if product is None:
        raise NotFoundError("Product not found")
    return schemas.Envelope(data=product)


@router.post(
    "",
    response_model=schemas.Envelope[schemas.ProductCreated],
    status_code=status.HTTP_201_CREATED,
)
def add_product(product_in: schemas.ProductCreate, db: Database = Depends(get_db)):
    with storage_failures("creating product", "Failed to create product"):
        product_id = crud.create_product(db, product_in)
    return schemas.Envelope(data=schemas.ProductCreated(product_id=product_id))


@router.put("/{product_id}", response_model=schemas.Envelope)
def modify_product(
    product_id: str,
    product_in: Optional[schemas.ProductUpdate] = Body(None),
    db: Database = Depends(get_db),
):
    pid = schemas.parse_id(product_id, "product")
    with storage_failures(f"updating product {pid}", "Failed to update product"):
        updated = crud.update_product(db, pid, product_in or schemas.ProductUpdate())
    if not updated:
        raise NotFoundError("Product not found or no changes made")
    return schemas.Envelope(message="Product updated successfully")


@router.delete("/{product_id}", response_model=schemas.Envelope)
def remove_product(product_id: str, db: Database = Depends(get_db)):
    pid = schemas.parse_id(product_id, "product")
    with storage_failures(f"deleting product {pid}", "Failed to delete product"):
        deleted = crud.delete_product(db, pid)
    if not deleted:
        raise NotFoundError("Product not found")
    return schemas.Envelope(message="Product deleted successfully")
