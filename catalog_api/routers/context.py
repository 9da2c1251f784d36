from typing import List

from fastapi import APIRouter, Depends

from .. import crud, schemas
from ..database import Database, get_db
from ..errors import NotFoundError, storage_failures

router = APIRouter(prefix="/fetch-context", tags=["context"])


@router.get("", response_model=schemas.Envelope[List[schemas.ContextOut]])
def fetch_context(db: Database = Depends(get_db)):
    with storage_failures("fetching context", "Failed to fetch context data"):
        contexts = crud.get_contexts(db)
    return schemas.Envelope(data=contexts)


@router.get("/{context_id}", response_model=schemas.Envelope[schemas.ContextOut])
def fetch_context_by_id(context_id: str, db: Database = Depends(get_db)):
    cid = schemas.parse_id(context_id, "context")
    with storage_failures(f"fetching context {cid}", "Failed to fetch context data"):
        context = crud.get_context(db, cid)
    if context is None:
        raise NotFoundError("Context not found")
    return schemas.Envelope(data=context)
