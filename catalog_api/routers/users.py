from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status

from .. import crud, schemas
from ..database import Database, get_db
from ..errors import NotFoundError, storage_failures

router = APIRouter(prefix="/users", tags=["users"])

DUPLICATE_USER = "Email or username already exists"


@router.get("", response_model=schemas.Envelope[List[schemas.UserOut]])
def list_users(db: Database = Depends(get_db)):
    with storage_failures("fetching users", "Failed to fetch users"):
        users = crud.get_users(db)
    return schemas.Envelope(data=users)


@router.get("/{user_id}", response_model=schemas.Envelope[schemas.UserOut])
def get_user(user_id: str, db: Database = Depends(get_db)):
    uid = schemas.parse_id(user_id, "user")
    with storage_failures(f"fetching user {uid}", "Failed to fetch user"):
        user = crud.get_user(db, uid)
    if user is None:
        raise NotFoundError("User not found")
    return schemas.Envelope(data=user)


@router.post(
    "",
    response_model=schemas.Envelope[schemas.UserCreated],
    status_code=status.HTTP_201_CREATED,
)
def add_user(user_in: schemas.UserCreate, db: Database = Depends(get_db)):
    with storage_failures("creating user", "Failed to create user", conflict=DUPLICATE_USER):
        user_id = crud.create_user(db, user_in)
    return schemas.Envelope(data=schemas.UserCreated(user_id=user_id))


@router.put("/{user_id}", response_model=schemas.Envelope)
def modify_user(
    user_id: str,
    user_in: Optional[schemas.UserUpdate] = Body(None),
    db: Database = Depends(get_db),
):
    """Partially update a user; an empty body changes nothing and yields 404."""
    uid = schemas.parse_id(user_id, "user")
    with storage_failures(
        f"updating user {uid}", "Failed to update user", conflict=DUPLICATE_USER
    ):
        updated = crud.update_user(db, uid, user_in or schemas.UserUpdate())
    if not updated:
        raise NotFoundError("User not found or no changes made")
    return schemas.Envelope(message="User updated successfully")


@router.delete("/{user_id}", response_model=schemas.Envelope)
def remove_user(user_id: str, db: Database = Depends(get_db)):
    uid = schemas.parse_id(user_id, "user")
    with storage_failures(f"deleting user {uid}", "Failed to delete user"):
        deleted = crud.delete_user(db, uid)
    if not deleted:
        raise NotFoundError("User not found")
    return schemas.Envelope(message="User deleted successfully")
