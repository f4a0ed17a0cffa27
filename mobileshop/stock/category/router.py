from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from mobileshop.database import get_db
from . import schemas, service
from mobileshop.users.permissions import require_auth
from mobileshop.users.schemas import UserDisplaySchema


router = APIRouter()

# ================= CREATE =================
@router.post(
    "/",
    response_model=schemas.CategoryOut,
    status_code=status.HTTP_201_CREATED
)
def create_category(
    category: schemas.CategoryCreate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.create_category(db, category)


# ================= LIST =================
@router.get(
    "/",
    response_model=List[schemas.CategoryOut]
)
def list_categories(
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.list_categories(db)


# ================= UPDATE =================
@router.put(
    "/{category_id}",
    response_model=schemas.CategoryOut
)
def update_category(
    category_id: int,
    category: schemas.CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.update_category(db, category_id, category)


# ================= DELETE =================
@router.delete(
    "/{category_id}"
)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.delete_category(db, category_id)
