from fastapi import APIRouter, Depends, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import List, Optional

from mobileshop.database import get_db
from mobileshop.users.permissions import require_auth
from mobileshop.users.schemas import UserDisplaySchema
from mobileshop.stock.products import schemas, service


router = APIRouter()


@router.post(
    "/",
    response_model=schemas.ProductOut,
    status_code=status.HTTP_201_CREATED
)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    db_product = service.create_product(db, product)
    return service.serialize_product(db_product)


@router.get("/", response_model=List[schemas.ProductOut])
def list_products(
    category_id: Optional[int] = None,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    products = service.get_products(db, category_id=category_id, name=name)
    return [service.serialize_product(p) for p in products]


@router.post("/import", response_model=schemas.ProductImportResult)
def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    """
    Bulk import products from an Excel sheet.
    """
    return service.import_products_from_excel(db, file.file, file.filename or "")


@router.get("/{product_id}", response_model=schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.serialize_product(service.get_product_by_id(db, product_id))


@router.put("/{product_id}", response_model=schemas.ProductOut)
def update_product(
    product_id: int,
    product: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    db_product = service.update_product(db, product_id, product)
    return service.serialize_product(db_product)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.delete_product(db, product_id)
