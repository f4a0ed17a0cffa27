from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from mobileshop.database import get_db
from mobileshop.stock.inventory import schemas, service
from mobileshop.users.permissions import require_auth
from mobileshop.users.schemas import UserDisplaySchema

router = APIRouter()


@router.get("/", response_model=schemas.InventoryListOut)
def list_inventory(
    skip: int = 0,
    limit: int = 100,
    product_id: Optional[int] = None,
    product_name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth),
):
    return service.list_inventory(
        db,
        skip=skip,
        limit=limit,
        product_id=product_id,
        product_name=product_name,
    )
