from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from mobileshop.database import get_db
from mobileshop.users.permissions import require_auth
from mobileshop.users.schemas import UserDisplaySchema
from . import schemas, service


router = APIRouter()


@router.post("/", response_model=schemas.SaleCreated, status_code=status.HTTP_201_CREATED)
def create_sale_endpoint(
    sale_data: schemas.SaleCreate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    """
    Create a sale + all items in a single transaction.
    """
    record = schemas.SaleRecord(
        **sale_data.model_dump(exclude={"items"}),
        items=service.price_line_items(db, sale_data.items),
    )
    sale, warnings = service.create_sale(db, current_user, record)

    return schemas.SaleCreated(
        sale_id=sale.id,
        invoice_number=sale.invoice_number,
        subtotal=sale.subtotal,
        net_total=sale.net_total,
        total_profit=sale.total_profit,
        warnings=warnings,
    )


@router.get("/", response_model=List[schemas.SaleListItem])
def list_sales(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    phone: Optional[str] = None,
    invoice: Optional[str] = None,
    customer: Optional[str] = None,
    serial: Optional[str] = None,
    skip: int = 0,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.list_sales(
        db,
        start_date=start_date,
        end_date=end_date,
        on_date=on_date,
        phone=phone,
        invoice=invoice,
        customer=customer,
        serial=serial,
        skip=skip,
        limit=limit,
    )


@router.get("/invoice/{invoice_number}", response_model=schemas.SaleDetailOut)
def get_sale_by_invoice(
    invoice_number: str,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.get_sale_by_invoice_number(db, invoice_number)


@router.get("/{sale_id}", response_model=schemas.SaleDetailOut)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.get_sale(db, sale_id)


@router.get("/{sale_id}/returnable", response_model=List[schemas.ReturnableItemOut])
def get_returnable_items(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.get_returnable_items(db, sale_id)
