from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from mobileshop.database import get_db
from mobileshop.users.permissions import require_auth
from mobileshop.users.schemas import UserDisplaySchema
from . import schemas, service


router = APIRouter()


@router.post("/", response_model=schemas.ReturnCreated, status_code=status.HTTP_201_CREATED)
def create_return(
    return_data: schemas.ReturnCreate,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    sale_return = service.create_return(db, current_user, return_data)
    return schemas.ReturnCreated(
        return_id=sale_return.id,
        return_amount=sale_return.return_amount,
        return_profit=sale_return.return_profit,
    )


@router.get("/", response_model=List[schemas.ReturnOut])
def list_returns(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    invoice: Optional[str] = None,
    phone: Optional[str] = None,
    customer: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserDisplaySchema = Depends(require_auth)
):
    return service.list_returns(
        db,
        start_date=start_date,
        end_date=end_date,
        invoice=invoice,
        phone=phone,
        customer=customer,
    )
