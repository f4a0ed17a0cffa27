from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from mobileshop.database import get_db
from mobileshop.users.permissions import require_superuser
from . import schemas, service


router = APIRouter()


@router.get("/stats", response_model=schemas.DashboardStats)
def dashboard_stats(
    start_date: Optional[date] = Query(None, description="Start of the period"),
    end_date: Optional[date] = Query(None, description="End of the period"),
    db: Session = Depends(get_db),
    current_user=Depends(require_superuser)
):
    """
    Sales, profit and expense totals for a period (Superuser only).
    """
    return service.dashboard_stats(db, start_date, end_date)


@router.get("/top-products", response_model=List[schemas.TopProduct])
def top_products(
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user=Depends(require_superuser)
):
    return service.top_products(db, limit=limit)


@router.get("/low-stock", response_model=List[schemas.LowStockProduct])
def low_stock(
    threshold: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user=Depends(require_superuser)
):
    return service.low_stock(db, threshold=threshold)
