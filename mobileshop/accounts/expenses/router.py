from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional

from datetime import date

from mobileshop.database import get_db
from . import schemas, service

from mobileshop.users.permissions import require_superuser
from mobileshop.users import schemas as user_schemas


router = APIRouter()


@router.post("/", response_model=schemas.ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense: schemas.ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: user_schemas.UserDisplaySchema = Depends(require_superuser)
):
    return service.create_expense(
        db,
        expense,
        user_id=current_user.id
    )


@router.get("/", response_model=schemas.ExpenseListOut)
def list_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: user_schemas.UserDisplaySchema = Depends(require_superuser)
):
    return service.list_expenses(
        db,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{expense_id}", response_model=schemas.ExpenseOut)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: user_schemas.UserDisplaySchema = Depends(require_superuser)
):
    return service.get_expense_by_id(db, expense_id)


@router.put("/{expense_id}", response_model=schemas.ExpenseOut)
def update_expense(
    expense_id: int,
    expense: schemas.ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: user_schemas.UserDisplaySchema = Depends(require_superuser)
):
    return service.update_expense(db, expense_id, expense)


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: user_schemas.UserDisplaySchema = Depends(require_superuser)
):
    return service.delete_expense(db, expense_id)
