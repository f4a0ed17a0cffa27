from datetime import date
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session, joinedload

from mobileshop.errors import NotFoundError
from . import models, schemas


# =========================
# Helper: serialize expense
# =========================
def serialize_expense(expense: models.Expense):
    return {
        "id": expense.id,
        "description": expense.description,
        "amount": expense.amount,
        "expense_date": expense.expense_date,
        "created_at": expense.created_at,
        "created_by": expense.created_by,
        "created_by_username": (
            expense.creator.username
            if expense.creator
            else None
        ),
    }


def _get_expense(db: Session, expense_id: int) -> models.Expense:
    expense = (
        db.query(models.Expense)
        .options(joinedload(models.Expense.creator))
        .filter(models.Expense.id == expense_id)
        .first()
    )

    if not expense:
        raise NotFoundError("Expense not found")

    return expense


# =========================
# Create Expense
# =========================
def create_expense(
    db: Session,
    expense: schemas.ExpenseCreate,
    user_id: int
):
    new_expense = models.Expense(
        description=expense.description.strip(),
        amount=expense.amount,
        expense_date=expense.expense_date,
        created_by=user_id
    )

    db.add(new_expense)
    db.commit()
    db.refresh(new_expense)
    logger.info(f"Expense {new_expense.id} recorded: {new_expense.amount}")

    return serialize_expense(new_expense)


# =========================
# List Expenses
# =========================
def list_expenses(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    query = db.query(models.Expense).options(joinedload(models.Expense.creator))

    if start_date:
        query = query.filter(models.Expense.expense_date >= start_date)

    if end_date:
        query = query.filter(models.Expense.expense_date <= end_date)

    expenses = (
        query
        .order_by(models.Expense.expense_date.desc(), models.Expense.id.desc())
        .all()
    )

    total_expenses = sum(exp.amount for exp in expenses)

    return {
        "total_expenses": total_expenses,
        "expenses": [serialize_expense(exp) for exp in expenses],
    }


# =========================
# Get Expense by ID
# =========================
def get_expense_by_id(db: Session, expense_id: int):
    return serialize_expense(_get_expense(db, expense_id))


# =========================
# Update Expense
# =========================
def update_expense(
    db: Session,
    expense_id: int,
    expense_data: schemas.ExpenseUpdate
):
    expense = _get_expense(db, expense_id)

    data = expense_data.model_dump(exclude_unset=True)

    if "description" in data:
        expense.description = data["description"].strip()

    if "amount" in data:
        expense.amount = data["amount"]

    if "expense_date" in data:
        expense.expense_date = data["expense_date"]

    db.commit()
    db.refresh(expense)

    return serialize_expense(expense)


# =========================
# Delete Expense
# =========================
def delete_expense(db: Session, expense_id: int):
    expense = _get_expense(db, expense_id)

    db.delete(expense)
    db.commit()
    logger.info(f"Expense {expense_id} deleted")

    return {"success": True}
