from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional


# =========================
# Base
# =========================
class ExpenseBase(BaseModel):
    description: str = Field(min_length=1)
    amount: float = Field(ge=0)
    expense_date: date


# =========================
# Create
# =========================
class ExpenseCreate(ExpenseBase):
    pass


# =========================
# Update
# =========================
class ExpenseUpdate(BaseModel):
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = Field(default=None, ge=0)
    expense_date: Optional[date] = None


# =========================
# Output
# =========================
class ExpenseOut(ExpenseBase):
    id: int
    created_at: datetime

    created_by: int | None
    created_by_username: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseListOut(BaseModel):
    total_expenses: float
    expenses: List[ExpenseOut]
