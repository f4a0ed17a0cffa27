from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class ReturnCreate(BaseModel):
    sale_id: int
    sale_item_id: int
    product_id: int
    quantity: int = Field(gt=0)
    reason: Optional[str] = None


class ReturnCreated(BaseModel):
    success: bool = True
    return_id: int
    return_amount: float
    return_profit: float


class ReturnOut(BaseModel):
    id: int
    sale_id: int
    sale_item_id: int
    product_id: int
    quantity: int
    return_amount: float
    return_profit: float
    reason: Optional[str] = None
    return_date: datetime
    created_by: Optional[int] = None

    # joined for display
    product_name: Optional[str] = None
    invoice_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
