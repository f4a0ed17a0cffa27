from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import datetime


Condition = Literal["new", "used"]


# -------------------------------
# Base
# -------------------------------
class ProductBase(BaseModel):
    category_id: int
    name: str = Field(min_length=1)
    description: Optional[str] = None
    serial_number: Optional[str] = None
    condition: Condition = "new"
    supplier_phone: Optional[str] = None
    supplier_cnic: Optional[str] = None
    purchase_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)
    quantity: int = Field(default=0, ge=0)
    pta_approved: bool = False
    warranty_days: int = Field(default=0, ge=0)


# -------------------------------
# Create
# -------------------------------
class ProductCreate(ProductBase):
    pass


# -------------------------------
# Update
# -------------------------------
class ProductUpdate(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    serial_number: Optional[str] = None
    condition: Optional[Condition] = None
    supplier_phone: Optional[str] = None
    supplier_cnic: Optional[str] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    pta_approved: Optional[bool] = None
    warranty_days: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------
# Output Schema
# ---------------------------------
class ProductOut(ProductBase):
    id: int
    category_name: Optional[str] = None  # category NAME, not object
    quantity: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductImportResult(BaseModel):
    message: str
    imported: int
    skipped: int
