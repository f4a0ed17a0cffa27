from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Literal, Optional
from datetime import datetime


PaymentType = Literal["cash", "bank_transfer", "card"]
DiscountType = Literal["flat", "percentage"]


# ---------- Sale Item ----------
class SaleItemIn(BaseModel):
    """
    Line item as the register sends it. Price and profit snapshots may be
    left out; they are filled from the current product before the sale is
    recorded.
    """
    product_id: int
    product_name: Optional[str] = None
    quantity: int = Field(gt=0)
    unit_price: Optional[float] = Field(default=None, ge=0)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    line_total: Optional[float] = None
    profit: Optional[float] = None
    serial_imei: Optional[str] = None
    warranty_days: Optional[int] = Field(default=None, ge=0)
    remarks: Optional[str] = None


class SaleLineItem(BaseModel):
    """Fully priced line item; the ledger records these values as given."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    purchase_price: float
    line_total: float
    profit: float
    serial_imei: Optional[str] = None
    warranty_days: int = 0
    remarks: Optional[str] = ""


class SaleItemOut(BaseModel):
    id: int
    sale_id: int
    product_id: int
    product_name: str
    quantity: int
    returned_quantity: int
    unit_price: float
    purchase_price: float
    line_total: float
    profit: float
    serial_imei: Optional[str] = None
    warranty_days: int
    remarks: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ReturnableItemOut(BaseModel):
    sale_item_id: int
    product_id: int
    product_name: str
    quantity: int
    returned_quantity: int
    returnable_quantity: int
    unit_price: float


# ---------- Sale ----------
class SaleBase(BaseModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_cnic: Optional[str] = None
    payment_type: PaymentType = "cash"
    discount_amount: float = Field(default=0, ge=0)
    discount_type: Optional[DiscountType] = None

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == "percentage" and self.discount_amount > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class SaleCreate(SaleBase):
    items: List[SaleItemIn] = Field(min_length=1)


class SaleRecord(SaleBase):
    """What the ledger engine consumes."""
    items: List[SaleLineItem]


class SaleCreated(BaseModel):
    success: bool = True
    sale_id: int
    invoice_number: str
    subtotal: float
    net_total: float
    total_profit: float
    warnings: List[str] = []


class SaleOut(SaleBase):
    id: int
    invoice_number: str
    subtotal: float
    net_total: float
    total_profit: float
    sale_date: datetime
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class SaleListItem(SaleOut):
    serials: Optional[str] = None


class SaleDetailOut(SaleOut):
    items: List[SaleItemOut] = []
