from pydantic import BaseModel, ConfigDict
from typing import Optional


class DashboardStats(BaseModel):
    transactions: int
    total_sales: float
    total_profit: float
    total_expenses: float
    net_profit: float


class TopProduct(BaseModel):
    product_name: str
    total_sold: int
    revenue: float


class LowStockProduct(BaseModel):
    id: int
    name: str
    category_id: int
    category_name: Optional[str] = None
    quantity: int
    selling_price: float

    model_config = ConfigDict(from_attributes=True)
