from pydantic import BaseModel, ConfigDict


class InventoryOut(BaseModel):
    product_id: int
    product_name: str
    category_name: str
    quantity: int
    purchase_price: float
    inventory_value: float  # Valuation of current stock at purchase price

    model_config = ConfigDict(from_attributes=True)


class InventoryListOut(BaseModel):
    inventory: list[InventoryOut]
    grand_total: float  # Total valuation of all inventory
