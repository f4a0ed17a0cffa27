from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime


# ================= CREATE =================
class CategoryCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Category name is required")
        return v.strip()


# ================= UPDATE =================
class CategoryUpdate(CategoryCreate):
    pass


# ================= RESPONSE =================
class CategoryOut(BaseModel):
    id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
