from pydantic import BaseModel, ConfigDict, field_validator
from typing import Literal, Optional


Role = Literal["admin", "superuser"]


# -------- IDENTITY --------
class Identity(BaseModel):
    """The acting user, as the ledger needs it."""
    id: int
    role: Role

    @property
    def is_superuser(self) -> bool:
        return self.role == "superuser"


# -------- USERS --------
class UserSchema(BaseModel):
    username: str
    password: str
    role: Role = "admin"


class UserUpdateSchema(BaseModel):
    password: Optional[str] = None
    role: Optional[Role] = None


class UserDisplaySchema(Identity):
    username: str

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    id: int
    username: str
    role: Role
    access_token: str
    token_type: str = "bearer"
