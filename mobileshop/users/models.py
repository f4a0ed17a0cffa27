from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from mobileshop.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="admin")
    created_at = Column(DateTime, default=datetime.utcnow)

    expenses = relationship(
        "Expense",
        back_populates="creator"
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'superuser')", name="ck_users_role"),
    )
