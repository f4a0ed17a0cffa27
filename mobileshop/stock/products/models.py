from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from mobileshop.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    serial_number = Column(String, nullable=True, index=True)
    condition = Column(String(10), nullable=False, default="new")

    # Supplier contact
    supplier_phone = Column(String, nullable=True)
    supplier_cnic = Column(String, nullable=True)

    purchase_price = Column(Float, nullable=False)
    selling_price = Column(Float, nullable=False)

    # Sales and returns move this through the inventory store only
    quantity = Column(Integer, nullable=False, default=0)

    pta_approved = Column(Boolean, nullable=False, default=False)
    warranty_days = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        CheckConstraint("condition IN ('new', 'used')", name="ck_products_condition"),
    )
