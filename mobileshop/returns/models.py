from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from mobileshop.database import Base


class Return(Base):
    __tablename__ = "returns"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    sale_item_id = Column(Integer, ForeignKey("sale_items.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    return_amount = Column(Float, nullable=False)
    return_profit = Column(Float, nullable=False)
    reason = Column(String, nullable=True)

    return_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    created_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    sale = relationship("Sale", back_populates="returns")
    sale_item = relationship("SaleItem")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_returns_quantity"),
    )
