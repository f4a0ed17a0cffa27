from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from mobileshop.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(40), unique=True, nullable=False, index=True)

    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    customer_cnic = Column(String, nullable=True)

    payment_type = Column(String(20), nullable=False, default="cash")

    subtotal = Column(Float, nullable=False)
    discount_amount = Column(Float, nullable=False, default=0)
    discount_type = Column(String(20), nullable=True)

    # Both move down with every processed return
    net_total = Column(Float, nullable=False)
    total_profit = Column(Float, nullable=False)

    sale_date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    created_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    returns = relationship("Return", back_populates="sale", order_by="Return.id")

    user = relationship("User")

    __table_args__ = (
        CheckConstraint(
            "payment_type IN ('cash', 'bank_transfer', 'card')",
            name="ck_sales_payment_type"
        ),
        CheckConstraint(
            "discount_type IS NULL OR discount_type IN ('flat', 'percentage')",
            name="ck_sales_discount_type"
        ),
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(
        Integer,
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # Snapshots taken at sale time, never recomputed from the product
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    returned_quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Float, nullable=False)
    purchase_price = Column(Float, nullable=False)
    line_total = Column(Float, nullable=False)
    profit = Column(Float, nullable=False)

    serial_imei = Column(String, nullable=True, index=True)
    warranty_days = Column(Integer, nullable=False, default=0)
    remarks = Column(String, nullable=True, default="")

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_items_quantity"),
        CheckConstraint(
            "returned_quantity >= 0 AND returned_quantity <= quantity",
            name="ck_sale_items_returned_quantity"
        ),
    )

    @property
    def returnable_quantity(self) -> int:
        return self.quantity - (self.returned_quantity or 0)
