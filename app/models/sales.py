# models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    # Snapshot of the acting cashier, kept even if the user is deleted later
    cashier_id = Column(Integer, nullable=False, index=True)
    cashier_name = Column(String, nullable=False)

    total = Column(Numeric(12, 2), nullable=False)

    payment_method = Column(String, nullable=False)
    cash_amount = Column(Numeric(12, 2), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Double submit protection for one cart
    request_id = Column(String, nullable=True, unique=True)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("ix_sales_cashier_created", "cashier_id", "created_at"),
        CheckConstraint("total >= 0", name="ck_sale_total_non_negative"),
        CheckConstraint(
            "cash_amount IS NULL OR cash_amount >= total",
            name="ck_sale_cash_covers_total",
        ),
    )

    @property
    def change_due(self):
        if self.payment_method == "cash" and self.cash_amount is not None:
            return max(self.cash_amount - self.total, 0)
        return 0
