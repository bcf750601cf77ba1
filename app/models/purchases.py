# app/models/purchases.py

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.database import Base


class Purchase(Base):
    """Stock-in expense. Recorded for the profit report, stock is not touched."""

    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)

    item_name = Column(String, nullable=False)
    supplier = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False, default="")

    user_id = Column(Integer, nullable=False, index=True)
    user_name = Column(String, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_purchase_quantity_positive"),
        CheckConstraint("price >= 1", name="ck_purchase_price_positive"),
    )
