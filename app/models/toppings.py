# app/models/toppings.py

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from app.database import Base


class Topping(Base):
    __tablename__ = "toppings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    image_url = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_topping_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_topping_stock_non_negative"),
    )
