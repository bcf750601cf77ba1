# models/sale_items.py

from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)

    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)

    # "product" or "topping" (a topping sold on its own).
    # No foreign key: the line is a snapshot and outlives catalog edits.
    item_kind = Column(String, nullable=False)
    item_id = Column(Integer, nullable=False, index=True)
    item_name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    note = Column(String, nullable=False, default="")
    line_total = Column(Numeric(12, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    add_ons = relationship(
        "SaleItemAddOn",
        back_populates="sale_item",
        cascade="all, delete-orphan",
        order_by="SaleItemAddOn.id",
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_item_quantity_positive"),
        CheckConstraint("item_kind IN ('product', 'topping')", name="ck_sale_item_kind_valid"),
    )


class SaleItemAddOn(Base):
    __tablename__ = "sale_item_add_ons"

    id = Column(Integer, primary_key=True, index=True)

    sale_item_id = Column(
        Integer,
        ForeignKey("sale_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    add_on_id = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    sale_item = relationship("SaleItem", back_populates="add_ons")
