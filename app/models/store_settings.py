# app/models/store_settings.py

from sqlalchemy import CheckConstraint, Column, Integer, String

from app.database import Base

STORE_SETTINGS_ID = 1


class StoreSettings(Base):
    __tablename__ = "store_settings"

    # Single row table, always id = STORE_SETTINGS_ID
    id = Column(Integer, primary_key=True, default=STORE_SETTINGS_ID)

    store_name = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    owner = Column(String, nullable=False, default="")
    logo_url = Column(String, nullable=False, default="")

    profit_percentage = Column(Integer, nullable=False, default=30)

    __table_args__ = (
        CheckConstraint(
            "profit_percentage >= 0 AND profit_percentage <= 100",
            name="ck_profit_percentage_range",
        ),
    )
