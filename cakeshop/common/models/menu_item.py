
from sqlalchemy import Boolean, Column, Integer, Numeric, String, Text
from .base import Base


MENU_DIETS = ("Veg", "Non-Veg")


class MenuItem(Base):
    __tablename__ = "menu"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    category = Column(String(64), nullable=False)
    diet = Column(String(16), nullable=False, default="Veg")
    stock_quantity = Column(Integer, nullable=True)
    parcel = Column(Numeric(12, 2), nullable=True)  # per-unit takeaway packing fee
