
from sqlalchemy import Column, DateTime, JSON, Numeric, String, Text, func
from .base import Base


class CakeConfiguration(Base):
    __tablename__ = "cakes"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(10), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)  # as submitted by the client
    reference_image_url = Column(Text, nullable=True)
    delivery_time = Column(DateTime, nullable=False)
    customization = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
