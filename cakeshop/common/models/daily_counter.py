
from sqlalchemy import Column, Integer, String
from .base import Base


class DailyOrderCounter(Base):
    __tablename__ = "daily_order_counter"

    order_date = Column(String(10), primary_key=True)  # YYYY-MM-DD (UTC)
    counter = Column(Integer, nullable=False, default=1)
