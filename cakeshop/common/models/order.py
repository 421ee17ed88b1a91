
from sqlalchemy import Column, DateTime, JSON, Numeric, String
from .base import Base


ORDER_STATUSES = ("placed", "preparing", "ready", "completed", "cancelled")
PAY_AT_COUNTER = "pay-at-counter"
TAKEAWAY = "TakeAway"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    order_number = Column(String(16), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(10), nullable=False, index=True)
    table_number = Column(String(32), nullable=False)
    items = Column(JSON, nullable=False)
    status = Column(String(32), nullable=False, default="placed")
    total = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)  # UTC
    payment = Column(String(32), nullable=False, default=PAY_AT_COUNTER)
