
from sqlalchemy import Column, Integer, Numeric, String
from .base import Base


class ExtraPricingRule(Base):
    """Named surcharge looked up by exact rule_name (e.g. "Eggless", "Fondant_2_4kg")."""

    __tablename__ = "extra_pricing_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rule_name = Column(String(128), nullable=False, unique=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    def to_dict(self):
        return {"rule_name": self.rule_name, "price": float(self.price or 0)}
