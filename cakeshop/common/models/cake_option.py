
from sqlalchemy import Column, Integer, Numeric, String, UniqueConstraint
from .base import Base


class CakeOption(Base):
    """One selectable attribute value (e.g. icing=Fondant) with its price."""

    __tablename__ = "cake_options"
    __table_args__ = (UniqueConstraint("option_type", "option_name", name="uq_cake_option"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    option_type = Column(String(32), nullable=False, index=True)  # weight / icing / flavor / cake_type / shape / toy / flower / photos
    option_name = Column(String(128), nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False, default=0)

    def to_dict(self):
        return {
            "option_type": self.option_type,
            "option_name": self.option_name,
            "base_price": float(self.base_price or 0),
        }
