from .base import Base
from .cake import CakeConfiguration
from .cake_option import CakeOption
from .daily_counter import DailyOrderCounter
from .menu_item import MenuItem
from .offer import Offer
from .order import Order
from .pricing_rule import ExtraPricingRule

__all__ = [
    "Base",
    "CakeConfiguration",
    "CakeOption",
    "DailyOrderCounter",
    "ExtraPricingRule",
    "MenuItem",
    "Offer",
    "Order",
]
