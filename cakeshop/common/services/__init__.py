from .cake_service import CakeService
from .menu_service import MenuService
from .order_numbers import OrderNumberAllocator, format_order_number
from .order_service import OrderService
from .pricing_engine import CakeSelection, PriceQuote, PriceTable, PricingEngine, ToySelection
from .pricing_service import PricingService

__all__ = [
    "CakeSelection",
    "CakeService",
    "MenuService",
    "OrderNumberAllocator",
    "OrderService",
    "PriceQuote",
    "PriceTable",
    "PricingEngine",
    "PricingService",
    "ToySelection",
    "format_order_number",
]
