"""Sample option, rule and menu rows for a fresh database."""

from uuid import uuid4

from ..models.cake_option import CakeOption
from ..models.menu_item import MenuItem
from ..models.offer import Offer
from ..models.pricing_rule import ExtraPricingRule


CAKE_OPTIONS = [
    ("weight", "0.5", 0), ("weight", "1", 0), ("weight", "1.5", 0), ("weight", "2", 0),
    ("weight", "3", 0), ("weight", "4", 0), ("weight", "5", 0),
    ("icing", "Whipped Cream", 0), ("icing", "Butter Cream", 0),
    ("icing", "Fondant", 0), ("icing", "Semi-Fondant", 0),
    ("flavor", "Vanilla", 500), ("flavor", "Chocolate", 600), ("flavor", "Black Forest", 600),
    ("flavor", "Red Velvet", 800),
    ("cake_type", "Regular Cake", 0), ("cake_type", "Theme Cake", 300),
    ("cake_type", "Step Cake / Tier Cake", 500),
    ("shape", "Round", 0), ("shape", "Square", 0), ("shape", "Heart", 150),
    ("shape", "Number / Alphabet", 250), ("shape", "Custom Shape", 200),
    ("toy", "Edible Toys", 120), ("toy", "Cartoon Figurine", 200),
    ("flower", "General Flower", 50),
]

PRICING_RULES = [
    ("Eggless", 100),
    ("Photo Cake", 250),
    ("Fondant_1_1.5kg", 400),
    ("Fondant_2_4kg", 800),
    ("Fondant_5kg_and_above", 1500),
    ("Semi-Fondant_1_1.5kg", 250),
    ("Semi-Fondant_2_4kg", 500),
    ("Semi-Fondant_5kg_and_above", 900),
]

MENU_ITEMS = [
    ("Veg Fried Rice", 140, "Fried Rice", "Veg", 10),
    ("Chicken Fried Rice", 180, "Fried Rice", "Non-Veg", 10),
    ("Hakka Noodles", 150, "Noodles", "Veg", 10),
    ("Margherita Pizza", 220, "Pizza", "Veg", 20),
    ("Cold Coffee", 90, "Shakes & Mojitos", "Veg", 5),
]


def seed_defaults(session_factory) -> None:
    """Insert the sample rows into empty tables; tables that already hold rows are left alone."""
    with session_factory() as session:
        if not session.query(CakeOption).first():
            session.add_all(
                CakeOption(option_type=t, option_name=n, base_price=p) for t, n, p in CAKE_OPTIONS
            )
        if not session.query(ExtraPricingRule).first():
            session.add_all(ExtraPricingRule(rule_name=n, price=p) for n, p in PRICING_RULES)
        if not session.query(MenuItem).first():
            session.add_all(
                MenuItem(id=str(uuid4()), name=n, price=p, category=c, diet=d, parcel=parcel, stock_quantity=50)
                for n, p, c, d, parcel in MENU_ITEMS
            )
        if not session.query(Offer).first():
            session.add(Offer(id=str(uuid4()), title="Free edible toys", description="5 edible toys free on Fondant cakes of 4kg and above"))


def main() -> None:
    from ...config import load_env
    from .session import Database

    database = Database(load_env().database_url)
    database.create_all()
    seed_defaults(database.session)
    print("Seeded cake options, pricing rules and menu.")


if __name__ == "__main__":
    main()
