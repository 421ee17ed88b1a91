from decimal import Decimal
from typing import Dict, Mapping

from ..errors import InvalidRequest
from ..models.cake_option import CakeOption
from ..models.pricing_rule import ExtraPricingRule
from ..utils.validators import ensure_decimal, ensure_non_negative_int, ensure_text
from .pricing_engine import CakeSelection, PriceQuote, PriceTable, PricingEngine, check_selection, parse_toys


MAX_WEIGHT_KG = Decimal("1000")
MAX_UNITS = 1000


def selection_from_payload(payload: Mapping, *, known_toys=None) -> CakeSelection:
    """Build a CakeSelection from the configurator's camelCase JSON body."""
    if not isinstance(payload, Mapping):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        toys = parse_toys(payload.get("toys"), known_toys)
    except ValueError as exc:
        raise InvalidRequest(str(exc)) from None
    with_egg = payload.get("withEgg", True)
    if not isinstance(with_egg, bool):
        raise InvalidRequest("withEgg must be true or false")
    return CakeSelection(
        weight_kg=ensure_decimal(payload.get("weightKg"), "weightKg", default=Decimal("0"), maximum=MAX_WEIGHT_KG),
        icing=ensure_text(payload.get("icing"), "icing"),
        flavour=ensure_text(payload.get("flavour"), "flavour"),
        shape=ensure_text(payload.get("shape"), "shape"),
        cake_type=ensure_text(payload.get("cakeType"), "cakeType"),
        with_egg=with_egg,
        photo_count=ensure_non_negative_int(payload.get("photoCount"), "photoCount", MAX_UNITS),
        flowers=ensure_non_negative_int(payload.get("flowers"), "flowers", MAX_UNITS),
        toys=toys,
    )


class PricingService:
    """Loads the option/rule tables and prices cake selections against them."""

    def __init__(self, session_factory, engine: PricingEngine):
        self._session_factory = session_factory
        self._engine = engine

    def load_table(self) -> PriceTable:
        with self._session_factory() as session:
            options = [
                (o.option_type, o.option_name, o.base_price)
                for o in session.query(CakeOption).order_by(CakeOption.id).all()
            ]
            rules = {r.rule_name: r.price for r in session.query(ExtraPricingRule).all()}
        return PriceTable(options, rules)

    def quote(self, payload: Mapping) -> PriceQuote:
        table = self.load_table()
        selection = selection_from_payload(payload, known_toys=table.names_of("toy"))
        return self._engine.quote(selection, table, notices=check_selection(selection))

    def list_options(self) -> Dict:
        with self._session_factory() as session:
            grouped: Dict[str, list] = {}
            for o in session.query(CakeOption).order_by(CakeOption.option_type, CakeOption.id).all():
                grouped.setdefault(o.option_type, []).append(o.to_dict())
            rules = [r.to_dict() for r in session.query(ExtraPricingRule).order_by(ExtraPricingRule.rule_name).all()]
        return {"options": grouped, "rules": rules}
