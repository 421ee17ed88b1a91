"""Rule-driven cake pricing.

The engine is a pure function of a :class:`CakeSelection` and a
:class:`PriceTable` (the ``cake_options`` and ``extra_pricing_rules`` rows).
Every charge is emitted as its own :class:`PriceLine` and the total is the sum
of those lines, so the itemized breakdown and the total can never disagree.
Each line is rounded to 0.01 before it is added.

Table data always wins over the built-in defaults below; the defaults only
apply when the table holds no row for the thing being priced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


CENT = Decimal("0.01")
ZERO = Decimal("0")

FONDANT = "Fondant"
SEMI_FONDANT = "Semi-Fondant"
STRUCTURAL_ICINGS = (FONDANT, SEMI_FONDANT)
EDIBLE_TOYS = "Edible Toys"
FREE_EDIBLE_TOYS = 5
MAX_TOY_COUNT = 1000
# line amounts and the total are computed exactly at this precision
QUOTE_PRECISION = 60

# used only when the option/rule tables have no row for the charge
FALLBACK_FLAVOUR_PRICES: Dict[str, Decimal] = {
    "Vanilla": Decimal("500"),
    "Pineapple": Decimal("550"),
    "Strawberry": Decimal("550"),
    "Butterscotch": Decimal("600"),
    "Chocolate": Decimal("600"),
    "Black Forest": Decimal("600"),
    "White Forest": Decimal("600"),
    "Blueberry": Decimal("700"),
    "Red Velvet": Decimal("800"),
    "Rasmalai": Decimal("900"),
}
FALLBACK_ICING_PER_KG: Dict[str, Decimal] = {
    FONDANT: Decimal("700"),
    SEMI_FONDANT: Decimal("500"),
}
DEFAULT_EGGLESS_PER_KG = Decimal("100")
DEFAULT_CUSTOM_SHAPE_PER_KG = Decimal("200")
DEFAULT_PHOTO_PRICE = Decimal("250")
DEFAULT_FLOWER_PRICE = Decimal("50")

# (rule suffix, label, lower bound, upper bound); bounds are inclusive, None is open.
# Weights between bands (1.5-2kg, 4-5kg) carry no tier surcharge.
ICING_BANDS: Tuple[Tuple[str, str, Decimal, Optional[Decimal]], ...] = (
    ("1_1.5kg", "1-1.5kg", Decimal("1"), Decimal("1.5")),
    ("2_4kg", "2-4kg", Decimal("2"), Decimal("4")),
    ("5kg_and_above", "5kg+", Decimal("5"), None),
)


@dataclass(frozen=True)
class ToySelection:
    name: str
    quantity: int


@dataclass(frozen=True)
class CakeSelection:
    weight_kg: Decimal = ZERO
    icing: Optional[str] = None
    flavour: Optional[str] = None
    shape: Optional[str] = None
    cake_type: Optional[str] = None
    with_egg: bool = True
    photo_count: int = 0
    flowers: int = 0
    toys: Tuple[ToySelection, ...] = ()


@dataclass(frozen=True)
class PriceLine:
    label: str
    amount: Decimal

    def to_dict(self) -> Dict:
        return {"label": self.label, "price": float(self.amount)}


@dataclass(frozen=True)
class PriceQuote:
    lines: Tuple[PriceLine, ...]
    total: Decimal
    notices: Tuple[str, ...] = field(default=())

    def to_dict(self) -> Dict:
        return {
            "breakdown": [line.to_dict() for line in self.lines],
            "total": float(self.total),
            "notices": list(self.notices),
        }


class PriceTable:
    """Lookup view over option rows and rule rows."""

    def __init__(self, options: Iterable[Tuple[str, str, object]], rules: Mapping[str, object]):
        self._options: Dict[Tuple[str, str], Decimal] = {}
        self._by_type: Dict[str, List[str]] = {}
        for option_type, option_name, base_price in options:
            self._options[(option_type, option_name)] = _to_decimal(base_price)
            self._by_type.setdefault(option_type, []).append(option_name)
        self._rules: Dict[str, Decimal] = {name: _to_decimal(price) for name, price in rules.items()}

    def option_price(self, option_type: str, option_name: Optional[str]) -> Optional[Decimal]:
        if not option_name:
            return None
        return self._options.get((option_type, option_name))

    def rule_price(self, rule_name: str) -> Optional[Decimal]:
        return self._rules.get(rule_name)

    def has_rule(self, rule_name: str) -> bool:
        return rule_name in self._rules

    def names_of(self, option_type: str) -> List[str]:
        return list(self._by_type.get(option_type, []))

    def first_price_of(self, option_type: str) -> Optional[Decimal]:
        names = self._by_type.get(option_type)
        if not names:
            return None
        return self._options[(option_type, names[0])]

    def price_named(self, option_name: str) -> Optional[Decimal]:
        for (_, name), price in self._options.items():
            if name == option_name:
                return price
        return None


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _cents(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_kg(weight: Decimal) -> str:
    text = format(weight.normalize(), "f")
    return text if text != "-0" else "0"


def is_custom_shape(shape: Optional[str]) -> bool:
    return bool(shape) and "custom" in shape.lower()


class PricingEngine:
    """Computes an itemized :class:`PriceQuote` for a cake selection."""

    def __init__(
        self,
        *,
        promotion_min_weight: Decimal = Decimal("4"),
        fallback_flavour_prices: Optional[Mapping[str, Decimal]] = None,
    ) -> None:
        self._promotion_min_weight = _to_decimal(promotion_min_weight)
        self._fallback_flavours = dict(
            FALLBACK_FLAVOUR_PRICES if fallback_flavour_prices is None else fallback_flavour_prices
        )

    def promotion_eligible(self, selection: CakeSelection) -> bool:
        return selection.icing == FONDANT and selection.weight_kg >= self._promotion_min_weight

    def quote(self, selection: CakeSelection, table: PriceTable, notices: Sequence[str] = ()) -> PriceQuote:
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, QUOTE_PRECISION, selection.weight_kg.adjusted() + QUOTE_PRECISION)
            return self._quote(selection, table, notices)

    def _quote(self, selection: CakeSelection, table: PriceTable, notices: Sequence[str]) -> PriceQuote:
        lines: List[PriceLine] = []

        def add(label: str, amount: Decimal) -> None:
            amount = _cents(amount)
            if amount != ZERO:
                lines.append(PriceLine(label, amount))

        weight = selection.weight_kg
        kg = format_kg(weight)

        if selection.flavour:
            add(f"{selection.flavour} Flavour ({kg}kg)", self._flavour_price(selection.flavour, table) * weight)

        icing_mode = self._icing_mode(selection.icing, table)
        if icing_mode == "per_kg":
            add(f"Icing ({selection.icing}, {kg}kg)", self._icing_rate(selection.icing, table) * weight)

        if not selection.with_egg:
            rate = table.rule_price("Eggless")
            if rate is None:
                rate = DEFAULT_EGGLESS_PER_KG
            add(f"Eggless Charge ({kg}kg)", rate * weight)

        if selection.shape:
            price = table.option_price("shape", selection.shape)
            if is_custom_shape(selection.shape):
                rate = price if price else DEFAULT_CUSTOM_SHAPE_PER_KG
                add(f"Shape ({selection.shape}, {kg}kg)", rate * weight)
            elif price is not None:
                add(f"Shape ({selection.shape})", price)

        if selection.cake_type:
            price = table.option_price("cake_type", selection.cake_type)
            if price is not None:
                add(f"Cake Style ({selection.cake_type})", price)

        if icing_mode == "banded":
            band = self._icing_band(selection.icing, weight, table)
            if band is not None:
                label, price = band
                add(f"Icing ({selection.icing} {label})", price)

        if selection.photo_count > 0:
            multiplier = -(-selection.photo_count // 2)
            add(f"Photo Cake ({selection.photo_count} photos)", self._photo_price(table) * multiplier)

        if selection.flowers > 0:
            add(f"Flowers ({selection.flowers} units)", self._flower_price(table) * selection.flowers)

        promotion = self.promotion_eligible(selection)
        for toy in selection.toys:
            if toy.quantity <= 0:
                continue
            unit = table.option_price("toy", toy.name) or ZERO
            payable = toy.quantity
            label = f"{toy.name} ({toy.quantity} units)"
            if toy.name == EDIBLE_TOYS and promotion and toy.quantity >= FREE_EDIBLE_TOYS:
                payable = toy.quantity - FREE_EDIBLE_TOYS
                label = f"{toy.name} ({toy.quantity} units, {FREE_EDIBLE_TOYS} FREE)"
            add(label, unit * payable)

        total = sum((line.amount for line in lines), ZERO)
        return PriceQuote(lines=tuple(lines), total=total, notices=tuple(notices))

    def _flavour_price(self, flavour: str, table: PriceTable) -> Decimal:
        price = table.option_price("flavor", flavour)
        if price is None:
            price = self._fallback_flavours.get(flavour)
        return price or ZERO

    @staticmethod
    def _icing_mode(icing: Optional[str], table: PriceTable) -> Optional[str]:
        """Band rules in the rule table select the weight-banded surcharge, otherwise per-kg."""
        if icing not in STRUCTURAL_ICINGS:
            return None
        if any(table.has_rule(f"{icing}_{suffix}") for suffix, _, _, _ in ICING_BANDS):
            return "banded"
        return "per_kg"

    @staticmethod
    def _icing_rate(icing: str, table: PriceTable) -> Decimal:
        price = table.option_price("icing", icing)
        if price:
            return price
        return FALLBACK_ICING_PER_KG[icing]

    @staticmethod
    def _icing_band(icing: str, weight: Decimal, table: PriceTable) -> Optional[Tuple[str, Decimal]]:
        for suffix, label, low, high in ICING_BANDS:
            if weight >= low and (high is None or weight <= high):
                return label, table.rule_price(f"{icing}_{suffix}") or ZERO
        return None

    @staticmethod
    def _photo_price(table: PriceTable) -> Decimal:
        for price in (
            table.rule_price("Photo Cake"),
            table.first_price_of("photos"),
            table.price_named("Photos"),
        ):
            if price is not None:
                return price
        return DEFAULT_PHOTO_PRICE

    @staticmethod
    def _flower_price(table: PriceTable) -> Decimal:
        price = table.option_price("flower", "General Flower")
        if price is None:
            price = table.first_price_of("flower")
        return DEFAULT_FLOWER_PRICE if price is None else price


MIN_FONDANT_WEIGHT = Decimal("1.5")
MIN_SEMI_FONDANT_WEIGHT = Decimal("1")
MIN_TIER_CAKE_WEIGHT = Decimal("3")
TIER_CAKE = "Step Cake / Tier Cake"
REGULAR_CAKE = "Regular Cake"
BUTTER_CREAM = "Butter Cream"


def check_selection(selection: CakeSelection) -> List[str]:
    """Return the configurator's gating messages; these never affect the price."""
    messages = []
    weight = selection.weight_kg
    if selection.icing == FONDANT and weight < MIN_FONDANT_WEIGHT:
        messages.append("Fondant icing requires a minimum weight of 1.5kg.")
    if selection.icing == SEMI_FONDANT and weight < MIN_SEMI_FONDANT_WEIGHT:
        messages.append("Semi-Fondant icing requires a minimum weight of 1.0kg.")
    if selection.cake_type == TIER_CAKE and weight < MIN_TIER_CAKE_WEIGHT:
        messages.append(f"Tier cake requires a minimum total weight of {format_kg(MIN_TIER_CAKE_WEIGHT)}kg.")
    if selection.cake_type == REGULAR_CAKE and selection.icing in STRUCTURAL_ICINGS:
        messages.append(f"{selection.icing} is not allowed for {REGULAR_CAKE}.")
    elif selection.cake_type and selection.cake_type != REGULAR_CAKE and selection.icing == BUTTER_CREAM:
        messages.append(f"{BUTTER_CREAM} is not allowed for {selection.cake_type}.")
    if not (weight and selection.icing and selection.flavour and selection.cake_type and selection.shape):
        messages.append("Please select all primary cake options (Weight, Icing, Flavour, Style, Shape).")
    return messages


def parse_toys(raw, known: Optional[Iterable[str]] = None) -> Tuple[ToySelection, ...]:
    """Turn a ``{name: count}`` mapping (or a list of ``{name, quantity}``) into typed selections.

    Zero counts are dropped. Raises ``ValueError`` for negative, fractional or
    oversized counts and, when ``known`` is given, for toy names outside that set.
    """
    if raw in (None, "", {}, []):
        return ()
    if isinstance(raw, Mapping):
        pairs = list(raw.items())
    elif isinstance(raw, list):
        pairs = []
        for entry in raw:
            if not isinstance(entry, Mapping) or "name" not in entry:
                raise ValueError("each toy needs a name and a quantity")
            pairs.append((entry["name"], entry.get("quantity", entry.get("count", 0))))
    else:
        raise ValueError("toys must be a mapping of toy name to count")

    allowed = set(known) if known is not None else None
    merged: Dict[str, int] = {}
    for name, count in pairs:
        name = str(name).strip()
        if not name:
            raise ValueError("toy name must not be empty")
        if isinstance(count, bool) or not isinstance(count, (int, float, str)):
            raise ValueError(f"count for {name} must be a whole number")
        try:
            quantity = int(count)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"count for {name} must be a whole number") from None
        if isinstance(count, float) and not count.is_integer():
            raise ValueError(f"count for {name} must be a whole number")
        if quantity < 0:
            raise ValueError(f"count for {name} must be >= 0")
        if quantity > MAX_TOY_COUNT:
            raise ValueError(f"count for {name} must be <= {MAX_TOY_COUNT}")
        if quantity == 0:
            continue
        if allowed is not None and name not in allowed:
            raise ValueError(f"unknown toy: {name}")
        merged[name] = merged.get(name, 0) + quantity
    return tuple(ToySelection(name, quantity) for name, quantity in merged.items())
