from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy import update

from ..errors import CancellationWindowExpired, InvalidRequest, NotFoundError
from ..models.order import ORDER_STATUSES, PAY_AT_COUNTER, TAKEAWAY, Order
from ..utils.dto import money, to_order_dto
from ..utils.validators import (
    DIGITS_RE,
    UUID_RE,
    ensure_decimal,
    ensure_phone,
    ensure_text,
    parse_date,
)
from .logging import log_event
from .order_numbers import OrderNumberAllocator


FORWARD_FLOW = ("placed", "preparing", "ready", "completed")
MAX_QTY = 1000
MAX_ITEM_PRICE = Decimal("1000000")


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def compute_total(items: List[Dict], is_parcel_order: bool) -> Decimal:
    """Sum price * qty, plus item_parcel * qty for takeaway orders."""
    total = Decimal("0")
    for it in items:
        qty = Decimal(it["qty"])
        total += Decimal(str(it["price"])) * qty
        if is_parcel_order and it.get("item_parcel"):
            total += Decimal(str(it["item_parcel"])) * qty
    return total.quantize(Decimal("0.01"))


def normalize_items(raw) -> List[Dict]:
    if not raw or not isinstance(raw, list):
        raise InvalidRequest("Items are required")
    items = []
    for index, it in enumerate(raw):
        if not isinstance(it, Mapping):
            raise InvalidRequest(f"items[{index}] must be an object")
        qty = it.get("qty")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise InvalidRequest(f"items[{index}].qty must be a whole number >= 1")
        if qty > MAX_QTY:
            raise InvalidRequest(f"items[{index}].qty must be <= {MAX_QTY}")
        item = {
            "id": it.get("id"),
            "name": ensure_text(it.get("name"), f"items[{index}].name", required=True),
            "price": float(ensure_decimal(it.get("price"), f"items[{index}].price", maximum=MAX_ITEM_PRICE)),
            "qty": qty,
        }
        if it.get("item_parcel") not in (None, ""):
            item["item_parcel"] = float(ensure_decimal(it.get("item_parcel"), f"items[{index}].item_parcel", maximum=MAX_ITEM_PRICE))
        items.append(item)
    return items


class OrderService:
    """Places, looks up and cancels counter orders."""

    def __init__(
        self,
        session_factory,
        allocator: OrderNumberAllocator,
        notifier=None,
        *,
        cancel_window_seconds: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._allocator = allocator
        self._notifier = notifier
        self._cancel_window = timedelta(seconds=cancel_window_seconds)
        self._clock = clock

    def place_order(self, payload: Mapping) -> Dict:
        """Validate, total, number and persist an order, then tell the staff."""
        if not isinstance(payload, Mapping):
            raise InvalidRequest("Request body must be a JSON object")
        name = ensure_text(payload.get("name"), "name", max_length=255, required=True)
        phone = ensure_phone(payload.get("phone"))
        is_parcel = payload.get("isParcelOrder")
        if is_parcel is None:
            is_parcel = False
        if not isinstance(is_parcel, bool):
            raise InvalidRequest("isParcelOrder must be true or false")
        items = normalize_items(payload.get("items"))
        table_number = ensure_text(payload.get("tableNumber"), "tableNumber", max_length=32)
        if table_number is None:
            if not is_parcel:
                raise InvalidRequest("tableNumber is required for dine-in orders")
            table_number = TAKEAWAY
        total = compute_total(items, is_parcel)

        # a failed insert below burns this number; gaps are fine, duplicates are not
        order_number = self._allocator.allocate()
        oid = str(uuid4())
        with self._session_factory() as session:
            session.add(
                Order(
                    id=oid,
                    order_number=order_number,
                    name=name,
                    phone=phone,
                    table_number=table_number,
                    items=items,
                    status="placed",
                    total=total,
                    created_at=self._clock(),
                    payment=PAY_AT_COUNTER,
                )
            )
        log_event("info", "order.placed", order_id=oid, order_number=order_number, items=len(items), total=float(total))

        if self._notifier is not None:
            self._notifier.notify_new_order(order_id=oid, order_number=order_number, name=name, total=money(total))
        return {"id": oid, "orderNumber": order_number}

    def is_cancellable(self, status: str, created_at: datetime) -> bool:
        return status == "placed" and self._clock() - created_at < self._cancel_window

    def get_order(self, order_id: str) -> Dict:
        with self._session_factory() as session:
            o = session.query(Order).filter(Order.id == order_id).first()
            if not o:
                raise NotFoundError("Order not found")
            data = to_order_dto(o)
            data["cancellable"] = self.is_cancellable(o.status, o.created_at)
            return data

    def cancel_order(self, locator: Optional[str]) -> None:
        """Cancel by id (UUID) or order number (digits) inside the undo window."""
        locator = (locator or "").strip()
        if not locator:
            raise InvalidRequest("Missing id")
        if UUID_RE.match(locator):
            criterion = Order.id == locator.lower()
        elif DIGITS_RE.match(locator):
            criterion = Order.order_number == locator
        else:
            raise InvalidRequest("Invalid order ID format.")

        with self._session_factory() as session:
            o = session.query(Order).filter(criterion).first()
            if not o or o.status != "placed":
                raise NotFoundError()
            if not self.is_cancellable(o.status, o.created_at):
                raise CancellationWindowExpired()
            result = session.execute(
                update(Order)
                .where(Order.id == o.id, Order.status == "placed")
                .values(status="cancelled")
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise NotFoundError()
            log_event("info", "order.cancelled", order_id=o.id, order_number=o.order_number)

    def update_status(self, order_id: str, new_status: Optional[str]) -> Dict:
        """Staff progression placed -> preparing -> ready -> completed, one step at a time."""
        if new_status not in ORDER_STATUSES:
            raise InvalidRequest("invalid status")
        if new_status not in FORWARD_FLOW:
            raise InvalidRequest("orders are cancelled through the cancellation window only")
        with self._session_factory() as session:
            o = session.query(Order).filter(Order.id == order_id).first()
            if not o:
                raise NotFoundError("Order not found")
            current = o.status
            if current not in FORWARD_FLOW or FORWARD_FLOW.index(new_status) != FORWARD_FLOW.index(current) + 1:
                raise InvalidRequest(f"cannot move order from {current} to {new_status}")
            result = session.execute(
                update(Order)
                .where(Order.id == o.id, Order.status == current)
                .values(status=new_status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidRequest("order status changed concurrently, reload and retry")
            o.status = new_status
            log_event("info", "order.status_changed", order_id=o.id, old=current, new=new_status)
            return to_order_dto(o)

    def search_order(self, order_number, phone_number, date_text) -> str:
        """Return the id of the single order matching number, phone and UTC calendar date."""
        if not order_number or not phone_number or not date_text:
            raise InvalidRequest("Missing required search parameters.")
        day = parse_date(date_text, "date")
        start = datetime(day.year, day.month, day.day)
        end = start + timedelta(days=1)
        with self._session_factory() as session:
            rows = (
                session.query(Order.id)
                .filter(
                    Order.order_number == str(order_number).strip(),
                    Order.phone == str(phone_number).strip(),
                    Order.created_at >= start,
                    Order.created_at < end,
                )
                .limit(2)
                .all()
            )
        if len(rows) != 1:
            raise NotFoundError("Order not found with the provided details.")
        return rows[0].id
