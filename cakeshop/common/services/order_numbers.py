"""Per-day order number allocation.

One ``daily_order_counter`` row per UTC date holds the next sequence value.
A number is reserved by reading the row and advancing it with a conditional
UPDATE that only matches if nobody else advanced it first; losers re-read and
try again. Nothing is cached in process, so several app instances can share
one database.
"""

from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import OrderNumberUnavailable
from ..models.daily_counter import DailyOrderCounter
from .logging import log_event


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def format_order_number(day: date, sequence: int) -> str:
    """``2024-06-01`` and ``7`` -> ``"20240601007"``."""
    return f"{day.strftime('%Y%m%d')}{sequence:03d}"


class OrderNumberAllocator:
    def __init__(self, session_factory, *, max_attempts: int = 5, today: Callable[[], date] = utc_today):
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._today = today

    def allocate(self, day: Optional[date] = None) -> str:
        """Reserve the next number for ``day`` (default: today, UTC)."""
        day = day or self._today()
        key = date_key(day)
        try:
            with self._session_factory() as session:
                self._insert_if_absent(session, key)
                for attempt in range(1, self._max_attempts + 1):
                    current = session.execute(
                        select(DailyOrderCounter.counter).where(DailyOrderCounter.order_date == key)
                    ).scalar_one()
                    result = session.execute(
                        update(DailyOrderCounter)
                        .where(DailyOrderCounter.order_date == key, DailyOrderCounter.counter == current)
                        .values(counter=current + 1)
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 1:
                        session.commit()
                        return format_order_number(day, current)
                    log_event("info", "order_number.conflict", order_date=key, attempt=attempt)
        except SQLAlchemyError as exc:
            log_event("error", "order_number.failed", order_date=key, error=repr(exc))
            raise OrderNumberUnavailable() from exc
        log_event("error", "order_number.exhausted", order_date=key, attempts=self._max_attempts)
        raise OrderNumberUnavailable()

    @staticmethod
    def _insert_if_absent(session, key: str) -> None:
        # must not overwrite an existing row, or concurrent orders would reset the day to 1
        dialect = session.get_bind().dialect.name
        if dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert
            else:
                from sqlalchemy.dialects.postgresql import insert
            session.execute(
                insert(DailyOrderCounter)
                .values(order_date=key, counter=1)
                .on_conflict_do_nothing(index_elements=["order_date"])
            )
            return
        try:
            with session.begin_nested():
                session.add(DailyOrderCounter(order_date=key, counter=1))
                session.flush()
        except IntegrityError:
            pass
