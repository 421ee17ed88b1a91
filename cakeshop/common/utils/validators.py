import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..errors import InvalidRequest


PHONE_RE = re.compile(r"^\d{10}$")
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
DIGITS_RE = re.compile(r"^\d+$")


def ensure_non_negative_int(value: Any, field: str, maximum: Optional[int] = None) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise InvalidRequest(f"{field} must be a whole number")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidRequest(f"{field} must be a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"{field} must be a whole number") from None
    if number < 0:
        raise InvalidRequest(f"{field} must be >= 0")
    if maximum is not None and number > maximum:
        raise InvalidRequest(f"{field} must be <= {maximum}")
    return number


def ensure_decimal(
    value: Any, field: str, default: Optional[Decimal] = None, maximum: Optional[Decimal] = None
) -> Decimal:
    if value is None or value == "":
        if default is not None:
            return default
        raise InvalidRequest(f"{field} is required")
    if isinstance(value, bool):
        raise InvalidRequest(f"{field} must be a number")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidRequest(f"{field} must be a number") from None
    if not number.is_finite():
        raise InvalidRequest(f"{field} must be a number")
    if number < 0:
        raise InvalidRequest(f"{field} must be >= 0")
    if maximum is not None and number > maximum:
        raise InvalidRequest(f"{field} must be <= {maximum}")
    return number


def ensure_text(value: Any, field: str, *, max_length: Optional[int] = None, required: bool = False) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    if not text:
        if required:
            raise InvalidRequest(f"{field} is required")
        return None
    if max_length is not None and len(text) > max_length:
        raise InvalidRequest(f"{field} must be at most {max_length} characters")
    return text


def ensure_phone(value: Any, field: str = "phone") -> str:
    phone = str(value or "").strip()
    if not PHONE_RE.match(phone):
        raise InvalidRequest(f"{field} must be 10 digits")
    return phone


def parse_timestamp(value: Any, field: str) -> datetime:
    """Parse an ISO 8601 timestamp; aware values are converted to naive UTC."""
    text = str(value or "").strip()
    if not text:
        raise InvalidRequest(f"{field} is required")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidRequest(f"{field} must be an ISO 8601 timestamp") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: Any, field: str) -> date:
    try:
        return datetime.strptime(str(value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidRequest(f"{field} must be a YYYY-MM-DD date") from None
