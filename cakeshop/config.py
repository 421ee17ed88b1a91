"""Cake shop application settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    currency: str
    public_base_url: str
    upload_dir: Path
    notify_webhook_url: Optional[str] = None
    notify_topic: str = "store_orders"
    notify_timeout: float = 5.0
    cancel_window_seconds: int = 30
    toy_promotion_min_weight: Decimal = field(default_factory=lambda: Decimal("4"))


def validate_currency(value: Optional[str]) -> str:
    v = (value or "INR").strip().upper()
    if len(v) != 3:
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


def validate_window(value) -> int:
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        raise ValueError("CANCEL_WINDOW_SECONDS must be an integer") from None
    if seconds <= 0:
        raise ValueError("CANCEL_WINDOW_SECONDS must be > 0")
    return seconds


def validate_weight(value) -> Decimal:
    try:
        weight = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError("TOY_PROMOTION_MIN_WEIGHT must be a number") from None
    if weight < 0:
        raise ValueError("TOY_PROMOTION_MIN_WEIGHT must be >= 0")
    return weight


def _load_settings_file(path: Optional[Path] = None) -> dict:
    path = path or PROJECT_ROOT / "data" / "settings.json"
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a JSON object")
    return data


def load_env(settings_path: Optional[Path] = None) -> AppConfig:
    # data/settings.json wins over the environment, .env fills the environment
    load_dotenv()
    s = _load_settings_file(settings_path)

    def pick(key: str, default=None):
        value = s.get(key)
        if value in (None, ""):
            value = os.getenv(key)
        return default if value in (None, "") else value

    upload_dir = Path(pick("UPLOAD_DIR", str(PROJECT_ROOT / "data" / "uploads")))
    return AppConfig(
        database_url=pick("DATABASE_URL", "sqlite:///data/cakeshop.db"),
        secret_key=pick("SECRET_KEY", "dev_secret"),
        log_level=str(pick("LOG_LEVEL", "INFO")).upper(),
        currency=validate_currency(pick("CURRENCY")),
        public_base_url=str(pick("PUBLIC_BASE_URL", "http://127.0.0.1:5000")).rstrip("/"),
        upload_dir=upload_dir,
        notify_webhook_url=pick("NOTIFY_WEBHOOK_URL"),
        notify_topic=pick("NOTIFY_TOPIC", "store_orders"),
        notify_timeout=float(pick("NOTIFY_TIMEOUT", 5.0)),
        cancel_window_seconds=validate_window(pick("CANCEL_WINDOW_SECONDS", 30)),
        toy_promotion_min_weight=validate_weight(pick("TOY_PROMOTION_MIN_WEIGHT", 4)),
    )

