"""Cake shop ordering backend Flask application."""

from __future__ import annotations

from typing import Optional

from flask import Flask

from .common.db import Database
from .common.services import (
    CakeService,
    MenuService,
    OrderNumberAllocator,
    OrderService,
    PricingEngine,
    PricingService,
)
from .common.services.logging import set_level
from .config import AppConfig, load_env
from .routes import api_bp, cakes_bp, orders_bp, register_error_handlers
from .services import ImageStore, StaffNotifier


CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}


def build_components(config: AppConfig, database: Database) -> dict:
    image_store = ImageStore(config.upload_dir, config.public_base_url)
    notifier = StaffNotifier(
        config.notify_webhook_url,
        topic=config.notify_topic,
        timeout=config.notify_timeout,
        currency_symbol=CURRENCY_SYMBOLS.get(config.currency, f"{config.currency} "),
    )
    allocator = OrderNumberAllocator(database.session)
    engine = PricingEngine(promotion_min_weight=config.toy_promotion_min_weight)
    return {
        "database": database,
        "image_store": image_store,
        "notifier": notifier,
        "allocator": allocator,
        "pricing_service": PricingService(database.session, engine),
        "cake_service": CakeService(database.session, image_store),
        "order_service": OrderService(
            database.session,
            allocator,
            notifier,
            cancel_window_seconds=config.cancel_window_seconds,
        ),
        "menu_service": MenuService(database.session),
    }


def create_app(config: Optional[AppConfig] = None) -> Flask:
    config = config or load_env()
    set_level(config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["CAKESHOP_CONFIG"] = config

    database = Database(config.database_url)
    database.create_all()
    app.extensions["cakeshop_components"] = build_components(config, database)

    app.register_blueprint(api_bp)
    app.register_blueprint(cakes_bp)
    app.register_blueprint(orders_bp)
    register_error_handlers(app)

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
