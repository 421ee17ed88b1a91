"""JSON error responses shared by every blueprint."""

from __future__ import annotations

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..common.errors import CakeshopError, OrderNumberUnavailable
from ..common.services.logging import log_event


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(CakeshopError)
    def handle_cakeshop_error(exc: CakeshopError):
        body = {"error": exc.message}
        if isinstance(exc, OrderNumberUnavailable):
            body["retryable"] = True
        return jsonify(body), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc: SQLAlchemyError):
        # schema details stay in the log
        log_event("error", "db.error", error=repr(exc))
        return jsonify({"error": "Something went wrong"}), 500
