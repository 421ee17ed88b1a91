"""Counter order endpoints."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _orders():
    return current_app.extensions["cakeshop_components"]["order_service"]


@orders_bp.post("")
def place_order():
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    return jsonify(_orders().place_order(payload)), 201


@orders_bp.post("/cancel")
def cancel_order():
    _orders().cancel_order(request.args.get("id"))
    return jsonify({"ok": True})


@orders_bp.get("/search")
def search_order():
    order_id = _orders().search_order(
        request.args.get("orderNumber"),
        request.args.get("phoneNumber"),
        request.args.get("date"),
    )
    return jsonify({"id": order_id})


@orders_bp.get("/<order_id>")
def get_order(order_id: str):
    return jsonify(_orders().get_order(order_id))


@orders_bp.patch("/<order_id>")
def update_order(order_id: str):
    payload = request.get_json(silent=True) or {}
    return jsonify(_orders().update_status(order_id, payload.get("status")))
