"""Cake configuration and pricing endpoints."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request


cakes_bp = Blueprint("cakes", __name__, url_prefix="/api/cakes")


def _components() -> Dict[str, Any]:
    return current_app.extensions["cakeshop_components"]


def _json_body() -> Any:
    return request.get_json(silent=True) or {}


@cakes_bp.post("")
def create_cake():
    cake_id = _components()["cake_service"].create(_json_body())
    return jsonify({"id": cake_id}), 201


@cakes_bp.put("")
def update_cake():
    cake_id = _components()["cake_service"].update(request.args.get("id"), _json_body())
    return jsonify({"id": cake_id}), 200


@cakes_bp.get("")
def get_cake():
    staff_view = request.args.get("view") == "staff"
    data = _components()["cake_service"].get(request.args.get("id"), include_chef_notes=staff_view)
    return jsonify(data), 200


@cakes_bp.post("/quote")
def quote_cake():
    quote = _components()["pricing_service"].quote(_json_body())
    return jsonify(quote.to_dict())


@cakes_bp.get("/options")
def list_options():
    return jsonify(_components()["pricing_service"].list_options())
