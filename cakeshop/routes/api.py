"""Menu, offers and reference image upload endpoints."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from ..common.services.logging import log_event


api_bp = Blueprint("api", __name__)


def _components() -> Dict[str, Any]:
    return current_app.extensions["cakeshop_components"]


@api_bp.get("/healthz")
def healthz():
    return "OK", 200


@api_bp.get("/api/menu")
def get_menu():
    return jsonify(_components()["menu_service"].grouped_menu())


@api_bp.get("/api/offers")
def list_offers():
    return jsonify(_components()["menu_service"].active_offers())


@api_bp.post("/api/upload")
def upload_image():
    payload = request.get_json(silent=True) or {}
    data_url = payload.get("dataUrl")
    if not data_url:
        return jsonify({"error": "No image data provided"}), 400

    image_store = _components()["image_store"]
    try:
        url = image_store.save_data_url(data_url)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    except OSError as exc:
        log_event("error", "upload.failed", error=repr(exc))
        return jsonify({"error": "Failed to upload image."}), 500
    return jsonify({"url": url})


@api_bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(_components()["image_store"].upload_dir, filename)
