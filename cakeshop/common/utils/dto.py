from decimal import Decimal
from typing import Any, Dict


def money(value: Any) -> float:
    return float(Decimal(str(value or 0)).quantize(Decimal("0.01")))


def to_order_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "order_number": row.order_number,
        "name": row.name,
        "phone": row.phone,
        "table_number": row.table_number,
        "items": row.items or [],
        "status": row.status,
        "total": money(row.total),
        "created_at": row.created_at.isoformat() + "Z" if row.created_at else None,
        "payment": row.payment,
    }


def to_cake_dto(row: Any, *, include_chef_notes: bool = True) -> Dict:
    customization = dict(row.customization or {})
    if not include_chef_notes:
        customization.pop("chef_notes", None)
    return {
        "id": row.id,
        "name": row.name,
        "phone": row.phone,
        "total_price": money(row.total_price),
        "reference_image_url": row.reference_image_url,
        "delivery_time": row.delivery_time.isoformat() + "Z" if row.delivery_time else None,
        "created_at": row.created_at.isoformat() + "Z" if row.created_at else None,
        "customization": customization,
    }


def to_menu_item_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "price": money(row.price),
        "description": row.description or "",
        "image_url": row.image_url or "/logo.png",
        "diet": row.diet,
        "category": row.category,
        "stock_quantity": row.stock_quantity or 0,
        "is_available": bool(row.is_available),
        "parcel": money(row.parcel),
    }
