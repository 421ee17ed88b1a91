from decimal import Decimal
from typing import Dict, Mapping, Optional
from uuid import uuid4

from ..errors import InvalidRequest, NotFoundError
from ..models.cake import CakeConfiguration
from ..utils.dto import to_cake_dto
from ..utils.validators import ensure_decimal, ensure_phone, ensure_text, parse_timestamp
from .logging import log_event
from .pricing_service import selection_from_payload


MESSAGE_MAX = 40
CHEF_NOTES_MAX = 200
PRICE_MAX = Decimal("100000000")


class CakeService:
    """Saves and loads customer cake configurations.

    The submitted ``price`` is stored as-is. Unlike order totals it is not
    recomputed on the server.
    """

    def __init__(self, session_factory, image_store=None):
        self._session_factory = session_factory
        self._image_store = image_store

    def _build_row_values(self, payload: Mapping) -> Dict:
        # everything except the reference image, which is only stored once the rest is valid
        selection = selection_from_payload(payload)
        customization = {
            "weightKg": float(selection.weight_kg) if payload.get("weightKg") not in (None, "") else None,
            "icing": selection.icing,
            "flavour": selection.flavour,
            "cakeType": selection.cake_type,
            "shape": selection.shape,
            "message": ensure_text(payload.get("message"), "message", max_length=MESSAGE_MAX),
            "withEgg": selection.with_egg,
            "photoCount": selection.photo_count,
            "toys": {t.name: t.quantity for t in selection.toys},
            "flowers": selection.flowers,
            "chef_notes": ensure_text(payload.get("chefNotes"), "chefNotes", max_length=CHEF_NOTES_MAX),
        }
        return {
            "name": ensure_text(payload.get("name"), "name", max_length=255, required=True),
            "phone": ensure_phone(payload.get("phone")),
            "total_price": ensure_decimal(payload.get("price"), "price", maximum=PRICE_MAX),
            "delivery_time": parse_timestamp(payload.get("deliveryTimestamp"), "deliveryTimestamp"),
            "customization": customization,
        }

    def _reference_image(self, value) -> Optional[str]:
        if not value:
            return None
        value = str(value).strip()
        if not value.startswith("data:"):
            return value
        if self._image_store is None:
            return None
        try:
            return self._image_store.save_data_url(value)
        except (ValueError, OSError) as exc:
            # the configuration is still worth saving without its picture
            log_event("warning", "upload.failed", error=repr(exc))
            return None

    def create(self, payload: Mapping) -> str:
        if not isinstance(payload, Mapping):
            raise InvalidRequest("Request body must be a JSON object")
        values = self._build_row_values(payload)
        values["reference_image_url"] = self._reference_image(payload.get("referenceImage"))
        cid = str(uuid4())
        with self._session_factory() as session:
            session.add(CakeConfiguration(id=cid, **values))
        log_event("info", "cake.saved", cake_id=cid, created=True)
        return cid

    def update(self, cake_id: Optional[str], payload: Mapping) -> str:
        if not cake_id:
            raise InvalidRequest("Missing configuration ID for update.")
        if not isinstance(payload, Mapping):
            raise InvalidRequest("Request body must be a JSON object")
        values = self._build_row_values(payload)
        with self._session_factory() as session:
            row = session.query(CakeConfiguration).filter(CakeConfiguration.id == cake_id).first()
            if not row:
                raise NotFoundError("Configuration not found.")
            values["reference_image_url"] = self._reference_image(payload.get("referenceImage"))
            for key, value in values.items():
                setattr(row, key, value)
        log_event("info", "cake.saved", cake_id=cake_id, created=False)
        return cake_id

    def get(self, cake_id: Optional[str], *, include_chef_notes: bool = True) -> Dict:
        if not cake_id:
            raise InvalidRequest("Missing configuration ID for fetch.")
        with self._session_factory() as session:
            row = session.query(CakeConfiguration).filter(CakeConfiguration.id == cake_id).first()
            if not row:
                raise NotFoundError("Configuration not found.")
            return to_cake_dto(row, include_chef_notes=include_chef_notes)
