"""Storage for customer reference images."""

from __future__ import annotations

import base64
import binascii
import re
from io import BytesIO
from pathlib import Path
from uuid import uuid4

from PIL import Image, UnidentifiedImageError  # type: ignore
from pillow_heif import register_heif_opener  # type: ignore

register_heif_opener()

DATA_URL_RE = re.compile(r"^data:image/(?P<ext>[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)
MAX_EDGE = 1200
JPEG_QUALITY = 80


class ImageStore:
    """Saves uploaded images as JPEG under ``upload_dir`` and hands back public URLs."""

    def __init__(self, upload_dir: Path, public_base_url: str) -> None:
        self._upload_dir = upload_dir
        self._public_base_url = public_base_url.rstrip("/")
        self._upload_dir.mkdir(parents=True, exist_ok=True)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def public_url(self, filename: str) -> str:
        return f"{self._public_base_url}/uploads/{filename}"

    def save_data_url(self, data_url: str) -> str:
        """Store a ``data:image/...;base64,`` payload, return its public URL."""

        match = DATA_URL_RE.match((data_url or "").strip())
        if not match:
            raise ValueError("No image data provided")
        try:
            binary = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("Image data is not valid base64.") from None
        return self.save_bytes(binary)

    def save_bytes(self, binary: bytes) -> str:
        if not binary:
            raise ValueError("Image content is empty.")
        filename = f"{uuid4().hex}.jpg"
        target_path = self._upload_dir / filename
        try:
            with Image.open(BytesIO(binary)) as image:
                rgb = image.convert("RGB")
                rgb.thumbnail((MAX_EDGE, MAX_EDGE))
                rgb.save(target_path, format="JPEG", quality=JPEG_QUALITY)
        except Image.DecompressionBombError as exc:
            raise ValueError("Image dimensions are too large.") from exc
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Uploaded file is not a readable image.") from exc
        return self.public_url(filename)
