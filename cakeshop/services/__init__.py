"""Process-level adapters for the blob store and staff push notifications."""

from .image_store import ImageStore
from .notifier import StaffNotifier

__all__ = [
    "ImageStore",
    "StaffNotifier",
]
