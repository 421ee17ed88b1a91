from typing import Dict, List

from ..models.menu_item import MenuItem
from ..models.offer import Offer
from ..utils.dto import to_menu_item_dto


class MenuService:
    """Read-only access to the dine-in menu and the active offers."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def grouped_menu(self) -> Dict[str, List[Dict]]:
        """Available items keyed by category, categories and items sorted by name."""
        with self._session_factory() as session:
            rows = (
                session.query(MenuItem)
                .filter(MenuItem.is_available.is_(True))
                .order_by(MenuItem.category.asc(), MenuItem.name.asc())
                .all()
            )
            grouped: Dict[str, List[Dict]] = {}
            for r in rows:
                grouped.setdefault(r.category, []).append(to_menu_item_dto(r))
            return grouped

    def active_offers(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = (
                session.query(Offer)
                .filter(Offer.is_active.is_(True))
                .order_by(Offer.created_at.desc())
                .all()
            )
            return [o.to_dict() for o in rows]
