import json
import logging
from typing import Iterable, List

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from .preferences import PreferenceStore
from .schemas import NotebookItem, NotebookStats

logger = logging.getLogger(__name__)

_items_adapter = TypeAdapter(List[NotebookItem])


class ShoppingNotebook:
    """The logged-in user's shopping list.

    Every change is written back through the preference store. While
    nobody is logged in the notebook is empty and changes are dropped.
    """

    def __init__(self, prefs: PreferenceStore):
        self.prefs = prefs
        self.items: List[NotebookItem] = self._load()

    def _load(self) -> List[NotebookItem]:
        saved = self.prefs.get_shopping_list()
        if not saved:
            return []
        try:
            return _items_adapter.validate_json(saved)
        except ValidationError:
            logger.warning("Ignoring malformed shopping list")
            return []

    def _save(self, db: Session):
        if not self.prefs.session.is_logged_in:
            return
        payload = json.dumps(
            [i.model_dump(by_alias=True) for i in self.items], ensure_ascii=False
        )
        self.prefs.update_shopping_list(db, payload)

    def add_item(self, db: Session, name: str):
        name = (name or "").strip()
        if not name or not self.prefs.session.is_logged_in:
            return None
        item = NotebookItem(name=name)
        self.items.append(item)
        self._save(db)
        return item

    def add_ingredients(self, db: Session, ingredients: Iterable):
        if not self.prefs.session.is_logged_in:
            return
        for ingredient in ingredients:
            name = getattr(ingredient, "name", ingredient).strip()
            if name:
                self.items.append(NotebookItem(name=name))
        self._save(db)

    def set_checked(self, db: Session, index: int, checked: bool = True):
        self.items[index].is_checked = checked
        self._save(db)
        return self.items[index]

    def remove_item(self, db: Session, index: int):
        item = self.items.pop(index)
        self._save(db)
        return item

    def clear_completed(self, db: Session):
        self.items = [i for i in self.items if not i.is_checked]
        self._save(db)

    def clear(self, db: Session):
        self.items = []
        self._save(db)

    def stats(self) -> NotebookStats:
        completed = sum(1 for i in self.items if i.is_checked)
        return NotebookStats(
            total=len(self.items),
            completed=completed,
            remaining=len(self.items) - completed,
        )

    def printable(self) -> str:
        remaining = [i for i in self.items if not i.is_checked]
        if not remaining:
            return ""
        lines = ["Shopping list:", ""]
        lines.extend(f"• {i.name}" for i in remaining)
        return "\n".join(lines)
