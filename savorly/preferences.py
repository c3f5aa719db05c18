"""
Per-user preference lists (favorites, shopping list, created recipes).

Each list is stored as JSON text on the user's row, copied into the
in-memory session and mirrored into a snapshot file so the last known state
survives a restart. Writes go database first, then session, then snapshot.
When a snapshot for the same user is found at login it is applied on top
of the database row (unless ``snapshot_precedence`` is ``"database"``).

Failures in this module are logged and swallowed: losing a snapshot must
never block the user.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud
from .config import settings
from .schemas import UserSnapshot
from .session import UserSession

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = ("favorite_recipes", "shopping_list", "created_recipes_ids")


def _parse_ids(text: str) -> List[int]:
    if not text:
        return []
    try:
        ids = json.loads(text)
    except ValueError:
        logger.warning("Ignoring malformed id list %r", text)
        return []
    if not isinstance(ids, list):
        return []
    return [i for i in ids if isinstance(i, int)]


class PreferenceStore:
    def __init__(self, session: UserSession, snapshot_path: Optional[Path] = None,
                 precedence: Optional[str] = None):
        self.session = session
        self.snapshot_path = Path(snapshot_path or settings.user_data_path)
        self.precedence = precedence or settings.snapshot_precedence

    # favorites

    def get_favorites(self) -> List[int]:
        if not self.session.is_logged_in:
            return []
        return _parse_ids(self.session.user.favorite_recipes)

    def update_favorites(self, db: Session, recipe_ids: List[int]):
        self._update_field(db, "favorite_recipes", json.dumps(list(recipe_ids)))

    # shopping list

    def get_shopping_list(self) -> str:
        return self.session.user.shopping_list if self.session.is_logged_in else ""

    def update_shopping_list(self, db: Session, shopping_list_json: str):
        self._update_field(db, "shopping_list", shopping_list_json)

    # created recipes

    def get_created_recipes(self) -> List[int]:
        if not self.session.is_logged_in:
            return []
        return _parse_ids(self.session.user.created_recipes_ids)

    def update_created_recipes(self, db: Session, recipe_ids: List[int]):
        self._update_field(
            db, "created_recipes_ids", json.dumps(list(recipe_ids))
        )

    def add_created_recipe(self, db: Session, recipe_id: int):
        ids = self.get_created_recipes()
        if recipe_id not in ids:
            ids.append(recipe_id)
            self.update_created_recipes(db, ids)

    def remove_created_recipe(self, db: Session, recipe_id: int):
        ids = self.get_created_recipes()
        if recipe_id in ids:
            ids.remove(recipe_id)
            self.update_created_recipes(db, ids)

    def _update_field(self, db: Session, field: str, value: str):
        if not self.session.is_logged_in:
            return
        try:
            user = crud.get_user(db, self.session.user.id)
            if user is None:
                logger.warning("User %s vanished from the database", self.session.user.id)
                return
            setattr(user, field, value)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to update %s", field)
            return
        setattr(self.session.user, field, value)
        self.save_snapshot()

    # snapshot file

    def save_snapshot(self):
        if not self.session.is_logged_in:
            return
        user = self.session.user
        snapshot = UserSnapshot(
            user_id=user.id,
            favorite_recipes=user.favorite_recipes,
            shopping_list=user.shopping_list,
            created_recipes_ids=user.created_recipes_ids,
            last_login=datetime.now(),
        )
        try:
            self.snapshot_path.write_text(
                snapshot.model_dump_json(by_alias=True), encoding="utf-8"
            )
        except OSError:
            logger.exception("Failed to write snapshot %s", self.snapshot_path)

    def read_snapshot(self) -> Optional[UserSnapshot]:
        if not self.snapshot_path.exists():
            return None
        try:
            return UserSnapshot.model_validate_json(
                self.snapshot_path.read_text(encoding="utf-8")
            )
        except (OSError, ValueError):
            logger.exception("Failed to read snapshot %s", self.snapshot_path)
            return None

    def load_snapshot(self, db: Session):
        """Reconcile the logged-in user's row with the snapshot file."""
        if not self.session.is_logged_in:
            return
        if self.precedence == "database":
            self.save_snapshot()
            return

        snapshot = self.read_snapshot()
        if snapshot is None or snapshot.user_id != self.session.user.id:
            return
        try:
            user = crud.get_user(db, snapshot.user_id)
            if user is None:
                return
            for field in PREFERENCE_FIELDS:
                setattr(user, field, getattr(snapshot, field))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to apply snapshot for user %s", snapshot.user_id)
            return
        self.session.set_user(user)
        logger.info("Restored saved preferences for user %s", snapshot.user_id)
