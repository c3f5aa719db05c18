import json
import logging
from pathlib import Path
from typing import Iterable, List

from sqlalchemy.orm import Session

from . import crud, models, schemas

logger = logging.getLogger(__name__)


def read_seed_file(path) -> List[dict]:
    """Recipe entries (``RecipeCreate`` layout plus ``created_by``) from a
    JSON file; a missing file yields no entries."""
    path = Path(path)
    if not path.exists():
        logger.warning("Seed file %s not found", path)
        return []
    return json.loads(path.read_text(encoding="utf-8"))


def import_recipes(db: Session, entries: Iterable[dict]) -> int:
    """Insert every entry whose title is not in the catalog yet."""
    added = 0
    for entry in entries:
        title = entry.get("title")
        if not title:
            continue
        exists = (
            db.query(models.Recipe)
            .filter(models.Recipe.title == title)
            .first()
        )
        if exists:
            continue
        recipe = schemas.RecipeCreate.model_validate(entry)
        crud.create_recipe(db, recipe, created_by=entry.get("created_by", ""))
        added += 1
    return added


def seed_if_empty(db: Session, path) -> int:
    if db.query(models.Recipe).first() is not None:
        return 0
    added = import_recipes(db, read_seed_file(path))
    logger.info("Seeded %d recipes from %s", added, path)
    return added
