import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from . import crud, models
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)


def toggle_favorite(db: Session, prefs: PreferenceStore, recipe: models.Recipe) -> bool:
    """Flip ``recipe`` in the current user's favorites and return the new state.

    Raises NotAuthenticated when nobody is logged in.
    """
    prefs.session.require_user()
    favorite_ids = prefs.get_favorites()

    if recipe.id in favorite_ids:
        favorite_ids.remove(recipe.id)
        recipe.is_favorite = False
        logger.info("Removed recipe %s from favorites", recipe.id)
    else:
        favorite_ids.append(recipe.id)
        recipe.is_favorite = True
        logger.info("Added recipe %s to favorites", recipe.id)

    prefs.update_favorites(db, favorite_ids)
    return recipe.is_favorite


def is_favorite(prefs: PreferenceStore, recipe: models.Recipe) -> bool:
    if not prefs.session.is_logged_in:
        return False
    return recipe.id in prefs.get_favorites()


def refresh_favorite_flags(prefs: PreferenceStore,
                           recipes: Iterable[models.Recipe]) -> List[models.Recipe]:
    recipes = list(recipes)
    if not prefs.session.is_logged_in:
        return recipes
    favorite_ids = set(prefs.get_favorites())
    for recipe in recipes:
        recipe.is_favorite = recipe.id in favorite_ids
    return recipes


def get_favorite_recipes(db: Session, prefs: PreferenceStore,
                         recipe_type: Optional[models.RecipeType] = None):
    recipes = crud.get_recipes_by_ids(db, prefs.get_favorites())
    if recipe_type is not None:
        recipes = [r for r in recipes if r.type == recipe_type]
    for recipe in recipes:
        recipe.is_favorite = True
    return recipes
