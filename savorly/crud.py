import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from . import models, schemas
from .errors import PersistenceError
from .validation import renumber_steps

logger = logging.getLogger(__name__)


def _with_details(query):
    return query.options(
        selectinload(models.Recipe.ingredients),
        selectinload(models.Recipe.steps),
        selectinload(models.Recipe.tags),
    )


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database write failed")
        raise PersistenceError(str(exc)) from exc


def get_recipe(db: Session, recipe_id: int):
    return (
        _with_details(db.query(models.Recipe))
        .filter(models.Recipe.id == recipe_id)
        .first()
    )


def get_recipes(db: Session, skip: int = 0, limit: Optional[int] = None):
    q = _with_details(db.query(models.Recipe)).order_by(models.Recipe.id)
    q = q.offset(skip)
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def get_recipes_by_type(db: Session, recipe_type: models.RecipeType):
    return (
        _with_details(db.query(models.Recipe))
        .filter(models.Recipe.type == recipe_type)
        .order_by(models.Recipe.id)
        .all()
    )


def get_recipes_by_creator(db: Session, username: str):
    # most recent first
    return (
        _with_details(db.query(models.Recipe))
        .filter(models.Recipe.created_by == username)
        .order_by(models.Recipe.id.desc())
        .all()
    )


def get_recipes_by_ids(db: Session, ids: Iterable[int]):
    ids = list(ids)
    if not ids:
        return []
    return (
        _with_details(db.query(models.Recipe))
        .filter(models.Recipe.id.in_(ids))
        .order_by(models.Recipe.id)
        .all()
    )


def get_or_create_tags(db: Session, names: Iterable[str]) -> List[models.Tag]:
    tags = {}
    for name in names:
        if name in tags:
            continue
        tag = db.query(models.Tag).filter(models.Tag.name == name).first()
        if tag is None:
            tag = models.Tag(name=name)
            db.add(tag)
        tags[name] = tag
    return list(tags.values())


def _fill_children(db: Session, db_recipe: models.Recipe, recipe: schemas.RecipeCreate):
    db_recipe.ingredients = [
        models.Ingredient(name=name) for name in recipe.ingredients
    ]
    db_recipe.steps = [
        models.RecipeStep(step_number=i, instruction=text)
        for i, text in enumerate(recipe.steps, start=1)
    ]
    db_recipe.tags = get_or_create_tags(db, recipe.tags or [])


def create_recipe(db: Session, recipe: schemas.RecipeCreate, created_by: str = ""):
    db_recipe = models.Recipe(
        title=recipe.title,
        short_description=recipe.short_description,
        description=recipe.description,
        image_path=recipe.image_path,
        preparation_time=recipe.preparation_time,
        servings=recipe.servings,
        type=recipe.type,
        created_by=created_by,
    )
    _fill_children(db, db_recipe, recipe)
    db.add(db_recipe)
    _commit(db)
    logger.info("Created recipe %s %r", db_recipe.id, db_recipe.title)
    return get_recipe(db, db_recipe.id)


def update_recipe(db: Session, recipe_id: int, recipe: schemas.RecipeCreate):
    """Overwrite a recipe.

    Ingredients, steps and tags are replaced wholesale, not merged: the old
    child rows are deleted and new ones are inserted.
    """
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return None
    db_recipe.title = recipe.title
    db_recipe.short_description = recipe.short_description
    db_recipe.description = recipe.description
    db_recipe.image_path = recipe.image_path
    db_recipe.preparation_time = recipe.preparation_time
    db_recipe.servings = recipe.servings
    db_recipe.type = recipe.type
    db_recipe.ingredients.clear()
    db_recipe.steps.clear()
    db.flush()
    _fill_children(db, db_recipe, recipe)
    _commit(db)
    db.expire(db_recipe)
    return get_recipe(db, recipe_id)


def delete_recipe(db: Session, recipe_id: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return False
    # join rows go with the recipe; Tag rows are left in place
    db.delete(db_recipe)
    _commit(db)
    logger.info("Deleted recipe %s", recipe_id)
    return True


def delete_step(db: Session, recipe_id: int, step_number: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return None
    step = next(
        (s for s in db_recipe.steps if s.step_number == step_number), None
    )
    if step is None:
        return db_recipe
    db_recipe.steps.remove(step)
    renumber_steps(sorted(db_recipe.steps, key=lambda s: s.step_number))
    _commit(db)
    return db_recipe


def count_recipes(db: Session, recipe_type: models.RecipeType = None,
                  created_by: str = None) -> int:
    q = db.query(func.count(models.Recipe.id))
    if recipe_type is not None:
        q = q.filter(models.Recipe.type == recipe_type)
    if created_by is not None:
        q = q.filter(models.Recipe.created_by == created_by)
    return q.scalar()


def database_stats(db: Session) -> schemas.DatabaseStats:
    return schemas.DatabaseStats(
        users=db.query(func.count(models.User.id)).scalar(),
        recipes=count_recipes(db),
        food=count_recipes(db, models.RecipeType.FOOD),
        drinks=count_recipes(db, models.RecipeType.DRINK),
        ingredients=db.query(func.count(models.Ingredient.id)).scalar(),
        steps=db.query(func.count(models.RecipeStep.id)).scalar(),
        tags=db.query(func.count(models.Tag.id)).scalar(),
    )


def get_user(db: Session, user_id: int):
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email).first()


def get_user_by_username(db: Session, username: str):
    return (
        db.query(models.User).filter(models.User.username == username).first()
    )


def create_user(db: Session, username: str, email: str, password_hash: str):
    db_user = models.User(
        username=username,
        email=email,
        password_hash=password_hash,
        favorite_recipes="[]",
        shopping_list="[]",
        created_recipes_ids="[]",
    )
    db.add(db_user)
    _commit(db)
    db.refresh(db_user)
    return db_user
