from typing import Iterable, List, Optional

from .models import Recipe, RecipeType

# Tag chip that means "no tag filter"
ALL_TAGS = "#усі"


def matches_text(recipe: Recipe, text: str) -> bool:
    """Case-insensitive substring match over title, description,
    ingredient names and tag names."""
    needle = text.lower()
    if needle in (recipe.title or "").lower():
        return True
    if needle in (recipe.description or "").lower():
        return True
    if any(needle in i.name.lower() for i in recipe.ingredients):
        return True
    return any(needle in t.name.lower() for t in recipe.tags)


def has_tag(recipe: Recipe, tag: str) -> bool:
    tag = tag.lower()
    return any(t.name.lower() == tag for t in recipe.tags)


def matches_category(recipe: Recipe, category: str) -> bool:
    """Loose chip match used by the food and drinks pages: a tag containing
    the chip text (without ``#``), or the title containing it in any case."""
    if not category or category == ALL_TAGS:
        return True
    needle = category.replace("#", "")
    if any(needle in t.name for t in recipe.tags):
        return True
    return needle.lower() in (recipe.title or "").lower()


def filter_by_category(recipes: Iterable[Recipe], category: Optional[str]) -> List[Recipe]:
    category = (category or "").strip()
    return [r for r in recipes if matches_category(r, category)]


def filter_recipes(recipes: Iterable[Recipe], text: Optional[str] = None,
                   tag: Optional[str] = None,
                   recipe_type: Optional[RecipeType] = None) -> List[Recipe]:
    text = (text or "").strip()
    tag = (tag or "").strip()
    if tag == ALL_TAGS:
        tag = ""

    results = list(recipes)
    if text:
        results = [r for r in results if matches_text(r, text)]
    if tag:
        results = [r for r in results if has_tag(r, tag)]
    if recipe_type is not None:
        results = [r for r in results if r.type == recipe_type]
    return results
