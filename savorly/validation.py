from typing import List

from .models import RecipeType
from .schemas import RecipeCreate

DEFAULT_IMAGES = {
    RecipeType.FOOD: (
        "https://images.unsplash.com/photo-1546069901-ba9599a7e63c"
        "?auto=format&fit=crop&w=400&h=300"
    ),
    RecipeType.DRINK: (
        "https://images.unsplash.com/photo-1544145945-f90425340c7e"
        "?auto=format&fit=crop&w=400&h=300"
    ),
}

DEFAULT_TAGS = {
    RecipeType.FOOD: ["#свіжий", "#домашній"],
    RecipeType.DRINK: ["#освіжаючий", "#домашній"],
}

MIN_TITLE_LENGTH = 3


def validate_recipe(form: RecipeCreate) -> List[str]:
    """Return every problem with the form; an empty list means it is valid."""
    errors = []
    title = (form.title or "").strip()
    if not title:
        errors.append("Enter a recipe title")
    elif len(title) < MIN_TITLE_LENGTH:
        errors.append(
            f"Recipe title must be at least {MIN_TITLE_LENGTH} characters"
        )
    if not (form.short_description or "").strip():
        errors.append("Enter a short description")
    if not (form.description or "").strip():
        errors.append("Enter a full description")
    if form.preparation_time <= 0:
        errors.append("Preparation time must be greater than 0 minutes")
    if form.servings <= 0:
        errors.append("Servings must be greater than 0")
    if not [i for i in form.ingredients if i and i.strip()]:
        errors.append("Add at least one ingredient")
    if not [s for s in form.steps if s and s.strip()]:
        errors.append("Add at least one step")
    return errors


def clean_recipe(form: RecipeCreate) -> RecipeCreate:
    """Trim text fields, drop blank entries and fill per-type defaults."""
    image = form.image_path.strip() or DEFAULT_IMAGES[form.type]
    tags = form.tags
    if not tags:
        tags = list(DEFAULT_TAGS[form.type])
    return form.model_copy(update={
        "title": form.title.strip(),
        "short_description": form.short_description.strip(),
        "description": form.description.strip(),
        "image_path": image,
        "ingredients": [i.strip() for i in form.ingredients if i and i.strip()],
        "steps": [s.strip() for s in form.steps if s and s.strip()],
        "tags": [t.strip() for t in tags if t and t.strip()],
    })


def renumber_steps(steps):
    """Number steps 1..n in their current order."""
    for i, step in enumerate(steps, start=1):
        step.step_number = i
    return steps


def remove_step(steps, step_number: int):
    """Drop the step with ``step_number`` and close the gap."""
    remaining = [s for s in steps if s.step_number != step_number]
    remaining.sort(key=lambda s: s.step_number)
    return renumber_steps(remaining)
