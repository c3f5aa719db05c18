from types import SimpleNamespace

from savorly import models
from savorly.validation import (
    DEFAULT_IMAGES, clean_recipe, remove_step, renumber_steps, validate_recipe,
)


def test_valid_form_has_no_errors(make_form):
    assert validate_recipe(make_form()) == []


def test_every_problem_is_reported(make_form):
    form = make_form(
        title=" ab ", short_description="", description="  ",
        preparation_time=0, servings=-1, ingredients=[" "], steps=[],
    )
    errors = validate_recipe(form)
    assert errors == [
        "Recipe title must be at least 3 characters",
        "Enter a short description",
        "Enter a full description",
        "Preparation time must be greater than 0 minutes",
        "Servings must be greater than 0",
        "Add at least one ingredient",
        "Add at least one step",
    ]


def test_empty_title_message(make_form):
    assert validate_recipe(make_form(title=""))[0] == "Enter a recipe title"


def test_clean_fills_defaults_per_type(make_form):
    form = clean_recipe(make_form(
        title="  Tea  ", type=models.RecipeType.DRINK, image_path=" ",
        tags=None, ingredients=["water", "", " leaves "],
    ))
    assert form.title == "Tea"
    assert form.image_path == DEFAULT_IMAGES[models.RecipeType.DRINK]
    assert form.tags == ["#освіжаючий", "#домашній"]
    assert form.ingredients == ["water", "leaves"]

    food = clean_recipe(make_form(tags=[]))
    assert food.tags == ["#свіжий", "#домашній"]


def test_remove_step_keeps_numbers_dense():
    steps = [SimpleNamespace(step_number=n, instruction=f"s{n}") for n in (1, 2, 3)]
    left = remove_step(steps, 2)
    assert [(s.step_number, s.instruction) for s in left] == [(1, "s1"), (2, "s3")]


def test_renumber_steps():
    steps = [SimpleNamespace(step_number=n) for n in (4, 7, 9)]
    assert [s.step_number for s in renumber_steps(steps)] == [1, 2, 3]
