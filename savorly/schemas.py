from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import RecipeType


class RecipeFields(BaseModel):
    title: str = Field(
        ..., json_schema_extra={"example": "Борщ український"}
    )
    short_description: str = ""
    description: str = ""
    image_path: str = ""
    preparation_time: int = Field(
        0, json_schema_extra={"example": 90}
    )
    servings: int = 1
    type: RecipeType = RecipeType.FOOD


class RecipeCreate(RecipeFields):
    ingredients: List[str] = Field(
        default_factory=list,
        json_schema_extra={"example": ["Буряк  2шт", "Капуста  300г"]},
    )
    # Step instructions in order; numbered 1..n on save
    steps: List[str] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                "Зваріть бульйон",
                "Додайте овочі та варіть 20 хвилин",
            ]
        },
    )
    tags: Optional[List[str]] = Field(
        default=None,
        json_schema_extra={"example": ["#суп", "#українська"]},
    )


class Ingredient(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class RecipeStep(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    step_number: int
    instruction: str


class Tag(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class Recipe(RecipeFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by: str = ""
    is_favorite: bool = False
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[RecipeStep] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    success: bool
    message: str


class Profile(BaseModel):
    username: str
    email: str
    created_count: int
    favorites_count: int


class UserSnapshot(BaseModel):
    """Layout of the ``user_data.json`` file."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    favorite_recipes: str = Field("[]", alias="favoriteRecipes")
    shopping_list: str = Field("[]", alias="shoppingList")
    created_recipes_ids: str = Field("[]", alias="createdRecipesIds")
    last_login: datetime = Field(default_factory=datetime.now, alias="lastLogin")


class NotebookItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    is_checked: bool = Field(False, alias="isChecked")


class NotebookItemCreate(BaseModel):
    name: str


class NotebookItemUpdate(BaseModel):
    is_checked: bool


class NotebookStats(BaseModel):
    total: int
    completed: int
    remaining: int


class Notebook(BaseModel):
    items: List[NotebookItem]
    stats: NotebookStats


class DatabaseStats(BaseModel):
    users: int
    recipes: int
    food: int
    drinks: int
    ingredients: int
    steps: int
    tags: int
