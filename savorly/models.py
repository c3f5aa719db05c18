import enum
from datetime import datetime

from sqlalchemy import (
    Column, DateTime, Enum, ForeignKey, Integer, String, Table, Text,
)
from sqlalchemy.orm import relationship

from .db import Base


class RecipeType(str, enum.Enum):
    FOOD = "Food"
    DRINK = "Drink"


recipe_tags = Table(
    "recipe_tags",
    Base.metadata,
    Column(
        "recipe_id", Integer,
        ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column(
        "tag_id", Integer,
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True,
    ),
)


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    short_description = Column(String(500), nullable=False, default="")
    image_path = Column(String(500), nullable=False, default="")
    preparation_time = Column(Integer, nullable=False, default=0)  # minutes
    servings = Column(Integer, nullable=False, default=1)
    type = Column(Enum(RecipeType), nullable=False, index=True)
    created_by = Column(String(50), nullable=False, default="", index=True)

    ingredients = relationship(
        "Ingredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="Ingredient.id",
    )
    steps = relationship(
        "RecipeStep",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeStep.step_number",
    )
    tags = relationship(
        "Tag", secondary=recipe_tags, back_populates="recipes",
        order_by="Tag.id",
    )

    # Not a column: computed from the current user's favorite ids.
    is_favorite = False

    @property
    def tags_display(self) -> str:
        return " ".join(t.name for t in self.tags)

    def __repr__(self):
        return f"<Recipe {self.id} {self.title!r}>"


class Ingredient(Base):
    __tablename__ = "ingredients"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)  # may embed amount and unit
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    recipe = relationship("Recipe", back_populates="ingredients")


class RecipeStep(Base):
    __tablename__ = "recipe_steps"
    id = Column(Integer, primary_key=True, index=True)
    step_number = Column(Integer, nullable=False)
    instruction = Column(Text, nullable=False)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    recipe = relationship("Recipe", back_populates="steps")


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)

    recipes = relationship("Recipe", secondary=recipe_tags, back_populates="tags")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    password_hash = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    # JSON-encoded lists
    favorite_recipes = Column(Text, nullable=False, default="[]")
    shopping_list = Column(Text, nullable=False, default="[]")
    created_recipes_ids = Column(Text, nullable=False, default="[]")
