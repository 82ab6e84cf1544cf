"""
Mutating statements for the recipes schema.

Every function here runs inside a transaction owned by the caller and never
commits. The caller commits once all of them succeed, or rolls back.
"""

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.orm import Session

from recipebook.db.ingredients import resolve_ingredient
from recipebook.shared.schemas.recipe import IngredientQuantity, Recipe

INSERT_RECIPE = text("INSERT INTO recipes (name, desc) VALUES (:name, :desc)")
UPDATE_RECIPE = text("UPDATE recipes SET name = :name, desc = :desc WHERE id = :id")
DELETE_RECIPE = text("DELETE FROM recipes WHERE id = :id")

INSERT_STEP = text("INSERT INTO steps (recipe_id, text) VALUES (:recipe_id, :text)")
DELETE_STEPS = text("DELETE FROM steps WHERE recipe_id = :recipe_id")

INSERT_RECIPE_INGREDIENT = text(
    "INSERT INTO recipe_ingredients (recipe_id, ingredient_id, quantity, unit) "
    "VALUES (:recipe_id, :ingredient_id, :quantity, :unit)"
)
DELETE_RECIPE_INGREDIENTS = text(
    "DELETE FROM recipe_ingredients WHERE recipe_id = :recipe_id"
)


def insert_steps(db: Session, recipe_id: int, steps: Iterable[str]) -> None:
    for step in steps:
        db.execute(INSERT_STEP, {"recipe_id": recipe_id, "text": step})


def insert_ingredients(
    db: Session, recipe_id: int, ingredients: Iterable[IngredientQuantity]
) -> None:
    for ing_quant in ingredients:
        ingredient_id = resolve_ingredient(db, ing_quant.ingredient)
        db.execute(
            INSERT_RECIPE_INGREDIENT,
            {
                "recipe_id": recipe_id,
                "ingredient_id": ingredient_id,
                "quantity": ing_quant.quantity.value,
                "unit": ing_quant.quantity.unit,
            },
        )


def insert_recipe(db: Session, recipe: Recipe) -> int:
    """
    Insert a new recipe with its steps and ingredients. `recipe.id` is
    ignored; the id assigned by storage is returned.
    """
    result = db.execute(INSERT_RECIPE, {"name": recipe.name, "desc": recipe.desc})
    recipe_id = result.lastrowid

    insert_steps(db, recipe_id, recipe.steps)
    insert_ingredients(db, recipe_id, recipe.ingredients)

    return recipe_id


def replace_recipe(db: Session, recipe: Recipe) -> int:
    """
    Overwrite name/desc and swap out the full step and ingredient sets.
    Returns the number of recipe rows matched; 0 means the id is unknown and
    nothing was written.
    """
    result = db.execute(
        UPDATE_RECIPE, {"name": recipe.name, "desc": recipe.desc, "id": recipe.id}
    )

    db.execute(DELETE_STEPS, {"recipe_id": recipe.id})
    db.execute(DELETE_RECIPE_INGREDIENTS, {"recipe_id": recipe.id})

    if result.rowcount == 0:
        return 0

    insert_steps(db, recipe.id, recipe.steps)
    insert_ingredients(db, recipe.id, recipe.ingredients)

    return result.rowcount


def remove_recipe(db: Session, recipe_id: int) -> int:
    """
    Delete one recipe. Steps and ingredient rows go with it through the
    ON DELETE CASCADE clauses. Returns the number of rows deleted.
    """
    result = db.execute(DELETE_RECIPE, {"id": recipe_id})
    return result.rowcount
