import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.orm import Session

from recipebook.framework.logging import log_event
from recipebook.shared.schemas.recipe import IngredientQuantity, Quantity, Recipe

SELECT_RECIPES = text("SELECT id, name, desc FROM recipes ORDER BY id")
# rowid follows insertion, which is the caller's order
SELECT_STEPS = text(
    "SELECT text FROM steps WHERE recipe_id = :recipe_id ORDER BY rowid"
)
SELECT_INGREDIENTS = text(
    "SELECT name, quantity, unit FROM recipe_ingredients "
    "LEFT JOIN ingredients ON ingredient_id = id "
    "WHERE recipe_id = :recipe_id "
    "ORDER BY recipe_ingredients.rowid"
)


class RowSkips:
    """Counts rows dropped while assembling one load."""

    def __init__(self) -> None:
        self.count = 0

    def skip(self, table: str, recipe_id, exc: Exception) -> None:
        self.count += 1
        log_event(
            "row_skipped",
            level=logging.WARNING,
            table=table,
            recipe_id=recipe_id,
            error=str(exc),
        )


def load_steps(db: Session, recipe_id: int, skips: RowSkips) -> List[str]:
    steps = []
    for row in db.execute(SELECT_STEPS, {"recipe_id": recipe_id}):
        if not isinstance(row.text, str):
            skips.skip("steps", recipe_id, TypeError(f"step text is {row.text!r}"))
            continue
        steps.append(row.text)
    return steps


def load_ingredients(
    db: Session, recipe_id: int, skips: RowSkips
) -> List[IngredientQuantity]:
    ingredients = []
    for row in db.execute(SELECT_INGREDIENTS, {"recipe_id": recipe_id}):
        try:
            ingredients.append(
                IngredientQuantity(
                    ingredient=row.name,
                    quantity=Quantity(value=row.quantity, unit=row.unit),
                )
            )
        except ValidationError as exc:
            skips.skip("recipe_ingredients", recipe_id, exc)
    return ingredients


def assemble_recipe(db: Session, row, skips: RowSkips) -> Optional[Recipe]:
    try:
        return Recipe(
            id=row.id,
            name=row.name,
            desc=row.desc,
            steps=load_steps(db, row.id, skips),
            ingredients=load_ingredients(db, row.id, skips),
        )
    except ValidationError as exc:
        skips.skip("recipes", row.id, exc)
        return None


def load_all_recipes(db: Session) -> List[Recipe]:
    """
    Rebuild every stored recipe from its rows: one query for the recipes,
    then one for the steps and one for the ingredients of each recipe.

    Rows that cannot be decoded (e.g. a NULL name or a non-numeric quantity)
    are left out of the result and logged, so a single bad row never fails
    the whole load.
    """
    skips = RowSkips()
    recipes = []
    for row in db.execute(SELECT_RECIPES).all():
        recipe = assemble_recipe(db, row, skips)
        if recipe is not None:
            recipes.append(recipe)

    if skips.count:
        log_event(
            "load_recipes_partial",
            level=logging.WARNING,
            skipped_rows=skips.count,
            loaded=len(recipes),
        )
    return recipes
