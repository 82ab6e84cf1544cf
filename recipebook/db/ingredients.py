from sqlalchemy import text
from sqlalchemy.orm import Session

INSERT_INGREDIENT_IF_MISSING = text(
    "INSERT INTO ingredients (name) SELECT :name "
    "WHERE NOT EXISTS (SELECT 1 FROM ingredients WHERE name = :name)"
)

SELECT_INGREDIENT_ID = text("SELECT id FROM ingredients WHERE name = :name")


def resolve_ingredient(db: Session, name: str) -> int:
    """
    Return the catalog id for `name`, inserting the catalog row first if it
    does not exist yet. Runs inside the caller's transaction.

    Two independent transactions inserting the same new name can still race;
    the loser gets an IntegrityError from the UNIQUE constraint, which the
    caller lets propagate so the whole write is rolled back.
    """
    db.execute(INSERT_INGREDIENT_IF_MISSING, {"name": name})
    return db.execute(SELECT_INGREDIENT_ID, {"name": name}).scalar_one()
