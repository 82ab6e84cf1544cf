import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from recipebook.db.errors import StartupError
from recipebook.framework.logging import Span, log_event

CREATE_RECIPES_TABLE = (
    "CREATE TABLE IF NOT EXISTS recipes "
    "(id INTEGER PRIMARY KEY ASC, name TEXT, desc TEXT)"
)

CREATE_STEPS_TABLE = """
CREATE TABLE IF NOT EXISTS steps (
  recipe_id INTEGER, text TEXT,
  PRIMARY KEY (recipe_id, text),
  FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON UPDATE CASCADE ON DELETE CASCADE)
"""

CREATE_INGREDIENTS_TABLE = (
    "CREATE TABLE IF NOT EXISTS ingredients "
    "(id INTEGER PRIMARY KEY ASC, name TEXT NOT NULL UNIQUE)"
)

CREATE_RECIPE_INGREDIENTS_TABLE = """
CREATE TABLE IF NOT EXISTS recipe_ingredients (
  recipe_id INTEGER, ingredient_id INTEGER, quantity REAL, unit TEXT,
  PRIMARY KEY (recipe_id, ingredient_id),
  FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON UPDATE CASCADE ON DELETE CASCADE,
  FOREIGN KEY (ingredient_id) REFERENCES ingredients(id) ON UPDATE CASCADE ON DELETE CASCADE)
"""

# Tables that hang off `recipes`. Creation order matters for the foreign keys.
DEPENDENT_TABLES = (
    ("steps", CREATE_STEPS_TABLE),
    ("ingredients", CREATE_INGREDIENTS_TABLE),
    ("recipe_ingredients", CREATE_RECIPE_INGREDIENTS_TABLE),
)


def create_table(engine: Engine, ddl: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(ddl))


def create_expected_tables(engine: Engine) -> None:
    """
    Create the four tables if they are missing. Running it against an
    existing database is a no-op.

    Only the `recipes` table is load-bearing for startup: if it cannot be
    created a StartupError is raised. A failure on one of the dependent
    tables is logged and startup carries on.
    """
    with Span("db_create_expected_tables"):
        try:
            create_table(engine, CREATE_RECIPES_TABLE)
        except SQLAlchemyError as exc:
            log_event(
                "schema_error",
                level=logging.ERROR,
                table="recipes",
                error=str(exc),
            )
            raise StartupError(f"Unable to create recipes table: {exc}") from exc

        for table, ddl in DEPENDENT_TABLES:
            try:
                create_table(engine, ddl)
            except SQLAlchemyError as exc:
                log_event(
                    "schema_error",
                    level=logging.ERROR,
                    table=table,
                    error=str(exc),
                )
