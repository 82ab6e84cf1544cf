import contextlib
from typing import List

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from recipebook.config import DatabaseConfig
from recipebook.db import reader, writer
from recipebook.db.errors import (
    RepoError,
    StartupError,
    StorageUnavailable,
    WriteConflict,
)
from recipebook.db.pool import create_db_engine, create_session_factory
from recipebook.db.repo import Repo
from recipebook.db.schema import create_expected_tables
from recipebook.framework.logging import Span, log_event
from recipebook.framework.tracing import traced
from recipebook.shared.schemas.recipe import Recipe


@contextlib.contextmanager
def translate_errors(operation: str):
    """
    Map SQLAlchemy failures raised inside an operation onto the repository's
    error types.
    """
    try:
        yield
    except IntegrityError as exc:
        raise WriteConflict(f"{operation}: {exc.orig}") from exc
    except PoolTimeoutError as exc:
        raise StorageUnavailable(f"{operation}: no connection available") from exc
    except OperationalError as exc:
        raise StorageUnavailable(f"{operation}: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        raise RepoError(f"{operation}: {exc}") from exc


class SqliteRepo(Repo):
    """
    Repository over a single SQLite file.

    Each call checks a connection out of the pool for its own duration and
    runs all of its statements in one transaction.
    """

    def __init__(self, engine) -> None:
        self.engine = engine
        self.SessionLocal = create_session_factory(engine)

    def setup(self) -> None:
        create_expected_tables(self.engine)

    @traced
    def add_recipe(self, recipe: Recipe) -> None:
        with Span("db_add_recipe"), translate_errors("add_recipe"):
            with self.SessionLocal.begin() as db:
                recipe_id = writer.insert_recipe(db, recipe)
        log_event("recipe_added", recipe_id=recipe_id, name=recipe.name)

    @traced
    def update_recipe(self, recipe: Recipe) -> None:
        if recipe.id is None:
            raise ValueError("update_recipe requires a recipe id")

        with Span("db_update_recipe"), translate_errors("update_recipe"):
            with self.SessionLocal.begin() as db:
                matched = writer.replace_recipe(db, recipe)
        log_event("recipe_updated", recipe_id=recipe.id, matched=matched)

    @traced
    def delete_recipe(self, recipe_id: int) -> None:
        with Span("db_delete_recipe"), translate_errors("delete_recipe"):
            with self.SessionLocal.begin() as db:
                deleted = writer.remove_recipe(db, recipe_id)
        log_event("recipe_deleted", recipe_id=recipe_id, deleted=deleted)

    @traced
    def load_recipes(self) -> List[Recipe]:
        with Span("db_load_recipes"), translate_errors("load_recipes"):
            # one read transaction, so every recipe comes from the same snapshot
            with self.SessionLocal.begin() as db:
                return reader.load_all_recipes(db)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


def create_repo(db_config: DatabaseConfig) -> SqliteRepo:
    engine = create_db_engine(db_config)
    repo = SqliteRepo(engine)
    try:
        repo.setup()
    except StartupError:
        engine.dispose()
        raise
    return repo
