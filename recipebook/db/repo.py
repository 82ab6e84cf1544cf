from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from recipebook.config import DatabaseConfig
from recipebook.shared.schemas.recipe import Recipe


class Repo(ABC):
    """
    Storage contract the HTTP layer depends on.

    Every method is blocking. Failures are raised as subclasses of
    `recipebook.db.errors.RepoError`.
    """

    @abstractmethod
    def setup(self) -> None:
        """Prepare the underlying storage. Idempotent."""

    @abstractmethod
    def add_recipe(self, recipe: Recipe) -> None:
        """Persist a new recipe. Storage assigns the id; `recipe.id` is ignored."""

    @abstractmethod
    def update_recipe(self, recipe: Recipe) -> None:
        """Replace the recipe with `recipe.id`. An unknown id is a no-op."""

    @abstractmethod
    def delete_recipe(self, recipe_id: int) -> None:
        """Delete a recipe and everything hanging off it. An unknown id is a no-op."""

    @abstractmethod
    def load_recipes(self) -> List[Recipe]:
        """Every stored recipe, fully assembled."""

    def dispose(self) -> None:
        """Release any resources held by the repository."""


class Backend(str, Enum):
    """
    Storage backends a Repo can be built on.
    """

    SQLITE = "sqlite"


def create_repo(
    backend: Backend = Backend.SQLITE, db_config: Optional[DatabaseConfig] = None
) -> Repo:
    """
    Build the repository for `backend` and run its setup.
    Raises StartupError if the storage cannot be brought up.
    """
    db_config = DatabaseConfig() if db_config is None else db_config

    if backend == Backend.SQLITE:
        from recipebook.db.sqlite import create_repo as create_sqlite_repo

        return create_sqlite_repo(db_config)

    raise ValueError(f"Unknown backend: {backend}")
