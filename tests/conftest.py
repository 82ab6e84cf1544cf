import os
from pathlib import Path

os.environ.setdefault(
    "RECIPEBOOK_CONFIG", str(Path(__file__).resolve().parents[1] / "config.yaml")
)

import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402

from recipebook.config import DatabaseConfig  # noqa: E402
from recipebook.db.repo import Backend, create_repo  # noqa: E402
from recipebook.shared.schemas.recipe import (  # noqa: E402
    IngredientQuantity,
    Quantity,
    Recipe,
)


def make_recipe(**overrides) -> Recipe:
    fields = dict(
        id=1,
        name="Test Recipe",
        desc="Test Description",
        steps=["Step 1"],
        ingredients=[
            IngredientQuantity(
                ingredient="Potato", quantity=Quantity(value=1.0, unit="whole")
            )
        ],
    )
    fields.update(overrides)
    return Recipe(**fields)


@pytest.fixture
def db_config(tmp_path):
    return DatabaseConfig(path=str(tmp_path / "data" / "recipes.db"))


@pytest.fixture
def repo(db_config):
    repo = create_repo(Backend.SQLITE, db_config)
    yield repo
    repo.dispose()


@pytest.fixture
def rows(repo):
    """Run a raw query against the repo's database and return all rows."""

    def query(sql, **params):
        with repo.engine.connect() as conn:
            return conn.execute(text(sql), params).all()

    return query
