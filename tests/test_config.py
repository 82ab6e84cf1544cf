from typing import List

import pytest

from recipebook.config import (
    DatabaseConfig,
    get_config,
    get_config_for_service,
    load_model,
    parse_config,
    parse_query_params,
)
from recipebook.shared.schemas.recipe import Recipe


def test_recipes_service_from_config_file():
    config = get_config()
    service = get_config_for_service("recipes")

    assert config.title == "recipebook"
    assert service.name == "recipes"
    assert service.db.path == "recipes.db"
    assert [(r.method.upper(), r.path) for r in service.routes] == [
        ("GET", "/"),
        ("POST", "/recipes/add"),
        ("PUT", "/recipes/edit"),
        ("GET", "/recipes/all"),
        ("DELETE", "/recipes/delete"),
    ]


def test_unknown_service():
    with pytest.raises(ValueError):
        get_config_for_service("pricing")


def test_load_model_list_suffix():
    assert load_model("recipebook.shared.schemas.recipe.Recipe") is Recipe
    assert load_model("recipebook.shared.schemas.recipe.Recipe[]") == List[Recipe]
    assert load_model(None) is None


def test_query_params():
    params = parse_query_params(
        {"recipe_id": {"type": "int", "required": True, "ge": 1}}
    )

    assert params["recipe_id"].annotation is int
    assert params["recipe_id"].required
    assert params["recipe_id"].ge == 1


def test_unsupported_query_param_type():
    (param,) = parse_query_params({"when": {"type": "datetime"}}).values()

    with pytest.raises(ValueError):
        param.annotation


def test_db_block_shapes():
    config = parse_config(
        {
            "title": "t",
            "version": "1",
            "services": {
                "a": {"title": "A", "version": "1", "url": "http://x:1", "db": "a.db"},
                "b": {"title": "B", "version": "1", "url": "http://x:2"},
                "c": {
                    "title": "C",
                    "version": "1",
                    "url": "http://x:3",
                    "db": {"path": "c.db", "pool_timeout": 2},
                },
            },
        }
    )

    assert config.urlPrefix == ""
    assert config.services["a"].db == DatabaseConfig(path="a.db")
    assert config.services["b"].db == DatabaseConfig()
    assert config.services["c"].db.pool_timeout == 2
    assert config.services["c"].routes == []
