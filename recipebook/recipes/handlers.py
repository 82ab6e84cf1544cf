import logging
from typing import List

from fastapi import HTTPException
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from recipebook.db.errors import RepoError, StorageUnavailable
from recipebook.db.repo import Repo
from recipebook.framework.logging import log_event
from recipebook.framework.tracing import traced
from recipebook.shared.schemas import generic
from recipebook.shared.schemas import recipe as rs

DATABASE_ERROR = "Database error"


def database_error(action: str, exc: RepoError, **fields) -> HTTPException:
    """
    Log the failure in full and build the opaque response the client sees.
    """
    log_event(
        "repo_error",
        level=logging.ERROR,
        action=action,
        error_type=type(exc).__name__,
        error=str(exc),
        **fields,
    )
    status_code = 503 if isinstance(exc, StorageUnavailable) else 500
    return HTTPException(status_code=status_code, detail=DATABASE_ERROR)


async def hello():
    return PlainTextResponse("hello, world!")


@traced
async def add_recipe(data: rs.Recipe, repo: Repo) -> rs.Recipe:
    """
    Stores a new recipe and echoes it back.
    """
    try:
        await run_in_threadpool(repo.add_recipe, data)
    except RepoError as exc:
        raise database_error("add_recipe", exc)
    return data


@traced
async def edit_recipe(data: rs.Recipe, repo: Repo) -> rs.Recipe:
    """
    Replaces an existing recipe and echoes it back.
    """
    if data.id is None:
        raise HTTPException(status_code=400, detail="Missing recipe ID")

    try:
        await run_in_threadpool(repo.update_recipe, data)
    except RepoError as exc:
        raise database_error("edit_recipe", exc, recipe_id=data.id)
    return data


@traced
async def list_recipes(repo: Repo) -> List[rs.Recipe]:
    try:
        return await run_in_threadpool(repo.load_recipes)
    except RepoError as exc:
        raise database_error("list_recipes", exc)


@traced
async def delete_recipe(repo: Repo, recipe_id: int) -> generic.DeleteResponse:
    """
    Deletes a recipe by its ID.
    """
    try:
        await run_in_threadpool(repo.delete_recipe, recipe_id)
    except RepoError as exc:
        raise database_error("delete_recipe", exc, recipe_id=recipe_id)
    return generic.DeleteResponse(success=True)
