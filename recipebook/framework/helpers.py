import importlib
import inspect

from fastapi import Body, Depends, Request

from recipebook.framework.logging import Span
from recipebook.framework.utils import build_query_dependency


def get_repo(request: Request):
    """
    The repository the app was built with.
    """
    return request.app.state.repo


def no_query_params():
    return {}


async def _run(handler_fn, request, data, repo, qp):
    """
    Helper to run a handler function with the arguments it asks for.
    Handlers name what they need: `data` for the request body, `repo` for
    the repository, plus any path or query parameter by name.
    """
    with Span(handler_fn.__name__):
        available = {**request.path_params, **qp, "data": data, "repo": repo}
        params = inspect.signature(handler_fn).parameters
        kwargs = {name: available[name] for name in params if name in available}

        res = handler_fn(**kwargs)
        return await res if inspect.isawaitable(res) else res


def resolve_handler(handler_path: str):
    """
    Resolve a handler function from a string path, e.g. "recipebook.recipes.handlers.add_recipe".
    """
    module_name, func_name = handler_path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, func_name)


def build_body_handler(request_model, handler_fn, qp_dep):
    """
    Helper to build an endpoint for routes that expect a request body.
    FastAPI validates the body against `request_model` before the handler runs.
    """

    async def endpoint(
        request: Request,
        data: request_model = Body(..., embed=False),
        repo=Depends(get_repo),
        qp: dict = Depends(qp_dep),
    ):
        return await _run(handler_fn, request, data, repo, qp)

    return endpoint


def build_query_handler(handler_fn, qp_dep):
    """
    Helper to build an endpoint for routes that do not expect a request body.
    """

    async def endpoint(
        request: Request,
        repo=Depends(get_repo),
        qp: dict = Depends(qp_dep),
    ):
        return await _run(handler_fn, request, None, repo, qp)

    return endpoint


def make_endpoint(route, handler_fn):
    """
    Helper to build an endpoint for a given route.
    This handles the FastAPI dependency injection for both body and query parameters,
    and then calls the actual handler function with the correct arguments.
    """
    request_model = route.request_model
    qp_dep = build_query_dependency(route) or no_query_params

    if request_model:
        return build_body_handler(request_model, handler_fn, qp_dep)

    return build_query_handler(handler_fn, qp_dep)
