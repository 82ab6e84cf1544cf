from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from recipebook.config import get_config, get_config_for_service
from recipebook.db.repo import Repo
from recipebook.framework.helpers import make_endpoint, resolve_handler
from recipebook.framework.logging import log_event
from recipebook.framework.tracing import tracing_middleware


def create_microservice(service_name: str, repo: Repo) -> FastAPI:
    """
    Build a FastAPI microservice dynamically from config.yaml.
    `repo` is handed to every handler that asks for it.
    """

    app_config = get_config()
    service = get_config_for_service(service_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.repo.dispose()

    app = FastAPI(
        title=service.title,
        version=service.version,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.repo = repo

    router = APIRouter(prefix=app_config.urlPrefix)

    # Register all routes listed under this service config
    for route in service.routes:
        handler_fn = resolve_handler(route.handler)
        endpoint = make_endpoint(route, handler_fn)

        router.add_api_route(
            route.path,
            endpoint,
            methods=[route.method.upper()],
            response_model=route.response_model,
            summary=route.description,
            tags=route.tags or [service.name],
        )

        log_event(
            "startup",
            action="route_registration",
            service_name=service_name,
            path=route.path,
            handler=route.handler,
        )

    app.include_router(router)
    app.middleware("http")(tracing_middleware)

    @app.get("/healthz")
    async def health():
        return {"status": "ok"}

    return app
