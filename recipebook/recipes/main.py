import logging
import sys
from urllib.parse import urlparse

import uvicorn

from recipebook.config import get_config_for_service
from recipebook.db.errors import StartupError
from recipebook.db.repo import Backend, create_repo
from recipebook.framework.app import create_microservice
from recipebook.framework.logging import log_event

SERVICE_NAME = "recipes"


def build_app():
    """
    Bring up storage and build the recipes app on top of it.
    Raises StartupError if the database cannot be prepared.
    """
    service = get_config_for_service(SERVICE_NAME)
    repo = create_repo(Backend.SQLITE, service.db)
    return create_microservice(SERVICE_NAME, repo)


def main():
    service = get_config_for_service(SERVICE_NAME)
    log_event("startup", action="starting", service_name=SERVICE_NAME)

    try:
        app = build_app()
    except StartupError as exc:
        log_event(
            "startup_failed",
            level=logging.CRITICAL,
            service_name=SERVICE_NAME,
            error=str(exc),
        )
        sys.exit(1)

    url = urlparse(service.url)
    uvicorn.run(app, host=url.hostname or "127.0.0.1", port=url.port or 8080)


if __name__ == "__main__":
    main()
