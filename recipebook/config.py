import functools
import importlib
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

CONFIG_ENV_VAR = "RECIPEBOOK_CONFIG"

QUERY_PARAM_TYPES = {"int": int, "str": str, "float": float, "bool": bool}


@dataclass
class QueryParam:
    """
    Represents a query parameter for a route.
    """

    type: str  # "int", "str", etc. resolved through QUERY_PARAM_TYPES
    default: Any = None
    required: bool = False
    ge: Optional[float] = None
    le: Optional[float] = None
    example: Any = None

    @property
    def annotation(self):
        try:
            return QUERY_PARAM_TYPES[self.type]
        except KeyError:
            raise ValueError(f"Unsupported query param type: {self.type}")


@dataclass
class Route:
    """
    Represents a route in the service.
    """

    method: str
    path: str
    request_model: Optional[Any]
    response_model: Optional[Any]
    handler: str
    query_params: Dict[str, QueryParam]
    description: Optional[str]
    tags: List[str]


@dataclass
class DatabaseConfig:
    """
    Where the service keeps its data and how the connection pool is sized.
    """

    path: str = "recipes.db"
    pool_size: int = 5
    max_overflow: int = 0
    pool_timeout: float = 30.0
    echo: bool = False


@dataclass
class Service:
    """
    Represents a service with its configuration, including routes and database.
    """

    name: str
    version: str
    title: str
    url: str
    db: DatabaseConfig
    routes: List[Route] = field(default_factory=list)


@dataclass
class Config:
    """
    Represents the entire configuration of the application, including all services.
    """

    urlPrefix: str
    title: str
    version: str
    services: dict[str, Service]


def load_model(ref: Optional[str]):
    """
    Loads a model class from a string reference.
    Handles optional `List` types by checking for `[]` suffix.
    """
    if not ref:
        return None

    is_list = ref.endswith("[]")
    if is_list:
        ref = ref[:-2]

    module_name, class_name = ref.rsplit(".", 1)
    module = importlib.import_module(module_name)
    cls = getattr(module, class_name)

    if is_list:
        return List[cls]

    return cls


def parse_query_params(data: Optional[dict]) -> Dict[str, QueryParam]:
    """
    Parses a dictionary of query parameter configurations into a dictionary of QueryParam objects.
    """
    if not data:
        return {}
    params: Dict[str, QueryParam] = {}
    for name, cfg in data.items():
        params[name] = QueryParam(
            type=cfg.get("type", "str"),
            default=cfg.get("default"),
            required=cfg.get("required", False),
            ge=cfg.get("ge"),
            le=cfg.get("le"),
            example=cfg.get("example"),
        )
    return params


def parse_route(route_data: dict) -> Route:
    """
    Parses a dictionary of route configurations into a Route object.
    """
    return Route(
        method=route_data["method"],
        path=route_data["path"],
        request_model=load_model(route_data.get("request_model")),
        response_model=load_model(route_data.get("response_model")),
        handler=route_data["handler"],
        description=route_data.get("description"),
        tags=route_data.get("tags", []),
        query_params=parse_query_params(route_data.get("query_params")),
    )


def parse_database(db_data: Optional[dict]) -> DatabaseConfig:
    """
    Parses the `db` block of a service. Missing keys fall back to the defaults.
    """
    if not db_data:
        return DatabaseConfig()
    if isinstance(db_data, str):
        return DatabaseConfig(path=db_data)
    return DatabaseConfig(**db_data)


def parse_service(service_data: dict) -> Service:
    """
    Parses a dictionary of service configurations into a Service object.
    """
    return Service(
        name=service_data["name"],
        title=service_data["title"],
        version=service_data["version"],
        url=service_data["url"],
        db=parse_database(service_data.get("db")),
        routes=[parse_route(route) for route in service_data.get("routes", [])],
    )


def get_config_for_service(name: str) -> Service:
    """
    Retrieves the configuration for a specific service by its name.
    """
    svc = get_config().services.get(name)
    if svc:
        return svc
    raise ValueError(f"Service with name {name} not found.")


def config_path() -> str:
    """
    The config file in use: $RECIPEBOOK_CONFIG, or config.yaml at the project root.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(BASE_DIR, "config.yaml")


def parse_config(raw_config: dict) -> Config:
    services = {
        name: parse_service({"name": name, **data})
        for name, data in raw_config["services"].items()
    }

    return Config(
        urlPrefix=raw_config.get("urlPrefix", ""),
        title=raw_config["title"],
        version=raw_config["version"],
        services=services,
    )


@functools.lru_cache(maxsize=None)
def load_config(path: str) -> Config:
    with open(path, "r") as f:
        raw_config = yaml.safe_load(f)
    return parse_config(raw_config)


def get_config() -> Config:
    """
    Loads and parses the entire application configuration from the config file.
    """
    return load_config(config_path())
