import inspect

from fastapi import Query


def build_query_dependency(route):
    """
    Generate a FastAPI dependency for the query params declared on a route
    in config.yaml. The returned dict becomes **kwargs to the handler.
    """
    if not route.query_params:
        return None

    parameters = []
    for name, qp in route.query_params.items():
        default = Query(
            ... if qp.required else qp.default,
            ge=qp.ge,
            le=qp.le,
            examples=[qp.example] if qp.example is not None else None,
        )
        parameters.append(
            inspect.Parameter(
                name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=qp.annotation,
            )
        )

    def query_dep(**kwargs):
        return kwargs

    query_dep.__signature__ = inspect.Signature(parameters)
    return query_dep
