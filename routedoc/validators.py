"""
Validation steps built from Pydantic schemas.

Each factory takes a schema (anything ``pydantic.TypeAdapter`` accepts) and
returns a step ``step(request, response)`` for a route's handler chain.
"""

import logging
from collections.abc import MutableMapping
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError

from .exceptions import HTTPError
from .models import Request, Response

logger = logging.getLogger(__name__)

Step = Callable[[Request, Response], Any]

MALFORMED_REQUEST = "malformed"
MALFORMED_RESPONSE = "endpoint sent malformed response"


def _merge(container: Any, value: Any) -> Any:
    """Merge ``value`` into ``container`` key by key.

    Keys the schema does not know about are left alone. Returns the object the
    request should hold afterwards.
    """
    if isinstance(container, MutableMapping) and isinstance(value, dict):
        container.update(value)
        return container
    return value


def _request_validator(schema: Any, attribute: str) -> Step:
    adapter = TypeAdapter(schema)

    def validate(request: Request, response: Response) -> None:
        raw = getattr(request, attribute)
        try:
            parsed = adapter.validate_python(raw)
        except ValidationError as e:
            logger.debug(
                f"Rejected {attribute} for {request.method.value} {request.path}: {e.errors()}"
            )
            raise HTTPError(400, MALFORMED_REQUEST) from None
        dumped = adapter.dump_python(parsed, exclude_unset=True)
        setattr(request, attribute, _merge(raw, dumped))

    validate.__name__ = f"validate_{attribute}"
    return validate


def validate_body(schema: Any) -> Step:
    """Validate and coerce the parsed JSON request body."""
    return _request_validator(schema, "json_body")


def validate_query(schema: Any) -> Step:
    """Validate and coerce the query string parameters."""
    return _request_validator(schema, "query_params")


def validate_params(schema: Any) -> Step:
    """Validate and coerce the path parameters."""
    return _request_validator(schema, "path_params")


def validate_response(schema: Any) -> Step:
    """Veto JSON payloads that do not match ``schema``.

    The check is installed as a send interceptor, so it runs at the moment the
    handler serializes its payload and a bad payload is never written.
    """
    adapter = TypeAdapter(schema)

    def validate_response_body(request: Request, response: Response) -> None:
        def check(payload: Any) -> None:
            try:
                adapter.validate_python(payload)
            except ValidationError as e:
                logger.error(
                    f"{request.method.value} {request.path} produced a response "
                    f"that does not match its schema: {e.errors()}"
                )
                raise HTTPError(500, MALFORMED_RESPONSE) from None

        response.intercept(check)

    return validate_response_body
