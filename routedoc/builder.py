"""Route builder: attaches documentation metadata and schemas to a handler chain.

Example:
    class Todo(BaseModel):
        title: str
        done: Optional[bool] = None

    router.post(
        "/todos",
        endpoint(create_todo)
        .set_meta(title="create TODO", tags=["todos"])
        .set_request_body_schema(Todo)
        .set_response_schema(Todo)
        .build(),
    )

``build()`` returns a ``BuiltRoute``: the validation steps, any extra
middleware, and the handler, together with the ``RouteSchema`` the
documentation generator reads back from the router.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import RouteConfigurationError
from .validators import (
    Step,
    validate_body,
    validate_params,
    validate_query,
    validate_response,
)

Handler = Callable[..., Any]


class RouteMeta(BaseModel):
    """Documentation metadata for one route."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    title: str
    description: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None
    deprecated: Optional[bool] = None
    response_description: Optional[str] = Field(None, alias="responseDescription")
    error_description: Optional[str] = Field(None, alias="errorDescription")


@dataclass(frozen=True)
class RouteSchema:
    """Everything the documentation generator knows about a built route."""

    meta: RouteMeta
    body_schema: Any = None
    params_schema: Any = None
    query_schema: Any = None
    response_schema: Any = None
    middleware: Tuple[Step, ...] = ()


@dataclass(frozen=True)
class BuiltRoute:
    """A finalized handler chain paired with its schema.

    Iterating yields the chain in execution order: steps, then the handler.
    """

    steps: Tuple[Step, ...]
    handler: Handler
    schema: RouteSchema

    def __iter__(self) -> Iterator[Callable]:
        yield from self.steps
        yield self.handler

    def __len__(self) -> int:
        return len(self.steps) + 1


class RouteBuilder:
    """Accumulates the configuration of a single route.

    Every setter may be used once; a second call raises
    ``RouteConfigurationError``. After the first successful ``build()`` the
    builder is frozen and ``build()`` keeps returning the same result.
    """

    def __init__(self):
        self._meta: Optional[RouteMeta] = None
        self._body_schema: Any = None
        self._params_schema: Any = None
        self._query_schema: Any = None
        self._response_schema: Any = None
        self._middleware: List[Step] = []
        self._handler: Optional[Handler] = None
        self._built: Optional[BuiltRoute] = None

    def _ensure_mutable(self) -> None:
        if self._built is not None:
            raise RouteConfigurationError(
                f"route '{self._built.schema.meta.title}' is already built and can no longer be changed"
            )

    def set_meta(
        self, meta: Union[RouteMeta, Mapping[str, Any], None] = None, **fields: Any
    ) -> "RouteBuilder":
        """Set the route's documentation metadata (title is required)."""
        self._ensure_mutable()
        if self._meta is not None:
            raise RouteConfigurationError(
                f"route metadata is already defined: {self._meta.model_dump_json(exclude_none=True)}"
            )
        if meta is not None and fields:
            raise RouteConfigurationError("pass route metadata either as an object or as keywords, not both")
        try:
            if isinstance(meta, RouteMeta):
                self._meta = meta
            else:
                self._meta = RouteMeta.model_validate(dict(meta) if meta is not None else fields)
        except ValidationError as e:
            raise RouteConfigurationError(f"invalid route metadata: {e}") from e
        return self

    def set_request_body_schema(self, schema: Any) -> "RouteBuilder":
        self._ensure_mutable()
        if self._body_schema is not None:
            raise RouteConfigurationError(
                f"request body schema is already defined: {_describe(self._body_schema)}"
            )
        self._body_schema = schema
        return self

    def set_query_schema(self, schema: Any) -> "RouteBuilder":
        self._ensure_mutable()
        if self._query_schema is not None:
            raise RouteConfigurationError(
                f"query params schema is already defined: {_describe(self._query_schema)}"
            )
        self._query_schema = schema
        return self

    def set_params_schema(self, schema: Any) -> "RouteBuilder":
        self._ensure_mutable()
        if self._params_schema is not None:
            raise RouteConfigurationError(
                f"URL params schema is already defined: {_describe(self._params_schema)}"
            )
        self._params_schema = schema
        return self

    def set_response_schema(self, schema: Any) -> "RouteBuilder":
        self._ensure_mutable()
        if self._response_schema is not None:
            raise RouteConfigurationError(
                f"response schema is already defined: {_describe(self._response_schema)}"
            )
        self._response_schema = schema
        return self

    def schema(
        self,
        body: Any = None,
        query: Any = None,
        params: Any = None,
        response: Any = None,
    ) -> "RouteBuilder":
        """Set several schemas at once; ``None`` arguments are skipped."""
        if body is not None:
            self.set_request_body_schema(body)
        if query is not None:
            self.set_query_schema(query)
        if params is not None:
            self.set_params_schema(params)
        if response is not None:
            self.set_response_schema(response)
        return self

    def add_middleware(self, *steps: Step) -> "RouteBuilder":
        """Append steps that run after schema validation and before the handler."""
        self._ensure_mutable()
        self._middleware.extend(steps)
        return self

    def set_handler(self, handler: Handler) -> "RouteBuilder":
        self._ensure_mutable()
        if self._handler is not None:
            raise RouteConfigurationError(
                "A handler is already defined for this route. "
                "Use add_middleware() to add additional handlers as middleware"
            )
        self._handler = handler
        return self

    def build(self) -> BuiltRoute:
        """Assemble the handler chain.

        Validation steps come first in the fixed order body, query, params,
        response, then custom middleware, then the handler.
        """
        if self._built is not None:
            return self._built
        if self._handler is None:
            raise RouteConfigurationError("a route must have a handler function")
        if self._meta is None:
            raise RouteConfigurationError("a route must have meta info")

        steps: List[Step] = []
        if self._body_schema is not None:
            steps.append(validate_body(self._body_schema))
        if self._query_schema is not None:
            steps.append(validate_query(self._query_schema))
        if self._params_schema is not None:
            steps.append(validate_params(self._params_schema))
        if self._response_schema is not None:
            steps.append(validate_response(self._response_schema))
        steps.extend(self._middleware)

        schema = RouteSchema(
            meta=self._meta,
            body_schema=self._body_schema,
            params_schema=self._params_schema,
            query_schema=self._query_schema,
            response_schema=self._response_schema,
            middleware=tuple(steps),
        )
        self._built = BuiltRoute(steps=tuple(steps), handler=self._handler, schema=schema)
        return self._built


def endpoint(handler: Optional[Handler] = None) -> RouteBuilder:
    """Start building a route, optionally with its handler already set."""
    builder = RouteBuilder()
    if handler is not None:
        builder.set_handler(handler)
    return builder


def _describe(schema: Any) -> str:
    return getattr(schema, "__name__", None) or repr(schema)
