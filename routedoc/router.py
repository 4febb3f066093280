"""Router module for organizing routes with mounting support.

A router holds an ordered stack of layers. Each layer is one of:

- a route layer (``layer.route`` is set): a path plus per-method handler stacks
- a mounted router (``layer.handle`` is a ``Router``) matched as a path prefix
- a middleware layer: a plain callable run for every request under its prefix

Requests are dispatched through the stack in registration order until a
handler sends the response.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Tuple, Union

from .builder import BuiltRoute, RouteSchema
from .exceptions import RouteConfigurationError
from .models import HTTPMethod, Request, Response

logger = logging.getLogger(__name__)

PathSpec = Union[str, Pattern[str]]

_PARAM_PATTERN = re.compile(r"\{(\w+)\}")


def compile_path(path: str, end: bool = True) -> Pattern[str]:
    """Compile a route path with ``{param}`` placeholders into a regex.

    Args:
        path: Path such as ``/todos/{id}``
        end: Match the whole remaining path (routes) or only a prefix
            ending at a segment boundary (mounted routers and middleware)

    Examples:
        compile_path("/todos/{id}").pattern -> '^/todos/(?P<id>[^/]+?)/?$'
        compile_path("/api", end=False).pattern -> '^/api/?(?=/|$)'
    """
    stripped = path.strip("/")
    normalized = "/" + stripped if stripped else ""

    parts = []
    position = 0
    for match in _PARAM_PATTERN.finditer(normalized):
        parts.append(re.escape(normalized[position:match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+?)")
        position = match.end()
    parts.append(re.escape(normalized[position:]))

    suffix = "/?$" if end else "/?(?=/|$)"
    return re.compile("^" + "".join(parts) + suffix)


class Layer:
    """One entry in a router or route stack."""

    def __init__(
        self,
        path: Optional[PathSpec],
        handle: Callable,
        *,
        end: bool = True,
        method: Optional[HTTPMethod] = None,
        schema: Optional[RouteSchema] = None,
    ):
        self.path = path
        self.handle = handle
        self.method = method
        self.schema = schema
        self.route: Optional["Route"] = None
        # Prefix layers mounted at the root match everything without a regex
        self.fast_slash = path is not None and not end and isinstance(path, str) and path.strip("/") == ""
        self.regexp: Optional[Pattern[str]]
        if path is None or self.fast_slash:
            self.regexp = None
        elif isinstance(path, str):
            self.regexp = compile_path(path, end)
        else:
            self.regexp = path

    @property
    def name(self) -> str:
        if self.route is not None:
            return "route"
        if isinstance(self.handle, Router):
            return "router"
        return getattr(self.handle, "__name__", type(self.handle).__name__)

    def match(self, path: str) -> Optional[Tuple[int, Dict[str, str]]]:
        """Match the layer against ``path``.

        Returns:
            (number of characters consumed, captured path params) or None
        """
        if self.regexp is None:
            return 0, {}
        found = self.regexp.match(path)
        if found is None:
            return None
        params = {key: value for key, value in found.groupdict().items() if value is not None}
        return found.end(), params

    def __repr__(self) -> str:
        pattern = self.regexp.pattern if self.regexp is not None else self.path
        return f"<Layer {self.name} {self.method.value if self.method else '*'} {pattern!r}>"


def _invoke(handle: Callable, request: Request, response: Response) -> None:
    result = handle(request, response)
    if result is not None and not response.sent:
        response.json(result)


class Route:
    """A path with one handler stack per HTTP method."""

    def __init__(self, path: PathSpec):
        self.path = path
        self.stack: List[Layer] = []

    @property
    def methods(self) -> List[HTTPMethod]:
        seen: List[HTTPMethod] = []
        for layer in self.stack:
            if layer.method is not None and layer.method not in seen:
                seen.append(layer.method)
        return seen

    def handles(self, method: HTTPMethod) -> bool:
        return self._effective_method(method) is not None

    def _effective_method(self, method: HTTPMethod) -> Optional[HTTPMethod]:
        methods = self.methods
        if method in methods:
            return method
        # HEAD falls back to the GET handlers
        if method is HTTPMethod.HEAD and HTTPMethod.GET in methods:
            return HTTPMethod.GET
        return None

    def add(self, method: HTTPMethod, *handlers: Any) -> "Route":
        """Append handlers for ``method``.

        Accepts callables, ``BuiltRoute`` chains and (nested) lists of either.
        """
        if not handlers:
            raise RouteConfigurationError(f"{method.value} {self.path!r} requires at least one handler")
        for handler in _flatten(handlers):
            if isinstance(handler, BuiltRoute):
                for step in handler.steps:
                    self.stack.append(Layer(None, step, method=method))
                self.stack.append(Layer(None, handler.handler, method=method, schema=handler.schema))
            elif callable(handler):
                self.stack.append(Layer(None, handler, method=method))
            else:
                raise RouteConfigurationError(
                    f"{method.value} {self.path!r} handler must be callable, got {handler!r}"
                )
        return self

    def dispatch(self, request: Request, response: Response) -> None:
        method = self._effective_method(request.method)
        # Response checks installed by this route must not judge later routes
        with response.interceptor_scope():
            for layer in self.stack:
                if response.sent:
                    break
                if layer.method is method:
                    _invoke(layer.handle, request, response)


def _flatten(handlers: Iterable[Any]) -> Iterable[Any]:
    for handler in handlers:
        if isinstance(handler, (list, tuple)):
            yield from _flatten(handler)
        else:
            yield handler


class Router:
    """Router class for organizing routes with mounting support.

    Routers allow you to organize routes by functionality and mount them
    with different prefixes. Routers can also be nested (mounted into other routers).

    Example:
        todos = Router()
        todos.get("/", list_todos)

        api = Router()
        api.use("/todos", todos)
        # GET /todos/ now reaches list_todos
    """

    def __init__(self):
        self.stack: List[Layer] = []

    def use(self, path: Any = "/", *handlers: Any) -> "Router":
        """Mount routers or middleware under a path prefix.

        The path may be omitted, in which case it defaults to ``/``.
        """
        if not isinstance(path, (str, re.Pattern)):
            handlers = (path,) + handlers
            path = "/"
        if not handlers:
            raise RouteConfigurationError(f"use({path!r}) requires a router or middleware")
        for handler in _flatten(handlers):
            if handler is self:
                raise RouteConfigurationError("a router cannot be mounted into itself")
            if not (isinstance(handler, Router) or callable(handler)):
                raise RouteConfigurationError(f"cannot mount {handler!r} at {path!r}")
            self.stack.append(Layer(path, handler, end=False))
        return self

    def mount(self, prefix: PathSpec, router: "Router") -> "Router":
        """Mount another router with a given prefix."""
        return self.use(prefix, router)

    def route(self, path: PathSpec) -> Route:
        """Create a route at ``path`` and append it to this router's stack."""
        route = Route(path)
        layer = Layer(path, route.dispatch, end=True)
        layer.route = route
        self.stack.append(layer)
        return route

    def head(self, path: PathSpec, *handlers: Any):
        """Register a HEAD route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.HEAD, path, handlers)

    def get(self, path: PathSpec, *handlers: Any):
        """Register a GET route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.GET, path, handlers)

    def post(self, path: PathSpec, *handlers: Any):
        """Register a POST route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.POST, path, handlers)

    def put(self, path: PathSpec, *handlers: Any):
        """Register a PUT route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.PUT, path, handlers)

    def patch(self, path: PathSpec, *handlers: Any):
        """Register a PATCH route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.PATCH, path, handlers)

    def update(self, path: PathSpec, *handlers: Any):
        """Register an UPDATE route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.UPDATE, path, handlers)

    def delete(self, path: PathSpec, *handlers: Any):
        """Register a DELETE route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.DELETE, path, handlers)

    def options(self, path: PathSpec, *handlers: Any):
        """Register an OPTIONS route handler (decorator when no handlers are given)."""
        return self._register(HTTPMethod.OPTIONS, path, handlers)

    def _register(self, method: HTTPMethod, path: PathSpec, handlers: Tuple[Any, ...]):
        if handlers:
            self.route(path).add(method, *handlers)
            return self

        def decorator(func: Callable):
            self.route(path).add(method, func)
            return func

        return decorator

    def handle(self, request: Request, response: Response, path: Optional[str] = None) -> bool:
        """Dispatch ``request`` through this router's stack.

        Args:
            request: The incoming request
            response: The response handlers write to
            path: Path relative to this router (defaults to ``request.path``)

        Returns:
            True if some handler sent the response
        """
        if path is None:
            path = request.path
        if not path.startswith("/"):
            path = "/" + path

        for layer in self.stack:
            if response.sent:
                break
            matched = layer.match(path)
            if matched is None:
                continue
            consumed, params = matched

            if layer.route is not None:
                if not layer.route.handles(request.method):
                    continue
                request.path_params.update(params)
                logger.debug(f"{request.method.value} {request.path} matched route {layer.route.path!r}")
                layer.route.dispatch(request, response)
            elif isinstance(layer.handle, Router):
                request.path_params.update(params)
                layer.handle.handle(request, response, path[consumed:] or "/")
            else:
                _invoke(layer.handle, request, response)

        return response.sent
