"""
Core data models for the REST framework.
"""

import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional


class HTTPMethod(Enum):
    """Enumeration of supported HTTP methods."""

    HEAD = "HEAD"
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


@dataclass
class Request:
    """Represents an HTTP request.

    ``json_body``, ``query_params`` and ``path_params`` are mutable containers
    owned by this request; validation steps merge parsed values into them.
    """

    method: HTTPMethod
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    query_params: Dict[str, Any] = field(default_factory=dict)
    path_params: Dict[str, Any] = field(default_factory=dict)
    json_body: Any = field(default_factory=dict)

    def __post_init__(self):
        if self.query_params is None:
            self.query_params = {}
        if self.path_params is None:
            self.path_params = {}

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def get_content_type(self) -> Optional[str]:
        """Get the Content-Type header."""
        return self.get_header("Content-Type")


def _to_jsonable(data: Any) -> Any:
    """Convert Pydantic models (possibly nested in lists/dicts) to plain data."""
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json", exclude_unset=True)
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: _to_jsonable(value) for key, value in data.items()}
    return data


@dataclass
class Response:
    """The outgoing response of a single request.

    Handlers and middleware write to it with ``json()`` or ``send()``. Send
    interceptors registered with ``intercept()`` see the payload before
    ``json()`` serializes it and may veto it by raising.
    """

    status_code: int = 200
    body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None
    request: Optional[Request] = field(default=None, repr=False)
    sent: bool = False
    _interceptors: List[Callable[[Any], None]] = field(default_factory=list, init=False, repr=False)

    def status(self, status_code: int) -> "Response":
        """Set the status code; returns the response for chaining."""
        self.status_code = status_code
        return self

    def set_header(self, name: str, value: str) -> "Response":
        self.headers[name] = value
        return self

    def intercept(self, interceptor: Callable[[Any], None]) -> None:
        """Register a callable that inspects JSON payloads before they are sent."""
        self._interceptors.append(interceptor)

    @contextmanager
    def interceptor_scope(self) -> Iterator["Response"]:
        """Discard interceptors registered inside the block unless it sent the response."""
        saved = list(self._interceptors)
        try:
            yield self
        finally:
            if not self.sent:
                self._interceptors[:] = saved

    def json(self, data: Any) -> "Response":
        """Serialize ``data`` as the JSON body, after running the interceptors."""
        for interceptor in self._interceptors:
            interceptor(data)
        return self.write(json.dumps(_to_jsonable(data)), "application/json")

    def send(self, body: str, content_type: str = "text/plain") -> "Response":
        """Send a text body as-is."""
        return self.write(body, content_type)

    def write(self, body: Optional[str], content_type: Optional[str] = None) -> "Response":
        """Commit the body without running interceptors."""
        self.body = body
        if content_type:
            self.content_type = content_type
            self.headers["Content-Type"] = content_type
        if self.status_code != 204:
            body_bytes = body.encode("utf-8") if body else b""
            self.headers["Content-Length"] = str(len(body_bytes))
        self.sent = True
        return self

    def end(self) -> "Response":
        """Finish the response with no body."""
        return self.write(None)
