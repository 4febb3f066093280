"""
Drivers carry DSL requests to a routedoc application.

``RestDocDriver`` calls ``RestApplication.execute`` in-process;
``AsgiDriver`` replays the request as an ASGI conversation.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List
from urllib.parse import urlencode

from routedoc import HTTPMethod, Request, RestApplication, create_asgi_app
from .dsl import HttpRequest, HttpResponse


class DriverInterface(ABC):
    """Something that can execute a test request."""

    @abstractmethod
    def execute(self, request: HttpRequest) -> HttpResponse:
        pass


def _encode_body(request: HttpRequest):
    if request.body is None:
        return None
    if isinstance(request.body, (dict, list)):
        return json.dumps(request.body)
    return str(request.body)


def _decode_body(body, content_type):
    if body and content_type and "application/json" in content_type:
        try:
            return json.loads(body)
        except (json.JSONDecodeError, TypeError):
            return body
    return body


class RestDocDriver(DriverInterface):
    """Executes requests by calling the application directly."""

    def __init__(self, app: RestApplication):
        self.app = app

    def execute(self, request: HttpRequest) -> HttpResponse:
        response = self.app.execute(
            Request(
                method=HTTPMethod(request.method.upper()),
                path=request.path,
                headers=request.headers.copy(),
                query_params=request.query_params.copy(),
                body=_encode_body(request),
            )
        )
        return HttpResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=_decode_body(response.body, response.content_type),
        )


class AsgiDriver(DriverInterface):
    """
    Driver that executes requests through the ASGI adapter.

    The ASGI conversation is simulated in-process, so no server is started.
    """

    def __init__(self, app: RestApplication):
        self.app = app
        self.asgi_app = create_asgi_app(app)

    def execute(self, request: HttpRequest) -> HttpResponse:
        return asyncio.run(self._execute(request))

    async def _execute(self, request: HttpRequest) -> HttpResponse:
        body = _encode_body(request)
        scope: Dict[str, Any] = {
            "type": "http",
            "method": request.method.upper(),
            "path": request.path,
            "query_string": urlencode(request.query_params).encode("utf-8"),
            "headers": [
                [name.lower().encode("latin-1"), value.encode("latin-1")]
                for name, value in request.headers.items()
            ],
        }
        incoming = [{"type": "http.request", "body": body.encode("utf-8") if body else b"", "more_body": False}]
        sent: List[Dict[str, Any]] = []

        async def receive():
            return incoming.pop(0)

        async def send(message):
            sent.append(message)

        await self.asgi_app(scope, receive, send)

        start = next(message for message in sent if message["type"] == "http.response.start")
        raw_body = b"".join(message.get("body", b"") for message in sent if message["type"] == "http.response.body")
        headers = {name.decode("latin-1"): value.decode("latin-1") for name, value in start["headers"]}
        text = raw_body.decode("utf-8") if raw_body else None
        return HttpResponse(
            status_code=start["status"],
            headers=headers,
            body=_decode_body(text, headers.get("content-type")),
        )
