"""
ASGI adapter for routedoc applications.

``RestApplication.execute`` is synchronous. The adapter collects the request
body from the ASGI channel, executes the request in the loop's default
executor and sends back the finished response in one body message.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from .application import RestApplication
from .models import HTTPMethod, Request, Response

logger = logging.getLogger(__name__)

Scope = Dict[str, Any]


async def _read_body(receive) -> bytes:
    chunks: List[bytes] = []
    while True:
        message = await receive()
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks)


def _decode(raw: bytes) -> Optional[str]:
    if not raw:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def build_request(method: HTTPMethod, scope: Scope, body: bytes) -> Request:
    """Translate an ASGI HTTP scope and its body into a ``Request``.

    Header names are lowercased; ``Request.get_header`` is case-insensitive
    anyway. The body is left unparsed so the application can decide based on
    Content-Type.
    """
    headers = {
        name.decode("latin-1").lower(): value.decode("latin-1")
        for name, value in scope.get("headers", [])
    }
    query = scope.get("query_string", b"").decode("utf-8")
    return Request(
        method=method,
        path=scope["path"],
        headers=headers,
        query_params=dict(parse_qsl(query, keep_blank_values=True)) if query else {},
        body=_decode(body),
    )


class ASGIAdapter:
    """Serves a ``RestApplication`` over ASGI (HTTP and lifespan scopes)."""

    def __init__(self, app: RestApplication):
        self.app = app

    async def __call__(self, scope: Scope, receive, send):
        kind = scope["type"]
        if kind == "lifespan":
            await self._lifespan(receive, send)
        elif kind != "http":
            await self._reply(send, 404, [(b"content-type", b"text/plain")], b"Not Found")
        else:
            await self._http(scope, receive, send)

    async def _lifespan(self, receive, send):
        while True:
            event = (await receive())["type"]
            if event == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif event == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _http(self, scope: Scope, receive, send):
        try:
            method = HTTPMethod(scope["method"].upper())
        except ValueError:
            await self._reply(send, 405, [(b"content-type", b"text/plain")], b"Method Not Allowed")
            return

        request = build_request(method, scope, await _read_body(receive))
        try:
            # Handlers are synchronous; keep them off the event loop
            loop = asyncio.get_event_loop()
            response = await loop.run_in_executor(None, self.app.execute, request)
        except Exception as e:
            # execute() renders its own errors; this only guards the adapter
            logger.exception(f"Unexpected error executing {method.value} {request.path}")
            response = Response(status_code=500).write(
                json.dumps({"error": "Internal Server Error", "detail": str(e)}),
                "application/json",
            )

        headers = [
            (name.lower().encode("latin-1"), str(value).encode("latin-1"))
            for name, value in response.headers.items()
        ]
        await self._reply(send, response.status_code, headers, (response.body or "").encode("utf-8"))

    async def _reply(self, send, status: int, headers, body: bytes):
        await send({
            "type": "http.response.start",
            "status": status,
            "headers": [list(header) for header in headers],
        })
        await send({"type": "http.response.body", "body": body})


def create_asgi_app(app: RestApplication) -> ASGIAdapter:
    """Wrap ``app`` for any ASGI server (uvicorn in ``routedoc.servers``)."""
    return ASGIAdapter(app)
