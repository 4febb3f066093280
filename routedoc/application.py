"""
The application: root router, request execution and error rendering.
"""

import json
import logging
import os
import time
import traceback
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import Settings
from .error_models import ErrorResponse
from .exceptions import HTTPError, RouteNotFoundError
from .models import HTTPMethod, Request, Response
from .openapi import generate_documentation
from .router import Router

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("routedoc.access")


class ErrorHandler:
    """A function rendering error bodies for some (or all) status codes."""

    def __init__(self, handler: Callable, status_codes: Tuple[int, ...]):
        self.handler = handler
        self.status_codes = status_codes  # empty: every status

    def handles_status(self, status_code: int) -> bool:
        if not self.status_codes:
            return True
        return status_code in self.status_codes


class RestApplication(Router):
    """Main application class for the REST framework.

    The application is the root router. ``execute()`` runs one request through
    it and always returns a finished ``Response``: unmatched requests become
    404s and errors raised by handlers are rendered as JSON error bodies.
    """

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()
        self.settings = settings if settings is not None else Settings.from_env()
        self._error_handlers: List[ErrorHandler] = []

    def handles_error(self, *status_codes: int):
        """Decorator to register a custom error handler.

        The handler receives ``(request, exception)`` and returns the body to send.

        Example:
            @app.handles_error(404)
            def custom_404(request, exc):
                return {"error": "Not Found", "path": request.path}

            @app.handles_error()
            def default_error(request, exc):
                return {"error": exc.message}
        """
        def decorator(func: Callable):
            self._error_handlers.append(ErrorHandler(func, status_codes))
            return func

        return decorator

    def serve_documentation(self, path: str = "/swagger.json", info: Optional[Dict[str, Any]] = None):
        """Serve the generated OpenAPI document at ``path``.

        The document is rebuilt on every request from the routes registered at
        that time. The endpoint itself is not documented.
        """
        def openapi_document(request: Request, response: Response) -> Dict[str, Any]:
            return self.generate_openapi(info)

        self.get(path, openapi_document)
        return self

    def generate_openapi(self, info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Generate the OpenAPI document as a dictionary."""
        return generate_documentation(self, info)

    def generate_openapi_json(
        self,
        title: str = "API",
        version: str = "0.0.1",
        description: Optional[str] = None,
    ) -> str:
        """The OpenAPI document as indented JSON."""
        info: Dict[str, Any] = {"title": title, "version": version}
        if description:
            info["description"] = description
        return json.dumps(self.generate_openapi(info), indent=2)

    def save_openapi_json(
        self,
        filename: str = "openapi.json",
        docs_dir: str = "docs",
        title: str = "API",
        version: str = "0.0.1",
        description: Optional[str] = None,
    ) -> str:
        """Write the OpenAPI JSON to ``docs_dir/filename`` and return the file path."""
        os.makedirs(docs_dir, exist_ok=True)

        openapi_json = self.generate_openapi_json(title, version, description)

        file_path = os.path.join(docs_dir, filename)
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(openapi_json)

        return file_path

    def execute(self, request: Request) -> Response:
        """Execute a request and return a response."""
        started = time.perf_counter()
        response = Response(request=request)
        try:
            self._parse_json_body(request)
            if not self.handle(request, response):
                raise RouteNotFoundError(request.path)
        except HTTPError as e:
            if e.status_code >= 500:
                logger.error(f"{request.method.value} {request.path} failed: {e.message}")
            else:
                logger.debug(f"{request.method.value} {request.path} rejected: {e.message}")
            self._render_error(request, response, e)
        except Exception as e:
            logger.exception(f"Unhandled exception processing {request.method.value} {request.path}: {e}")
            error = HTTPError(500, "Internal server error")
            error.__cause__ = e
            self._render_error(request, response, error, stack_from=e)

        if request.method is HTTPMethod.HEAD:
            response.body = None
        self._log_access(request, response, started)
        return response

    def _parse_json_body(self, request: Request) -> None:
        """Parse a JSON request body into ``request.json_body``."""
        if not request.body:
            return
        content_type = request.get_content_type() or ""
        if "application/json" not in content_type:
            return
        try:
            request.json_body = json.loads(request.body)
        except json.JSONDecodeError as e:
            raise HTTPError(400, "malformed JSON body") from e

    def _render_error(
        self,
        request: Request,
        response: Response,
        error: HTTPError,
        stack_from: Optional[BaseException] = None,
    ) -> None:
        """Write the error to the response, bypassing any send interceptors."""
        response.status(error.status_code)

        for handler in self._error_handlers:
            if handler.handles_status(error.status_code):
                body = handler.handler(request, error)
                if isinstance(body, str):
                    response.write(body, "text/plain")
                else:
                    response.write(json.dumps(body), "application/json")
                return

        stack = None
        if not self.settings.is_production:
            source = stack_from if stack_from is not None else error
            # Causes are left out: they can carry the rejected payload
            stack = "".join(
                traceback.format_exception(type(source), source, source.__traceback__, chain=False)
            )
        payload = ErrorResponse.from_message(error.message, error.status_code, stack)
        response.write(payload.model_dump_json(), "application/json")

    def _log_access(self, request: Request, response: Response, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        length = response.headers.get("Content-Length", "-")
        if self.settings.is_production:
            access_logger.info(
                f"{request.method.value} {request.path} {response.status_code} {length} - {elapsed_ms:.3f} ms"
            )
        else:
            access_logger.info(
                f"{request.method.value} {request.path} {response.status_code} {elapsed_ms:.3f} ms - {length}"
            )
