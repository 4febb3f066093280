"""
A lightweight REST framework that documents itself.

Routes are declared with a fluent builder that attaches metadata and Pydantic
schemas to each handler chain. The same schemas validate requests and
responses at runtime, and an introspector walks the registered router tree
to rebuild an OpenAPI document on demand.
"""

from .application import RestApplication
from .builder import BuiltRoute, RouteBuilder, RouteMeta, RouteSchema, endpoint
from .config import Settings
from .cors import CORSConfig, cors
from .error_models import ErrorResponse
from .exceptions import HTTPError, RouteConfigurationError, RouteNotFoundError, ValidationError
from .introspection import RouteInfo, RouteSource, RouterSource, list_routes
from .models import HTTPMethod, Request, Response
from .openapi import generate_documentation
from .router import Router
from .server import ASGIAdapter, create_asgi_app
from .servers import UvicornDriver, serve

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "RestApplication",
    "Router",
    "Request",
    "Response",
    "HTTPMethod",
    "RouteBuilder",
    "BuiltRoute",
    "RouteMeta",
    "RouteSchema",
    "endpoint",
    "RouteInfo",
    "RouteSource",
    "RouterSource",
    "list_routes",
    "generate_documentation",
    "Settings",
    "CORSConfig",
    "cors",
    "ErrorResponse",
    "HTTPError",
    "RouteConfigurationError",
    "RouteNotFoundError",
    "ValidationError",
    "ASGIAdapter",
    "create_asgi_app",
    "UvicornDriver",
    "serve",
]
