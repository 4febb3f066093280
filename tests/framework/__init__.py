"""
Test framework for RESTful API testing using a layered architecture.
"""

from .dsl import HttpRequest, HttpResponse, RestApiDsl, resolve_ref
from .drivers import AsgiDriver, RestDocDriver
from .multi_driver_base import MultiDriverTestBase

__all__ = [
    'RestApiDsl',
    'HttpRequest',
    'HttpResponse',
    'resolve_ref',
    'RestDocDriver',
    'AsgiDriver',
    'MultiDriverTestBase',
]
