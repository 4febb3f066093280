"""
A TODO list service built on routedoc.

Run it with ``python -m todo_api``; the OpenAPI document is served at
``/swagger.json`` and the API under ``/api/v1``.
"""

from .app import create_app

__all__ = ["create_app"]
