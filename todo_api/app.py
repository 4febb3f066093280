"""Application wiring for the TODO service."""

from typing import Optional

from routedoc import RestApplication, Settings, cors

from .api import TodoStore, create_router

API_PREFIX = "/api/v1"
DOCUMENTATION_PATH = "/swagger.json"
API_INFO = {"title": "TODO API", "version": "0.0.1"}


def create_app(settings: Optional[Settings] = None, store: Optional[TodoStore] = None) -> RestApplication:
    """Create the TODO application.

    Args:
        settings: Runtime settings (read from the environment when omitted)
        store: TODO storage (a fresh empty store when omitted)
    """
    app = RestApplication(settings)
    app.use(cors())
    app.serve_documentation(DOCUMENTATION_PATH, API_INFO)
    app.use(API_PREFIX, create_router(store if store is not None else TodoStore()))
    return app
