"""
Running routedoc applications under uvicorn.

uvicorn is an optional dependency: ``pip install 'routedoc[server]'``.
"""

import logging
from importlib.util import find_spec

from .application import RestApplication
from .server import create_asgi_app

logger = logging.getLogger(__name__)


class UvicornDriver:
    """Binds an application's ASGI adapter to a uvicorn server."""

    def __init__(self, app: RestApplication, host: str = "127.0.0.1", port: int = 8000):
        self.app = app
        self.host = host
        self.port = port
        self.asgi_app = create_asgi_app(app)

    def is_available(self) -> bool:
        return find_spec("uvicorn") is not None

    def run(self, log_level: str = "info", **kwargs):
        """Start serving; blocks until uvicorn exits.

        Extra keyword arguments go straight to ``uvicorn.run``.
        """
        if not self.is_available():
            raise ImportError("uvicorn is required to serve the app: pip install 'routedoc[server]'")

        import uvicorn

        logger.info(f"Listening: http://{self.host}:{self.port}")
        uvicorn.run(self.asgi_app, host=self.host, port=self.port, log_level=log_level, **kwargs)


def serve(app: RestApplication, host: str = "127.0.0.1", port: int = 8000, **kwargs) -> None:
    """Serve ``app`` with uvicorn (raises ImportError when it is missing)."""
    UvicornDriver(app, host, port).run(**kwargs)
