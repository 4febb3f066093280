"""
Environment-driven settings.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

PRODUCTION = "production"
DEVELOPMENT = "development"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for an application and its server.

    Environment Variables:
        ROUTEDOC_ENV: ``development`` (default) or ``production``
        HOST: Host to bind to (default: 127.0.0.1)
        PORT: Port to bind to (default: 5000)
        ROUTEDOC_LOG_LEVEL: Logging level (default: INFO)
        ROUTEDOC_SERVICE_NAME: Service name used in log records (default: todos-service)
    """

    environment: str = DEVELOPMENT
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"
    service_name: str = "todos-service"

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from ``environ`` (defaults to ``os.environ``)."""
        if environ is None:
            environ = os.environ

        port_value = environ.get("PORT", str(cls.port))
        try:
            port = int(port_value)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_value!r}") from None

        return cls(
            environment=environ.get("ROUTEDOC_ENV", DEVELOPMENT).strip().lower() or DEVELOPMENT,
            host=environ.get("HOST", cls.host),
            port=port,
            log_level=environ.get("ROUTEDOC_LOG_LEVEL", cls.log_level).upper(),
            service_name=environ.get("ROUTEDOC_SERVICE_NAME", cls.service_name),
        )
