"""CORS middleware.

``cors()`` returns a step for ``Router.use``. It decorates every response
under its mount point with ``Access-Control-*`` headers and answers
preflight requests (OPTIONS carrying ``Access-Control-Request-Method``)
itself with a 204.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional, Union

from .models import HTTPMethod, Request, Response

DEFAULT_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]
DEFAULT_ALLOW_HEADERS = [
    "Accept",
    "Accept-Language",
    "Content-Type",
    "Content-Language",
    "Authorization",
    "X-Requested-With",
]
DEFAULT_EXPOSE_HEADERS = ["Content-Length", "Content-Type"]
ONE_DAY = 86400


@dataclass
class CORSConfig:
    """Which cross-origin requests are allowed and what browsers are told.

    ``origins`` is either ``"*"`` or an explicit allow-list; credentials
    require an allow-list. ``max_age`` is the preflight cache lifetime in
    seconds.
    """

    origins: Union[List[str], Literal["*"]] = "*"
    methods: List[str] = field(default_factory=lambda: list(DEFAULT_METHODS))
    allow_headers: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_HEADERS))
    expose_headers: List[str] = field(default_factory=lambda: list(DEFAULT_EXPOSE_HEADERS))
    credentials: bool = False
    max_age: int = ONE_DAY

    def matches_origin(self, origin: str) -> bool:
        return self.origins == "*" or origin in self.origins

    def validate(self) -> None:
        """Raise ValueError for combinations browsers would reject."""
        if self.credentials and self.origins == "*":
            raise ValueError(
                "CORS: the wildcard origin '*' cannot be combined with credentials=True; "
                "list the allowed origins explicitly"
            )
        if self.max_age < 0:
            raise ValueError("CORS: max_age must be non-negative")

    def allow_origin_value(self, origin: Optional[str]) -> Optional[str]:
        """The Access-Control-Allow-Origin value for a request, or None if not allowed."""
        if self.origins == "*":
            return "*"
        if origin and self.matches_origin(origin):
            return origin
        return None


def cors(
    origins: Union[List[str], str] = "*",
    methods: Optional[List[str]] = None,
    allow_headers: Optional[List[str]] = None,
    expose_headers: Optional[List[str]] = None,
    credentials: bool = False,
    max_age: int = ONE_DAY,
) -> Callable[[Request, Response], None]:
    """Build the CORS middleware step.

    Example:
        app.use(cors())
        app.use("/api", cors(origins=["https://app.example.com"], credentials=True))
    """
    if origins != "*" and isinstance(origins, str):
        origins = [origins]
    config = CORSConfig(
        origins=origins if origins == "*" else list(origins),
        methods=methods if methods is not None else list(DEFAULT_METHODS),
        allow_headers=allow_headers if allow_headers is not None else list(DEFAULT_ALLOW_HEADERS),
        expose_headers=expose_headers if expose_headers is not None else list(DEFAULT_EXPOSE_HEADERS),
        credentials=credentials,
        max_age=max_age,
    )
    config.validate()

    def cors_middleware(request: Request, response: Response) -> None:
        origin = request.get_header("Origin")
        allowed = config.allow_origin_value(origin)
        if allowed is None:
            return

        response.set_header("Access-Control-Allow-Origin", allowed)
        if allowed != "*":
            response.set_header("Vary", "Origin")
        if config.credentials:
            response.set_header("Access-Control-Allow-Credentials", "true")

        preflight = (
            request.method is HTTPMethod.OPTIONS
            and request.get_header("Access-Control-Request-Method") is not None
        )
        if preflight:
            response.set_header("Access-Control-Allow-Methods", ", ".join(config.methods))
            requested_headers = request.get_header("Access-Control-Request-Headers")
            response.set_header(
                "Access-Control-Allow-Headers",
                requested_headers if requested_headers else ", ".join(config.allow_headers),
            )
            response.set_header("Access-Control-Max-Age", str(config.max_age))
            response.status(204).end()
        elif config.expose_headers:
            response.set_header("Access-Control-Expose-Headers", ", ".join(config.expose_headers))

    return cors_middleware
