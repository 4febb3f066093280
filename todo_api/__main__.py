"""Run the TODO service: ``python -m todo_api``."""

import logging

from routedoc import Settings, serve

from .app import create_app


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=f"%(asctime)s [{settings.service_name}] %(name)s %(levelname)s: %(message)s",
    )


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)
    serve(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
