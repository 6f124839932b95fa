"""Process entry point.

Runs the API under uvicorn on HOST:PORT from settings (PORT defaults to 8888).

Usage:
    python -m sns_api
    sns-api
"""
from uvicorn import Config, Server

from sns_api.config import settings


def main() -> None:
    config = Config(
        app="sns_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    main()
