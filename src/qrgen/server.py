"""
HTTP Server
Entry point running the QRGen API under uvicorn.
"""

import uvicorn

from .app import create_app
from .core import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


def serve() -> None:
    """Entry point - configure logging and run the server."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    logger.info(
        "configuration",
        host=settings.host,
        port=settings.port,
        environment=settings.environment,
        cache_max_keys=settings.cache_max_keys,
        general_limit_max=settings.general_limit_max,
        qr_limit_max=settings.qr_limit_max,
    )

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,  # structlog owns logging
        proxy_headers=True,
    )


if __name__ == "__main__":
    serve()
