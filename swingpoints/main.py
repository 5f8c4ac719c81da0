"""
Main application entry point.
Configures logging and serves the swing points API with uvicorn.
"""
import logging
import sys

import uvicorn

from swingpoints.api.routes import CALCULATE_PATH, create_app
from swingpoints.config.settings import settings

# Configure logging for stdout/stderr collectors
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,
)

logger = logging.getLogger(__name__)

app = create_app()


def main():
    """Run the application."""
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "use_mock_provider": settings.use_mock_provider,
            "request_timeout_seconds": settings.request_timeout_seconds,
            "range_retry_max_retries": settings.range_retry_max_retries,
        },
    )
    if not settings.use_mock_provider and not settings.upstox_access_token:
        logger.warning("UPSTOX_ACCESS_TOKEN is not set; swing point requests will fail")
    logger.info(f"Swing points API available at http://{settings.host}:{settings.port}{CALCULATE_PATH}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
