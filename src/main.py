"""Main application entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from src.services.config import get_settings  # noqa: E402
from src.services.logging import setup_server_logging  # noqa: E402

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Snow removal acts API")
    parser.add_argument("--host", default=settings.http_host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.http_port, help="Port to bind to")
    args = parser.parse_args()

    setup_server_logging(settings.log_file, settings.log_level)

    from src.api.app import app

    logger.info("Starting Uvicorn server on %s:%d...", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
