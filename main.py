"""
Main entry point for the Listing Extractor.
Supports modes:
  --web: Start the HTTP API
  --extract "Agent Name": Run one extraction locally and print the JSON record
"""
import argparse
import asyncio
import json
import sys

from loguru import logger

from src.exceptions import ConfigurationError, ExtractionError
from src.services.extraction_service import ExtractionService
from src.utils.logging_config import setup_default_logging
from src.utils.settings import get_settings


def handle_web(port: int):
    import uvicorn

    logger.info(f"Starting web server on port {port}...")
    uvicorn.run(
        "app.web.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )


async def handle_extract(agent_name: str) -> int:
    settings = get_settings()
    service = ExtractionService(settings)
    try:
        record = await service.extract(agent_name, settings.endpoint_key)
    except ExtractionError as e:
        logger.error(f"{e.kind}: {e.message}")
        return 1
    print(json.dumps(record.to_response(), indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Listing Extractor")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--web", action="store_true", help="Start web server")
    group.add_argument("--extract", metavar="AGENT_NAME", help="Extract the first listing for one agent")
    parser.add_argument("--port", type=int, default=None,
                        help="Port for web server (default PORT env var or 3000)")

    args = parser.parse_args()

    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    setup_default_logging(debug=settings.debug)

    if args.web:
        handle_web(args.port or settings.port)
    elif args.extract:
        sys.exit(asyncio.run(handle_extract(args.extract)))


if __name__ == "__main__":
    main()
