"""Command line entry point.

    python -m streamspot daily-update   # one run, exit code 0 on success
    python -m streamspot serve          # HTTP API (uvicorn)

The daily update is meant to be started by cron shortly after midnight; the
status gate then waits for the source to roll over.
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from streamspot.config import Settings, get_settings
from streamspot.domain.exceptions import ConfigurationError, SyncAbortedError
from streamspot.infrastructure.lifecycle import build_components
from streamspot.infrastructure.observability import configure_logging

logger = logging.getLogger("streamspot")


async def _daily_update(settings: Settings) -> int:
    components = None
    try:
        components = await build_components(settings)
        elapsed = await components.daily_update_service.run()
    except SyncAbortedError as e:
        logger.error("Daily update aborted: %s", e.message)
        return 1
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        return 2
    finally:
        if components is not None:
            await components.close()
    logger.info("Daily update finished in %s", elapsed)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="streamspot")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("daily-update", help="Run the daily update once")
    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )

    if args.command == "daily-update":
        return asyncio.run(_daily_update(settings))

    uvicorn.run(
        "streamspot.main:create_app",
        factory=True,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
