"""Command-line entry point.

Usage:
    zeedzad [--port ADDR]

ADDR is ``:8088`` (all interfaces), ``host:port`` or a bare port number.
"""

import argparse
import asyncio
import sys

import uvicorn
from pydantic import ValidationError

from zeedzad.config import Settings, get_settings
from zeedzad.constants import DEFAULT_LISTEN_ADDRESS
from zeedzad.db import BackendUnavailable, Storage, create_storage
from zeedzad.utils.logging import get_logger, get_uvicorn_log_config, setup_logging
from zeedzad.utils.secrets import mask_secret

logger = get_logger(__name__)

ALL_INTERFACES = "0.0.0.0"


def parse_listen_address(value: str) -> tuple[str, int]:
    """Split a listen address into host and port.

    Raises:
        ValueError: If the port is missing or out of range
    """
    host, _, port = value.strip().rpartition(":")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"port out of range: {port_number}")
    return host or ALL_INTERFACES, port_number


async def check_storage(storage: Storage) -> None:
    """Ping the configured backend once, then release it."""
    try:
        await storage.ping()
    finally:
        await storage.close()


def log_configuration(settings: Settings) -> None:
    logger.info("Using configuration:")
    logger.info(f"  APP_ENV: {settings.app_env}")
    logger.info(f"  STORAGE: {settings.storage_backend}")
    if settings.storage_backend == "sqlite":
        logger.info(f"  SQLITE_PATH: {settings.sqlite_path}")
    else:
        logger.info(f"  D1_ACCOUNT_ID: {settings.d1_account_id}")
        logger.info(f"  D1_DATABASE_ID: {settings.d1_database_id}")
        logger.info(f"  CLOUDFLARE_API_TOKEN: {mask_secret(settings.cloudflare_api_token)}")
    logger.info(f"  YOUTUBE_API_KEY: {mask_secret(settings.youtube_api_key)}")
    logger.info(f"  IGDB_CLIENT_ID: {settings.igdb_client_id}")
    logger.info(f"  IGDB_CLIENT_SECRET: {mask_secret(settings.igdb_client_secret)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="zeedzad", description="Zeedzad catalogue server")
    parser.add_argument(
        "--port",
        type=parse_listen_address,
        default=DEFAULT_LISTEN_ADDRESS,
        help=f"Listen address (default {DEFAULT_LISTEN_ADDRESS})",
    )
    args = parser.parse_args(argv)
    host, port = args.port

    setup_logging()

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if not settings.has_igdb_credentials:
        logger.error("IGDB_CLIENT_ID and IGDB_CLIENT_SECRET environment variables are required")
        return 1

    try:
        asyncio.run(check_storage(create_storage(settings)))
    except BackendUnavailable as e:
        logger.error(f"Failed to connect to {settings.storage_backend} storage: {e}")
        return 1

    log_configuration(settings)

    from zeedzad.main import app

    log_level = "INFO" if settings.is_production else "DEBUG"
    uvicorn.run(app, host=host, port=port, log_config=get_uvicorn_log_config(log_level))
    return 0


if __name__ == "__main__":
    sys.exit(main())
