"""Logging setup shared by the API and the maintenance scripts."""
import logging

from unknown_items.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # SQL echo is controlled by DEBUG on the engine; keep the pool quiet otherwise
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def mask_database_url(url: str) -> str:
    """Hide credentials, keep host/db for log lines."""
    if "@" not in url:
        return "configured"
    return "...@" + url.split("@")[-1].split("?")[0]
