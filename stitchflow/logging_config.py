"""Logging setup shared by the API server and the CLI."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler unless one is already configured."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def mask_secret(value: str | None, visible: int = 6) -> str:
    """Return the first few characters of a secret followed by '...'."""
    if not value:
        return "(not set)"
    if len(value) <= visible:
        return "***"
    return value[:visible] + "..."
