"""Logging setup for meili-repository.

Library modules log through ``logging.getLogger(__name__)``, using snake_case
event names as messages and structured fields in ``extra``. get_logger() is
the same lookup for application code built on the library.
configure_logging() forwards those records to Logfire; without a Logfire
token nothing leaves the process and records still reach the console.
"""

import logging
from typing import Optional

import logfire

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return the stdlib logger for a module."""
    return logging.getLogger(name)


def configure_logging(
    level: int = logging.INFO,
    service_name: str = "meili-repository",
    instrument_httpx: bool = False,
    token: Optional[str] = None,
) -> None:
    """Send library logs to Logfire.

    Safe to call more than once; only the first call installs the handler.

    Args:
        level: Root log level for the library loggers
        service_name: Service name reported to Logfire
        instrument_httpx: Also trace outgoing httpx requests
        token: Logfire write token (falls back to LOGFIRE_TOKEN)
    """
    global _configured
    if _configured:
        return

    logfire.configure(
        service_name=service_name,
        token=token,
        send_to_logfire="if-token-present",
    )
    if instrument_httpx:
        logfire.instrument_httpx()

    package_logger = logging.getLogger("meili_repository")
    package_logger.setLevel(level)
    package_logger.addHandler(logfire.LogfireLoggingHandler())

    _configured = True
    package_logger.info(
        "logging_configured",
        extra={"service_name": service_name, "level": logging.getLevelName(level)},
    )
