"""
Structured logging for pumpcurve

Events are emitted through structlog under the "pumpcurve" stdlib logger
namespace. setup_logging attaches handlers to that namespace only, so an
application embedding the library keeps control of the root logger.

Usage:
    setup_logging(LogConfig(level="DEBUG", format="console"))
    logger = get_logger(__name__)
    logger.info("bonding_curve_fetched", mint=mint)
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from solders.pubkey import Pubkey
from structlog.typing import EventDict, Processor

from pumpcurve.config import LOG_FORMATS, LogConfig


LIBRARY_LOGGER = "pumpcurve"

# Marks handlers owned by setup_logging so a reconfigure replaces them
_HANDLER_MARKER = "_pumpcurve_handler"


def stringify_pubkeys(logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render solders Pubkey values (mints, PDAs, creators) as base58 strings"""
    for key, value in event_dict.items():
        if isinstance(value, Pubkey):
            event_dict[key] = str(value)
    return event_dict


def _build_processors(log_format: str) -> List[Processor]:
    processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        stringify_pubkeys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def _replace_handlers(target: logging.Logger, handlers: List[logging.Handler]) -> None:
    for handler in list(target.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            target.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter("%(message)s")
    for handler in handlers:
        setattr(handler, _HANDLER_MARKER, True)
        handler.setFormatter(formatter)
        target.addHandler(handler)


def setup_logging(log_config: Optional[LogConfig] = None) -> logging.Logger:
    """
    Configure structured logging from the `logging:` config section

    Safe to call again after a config reload; handlers from the previous
    call are replaced, not duplicated.

    Args:
        log_config: Level, output format and optional log file. Defaults
            to INFO level JSON on stdout.

    Returns:
        The stdlib "pumpcurve" logger the handlers were attached to

    Raises:
        ValueError: Unknown format
    """
    log_config = log_config or LogConfig()
    if log_config.format not in LOG_FORMATS:
        raise ValueError(f"Unknown logging format: {log_config.format}")

    numeric_level = getattr(logging, log_config.level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_config.output_file:
        log_path = Path(log_config.output_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.setLevel(numeric_level)
    _replace_handlers(library_logger, handlers)

    structlog.configure(
        processors=_build_processors(log_config.format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return library_logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, usually for __name__ inside the package"""
    return structlog.get_logger(name)
