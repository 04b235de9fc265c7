"""structlog setup for pmtax.

Events are routed through stdlib logging to stderr, so report output on
stdout can be piped or redirected. A report run binds its tax year (and the
wallet, when fetching) so that every event of the run carries them.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from polymarket_tax.config import Settings, get_settings

# httpx logs every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def _decimals_to_str(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Render Decimal amounts in plain notation so JSON output stays exact."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = format(value, "f")
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _decimals_to_str,
    ]


def _formatter(json_output: bool, colors: bool = False) -> logging.Formatter:
    final: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta
    ]
    if json_output:
        final += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final.append(structlog.dev.ConsoleRenderer(colors=colors))
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=final,
    )


def configure_logging(settings: Settings | None = None, **context: Any) -> None:
    """Configure structlog and the root logger for one pmtax invocation.

    Args:
        settings: Application settings. If None, loads from environment.
        **context: Values bound to every event, e.g. command or wallet

    stderr gets JSON output when log_format is json or in production, console
    output otherwise. The optional log file always receives JSON lines.
    Calling this again replaces the handlers installed by the previous call.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(
        _formatter(
            settings.log_format == "json" or settings.is_production,
            colors=sys.stderr.isatty(),
        )
    )
    handlers: list[logging.Handler] = [stderr_handler]

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(_formatter(json_output=True))
        handlers.append(file_handler)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.contextvars.clear_contextvars()
    if context:
        structlog.contextvars.bind_contextvars(**context)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


@contextmanager
def run_context(tax_year: int, wallet: str | None = None) -> Iterator[None]:
    """Bind the tax year, and the wallet if given, inside the block.

    Example:
        with run_context(2024, wallet="0xabc"):
            logger.info("trading_history_fetched", count=12)
        # -> {"event": "trading_history_fetched", "tax_year": 2024,
        #     "wallet": "0xabc", "count": 12, ...}

    Values bound before the block are restored on exit.
    """
    values: dict[str, Any] = {"tax_year": tax_year}
    if wallet:
        values["wallet"] = wallet.lower()
    with structlog.contextvars.bound_contextvars(**values):
        yield
