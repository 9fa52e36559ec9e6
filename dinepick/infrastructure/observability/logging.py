"""structlog setup for the plan core.

In ``production`` every event is one JSON line, e.g.::

    {"event": "plan_confirmed", "level": "info", "timestamp": "2026-...Z",
     "correlation_id": "0190...", "service": "PlanParticipationService",
     "operation": "submit_swipe", "plan_id": "..."}

Any other environment gets the colored console renderer. The level comes
from the ``level`` argument, then ``LOG_LEVEL``, then INFO.
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from dinepick.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _renderer(environment: str) -> Processor:
    if environment == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def build_processors(environment: str) -> list[Processor]:
    """Processor chain for ``environment``; the renderer is always last."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(environment),
    ]


def configure_structlog(environment: str = "production", level: str | None = None) -> None:
    """Install the processor chain and level filter globally. Call once at startup."""
    structlog.configure(
        processors=build_processors(environment),
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
