"""Structured-logging mixin shared by the plan services.

    class PlanLifecycleService(LoggingMixin):
        def __init__(self, ...) -> None:
            ...
            self._init_logger(component="planning")

        async def change_status(self, plan_id, user_id, target):
            log = self._log_operation("change_status", plan_id=str(plan_id))
            log.info("plan_status_changed", status=target.value)
"""

import structlog

from dinepick.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Binds ``service`` and ``component`` once, ``operation`` per call."""

    _log: structlog.BoundLogger

    def _init_logger(self, component: str) -> None:
        self._log = structlog.get_logger(type(self).__module__).bind(
            service=type(self).__name__, component=component
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Logger for one operation, tagged with the active correlation id.

        An id bound here is fixed for the returned logger even if the
        caller later enters another correlation scope.
        """
        bound = self._log.bind(operation=operation, **context)
        correlation_id = get_correlation_id()
        return bound.bind(correlation_id=correlation_id) if correlation_id else bound
