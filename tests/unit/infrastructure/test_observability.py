"""Unit tests for correlation ids and the structlog processor chain."""

import structlog
from structlog.testing import capture_logs

from dinepick.application.services.base import LoggingMixin
from dinepick.infrastructure.observability import (
    build_processors,
    correlation_id_processor,
    correlation_scope,
    get_correlation_id,
)


class TestCorrelationScope:
    def test_generates_and_restores(self) -> None:
        assert get_correlation_id() == ""

        with correlation_scope() as outer:
            assert outer
            assert get_correlation_id() == outer
            with correlation_scope("sweep-1") as inner:
                assert inner == "sweep-1"
                assert get_correlation_id() == "sweep-1"
            assert get_correlation_id() == outer

        assert get_correlation_id() == ""

    def test_generated_ids_differ(self) -> None:
        with correlation_scope() as first:
            pass
        with correlation_scope() as second:
            pass

        assert first != second


class TestCorrelationProcessor:
    def test_adds_bound_id(self) -> None:
        with correlation_scope("abc"):
            event = correlation_id_processor(None, "info", {"event": "plan_confirmed"})

        assert event["correlation_id"] == "abc"

    def test_explicit_value_wins(self) -> None:
        with correlation_scope("abc"):
            event = correlation_id_processor(None, "info", {"correlation_id": "mine"})

        assert event["correlation_id"] == "mine"

    def test_no_scope_no_field(self) -> None:
        assert "correlation_id" not in correlation_id_processor(None, "info", {"event": "x"})


class TestBuildProcessors:
    def test_production_renders_json(self) -> None:
        processors = build_processors("production")

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert correlation_id_processor in processors

    def test_development_renders_console(self) -> None:
        assert isinstance(build_processors("development")[-1], structlog.dev.ConsoleRenderer)


class _SweepService(LoggingMixin):
    def __init__(self) -> None:
        self._init_logger(component="deadlines")

    def run(self) -> None:
        self._log_operation("run_sweep", plan_count=2).info("sweep_completed")


class TestLoggingMixin:
    def test_binds_service_operation_and_correlation(self) -> None:
        with capture_logs() as logs, correlation_scope("sweep-7"):
            _SweepService().run()

        assert logs == [
            {
                "event": "sweep_completed",
                "log_level": "info",
                "service": "_SweepService",
                "component": "deadlines",
                "operation": "run_sweep",
                "plan_count": 2,
                "correlation_id": "sweep-7",
            }
        ]

    def test_no_correlation_field_outside_scope(self) -> None:
        with capture_logs() as logs:
            _SweepService().run()

        assert "correlation_id" not in logs[0]
