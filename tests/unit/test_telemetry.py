"""Unit tests for telemetry service"""

from datetime import datetime
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

from vps_monitor.models.account import CookieStatus
from vps_monitor.models.scrape_outcome import ScrapeFailure, ScrapeOutcome
from vps_monitor.services.telemetry import TelemetryService

OBSERVED_AT = datetime(2025, 11, 20, 10, 0, tzinfo=ZoneInfo("Asia/Kuala_Lumpur"))


def _configure(mock_config, logging_enabled=False, tracing_enabled=False):
    mock_config.otel_logging_enabled = logging_enabled
    mock_config.otel_tracing_enabled = tracing_enabled
    mock_config.otel_endpoint = "http://localhost:4318"
    mock_config.otel_service_name = "test-service"
    mock_config.otel_service_version = "1.0.0"


class TestTelemetryService:
    """Test telemetry service initialization and refresh logging"""

    @patch("vps_monitor.services.telemetry.config")
    def test_telemetry_service_disabled(self, mock_config):
        """Test that telemetry can be disabled"""
        _configure(mock_config)

        service = TelemetryService()

        assert service.logging_enabled is False
        assert service.tracing_enabled is False
        assert service.otel_logger is None

    @patch("vps_monitor.services.telemetry.config")
    @patch("vps_monitor.services.telemetry.set_logger_provider")
    def test_telemetry_logging_enabled(self, mock_set_logger_provider, mock_config):
        """Test that logging initializes when enabled"""
        _configure(mock_config, logging_enabled=True)

        service = TelemetryService()

        assert service.logging_enabled is True
        assert service.logger_provider is not None
        mock_set_logger_provider.assert_called_once()

    @patch("vps_monitor.services.telemetry.config")
    @patch("vps_monitor.services.telemetry.trace.set_tracer_provider")
    def test_telemetry_tracing_enabled(self, mock_set_tracer_provider, mock_config):
        """Test that tracing initializes when enabled"""
        _configure(mock_config, tracing_enabled=True)

        service = TelemetryService()

        assert service.tracing_enabled is True
        assert service.tracer_provider is not None
        mock_set_tracer_provider.assert_called_once()

    @patch("vps_monitor.services.telemetry.config")
    @patch("vps_monitor.services.telemetry.set_logger_provider")
    def test_log_refresh_invalid_outcome(self, mock_set_logger_provider, mock_config):
        """Test logging a refresh that recorded an invalid cookie"""
        _configure(mock_config, logging_enabled=True)
        service = TelemetryService()
        service.otel_logger = MagicMock()

        outcome = ScrapeOutcome(
            status=CookieStatus.INVALID,
            observed_at=OBSERVED_AT,
            failure=ScrapeFailure.MISSING_DATA,
            diagnostic="required data missing: IPv6",
        )
        service.log_refresh(3, outcome=outcome, duration_ms=12.5)

        service.otel_logger.emit.assert_called_once()
        kwargs = service.otel_logger.emit.call_args.kwargs
        assert kwargs["attributes"]["vps.account_id"] == 3
        assert kwargs["attributes"]["refresh.success"] is True
        assert kwargs["attributes"]["scrape.cookie_status"] == "Invalid"
        assert kwargs["attributes"]["scrape.failure"] == "missing_data"
        assert kwargs["attributes"]["refresh.duration_ms"] == 12.5
        assert "required data missing" in kwargs["body"]

    @patch("vps_monitor.services.telemetry.config")
    @patch("vps_monitor.services.telemetry.set_logger_provider")
    def test_log_refresh_with_error(self, mock_set_logger_provider, mock_config):
        """Test logging a refresh aborted by a store error"""
        _configure(mock_config, logging_enabled=True)
        service = TelemetryService()
        service.otel_logger = MagicMock()

        service.log_refresh(4, error=LookupError("VPS 4 not found"))

        kwargs = service.otel_logger.emit.call_args.kwargs
        assert kwargs["attributes"]["refresh.success"] is False
        assert kwargs["attributes"]["error.type"] == "LookupError"
        assert "error=LookupError" in kwargs["body"]

    @patch("vps_monitor.services.telemetry.config")
    def test_log_refresh_when_disabled(self, mock_config):
        """Test that logging does nothing when disabled"""
        _configure(mock_config)

        service = TelemetryService()
        service.log_refresh(1, error=RuntimeError("boom"))

    @patch("vps_monitor.services.telemetry.config")
    @patch("vps_monitor.services.telemetry.set_logger_provider")
    def test_emit_failure_is_swallowed(self, mock_set_logger_provider, mock_config):
        """Test that telemetry errors never break a refresh"""
        _configure(mock_config, logging_enabled=True)
        service = TelemetryService()
        service.otel_logger = MagicMock()
        service.otel_logger.emit.side_effect = RuntimeError("collector down")

        service.log_refresh(1)

    def test_severity_mapping(self):
        with patch("vps_monitor.services.telemetry.config") as mock_config:
            _configure(mock_config)
            service = TelemetryService()

        assert service._severity_to_number(50) == 21
        assert service._severity_to_number(40) == 17
        assert service._severity_to_number(30) == 13
        assert service._severity_to_number(20) == 9
        assert service._severity_to_number(10) == 5
