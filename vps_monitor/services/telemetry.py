"""OpenTelemetry logging and tracing for refresh events"""

import logging
from datetime import datetime, timezone

from opentelemetry import trace
from opentelemetry._logs import SeverityNumber, set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from vps_monitor.config import config
from vps_monitor.models.scrape_outcome import ScrapeOutcome

logger = logging.getLogger(__name__)


def _signal_endpoint(signal: str) -> str:
    """OTLP/HTTP endpoint for one signal, e.g. .../v1/logs"""
    suffix = f"/v1/{signal}"
    endpoint = config.otel_endpoint
    if endpoint.endswith(suffix):
        return endpoint
    return f"{endpoint.rstrip('/')}{suffix}"


def _build_resource() -> Resource:
    return Resource(
        attributes={
            SERVICE_NAME: config.otel_service_name,
            SERVICE_VERSION: config.otel_service_version,
        }
    )


class TelemetryService:
    """Emit one structured OpenTelemetry log record per account refresh"""

    def __init__(self):
        self.logging_enabled = config.otel_logging_enabled
        self.tracing_enabled = config.otel_tracing_enabled
        self.logger_provider = None
        self.tracer_provider = None
        self.otel_logger = None

        if self.logging_enabled:
            try:
                self._initialize_logging()
            except Exception as e:
                logger.warning(f"Failed to initialize OTel logging: {e}. Logging disabled.")
                self.logging_enabled = False

        if self.tracing_enabled:
            try:
                self._initialize_tracing()
            except Exception as e:
                logger.warning(f"Failed to initialize OTel tracing: {e}. Tracing disabled.")
                self.tracing_enabled = False

    def _initialize_logging(self) -> None:
        endpoint = _signal_endpoint("logs")
        self.logger_provider = LoggerProvider(resource=_build_resource())
        self.logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint))
        )
        set_logger_provider(self.logger_provider)
        self.otel_logger = self.logger_provider.get_logger(__name__)
        logger.info(f"OpenTelemetry logging initialized with endpoint: {endpoint}")

    def _initialize_tracing(self) -> None:
        endpoint = _signal_endpoint("traces")
        self.tracer_provider = TracerProvider(resource=_build_resource())
        self.tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
        )
        trace.set_tracer_provider(self.tracer_provider)
        logger.info(f"OpenTelemetry tracing initialized with endpoint: {endpoint}")

    def log_refresh(
        self,
        account_id: int,
        outcome: ScrapeOutcome | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """
        Log one account refresh to OpenTelemetry

        Args:
            account_id: Refreshed account
            outcome: Scrape outcome, if the scrape ran
            error: Store-level error that aborted the refresh, if any
            duration_ms: Wall time of the refresh
        """
        if not self.logging_enabled or not self.otel_logger:
            return

        try:
            # Attributes stay low cardinality; the diagnostic goes in the body
            attributes: dict[str, str | int | float | bool] = {
                "vps.account_id": account_id,
                "refresh.success": error is None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            if duration_ms is not None:
                attributes["refresh.duration_ms"] = float(duration_ms)

            body_parts = [f"[refresh] vps={account_id}"]

            if outcome is not None:
                attributes["scrape.cookie_status"] = outcome.status.value
                if outcome.failure is not None:
                    attributes["scrape.failure"] = outcome.failure.value
                body_parts.append(f"status={outcome.status.value}")
                if outcome.diagnostic:
                    body_parts.append(f'diagnostic="{outcome.diagnostic[:200]}"')

            if error is not None:
                attributes["error.type"] = type(error).__name__
                message = str(error)
                attributes["error.message"] = message[:500] + ("..." if len(message) > 500 else "")
                body_parts.append(f"error={type(error).__name__}")

            if error is not None:
                severity = logging.ERROR
            elif outcome is not None and not outcome.is_healthy:
                severity = logging.WARNING
            else:
                severity = logging.INFO

            self.otel_logger.emit(
                body=" ".join(body_parts),
                severity_number=SeverityNumber(self._severity_to_number(severity)),
                attributes=attributes,
                timestamp=int(datetime.now(timezone.utc).timestamp() * 1e9),
            )

        except Exception as e:
            # Telemetry must never break a refresh
            logger.warning(f"Failed to log telemetry: {e}")

    def _severity_to_number(self, level: int) -> int:
        """Map a Python logging level onto an OpenTelemetry severity number"""
        if level >= logging.CRITICAL:
            return 21  # FATAL
        elif level >= logging.ERROR:
            return 17  # ERROR
        elif level >= logging.WARNING:
            return 13  # WARN
        elif level >= logging.INFO:
            return 9  # INFO
        else:
            return 5  # DEBUG


_telemetry_service: TelemetryService | None = None
_instrumentation_initialized = False


def _ensure_instrumentation_initialized() -> None:
    """Instrument httpx before any scrape client is created"""
    global _instrumentation_initialized
    if _instrumentation_initialized or not config.otel_tracing_enabled:
        return
    try:
        HTTPXClientInstrumentor().instrument()
        _instrumentation_initialized = True
        logger.info("HTTP request tracing instrumentation initialized")
    except Exception as e:
        logger.warning(f"Failed to initialize HTTP tracing instrumentation: {e}")


def get_telemetry_service() -> TelemetryService:
    """Get or create the global telemetry service instance"""
    global _telemetry_service
    _ensure_instrumentation_initialized()
    if _telemetry_service is None:
        _telemetry_service = TelemetryService()
    return _telemetry_service
