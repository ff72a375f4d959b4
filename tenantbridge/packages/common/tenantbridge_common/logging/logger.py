"""
Logging and tracing bootstrap for processes that host the connection factory.

Spans emitted by the tenant-aware connection factory go to whatever tracer
provider is installed here; when the OpenTelemetry SDK is disabled the
process falls back to a rotating log file.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from opentelemetry import _logs, trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
    OTLPLogExporter as GrpcOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter as GrpcOTLPSpanExporter,
)
from opentelemetry.exporter.otlp.proto.http._log_exporter import (
    OTLPLogExporter as HttpOTLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as HttpOTLPSpanExporter,
)
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

DEFAULT_LOG_DIR = "./"
DEFAULT_LOG_FILE = "tenantbridge.log"
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "tenantbridge")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_logging_initialized = False
_tracer_provider: Optional[TracerProvider] = None


def get_root_logger() -> logging.Logger:
    """Return the process-wide root logger."""
    return logging.getLogger("")


def _bool_env(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _otel_disabled() -> bool:
    return _bool_env("OTEL_SDK_DISABLED")


def _exporter_enabled(env_key: str) -> bool:
    return os.getenv(env_key, "otlp").strip().lower() not in {"none", "disabled"}


def _uses_http(env_key: str) -> bool:
    protocol = os.getenv(env_key) or os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", "grpc")
    return protocol.strip().lower() in {"http/protobuf", "http"}


def _build_resource(service_name: Optional[str]) -> Resource:
    return Resource.create({"service.name": service_name or DEFAULT_SERVICE_NAME})


def _build_file_handler(log_dir: str, log_file: str, formatter: logging.Formatter) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, log_file),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    existing = set(logger.handlers)
    for handler in handlers:
        if handler not in existing:
            logger.addHandler(handler)


def setup_tracing(service_name: Optional[str] = None) -> Optional[TracerProvider]:
    """
    Install a global SDK tracer provider with an OTLP span exporter.

    Returns None when the SDK is disabled; spans then go to the API's
    no-op provider. Repeated calls return the provider installed first.
    """
    global _tracer_provider

    if _otel_disabled():
        return None
    if _tracer_provider is not None:
        return _tracer_provider

    tracer_provider = TracerProvider(resource=_build_resource(service_name))
    if _exporter_enabled("OTEL_TRACES_EXPORTER"):
        exporter = (
            HttpOTLPSpanExporter()
            if _uses_http("OTEL_EXPORTER_OTLP_TRACES_PROTOCOL")
            else GrpcOTLPSpanExporter()
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)
    _tracer_provider = tracer_provider
    return tracer_provider


def setup_logging(
    *,
    service_name: Optional[str] = None,
    level: str | int = DEFAULT_LOG_LEVEL,
    log_dir: str = DEFAULT_LOG_DIR,
    log_file: str = DEFAULT_LOG_FILE,
    with_console: bool = True,
) -> logging.Logger:
    """
    Configure root logging, exporting records over OTLP unless the SDK is disabled.
    Safe to call multiple times; handlers are only added once.
    """
    global _logging_initialized

    root = get_root_logger()
    root.setLevel(level)

    if _logging_initialized:
        return root
    _logging_initialized = True

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = []
    if with_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)

    if _otel_disabled():
        handlers.insert(0, _build_file_handler(log_dir, log_file, formatter))
        _attach(root, handlers)
        return root

    setup_tracing(service_name)

    logger_provider = LoggerProvider(resource=_build_resource(service_name))
    _logs.set_logger_provider(logger_provider)
    if _exporter_enabled("OTEL_LOGS_EXPORTER"):
        exporter = (
            HttpOTLPLogExporter()
            if _uses_http("OTEL_EXPORTER_OTLP_LOGS_PROTOCOL")
            else GrpcOTLPLogExporter()
        )
        logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
        handlers.insert(0, LoggingHandler(level=level, logger_provider=logger_provider))

    LoggingInstrumentor().instrument(set_logging_format=False)

    _attach(root, handlers)
    root.propagate = True
    return root
