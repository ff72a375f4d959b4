"""
Tracing for connection acquisition and use.

``TracingDataSource`` opens a connection through a driver inside a span and
hands back a proxy whose cursors trace every statement. Spans are emitted
through a ``TracingSink`` so the factory does not depend on OpenTelemetry
being configured.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Mapping, Optional, Protocol

from opentelemetry import trace
from opentelemetry.trace import TracerProvider

from .driver import Driver
from .urls import mask_url

INSTRUMENTATION_NAME = "tenantbridge.connectors"
STATEMENT_PREVIEW_LENGTH = 1000


class TracingSink(Protocol):
    def span(self, name: str, attributes: Optional[Mapping[str, Any]] = None) -> ContextManager[Any]: ...


class NoopTracingSink:
    @contextmanager
    def span(self, name: str, attributes: Optional[Mapping[str, Any]] = None) -> Iterator[None]:
        yield None


class OpenTelemetryTracingSink:
    """Records spans with an OpenTelemetry tracer; uses the global provider unless one is given."""

    def __init__(self, tracer_provider: Optional[TracerProvider] = None) -> None:
        self._tracer = trace.get_tracer(INSTRUMENTATION_NAME, tracer_provider=tracer_provider)

    @contextmanager
    def span(self, name: str, attributes: Optional[Mapping[str, Any]] = None) -> Iterator[trace.Span]:
        with self._tracer.start_as_current_span(
            name,
            attributes=dict(attributes or {}),
            record_exception=True,
            set_status_on_exception=True,
        ) as span:
            yield span


class TracingDataSource:
    def __init__(self, tracing: TracingSink, driver: Driver, url: str) -> None:
        self._tracing = tracing
        self._driver = driver
        self._url = url
        self._attributes = {
            "db.system": driver.name,
            "db.connection_string": mask_url(url),
        }

    def get_connection(self, properties: Mapping[str, str]) -> Optional["TracedConnection"]:
        attributes = dict(self._attributes)
        attributes["db.user"] = properties.get("user", "")
        with self._tracing.span("connection.open", attributes):
            connection = self._driver.connect(self._url, properties)
        if connection is None:
            return None
        return TracedConnection(connection, self._tracing, attributes)


class TracedConnection:
    """Proxy over a DB-API connection; anything not traced is forwarded as is."""

    def __init__(self, connection: Any, tracing: TracingSink, attributes: Mapping[str, Any]) -> None:
        self._connection = connection
        self._tracing = tracing
        self._attributes = dict(attributes)

    @property
    def wrapped(self) -> Any:
        return self._connection

    def cursor(self, *args: Any, **kwargs: Any) -> "TracedCursor":
        return TracedCursor(self._connection.cursor(*args, **kwargs), self._tracing, self._attributes)

    def execute(self, operation: str, *args: Any) -> "TracedCursor":
        cursor = self.cursor()
        cursor.execute(operation, *args)
        return cursor

    def commit(self) -> None:
        with self._tracing.span("connection.commit", self._attributes):
            self._connection.commit()

    def rollback(self) -> None:
        with self._tracing.span("connection.rollback", self._attributes):
            self._connection.rollback()

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "TracedConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._connection, name)

    def __repr__(self) -> str:
        return f"TracedConnection({self._connection!r})"


class TracedCursor:
    def __init__(self, cursor: Any, tracing: TracingSink, attributes: Mapping[str, Any]) -> None:
        self._cursor = cursor
        self._tracing = tracing
        self._attributes = attributes

    @property
    def wrapped(self) -> Any:
        return self._cursor

    def _statement_attributes(self, operation: str) -> dict[str, Any]:
        attributes = dict(self._attributes)
        attributes["db.statement"] = operation[:STATEMENT_PREVIEW_LENGTH]
        return attributes

    def execute(self, operation: str, *args: Any) -> "TracedCursor":
        with self._tracing.span("statement.execute", self._statement_attributes(operation)):
            self._cursor.execute(operation, *args)
        return self

    def executemany(self, operation: str, seq_of_parameters: Any) -> "TracedCursor":
        with self._tracing.span("statement.executemany", self._statement_attributes(operation)):
            self._cursor.executemany(operation, seq_of_parameters)
        return self

    def __iter__(self) -> Iterator[Any]:
        return iter(self._cursor)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)
