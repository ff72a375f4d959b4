"""
Driver abstraction used by connection factories.

A driver turns a connection URL plus a flat property bag into a live DB-API
connection. Failures surface as whatever the underlying module raises; the
factory is responsible for wrapping them.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class Driver(Protocol):
    name: str

    def connect(self, url: str, properties: Mapping[str, str]) -> Any: ...


class DbApiDriver:
    """
    Adapts a DB-API 2.0 style ``connect`` callable.

    By default the URL is passed positionally (``psycopg.connect(conninfo, **kw)``);
    set ``url_argument`` for modules that expect it as a keyword, e.g. ``dsn``.
    """

    def __init__(
        self,
        connect: Callable[..., Any],
        name: Optional[str] = None,
        *,
        url_argument: Optional[str] = None,
    ) -> None:
        self._connect = connect
        self._url_argument = url_argument
        self.name = name or getattr(connect, "__module__", None) or repr(connect)

    def connect(self, url: str, properties: Mapping[str, str]) -> Any:
        kwargs = dict(properties)
        if self._url_argument:
            kwargs[self._url_argument] = url
            return self._connect(**kwargs)
        return self._connect(url, **kwargs)

    def __repr__(self) -> str:
        return f"DbApiDriver({self.name})"


class SqliteDriver:
    """
    Opens ``sqlite:///<path>`` and ``sqlite://:memory:`` URLs with the standard library.

    SQLite has no authentication, so ``user``/``password`` properties are dropped.
    """

    name = "sqlite3"
    SCHEME = "sqlite://"

    def connect(self, url: str, properties: Mapping[str, str]) -> sqlite3.Connection:
        if not url.startswith(self.SCHEME):
            raise sqlite3.ProgrammingError(f"Unsupported URL for sqlite3 driver: {url}")
        # sqlite:///relative.db, sqlite:////absolute/path.db, sqlite://:memory:
        location = url[len(self.SCHEME):]
        if location.startswith("/"):
            location = location[1:]
        if not location:
            raise sqlite3.ProgrammingError(f"Missing database path in URL: {url}")

        kwargs: dict[str, Any] = {}
        if "timeout" in properties:
            kwargs["timeout"] = float(properties["timeout"])
        if "isolation_level" in properties:
            level = properties["isolation_level"]
            kwargs["isolation_level"] = None if level.lower() in {"", "none", "autocommit"} else level
        return sqlite3.connect(location, **kwargs)

    def __repr__(self) -> str:
        return "SqliteDriver(sqlite3)"
