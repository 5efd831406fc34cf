"""
Spanner connection handle.

The `SpannerConnection` class, the handle the tabular toolkit works with.

SpannerConnection exposes:
- close() - Release the session (idempotent)
- get_schema(name) - Discover one table's schema
- discover_all() - Discover every table's schema in one pass
- get_rows(name) - Materialize a table's rows
- set_schema(name, schema) / set_rows(name, rows) - Always refused

Discovery is not cached. get_schema runs the full catalog scan (one column
query plus one primary key query per table) on every call and keeps only
the requested table. Callers needing several schemas should call
discover_all() once instead.
"""
import logging
import threading
import time
from collections.abc import Callable
from contextlib import closing, nullcontext
from functools import wraps
from typing import TYPE_CHECKING, Any, Self, TypeVar

from spannerdb.adapters.type_conversion import build_row
from spannerdb.context import CallContext
from spannerdb.exceptions import ConnectionFailure, SchemaNotFound, SessionError
from spannerdb.exceptions import UnsupportedOperation
from spannerdb.options import SpannerOptions
from spannerdb.strategy import CatalogStrategy, get_strategy
from spannerdb.types import Row, Schema

if TYPE_CHECKING:
    from spannerdb.session import Session

__all__ = [
    'SpannerConnection',
    'require_open',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


def require_open(func: Callable[..., T]) -> Callable[..., T]:
    """Run a connection method under the query lock with a call context.

    Raises ConnectionFailure if the handle is closed. Replaces a missing
    ctx argument with one built from the connection's default timeout.
    """
    @wraps(func)
    def inner(self: 'SpannerConnection', *args: Any, ctx: CallContext | None = None,
              **kwargs: Any) -> T:
        ctx = self.make_context(ctx)
        with self._lock:
            if self.closed:
                raise ConnectionFailure(f'Connection is closed: {func.__name__}() not allowed')
            start = time.monotonic()
            try:
                return func(self, *args, ctx=ctx, **kwargs)
            finally:
                self.addcall(time.monotonic() - start)
    return inner


class SpannerConnection:
    """Handle bound to one Spanner session.

    1. Tracks call counts and elapsed time
    2. Serializes operations on one handle with a lock (serialize_queries)
       A close from another thread is always atomic. An operation still
       running on an unserialized handle then fails with ConnectionFailure
    3. Supports the context manager protocol, closing on exit
    """

    def __init__(self, session: 'Session | None' = None,
                 options: SpannerOptions | None = None,
                 strategy: CatalogStrategy | None = None) -> None:
        self.session = session
        self.options = options
        self.strategy = strategy or get_strategy()
        self.calls = 0
        self.time = 0.0
        self._closed = session is None
        serialize = options.serialize_queries if options is not None else True
        self._lock = threading.RLock() if serialize else nullcontext()
        self._close_lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __repr__(self) -> str:
        where = self.options.database_path if self.options else None
        state = 'closed' if self.closed else 'open'
        return f'SpannerConnection({where!r}, {state})'

    @property
    def closed(self) -> bool:
        return self._closed

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def make_context(self, ctx: CallContext | None = None) -> CallContext:
        """Use ctx as given, or a fresh one with the default timeout.
        """
        if ctx is not None:
            return ctx
        timeout = self.options.timeout if self.options is not None else None
        return CallContext.with_timeout(timeout)

    def close(self) -> None:
        """Release the session exactly once.

        Safe on an already closed or never opened handle.

        Raises
            ConnectionFailure: If the session fails to close
        """
        with self._lock:
            with self._close_lock:
                if self._closed:
                    return
                self._closed = True
                session, self.session = self.session, None
            try:
                session.close()
            except SessionError as e:
                raise ConnectionFailure(f'Failed to close session: {e}') from e
            logger.debug(f'Connection closed: {self.calls} calls in {self.time:.2f}s '
                         f'(avg: {self.time/max(1, self.calls):.3f}s per call)')

    @require_open
    def discover_all(self, *, ctx: CallContext) -> dict[str, Schema]:
        """Discover the schema of every table in the default schema.

        Table order in the result is unspecified.
        """
        return self.strategy.discover_all(self, ctx)

    @require_open
    def get_schema(self, name: str, *, ctx: CallContext) -> Schema:
        """Get one table's schema by exact name.

        Runs the full discovery pass; see discover_all().

        Raises
            SchemaNotFound: If the catalog has no such table
            QueryError: If a catalog query fails
            MappingError: If a column has an unknown native type
        """
        schemas = self.strategy.discover_all(self, ctx)
        if name not in schemas:
            raise SchemaNotFound(name)
        return schemas[name]

    def set_schema(self, name: str, schema: Schema | None, *,
                   ctx: CallContext | None = None) -> None:
        """Schema changes are not made through this adapter.

        Refused for any input, on open and closed handles alike.
        """
        raise UnsupportedOperation('SpannerConnection does not support set_schema()')

    @require_open
    def get_rows(self, name: str, *, ctx: CallContext) -> Any:
        """Read every row of a table.

        Values are converted per column with the canonical column type, then
        handed to options.data_loader (a list of Row by default).

        Raises
            SchemaNotFound: If the catalog has no such table
            QueryError: If a query fails
            TypeConversionError: If a value does not fit its column type
        """
        schemas = self.strategy.discover_all(self, ctx)
        if name not in schemas:
            raise SchemaNotFound(name)
        schema = schemas[name]

        rows: list[Row] = []
        with closing(self.strategy.iter_rows(self, schema, ctx)) as stream:
            for values in stream:
                rows.append(build_row(values, schema))
        logger.debug(f'Read {len(rows)} rows from {name}')

        data_loader = self.options.data_loader if self.options is not None else None
        if data_loader is None:
            return rows
        return data_loader(rows, schema, table_name=name)

    def set_rows(self, name: str, rows: list[Row] | None, *,
                 ctx: CallContext | None = None) -> None:
        """Bulk row writes are not supported.

        Refused for any input, on open and closed handles alike.
        """
        raise UnsupportedOperation('SpannerConnection does not support set_rows()')

