"""
Base strategy interface for catalog discovery.

Defines the abstract base class for the schema discovery engine. A strategy
holds no state of its own: it issues queries through the connection's
session, checks the call context while streaming, and assembles the schema
objects handed back to the connection.

Query failures surface as QueryError with the session error as the cause,
or as DeadlineExceeded when the RPC ran out of time.
A stream is always closed before an error or cancellation propagates.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from google.api_core import exceptions as api_exceptions
from spannerdb.context import CallContext
from spannerdb.exceptions import ConnectionFailure, DeadlineExceeded, QueryError
from spannerdb.exceptions import SessionError
from spannerdb.sql import PING_SQL
from spannerdb.types import Key, Schema

if TYPE_CHECKING:
    from spannerdb.connection import SpannerConnection

logger = logging.getLogger(__name__)


def query_error(ctx: CallContext, message: str, exc: BaseException) -> QueryError:
    """Wrap a session error, typing RPC timeouts as DeadlineExceeded.
    """
    if isinstance(exc, api_exceptions.DeadlineExceeded) or ctx.expired:
        return DeadlineExceeded(f'{message}: {exc}')
    return QueryError(f'{message}: {exc}')


class CatalogStrategy(ABC):
    """Base class for database-specific catalog discovery.
    """

    @contextmanager
    def _cursor(self, cn: 'SpannerConnection', ctx: CallContext, sql: str,
                params: Mapping[str, Any] | None = None):
        """Context manager for cursor lifecycle.

        Handles the context check, query issuance and cleanup.

        Raises
            ConnectionFailure: If the handle was closed by another thread
        """
        ctx.check()
        session = cn.session
        if session is None or cn.closed:
            raise ConnectionFailure('Connection closed while an operation was running')
        logger.debug(f'Query: {sql} params={dict(params or {})}')
        try:
            cursor = session.query(sql, params, timeout=ctx.remaining())
        except SessionError as e:
            raise query_error(ctx, 'Query failed', e) from e
        try:
            yield cursor
        finally:
            cursor.close()

    def _iter_raw(self, cn: 'SpannerConnection', ctx: CallContext, sql: str,
                  params: Mapping[str, Any] | None = None) -> Iterator[Sequence[Any]]:
        """Stream positional rows, checking the context before each step.
        """
        with self._cursor(cn, ctx, sql, params) as cursor:
            rows = iter(cursor)
            while True:
                ctx.check()
                try:
                    row = next(rows)
                except StopIteration:
                    return
                except SessionError as e:
                    raise query_error(ctx, 'Query stream failed', e) from e
                yield row

    def _select_raw(self, cn: 'SpannerConnection', ctx: CallContext, sql: str,
                    params: Mapping[str, Any] | None = None) -> list[Sequence[Any]]:
        """Execute SQL and return every positional row.
        """
        return list(self._iter_raw(cn, ctx, sql, params))

    def _select_column_raw(self, cn: 'SpannerConnection', ctx: CallContext, sql: str,
                           params: Mapping[str, Any] | None = None) -> list[Any]:
        """Execute SQL and return the first column as a list.
        """
        return [row[0] for row in self._iter_raw(cn, ctx, sql, params)]

    def ping(self, cn: 'SpannerConnection', ctx: CallContext) -> None:
        """Run a trivial query to prove the session works.
        """
        self._select_raw(cn, ctx, PING_SQL)

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier."""

    @abstractmethod
    def discover_all(self, cn: 'SpannerConnection', ctx: CallContext) -> dict[str, Schema]:
        """Run the full discovery pass.

        Args:
            cn: Open connection
            ctx: Call context

        Returns
            dict: Table name to assembled Schema, for every table in the catalog
        """

    @abstractmethod
    def get_primary_key(self, cn: 'SpannerConnection', table: str,
                        ctx: CallContext) -> Key | None:
        """Get the primary key of a table.

        Args:
            cn: Open connection
            table: Table name
            ctx: Call context

        Returns
            Key with columns in index order, None if the table declares none
        """

    @abstractmethod
    def iter_rows(self, cn: 'SpannerConnection', schema: Schema,
                  ctx: CallContext) -> Iterator[Sequence[Any]]:
        """Stream the raw rows of a table in the schema's column order.

        Args:
            cn: Open connection
            schema: Discovered schema of the table
            ctx: Call context
        """
