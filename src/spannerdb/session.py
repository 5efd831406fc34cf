"""
Session capability consumed by the adapter.

The connection handle never talks to google-cloud-spanner directly. It goes
through a Session:

- ``query(sql, params=None, timeout=None)`` runs one single-use read-only
  query and returns a Cursor
- ``close()`` releases the client

A Cursor iterates positional rows (one value per projected column) and must
be closed; closing it before the stream ends stops the stream.

SpannerSession implements the protocol on a google-cloud-spanner Database,
one single-use snapshot per query. Tests substitute an in-memory session.
"""
import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any, Protocol, Self

from google.cloud import spanner
from google.cloud.spanner_v1 import param_types

if TYPE_CHECKING:
    from spannerdb.options import SpannerOptions

logger = logging.getLogger(__name__)

__all__ = [
    'Cursor',
    'Session',
    'SpannerCursor',
    'SpannerSession',
]


class Cursor(Protocol):

    def __iter__(self) -> Iterator[Sequence[Any]]:
        ...

    def close(self) -> None:
        ...


class Session(Protocol):

    def query(self, sql: str, params: Mapping[str, Any] | None = None,
              timeout: float | None = None) -> Cursor:
        ...

    def close(self) -> None:
        ...


_PARAM_TYPES = (
    (bool, param_types.BOOL),
    (int, param_types.INT64),
    (float, param_types.FLOAT64),
    (str, param_types.STRING),
    (bytes, param_types.BYTES),
)


def _param_type(value: Any) -> Any:
    """Spanner parameter type for a bound Python value.
    """
    for python_type, spanner_type in _PARAM_TYPES:
        if isinstance(value, python_type):
            return spanner_type
    raise TypeError(f'Unsupported query parameter type: {type(value).__name__}')


class SpannerCursor:
    """Streamed result set bound to the snapshot that produced it.

    The snapshot checkout stays open until close() so the session is not
    returned to the pool while the stream is still being read.
    """

    def __init__(self, stack: ExitStack, results: Any) -> None:
        self._stack = stack
        self._results = results
        self.closed = False

    def __iter__(self) -> Iterator[Sequence[Any]]:
        yield from self._results

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._stack.close()


class SpannerSession:
    """Session over a google-cloud-spanner Database handle.
    """

    def __init__(self, client: Any, database: Any) -> None:
        self.client = client
        self.database = database

    @classmethod
    def open(cls, options: 'SpannerOptions') -> Self:
        """Create the client and bind the database named by the options.

        Client creation does not contact the service; the first query does.
        """
        if options.credentials:
            client = spanner.Client.from_service_account_json(
                options.credentials, project=options.project)
        else:
            client = spanner.Client(project=options.project)
        database = client.instance(options.instance).database(options.database)
        logger.debug(f'Spanner session bound to {options.database_path}')
        return cls(client, database)

    def query(self, sql: str, params: Mapping[str, Any] | None = None,
              timeout: float | None = None) -> SpannerCursor:
        """Run a single-use read-only query.
        """
        kwargs: dict[str, Any] = {}
        if params:
            kwargs['params'] = dict(params)
            kwargs['param_types'] = {k: _param_type(v) for k, v in params.items()}
        if timeout is not None:
            kwargs['timeout'] = timeout

        stack = ExitStack()
        try:
            snapshot = stack.enter_context(self.database.snapshot())
            results = snapshot.execute_sql(sql, **kwargs)
        except BaseException:
            stack.close()
            raise
        return SpannerCursor(stack, results)

    def close(self) -> None:
        client, self.client, self.database = self.client, None, None
        if client is not None:
            client.close()
