"""
Spanner driver: opens bound connection handles.

The driver is a stateless factory. open() either returns a working
SpannerConnection or raises ConnectionFailure; a session created along the
way is closed before the error propagates.
"""
import logging
from collections.abc import Callable
from dataclasses import fields
from typing import Any, NoReturn

from spannerdb.connection import SpannerConnection
from spannerdb.context import CallContext
from spannerdb.exceptions import ConnectionFailure, OperationCancelled, QueryError
from spannerdb.exceptions import SessionError
from spannerdb.options import SpannerOptions
from spannerdb.session import Session, SpannerSession

from libb import load_options

__all__ = [
    'DRIVER_NAME',
    'SpannerDriver',
    'connect',
]

logger = logging.getLogger(__name__)

DRIVER_NAME = 'spanner'


def _discard(cn: SpannerConnection, error: Exception,
             cause: BaseException | None = None) -> NoReturn:
    """Close a handle whose probe failed, then raise error.

    A failing close is chained as the context of error and never raised
    in its place.
    """
    if cause is not None:
        error.__cause__ = cause
    try:
        cn.close()
    except ConnectionFailure:
        raise error
    raise error


class SpannerDriver:
    """Factory for Spanner connection handles.

    ``session_factory`` builds the session from options; it defaults to
    SpannerSession.open and is the seam for injecting another client.
    """

    name = DRIVER_NAME

    def __init__(self, session_factory: Callable[[SpannerOptions], Session] | None = None) -> None:
        self.session_factory = session_factory or SpannerSession.open

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, SpannerDriver)
                and self.session_factory == other.session_factory)

    def __hash__(self) -> int:
        return hash((SpannerDriver, self.session_factory))

    def __repr__(self) -> str:
        return f'SpannerDriver(session_factory={self.session_factory!r})'

    def open(self, dsn: str | SpannerOptions, ctx: CallContext | None = None) -> SpannerConnection:
        """Open a connection handle.

        Args:
            dsn: Database path ``projects/<p>/instances/<i>/databases/<d>``
                 or SpannerOptions
            ctx: Call context for the connection probe

        Returns
            Open SpannerConnection

        Raises
            ConnectionFailure: Malformed DSN, unreachable endpoint or auth failure
        """
        try:
            options = dsn if isinstance(dsn, SpannerOptions) else SpannerOptions.from_dsn(dsn)
        except ValueError as e:
            raise ConnectionFailure(str(e)) from e

        try:
            session = self.session_factory(options)
        except (*SessionError, OSError) as e:
            raise ConnectionFailure(f'Failed to open {options.database_path}: {e}') from e

        cn = SpannerConnection(session, options)
        if options.check_connection:
            try:
                cn.strategy.ping(cn, cn.make_context(ctx))
            except OperationCancelled as e:
                _discard(cn, e)
            except QueryError as e:
                _discard(cn, ConnectionFailure(f'Failed to reach {options.database_path}: {e}'), e)

        logger.debug(f'Opened {options.database_path} as {options.appname}')
        return cn


@load_options(cls=SpannerOptions)
def connect(options: SpannerOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> SpannerConnection:
    """Connect to Spanner through the default driver

    Args:
        options: Can be:
                - SpannerOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Open SpannerConnection
    """
    if isinstance(options, SpannerOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=SpannerOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    return SpannerDriver().open(options)
