"""
Cloud Spanner schema adapter for the tabular toolkit.

Discovers table schemas from the Spanner catalog and maps Spanner types onto
the toolkit's canonical column types.

All handle operations can be called either as:
- Module functions: spannerdb.get_schema(cn, 'Singers')
- SpannerConnection methods: cn.get_schema('Singers')
"""
__version__ = '0.1.0'

from typing import Any

from spannerdb.adapters import resolve_column_type
from spannerdb.connection import SpannerConnection
from spannerdb.context import CallContext, background
from spannerdb.driver import DRIVER_NAME, SpannerDriver, connect
from spannerdb.exceptions import ConfigurationError, ConnectionFailure
from spannerdb.exceptions import DatabaseError, DbConnectionError
from spannerdb.exceptions import DeadlineExceeded, MappingError
from spannerdb.exceptions import NotImplementedOperation, OperationCancelled
from spannerdb.exceptions import ProgrammingError, QueryError, SchemaNotFound
from spannerdb.exceptions import TypeConversionError, UnsupportedOperation
from spannerdb.exceptions import is_retryable_error
from spannerdb.options import SpannerOptions
from spannerdb.registry import DriverRegistry, build_registry
from spannerdb.types import Column, ColumnType, Key, KeyType, Row, Schema


def get_schema(cn: SpannerConnection, name: str,
               ctx: CallContext | None = None) -> Schema:
    """Get one table's schema. Runs a full catalog scan.
    """
    return cn.get_schema(name, ctx=ctx)


def discover_all(cn: SpannerConnection, ctx: CallContext | None = None) -> dict[str, Schema]:
    """Get every table's schema in one discovery pass.
    """
    return cn.discover_all(ctx=ctx)


def get_rows(cn: SpannerConnection, name: str, ctx: CallContext | None = None) -> Any:
    """Read a table's rows through the connection's data loader.
    """
    return cn.get_rows(name, ctx=ctx)


def set_schema(cn: SpannerConnection, name: str, schema: Schema | None,
               ctx: CallContext | None = None) -> None:
    """Always raises UnsupportedOperation.
    """
    cn.set_schema(name, schema, ctx=ctx)


def set_rows(cn: SpannerConnection, name: str, rows: list[Row] | None,
             ctx: CallContext | None = None) -> None:
    """Always raises UnsupportedOperation.
    """
    cn.set_rows(name, rows, ctx=ctx)


__all__ = [
    'connect',
    'build_registry',
    'DriverRegistry',
    'SpannerDriver',
    'SpannerConnection',
    'SpannerOptions',
    'CallContext',
    'background',
    'DRIVER_NAME',
    'get_schema',
    'discover_all',
    'get_rows',
    'set_schema',
    'set_rows',
    'resolve_column_type',
    'Column',
    'ColumnType',
    'Key',
    'KeyType',
    'Row',
    'Schema',
    'DatabaseError',
    'ConnectionFailure',
    'DbConnectionError',
    'ProgrammingError',
    'QueryError',
    'OperationCancelled',
    'DeadlineExceeded',
    'TypeConversionError',
    'MappingError',
    'SchemaNotFound',
    'UnsupportedOperation',
    'NotImplementedOperation',
    'ConfigurationError',
    'is_retryable_error',
]
