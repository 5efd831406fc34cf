import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, Self

import pandas as pd
import pyarrow as pa
from spannerdb.types import Row, Schema

from libb import ConfigOptions, scriptname

__all__ = [
    'SpannerOptions',
    'DATABASE_PATH_RE',
    'iterrow_data_loader',
    'iterdict_data_loader',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
    'use_iterrow_data_loader',
]

DATABASE_PATH_RE = re.compile(
    r'^projects/(?P<project>[^/]+)/instances/(?P<instance>[^/]+)/databases/(?P<database>[^/]+)$')


def use_iterrow_data_loader(func):
    """Temporarily use the Row loader over the user-specified loader"""

    @wraps(func)
    def inner(*args, **kwargs):
        cn = args[0]

        original_data_loader = cn.options.data_loader
        cn.options.data_loader = iterrow_data_loader

        try:
            return func(*args, **kwargs)
        finally:
            cn.options.data_loader = original_data_loader

    return inner


def iterrow_data_loader(rows: list[Row], schema: Schema, **kwargs) -> list[Row]:
    """Minimal data loader, returns the rows as built.
    """
    return list(rows)


def iterdict_data_loader(rows: list[Row], schema: Schema, **kwargs) -> list[dict]:
    """Rows as plain dicts keyed by column name, in ordinal order.
    """
    return [dict(row.values) for row in rows]


def _attach_schema(df: pd.DataFrame, schema: Schema) -> pd.DataFrame:
    """Keep column metadata on the frame: canonical types and the full schema."""
    df.attrs['column_types'] = {k: v.value for k, v in schema.column_types.items()}
    df.attrs['schema'] = schema.to_dict()
    return df


def _empty_dataframe(schema: Schema) -> pd.DataFrame:
    """Create empty DataFrame with column metadata."""
    return _attach_schema(pd.DataFrame(columns=schema.column_names), schema)


def pandas_numpy_data_loader(rows: list[Row], schema: Schema, **kwargs) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy.

    Always returns a DataFrame, with columns preserved for empty results.
    Canonical column types are kept in DataFrame.attrs['column_types'] and
    the table schema, as a dict, in DataFrame.attrs['schema'].
    """
    if not rows:
        return _empty_dataframe(schema)

    df = pd.DataFrame.from_records([row.values for row in rows], columns=schema.column_names)
    return _attach_schema(df, schema)


def pandas_pyarrow_data_loader(rows: list[Row], schema: Schema, **kwargs) -> pd.DataFrame:
    """PyArrow-backed pandas DataFrame loader.

    Always returns a DataFrame, with columns preserved for empty results.
    """
    if not rows:
        return _empty_dataframe(schema)

    column_names = schema.column_names
    columns_data = [[row.values[col] for row in rows] for col in column_names]
    df = pa.table(columns_data, names=column_names).to_pandas(types_mapper=pd.ArrowDtype)
    return _attach_schema(df, schema)


@dataclass
class SpannerOptions(ConfigOptions):
    """Options

    supported driver names: `spanner`

    - project, instance, database: identify the Spanner database
    - credentials: path to a service account JSON file (default: ambient credentials)
    - timeout: default per-call deadline in seconds, 0 for none
    - check_connection: run a probe query when opening (default: True)
    - serialize_queries: one query at a time per connection (default: True)
    """
    drivername: str = 'spanner'
    project: str = None
    instance: str = None
    database: str = None
    credentials: str = None
    timeout: float = 0
    appname: str = None
    check_connection: bool = True
    serialize_queries: bool = True
    data_loader: Callable[..., Any] | None = None

    def __post_init__(self):
        if self.drivername != 'spanner':
            raise ValueError(f'drivername must be one of: {["spanner"]}')
        for field in ('project', 'instance', 'database'):
            if not getattr(self, field):
                raise ValueError(f'field {field} cannot be None or empty')
        if self.timeout is not None and self.timeout < 0:
            raise ValueError('timeout cannot be negative')
        self.appname = self.appname or scriptname() or 'python_console'
        if self.data_loader is None:
            self.data_loader = iterrow_data_loader

    @property
    def database_path(self) -> str:
        return f'projects/{self.project}/instances/{self.instance}/databases/{self.database}'

    @classmethod
    def from_dsn(cls, dsn: str, **kw: Any) -> Self:
        """Build options from a database path.

        ``projects/<project>/instances/<instance>/databases/<database>``
        Keyword arguments override fields parsed from the path.

        Raises
            ValueError: If the path is malformed
        """
        match = DATABASE_PATH_RE.match(dsn.strip()) if isinstance(dsn, str) else None
        if match is None:
            raise ValueError(f'Malformed Spanner database path: {dsn!r}')
        return cls(**{**match.groupdict(), **kw})
