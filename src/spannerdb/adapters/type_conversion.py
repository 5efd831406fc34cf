"""
Value conversion for rows streamed from Spanner (Database -> Python).

The Spanner client already decodes most values into Python objects. This
module normalizes what it yields against each column's canonical type:

1. INT64 arrives as ``int`` (or a decimal string over JSON transports)
2. TIMESTAMP arrives as a ``datetime`` subclass, or an RFC 3339 string
3. DATE arrives as ``datetime.date``, or an ISO string
4. BYTES arrives base64-encoded
5. ARRAY<...> arrives as a list and is converted element-wise

NULL passes through untouched for every type.
"""
import base64
import datetime
from collections.abc import Sequence
from typing import Any

import dateutil.parser
from spannerdb.exceptions import NotImplementedOperation, QueryError
from spannerdb.exceptions import TypeConversionError
from spannerdb.types import ColumnType, Row, Schema

__all__ = [
    'convert_value',
    'build_row',
]

TRUE_STRINGS: set[str] = {'true', 't', '1'}
FALSE_STRINGS: set[str] = {'false', 'f', '0'}


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f'refusing bool for INT64: {value!r}')
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f'non-integral value for INT64: {value!r}')
    return int(value)


def _to_float(value: Any) -> float:
    return float(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError(f'not a boolean: {value!r}')
    if isinstance(value, int):
        return bool(value)
    raise TypeError(f'not a boolean: {value!r}')


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def _to_bytes(value: Any) -> bytes:
    """Decode base64 payloads the way Spanner transmits BYTES.
    """
    if isinstance(value, bytes | bytearray):
        data = bytes(value)
    elif isinstance(value, str):
        data = value.encode('ascii')
    else:
        raise TypeError(f'not a bytes value: {value!r}')
    return base64.b64decode(data, validate=True)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        return dateutil.parser.isoparse(value)
    raise TypeError(f'not a timestamp: {value!r}')


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return dateutil.parser.isoparse(value).date()
    raise TypeError(f'not a date: {value!r}')


_SCALAR_CONVERTERS = {
    ColumnType.INT: _to_int,
    ColumnType.FLOAT: _to_float,
    ColumnType.BOOL: _to_bool,
    ColumnType.STRING: _to_str,
    ColumnType.BYTES: _to_bytes,
    ColumnType.DATETIME: _to_datetime,
    ColumnType.DATE: _to_date,
}


def _convert_scalar(value: Any, column_type: ColumnType) -> Any:
    if value is None:
        return None
    converter = _SCALAR_CONVERTERS.get(column_type)
    if converter is None:
        raise NotImplementedOperation(f'No value converter for column type {column_type}')
    return converter(value)


def convert_value(value: Any, column_type: ColumnType,
                  column_name: str | None = None) -> Any:
    """Convert one streamed value to the Python form of its column type.

    Args:
        value: Value as yielded by the session
        column_type: Canonical type of the column
        column_name: Column name, used in error messages

    Returns
        Converted value, None for NULL

    Raises
        TypeConversionError: If the value does not fit the column type
        NotImplementedOperation: If the column type has no converter
    """
    if value is None:
        return None
    try:
        if column_type.is_array:
            if isinstance(value, str | bytes) or not isinstance(value, Sequence):
                raise TypeError(f'not an array: {value!r}')
            element_type = column_type.element_type
            return [_convert_scalar(v, element_type) for v in value]
        return _convert_scalar(value, column_type)
    except (TypeError, ValueError, OverflowError) as e:
        where = f' for column {column_name}' if column_name else ''
        raise TypeConversionError(
            f'Cannot convert {value!r} to {column_type}{where}: {e}') from e


def build_row(values: Sequence[Any], schema: Schema) -> Row:
    """Build a Row from positional values in the schema's column order.

    Args:
        values: One streamed row, one value per column
        schema: Schema of the table the row came from

    Returns
        Row with converted values and its primary key group

    Raises
        QueryError: If the row width differs from the schema
    """
    if len(values) != len(schema.columns):
        raise QueryError(
            f'Row from {schema.name} has {len(values)} values, '
            f'schema has {len(schema.columns)} columns')

    row_values = {
        col.name: convert_value(value, col.type, col.name)
        for col, value in zip(schema.columns, values)
    }

    group_by_key: dict[str, list[Any]] = {}
    if schema.primary_key is not None:
        group_by_key[str(schema.primary_key)] = [
            row_values[name] for name in schema.primary_key.column_names
        ]

    return Row(values=row_values, group_by_key=group_by_key)
