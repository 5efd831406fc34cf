"""
Tests for native Spanner type resolution.
"""
import pytest
from spannerdb.adapters.type_mapping import SPANNER_TYPE_HANDLERS, ExactTypeHandler
from spannerdb.adapters.type_mapping import PrefixTypeHandler, is_supported_type
from spannerdb.adapters.type_mapping import resolve_column_type
from spannerdb.exceptions import MappingError, TypeConversionError
from spannerdb.types import ColumnType


@pytest.mark.parametrize(('native_type', 'expected'), [
    ('INT64', ColumnType.INT),
    ('FLOAT64', ColumnType.FLOAT),
    ('TIMESTAMP', ColumnType.DATETIME),
    ('DATE', ColumnType.DATE),
    ('BOOL', ColumnType.BOOL),
    ('STRING(MAX)', ColumnType.STRING),
    ('STRING(1024)', ColumnType.STRING),
    ('BYTES(MAX)', ColumnType.BYTES),
    ('BYTES(16)', ColumnType.BYTES),
    ('ARRAY<STRING(MAX)>', ColumnType.STRING_ARRAY),
    ('ARRAY<BYTES(MAX)>', ColumnType.BYTES_ARRAY),
    ('ARRAY<DATE>', ColumnType.DATE_ARRAY),
    ('ARRAY<FLOAT64>', ColumnType.FLOAT_ARRAY),
    ('ARRAY<INT64>', ColumnType.INT_ARRAY),
    ('ARRAY<TIMESTAMP>', ColumnType.DATETIME_ARRAY),
    ('ARRAY<BOOL>', ColumnType.BOOL_ARRAY),
])
def test_resolve_known_types(native_type, expected):
    """Every native type in the vocabulary maps to one canonical type"""
    assert resolve_column_type(native_type) is expected
    assert is_supported_type(native_type)


@pytest.mark.parametrize('native_type', [
    'NUMERIC',
    'JSON',
    'ARRAY<NUMERIC>',
    'ARRAY<JSON>',
    'int64',
    'INT64 ',
    'INT',
    'TIMESTAMP(6)',
    '',
])
def test_resolve_unknown_types(native_type):
    """Unknown types fail with the offending string, never a guessed type"""
    with pytest.raises(MappingError) as exc_info:
        resolve_column_type(native_type)

    assert exc_info.value.native_type == native_type
    assert native_type in str(exc_info.value)
    assert isinstance(exc_info.value, TypeConversionError)
    assert not is_supported_type(native_type)


def test_resolve_is_deterministic():
    """Same input, same answer, including failures"""
    assert resolve_column_type('ARRAY<INT64>') is resolve_column_type('ARRAY<INT64>')

    for _ in range(2):
        with pytest.raises(MappingError):
            resolve_column_type('GEOGRAPHY')


def test_scalar_rules_precede_array_rules():
    """Exact scalar names are checked before any prefix rule"""
    kinds = [type(h) for h in SPANNER_TYPE_HANDLERS]
    last_exact = max(i for i, k in enumerate(kinds) if k is ExactTypeHandler)
    first_prefix = min(i for i, k in enumerate(kinds) if k is PrefixTypeHandler)
    assert last_exact < first_prefix


def test_mapping_never_returns_null():
    """NULL is a placeholder, not a mapping result"""
    assert all(h.column_type is not ColumnType.NULL for h in SPANNER_TYPE_HANDLERS)


def test_handlers_cover_every_non_null_type():
    """The canonical enumeration is reachable in full"""
    covered = {h.column_type for h in SPANNER_TYPE_HANDLERS}
    assert covered == set(ColumnType) - {ColumnType.NULL}


def test_prefix_handler():
    handler = PrefixTypeHandler('STRING', ColumnType.STRING)
    assert handler.handles_type('STRING(10)')
    assert not handler.handles_type('ARRAY<STRING(10)>')
    assert 'STRING' in repr(handler)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
