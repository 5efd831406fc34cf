"""
Tests for converting streamed Spanner values to Python values.
"""
import datetime

import pytest
from spannerdb.adapters.type_conversion import build_row, convert_value
from spannerdb.exceptions import NotImplementedOperation, QueryError
from spannerdb.exceptions import TypeConversionError
from spannerdb.types import Column, ColumnType, Key, KeyType, Schema


@pytest.fixture
def albums_schema():
    return Schema.build('Albums', [
        Column('SingerId', 1, ColumnType.INT, True),
        Column('AlbumId', 2, ColumnType.INT, True),
        Column('Title', 3, ColumnType.STRING),
        Column('Tags', 4, ColumnType.STRING_ARRAY),
    ], Key(KeyType.PRIMARY, ('SingerId', 'AlbumId')))


class TestConvertValue:
    """Scalar and array conversion per canonical type"""

    def test_null_passes_through(self):
        for column_type in ColumnType:
            assert convert_value(None, column_type) is None

    def test_int(self):
        assert convert_value(42, ColumnType.INT) == 42
        assert convert_value('9223372036854775807', ColumnType.INT) == 9223372036854775807

    def test_int_rejects_bool_and_fractions(self):
        with pytest.raises(TypeConversionError):
            convert_value(True, ColumnType.INT)
        with pytest.raises(TypeConversionError):
            convert_value(1.5, ColumnType.INT)

    def test_float(self):
        assert convert_value(1, ColumnType.FLOAT) == 1.0
        assert isinstance(convert_value(1, ColumnType.FLOAT), float)
        assert convert_value('2.5', ColumnType.FLOAT) == 2.5

    def test_bool(self):
        assert convert_value(True, ColumnType.BOOL) is True
        assert convert_value('false', ColumnType.BOOL) is False
        with pytest.raises(TypeConversionError):
            convert_value('maybe', ColumnType.BOOL)

    def test_string(self):
        assert convert_value('abc', ColumnType.STRING) == 'abc'
        assert convert_value(b'abc', ColumnType.STRING) == 'abc'

    def test_bytes_are_base64_decoded(self):
        assert convert_value('aGVsbG8=', ColumnType.BYTES) == b'hello'
        assert convert_value(b'aGVsbG8=', ColumnType.BYTES) == b'hello'
        with pytest.raises(TypeConversionError):
            convert_value('not base64!', ColumnType.BYTES)

    def test_timestamp(self):
        value = convert_value('2019-01-02T03:04:05Z', ColumnType.DATETIME)
        assert value == datetime.datetime(2019, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)

        native = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
        assert convert_value(native, ColumnType.DATETIME) is native

    def test_date(self):
        assert convert_value('1970-09-03', ColumnType.DATE) == datetime.date(1970, 9, 3)
        assert convert_value(datetime.date(2000, 1, 1), ColumnType.DATE) == datetime.date(2000, 1, 1)
        assert convert_value(datetime.datetime(2000, 1, 1, 12), ColumnType.DATE) == datetime.date(2000, 1, 1)

    def test_date_rejects_garbage(self):
        with pytest.raises(TypeConversionError, match='BirthDate'):
            convert_value('yesterday', ColumnType.DATE, 'BirthDate')

    def test_arrays_convert_elementwise(self):
        assert convert_value(['1', 2, None], ColumnType.INT_ARRAY) == [1, 2, None]
        assert convert_value(('2001-01-01',), ColumnType.DATE_ARRAY) == [datetime.date(2001, 1, 1)]

    def test_array_rejects_scalar(self):
        with pytest.raises(TypeConversionError):
            convert_value('abc', ColumnType.STRING_ARRAY)
        with pytest.raises(TypeConversionError):
            convert_value(5, ColumnType.INT_ARRAY)

    def test_null_type_has_no_converter(self):
        with pytest.raises(NotImplementedOperation):
            convert_value(1, ColumnType.NULL)


class TestBuildRow:
    """Row assembly from positional values"""

    def test_values_and_key_group(self, albums_schema):
        row = build_row([1, '7', 'Go', ['a', 'b']], albums_schema)

        assert row.values == {'SingerId': 1, 'AlbumId': 7, 'Title': 'Go', 'Tags': ['a', 'b']}
        assert list(row.values) == albums_schema.column_names
        assert row.group_by_key == {'primary:SingerId,AlbumId': [1, 7]}

    def test_no_primary_key(self):
        schema = Schema.build('T', [Column('id', 1, ColumnType.INT)])
        row = build_row([3], schema)
        assert row.group_by_key == {}
        assert row['id'] == 3

    def test_width_mismatch(self, albums_schema):
        with pytest.raises(QueryError, match='Albums'):
            build_row([1, 2], albums_schema)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
