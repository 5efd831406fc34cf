"""
Schema data model shared with the tabular toolkit.

This module provides:
- ColumnType: canonical column type enumeration
- Column: column metadata reconstructed from the catalog
- Key / KeyType: primary key descriptor
- Schema: one table's ordered columns and primary key
- Row: one materialized table row
"""
import enum
from dataclasses import dataclass, field
from typing import Any, Self

__all__ = [
    'ColumnType',
    'Column',
    'KeyType',
    'Key',
    'Schema',
    'Row',
]


class ColumnType(str, enum.Enum):
    """Canonical column types.

    Every native type accepted by the type mapping lands on exactly one
    member. ``NULL`` is a placeholder and is never the result of a mapping.
    """

    NULL = 'null'
    INT = 'int'
    FLOAT = 'float'
    DATETIME = 'datetime'
    DATE = 'date'
    BOOL = 'bool'
    STRING = 'string'
    BYTES = 'bytes'
    INT_ARRAY = 'int[]'
    FLOAT_ARRAY = 'float[]'
    DATETIME_ARRAY = 'datetime[]'
    DATE_ARRAY = 'date[]'
    BOOL_ARRAY = 'bool[]'
    STRING_ARRAY = 'string[]'
    BYTES_ARRAY = 'bytes[]'

    def __str__(self) -> str:
        return self.value

    @property
    def is_array(self) -> bool:
        return self.value.endswith('[]')

    @property
    def element_type(self) -> 'ColumnType':
        """Scalar type of an array type, or the type itself for scalars.
        """
        if self.is_array:
            return ColumnType(self.value[:-2])
        return self


@dataclass(frozen=True)
class Column:
    """Table column as reported by the catalog.

    Cloud Spanner has no AUTO_INCREMENT, so ``auto_increment`` is always
    False for discovered columns.
    """

    name: str
    ordinal_position: int
    type: ColumnType
    not_null: bool = False
    auto_increment: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'ordinal_position': self.ordinal_position,
            'type': self.type.value,
            'not_null': self.not_null,
            'auto_increment': self.auto_increment,
        }

    @staticmethod
    def get_names(columns: 'list[Column] | tuple[Column, ...]') -> list[str]:
        """Get column names from a sequence of columns.
        """
        return [col.name for col in columns]

    @staticmethod
    def get_column_by_name(columns: 'list[Column] | tuple[Column, ...]',
                           name: str) -> 'Column | None':
        """Find a column by name, None if absent.
        """
        for col in columns:
            if col.name == name:
                return col
        return None


class KeyType(str, enum.Enum):
    PRIMARY = 'primary'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Key:
    """Index key: a key type plus column names in index ordinal order.
    """

    key_type: KeyType
    column_names: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.key_type.value}:{','.join(self.column_names)}"


@dataclass(frozen=True)
class Schema:
    """One table's schema.

    ``primary_key`` is None when the catalog declares no primary key; it is
    never an empty Key.
    """

    name: str
    columns: tuple[Column, ...] = ()
    primary_key: Key | None = None

    @property
    def column_names(self) -> list[str]:
        return Column.get_names(self.columns)

    def get_column(self, name: str) -> Column | None:
        return Column.get_column_by_name(self.columns, name)

    @property
    def column_types(self) -> dict[str, ColumnType]:
        """Column name to canonical type, in ordinal order.
        """
        return {col.name: col.type for col in self.columns}

    @classmethod
    def build(cls, name: str, columns: list[Column],
              primary_key: Key | None = None) -> Self:
        """Assemble a schema with columns in ordinal order.
        """
        ordered = tuple(sorted(columns, key=lambda c: c.ordinal_position))
        return cls(name=name, columns=ordered, primary_key=primary_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'columns': [col.to_dict() for col in self.columns],
            'primary_key': None if self.primary_key is None else {
                'key_type': self.primary_key.key_type.value,
                'column_names': list(self.primary_key.column_names),
            },
        }


@dataclass(frozen=True)
class Row:
    """Materialized table row.

    ``values`` maps column names to converted values. ``group_by_key`` maps
    the primary key label (``str(key)``) to the row's key values in key
    order, and is empty for tables without a primary key.
    """

    values: dict[str, Any] = field(default_factory=dict)
    group_by_key: dict[str, list[Any]] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]
