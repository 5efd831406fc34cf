"""
Native Spanner type resolution.

Maps the type strings reported in ``INFORMATION_SCHEMA.COLUMNS.SPANNER_TYPE``
(``INT64``, ``STRING(MAX)``, ``ARRAY<BYTES(1024)>`` ...) onto ColumnType.

Handlers are checked in order and the first match wins, so exact scalar
names come before the prefix rules and ``ARRAY<...>`` prefixes never collide
with the scalar ``STRING``/``BYTES`` prefixes.

A native type with no handler raises MappingError. New Spanner types need a
new handler here; nothing falls back to a guessed type.
"""
from functools import lru_cache

from spannerdb.exceptions import MappingError
from spannerdb.types import ColumnType

__all__ = [
    'TypeHandler',
    'ExactTypeHandler',
    'PrefixTypeHandler',
    'SPANNER_TYPE_HANDLERS',
    'resolve_column_type',
    'is_supported_type',
]


class TypeHandler:
    """Base class for native type handlers.
    """

    def __init__(self, column_type: ColumnType) -> None:
        self.column_type = column_type

    def handles_type(self, native_type: str) -> bool:
        """Check if this handler recognizes the native type name.
        """
        return False


class ExactTypeHandler(TypeHandler):

    def __init__(self, native_type: str, column_type: ColumnType) -> None:
        super().__init__(column_type)
        self.native_type = native_type

    def handles_type(self, native_type: str) -> bool:
        return native_type == self.native_type

    def __repr__(self) -> str:
        return f'ExactTypeHandler({self.native_type!r} -> {self.column_type})'


class PrefixTypeHandler(TypeHandler):
    """Matches a type name prefix, covering length parameters like ``(MAX)``.
    """

    def __init__(self, prefix: str, column_type: ColumnType) -> None:
        super().__init__(column_type)
        self.prefix = prefix

    def handles_type(self, native_type: str) -> bool:
        return native_type.startswith(self.prefix)

    def __repr__(self) -> str:
        return f'PrefixTypeHandler({self.prefix!r}* -> {self.column_type})'


SPANNER_TYPE_HANDLERS: tuple[TypeHandler, ...] = (
    ExactTypeHandler('INT64', ColumnType.INT),
    ExactTypeHandler('FLOAT64', ColumnType.FLOAT),
    ExactTypeHandler('TIMESTAMP', ColumnType.DATETIME),
    ExactTypeHandler('DATE', ColumnType.DATE),
    ExactTypeHandler('BOOL', ColumnType.BOOL),
    PrefixTypeHandler('STRING', ColumnType.STRING),
    PrefixTypeHandler('BYTES', ColumnType.BYTES),
    PrefixTypeHandler('ARRAY<STRING', ColumnType.STRING_ARRAY),
    PrefixTypeHandler('ARRAY<BYTES', ColumnType.BYTES_ARRAY),
    PrefixTypeHandler('ARRAY<DATE', ColumnType.DATE_ARRAY),
    PrefixTypeHandler('ARRAY<FLOAT64', ColumnType.FLOAT_ARRAY),
    PrefixTypeHandler('ARRAY<INT64', ColumnType.INT_ARRAY),
    PrefixTypeHandler('ARRAY<TIMESTAMP', ColumnType.DATETIME_ARRAY),
    PrefixTypeHandler('ARRAY<BOOL', ColumnType.BOOL_ARRAY),
)


@lru_cache(maxsize=256)
def resolve_column_type(native_type: str) -> ColumnType:
    """Resolve a native Spanner type name to its canonical column type.

    Args:
        native_type: Type string as reported by the catalog

    Returns
        ColumnType for the native type

    Raises
        MappingError: If no handler recognizes the type
    """
    for handler in SPANNER_TYPE_HANDLERS:
        if handler.handles_type(native_type):
            return handler.column_type
    raise MappingError(native_type)


def is_supported_type(native_type: str) -> bool:
    """Check if a native type name has a canonical mapping.
    """
    return any(h.handles_type(native_type) for h in SPANNER_TYPE_HANDLERS)
