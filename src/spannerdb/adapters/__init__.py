"""
Spanner adapters package.

This package provides the following components:

- type_mapping: native Spanner type names to canonical column types
- type_conversion: streamed row values to Python values, per column type

Type mapping is pure and raises MappingError for unknown native types.
Value conversion never guesses: a value that does not fit its column type
raises TypeConversionError.
"""
from spannerdb.adapters.type_conversion import build_row, convert_value
from spannerdb.adapters.type_mapping import SPANNER_TYPE_HANDLERS
from spannerdb.adapters.type_mapping import is_supported_type, resolve_column_type
