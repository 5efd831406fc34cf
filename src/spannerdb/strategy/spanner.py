"""
Cloud Spanner catalog discovery.

Two catalog queries rebuild every table schema:

1. INFORMATION_SCHEMA.COLUMNS, once for all tables in the default schema
2. INFORMATION_SCHEMA.INDEX_COLUMNS, once per table, for the primary key

Column types come from the SPANNER_TYPE column through the type mapping.
Cloud Spanner has no AUTO_INCREMENT, so no column is reported as one.
Named schemas are not visited; only TABLE_SCHEMA = '' is read.
"""
import logging
from collections.abc import Iterator, Sequence
from contextlib import closing
from typing import TYPE_CHECKING, Any

from spannerdb.adapters.type_mapping import resolve_column_type
from spannerdb.context import CallContext
from spannerdb.sql import COLUMNS_SQL, PRIMARY_KEY_SQL, select_all_sql
from spannerdb.strategy.base import CatalogStrategy
from spannerdb.types import Column, Key, KeyType, Schema

if TYPE_CHECKING:
    from spannerdb.connection import SpannerConnection

logger = logging.getLogger(__name__)


def scan_schema_column(row: Sequence[Any]) -> tuple[str, Column]:
    """Build a Column from one INFORMATION_SCHEMA.COLUMNS row.

    The row is positional, in COLUMNS_SQL projection order.

    Returns
        tuple: (table name, Column)

    Raises
        MappingError: If SPANNER_TYPE has no canonical type
    """
    table_name, column_name, ordinal_position, spanner_type, is_nullable = row
    column = Column(
        name=column_name,
        ordinal_position=int(ordinal_position),
        type=resolve_column_type(spanner_type),
        not_null=is_nullable == 'NO',
        auto_increment=False,
    )
    return table_name, column


class SpannerStrategy(CatalogStrategy):
    """Cloud Spanner catalog discovery.
    """

    @property
    def dialect_name(self) -> str:
        return 'spanner'

    def discover_all(self, cn: 'SpannerConnection', ctx: CallContext) -> dict[str, Schema]:
        """Rebuild every table schema from the catalog.

        Either every table comes back fully assembled, or the error from
        the first failing query or mapping propagates and nothing is returned.
        """
        columns_by_table: dict[str, list[Column]] = {}
        with closing(self._iter_raw(cn, ctx, COLUMNS_SQL)) as rows:
            for row in rows:
                table_name, column = scan_schema_column(row)
                columns_by_table.setdefault(table_name, []).append(column)

        primary_keys = {
            table_name: self.get_primary_key(cn, table_name, ctx)
            for table_name in columns_by_table
        }

        schemas = {
            table_name: Schema.build(table_name, columns, primary_keys[table_name])
            for table_name, columns in columns_by_table.items()
        }
        logger.debug(f'Discovered {len(schemas)} tables')
        return schemas

    def get_primary_key(self, cn: 'SpannerConnection', table: str,
                        ctx: CallContext) -> Key | None:
        """Get the primary key columns of a table in index order.

        The table name is bound as @table_name, never formatted into the SQL.
        """
        column_names = self._select_column_raw(cn, ctx, PRIMARY_KEY_SQL, {'table_name': table})
        if not column_names:
            return None
        return Key(key_type=KeyType.PRIMARY, column_names=tuple(column_names))

    def iter_rows(self, cn: 'SpannerConnection', schema: Schema,
                  ctx: CallContext) -> Iterator[Sequence[Any]]:
        """Stream ``SELECT *`` rows of a table.

        ``SELECT *`` projects columns in ordinal order, which is the
        schema's column order.
        """
        yield from self._iter_raw(cn, ctx, select_all_sql(schema.name))
