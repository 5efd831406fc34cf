"""
SQL text used against Spanner.

Spanner GoogleSQL binds parameters by name (``@table_name``); values never
go into the statement text. Identifiers that must be spliced in, such as the
table of ``SELECT *``, are quoted with backticks.
"""
import re

__all__ = [
    'COLUMNS_SQL',
    'PRIMARY_KEY_SQL',
    'PING_SQL',
    'quote_identifier',
    'select_all_sql',
]

COLUMNS_SQL = """
SELECT TABLE_NAME, COLUMN_NAME, ORDINAL_POSITION, SPANNER_TYPE, IS_NULLABLE
FROM INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_SCHEMA = ''
""".strip()

PRIMARY_KEY_SQL = """
SELECT COLUMN_NAME
FROM INFORMATION_SCHEMA.INDEX_COLUMNS
WHERE TABLE_NAME = @table_name AND INDEX_TYPE = 'PRIMARY_KEY'
ORDER BY ORDINAL_POSITION ASC
""".strip()

PING_SQL = 'SELECT 1'

_ESCAPE_RE = re.compile(r'([`\\])')


def quote_identifier(identifier: str) -> str:
    """Quote a Spanner identifier with backticks.

    Parameters
        identifier: Table or column name

    Returns
        Quoted identifier

    Raises
        ValueError: If the identifier is empty
    """
    if not identifier:
        raise ValueError('Identifier cannot be empty')
    return '`' + _ESCAPE_RE.sub(r'\\\1', identifier) + '`'


def select_all_sql(table: str) -> str:
    """Build the row retrieval statement for a table.
    """
    return f'SELECT * FROM {quote_identifier(table)}'
