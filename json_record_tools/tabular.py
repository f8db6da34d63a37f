"""Flat tabular renderings of record arrays: SQL scripts and CSV text.

Columns come from a single sample record (the first one). Nested objects are
flattened into underscore-joined names, arrays stay whole as JSON columns.

Values are looked up again by splitting a column name on '_', so source keys
that themselves contain underscores cannot be resolved and render as
NULL / empty cells.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional

from .errors import ConfigurationError
from .values import (
    ARRAY,
    BOOLEAN,
    NULL,
    NUMBER,
    OBJECT,
    STRING,
    UNSERIALIZABLE,
    coerce_records,
    compact_dumps,
    json_type,
    safe_dumps,
)

logger = logging.getLogger(__name__)

TEXT = 'TEXT'
INTEGER = 'INTEGER'
DECIMAL = 'DECIMAL'
BOOLEAN_COLUMN = 'BOOLEAN'
JSON_COLUMN = 'JSON'

CSV_SPECIAL_CHARACTERS = (',', '"', '\n', '\r')

DIALECT_TYPES: Dict[str, Dict[str, str]] = {
    'mysql': {
        TEXT: 'TEXT',
        INTEGER: 'INT',
        DECIMAL: 'DECIMAL(10,2)',
        BOOLEAN_COLUMN: 'BOOLEAN',
        JSON_COLUMN: 'JSON',
    },
    'postgresql': {
        TEXT: 'TEXT',
        INTEGER: 'INTEGER',
        DECIMAL: 'DECIMAL(10,2)',
        BOOLEAN_COLUMN: 'BOOLEAN',
        JSON_COLUMN: 'JSONB',
    },
    'sqlserver': {
        TEXT: 'NVARCHAR(MAX)',
        INTEGER: 'INT',
        DECIMAL: 'DECIMAL(10,2)',
        BOOLEAN_COLUMN: 'BIT',
        JSON_COLUMN: 'NVARCHAR(MAX)',
    },
    'sqlite': {
        TEXT: 'TEXT',
        INTEGER: 'INTEGER',
        DECIMAL: 'REAL',
        BOOLEAN_COLUMN: 'INTEGER',
        JSON_COLUMN: 'TEXT',
    },
}

# (true, false) literals per dialect
DIALECT_BOOLEANS: Dict[str, tuple] = {
    'mysql': ('TRUE', 'FALSE'),
    'postgresql': ('TRUE', 'FALSE'),
    'sqlserver': ('1', '0'),
    'sqlite': ('1', '0'),
}

# SQL Server gets one INSERT per row.
MULTI_ROW_INSERT_DIALECTS = frozenset({'mysql', 'postgresql', 'sqlite'})

_INVALID_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_]')


@dataclass(frozen=True)
class TableColumn:
    source: str
    type: str

    @property
    def name(self) -> str:
        return sanitize_column_name(self.source)


@dataclass(frozen=True)
class SQLConversionOptions:
    database: str = 'postgresql'
    table_name: str = 'artists'
    include_create_table: bool = True
    include_inserts: bool = True
    batch_size: int = 100

    def __post_init__(self):
        if self.database not in DIALECT_TYPES:
            raise ConfigurationError(
                f"Unknown SQL dialect {self.database!r}; expected one of {sorted(DIALECT_TYPES)}"
            )
        if not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be a positive integer, got {self.batch_size!r}")
        if not self.table_name:
            raise ConfigurationError("Table name must not be empty")


def sanitize_column_name(name: str) -> str:
    return _INVALID_NAME_CHARS.sub('_', str(name)).lower()


def column_type(value: Any) -> str:
    kind = json_type(value)
    if kind == NUMBER:
        if isinstance(value, int) or float(value).is_integer():
            return INTEGER
        return DECIMAL
    if kind == BOOLEAN:
        return BOOLEAN_COLUMN
    if kind == ARRAY:
        return JSON_COLUMN
    return TEXT


def extract_table_columns(sample: Any, prefix: str = '', ancestors: FrozenSet[int] = frozenset()) -> List[TableColumn]:
    """Flatten a sample record into column definitions.

    An object nested inside itself becomes a single TEXT column.
    """
    columns: List[TableColumn] = []
    if json_type(sample) != OBJECT:
        return columns
    ancestors = ancestors | {id(sample)}

    for key, value in sample.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if json_type(value) == OBJECT and id(value) not in ancestors:
            columns.extend(extract_table_columns(value, name, ancestors))
        else:
            columns.append(TableColumn(name, column_type(value)))
    return columns


def get_nested_value(record: Any, column_source: str) -> Any:
    current = record
    for key in column_source.split('_'):
        if json_type(current) != OBJECT:
            return None
        current = current.get(key)
    return current


def _quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def format_sql_value(value: Any, database: str) -> str:
    kind = json_type(value)
    if kind == NULL:
        return 'NULL'
    if kind == BOOLEAN:
        true_literal, false_literal = DIALECT_BOOLEANS[database]
        return true_literal if value else false_literal
    if kind == NUMBER:
        if value != value or value in (float('inf'), float('-inf')):
            return 'NULL'
        return str(value)
    if kind == STRING:
        return _quote(value)
    if kind in (ARRAY, OBJECT):
        return _quote(compact_dumps(value))
    return _quote(str(value))


def generate_create_table(table_name: str, columns: List[TableColumn], database: str) -> str:
    mapping = DIALECT_TYPES[database]
    column_defs = ',\n'.join(
        f"    {col.name} {mapping.get(col.type, mapping[TEXT])}" for col in columns
    )
    return f"CREATE TABLE {table_name} (\n{column_defs}\n);"


def _value_tuple(record: Any, columns: List[TableColumn], database: str) -> str:
    values = ', '.join(format_sql_value(get_nested_value(record, col.source), database) for col in columns)
    return f"({values})"


def generate_batch_insert(batch: List[Any], table_name: str, columns: List[TableColumn], database: str) -> str:
    column_names = ', '.join(col.name for col in columns)
    rows = ',\n    '.join(_value_tuple(record, columns, database) for record in batch)
    return f"INSERT INTO {table_name} ({column_names}) VALUES\n    {rows};\n"


def generate_single_insert(record: Any, table_name: str, columns: List[TableColumn], database: str) -> str:
    column_names = ', '.join(col.name for col in columns)
    return f"INSERT INTO {table_name} ({column_names}) VALUES {_value_tuple(record, columns, database)};\n"


def generate_inserts(data: List[Any], table_name: str, columns: List[TableColumn], database: str, batch_size: int) -> str:
    parts: List[str] = []
    for start in range(0, len(data), batch_size):
        batch = data[start:start + batch_size]
        if database in MULTI_ROW_INSERT_DIALECTS:
            parts.append(generate_batch_insert(batch, table_name, columns, database))
        else:
            parts.extend(generate_single_insert(record, table_name, columns, database) for record in batch)
        parts.append('\n')
    return ''.join(parts)


def convert_to_sql(data: Any, options: Optional[SQLConversionOptions] = None) -> str:
    options = options or SQLConversionOptions()
    records = coerce_records(data)
    if not records:
        return ''

    columns = extract_table_columns(records[0])
    if not columns:
        logger.warning("First record has no fields; nothing to convert to SQL")
        return ''

    sql = ''
    if options.include_create_table:
        sql += generate_create_table(options.table_name, columns, options.database)
        sql += '\n\n'
    if options.include_inserts:
        sql += generate_inserts(records, options.table_name, columns, options.database, options.batch_size)

    logger.info(
        "Converted %d records to %s SQL with %d columns", len(records), options.database, len(columns)
    )
    return sql


def csv_cell(value: Any) -> str:
    kind = json_type(value)
    if kind == NULL:
        return ''
    if kind == BOOLEAN:
        return 'true' if value else 'false'
    if kind in (ARRAY, OBJECT):
        return compact_dumps(value)
    return str(value)


def csv_escape(text: str) -> str:
    """Quote a cell only when it holds a comma, quote or line break."""
    if any(ch in text for ch in CSV_SPECIAL_CHARACTERS):
        return '"' + text.replace('"', '""') + '"'
    return text


def convert_to_csv(data: Any) -> str:
    records = coerce_records(data)
    if not records:
        return ''

    columns = extract_table_columns(records[0])
    if not columns:
        logger.warning("First record has no fields; nothing to convert to CSV")
        return ''

    lines = [','.join(csv_escape(col.name) for col in columns)]
    for record in records:
        lines.append(','.join(csv_escape(csv_cell(get_nested_value(record, col.source))) for col in columns))
    return '\n'.join(lines)


def convert_to_json(data: Any) -> str:
    text = safe_dumps(data, indent=2)
    return '[]' if text == UNSERIALIZABLE else text
