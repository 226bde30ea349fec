"""SQL utilities for bikes_qa."""
from .executor import Database, DatabaseError
from .serialize import rows_to_csv, format_value, SerializeError
from .safety import safe_select_only, strip_sql_fences, UnsafeSQLError

__all__ = [
    "Database",
    "DatabaseError",
    "rows_to_csv",
    "format_value",
    "SerializeError",
    "safe_select_only",
    "strip_sql_fences",
    "UnsafeSQLError",
]
