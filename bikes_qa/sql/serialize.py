"""
Turn a DB-API cursor into a CSV blob for the answer prompt.

Column types are only known at run time, so every cell goes through
format_value(), which renders it the way a generic value printer would:

    None              -> ""
    True / False      -> "true" / "false"
    1100.0            -> "1100"
    1234.5            -> "1234.5"
    Decimal("1100.0") -> "1100"
    datetime(...)     -> "2019-08-01 07:30:00"
"""
from __future__ import annotations

import csv
import io
import math
from decimal import Decimal
from typing import Any, List, Sequence

FETCH_SIZE = 1024

# Integral floats at or above this print in exponent form
_EXPONENT_THRESHOLD = 1e21


class SerializeError(RuntimeError):
    """Reading rows from the cursor or writing them as CSV failed."""


def format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))
    return repr(value)


def format_decimal(value: Decimal) -> str:
    if not value.is_finite():
        return str(value)
    return format(value.normalize(), "f")


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, Decimal):
        return format_decimal(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def column_names(cursor: Any) -> List[str]:
    description = cursor.description
    if description is None:
        raise SerializeError("statement returned no columns")
    return [col[0] for col in description]


def rows_to_csv(cursor: Any, fetch_size: int = FETCH_SIZE) -> str:
    """
    Drain ``cursor`` into CSV text: a header record, then one record per row.

    A cursor with no rows yields the header alone. Every failure (missing
    column metadata, fetch error, write error) raises SerializeError.
    """
    try:
        cols = column_names(cursor)
    except SerializeError:
        raise
    except Exception as e:
        raise SerializeError(f"columns: {e}") from e

    buf = io.StringIO()
    wtr = csv.writer(buf, lineterminator="\n")
    _write(wtr, cols)

    width = len(cols)
    while True:
        try:
            batch = cursor.fetchmany(fetch_size)
        except Exception as e:
            raise SerializeError(str(e)) from e
        if not batch:
            break
        for row in batch:
            if len(row) != width:
                raise SerializeError(f"row has {len(row)} values, expected {width}")
            _write(wtr, [format_value(v) for v in row])

    return buf.getvalue()


def _write(wtr: Any, record: Sequence[str]) -> None:
    try:
        wtr.writerow(record)
    except csv.Error as e:
        raise SerializeError(f"write: {e}") from e
