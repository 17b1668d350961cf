"""SQL text helpers shared by the storage backends.

The remote backend cannot send bound parameters together with a statement
batch, so write statements get their arguments rendered into the SQL text.
Timestamps travel as canonical ``YYYY-MM-DD HH:MM:SS`` strings in both
directions.
"""

import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from zeedzad.constants import (
    CANONICAL_TIMESTAMP_FORMAT,
    D1_DEFER_FOREIGN_KEYS,
)

WRITE_KEYWORDS = frozenset({"INSERT", "UPDATE", "DELETE"})

_MONOTONIC_CLOCK_MARKER = " m="

# Each pattern captures (date, time); fractional seconds and zone are dropped
# so the wall-clock value is kept as written.
_TIMESTAMP_PATTERNS = (
    # RFC 3339, with or without fractional seconds
    re.compile(
        r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.\d{1,9})?(?:[Zz]|[+-]\d{2}:\d{2})$"
    ),
    # Default datetime print form with numeric and named zone, e.g.
    # "2025-10-24 16:48:30.211971376 +0700 +07"
    re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2})(?:\.\d{1,9})? [+-]\d{4} [A-Za-z0-9+-]+$"),
    # Canonical
    re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2})$"),
    # Date only
    re.compile(r"^(\d{4}-\d{2}-\d{2})()$"),
)


def is_write_statement(sql: str) -> bool:
    """Return True when the first keyword of ``sql`` is INSERT, UPDATE or DELETE."""
    words = sql.split(None, 1)
    if not words:
        return False
    keyword = re.match(r"[A-Za-z]*", words[0]).group(0)
    return keyword.upper() in WRITE_KEYWORDS


def format_timestamp(value: datetime | date) -> str:
    """Render a datetime in the canonical storage form."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return value.strftime(CANONICAL_TIMESTAMP_FORMAT)


def format_inline_param(value: Any) -> str:
    """Render one argument as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return f"'{format_timestamp(value)}'"
    if isinstance(value, str):
        return _quote(value)
    return _quote(str(value))


def inline_params(sql: str, args: Sequence[Any]) -> str:
    """Substitute ``?`` placeholders left to right with literal values.

    Placeholders beyond the supplied arguments are left untouched, and text
    produced by a substitution is never scanned again.
    """
    if not args:
        return sql
    pieces = sql.split("?")
    rendered = [pieces[0]]
    for index, piece in enumerate(pieces[1:]):
        if index < len(args):
            rendered.append(format_inline_param(args[index]))
        else:
            rendered.append("?")
        rendered.append(piece)
    return "".join(rendered)


def format_param_value(value: Any) -> str | None:
    """Render one argument for the remote ``params`` string array."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return format_timestamp(value)
    return str(value)


def to_db_value(value: Any) -> Any:
    """Convert an argument for a DB-API driver bind (embedded backend)."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, bool):
        return int(value)
    return value


def prepare_statement(sql: str, args: Sequence[Any] = ()) -> tuple[str, list[str | None] | None]:
    """Build the SQL text and params array sent to the remote backend.

    Writes are prefixed with the foreign-key deferral pragma and have their
    arguments inlined (``params`` is None); reads keep ``?`` placeholders and
    send the arguments as strings.
    """
    if is_write_statement(sql):
        return D1_DEFER_FOREIGN_KEYS + inline_params(sql, args), None
    return sql, [format_param_value(arg) for arg in args]


def normalize_timestamp(value: str) -> str:
    """Rewrite any recognized timestamp string to the canonical form.

    Strings that are not timestamps are returned unchanged, so the function is
    idempotent.
    """
    marker = value.find(_MONOTONIC_CLOCK_MARKER)
    cleaned = value[:marker] if marker > 0 else value

    for pattern in _TIMESTAMP_PATTERNS:
        match = pattern.match(cleaned)
        if not match:
            continue
        day, clock = match.groups()
        candidate = f"{day} {clock or '00:00:00'}"
        try:
            datetime.strptime(candidate, CANONICAL_TIMESTAMP_FORMAT)
        except ValueError:
            return value
        return candidate
    return value


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize the timestamp-like string values of a result row."""
    return {
        key: normalize_timestamp(value) if isinstance(value, str) else value
        for key, value in row.items()
    }


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"
