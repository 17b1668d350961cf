"""Tests for SQL classification, parameter inlining and timestamp normalization."""

import re
from datetime import datetime

import pytest

from zeedzad.db.sql import (
    format_inline_param,
    format_param_value,
    inline_params,
    is_write_statement,
    normalize_row,
    normalize_timestamp,
    prepare_statement,
)


class TestWriteClassification:
    """Tests for is_write_statement."""

    @pytest.mark.parametrize(
        "sql",
        [
            "INSERT INTO games (id) VALUES (?)",
            "update videos SET game_id = ?",
            "  \n\tDelete FROM games",
            "INSERT",
        ],
    )
    def test_writes(self, sql: str):
        """Statements led by INSERT/UPDATE/DELETE are writes, in any case."""
        assert is_write_statement(sql) is True

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM videos",
            "  select 1",
            "WITH x AS (SELECT 1) INSERT INTO games SELECT * FROM x",
            "CREATE TABLE IF NOT EXISTS games (id VARCHAR)",
            "PRAGMA foreign_keys = ON",
            "INSERTED",
            "",
            "   ",
        ],
    )
    def test_non_writes(self, sql: str):
        """Anything else is a read."""
        assert is_write_statement(sql) is False


class TestInlineParams:
    """Tests for inline_params and format_inline_param."""

    def test_literal_rendering(self):
        """Each type gets its SQL literal form."""
        assert format_inline_param(None) == "NULL"
        assert format_inline_param(True) == "1"
        assert format_inline_param(False) == "0"
        assert format_inline_param(42) == "42"
        assert format_inline_param(2.5) == "2.5"
        assert format_inline_param("it's") == "'it''s'"
        assert format_inline_param(datetime(2025, 10, 22, 9, 0, 27)) == "'2025-10-22 09:00:27'"

    def test_other_types_are_quoted(self):
        """Unknown types are rendered through str() and quoted."""

        class Slug:
            def __str__(self) -> str:
                return "o'hara"

        assert format_inline_param(Slug()) == "'o''hara'"

    def test_placeholders_replaced_in_order(self):
        """Placeholders are substituted left to right."""
        sql = inline_params(
            "INSERT INTO videos (id, title, game_id, published_at) VALUES (?, ?, ?, ?)",
            ["vid-1", "A 'quoted' title", None, datetime(2025, 1, 2, 3, 4, 5)],
        )
        assert sql == (
            "INSERT INTO videos (id, title, game_id, published_at) "
            "VALUES ('vid-1', 'A ''quoted'' title', NULL, '2025-01-02 03:04:05')"
        )

    def test_question_mark_inside_value_is_not_substituted(self):
        """Text produced by a substitution is never scanned again."""
        sql = inline_params("UPDATE games SET name = ? WHERE id = ?", ["Who?", "g-1"])
        assert sql == "UPDATE games SET name = 'Who?' WHERE id = 'g-1'"

    def test_extra_placeholders_are_kept(self):
        """Placeholders without an argument stay as they are."""
        assert inline_params("SELECT ?, ?", [1]) == "SELECT 1, ?"

    def test_no_args_returns_sql_unchanged(self):
        assert inline_params("DELETE FROM games", []) == "DELETE FROM games"

    def test_inlined_literals_round_trip(self):
        """Parsing the inlined literals recovers the arguments."""
        args = ["O'Brien", 7, None, True, "a''b", datetime(2024, 2, 29, 23, 59, 59)]
        sql = inline_params("INSERT INTO t VALUES (?, ?, ?, ?, ?, ?)", args)
        literal = re.compile(r"'(?:[^']|'')*'|NULL|-?\d+(?:\.\d+)?")
        body = sql[sql.index("(") + 1 : sql.rindex(")")]
        parsed = [
            None if token == "NULL"
            else token[1:-1].replace("''", "'") if token.startswith("'")
            else token
            for token in literal.findall(body)
        ]
        assert parsed == ["O'Brien", "7", None, "1", "a''b", "2024-02-29 23:59:59"]


class TestPrepareStatement:
    """Tests for the statement sent to the remote backend."""

    def test_write_is_deferred_and_inlined(self):
        """Writes get the pragma prefix, inlined arguments and no params."""
        sql, params = prepare_statement("UPDATE games SET name=? WHERE id=?", ["O'Brien", 1])
        assert sql == "PRAGMA defer_foreign_keys = on; UPDATE games SET name='O''Brien' WHERE id=1"
        assert params is None

    def test_read_keeps_placeholders(self):
        """Reads send arguments as a string array."""
        sql, params = prepare_statement(
            "SELECT * FROM videos WHERE id = ? AND created_at > ? AND flag = ? AND game_id IS ?",
            ["vid-1", datetime(2025, 10, 22, 9, 0, 27), False, None],
        )
        assert sql.startswith("SELECT")
        assert params == ["vid-1", "2025-10-22 09:00:27", "0", None]

    def test_param_value_rendering(self):
        assert format_param_value(12) == "12"
        assert format_param_value(True) == "1"
        assert format_param_value(None) is None


class TestNormalizeTimestamp:
    """Tests for normalize_timestamp."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2025-10-22T09:00:27Z", "2025-10-22 09:00:27"),
            ("2025-10-22T09:00:27.123456789Z", "2025-10-22 09:00:27"),
            ("2025-10-22T09:00:27+07:00", "2025-10-22 09:00:27"),
            ("2025-10-22 09:00:27", "2025-10-22 09:00:27"),
            ("2025-10-22", "2025-10-22 00:00:00"),
            ("2025-10-24 16:48:30.211971376 +0700 +07 m=+50.1", "2025-10-24 16:48:30"),
            ("2025-10-24 16:48:30.211971376 +0000 UTC", "2025-10-24 16:48:30"),
        ],
    )
    def test_recognized_formats(self, raw: str, expected: str):
        """Recognized timestamp formats are rewritten to the canonical form."""
        assert normalize_timestamp(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "Celeste",
            "",
            "2025-13-45 10:00:00",
            "2025-10-22T25:00:00Z",
            "m=+1",
            "see 2025-10-22",
        ],
    )
    def test_non_timestamps_unchanged(self, raw: str):
        """Other strings come back verbatim."""
        assert normalize_timestamp(raw) == raw

    @pytest.mark.parametrize(
        "raw",
        [
            "2025-10-22T09:00:27Z",
            "2025-10-24 16:48:30.211971376 +0700 +07 m=+50.1",
            "2025-10-22",
            "plain text m=+3",
            "hello",
        ],
    )
    def test_idempotent(self, raw: str):
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize_timestamp(raw)
        assert normalize_timestamp(once) == once

    def test_normalize_row_only_touches_strings(self):
        row = {"id": "vid-1", "published_at": "2025-10-22T09:00:27Z", "count": 3, "flag": True, "icon": None}
        assert normalize_row(row) == {
            "id": "vid-1",
            "published_at": "2025-10-22 09:00:27",
            "count": 3,
            "flag": True,
            "icon": None,
        }
