"""
tests/test_utils.py
Unit tests for uvg.utils.

Tests cover:
- Word extraction and PascalCase conversion
- Singularisation (regular, irregular and plural-looking words)
- Class, variable and attribute naming
- Free-name allocation
- Python literal escaping
- Atomic file writes, line counting and the Timer helper
"""

from __future__ import annotations

import ast
import pathlib
from typing import Set

import pytest

from uvg.utils import (
    Timer,
    column_to_attribute_name,
    count_lines,
    escape_python_string,
    find_free_name,
    quote,
    quote_all,
    table_to_class_name,
    table_to_variable_name,
    to_singular,
    write_file,
)


# ===========================================================================
# Case conversion
# ===========================================================================


class TestSingular:
    @pytest.mark.parametrize(
        "word, expected",
        [
            ("users", "user"),
            ("categories", "category"),
            ("boxes", "box"),
            ("wolves", "wolf"),
            ("heroes", "hero"),
            ("people", "person"),
            ("People", "Person"),
            ("status", "status"),
            ("address", "address"),
            ("analysis", "analysis"),
            ("data", "datum"),
            ("fish", "fish"),
        ],
    )
    def test_to_singular(self, word: str, expected: str) -> None:
        assert to_singular(word) == expected

    def test_empty(self) -> None:
        assert to_singular("") == ""


# ===========================================================================
# Generated identifiers
# ===========================================================================


class TestClassNames:
    def test_plain(self) -> None:
        assert table_to_class_name("users") == "Users"

    def test_inflect_singularises_last_word_only(self) -> None:
        assert table_to_class_name("users", True) == "User"
        assert table_to_class_name("order_items", True) == "OrderItem"
        assert table_to_class_name("news_categories", True) == "NewsCategory"

    def test_leading_digit(self) -> None:
        assert table_to_class_name("2fa_codes") == "T2FaCodes"

    def test_no_word_characters(self) -> None:
        assert table_to_class_name("$$") == "Table"

    def test_result_is_identifier(self) -> None:
        for name in ("user profiles", "x-y-z", "Mixed_Case_Table", "9lives"):
            assert table_to_class_name(name).isidentifier()


class TestVariableNames:
    def test_prefix(self) -> None:
        assert table_to_variable_name("users") == "t_users"

    def test_illegal_characters(self) -> None:
        assert table_to_variable_name("order items") == "t_order_items"
        assert table_to_variable_name("a-b") == "t_a_b"


class TestAttributeNames:
    def test_valid_name_unchanged(self) -> None:
        assert column_to_attribute_name("created_at") == "created_at"

    def test_keyword(self) -> None:
        assert column_to_attribute_name("class") == "class_"
        assert column_to_attribute_name("from") == "from_"

    def test_declarative_reserved(self) -> None:
        assert column_to_attribute_name("metadata") == "metadata_"
        assert column_to_attribute_name("registry") == "registry_"

    def test_illegal_characters(self) -> None:
        assert column_to_attribute_name("first name") == "first_name"
        assert column_to_attribute_name("e-mail") == "e_mail"

    def test_leading_digit(self) -> None:
        assert column_to_attribute_name("1st") == "_1st"


class TestFindFreeName:
    def test_claims_name(self) -> None:
        taken: Set[str] = set()
        assert find_free_name("Users", taken) == "Users"
        assert "Users" in taken

    def test_appends_underscores(self) -> None:
        taken: Set[str] = {"Users", "Users_"}
        assert find_free_name("Users", taken) == "Users__"
        assert find_free_name("Users", taken) == "Users___"


# ===========================================================================
# Literals
# ===========================================================================


class TestQuoting:
    def test_plain(self) -> None:
        assert quote("users") == "'users'"

    def test_escapes(self) -> None:
        assert escape_python_string("it's") == "it\\'s"
        assert escape_python_string("a\\b") == "a\\\\b"
        assert escape_python_string("line\nbreak") == "line\\nbreak"

    @pytest.mark.parametrize(
        "value",
        ["it's", "back\\slash", "tab\there", "new\nline", "crlf\r\n", "ünïcødé"],
    )
    def test_quote_evaluates_back(self, value: str) -> None:
        assert ast.literal_eval(quote(value)) == value

    def test_quote_all_preserves_order(self) -> None:
        assert quote_all(["b", "a"]) == ["'b'", "'a'"]


# ===========================================================================
# File I/O & misc
# ===========================================================================


class TestWriteFile:
    def test_writes_and_creates_parents(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "out" / "models.py"
        written = write_file(target, "x = 1\n")
        assert target.read_text(encoding="utf-8") == "x = 1\n"
        assert written == len("x = 1\n".encode("utf-8"))

    def test_overwrites_without_leftovers(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "models.py"
        write_file(target, "old\n")
        write_file(target, "new\n")
        assert target.read_text(encoding="utf-8") == "new\n"
        assert [p.name for p in tmp_path.iterdir()] == ["models.py"]


class TestCountLines:
    @pytest.mark.parametrize(
        "content, expected",
        [("", 0), ("a", 1), ("a\n", 1), ("a\nb", 2), ("a\nb\n", 2)],
    )
    def test_count_lines(self, content: str, expected: int) -> None:
        assert count_lines(content) == expected


class TestTimer:
    def test_elapsed_is_recorded(self) -> None:
        with Timer("noop") as t:
            sum(range(100))
        assert t.elapsed >= 0.0
        assert t.end_time >= t.start_time
        assert "noop" in repr(t)
