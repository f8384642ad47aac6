"""
tests/test_utils.py
Unit tests for codeforge.utils and the generated-file model.
"""

from __future__ import annotations

import pathlib

import pytest
import yaml

from codeforge.generators.base import make_file
from codeforge.utils import (
    Timer,
    build_import_block,
    dump_json,
    dump_yaml,
    indent_lines,
    pluralize,
    sha256_hex,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
    to_title_human,
    ts_literal,
    ts_string,
    write_file,
)


# ===========================================================================
# Tests for naming helpers
# ===========================================================================


class TestNaming:
    """Case conversion and pluralisation."""

    @pytest.mark.parametrize(
        "name, snake, pascal, camel, kebab",
        [
            ("BlogPost", "blog_post", "BlogPost", "blogPost", "blog-post"),
            ("author_id", "author_id", "AuthorId", "authorId", "author-id"),
            ("user", "user", "User", "user", "user"),
            ("getHTTPResponse", "get_http_response", "GetHttpResponse", "getHttpResponse", "get-http-response"),
        ],
    )
    def test_case_conversions(
        self, name: str, snake: str, pascal: str, camel: str, kebab: str
    ) -> None:
        assert to_snake_case(name) == snake
        assert to_pascal_case(name) == pascal
        assert to_camel_case(name) == camel
        assert to_kebab_case(name) == kebab

    def test_empty_names(self) -> None:
        assert to_snake_case("") == ""
        assert to_pascal_case("") == ""
        assert to_camel_case("") == ""
        assert to_kebab_case("") == ""

    @pytest.mark.parametrize(
        "word, plural",
        [
            ("user", "users"),
            ("category", "categories"),
            ("address", "addresses"),
            ("batch", "batches"),
            ("wish", "wishes"),
            ("", ""),
        ],
    )
    def test_pluralize(self, word: str, plural: str) -> None:
        assert pluralize(word) == plural

    def test_title_human(self) -> None:
        assert to_title_human("BlogPost") == "Blog Post"


# ===========================================================================
# Tests for code-formatting helpers
# ===========================================================================


class TestFormatting:
    """TypeScript rendering helpers."""

    def test_ts_string_escapes(self) -> None:
        assert ts_string("it's") == "'it\\'s'"
        assert ts_string("a\nb") == "'a\\nb'"

    def test_ts_literal(self) -> None:
        assert ts_literal("USER") == "'USER'"
        assert ts_literal(False) == "false"
        assert ts_literal(3) == "3"
        assert ts_literal(None) == "null"

    def test_import_block_sorted_and_skips_empty(self) -> None:
        lines = build_import_block({
            "@nestjs/common": {"Module", "Get", "Controller"},
            "@nestjs/swagger": set(),
            "typeorm": {"Entity"},
        })
        assert lines == [
            "import { Controller, Get, Module } from '@nestjs/common';",
            "import { Entity } from 'typeorm';",
        ]

    def test_indent_lines_keeps_blank_lines(self) -> None:
        assert indent_lines(["a", "", "b"], level=2) == ["    a", "", "    b"]

    def test_dump_json_trailing_newline(self) -> None:
        assert dump_json({"a": [1]}) == '{\n  "a": [\n    1\n  ]\n}\n'

    def test_dump_yaml_keeps_order_without_anchors(self) -> None:
        shared = {"type": "string"}
        text = dump_yaml({"z": shared, "a": shared})
        assert text.index("z:") < text.index("a:")
        assert "&" not in text and "*" not in text
        assert yaml.safe_load(text) == {"z": shared, "a": shared}


# ===========================================================================
# Tests for file helpers
# ===========================================================================


class TestFileHelpers:
    """write_file, hashing and GeneratedFile metrics."""

    def test_write_file_creates_parents(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "deep" / "nested" / "file.ts"
        size = write_file(target, "export {};\n")
        assert target.read_text(encoding="utf-8") == "export {};\n"
        assert size == len("export {};\n")
        assert [p.name for p in target.parent.iterdir()] == ["file.ts"], "No temp files left"

    def test_write_file_non_atomic(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "plain.txt"
        write_file(target, "é", atomic=False)
        assert target.read_bytes() == "é".encode("utf-8")

    def test_sha256(self) -> None:
        assert sha256_hex("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_generated_file_metrics(self) -> None:
        generated = make_file("src/a.ts", "one\ntwo")
        assert generated.content == "one\ntwo\n"
        assert generated.line_count == 2
        assert generated.size_bytes == 8
        assert generated.with_prefix("backend").path == "backend/src/a.ts"
        assert generated.with_prefix("").path == "src/a.ts"

    def test_timer(self) -> None:
        with Timer("noop") as timer:
            pass
        assert timer.elapsed >= 0.0
        assert "noop" in repr(timer)
