# File: codeforge/utils.py
"""
CodeForge - Utility Functions & Helpers
=======================================
String transformation, serialisation and file I/O helpers used throughout
the generation pipeline.

- All naming-convention helpers are plain functions decorated with
  ``@lru_cache(maxsize=None)``; generators call them directly with explicit
  arguments, there is no helper registry.
- ``pluralize`` is deliberately naive English: ``y`` -> ``ies``,
  ``s``/``sh``/``ch`` -> ``+es``, anything else ``+s``.
- File writes go through a temporary file and an atomic rename.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import yaml

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)


# ---------------------------------------------------------------------------
# Cached naming-convention helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split an identifier in any convention into lower-case words."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("UserProfile")
        'user_profile'
        >>> to_snake_case("getHTTPResponse")
        'get_http_response'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

    Examples:
        >>> to_pascal_case("blog_post")
        'BlogPost'
        >>> to_pascal_case("UserRole")
        'UserRole'
    """
    if not name:
        return ""
    return "".join(word.capitalize() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("BlogPost")
        'blogPost'
        >>> to_camel_case("author_id")
        'authorId'
    """
    words: Tuple[str, ...] = _extract_words(name) if name else ()
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """Convert any string to kebab-case (file names and URL segments)."""
    if not name:
        return ""
    return "-".join(_extract_words(name))


@functools.lru_cache(maxsize=None)
def pluralize(word: str) -> str:
    """
    Naive English plural.

    Examples:
        >>> pluralize("category")
        'categories'
        >>> pluralize("address")
        'addresses'
        >>> pluralize("user")
        'users'
    """
    if not word:
        return word
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith(("s", "sh", "ch")):
        return word + "es"
    return word + "s"


@functools.lru_cache(maxsize=None)
def to_title_human(name: str) -> str:
    """``BlogPost`` -> ``Blog Post``."""
    return " ".join(w.capitalize() for w in _extract_words(name))


# ---------------------------------------------------------------------------
# Code formatting helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, leaving blank lines untouched."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


def ts_string(value: str) -> str:
    """Render *value* as a single-quoted TypeScript string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def ts_literal(value: Any) -> str:
    """Render a JSON-compatible Python value as a TypeScript literal."""
    if isinstance(value, str):
        return ts_string(value)
    return json.dumps(value)


def build_import_block(imports: Dict[str, Set[str]]) -> List[str]:
    """
    TypeScript import lines from a module -> names mapping.

    Modules keep insertion order; names are sorted and de-duplicated.

    Example:
        >>> build_import_block({"@nestjs/common": {"Module", "Get"}})
        ["import { Get, Module } from '@nestjs/common';"]
    """
    lines: List[str] = []
    for module, names in imports.items():
        if names:
            lines.append(f"import {{ {', '.join(sorted(names))} }} from {ts_string(module)};")
    return lines


def dump_json(data: Any, indent_size: int = 2) -> str:
    """Serialise *data* as pretty JSON with a trailing newline."""
    return json.dumps(data, indent=indent_size, ensure_ascii=False) + "\n"


class _NoAliasDumper(yaml.SafeDumper):
    """SafeDumper that writes repeated objects out in full instead of as anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_yaml(data: Any) -> str:
    """Serialise *data* as block-style YAML preserving key order."""
    return yaml.dump(
        data,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, creating parent directories.

    When *atomic* is True the data goes to a temporary sibling first and is
    then moved into place.  Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            shutil.move(tmp_path, str(path))
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def sha256_hex(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("openapi") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_snake_case",
    "to_pascal_case",
    "to_camel_case",
    "to_kebab_case",
    "pluralize",
    "to_title_human",
    "indent_lines",
    "ts_string",
    "ts_literal",
    "build_import_block",
    "dump_json",
    "dump_yaml",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "Timer",
]

logger.debug("codeforge.utils loaded — %d public symbols.", len(__all__))
