# File: codeforge/errors.py
"""
CodeForge - Exception Hierarchy
===============================

Errors raised while turning raw text into a trusted :class:`DataModel`::

    CodeForgeError
    ├── ParseError                 text is not valid JSON / YAML
    ├── UnsupportedFormatError     extension other than json / yaml / yml
    └── ValidationError            aggregated violation messages
        ├── StructuralValidationError
        └── BusinessRuleError

Generators never raise these; they report through ``GenerationResult``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

logger: logging.Logger = logging.getLogger("codeforge.errors")


class CodeForgeError(Exception):
    """Base class for every error raised by the core."""


class ParseError(CodeForgeError):
    """Source text could not be decoded."""


class UnsupportedFormatError(CodeForgeError):
    """The requested format is neither JSON nor YAML."""

    def __init__(self, fmt: str) -> None:
        self.format: str = fmt
        super().__init__(f"Unsupported file format: {fmt}")


class ValidationError(CodeForgeError):
    """
    One or more violations, rendered one per line.

    ``messages`` keeps the flat list so callers can show every problem in a
    single pass.
    """

    title: str = "Data model validation failed"

    def __init__(self, messages: Sequence[str], title: Optional[str] = None) -> None:
        self.messages: List[str] = list(messages)
        if title is not None:
            self.title = title
        super().__init__("\n".join([f"{self.title}:"] + self.messages))


class StructuralValidationError(ValidationError):
    title = "Data model validation failed"


class ConfigError(ValidationError):
    title = "Project configuration invalid"


class BusinessRuleError(ValidationError):
    title = "Business rule validation failed"

    def __init__(
        self,
        messages: Sequence[str],
        warnings: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
    ) -> None:
        self.warnings: List[str] = list(warnings or [])
        super().__init__(messages, title=title)


__all__: List[str] = [
    "CodeForgeError",
    "ParseError",
    "UnsupportedFormatError",
    "ValidationError",
    "ConfigError",
    "StructuralValidationError",
    "BusinessRuleError",
]
