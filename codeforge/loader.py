# File: codeforge/loader.py
"""
CodeForge - Model Loader
========================
Turns JSON or YAML text into a trusted :class:`DataModel`.

Pipeline::

    raw text ──decode──▶ raw object ──structure──▶ DataModel ──business rules──▶ trusted

Structural validation always runs first.  When it fails the business rules
are not attempted, since they assume shapes the document does not have.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from codeforge.errors import (
    BusinessRuleError,
    ParseError,
    StructuralValidationError,
    UnsupportedFormatError,
)
from codeforge.models import DataModel
from codeforge.schema_validator import SchemaValidator, StructureOutcome
from codeforge.utils import dump_json, dump_yaml
from codeforge.validators import ValidationResult, validate_business_rules

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.loader")

JSON_FORMAT: str = "json"
YAML_FORMAT: str = "yaml"

_FORMAT_ALIASES = {
    "json": JSON_FORMAT,
    "yaml": YAML_FORMAT,
    "yml": YAML_FORMAT,
}


def normalise_format(fmt: str) -> str:
    """Map ``json``/``yaml``/``yml`` (with or without a dot) to a format name."""
    key: str = fmt.lower().lstrip(".")
    if key not in _FORMAT_ALIASES:
        raise UnsupportedFormatError(fmt)
    return _FORMAT_ALIASES[key]


def format_from_path(path: Union[str, Path]) -> str:
    """Pick the format from a file extension."""
    suffix: str = Path(path).suffix
    if not suffix:
        raise UnsupportedFormatError(Path(path).name)
    return normalise_format(suffix)


def decode(raw_text: str, fmt: str) -> Any:
    """Decode *raw_text* without validating it."""
    kind: str = normalise_format(fmt)
    if kind == JSON_FORMAT:
        try:
            return json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON: {exc}") from exc
    try:
        return yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML: {exc}") from exc


def format_pydantic_errors(exc: PydanticValidationError) -> List[str]:
    messages: List[str] = []
    for error in exc.errors():
        location: str = "/".join(str(part) for part in error.get("loc", ()))
        messages.append(f"/{location}: {error.get('msg', 'invalid value')}")
    return messages


@dataclass(slots=True)
class LoadReport:
    """Everything learned about one document, without raising."""

    model: Optional[DataModel] = None
    structural_errors: List[str] = field(default_factory=list)
    business: ValidationResult = field(default_factory=ValidationResult)

    @property
    def errors(self) -> List[str]:
        return self.structural_errors + self.business.errors

    @property
    def warnings(self) -> List[str]:
        return self.business.warnings

    @property
    def is_valid(self) -> bool:
        return self.model is not None and not self.errors


class ModelLoader:
    """
    Parses and validates data-model documents.

    Each instance owns its own :class:`SchemaValidator`; loaders are not meant
    to be shared between concurrent invocations.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._strict: bool = strict
        self._schema_validator: SchemaValidator = SchemaValidator()

    @property
    def strict(self) -> bool:
        return self._strict

    # -----------------------------------------------------------------
    # Non-raising inspection
    # -----------------------------------------------------------------

    def check_object(self, raw: Any) -> LoadReport:
        report: LoadReport = LoadReport()

        outcome: StructureOutcome = self._schema_validator.validate_structure(raw)
        if not outcome.valid:
            report.structural_errors.extend(outcome.errors)
            return report

        try:
            report.model = DataModel.model_validate(raw)
        except PydanticValidationError as exc:
            report.structural_errors.extend(format_pydantic_errors(exc))
            return report

        report.business = validate_business_rules(report.model, strict=self._strict)
        return report

    def check(self, raw_text: str, fmt: str) -> LoadReport:
        """
        Decode and validate, collecting problems instead of raising.

        Only :class:`ParseError` and :class:`UnsupportedFormatError` escape.
        """
        return self.check_object(decode(raw_text, fmt))

    # -----------------------------------------------------------------
    # Raising API
    # -----------------------------------------------------------------

    def parse(self, raw_text: str, fmt: str) -> DataModel:
        """
        Parse *raw_text* into a :class:`DataModel`.

        Raises:
            UnsupportedFormatError: *fmt* is not json/yaml/yml.
            ParseError: the text is not valid JSON/YAML.
            StructuralValidationError: the document breaks the schema.
            BusinessRuleError: a business rule reported an error.
        """
        report: LoadReport = self.check(raw_text, fmt)

        if report.structural_errors:
            raise StructuralValidationError(report.structural_errors)
        if report.business.has_errors:
            raise BusinessRuleError(report.business.errors, report.business.warnings)

        for warning in report.warnings:
            logger.warning("%s", warning)

        model: DataModel = report.model  # set whenever the structure is valid
        logger.info(
            "Loaded data model '%s' v%s: %d entities, %d enums.",
            model.name,
            model.version,
            len(model.entities),
            len(model.enums or []),
        )
        return model

    def parse_file(self, path: Union[str, Path]) -> DataModel:
        """Read *path* and parse it using the format implied by its extension."""
        file_path: Path = Path(path)
        fmt: str = format_from_path(file_path)
        return self.parse(file_path.read_text(encoding="utf-8"), fmt)

    # -----------------------------------------------------------------
    # Serialisation
    # -----------------------------------------------------------------

    @staticmethod
    def to_wire(model: DataModel) -> Any:
        """camelCase wire form of *model*, omitting unset optional keys."""
        return model.model_dump(mode="json", by_alias=True, exclude_none=True)

    def serialize(self, model: DataModel, fmt: str) -> str:
        kind: str = normalise_format(fmt)
        wire: Any = self.to_wire(model)
        if kind == JSON_FORMAT:
            return dump_json(wire)
        return dump_yaml(wire)


__all__: List[str] = [
    "JSON_FORMAT",
    "YAML_FORMAT",
    "LoadReport",
    "ModelLoader",
    "decode",
    "format_pydantic_errors",
    "format_from_path",
    "normalise_format",
]
