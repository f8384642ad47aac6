# File: codeforge/schema_validator.py
"""
CodeForge - Structural Schema Validator
=======================================
Checks a raw parsed document against the fixed JSON Schema shipped in
``codeforge/schemas/data_model.schema.json`` (draft-07).

Only shape is checked here: required keys, value types, the version pattern,
the seven data-type kinds, and that an ``enum`` data type carries a value
list.  Cross-entity references are left to :mod:`codeforge.validators`.

Every violation is collected (``iter_errors``), never just the first, and is
rendered as ``<instance path>: <reason>``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Dict, List

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as SchemaViolation

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.schema_validator")

SCHEMA_RESOURCE: str = "data_model.schema.json"


@dataclass(frozen=True, slots=True)
class StructureOutcome:
    """Result of a structural check."""

    valid: bool
    errors: List[str] = field(default_factory=list)


def load_structural_schema() -> Dict[str, Any]:
    """Read the packaged data-model schema."""
    text: str = (
        resources.files("codeforge.schemas")
        .joinpath(SCHEMA_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return json.loads(text)


def _instance_path(error: SchemaViolation) -> str:
    return "/" + "/".join(str(part) for part in error.absolute_path)


class SchemaValidator:
    """
    Structural validator bound to one loaded copy of the schema.

    Instances are independent; create one per invocation.
    """

    def __init__(self) -> None:
        self._schema: Dict[str, Any] = load_structural_schema()
        Draft7Validator.check_schema(self._schema)
        self._validator: Draft7Validator = Draft7Validator(self._schema)
        logger.debug("Loaded structural schema %s", self._schema.get("$id"))

    @property
    def schema_id(self) -> str:
        return str(self._schema.get("$id", ""))

    def validate_structure(self, raw: Any) -> StructureOutcome:
        """
        Validate *raw* (already decoded JSON/YAML) against the schema.

        Messages are sorted by instance path so output is stable.
        """
        violations: List[SchemaViolation] = list(self._validator.iter_errors(raw))
        messages: List[str] = sorted(
            {f"{_instance_path(v)}: {v.message}" for v in violations}
        )
        if messages:
            logger.info("Structural validation found %d violation(s).", len(messages))
        else:
            logger.debug("Structural validation passed.")
        return StructureOutcome(valid=not messages, errors=messages)


__all__: List[str] = [
    "SchemaValidator",
    "StructureOutcome",
    "load_structural_schema",
]
