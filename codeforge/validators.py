# File: codeforge/validators.py
"""
CodeForge - Business-Rule Validation
====================================
Second-pass semantic checks over a structurally valid :class:`DataModel`.

Each rule is an independent function returning its own
:class:`ValidationResult`; :func:`validate_business_rules` runs all of them
and merges the results.  Nothing here raises: a rule that finds a problem
records it and the next rule still runs, so one pass reports every issue.

Severity is fixed per rule.  Naming conventions and cycle detection only
ever warn; ``strict`` mode adds extra warnings and never extra errors.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from codeforge.graph import find_circular_entities
from codeforge.models import (
    DataKind,
    DatabaseType,
    DataModel,
    DataType,
    RelationshipType,
)
from codeforge.type_mapper import enum_reference

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """
    Accumulates :class:`ValidationIssue` instances.

    ``errors`` and ``warnings`` expose the plain message strings, in the
    order the rules produced them.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def merge(self, other: ValidationResult) -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def issues(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self._items if i.is_error]

    @property
    def warnings(self) -> List[str]:
        return [i.message for i in self._items if i.is_warning]

    @property
    def codes(self) -> List[str]:
        return [i.code for i in self._items]

    @property
    def has_errors(self) -> bool:
        return any(i.is_error for i in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self._items if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self._items if i.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def format_report(self) -> str:
        """One line per issue, errors first."""
        lines: List[str] = [self.summary()]
        lines.extend(f"  ✗ {message}" for message in self.errors)
        lines.extend(f"  ⚠ {message}" for message in self.warnings)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are no errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Naming patterns
# ---------------------------------------------------------------------------

_PASCAL_CASE_RE: re.Pattern[str] = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_CAMEL_CASE_RE: re.Pattern[str] = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_UPPER_CASE_RE: re.Pattern[str] = re.compile(r"^[A-Z][A-Z0-9_]*$")
_SEMANTIC_VERSION_RE: re.Pattern[str] = re.compile(r"^\d+\.\d+\.\d+$")

_FOREIGN_KEY_TYPES: frozenset = frozenset(
    {RelationshipType.ONE_TO_ONE.value, RelationshipType.MANY_TO_ONE.value}
)


# ---------------------------------------------------------------------------
# Entity-level rules
# ---------------------------------------------------------------------------


def validate_entity_names(model: DataModel, strict: bool = False) -> ValidationResult:
    """Duplicate entity names are errors; non-PascalCase names warn."""
    result: ValidationResult = ValidationResult()

    counts: Counter = Counter(model.entity_names)
    for name, count in counts.items():
        if count > 1:
            result.add_error(
                "DUPLICATE_ENTITY",
                f"Duplicate entity name '{name}'",
                {"entity": name, "occurrences": count},
            )

    for entity in model.entities:
        if not _PASCAL_CASE_RE.match(entity.name):
            result.add_warning(
                "ENTITY_NAMING",
                f"Entity {entity.name}: name should be in PascalCase",
                {"entity": entity.name},
            )
    return result


def validate_field_names(model: DataModel, strict: bool = False) -> ValidationResult:
    """Field names must be unique per entity and conventionally camelCase."""
    result: ValidationResult = ValidationResult()

    for entity in model.entities:
        seen: Set[str] = set()
        reported: Set[str] = set()
        for entity_field in entity.fields:
            name: str = entity_field.name
            if name in seen and name not in reported:
                result.add_error(
                    "DUPLICATE_FIELD",
                    f"Entity {entity.name}: duplicate field name '{name}'",
                    {"entity": entity.name, "field": name},
                )
                reported.add(name)
            seen.add(name)

            if not _CAMEL_CASE_RE.match(name):
                result.add_warning(
                    "FIELD_NAMING",
                    f"Entity {entity.name}.{name}: field name should be in camelCase",
                    {"entity": entity.name, "field": name},
                )
    return result


def validate_primary_keys(model: DataModel, strict: bool = False) -> ValidationResult:
    """
    Every entity needs at least one primary key, and at most one of them
    may be generated.
    """
    result: ValidationResult = ValidationResult()

    for entity in model.entities:
        keys = entity.primary_keys
        if not keys:
            result.add_error(
                "NO_PRIMARY_KEY",
                f"Entity {entity.name}: must have at least one primary key field",
                {"entity": entity.name},
            )
            continue

        generated: List[str] = [k.name for k in keys if k.is_generated]
        if len(generated) > 1:
            result.add_error(
                "MULTIPLE_GENERATED_KEYS",
                f"Entity {entity.name}: cannot have multiple generated primary keys",
                {"entity": entity.name, "fields": generated},
            )
    return result


def validate_relationships(model: DataModel, strict: bool = False) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    known: Set[str] = set(model.entity_names)

    for entity in model.entities:
        for entity_field in entity.relationship_fields:
            rel = entity_field.relationship
            qualified: str = f"Entity {entity.name}.{entity_field.name}"

            if rel.target not in known:
                result.add_error(
                    "UNKNOWN_RELATIONSHIP_TARGET",
                    f"{qualified}: relationship target '{rel.target}' does not exist",
                    {"entity": entity.name, "field": entity_field.name, "target": rel.target},
                )

            if rel.type == RelationshipType.MANY_TO_MANY and not rel.join_table:
                result.add_warning(
                    "MISSING_JOIN_TABLE",
                    f"{qualified}: manyToMany relationship should specify joinTable",
                )
            elif rel.type in _FOREIGN_KEY_TYPES and not rel.foreign_key:
                result.add_warning(
                    "MISSING_FOREIGN_KEY",
                    f"{qualified}: {rel.type} relationship should specify foreignKey",
                )
    return result


def _check_data_type(
    data_type: DataType,
    qualified: str,
    enum_names: Set[str],
    result: ValidationResult,
) -> None:
    """Checks that hold at every depth of a DataType tree."""
    rules = data_type.validation

    if data_type.type == DataKind.ENUM:
        reference: Optional[str] = enum_reference(data_type)
        if not data_type.enum:
            result.add_error(
                "EMPTY_ENUM",
                f"{qualified}: enum type must have at least one value",
            )
        elif reference is not None and reference not in enum_names:
            result.add_error(
                "UNKNOWN_ENUM_REFERENCE",
                f"{qualified}: enum reference '{reference}' does not exist",
                {"enum": reference},
            )

    if data_type.type == DataKind.ARRAY and data_type.items is None:
        result.add_warning(
            "ARRAY_WITHOUT_ITEMS",
            f"{qualified}: array type should specify items type",
        )

    if rules is not None:
        if (
            data_type.type == DataKind.STRING
            and rules.min_length is not None
            and rules.max_length is not None
            and rules.min_length > rules.max_length
        ):
            result.add_error(
                "INVALID_LENGTH_RANGE",
                f"{qualified}: minLength cannot be greater than maxLength",
            )
        if (
            data_type.type == DataKind.NUMBER
            and rules.min is not None
            and rules.max is not None
            and rules.min > rules.max
        ):
            result.add_error(
                "INVALID_VALUE_RANGE",
                f"{qualified}: min cannot be greater than max",
            )

    if data_type.items is not None:
        _check_data_type(data_type.items, f"{qualified}.items", enum_names, result)
    for key, nested in (data_type.properties or {}).items():
        _check_data_type(nested, f"{qualified}.{key}", enum_names, result)


def validate_data_types(model: DataModel, strict: bool = False) -> ValidationResult:
    """
    Per-field data-type checks: enum integrity, array items and the ordering
    of min/max and minLength/maxLength bounds.  Array ``items`` and object
    ``properties`` are checked the same way as the field itself.
    """
    result: ValidationResult = ValidationResult()
    enum_names: Set[str] = set(model.enum_names)

    for entity in model.entities:
        for entity_field in entity.fields:
            data_type = entity_field.data_type
            rules = data_type.validation
            qualified: str = f"Entity {entity.name}.{entity_field.name}"

            _check_data_type(data_type, qualified, enum_names, result)

            if strict:
                if not data_type.description:
                    result.add_warning(
                        "MISSING_DESCRIPTION",
                        f"{qualified}: missing field description",
                    )
                if data_type.type == DataKind.STRING and (
                    rules is None or rules.max_length is None
                ):
                    result.add_warning(
                        "UNBOUNDED_STRING",
                        f"{qualified}: string field should have maxLength constraint",
                    )
    return result


def validate_enum_definitions(model: DataModel, strict: bool = False) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    counts: Counter = Counter(model.enum_names)
    for name, count in counts.items():
        if count > 1:
            result.add_error("DUPLICATE_ENUM", f"Duplicate enum name '{name}'")

    for enum_def in model.enums or []:
        if not _PASCAL_CASE_RE.match(enum_def.name):
            result.add_warning(
                "ENUM_NAMING",
                f"Enum {enum_def.name}: name should be in PascalCase",
            )
        if not enum_def.values:
            result.add_error(
                "EMPTY_ENUM_DEFINITION",
                f"Enum {enum_def.name}: must have at least one value",
            )
        if strict:
            for value in enum_def.values:
                if not _UPPER_CASE_RE.match(value):
                    result.add_warning(
                        "ENUM_VALUE_NAMING",
                        f"Enum {enum_def.name}.{value}: value should be in UPPER_CASE",
                    )
    return result


def validate_relationship_cycles(model: DataModel, strict: bool = False) -> ValidationResult:
    """One warning per entity that lies on a relationship cycle."""
    result: ValidationResult = ValidationResult()
    for name in find_circular_entities(model):
        result.add_warning(
            "CIRCULAR_RELATIONSHIP",
            f"Potential circular relationship detected involving entity {name}",
            {"entity": name},
        )
    return result


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

_BUSINESS_RULES: List[Callable[[DataModel, bool], ValidationResult]] = [
    validate_entity_names,
    validate_relationships,
    validate_field_names,
    validate_primary_keys,
    validate_data_types,
    validate_enum_definitions,
    validate_relationship_cycles,
]


def validate_business_rules(model: DataModel, strict: bool = False) -> ValidationResult:
    """
    Run every business rule over *model* and merge the results.

    Never raises; the caller decides whether ``result.errors`` is fatal.
    """
    combined: ValidationResult = ValidationResult()
    for rule in _BUSINESS_RULES:
        logger.debug("Running validator: %s", rule.__name__)
        combined.merge(rule(model, strict))

    logger.info(
        "Business rules for '%s': %d error(s), %d warning(s) (strict=%s).",
        model.name,
        combined.error_count,
        combined.warning_count,
        strict,
    )
    return combined


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------


def validate_project_config(raw: Mapping[str, Any]) -> ValidationResult:
    """
    Presence and type checks on a raw project-config mapping, run before it
    is turned into a :class:`ProjectConfig`.
    """
    result: ValidationResult = ValidationResult()
    allowed_databases: List[str] = [d.value for d in DatabaseType]

    project = raw.get("project")
    if not isinstance(project, Mapping):
        result.add_error("CONFIG_PROJECT", "project section is required")
    else:
        if not project.get("name"):
            result.add_error("CONFIG_PROJECT_NAME", "project.name is required")
        version = project.get("version")
        if not version:
            result.add_error("CONFIG_PROJECT_VERSION", "project.version is required")
        elif not _SEMANTIC_VERSION_RE.match(str(version)):
            result.add_error(
                "CONFIG_PROJECT_VERSION",
                "project.version must be in semver format (x.y.z)",
            )

    database = raw.get("database")
    db_type = database.get("type") if isinstance(database, Mapping) else None
    if not db_type:
        result.add_error("CONFIG_DATABASE_TYPE", "database.type is required")
    elif db_type not in allowed_databases:
        result.add_error(
            "CONFIG_DATABASE_TYPE",
            f"database.type must be one of: {', '.join(allowed_databases)}",
        )

    if "features" not in raw:
        result.add_warning(
            "CONFIG_FEATURES",
            "features section is missing, using defaults",
        )

    github = raw.get("github")
    if github is not None and (not isinstance(github, Mapping) or not github.get("owner")):
        result.add_error("CONFIG_GITHUB_OWNER", "github.owner is required")

    return result


__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_entity_names",
    "validate_field_names",
    "validate_primary_keys",
    "validate_relationships",
    "validate_data_types",
    "validate_enum_definitions",
    "validate_relationship_cycles",
    "validate_business_rules",
    "validate_project_config",
]

logger.debug("codeforge.validators loaded — %d public symbols.", len(__all__))
