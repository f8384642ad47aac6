# File: codeforge/__init__.py
"""
CodeForge - API Code Generator
==============================

Turns a declarative data model (JSON/YAML: entities, fields, relationships,
enums) into OpenAPI 3.0.3 and AsyncAPI 2.6.0 documents and a NestJS +
TypeORM backend source tree.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ProjectGenerator │────▶│    generators/   │
    │   (cli.py)   │     │  (generator.py)  │     │ openapi asyncapi │
    └──────┬───────┘     └────────┬─────────┘     │ backend docker   │
           │                      │               └────────┬─────────┘
           ▼                      ▼                        ▼
    ┌─────────────┐      ┌────────────────┐        ┌──────────────┐
    │ ModelLoader │      │ ProjectExporter│        │ type_mapper  │
    │ (loader.py) │      │ (exporters.py) │        │   utils      │
    └──────┬──────┘      └────────────────┘        └──────────────┘
           ▼
    schema_validator ─▶ validators ─▶ graph

Usage::

    from codeforge import ModelLoader, ProjectConfig, ProjectGenerator

    model = ModelLoader().parse_file("blog.yaml")
    report = ProjectGenerator().generate(ProjectConfig.default_for(model), model)
    print(report.summary())
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "CodeForge Team"
__license__: str = "MIT"

from codeforge.errors import (
    BusinessRuleError,
    CodeForgeError,
    ConfigError,
    ParseError,
    StructuralValidationError,
    UnsupportedFormatError,
    ValidationError,
)
from codeforge.models import (
    DataKind,
    DataModel,
    DataType,
    DatabaseType,
    Entity,
    EntityField,
    EnumDefinition,
    FileKind,
    GeneratedFile,
    GenerationResult,
    ProjectConfig,
    Relationship,
    RelationshipType,
    ValidationRules,
)
from codeforge.schema_validator import SchemaValidator, StructureOutcome
from codeforge.validators import (
    ValidationResult,
    validate_business_rules,
    validate_project_config,
)
from codeforge.loader import LoadReport, ModelLoader
from codeforge.type_mapper import (
    to_asyncapi_property,
    to_column_type,
    to_language_type,
    to_openapi_property,
)
from codeforge.generators import (
    AsyncAPIGenerator,
    BackendGenerator,
    DockerGenerator,
    OpenAPIGenerator,
)
from codeforge.exporters import ExportResult, ProjectExporter
from codeforge.generator import GenerationReport, ProjectGenerator, load_project_config

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Errors
    "CodeForgeError",
    "ParseError",
    "UnsupportedFormatError",
    "ValidationError",
    "ConfigError",
    "StructuralValidationError",
    "BusinessRuleError",
    # Models
    "DataKind",
    "DataModel",
    "DataType",
    "DatabaseType",
    "Entity",
    "EntityField",
    "EnumDefinition",
    "FileKind",
    "GeneratedFile",
    "GenerationResult",
    "ProjectConfig",
    "Relationship",
    "RelationshipType",
    "ValidationRules",
    # Loading & validation
    "ModelLoader",
    "LoadReport",
    "SchemaValidator",
    "StructureOutcome",
    "ValidationResult",
    "validate_business_rules",
    "validate_project_config",
    # Type mapping
    "to_openapi_property",
    "to_asyncapi_property",
    "to_column_type",
    "to_language_type",
    # Generators
    "OpenAPIGenerator",
    "AsyncAPIGenerator",
    "BackendGenerator",
    "DockerGenerator",
    # Orchestration & export
    "ProjectGenerator",
    "GenerationReport",
    "load_project_config",
    "ProjectExporter",
    "ExportResult",
]
