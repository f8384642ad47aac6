# File: codeforge/models.py
"""
CodeForge - Core Data Models
============================
Pydantic V2 models for the declarative data-model document and the project
configuration, plus the output units produced by every generator.

The wire format is camelCase (``isPrimaryKey``, ``foreignKey`` ...).  Python
attributes are snake_case; ``alias_generator=to_camel`` bridges the two and
``populate_by_name=True`` lets code construct models with either spelling.

Models are frozen: a DataModel is built once per invocation and handed to
each generator unchanged.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic_core import to_jsonable_python
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("codeforge.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DataKind(str, Enum):
    """The seven abstract data types a field can carry."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"


class RelationshipType(str, Enum):
    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"


class OnDeleteAction(str, Enum):
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"


class GenerationStrategy(str, Enum):
    UUID = "uuid"
    INCREMENT = "increment"
    TIMESTAMP = "timestamp"


class IndexType(str, Enum):
    BTREE = "btree"
    HASH = "hash"
    GIN = "gin"
    GIST = "gist"


class ConstraintType(str, Enum):
    CHECK = "check"
    UNIQUE = "unique"
    FOREIGN_KEY = "foreignKey"


class DatabaseType(str, Enum):
    """Database engines the generated backend can target."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    SQLITE = "sqlite"


class FileKind(str, Enum):
    """Classification attached to every generated artifact."""

    SOURCE = "source"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    TEST = "test"


_DEFAULT_PORTS: Dict[str, Optional[int]] = {
    DatabaseType.POSTGRESQL.value: 5432,
    DatabaseType.MYSQL.value: 3306,
    DatabaseType.MONGODB.value: 27017,
    DatabaseType.SQLITE.value: None,
}

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_MODEL_CONFIG: ConfigDict = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
    validate_default=True,
    frozen=True,
    extra="forbid",
)

# Project configs come from hand-written files that often carry extra keys.
_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
    validate_default=True,
    frozen=True,
    extra="ignore",
)

# ---------------------------------------------------------------------------
# Data-model document
# ---------------------------------------------------------------------------


class ValidationRules(BaseModel):
    """Value constraints attached to a DataType."""

    model_config = _MODEL_CONFIG

    min: Optional[float] = Field(default=None, description="Lower numeric bound.")
    max: Optional[float] = Field(default=None, description="Upper numeric bound.")
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    pattern: Optional[str] = None
    email: Optional[bool] = None
    url: Optional[bool] = None
    uuid: Optional[bool] = None
    custom: Optional[List[str]] = Field(
        default=None, description="Names of custom validator rules."
    )


class DataType(BaseModel):
    """
    Tagged variant over the seven :class:`DataKind` values.

    ``items`` is meaningful for arrays, ``properties`` for objects and
    ``enum`` for enums.  An ``enum`` list holding exactly one entry is read as
    a reference to a top-level :class:`EnumDefinition` (see
    :func:`codeforge.type_mapper.enum_reference`).
    """

    model_config = _MODEL_CONFIG

    type: DataKind
    format: Optional[str] = None
    items: Optional[DataType] = None
    properties: Optional[Dict[str, DataType]] = None
    enum: Optional[List[str]] = None
    required: Optional[bool] = None
    nullable: Optional[bool] = None
    default: Any = None
    description: Optional[str] = None
    validation: Optional[ValidationRules] = None

    @field_validator("default")
    @classmethod
    def _json_default(cls, v: Any) -> Any:
        # YAML dates and timestamps arrive as datetime objects.
        return to_jsonable_python(v)


class Relationship(BaseModel):
    model_config = _MODEL_CONFIG

    type: RelationshipType
    target: str = Field(..., min_length=1, description="Target entity name.")
    foreign_key: Optional[str] = None
    join_table: Optional[str] = None
    cascade: Optional[bool] = None
    eager: Optional[bool] = None
    on_delete: Optional[OnDeleteAction] = None

    @property
    def is_to_many(self) -> bool:
        return self.type in (
            RelationshipType.ONE_TO_MANY.value,
            RelationshipType.MANY_TO_MANY.value,
        )


class EntityField(BaseModel):
    """One attribute of an entity."""

    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    data_type: DataType
    relationship: Optional[Relationship] = None
    is_primary_key: bool = False
    is_unique: bool = False
    is_indexed: bool = False
    is_generated: bool = False
    generation_strategy: Optional[GenerationStrategy] = None

    @property
    def is_required(self) -> bool:
        return bool(self.data_type.required)


class Index(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    fields: List[str] = Field(..., min_length=1)
    unique: bool = False
    type: Optional[IndexType] = None


class ConstraintReference(BaseModel):
    model_config = _MODEL_CONFIG

    table: str
    fields: List[str]


class Constraint(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    type: ConstraintType
    fields: List[str] = Field(default_factory=list)
    expression: Optional[str] = None
    references: Optional[ConstraintReference] = None


class Entity(BaseModel):
    """
    One resource / table.

    Field order is preserved everywhere: the generators emit properties,
    columns and DTO members in declaration order.
    """

    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    table_name: Optional[str] = None
    description: Optional[str] = None
    fields: List[EntityField] = Field(..., min_length=1)
    indexes: Optional[List[Index]] = None
    constraints: Optional[List[Constraint]] = None
    timestamps: bool = False
    soft_delete: bool = False

    @property
    def primary_keys(self) -> List[EntityField]:
        return [f for f in self.fields if f.is_primary_key]

    @property
    def primary_key(self) -> Optional[EntityField]:
        """First primary-key field, or ``None`` when the entity has none."""
        keys: List[EntityField] = self.primary_keys
        return keys[0] if keys else None

    @property
    def scalar_fields(self) -> List[EntityField]:
        """Fields that are not relationships."""
        return [f for f in self.fields if f.relationship is None]

    @property
    def relationship_fields(self) -> List[EntityField]:
        return [f for f in self.fields if f.relationship is not None]

    def get_field(self, name: str) -> Optional[EntityField]:
        for entity_field in self.fields:
            if entity_field.name == name:
                return entity_field
        return None


class EnumDefinition(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    values: List[str]
    description: Optional[str] = None


class DataModel(BaseModel):
    """Root aggregate of a data-model document."""

    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    version: str = Field(..., pattern=r"^\d+\.\d+\.\d+$")
    description: Optional[str] = None
    entities: List[Entity] = Field(..., min_length=1)
    enums: Optional[List[EnumDefinition]] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def entity_names(self) -> List[str]:
        return [e.name for e in self.entities]

    @property
    def enum_names(self) -> List[str]:
        return [e.name for e in self.enums or []]

    def get_entity(self, name: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_enum(self, name: str) -> Optional[EnumDefinition]:
        for enum_def in self.enums or []:
            if enum_def.name == name:
                return enum_def
        return None


DataType.model_rebuild()

# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------


class ProjectInfo(BaseModel):
    model_config = _SETTINGS_CONFIG

    name: str = Field(..., min_length=1)
    version: str = "1.0.0"
    description: Optional[str] = None
    author: Optional[str] = None


class DatabaseConfig(BaseModel):
    model_config = _SETTINGS_CONFIG

    type: DatabaseType = DatabaseType.POSTGRESQL
    host: str = "localhost"
    port: Optional[int] = None
    database: str = "app"
    username: Optional[str] = None
    password: Optional[str] = None
    db_schema: Optional[str] = Field(default=None, alias="schema")

    @computed_field  # type: ignore[misc]
    @property
    def effective_port(self) -> Optional[int]:
        """Configured port, or the engine's default one."""
        if self.port is not None:
            return self.port
        return _DEFAULT_PORTS.get(str(self.type))


class FeatureFlags(BaseModel):
    model_config = _SETTINGS_CONFIG

    authentication: bool = False
    authorization: bool = False
    swagger: bool = True
    asyncapi: bool = False
    docker: bool = False
    testing: bool = False
    logging: bool = False
    monitoring: bool = False


class GenerationSettings(BaseModel):
    model_config = _SETTINGS_CONFIG

    output_dir: str = "./generated"
    template_dir: Optional[str] = None
    overwrite: bool = False
    backup: bool = False


class GitHubSettings(BaseModel):
    model_config = _SETTINGS_CONFIG

    owner: str = Field(..., min_length=1)
    token: Optional[str] = None
    private: bool = False
    description: Optional[str] = None
    topics: List[str] = Field(default_factory=list)


class ProjectConfig(BaseModel):
    """Settings that drive generation; trusted once constructed."""

    model_config = _SETTINGS_CONFIG

    project: ProjectInfo
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    github: Optional[GitHubSettings] = None

    @classmethod
    def default_for(cls, model: DataModel) -> ProjectConfig:
        """Build a config named after *model* with every default applied."""
        return cls(
            project=ProjectInfo(
                name=model.name,
                version=model.version,
                description=model.description,
            )
        )


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A single artifact: forward-slash relative path plus full text."""

    model_config = _MODEL_CONFIG

    path: str = Field(..., min_length=1)
    content: str
    type: FileKind = FileKind.SOURCE
    language: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    def with_prefix(self, prefix: str) -> GeneratedFile:
        """Return a copy relocated below *prefix* (``""`` keeps the path)."""
        if not prefix:
            return self
        return self.model_copy(update={"path": f"{prefix.rstrip('/')}/{self.path}"})


class GenerationResult(BaseModel):
    """Outcome of one generator call."""

    model_config = ConfigDict(frozen=False, use_enum_values=True)

    success: bool = True
    files: List[GeneratedFile] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]

    def get_file(self, path: str) -> Optional[GeneratedFile]:
        for generated in self.files:
            if generated.path == path:
                return generated
        return None


__all__: List[str] = [
    "DataKind",
    "RelationshipType",
    "OnDeleteAction",
    "GenerationStrategy",
    "IndexType",
    "ConstraintType",
    "DatabaseType",
    "FileKind",
    "ValidationRules",
    "DataType",
    "Relationship",
    "EntityField",
    "Index",
    "Constraint",
    "ConstraintReference",
    "Entity",
    "EnumDefinition",
    "DataModel",
    "ProjectInfo",
    "DatabaseConfig",
    "FeatureFlags",
    "GenerationSettings",
    "GitHubSettings",
    "ProjectConfig",
    "GeneratedFile",
    "GenerationResult",
]

logger.debug("codeforge.models loaded — %d public symbols.", len(__all__))
