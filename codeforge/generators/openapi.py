# File: codeforge/generators/openapi.py
"""
CodeForge - OpenAPI 3.0.3 Generator
===================================
Builds one OpenAPI document from a :class:`DataModel`.

Per entity:
    - schema ``{Entity}`` (relationship fields left out)
    - ``Create{Entity}Dto`` without generated, primary-key and relationship
      fields, and ``Update{Entity}Dto`` with the same properties, none required
    - ``/{plural}`` (list + create) and ``/{plural}/{id}`` (get, update, delete)

Shared: enum schemas, ``PaginationMeta``, ``ErrorResponse``, the common
error responses and, when authentication is enabled, a bearer JWT scheme.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from codeforge.generators.base import BaseGenerator, make_file
from codeforge.models import (
    DataModel,
    Entity,
    EntityField,
    FileKind,
    GeneratedFile,
    ProjectConfig,
)
from codeforge.type_mapper import SCHEMA_REF_PREFIX, to_openapi_property
from codeforge.utils import dump_json, dump_yaml, pluralize, to_kebab_case, to_title_human

logger: logging.Logger = logging.getLogger("codeforge.generators.openapi")

OPENAPI_VERSION: str = "3.0.3"
API_PREFIX: str = "/api/v1"

_JSON: str = "application/json"


def _ref(name: str) -> Dict[str, str]:
    return {"$ref": f"{SCHEMA_REF_PREFIX}{name}"}


def _response_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/responses/{name}"}


def _json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {_JSON: {"schema": schema}}


def collection_path(entity: Entity) -> str:
    """``User`` -> ``/users``, ``BlogPost`` -> ``/blog-posts``."""
    return "/" + pluralize(to_kebab_case(entity.name))


def create_fields(entity: Entity) -> List[EntityField]:
    """Fields a client supplies when creating a record."""
    return [
        f
        for f in entity.fields
        if not f.is_generated and not f.is_primary_key and f.relationship is None
    ]


class OpenAPIGenerator(BaseGenerator):
    """Emits ``openapi.json`` and ``openapi.yaml``."""

    target = "OpenAPI"

    # -----------------------------------------------------------------
    # Document
    # -----------------------------------------------------------------

    def build_document(self) -> Dict[str, Any]:
        project = self.config.project
        info: Dict[str, Any] = {
            "title": project.name,
            "version": project.version,
        }
        description: Optional[str] = project.description or self.model.description
        if description:
            info["description"] = description
        if project.author:
            info["contact"] = {"name": project.author}

        document: Dict[str, Any] = {
            "openapi": OPENAPI_VERSION,
            "info": info,
            "servers": [
                {"url": f"http://localhost:3000{API_PREFIX}", "description": "Development server"},
                {"url": f"https://api.example.com{API_PREFIX}", "description": "Production server"},
            ],
            "paths": self._build_paths(),
            "components": {
                "schemas": self._build_schemas(),
                "responses": self._build_responses(),
            },
            "tags": [
                {
                    "name": entity.name,
                    "description": entity.description or f"{to_title_human(entity.name)} management",
                }
                for entity in self.model.entities
            ],
        }

        if self.config.features.authentication:
            document["components"]["securitySchemes"] = {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                }
            }
            document["security"] = [{"bearerAuth": []}]

        return document

    def build_files(self) -> List[GeneratedFile]:
        document: Dict[str, Any] = self.build_document()
        return [
            make_file("openapi.json", dump_json(document), FileKind.CONFIG, "json"),
            make_file("openapi.yaml", dump_yaml(document), FileKind.CONFIG, "yaml"),
        ]

    # -----------------------------------------------------------------
    # Schemas
    # -----------------------------------------------------------------

    def _entity_schema(self, entity: Entity) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for entity_field in entity.scalar_fields:
            properties[entity_field.name] = to_openapi_property(entity_field.data_type)
            if entity_field.is_required:
                required.append(entity_field.name)

        if entity.timestamps:
            for name in ("createdAt", "updatedAt"):
                properties[name] = {"type": "string", "format": "date-time", "readOnly": True}
        if entity.soft_delete:
            properties["deletedAt"] = {
                "type": "string",
                "format": "date-time",
                "nullable": True,
                "readOnly": True,
            }

        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        if entity.description:
            schema["description"] = entity.description
        return schema

    def _create_dto_schema(self, entity: Entity) -> Dict[str, Any]:
        fields: List[EntityField] = create_fields(entity)
        schema: Dict[str, Any] = {
            "type": "object",
            "description": f"Payload for creating a {entity.name}",
            "properties": {f.name: to_openapi_property(f.data_type) for f in fields},
        }
        required: List[str] = [f.name for f in fields if f.is_required]
        if required:
            schema["required"] = required
        return schema

    def _update_dto_schema(self, entity: Entity) -> Dict[str, Any]:
        return {
            "type": "object",
            "description": f"Payload for updating a {entity.name}; every property is optional",
            "properties": {
                f.name: to_openapi_property(f.data_type) for f in create_fields(entity)
            },
        }

    def _build_schemas(self) -> Dict[str, Any]:
        schemas: Dict[str, Any] = {}
        for entity in self.model.entities:
            schemas[entity.name] = self._entity_schema(entity)
            schemas[f"Create{entity.name}Dto"] = self._create_dto_schema(entity)
            schemas[f"Update{entity.name}Dto"] = self._update_dto_schema(entity)
            logger.debug("Generated OpenAPI schemas for '%s'.", entity.name)

        for enum_def in self.model.enums or []:
            schema: Dict[str, Any] = {"type": "string", "enum": list(enum_def.values)}
            if enum_def.description:
                schema["description"] = enum_def.description
            schemas[enum_def.name] = schema

        schemas["PaginationMeta"] = {
            "type": "object",
            "properties": {
                "page": {"type": "integer", "example": 1},
                "limit": {"type": "integer", "example": 10},
                "total": {"type": "integer", "example": 100},
                "totalPages": {"type": "integer", "example": 10},
            },
            "required": ["page", "limit", "total", "totalPages"],
        }
        schemas["ErrorResponse"] = {
            "type": "object",
            "properties": {
                "statusCode": {"type": "integer"},
                "message": {"type": "string"},
                "error": {"type": "string"},
                "timestamp": {"type": "string", "format": "date-time"},
                "path": {"type": "string"},
            },
            "required": ["statusCode", "message"],
        }
        return schemas

    @staticmethod
    def _build_responses() -> Dict[str, Any]:
        return {
            name: {
                "description": description,
                "content": _json_content(_ref("ErrorResponse")),
            }
            for name, description in (
                ("BadRequest", "Bad request"),
                ("NotFound", "Resource not found"),
                ("InternalServerError", "Internal server error"),
            )
        }

    # -----------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------

    @staticmethod
    def _id_parameter(entity: Entity) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": "string"}
        key: Optional[EntityField] = entity.primary_key
        if key is not None:
            mapped: Dict[str, Any] = to_openapi_property(key.data_type)
            schema = {k: v for k, v in mapped.items() if k in ("type", "format")} or schema
        return {
            "name": "id",
            "in": "path",
            "required": True,
            "description": f"{entity.name} identifier",
            "schema": schema,
        }

    def _build_paths(self) -> Dict[str, Any]:
        paths: Dict[str, Any] = {}
        for entity in self.model.entities:
            name: str = entity.name
            plural: str = pluralize(name)
            base: str = collection_path(entity)
            tags: List[str] = [name]

            paths[base] = {
                "get": {
                    "tags": tags,
                    "summary": f"List {to_title_human(plural).lower()}",
                    "operationId": f"list{plural}",
                    "parameters": [
                        {
                            "name": "page",
                            "in": "query",
                            "schema": {"type": "integer", "minimum": 1, "default": 1},
                        },
                        {
                            "name": "limit",
                            "in": "query",
                            "schema": {"type": "integer", "minimum": 1, "maximum": 100, "default": 10},
                        },
                        {
                            "name": "sort",
                            "in": "query",
                            "schema": {"type": "string"},
                            "description": "Field to sort by, prefix with '-' for descending",
                        },
                    ],
                    "responses": {
                        "200": {
                            "description": f"Paginated list of {plural}",
                            "content": _json_content({
                                "type": "object",
                                "properties": {
                                    "data": {"type": "array", "items": _ref(name)},
                                    "meta": _ref("PaginationMeta"),
                                },
                            }),
                        },
                        "500": _response_ref("InternalServerError"),
                    },
                },
                "post": {
                    "tags": tags,
                    "summary": f"Create a {to_title_human(name).lower()}",
                    "operationId": f"create{name}",
                    "requestBody": {
                        "required": True,
                        "content": _json_content(_ref(f"Create{name}Dto")),
                    },
                    "responses": {
                        "201": {
                            "description": f"{name} created",
                            "content": _json_content(_ref(name)),
                        },
                        "400": _response_ref("BadRequest"),
                    },
                },
            }

            paths[f"{base}/{{id}}"] = {
                "get": {
                    "tags": tags,
                    "summary": f"Get a {to_title_human(name).lower()} by id",
                    "operationId": f"get{name}",
                    "parameters": [self._id_parameter(entity)],
                    "responses": {
                        "200": {
                            "description": f"{name} found",
                            "content": _json_content(_ref(name)),
                        },
                        "404": _response_ref("NotFound"),
                    },
                },
                "put": {
                    "tags": tags,
                    "summary": f"Update a {to_title_human(name).lower()}",
                    "operationId": f"update{name}",
                    "parameters": [self._id_parameter(entity)],
                    "requestBody": {
                        "required": True,
                        "content": _json_content(_ref(f"Update{name}Dto")),
                    },
                    "responses": {
                        "200": {
                            "description": f"{name} updated",
                            "content": _json_content(_ref(name)),
                        },
                        "400": _response_ref("BadRequest"),
                        "404": _response_ref("NotFound"),
                    },
                },
                "delete": {
                    "tags": tags,
                    "summary": f"Delete a {to_title_human(name).lower()}",
                    "operationId": f"delete{name}",
                    "parameters": [self._id_parameter(entity)],
                    "responses": {
                        "204": {"description": f"{name} deleted"},
                        "404": _response_ref("NotFound"),
                    },
                },
            }
        return paths


def build_openapi_document(config: ProjectConfig, model: DataModel) -> Dict[str, Any]:
    """In-memory OpenAPI document for *model* (raises on internal failure)."""
    return OpenAPIGenerator(config, model).build_document()


__all__: List[str] = [
    "OPENAPI_VERSION",
    "OpenAPIGenerator",
    "build_openapi_document",
    "collection_path",
    "create_fields",
]
