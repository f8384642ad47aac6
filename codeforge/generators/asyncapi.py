# File: codeforge/generators/asyncapi.py
"""
CodeForge - AsyncAPI 2.6.0 Generator
====================================
Event documentation for the lifecycle of every entity.

Per entity:
    - schema ``{Entity}`` (state) and ``{Entity}Event``
      (``metadata``, ``data``, optional ``previousData``)
    - channels ``{entity}.created``, ``{entity}.updated``, ``{entity}.deleted``,
      each publishing its own ``{Entity}{Action}Message``

Every message carries the ``commonHeaders`` trait with correlation, request,
user and source-service headers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from codeforge.generators.base import BaseGenerator, make_file
from codeforge.models import (
    DataKind,
    DataModel,
    DataType,
    Entity,
    FileKind,
    GeneratedFile,
    ProjectConfig,
)
from codeforge.type_mapper import SCHEMA_REF_PREFIX, enum_values, to_asyncapi_property
from codeforge.utils import dump_json, dump_yaml, to_kebab_case

logger: logging.Logger = logging.getLogger("codeforge.generators.asyncapi")

ASYNCAPI_VERSION: str = "2.6.0"

EVENT_ACTIONS: Tuple[Tuple[str, str], ...] = (
    ("created", "Created"),
    ("updated", "Updated"),
    ("deleted", "Deleted"),
)

_TRAIT_REF: str = "#/components/messageTraits/commonHeaders"

_SAMPLE_STRINGS: Dict[str, str] = {
    "email": "user@example.com",
    "url": "https://example.com",
    "uuid": "123e4567-e89b-12d3-a456-426614174000",
    "date": "2024-01-01",
}


def channel_name(entity: Entity, action: str) -> str:
    """``User`` + ``created`` -> ``user.created``."""
    return f"{to_kebab_case(entity.name)}.{action}"


def _message_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/messages/{name}"}


class AsyncAPIGenerator(BaseGenerator):
    """Emits ``asyncapi.json`` and ``asyncapi.yaml``."""

    target = "AsyncAPI"

    def build_document(self) -> Dict[str, Any]:
        project = self.config.project
        channels: Dict[str, Any] = {}
        messages: Dict[str, Any] = {}

        for entity in self.model.entities:
            for action, title in EVENT_ACTIONS:
                message_name: str = f"{entity.name}{title}Message"
                channels[channel_name(entity, action)] = {
                    "description": f"{entity.name} {action} events",
                    "publish": {
                        "operationId": f"on{entity.name}{title}",
                        "summary": f"Published when a {entity.name} is {action}",
                        "message": _message_ref(message_name),
                    },
                }
                messages[message_name] = self._message(entity, action, title)
            logger.debug("Generated AsyncAPI channels for '%s'.", entity.name)

        return {
            "asyncapi": ASYNCAPI_VERSION,
            "info": {
                "title": f"{project.name} Events",
                "version": project.version,
                "description": f"Event-driven API for {project.name}",
            },
            "servers": {
                "development": {
                    "url": "localhost:5672",
                    "protocol": "amqp",
                    "description": "Development message broker",
                },
                "production": {
                    "url": "amqp.example.com:5672",
                    "protocol": "amqp",
                    "description": "Production message broker",
                },
            },
            "channels": channels,
            "components": {
                "schemas": self._build_schemas(),
                "messages": messages,
                "messageTraits": {
                    "commonHeaders": {
                        "headers": {
                            "type": "object",
                            "properties": {
                                "x-correlation-id": {
                                    "type": "string",
                                    "format": "uuid",
                                    "description": "Correlates events belonging to one operation",
                                },
                                "x-request-id": {"type": "string", "format": "uuid"},
                                "x-user-id": {"type": "string"},
                                "x-source-service": {"type": "string"},
                            },
                        }
                    }
                },
            },
        }

    def build_files(self) -> List[GeneratedFile]:
        document: Dict[str, Any] = self.build_document()
        return [
            make_file("asyncapi.json", dump_json(document), FileKind.CONFIG, "json"),
            make_file("asyncapi.yaml", dump_yaml(document), FileKind.CONFIG, "yaml"),
        ]

    # -----------------------------------------------------------------
    # Components
    # -----------------------------------------------------------------

    def _build_schemas(self) -> Dict[str, Any]:
        schemas: Dict[str, Any] = {}
        for entity in self.model.entities:
            properties: Dict[str, Any] = {
                f.name: to_asyncapi_property(f.data_type) for f in entity.scalar_fields
            }
            if entity.timestamps:
                properties["createdAt"] = {"type": "string", "format": "date-time"}
                properties["updatedAt"] = {"type": "string", "format": "date-time"}
            if entity.soft_delete:
                properties["deletedAt"] = {"type": "string", "format": "date-time", "nullable": True}
            schemas[entity.name] = {"type": "object", "properties": properties}
            schemas[f"{entity.name}Event"] = {
                "type": "object",
                "properties": {
                    "metadata": {"$ref": f"{SCHEMA_REF_PREFIX}EventMetadata"},
                    "data": {"$ref": f"{SCHEMA_REF_PREFIX}{entity.name}"},
                    "previousData": {"$ref": f"{SCHEMA_REF_PREFIX}{entity.name}"},
                },
                "required": ["metadata", "data"],
            }

        for enum_def in self.model.enums or []:
            schemas[enum_def.name] = {"type": "string", "enum": list(enum_def.values)}

        schemas["EventMetadata"] = {
            "type": "object",
            "properties": {
                "eventId": {"type": "string", "format": "uuid"},
                "eventType": {"type": "string"},
                "timestamp": {"type": "string", "format": "date-time"},
                "version": {"type": "string"},
                "source": {"type": "string"},
                "correlationId": {"type": "string", "format": "uuid"},
            },
            "required": ["eventId", "eventType", "timestamp", "version", "source"],
        }
        return schemas

    def _message(self, entity: Entity, action: str, title: str) -> Dict[str, Any]:
        message: Dict[str, Any] = {
            "name": f"{entity.name}{title}",
            "title": f"{entity.name} {title}",
            "summary": f"Emitted after a {entity.name} has been {action}",
            "contentType": "application/json",
            "traits": [{"$ref": _TRAIT_REF}],
            "payload": {"$ref": f"{SCHEMA_REF_PREFIX}{entity.name}Event"},
        }
        if action == "created":
            message["examples"] = [
                {
                    "name": f"{entity.name}{title}Example",
                    "payload": {
                        "metadata": {
                            "eventId": _SAMPLE_STRINGS["uuid"],
                            "eventType": channel_name(entity, action),
                            "timestamp": "2024-01-01T00:00:00Z",
                            "version": self.config.project.version,
                            "source": self.config.project.name,
                        },
                        "data": self._example_record(entity),
                    },
                }
            ]
        return message

    def _example_record(self, entity: Entity) -> Dict[str, Any]:
        return {f.name: self._example_value(f.data_type) for f in entity.scalar_fields}

    def _example_value(self, data_type: DataType) -> Any:
        if data_type.default is not None:
            return data_type.default
        kind: str = data_type.type
        if kind == DataKind.STRING:
            return _SAMPLE_STRINGS.get(data_type.format or "", "string")
        if kind == DataKind.NUMBER:
            return 1
        if kind == DataKind.BOOLEAN:
            return True
        if kind == DataKind.DATE:
            return _SAMPLE_STRINGS["date"] if data_type.format == "date" else "2024-01-01T00:00:00Z"
        if kind == DataKind.ARRAY:
            return []
        if kind == DataKind.OBJECT:
            return {}
        if kind == DataKind.ENUM:
            values: List[str] = enum_values(data_type, self.model)
            return values[0] if values else None
        raise ValueError(f"Unsupported data type: {kind!r}")


def build_asyncapi_document(config: ProjectConfig, model: DataModel) -> Dict[str, Any]:
    """In-memory AsyncAPI document for *model* (raises on internal failure)."""
    return AsyncAPIGenerator(config, model).build_document()


__all__: List[str] = [
    "ASYNCAPI_VERSION",
    "EVENT_ACTIONS",
    "AsyncAPIGenerator",
    "build_asyncapi_document",
    "channel_name",
]
