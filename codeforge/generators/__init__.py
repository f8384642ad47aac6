# File: codeforge/generators/__init__.py
"""
CodeForge - Artifact Generators
===============================
One generator per target, each a :class:`BaseGenerator` subclass exposing
``generate(config, model) -> GenerationResult``.

    OpenAPIGenerator   openapi.json / openapi.yaml
    AsyncAPIGenerator  asyncapi.json / asyncapi.yaml
    BackendGenerator   NestJS + TypeORM source tree
    DockerGenerator    Dockerfile, docker-compose.yml, .dockerignore
"""

from __future__ import annotations

from typing import List

from codeforge.generators.asyncapi import AsyncAPIGenerator, build_asyncapi_document
from codeforge.generators.backend import BackendGenerator
from codeforge.generators.base import BaseGenerator, make_file
from codeforge.generators.docker import DockerGenerator
from codeforge.generators.openapi import OpenAPIGenerator, build_openapi_document

__all__: List[str] = [
    "BaseGenerator",
    "make_file",
    "OpenAPIGenerator",
    "AsyncAPIGenerator",
    "BackendGenerator",
    "DockerGenerator",
    "build_openapi_document",
    "build_asyncapi_document",
]
