"""
tests/test_openapi.py
Unit tests for codeforge.generators.openapi.
"""

from __future__ import annotations

import json
from typing import Any, Dict

import pytest
import yaml

from codeforge.generators.openapi import (
    OPENAPI_VERSION,
    OpenAPIGenerator,
    build_openapi_document,
    collection_path,
    create_fields,
)
from codeforge.models import DataModel, ProjectConfig


@pytest.fixture()
def document(project_config: ProjectConfig, blog_model: DataModel) -> Dict[str, Any]:
    return build_openapi_document(project_config, blog_model)


# ===========================================================================
# Tests for document layout
# ===========================================================================


class TestOpenAPIDocument:
    """Top-level structure of the blog document."""

    def test_header(self, document: Dict[str, Any]) -> None:
        assert document["openapi"] == OPENAPI_VERSION == "3.0.3"
        assert document["info"]["title"] == "blog-api"
        assert document["info"]["version"] == "1.0.0"
        assert document["info"]["contact"] == {"name": "Blog Team"}

    def test_servers_carry_api_prefix(self, document: Dict[str, Any]) -> None:
        urls = [server["url"] for server in document["servers"]]
        assert all(url.endswith("/api/v1") for url in urls), urls

    def test_schema_names(self, document: Dict[str, Any]) -> None:
        schemas = document["components"]["schemas"]
        expected = {
            "User", "CreateUserDto", "UpdateUserDto",
            "Post", "CreatePostDto", "UpdatePostDto",
            "UserRole", "PaginationMeta", "ErrorResponse",
        }
        assert set(schemas) == expected, f"Unexpected schemas: {sorted(schemas)}"

    def test_paths(self, document: Dict[str, Any]) -> None:
        assert list(document["paths"]) == ["/users", "/users/{id}", "/posts", "/posts/{id}"]
        assert set(document["paths"]["/users"]) == {"get", "post"}
        assert set(document["paths"]["/users/{id}"]) == {"get", "put", "delete"}

    def test_operation_ids(self, document: Dict[str, Any]) -> None:
        operation_ids = [
            operation["operationId"]
            for item in document["paths"].values()
            for operation in item.values()
        ]
        assert operation_ids == [
            "listUsers", "createUser", "getUser", "updateUser", "deleteUser",
            "listPosts", "createPost", "getPost", "updatePost", "deletePost",
        ]

    def test_tags_follow_entities(self, document: Dict[str, Any]) -> None:
        assert [tag["name"] for tag in document["tags"]] == ["User", "Post"]
        assert document["tags"][0]["description"] == "Registered author or reader"

    def test_no_security_without_authentication(self, document: Dict[str, Any]) -> None:
        assert "security" not in document
        assert "securitySchemes" not in document["components"]

    def test_bearer_auth_with_authentication(
        self, full_feature_config: ProjectConfig, blog_model: DataModel
    ) -> None:
        document = build_openapi_document(full_feature_config, blog_model)
        scheme = document["components"]["securitySchemes"]["bearerAuth"]
        assert scheme == {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        assert document["security"] == [{"bearerAuth": []}]


# ===========================================================================
# Tests for schemas
# ===========================================================================


class TestOpenAPISchemas:
    """Entity and DTO schemas."""

    def test_entity_schema_leaves_out_relationships(self, document: Dict[str, Any]) -> None:
        user = document["components"]["schemas"]["User"]
        assert list(user["properties"]) == ["id", "email", "name", "role", "createdAt", "updatedAt"]
        assert user["required"] == ["id", "email", "name"]

    def test_soft_delete_column(self, document: Dict[str, Any]) -> None:
        post = document["components"]["schemas"]["Post"]
        assert post["properties"]["deletedAt"]["nullable"] is True

    def test_enum_field_references_enum_schema(self, document: Dict[str, Any]) -> None:
        role = document["components"]["schemas"]["User"]["properties"]["role"]
        assert role["$ref"] == "#/components/schemas/UserRole"
        assert document["components"]["schemas"]["UserRole"]["enum"] == ["ADMIN", "USER", "MODERATOR"]

    def test_create_dto_excludes_generated_keys(self, document: Dict[str, Any]) -> None:
        dto = document["components"]["schemas"]["CreateUserDto"]
        assert list(dto["properties"]) == ["email", "name", "role"]
        assert dto["required"] == ["email", "name"]

    def test_create_post_dto(self, document: Dict[str, Any]) -> None:
        dto = document["components"]["schemas"]["CreatePostDto"]
        assert list(dto["properties"]) == ["title", "content", "published", "authorId"]
        assert dto["required"] == ["title", "authorId"]
        assert dto["properties"]["title"]["maxLength"] == 200

    def test_update_dto_has_no_required(self, document: Dict[str, Any]) -> None:
        dto = document["components"]["schemas"]["UpdatePostDto"]
        assert "required" not in dto
        assert list(dto["properties"]) == ["title", "content", "published", "authorId"]

    def test_id_parameter_uses_key_type(
        self, project_config: ProjectConfig, minimal_model: DataModel
    ) -> None:
        document = build_openapi_document(project_config, minimal_model)
        parameter = document["paths"]["/items/{id}"]["get"]["parameters"][0]
        assert parameter["in"] == "path" and parameter["required"] is True
        assert parameter["schema"] == {"type": "integer", "format": "int64"}

    def test_create_fields_helper(self, blog_model: DataModel) -> None:
        post = blog_model.get_entity("Post")
        assert [f.name for f in create_fields(post)] == ["title", "content", "published", "authorId"]

    def test_collection_path_is_kebab_plural(self, minimal_model_dict: Dict[str, Any]) -> None:
        minimal_model_dict["entities"][0]["name"] = "BlogCategory"
        model = DataModel.model_validate(minimal_model_dict)
        assert collection_path(model.entities[0]) == "/blog-categories"


# ===========================================================================
# Tests for OpenAPIGenerator.generate
# ===========================================================================


class TestOpenAPIGenerator:
    """Files, formats and determinism."""

    def test_generate_files(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        result = OpenAPIGenerator.generate(project_config, blog_model)
        assert result.success, result.errors
        assert result.file_paths == ["openapi.json", "openapi.yaml"]

    def test_json_and_yaml_agree(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        result = OpenAPIGenerator.generate(project_config, blog_model)
        from_json = json.loads(result.get_file("openapi.json").content)
        from_yaml = yaml.safe_load(result.get_file("openapi.yaml").content)
        assert from_json == from_yaml

    def test_idempotent(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        first = OpenAPIGenerator.generate(project_config, blog_model)
        second = OpenAPIGenerator.generate(project_config, blog_model)
        assert [f.content for f in first.files] == [f.content for f in second.files]

    def test_yaml_has_no_anchors(self, project_config: ProjectConfig, blog_model: DataModel) -> None:
        content = OpenAPIGenerator.generate(project_config, blog_model).get_file("openapi.yaml").content
        assert "&id" not in content and "*id" not in content

    def test_failure_is_reported(
        self,
        project_config: ProjectConfig,
        blog_model: DataModel,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def boom(self: OpenAPIGenerator) -> Dict[str, Any]:
            raise RuntimeError("exploded")

        monkeypatch.setattr(OpenAPIGenerator, "build_document", boom)
        result = OpenAPIGenerator.generate(project_config, blog_model)
        assert not result.success
        assert result.files == []
        assert result.errors == ["OpenAPI generation failed: RuntimeError: exploded"]
