"""
tests/conftest.py
Shared fixtures for the codeforge test suite.

Data-model fixtures are plain dicts in the camelCase wire format so tests
can mutate them before loading.  Real file I/O happens inside pytest's
tmp_path directories; no mocking libraries are used.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict

import pytest
import yaml

from codeforge.models import DataModel, ProjectConfig


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODEL_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "model_example.yaml"


# ---------------------------------------------------------------------------
# Data-model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_blog_dict() -> Dict[str, Any]:
    """The reference User/Post blog model, loaded once per session."""
    assert MODEL_EXAMPLE_PATH.exists(), (
        f"Reference model not found at {MODEL_EXAMPLE_PATH}. "
        "Make sure model_example.yaml is in the project root."
    )
    with open(MODEL_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def blog_dict(raw_blog_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy of the blog model so each test can mutate freely."""
    return copy.deepcopy(raw_blog_dict)


@pytest.fixture()
def blog_model(blog_dict: Dict[str, Any]) -> DataModel:
    return DataModel.model_validate(blog_dict)


@pytest.fixture()
def minimal_model_dict() -> Dict[str, Any]:
    """Smallest valid model: one entity with an auto-increment key."""
    return {
        "name": "Inventory",
        "version": "0.1.0",
        "entities": [
            {
                "name": "Item",
                "fields": [
                    {
                        "name": "id",
                        "isPrimaryKey": True,
                        "isGenerated": True,
                        "generationStrategy": "increment",
                        "dataType": {"type": "number", "format": "int64", "required": True},
                    },
                    {
                        "name": "title",
                        "dataType": {
                            "type": "string",
                            "required": True,
                            "validation": {"maxLength": 100},
                        },
                    },
                ],
            }
        ],
    }


@pytest.fixture()
def minimal_model(minimal_model_dict: Dict[str, Any]) -> DataModel:
    return DataModel.model_validate(minimal_model_dict)


def _entity(name: str, *fields: Dict[str, Any]) -> Dict[str, Any]:
    key: Dict[str, Any] = {
        "name": "id",
        "isPrimaryKey": True,
        "isGenerated": True,
        "dataType": {"type": "string", "format": "uuid", "required": True},
    }
    return {"name": name, "fields": [key, *fields]}


@pytest.fixture()
def circular_model_dict() -> Dict[str, Any]:
    """A -> B and B -> A, both manyToOne."""
    return {
        "name": "Circular",
        "version": "1.0.0",
        "entities": [
            _entity(
                "Alpha",
                {
                    "name": "beta",
                    "dataType": {"type": "object"},
                    "relationship": {"type": "manyToOne", "target": "Beta", "foreignKey": "betaId"},
                },
            ),
            _entity(
                "Beta",
                {
                    "name": "alpha",
                    "dataType": {"type": "object"},
                    "relationship": {"type": "manyToOne", "target": "Alpha", "foreignKey": "alphaId"},
                },
            ),
        ],
    }


# ---------------------------------------------------------------------------
# Project-config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_dict() -> Dict[str, Any]:
    return {
        "project": {
            "name": "blog-api",
            "version": "1.0.0",
            "description": "Blog API",
            "author": "Blog Team",
        },
        "database": {"type": "postgresql", "database": "blog"},
        "features": {
            "authentication": False,
            "swagger": True,
            "asyncapi": True,
            "docker": False,
            "testing": False,
        },
        "generation": {"outputDir": "./generated", "overwrite": False, "backup": False},
    }


@pytest.fixture()
def project_config(config_dict: Dict[str, Any]) -> ProjectConfig:
    return ProjectConfig.model_validate(config_dict)


@pytest.fixture()
def full_feature_config(config_dict: Dict[str, Any]) -> ProjectConfig:
    """Every generation feature switched on."""
    data = copy.deepcopy(config_dict)
    data["features"] = {
        "authentication": True,
        "authorization": True,
        "swagger": True,
        "asyncapi": True,
        "docker": True,
        "testing": True,
        "logging": True,
        "monitoring": True,
    }
    return ProjectConfig.model_validate(data)


# ---------------------------------------------------------------------------
# Temporary files
# ---------------------------------------------------------------------------


@pytest.fixture()
def blog_yaml_path(blog_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "blog.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(blog_dict, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def blog_json_path(blog_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "blog.json"
    path.write_text(json.dumps(blog_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def config_json_path(config_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "codeforge.json"
    path.write_text(json.dumps(config_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Clean output directory inside tmp_path."""
    out = tmp_path / "generated_output"
    out.mkdir(parents=True, exist_ok=True)
    return out
