# File: codeforge/samples.py
"""
CodeForge - Sample Projects
===========================
Ready-made data models and matching project configs used to bootstrap a new
project (``codeforge sample``).

    blog       User / Post with a role enum (same as ``model_example.yaml``)
    ecommerce  User, Category, Product, Order, OrderItem and three status enums
    social     User / Post with counters and profile fields

Every builder returns the camelCase wire form, ready for
:meth:`ModelLoader.check_object` or for writing to disk.  Each sample passes
structural and business-rule validation with no errors and no warnings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from codeforge.utils import dump_json, write_file

logger: logging.Logger = logging.getLogger("codeforge.samples")

SAMPLE_KINDS: tuple = ("blog", "ecommerce", "social")
MODEL_FILENAME: str = "models/data-model.json"
CONFIG_FILENAME: str = "codeforge.config.json"


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _uuid_key() -> Dict[str, Any]:
    return {
        "name": "id",
        "isPrimaryKey": True,
        "isGenerated": True,
        "generationStrategy": "uuid",
        "dataType": {"type": "string", "format": "uuid", "required": True},
    }


def _string(
    name: str,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    **extra: Any,
) -> Dict[str, Any]:
    data_type: Dict[str, Any] = {"type": "string"}
    data_type.update(extra)
    rules: Dict[str, Any] = {}
    if min_length is not None:
        rules["minLength"] = min_length
    if max_length is not None:
        rules["maxLength"] = max_length
    if rules:
        data_type["validation"] = rules
    return {"name": name, "dataType": data_type}


def _foreign_id(name: str) -> Dict[str, Any]:
    return {
        "name": name,
        "isIndexed": True,
        "dataType": {"type": "string", "format": "uuid", "required": True},
    }


def _amount(name: str, fmt: str = "decimal", minimum: float = 0) -> Dict[str, Any]:
    return {
        "name": name,
        "dataType": {"type": "number", "format": fmt, "validation": {"min": minimum}},
    }


def _many_to_one(name: str, target: str, foreign_key: str) -> Dict[str, Any]:
    return {
        "name": name,
        "dataType": {"type": "object"},
        "relationship": {"type": "manyToOne", "target": target, "foreignKey": foreign_key},
    }


def _one_to_many(name: str, target: str, foreign_key: str) -> Dict[str, Any]:
    return {
        "name": name,
        "dataType": {"type": "array", "items": {"type": "object"}},
        "relationship": {"type": "oneToMany", "target": target, "foreignKey": foreign_key},
    }


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


def blog_model() -> Dict[str, Any]:
    """The User/Post blog, identical to ``model_example.yaml``."""
    user_email: Dict[str, Any] = _string("email", max_length=255, format="email", required=True)
    user_email["isUnique"] = True
    author: Dict[str, Any] = _many_to_one("author", "User", "authorId")
    author["relationship"]["onDelete"] = "CASCADE"

    return {
        "name": "Blog",
        "version": "1.0.0",
        "description": "A small blogging platform",
        "entities": [
            {
                "name": "User",
                "description": "Registered author or reader",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    user_email,
                    _string("name", min_length=1, max_length=100, required=True),
                    {
                        "name": "role",
                        "dataType": {"type": "enum", "enum": ["UserRole"], "default": "USER"},
                    },
                    _one_to_many("posts", "Post", "authorId"),
                ],
            },
            {
                "name": "Post",
                "description": "A published or draft article",
                "timestamps": True,
                "softDelete": True,
                "fields": [
                    _uuid_key(),
                    _string("title", max_length=200, required=True),
                    _string("content"),
                    {"name": "published", "dataType": {"type": "boolean", "default": False}},
                    _foreign_id("authorId"),
                    author,
                ],
            },
        ],
        "enums": [{"name": "UserRole", "values": ["ADMIN", "USER", "MODERATOR"]}],
    }


def ecommerce_model() -> Dict[str, Any]:
    """Shop catalogue with orders and order lines."""
    email: Dict[str, Any] = _string("email", max_length=255, format="email", required=True)
    email["isUnique"] = True
    email["dataType"]["validation"]["email"] = True
    category_name: Dict[str, Any] = _string("name", min_length=1, max_length=100, required=True)
    category_name["isUnique"] = True
    order_number: Dict[str, Any] = _string("orderNumber", max_length=32, required=True)
    order_number["isUnique"] = True

    return {
        "name": "EcommerceAPI",
        "version": "1.0.0",
        "description": "E-commerce platform API data model",
        "entities": [
            {
                "name": "User",
                "description": "Customer and admin users",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    email,
                    _string("firstName", min_length=2, max_length=50, required=True),
                    _string("lastName", min_length=2, max_length=50, required=True),
                    {"name": "role", "dataType": {"type": "enum", "enum": ["UserRole"]}},
                    _one_to_many("orders", "Order", "userId"),
                ],
            },
            {
                "name": "Category",
                "description": "Product categories",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    category_name,
                    _string("description", nullable=True),
                    {
                        "name": "parentId",
                        "dataType": {"type": "string", "format": "uuid", "nullable": True},
                    },
                    _one_to_many("products", "Product", "categoryId"),
                ],
            },
            {
                "name": "Product",
                "description": "Products in the catalog",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    _string("name", min_length=1, max_length=200, required=True),
                    _string("description"),
                    _amount("price"),
                    _amount("stock", fmt="int32"),
                    {"name": "status", "dataType": {"type": "enum", "enum": ["ProductStatus"]}},
                    _foreign_id("categoryId"),
                    _many_to_one("category", "Category", "categoryId"),
                ],
            },
            {
                "name": "Order",
                "description": "Customer orders",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    order_number,
                    {"name": "status", "dataType": {"type": "enum", "enum": ["OrderStatus"]}},
                    _amount("totalAmount"),
                    _foreign_id("userId"),
                    _many_to_one("user", "User", "userId"),
                    _one_to_many("items", "OrderItem", "orderId"),
                ],
            },
            {
                "name": "OrderItem",
                "description": "Items within an order",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    _amount("quantity", fmt="int32", minimum=1),
                    _amount("price"),
                    _foreign_id("orderId"),
                    _foreign_id("productId"),
                    _many_to_one("order", "Order", "orderId"),
                    _many_to_one("product", "Product", "productId"),
                ],
            },
        ],
        "enums": [
            {
                "name": "UserRole",
                "values": ["CUSTOMER", "ADMIN", "MANAGER"],
                "description": "User roles in the system",
            },
            {
                "name": "ProductStatus",
                "values": ["ACTIVE", "INACTIVE", "OUT_OF_STOCK", "DISCONTINUED"],
                "description": "Product availability status",
            },
            {
                "name": "OrderStatus",
                "values": ["PENDING", "CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED"],
                "description": "Order processing status",
            },
        ],
    }


def social_model() -> Dict[str, Any]:
    """Profiles and posts with engagement counters."""
    username: Dict[str, Any] = _string("username", min_length=3, max_length=30, required=True)
    username["isUnique"] = True
    username["dataType"]["validation"]["pattern"] = "^[a-zA-Z0-9_]+$"
    email: Dict[str, Any] = _string("email", max_length=255, format="email", required=True)
    email["isUnique"] = True

    def counter(name: str) -> Dict[str, Any]:
        field: Dict[str, Any] = _amount(name, fmt="int32")
        field["dataType"]["default"] = 0
        return field

    return {
        "name": "SocialAPI",
        "version": "1.0.0",
        "description": "Social media platform API data model",
        "entities": [
            {
                "name": "User",
                "description": "Platform users",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    username,
                    email,
                    _string("displayName", min_length=1, max_length=100, required=True),
                    _string("bio", max_length=500, nullable=True),
                    _string("avatarUrl", format="url", nullable=True),
                    {"name": "isVerified", "dataType": {"type": "boolean", "default": False}},
                    _one_to_many("posts", "Post", "authorId"),
                ],
            },
            {
                "name": "Post",
                "description": "User posts",
                "timestamps": True,
                "fields": [
                    _uuid_key(),
                    _string("content", min_length=1, max_length=2000, required=True),
                    _string("imageUrl", format="url", nullable=True),
                    counter("likesCount"),
                    counter("commentsCount"),
                    _foreign_id("authorId"),
                    _many_to_one("author", "User", "authorId"),
                ],
            },
        ],
        "enums": [],
    }


_BUILDERS: Dict[str, Callable[[], Dict[str, Any]]] = {
    "blog": blog_model,
    "ecommerce": ecommerce_model,
    "social": social_model,
}


def sample_model(kind: str = "blog") -> Dict[str, Any]:
    """Wire-form data model for *kind*."""
    try:
        builder: Callable[[], Dict[str, Any]] = _BUILDERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown sample {kind!r}; expected one of: {', '.join(SAMPLE_KINDS)}"
        ) from None
    return builder()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


def sample_config(kind: str = "blog") -> Dict[str, Any]:
    """Project config to go with :func:`sample_model`."""
    if kind not in _BUILDERS:
        raise ValueError(f"Unknown sample {kind!r}; expected one of: {', '.join(SAMPLE_KINDS)}")
    title: str = kind.capitalize()
    return {
        "project": {
            "name": f"{title}API",
            "description": f"{title} platform API generated with CodeForge",
            "version": "1.0.0",
            "author": "CodeForge User",
        },
        "database": {
            "type": "postgresql",
            "host": "localhost",
            "port": 5432,
            "database": f"{kind}_db",
        },
        "features": {
            "authentication": True,
            "authorization": True,
            "swagger": True,
            "asyncapi": kind == "social",
            "docker": True,
            "testing": True,
            "logging": True,
            "monitoring": False,
        },
        "generation": {
            "outputDir": "generated",
            "templateDir": "templates",
            "overwrite": False,
            "backup": True,
        },
    }


# ---------------------------------------------------------------------------
# Writing to disk
# ---------------------------------------------------------------------------


def write_sample(kind: str, output_dir: Path, *, overwrite: bool = False) -> List[Path]:
    """
    Write ``models/data-model.json`` and ``codeforge.config.json`` below
    *output_dir* and return the written paths.

    Raises:
        ValueError: unknown *kind*.
        FileExistsError: a target exists and *overwrite* is False.
    """
    root: Path = Path(output_dir).resolve()
    contents: Dict[str, Dict[str, Any]] = {
        MODEL_FILENAME: sample_model(kind),
        CONFIG_FILENAME: sample_config(kind),
    }
    targets: Dict[str, Path] = {name: root / name for name in contents}
    if not overwrite:
        for path in targets.values():
            if path.exists():
                raise FileExistsError(f"{path} already exists (use --force to replace it)")

    written: List[Path] = []
    for name, data in contents.items():
        write_file(targets[name], dump_json(data))
        written.append(targets[name])
        logger.info("Wrote %s sample %s.", kind, targets[name])
    return written


__all__: List[str] = [
    "SAMPLE_KINDS",
    "MODEL_FILENAME",
    "CONFIG_FILENAME",
    "blog_model",
    "ecommerce_model",
    "social_model",
    "sample_model",
    "sample_config",
    "write_sample",
]
