"""Shared test fixtures for schemalens."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from schemalens.config import EngineSettings

PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.2.0"},
    "servers": [
        {
            "url": "https://{region}.petstore.example.com/{basePath}",
            "variables": {
                "region": {"default": "eu", "enum": ["eu", "us"]},
                "basePath": {"default": "v1"},
            },
        }
    ],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List pets",
                "tags": ["pets"],
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                ],
            },
            "post": {
                "operationId": "createPet",
                "summary": "Create a pet",
                "tags": ["pets"],
                "requestBody": {"$ref": "#/components/requestBodies/NewPetBody"},
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
                {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
            ],
            "get": {
                "summary": "Get a pet",
                "tags": ["pets"],
                "parameters": [
                    {
                        "name": "petId",
                        "in": "path",
                        "required": True,
                        "description": "Pet identifier",
                        "schema": {"type": "string", "format": "uuid"},
                    },
                ],
            },
            "delete": {"summary": "Delete a pet"},
        },
        "/pets/{petId}/photo": {
            "put": {
                "summary": "Upload a photo",
                "tags": ["media"],
                "requestBody": {
                    "required": True,
                    "content": {
                        "multipart/form-data": {
                            "schema": {
                                "type": "object",
                                "required": ["avatar"],
                                "properties": {
                                    "avatar": {"type": "string", "format": "binary"},
                                    "caption": {"type": "string", "example": "Rex at the beach"},
                                    "isPublic": {"type": "boolean", "default": False},
                                },
                            }
                        }
                    },
                },
            },
        },
        "/health": {"get": {"summary": "Health check"}},
    },
    "components": {
        "requestBodies": {
            "NewPetBody": {
                "required": True,
                "content": {
                    "application/json": {"schema": {"$ref": "#/components/schemas/NewPet"}},
                },
            },
        },
        "schemas": {
            "Category": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "minimum": 1},
                    "name": {"type": "string"},
                },
                "required": ["id"],
            },
            "NewPet": {
                "type": "object",
                "required": ["name", "tag"],
                "properties": {
                    "name": {"type": "string", "minLength": 1, "description": "Pet name"},
                    "tag": {"type": "string", "enum": ["dog", "cat"]},
                    "nickname": {"type": "string"},
                },
            },
            "Pet": {
                "allOf": [
                    {"$ref": "#/components/schemas/NewPet"},
                    {
                        "type": "object",
                        "required": ["id"],
                        "properties": {
                            "id": {"type": "string", "format": "uuid"},
                            "category": {"$ref": "#/components/schemas/Category"},
                            "photoUrls": {
                                "type": "array",
                                "items": {"type": "string", "format": "uri"},
                            },
                            "owner": {
                                "anyOf": [{"$ref": "#/components/schemas/Owner"}, {"type": "null"}],
                            },
                        },
                    },
                ],
            },
            "Owner": {
                "type": "object",
                "properties": {
                    "email": {"type": "string", "format": "email"},
                    "pets": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                },
                "required": ["email"],
            },
            "Node": {
                "type": "object",
                "required": ["children"],
                "properties": {
                    "children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}},
                },
            },
            "Broken": {"$ref": "#/components/schemas/Missing"},
        },
    },
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the Petstore document."""
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def settings() -> EngineSettings:
    """Default engine settings, independent of the environment."""
    return EngineSettings(_env_file=None)


@pytest.fixture
def petstore_json(tmp_path: Path, petstore: dict[str, Any]) -> Path:
    """The Petstore document written as a JSON file."""
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore), encoding="utf-8")
    return path


@pytest.fixture
def petstore_yaml(tmp_path: Path, petstore: dict[str, Any]) -> Path:
    """The Petstore document written as a YAML file."""
    path = tmp_path / "petstore.yaml"
    path.write_text(yaml.safe_dump(petstore, sort_keys=False), encoding="utf-8")
    return path
