"""
tests/conftest.py
Shared fixtures for the libgen test suite.

No external mocking libraries are used; YAML/JSON fixtures are written to
pytest's tmp_path directories with PyYAML and read back through the real
loader.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Callable, Dict

import pytest
import yaml

from libgen.registry import TemplateRegistry, create_template_registry
from libgen.resolver import create_context_from_name


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
DEFINITIONS_DIR: pathlib.Path = ROOT_DIR / "libgen" / "definitions"


# ---------------------------------------------------------------------------
# Context fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def widget_values() -> Dict[str, Any]:
    """The three values of the worked Widget example."""
    return {"className": "Widget", "fileName": "widget", "scope": "@acme"}


@pytest.fixture()
def widget_context() -> Dict[str, Any]:
    """Full generation context for the ``widget`` library under ``@acme``."""
    return create_context_from_name("widget", scope="@acme", library_type="infra")


@pytest.fixture()
def user_profile_context() -> Dict[str, Any]:
    """Context with a multi-segment name, as the generator would build it."""
    context: Dict[str, Any] = create_context_from_name(
        "user-profile", scope="@acme", library_type="contract"
    )
    context["entityTypeSource"] = "./types"
    context["externalService"] = "UserProfile"
    return context


# ---------------------------------------------------------------------------
# Definition fixtures
# ---------------------------------------------------------------------------


_WIDGET_DEFINITION: Dict[str, Any] = {
    "id": "widget/id",
    "meta": {
        "title": "{className} Widget",
        "description": "Widget for {scope}",
        "module": "{scope}/widget",
    },
    "sections": [
        {"content": {"type": "raw", "value": 'export const {className}Id = "{fileName}";'}}
    ],
}


@pytest.fixture()
def widget_definition_dict() -> Dict[str, Any]:
    """Minimal one-section definition; a deep copy each test can mutate freely."""
    return copy.deepcopy(_WIDGET_DEFINITION)


@pytest.fixture()
def errors_definition_dict() -> Dict[str, Any]:
    """A definition exercising imports, every content kind and a conditional block."""
    return {
        "id": "infra/errors",
        "meta": {"title": "{className} Errors", "module": "{scope}/infra-{fileName}/errors"},
        "imports": [
            {"from": "effect", "items": ["Data"]},
            {"from": "./types", "items": ["{className}Id"], "is_type_only": True},
            {"from": "./metrics", "items": ["Counter"], "condition": "withMetrics"},
        ],
        "sections": [
            {
                "title": "Errors",
                "content": [
                    {
                        "type": "taggedError",
                        "config": {
                            "class_name": "{className}NotFoundError",
                            "fields": [{"name": "id", "type": "{className}Id"}],
                        },
                    },
                    {
                        "type": "typeAlias",
                        "config": {"name": "{className}Error", "type": "{className}NotFoundError"},
                    },
                ],
            },
            {
                "title": "Debug",
                "condition": "debug",
                "content": {"type": "raw", "value": "// debug build"},
            },
        ],
        "conditionals": {
            "withMetrics": {
                "sections": [
                    {
                        "title": "Metrics",
                        "content": {
                            "type": "constant",
                            "config": {"name": "{propertyName}Errors", "value": 'Counter.make("{fileName}")'},
                        },
                    }
                ]
            }
        },
    }


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def write_yaml(tmp_path: pathlib.Path) -> Callable[[str, Any], pathlib.Path]:
    """Return a helper that dumps data to ``tmp_path/<name>`` as YAML."""

    def _write(name: str, data: Any) -> pathlib.Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)
        return path

    return _write


@pytest.fixture()
def write_json(tmp_path: pathlib.Path) -> Callable[[str, Any], pathlib.Path]:
    """Return a helper that dumps data to ``tmp_path/<name>`` as JSON."""

    def _write(name: str, data: Any) -> pathlib.Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Registry fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def builtin_registry() -> TemplateRegistry:
    """The built-in registry, loaded once per session (treated as read-only)."""
    return create_template_registry()


@pytest.fixture()
def empty_registry() -> TemplateRegistry:
    return TemplateRegistry()
