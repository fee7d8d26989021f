# File: libgen/loader.py
"""
libgen - Template Document Loader
==================================
Reads template documents from disk.  A document is a YAML (or JSON) mapping:

    description: Infrastructure errors
    required_context: [className, scope]     # optional, registry default otherwise
    optional_context: [externalService]
    template:
      id: infra/errors
      meta: {title: ..., description: ..., module: ...}
      imports: [...]
      sections: [...]
      conditionals: {...}

Parse failures are reported as ``ValueError``; structural problems in the
``template`` block as :class:`~libgen.exceptions.MalformedTemplateError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from libgen.exceptions import MalformedTemplateError
from libgen.models import TemplateDefinition

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.loader")

YAML_SUFFIXES = (".yaml", ".yml")


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


class TemplateDocument(BaseModel):
    """A parsed template document: the definition plus its registry metadata."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    template: TemplateDefinition
    description: str = ""
    required_context: Optional[List[str]] = Field(
        default=None, description="Overrides the registry's default required context."
    )
    optional_context: List[str] = Field(default_factory=list)

    @field_validator("template", mode="before")
    @classmethod
    def _build_template(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return TemplateDefinition.from_dict(value)
        return value


# ---------------------------------------------------------------------------
# File readers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_mapping_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a JSON or YAML mapping, dispatching on the file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or is not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if path.suffix.lower() == ".json":
        return _load_json_file(path)
    # JSON is valid YAML, so anything else goes through the YAML parser.
    return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def parse_template_document(data: Dict[str, Any], source: str = "<memory>") -> TemplateDocument:
    """
    Validate an already-parsed document mapping.

    Raises:
        MalformedTemplateError: if the template block or metadata is invalid.
    """
    if "template" not in data:
        raise MalformedTemplateError(f"document {source} has no 'template' block")
    try:
        return TemplateDocument.model_validate(data)
    except ValidationError as exc:
        template: Any = data.get("template")
        template_id: Optional[str] = template.get("id") if isinstance(template, dict) else None
        raise MalformedTemplateError(f"{source}: {exc}", template_id) from exc


def load_template_document(path: Union[str, Path]) -> TemplateDocument:
    """Load one template document from a YAML or JSON file."""
    path = Path(path)
    document: TemplateDocument = parse_template_document(load_mapping_file(path), str(path))
    logger.debug("Loaded template document %s from %s.", document.template.id, path)
    return document


def load_definitions_dir(root: Union[str, Path]) -> List[TemplateDocument]:
    """
    Load every ``*.yaml``/``*.yml``/``*.json`` document below *root*.

    Files are read in sorted path order so registration order is stable.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Definitions directory not found: {root}")

    paths: List[Path] = sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in YAML_SUFFIXES + (".json",)
    )
    documents: List[TemplateDocument] = [load_template_document(path) for path in paths]
    logger.debug("Loaded %d template document(s) from %s.", len(documents), root)
    return documents


__all__: List[str] = [
    "TemplateDocument",
    "load_definitions_dir",
    "load_mapping_file",
    "load_template_document",
    "parse_template_document",
]
