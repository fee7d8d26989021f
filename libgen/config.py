# File: libgen/config.py
"""
libgen - Generator Configuration
=================================
Workspace-level defaults for the generator, loaded from a YAML or JSON file:

    scope: "@acme"
    entity_type_source: "@acme/types-database"
    strict_context: true
    library_types: [contract, data-access]
    context:
      includeCQRS: false
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from libgen.loader import load_mapping_file
from libgen.models import LibraryType
from libgen.naming import DEFAULT_SCOPE, check_scope

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.config")


class GeneratorConfig(BaseModel):
    """Defaults applied to every generation context."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    scope: str = Field(default=DEFAULT_SCOPE, description="Workspace namespace, e.g. '@acme'.")
    entity_type_source: str = Field(
        default="./types", description="Module the entity types are imported from."
    )
    strict_context: bool = Field(
        default=True, description="Check required context before rendering."
    )
    context: Dict[str, Any] = Field(
        default_factory=dict, description="Extra values merged into every context."
    )
    library_types: List[LibraryType] = Field(
        default_factory=lambda: list(LibraryType),
        description="Library types generate_domain() produces by default.",
    )

    @field_validator("scope")
    @classmethod
    def _check_scope(cls, value: str) -> str:
        return check_scope(value)


def load_config(path: Union[str, Path]) -> GeneratorConfig:
    """
    Load a ``GeneratorConfig`` from a YAML (``.yaml``/``.yml``) or JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or fails validation.
    """
    data: Dict[str, Any] = load_mapping_file(path)
    try:
        config: GeneratorConfig = GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid generator config in {path}: {exc}") from exc
    logger.debug("Loaded generator config from %s: scope=%s", path, config.scope)
    return config


def default_config(overrides: Optional[Dict[str, Any]] = None) -> GeneratorConfig:
    """A config with the built-in defaults, optionally overridden."""
    return GeneratorConfig.model_validate(overrides or {})


__all__: List[str] = ["GeneratorConfig", "default_config", "load_config"]
