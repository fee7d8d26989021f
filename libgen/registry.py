# File: libgen/registry.py
"""
libgen - Template Registry
===========================
Maps ``libraryType/fileType`` keys to template definitions.

An entry holds either a static :class:`~libgen.models.TemplateDefinition`
(loaded from the YAML documents under ``libgen/definitions``) or a
*definition factory*, a callable that builds a definition from the
generation context (the layer templates in :mod:`libgen.layers`).

Registration validates eagerly: a definition that uses an undeclared
placeholder or has a malformed id never makes it into the registry.

Usage:
    registry = get_template_registry()
    entry = registry.require("infra/errors")
    definition = entry.definition_for(context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from libgen.exceptions import MalformedTemplateError, TemplateNotFoundError
from libgen.layers import LAYER_FACTORIES, DefinitionFactory
from libgen.loader import TemplateDocument, load_definitions_dir
from libgen.models import LibraryType, TemplateDefinition
from libgen.resolver import create_context_from_name
from libgen.validators import ValidationResult, validate_definition

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.registry")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFINITIONS_DIR: Path = Path(__file__).parent / "definitions"

# Context every generator-built context provides.
BASE_CONTEXT: List[str] = [
    "className",
    "fileName",
    "propertyName",
    "constantName",
    "scope",
    "packageName",
    "projectName",
    "libraryType",
]


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


class TemplateMetadata(BaseModel):
    """Registry bookkeeping for one template."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    library_type: str
    file_type: str
    description: str = ""
    required_context: List[str] = Field(default_factory=lambda: list(BASE_CONTEXT))
    optional_context: List[str] = Field(default_factory=list)

    @property
    def declared_context(self) -> List[str]:
        return [*self.required_context, *self.optional_context]


class RegistryEntry:
    """A registered template: metadata plus a static definition or a factory."""

    __slots__ = ("metadata", "definition", "factory")

    def __init__(
        self,
        metadata: TemplateMetadata,
        definition: Optional[TemplateDefinition] = None,
        factory: Optional[DefinitionFactory] = None,
    ) -> None:
        if (definition is None) == (factory is None):
            raise ValueError("RegistryEntry needs exactly one of definition or factory")
        self.metadata: TemplateMetadata = metadata
        self.definition: Optional[TemplateDefinition] = definition
        self.factory: Optional[DefinitionFactory] = factory

    @property
    def key(self) -> str:
        return self.metadata.id

    @property
    def is_factory(self) -> bool:
        return self.factory is not None

    def definition_for(self, context: Mapping[str, Any]) -> TemplateDefinition:
        """
        The definition to render for *context*.

        Raises:
            MalformedTemplateError: if a factory returns a definition whose id
                does not match the registry key.
        """
        if self.definition is not None:
            return self.definition
        if self.factory is None:
            raise MalformedTemplateError("entry has neither a definition nor a factory", self.key)
        definition: TemplateDefinition = self.factory(context)
        if definition.id != self.key:
            raise MalformedTemplateError(
                f"factory produced definition '{definition.id}'", self.key
            )
        logger.debug("Factory %s built %r", self.key, definition)
        return definition

    def __repr__(self) -> str:
        kind: str = "factory" if self.is_factory else "definition"
        return f"<RegistryEntry {self.key} ({kind})>"


@dataclass(frozen=True)
class ContextValidation:
    """Outcome of :meth:`TemplateRegistry.validate_context`."""

    valid: bool
    missing: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """
    Ordered collection of templates keyed by ``libraryType/fileType``.

    Read-only after construction in normal use, so one instance can be
    shared by concurrent generations.
    """

    def __init__(self, validate: bool = True) -> None:
        self._entries: Dict[str, RegistryEntry] = {}
        self._validate: bool = validate

    # -----------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------

    def register_definition(
        self,
        definition: TemplateDefinition,
        description: str = "",
        required_context: Optional[Sequence[str]] = None,
        optional_context: Sequence[str] = (),
        *,
        replace: bool = False,
    ) -> TemplateMetadata:
        """Register a static definition under its own ``id``."""
        metadata: TemplateMetadata = self._metadata(
            definition.id, description, required_context, optional_context
        )
        self._check(definition, metadata)
        self._add(RegistryEntry(metadata, definition=definition), replace)
        return metadata

    def register_document(self, document: TemplateDocument, *, replace: bool = False) -> TemplateMetadata:
        """Register a loaded template document."""
        return self.register_definition(
            document.template,
            document.description,
            document.required_context,
            document.optional_context,
            replace=replace,
        )

    def register_factory(
        self,
        key: str,
        factory: DefinitionFactory,
        description: str = "",
        required_context: Optional[Sequence[str]] = None,
        optional_context: Sequence[str] = (),
        *,
        replace: bool = False,
    ) -> TemplateMetadata:
        """
        Register a definition factory under *key*.

        The factory is called once with a sample context so its output can be
        validated like a static definition.
        """
        metadata: TemplateMetadata = self._metadata(
            key, description, required_context, optional_context
        )
        entry: RegistryEntry = RegistryEntry(metadata, factory=factory)
        if self._validate:
            sample: Dict[str, Any] = create_context_from_name(
                "sample", library_type=metadata.library_type
            )
            self._check(entry.definition_for(sample), metadata)
        self._add(entry, replace)
        return metadata

    def _metadata(
        self,
        key: str,
        description: str,
        required_context: Optional[Sequence[str]],
        optional_context: Sequence[str],
    ) -> TemplateMetadata:
        library_type, _, file_type = key.partition("/")
        return TemplateMetadata(
            id=key,
            library_type=library_type,
            file_type=file_type or key,
            description=description,
            required_context=list(BASE_CONTEXT if required_context is None else required_context),
            optional_context=list(optional_context),
        )

    def _check(self, definition: TemplateDefinition, metadata: TemplateMetadata) -> None:
        if not self._validate:
            return
        result: ValidationResult = validate_definition(
            definition, metadata.required_context, metadata.optional_context
        )
        for warning in result.warnings:
            logger.warning("%s: %s", metadata.id, warning.message)
        if result.has_errors:
            raise MalformedTemplateError(
                "; ".join(error.message for error in result.errors), metadata.id
            )

    def _add(self, entry: RegistryEntry, replace: bool) -> None:
        if entry.key in self._entries and not replace:
            raise MalformedTemplateError("template id is already registered", entry.key)
        self._entries[entry.key] = entry
        logger.debug("Registered %r", entry)

    # -----------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------

    def get(self, key: str) -> Optional[RegistryEntry]:
        return self._entries.get(key)

    def require(self, key: str) -> RegistryEntry:
        """
        Return the entry for *key*.

        Raises:
            TemplateNotFoundError: if nothing is registered under *key*.
        """
        entry: Optional[RegistryEntry] = self._entries.get(key)
        if entry is None:
            library_type, _, file_type = key.partition("/")
            raise TemplateNotFoundError(library_type, file_type)
        return entry

    def get_by_library_type(self, library_type: Union[str, LibraryType]) -> List[RegistryEntry]:
        """Entries of one library type, in registration order."""
        wanted: str = library_type.value if isinstance(library_type, LibraryType) else library_type
        return [e for e in self._entries.values() if e.metadata.library_type == wanted]

    def keys(self) -> List[str]:
        return list(self._entries)

    def has(self, key: str) -> bool:
        return key in self._entries

    def validate_context(self, key: str, context: Mapping[str, Any]) -> ContextValidation:
        """
        Check *context* against the required variables of *key*.

        A variable bound to ``None`` counts as missing.

        Raises:
            TemplateNotFoundError: if *key* is not registered.
        """
        metadata: TemplateMetadata = self.require(key).metadata
        missing: List[str] = [
            name for name in metadata.required_context if context.get(name) is None
        ]
        return ContextValidation(valid=not missing, missing=missing)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(list(self._entries.values()))

    def __repr__(self) -> str:
        return f"<TemplateRegistry {len(self._entries)} template(s)>"


# ---------------------------------------------------------------------------
# Built-in registry
# ---------------------------------------------------------------------------


def create_template_registry(
    definitions_dir: Optional[Union[str, Path]] = None,
    *,
    include_factories: bool = True,
    validate: bool = True,
) -> TemplateRegistry:
    """Build a registry holding the YAML definitions and the layer factories."""
    registry: TemplateRegistry = TemplateRegistry(validate=validate)

    for document in load_definitions_dir(definitions_dir or DEFINITIONS_DIR):
        registry.register_document(document)

    if include_factories:
        for key, (factory, description, optional_context) in LAYER_FACTORIES.items():
            registry.register_factory(key, factory, description, optional_context=optional_context)

    logger.debug("Template registry ready: %s", ", ".join(registry.keys()))
    return registry


_shared_registry: Optional[TemplateRegistry] = None


def get_template_registry() -> TemplateRegistry:
    """The shared built-in registry, created on first use."""
    global _shared_registry
    if _shared_registry is None:
        _shared_registry = create_template_registry()
    return _shared_registry


__all__: List[str] = [
    "BASE_CONTEXT",
    "DEFINITIONS_DIR",
    "ContextValidation",
    "LibraryType",
    "RegistryEntry",
    "TemplateMetadata",
    "TemplateRegistry",
    "create_template_registry",
    "get_template_registry",
]
