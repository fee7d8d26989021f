# File: libgen/models.py
"""
libgen - Template Definition Models
====================================
Pydantic V2 models describing one TypeScript file to be generated.  These are
the single source of truth shared by the loader, the registry, the resolver
and the renderer:

    YAML document / Python literal -> TemplateDefinition -> resolve -> render

A definition is static data: it is built once, never mutated (all models are
frozen) and may be rendered any number of times, concurrently, with different
value maps.

Structural invariants are checked when a ``TemplateDefinition`` is built and
reported as :class:`~libgen.exceptions.MalformedTemplateError`:

- ``id`` must be a non-empty string;
- every section (including conditional ones) needs a title or some content.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    model_validator,
)

from libgen.exceptions import MalformedTemplateError
from libgen.utils import count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_DEFINITION_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


class LibraryType(str, Enum):
    """Kinds of library a template can belong to (the first segment of its id)."""

    CONTRACT = "contract"
    DATA_ACCESS = "data-access"
    FEATURE = "feature"
    INFRA = "infra"
    PROVIDER = "provider"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class ImportDefinition(BaseModel):
    """One ``import { ... } from "..."`` statement of the generated file."""

    model_config = _DEFINITION_CONFIG

    source: str = Field(..., alias="from", description="Module specifier.")
    items: List[str] = Field(default_factory=list, description="Named imports, in order.")
    is_type_only: bool = Field(default=False, description="Render as ``import type``.")
    condition: Optional[str] = Field(
        default=None, description="Context flag that must be truthy to include the import."
    )

    def __repr__(self) -> str:
        marker: str = "type " if self.is_type_only else ""
        return f"<Import {marker}{self.items} from {self.source!r}>"


# ---------------------------------------------------------------------------
# Content kinds
# ---------------------------------------------------------------------------


class RawContent(BaseModel):
    """Source text emitted verbatim after placeholder substitution."""

    model_config = _DEFINITION_CONFIG

    type: Literal["raw"] = "raw"
    value: str


class TypeAliasConfig(BaseModel):
    model_config = _DEFINITION_CONFIG

    name: str
    type: str = Field(..., description="Right-hand side of the alias.")
    exported: bool = True
    jsdoc: Optional[str] = None
    type_params: List[str] = Field(default_factory=list)


class TypeAliasContent(BaseModel):
    """``export type Name = ...``"""

    model_config = _DEFINITION_CONFIG

    type: Literal["typeAlias"] = "typeAlias"
    config: TypeAliasConfig


class ConstantConfig(BaseModel):
    model_config = _DEFINITION_CONFIG

    name: str
    value: str = Field(..., description="Initialiser expression.")
    type: Optional[str] = Field(default=None, description="Optional type annotation.")
    exported: bool = True
    jsdoc: Optional[str] = None


class ConstantContent(BaseModel):
    """``export const name = ...``"""

    model_config = _DEFINITION_CONFIG

    type: Literal["constant"] = "constant"
    config: ConstantConfig


class PropertyDefinition(BaseModel):
    """A property of an interface."""

    model_config = _DEFINITION_CONFIG

    name: str
    type: str
    readonly: bool = False
    optional: bool = False
    jsdoc: Optional[str] = None

    @property
    def signature(self) -> str:
        prefix: str = "readonly " if self.readonly else ""
        marker: str = "?" if self.optional else ""
        return f"{prefix}{self.name}{marker}: {self.type}"


class InterfaceConfig(BaseModel):
    model_config = _DEFINITION_CONFIG

    name: str
    properties: List[PropertyDefinition] = Field(default_factory=list)
    extends: List[str] = Field(default_factory=list)
    exported: bool = True
    jsdoc: Optional[str] = None


class InterfaceContent(BaseModel):
    """``export interface Name { ... }``"""

    model_config = _DEFINITION_CONFIG

    type: Literal["interface"] = "interface"
    config: InterfaceConfig


class FieldDefinition(BaseModel):
    """A readonly field carried by a tagged error."""

    model_config = _DEFINITION_CONFIG

    name: str
    type: str
    optional: bool = False

    @property
    def signature(self) -> str:
        marker: str = "?" if self.optional else ""
        return f"readonly {self.name}{marker}: {self.type}"


class TaggedErrorConfig(BaseModel):
    model_config = _DEFINITION_CONFIG

    class_name: str = Field(..., description="Error class name.")
    tag_name: Optional[str] = Field(
        default=None, description="``_tag`` value; defaults to the class name."
    )
    fields: List[FieldDefinition] = Field(default_factory=list)
    exported: bool = True
    jsdoc: Optional[str] = None


class TaggedErrorContent(BaseModel):
    """An Effect ``Data.TaggedError`` class declaration."""

    model_config = _DEFINITION_CONFIG

    type: Literal["taggedError"] = "taggedError"
    config: TaggedErrorConfig


class ParameterDefinition(BaseModel):
    model_config = _DEFINITION_CONFIG

    name: str
    type: str
    optional: bool = False

    @property
    def signature(self) -> str:
        marker: str = "?" if self.optional else ""
        return f"{self.name}{marker}: {self.type}"


class MethodSignature(BaseModel):
    """One operation of a service, rendered as a readonly function-typed member."""

    model_config = _DEFINITION_CONFIG

    name: str
    params: List[ParameterDefinition] = Field(default_factory=list)
    return_type: str = Field(..., description="Usually an Effect.Effect<...> type.")
    jsdoc: Optional[str] = None

    @property
    def signature(self) -> str:
        params: str = ", ".join(param.signature for param in self.params)
        return f"readonly {self.name}: ({params}) => {self.return_type}"


class LayerConfig(BaseModel):
    """A static layer member (``Live``, ``Test``, ...) of a Context.Tag class."""

    model_config = _DEFINITION_CONFIG

    name: str
    implementation: str = Field(..., description="Initialiser expression of the member.")
    jsdoc: Optional[str] = None


class ContextTagConfig(BaseModel):
    """
    An Effect ``Context.Tag`` service class.

    The service shape is either ``methods`` (written inline as an object type)
    or ``interface_name`` (a reference to an interface declared elsewhere).
    """

    model_config = _DEFINITION_CONFIG

    service_name: str
    tag_identifier: Optional[str] = Field(
        default=None, description="Tag key; defaults to the service name."
    )
    methods: List[MethodSignature] = Field(default_factory=list)
    interface_name: Optional[str] = None
    static_layers: List[LayerConfig] = Field(default_factory=list)
    exported: bool = True
    jsdoc: Optional[str] = None

    @model_validator(mode="after")
    def _one_service_shape(self) -> "ContextTagConfig":
        if self.interface_name and self.methods:
            raise ValueError("give either methods or interface_name, not both")
        return self


class ContextTagContent(BaseModel):
    """``export class Name extends Context.Tag("...")<Name, Shape>() { static layers }``"""

    model_config = _DEFINITION_CONFIG

    type: Literal["contextTag"] = "contextTag"
    config: ContextTagConfig


Content = Annotated[
    Union[
        RawContent,
        TypeAliasContent,
        ConstantContent,
        InterfaceContent,
        TaggedErrorContent,
        ContextTagContent,
    ],
    Field(discriminator="type"),
]

CONTENT_KINDS: List[str] = ["raw", "typeAlias", "constant", "interface", "taggedError", "contextTag"]


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class SectionDefinition(BaseModel):
    """
    One ordered block of the generated file.

    ``content`` may be a single content item or a list of them; a titled
    section is preceded by a banner comment when rendered.
    """

    model_config = _DEFINITION_CONFIG

    title: Optional[str] = None
    condition: Optional[str] = Field(
        default=None, description="Context flag that must be truthy to include the section."
    )
    content: Optional[Union[Content, List[Content]]] = None

    @property
    def contents(self) -> List[Any]:
        """The section's content items as a list (possibly empty)."""
        if self.content is None:
            return []
        if isinstance(self.content, list):
            return list(self.content)
        return [self.content]

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.contents

    def __repr__(self) -> str:
        return f"<Section {self.title or '(untitled)'}: {len(self.contents)} item(s)>"


class ConditionalContent(BaseModel):
    """Imports and sections added when a context flag is truthy."""

    model_config = _DEFINITION_CONFIG

    imports: List[ImportDefinition] = Field(default_factory=list)
    sections: List[SectionDefinition] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Template definition
# ---------------------------------------------------------------------------


class TemplateMeta(BaseModel):
    """Header fields of the generated file; each may contain placeholders."""

    model_config = _DEFINITION_CONFIG

    title: str
    description: str = ""
    module: Optional[str] = None


class TemplateDefinition(BaseModel):
    """Declarative description of one generated TypeScript file."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(..., description="Registry key, e.g. 'infra/errors'.")
    meta: TemplateMeta
    imports: List[ImportDefinition] = Field(default_factory=list)
    sections: List[SectionDefinition] = Field(default_factory=list)
    conditionals: Dict[str, ConditionalContent] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_structure(self) -> "TemplateDefinition":
        if not self.id or not self.id.strip():
            raise MalformedTemplateError("template id must be a non-empty string")

        for index, section in enumerate(self.sections):
            if section.is_empty:
                raise MalformedTemplateError(
                    f"section #{index} has neither a title nor content", self.id
                )
        for flag, block in self.conditionals.items():
            if not flag:
                raise MalformedTemplateError("conditional flag must be a non-empty string", self.id)
            for index, section in enumerate(block.sections):
                if section.is_empty:
                    raise MalformedTemplateError(
                        f"conditional '{flag}' section #{index} has neither a title nor content",
                        self.id,
                    )
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TemplateDefinition":
        """
        Build a definition from plain data (e.g. parsed YAML).

        Pydantic type errors are reported as ``MalformedTemplateError`` so
        callers only have one error type to handle.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            template_id: Optional[str] = None
            raw_id: Any = data.get("id") if isinstance(data, Mapping) else None
            if isinstance(raw_id, str) and raw_id:
                template_id = raw_id
            raise MalformedTemplateError(str(exc), template_id) from exc

    @property
    def library_type(self) -> str:
        """The part of ``id`` before the first ``/``."""
        return self.id.split("/", 1)[0]

    @property
    def file_type(self) -> str:
        """The part of ``id`` after the first ``/`` (the whole id if there is none)."""
        return self.id.split("/", 1)[-1]

    def __repr__(self) -> str:
        return (
            f"<TemplateDefinition {self.id}: {len(self.imports)} import(s), "
            f"{len(self.sections)} section(s), {len(self.conditionals)} conditional(s)>"
        )


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A rendered file, ready for the caller to persist."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(..., min_length=1, description="Path relative to the library root.")
    content: str = Field(..., description="Full file content.")
    template_id: str = Field(..., description="Definition the content was rendered from.")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return count_lines(self.content)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    @computed_field  # type: ignore[misc]
    @property
    def checksum(self) -> str:
        return sha256_hex(self.content)

    def __repr__(self) -> str:
        return f"<GeneratedFile {self.path} ({self.line_count} lines) from {self.template_id}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CONTENT_KINDS",
    "ConditionalContent",
    "ConstantConfig",
    "ConstantContent",
    "Content",
    "ContextTagConfig",
    "ContextTagContent",
    "FieldDefinition",
    "GeneratedFile",
    "ImportDefinition",
    "InterfaceConfig",
    "InterfaceContent",
    "LayerConfig",
    "LibraryType",
    "MethodSignature",
    "ParameterDefinition",
    "PropertyDefinition",
    "RawContent",
    "SectionDefinition",
    "TaggedErrorConfig",
    "TaggedErrorContent",
    "TemplateDefinition",
    "TemplateMeta",
    "TypeAliasConfig",
    "TypeAliasContent",
]

logger.debug("libgen.models loaded: %d public symbols.", len(__all__))
