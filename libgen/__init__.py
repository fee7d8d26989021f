# File: libgen/__init__.py
"""
libgen - Declarative TypeScript Library Generator
==================================================

Generates the TypeScript source files of a monorepo library (contract,
data-access, feature, infra, provider) from declarative template
definitions.  A definition describes one file as a header, an import list
and ordered sections; rendering substitutes ``{placeholder}`` values and
emits the text through a ``SourceBuilder``.

Architecture overview::

    ┌──────────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │ LibraryGenerator │────▶│ TemplateRegistry │────▶│   definitions/   │
    │  (generator.py)  │     │  (registry.py)   │     │    layers.py     │
    └────────┬─────────┘     └──────────────────┘     └──────────────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────┐     ┌──────────────────┐
    │ TemplateRenderer │────▶│     resolver     │     │  SourceBuilder   │
    │  (renderer.py)   │     │  (placeholders)  │     │   (builder.py)   │
    └──────────────────┘     └──────────────────┘     └──────────────────┘

Usage::

    from libgen import LibraryGenerator, GeneratorOptions
    report = LibraryGenerator().generate_library(
        GeneratorOptions(name="user-profile", library_type="contract")
    )
    for generated in report.files:
        print(generated.path, generated.line_count)

Public API:
    - LibraryGenerator      - Whole-library orchestrator
    - TemplateDefinition    - Declarative file model
    - render_template       - Render one definition with a value map
    - SourceBuilder         - Line-oriented TypeScript writer
    - create_naming_variants - className/fileName/propertyName/constantName
"""

from __future__ import annotations

from typing import List

__version__: str = "0.1.0"
__author__: str = "libgen contributors"
__license__: str = "MIT"

from libgen.exceptions import (
    ContextValidationError,
    InvalidNameError,
    LibgenError,
    MalformedTemplateError,
    TemplateNotFoundError,
    UnknownPlaceholderError,
)
from libgen.naming import NamingVariants, create_naming_variants, validate_name
from libgen.builder import SourceBuilder
from libgen.models import (
    ConditionalContent,
    GeneratedFile,
    ImportDefinition,
    LibraryType,
    SectionDefinition,
    TemplateDefinition,
    TemplateMeta,
)
from libgen.resolver import create_context_from_name, interpolate, resolve_definition
from libgen.renderer import TemplateRenderer, render_template
from libgen.validators import ValidationResult, validate_definition, validate_registry
from libgen.registry import (
    TemplateRegistry,
    create_template_registry,
    get_template_registry,
)
from libgen.config import GeneratorConfig, load_config
from libgen.generator import (
    GenerationReport,
    GeneratorOptions,
    LibraryGenerator,
    output_path,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: List[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Errors
    "LibgenError",
    "InvalidNameError",
    "UnknownPlaceholderError",
    "MalformedTemplateError",
    "TemplateNotFoundError",
    "ContextValidationError",
    # Naming
    "NamingVariants",
    "create_naming_variants",
    "validate_name",
    # Builder
    "SourceBuilder",
    # Models
    "ConditionalContent",
    "GeneratedFile",
    "ImportDefinition",
    "LibraryType",
    "SectionDefinition",
    "TemplateDefinition",
    "TemplateMeta",
    # Rendering
    "create_context_from_name",
    "interpolate",
    "resolve_definition",
    "TemplateRenderer",
    "render_template",
    # Validation
    "ValidationResult",
    "validate_definition",
    "validate_registry",
    # Registry
    "TemplateRegistry",
    "create_template_registry",
    "get_template_registry",
    # Generation
    "GeneratorConfig",
    "load_config",
    "GenerationReport",
    "GeneratorOptions",
    "LibraryGenerator",
    "output_path",
]
