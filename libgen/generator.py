# File: libgen/generator.py
"""
libgen - Library Generation Pipeline
=====================================
Connects naming, the registry and the renderer:

    name -> NamingVariants -> context -> registry entry -> definition -> render

The ``LibraryGenerator`` class is the programmatic entry point.  It returns
``GeneratedFile`` objects (path + content) and never touches the
filesystem; persisting them is up to the caller.

Error handling strategy:
    - ``generate_file`` raises on the first problem (missing template,
      missing context, unknown placeholder).
    - ``generate_library`` isolates failures per file: one bad template is
      recorded in the report and the remaining files are still produced.
    - A template that is requested but not registered is a warning.
    - An invalid library name aborts the batch with ``InvalidNameError``,
      since no context can be built without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from libgen.config import GeneratorConfig
from libgen.exceptions import ContextValidationError, LibgenError
from libgen.models import GeneratedFile, LibraryType, TemplateDefinition
from libgen.naming import check_scope
from libgen.registry import ContextValidation, RegistryEntry, TemplateRegistry, get_template_registry
from libgen.renderer import TemplateRenderer
from libgen.resolver import create_context_from_name
from libgen.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.generator")


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class GeneratorOptions(BaseModel):
    """One library generation request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Kebab-case library name, e.g. 'user-profile'.")
    library_type: LibraryType
    scope: Optional[str] = Field(default=None, description="Overrides the configured scope.")
    file_types: Optional[List[str]] = Field(
        default=None, description="File types to generate; all registered ones if omitted."
    )
    context: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("scope")
    @classmethod
    def _check_scope(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else check_scope(value)


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for one generated file."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Outcome of ``LibraryGenerator.generate_library()``."""

    success: bool = False
    library_name: str = ""
    library_type: str = ""

    files: List[GeneratedFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def file_map(self) -> Dict[str, str]:
        """Generated content keyed by relative path."""
        return {f.path: f.content for f in self.files}

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append("=" * 60)
        lines.append("  libgen - Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Library:          {self.library_type}-{self.library_name}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("-" * 60)

        if self.step_metrics:
            lines.append("  Files:")
            for step in self.step_metrics:
                icon: str = "+" if step.success else "x"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}".rstrip()
                )
        for warning in self.warnings:
            lines.append(f"  WARNING: {warning}")
        for error in self.errors:
            lines.append(f"  ERROR: {error}")
        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------

_DOMAIN_FILE_TYPES = frozenset({"errors", "events", "ports", "types", "config"})
_SERVER_FILE_TYPES = frozenset({"layers", "service"})


def output_path(file_type: str, file_name: str) -> str:
    """Path of a generated file relative to the library root."""
    if file_type in _DOMAIN_FILE_TYPES:
        return f"src/{file_name}/{file_type}.ts"
    if file_type in _SERVER_FILE_TYPES:
        return f"src/server/{file_type}.ts"
    if file_type == "index":
        return "src/index.ts"
    return f"src/{file_type}.ts"


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class LibraryGenerator:
    """
    Generates the files of one library from registered templates.

    Usage::

        generator = LibraryGenerator()
        report = generator.generate_library(
            GeneratorOptions(name="user-profile", library_type="contract")
        )
        for generated in report.files:
            print(generated.path)

    The generator is reusable and holds no per-call state.
    """

    def __init__(
        self,
        registry: Optional[TemplateRegistry] = None,
        config: Optional[GeneratorConfig] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self._registry: TemplateRegistry = (
            registry if registry is not None else get_template_registry()
        )
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._renderer: TemplateRenderer = renderer or TemplateRenderer()
        logger.debug(
            "LibraryGenerator initialised: %d template(s), scope=%s, strict=%s.",
            len(self._registry),
            self._config.scope,
            self._config.strict_context,
        )

    @property
    def registry(self) -> TemplateRegistry:
        return self._registry

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # -----------------------------------------------------------------
    # Context
    # -----------------------------------------------------------------

    def build_context(self, options: GeneratorOptions) -> Dict[str, Any]:
        """
        Build the value map for *options*.

        Precedence, lowest first: naming variants and derived names,
        built-in defaults, ``config.context``, ``options.context``.

        Raises:
            InvalidNameError: if ``options.name`` is not kebab-case.
        """
        library_type: str = options.library_type.value
        context: Dict[str, Any] = create_context_from_name(
            options.name, options.scope or self._config.scope, library_type
        )
        context["entityTypeSource"] = self._config.entity_type_source
        context["externalService"] = context["className"]
        context.update(self._config.context)
        context.update(options.context)
        return context

    # -----------------------------------------------------------------
    # Single file
    # -----------------------------------------------------------------

    def generate_file(
        self,
        library_type: Union[str, LibraryType],
        file_type: str,
        context: Mapping[str, Any],
    ) -> GeneratedFile:
        """
        Render one template.

        Raises:
            TemplateNotFoundError: if ``library_type/file_type`` is not registered.
            ContextValidationError: if required context is missing (strict mode).
            UnknownPlaceholderError: if the template uses a value not in *context*.
        """
        lib: str = library_type.value if isinstance(library_type, LibraryType) else library_type
        key: str = f"{lib}/{file_type}"
        entry: RegistryEntry = self._registry.require(key)

        if self._config.strict_context:
            check: ContextValidation = self._registry.validate_context(key, context)
            if not check.valid:
                raise ContextValidationError(key, check.missing)

        file_name: Any = context.get("fileName")
        if not file_name:
            raise ContextValidationError(key, ["fileName"])

        definition: TemplateDefinition = entry.definition_for(context)
        content: str = self._renderer.render(definition, context)
        return GeneratedFile(
            path=output_path(file_type, str(file_name)),
            content=content,
            template_id=definition.id,
        )

    # -----------------------------------------------------------------
    # Whole library
    # -----------------------------------------------------------------

    def generate_library(self, options: GeneratorOptions) -> GenerationReport:
        """Generate every requested (or registered) file of one library."""
        library_type: str = options.library_type.value
        report: GenerationReport = GenerationReport(
            library_name=options.name, library_type=library_type
        )

        with Timer(f"generate {library_type}-{options.name}") as total:
            context: Dict[str, Any] = self.build_context(options)
            file_types: List[str] = list(options.file_types or self._registered_file_types(library_type))

            for file_type in file_types:
                key: str = f"{library_type}/{file_type}"
                if not self._registry.has(key):
                    message: str = f"No template registered for {key}; skipped."
                    logger.warning(message)
                    report.warnings.append(message)
                    continue
                self._generate_step(library_type, file_type, context, report)

        report.total_elapsed_seconds = total.elapsed
        report.success = not report.errors
        logger.info(
            "Generated %s-%s: %d file(s), %d error(s), %d warning(s) in %.3fs.",
            library_type,
            options.name,
            report.total_files,
            len(report.errors),
            len(report.warnings),
            report.total_elapsed_seconds,
        )
        return report

    def _registered_file_types(self, library_type: str) -> List[str]:
        return [e.metadata.file_type for e in self._registry.get_by_library_type(library_type)]

    def _generate_step(
        self,
        library_type: str,
        file_type: str,
        context: Mapping[str, Any],
        report: GenerationReport,
    ) -> None:
        key: str = f"{library_type}/{file_type}"
        timer: Timer = Timer(key)
        try:
            with timer:
                generated: GeneratedFile = self.generate_file(library_type, file_type, context)
        except LibgenError as exc:
            logger.error("Generation of %s failed: %s", key, exc)
            report.errors.append(f"{key}: {exc}")
            report.step_metrics.append(GenerationStepMetric(key, False, timer.elapsed, "failed"))
            return

        report.files.append(generated)
        report.step_metrics.append(
            GenerationStepMetric(key, True, timer.elapsed, f"{generated.line_count} lines")
        )

    # -----------------------------------------------------------------
    # Whole domain
    # -----------------------------------------------------------------

    def generate_domain(
        self,
        name: str,
        library_types: Optional[Sequence[Union[str, LibraryType]]] = None,
        scope: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, GenerationReport]:
        """
        Generate one library per library type for the domain *name*.

        Defaults to ``config.library_types``.  Returns one report per library
        type, in the order generated.
        """
        types: Sequence[Union[str, LibraryType]] = library_types or self._config.library_types
        reports: Dict[str, GenerationReport] = {}
        for library_type in types:
            options: GeneratorOptions = GeneratorOptions(
                name=name,
                library_type=library_type,
                scope=scope,
                context=dict(context or {}),
            )
            reports[options.library_type.value] = self.generate_library(options)
        return reports


__all__: List[str] = [
    "GenerationReport",
    "GenerationStepMetric",
    "GeneratorOptions",
    "LibraryGenerator",
    "output_path",
]

logger.debug("libgen.generator loaded.")
