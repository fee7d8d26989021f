# File: libgen/validators.py
"""
libgen - Template Definition Validators
========================================
Pydantic handles per-field structure of a ``TemplateDefinition`` and the
model validator enforces the hard invariants (non-empty id, no empty
sections).  This module adds **cross-entity checks** that need more context:
the context variables a template declares, the set of known library types,
and the other imports of the same file.

Every check returns a ``ValidationResult`` so callers can decide what is
fatal.  The registry treats errors as fatal and logs warnings.

Usage:
    from libgen.validators import validate_definition
    result = validate_definition(definition, required, optional)
    if not result:
        print(result.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
)

from libgen.models import ImportDefinition, LibraryType, SectionDefinition, TemplateDefinition
from libgen.resolver import collect_placeholders, create_context_from_name

if TYPE_CHECKING:
    from libgen.registry import TemplateRegistry

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {"error": "x", "warning": "!", "info": "i"}.get(item.level, "-")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for key, value in item.context.items():
                lines.append(f"       {key}: {value}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_TEMPLATE_ID_RE: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9-]*/[a-z][a-z0-9-]*$")


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _all_imports(definition: TemplateDefinition) -> List[ImportDefinition]:
    imports: List[ImportDefinition] = list(definition.imports)
    for block in definition.conditionals.values():
        imports.extend(block.imports)
    return imports


def _all_sections(definition: TemplateDefinition) -> List[SectionDefinition]:
    sections: List[SectionDefinition] = list(definition.sections)
    for block in definition.conditionals.values():
        sections.extend(block.sections)
    return sections


def validate_template_id(definition: TemplateDefinition) -> ValidationResult:
    """``id`` must look like ``libraryType/fileType`` with a known library type."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"template": definition.id}

    if not _TEMPLATE_ID_RE.match(definition.id):
        result.add_error(
            "INVALID_TEMPLATE_ID",
            f"Template id '{definition.id}' is not of the form 'library-type/file-type'.",
            ctx,
        )
        return result

    if definition.library_type not in LibraryType.values():
        result.add_warning(
            "UNKNOWN_LIBRARY_TYPE",
            f"Library type '{definition.library_type}' is not one of "
            f"{', '.join(LibraryType.values())}.",
            ctx,
        )
    return result


def validate_imports(definition: TemplateDefinition) -> ValidationResult:
    """Import sources must be non-empty and items must not repeat within a line."""
    result: ValidationResult = ValidationResult()

    for imp in _all_imports(definition):
        ctx: Dict[str, Any] = {"template": definition.id, "source": imp.source}

        if not imp.source.strip():
            result.add_error(
                "EMPTY_IMPORT_SOURCE",
                f"Template '{definition.id}' has an import with an empty source.",
                ctx,
            )

        seen: Set[str] = set()
        for item in imp.items:
            if item in seen:
                result.add_warning(
                    "DUPLICATE_IMPORT_ITEM",
                    f"'{item}' is imported more than once from '{imp.source}'.",
                    {**ctx, "item": item},
                )
            seen.add(item)

    return result


def validate_sections(definition: TemplateDefinition) -> ValidationResult:
    """A titled section without content renders as a bare banner."""
    result: ValidationResult = ValidationResult()

    for section in _all_sections(definition):
        if section.title and not section.contents:
            result.add_info(
                "EMPTY_SECTION",
                f"Section '{section.title}' in '{definition.id}' has no content.",
                {"template": definition.id, "section": section.title},
            )
    return result


def validate_context_usage(
    definition: TemplateDefinition,
    required_context: Iterable[str],
    optional_context: Iterable[str] = (),
) -> ValidationResult:
    """
    Every placeholder and condition flag must be a declared context variable.

    Undeclared placeholders are errors, because ``validate_context`` cannot
    report them before rendering.  Undeclared conditions only warn.
    """
    result: ValidationResult = ValidationResult()
    declared: Set[str] = set(required_context) | set(optional_context)

    for name in collect_placeholders(definition):
        if name not in declared:
            result.add_error(
                "UNDECLARED_PLACEHOLDER",
                f"Placeholder '{{{name}}}' in '{definition.id}' is not a declared "
                f"context variable.",
                {"template": definition.id, "placeholder": name},
            )

    conditions: List[str] = list(definition.conditionals)
    conditions.extend(imp.condition for imp in _all_imports(definition) if imp.condition)
    conditions.extend(sec.condition for sec in _all_sections(definition) if sec.condition)
    reported: Set[str] = set()
    for flag in conditions:
        if flag not in declared and flag not in reported:
            reported.add(flag)
            result.add_warning(
                "UNDECLARED_CONDITION",
                f"Condition '{flag}' in '{definition.id}' is not declared as optional context.",
                {"template": definition.id, "condition": flag},
            )
    return result


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def validate_definition(
    definition: TemplateDefinition,
    required_context: Optional[Sequence[str]] = None,
    optional_context: Sequence[str] = (),
) -> ValidationResult:
    """
    Run every definition-level check.

    Context usage is only checked when *required_context* is given.
    """
    result: ValidationResult = ValidationResult()

    checks: List[Callable[[TemplateDefinition], ValidationResult]] = [
        validate_template_id,
        validate_imports,
        validate_sections,
    ]
    for check in checks:
        logger.debug("Running validator %s on %s", check.__name__, definition.id)
        result.merge(check(definition))

    if required_context is not None:
        result.merge(validate_context_usage(definition, required_context, optional_context))

    logger.debug("Definition %s: %s", definition.id, result.summary())
    return result


def validate_registry(
    registry: "TemplateRegistry", sample_context: Optional[Mapping[str, Any]] = None
) -> ValidationResult:
    """
    Validate every entry of *registry*.

    Factory entries are built with *sample_context* (or a context derived
    from the name ``sample``) before being checked.
    """
    result: ValidationResult = ValidationResult()
    for entry in registry:
        meta = entry.metadata
        context: Mapping[str, Any] = sample_context or create_context_from_name(
            "sample", library_type=meta.library_type
        )
        definition: TemplateDefinition = entry.definition_for(context)
        result.merge(
            validate_definition(definition, meta.required_context, meta.optional_context)
        )

    if result.has_errors:
        logger.error("Registry validation FAILED. %s", result.summary())
    else:
        logger.info("Registry validation PASSED. %s", result.summary())
    return result


__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_context_usage",
    "validate_definition",
    "validate_imports",
    "validate_registry",
    "validate_sections",
    "validate_template_id",
]
