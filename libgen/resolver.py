# File: libgen/resolver.py
"""
libgen - Placeholder Substitution
==================================
Resolves ``{name}`` placeholders in template text against a caller-supplied
value map.

Rules:

- A placeholder is ``{`` + identifier + ``}``.  A brace preceded by ``$``
  belongs to a JavaScript template literal (``${id}``) and is left alone, as is
  anything with spaces inside the braces (``{ cause }``).
- Substitution is all-or-nothing: every placeholder in the input is checked
  before anything is replaced, and a single missing value raises
  :class:`~libgen.exceptions.UnknownPlaceholderError` with no output.
- Text without placeholders comes back unchanged.

:func:`resolve_definition` applies the same rules to a whole
``TemplateDefinition``: it selects the imports and sections that are active for
the value map, substitutes every string in them, and returns a new frozen
definition in declaration order.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from libgen.exceptions import UnknownPlaceholderError
from libgen.models import ImportDefinition, SectionDefinition, TemplateDefinition
from libgen.naming import DEFAULT_SCOPE, create_naming_variants

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.resolver")

# ---------------------------------------------------------------------------
# Placeholder pattern
# ---------------------------------------------------------------------------

PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"(?<!\$)\{([A-Za-z_][A-Za-z0-9_]*)\}")

Values = Mapping[str, Any]


# ---------------------------------------------------------------------------
# String-level helpers
# ---------------------------------------------------------------------------


def has_placeholders(text: str) -> bool:
    """True if *text* contains at least one ``{name}`` placeholder."""
    return PLACEHOLDER_RE.search(text) is not None


def extract_placeholders(text: str) -> List[str]:
    """Placeholder names in *text*, de-duplicated, in order of first appearance."""
    seen: Dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def collect_placeholders(obj: Any) -> List[str]:
    """
    Placeholder names found in every string reachable from *obj*.

    Walks mappings (values only), lists, tuples and pydantic models.
    """
    seen: Dict[str, None] = {}
    for text in _iter_strings(obj):
        for name in extract_placeholders(text):
            seen.setdefault(name, None)
    return list(seen)


def format_value(value: Any) -> str:
    """
    Text substituted for a placeholder value.

    Booleans become ``true``/``false`` and sequences are joined with ``", "``
    so a provider list can be dropped straight into generated code.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(item) for item in value)
    return str(value)


def _missing_names(names: Iterable[str], values: Values) -> List[str]:
    return [name for name in names if values.get(name) is None]


def interpolate(text: str, values: Values, template_id: Optional[str] = None) -> str:
    """
    Replace every ``{name}`` in *text* with ``values[name]``.

    Raises:
        UnknownPlaceholderError: if any placeholder has no value (or ``None``).
            Nothing is substituted in that case.
    """
    names: List[str] = extract_placeholders(text)
    if not names:
        return text
    missing: List[str] = _missing_names(names, values)
    if missing:
        raise UnknownPlaceholderError(missing[0], template_id, missing)
    return PLACEHOLDER_RE.sub(lambda match: format_value(values[match.group(1)]), text)


def interpolate_deep(obj: Any, values: Values, template_id: Optional[str] = None) -> Any:
    """
    Interpolate every string inside *obj*, returning a new structure.

    Dict keys are left as they are.  All placeholders across the whole
    structure are checked first, so a failure leaves nothing half-resolved.
    """
    missing: List[str] = _missing_names(collect_placeholders(obj), values)
    if missing:
        raise UnknownPlaceholderError(missing[0], template_id, missing)
    return _substitute(obj, values)


def _substitute(obj: Any, values: Values) -> Any:
    if isinstance(obj, str):
        return PLACEHOLDER_RE.sub(lambda match: format_value(values[match.group(1)]), obj)
    if isinstance(obj, Mapping):
        return {key: _substitute(value, values) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_substitute(item, values) for item in obj]
    if isinstance(obj, tuple):
        return tuple(_substitute(item, values) for item in obj)
    return obj


def _iter_strings(obj: Any) -> Iterable[str]:
    if isinstance(obj, str):
        yield obj
    elif hasattr(obj, "model_dump"):
        yield from _iter_strings(obj.model_dump())
    elif isinstance(obj, Mapping):
        for value in obj.values():
            yield from _iter_strings(value)
    elif isinstance(obj, (list, tuple)):
        for item in obj:
            yield from _iter_strings(item)


# ---------------------------------------------------------------------------
# Definition-level resolution
# ---------------------------------------------------------------------------


def is_condition_met(condition: Optional[str], values: Values) -> bool:
    """An absent condition always holds; otherwise the flag must be truthy."""
    if not condition:
        return True
    return bool(values.get(condition))


def select_active(
    definition: TemplateDefinition, values: Values
) -> Tuple[List[ImportDefinition], List[SectionDefinition]]:
    """
    The imports and sections to render for *values*, in output order.

    Base imports/sections come first, then those of each conditional block
    whose flag is truthy, in declaration order.  Items whose own
    ``condition`` is falsy are dropped.
    """
    imports: List[ImportDefinition] = list(definition.imports)
    sections: List[SectionDefinition] = list(definition.sections)

    for flag, block in definition.conditionals.items():
        if is_condition_met(flag, values):
            imports.extend(block.imports)
            sections.extend(block.sections)

    return (
        [imp for imp in imports if is_condition_met(imp.condition, values)],
        [section for section in sections if is_condition_met(section.condition, values)],
    )


def resolve_definition(definition: TemplateDefinition, values: Values) -> TemplateDefinition:
    """
    Return *definition* with conditions applied and every placeholder substituted.

    The result has no conditionals and no ``condition`` fields left, and keeps
    the declared import and section order.

    Raises:
        UnknownPlaceholderError: naming the first missing placeholder and the
            definition id.
    """
    imports, sections = select_active(definition, values)

    payload: Dict[str, Any] = {
        "meta": definition.meta.model_dump(),
        "imports": [imp.model_dump(exclude={"condition"}) for imp in imports],
        "sections": [
            section.model_dump(exclude={"condition"}, exclude_none=True) for section in sections
        ],
    }
    resolved: Dict[str, Any] = interpolate_deep(payload, values, template_id=definition.id)
    resolved["id"] = definition.id

    logger.debug(
        "Resolved %s: %d import(s), %d section(s).",
        definition.id,
        len(imports),
        len(sections),
    )
    return TemplateDefinition.model_validate(resolved)


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def create_context_from_name(
    name: str,
    scope: str = DEFAULT_SCOPE,
    library_type: str = "library",
    **extra: Any,
) -> Dict[str, Any]:
    """
    Build a complete value map from one kebab-case library name.

    Adds ``packageName`` (``{scope}/{libraryType}-{fileName}``),
    ``projectName`` and ``libraryType`` to the naming variants; *extra*
    entries are merged last.
    """
    variants = create_naming_variants(name, scope)
    context: Dict[str, Any] = variants.to_context()
    context.update(
        packageName=f"{scope}/{library_type}-{variants.file_name}",
        projectName=f"{library_type}-{variants.file_name}",
        libraryType=library_type,
    )
    context.update(extra)
    return context


__all__: List[str] = [
    "PLACEHOLDER_RE",
    "collect_placeholders",
    "create_context_from_name",
    "extract_placeholders",
    "format_value",
    "has_placeholders",
    "interpolate",
    "interpolate_deep",
    "is_condition_met",
    "resolve_definition",
    "select_active",
]
