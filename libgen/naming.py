# File: libgen/naming.py
"""
libgen - Naming Variants
=========================
Derives the surface forms of a library name used by every template.

A generation request starts from one canonical kebab-case name such as
``"effect-metrics"``; templates then refer to ``{className}``
(``EffectMetrics``), ``{fileName}`` (``effect-metrics``), ``{propertyName}``
(``effectMetrics``), ``{constantName}`` (``EFFECT_METRICS``) and ``{scope}``.

The generic case converters accept any casing style and are memoised with
``functools.lru_cache`` since the same handful of names is converted over and
over during a multi-library run.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from libgen.exceptions import InvalidNameError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.naming")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

KEBAB_NAME_RE: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9-]*$")

_ACRONYM_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9]+")

DEFAULT_SCOPE: str = "@app"


# ---------------------------------------------------------------------------
# Cached case converters
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Split *name* into words regardless of its casing style.

    Hyphens, underscores and whitespace separate words; so do lower-to-upper
    transitions (``userProfile``) and the end of an acronym (``HTTPServer``).
    Digits stay attached to the preceding letters (``oauth2-client`` gives
    ``("oauth2", "client")``).
    """
    spaced: str = _ACRONYM_BOUNDARY_RE.sub(r"\1 \2", name)
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", spaced)
    spaced = _SEPARATOR_RE.sub(" ", spaced)
    return tuple(word for word in spaced.split() if word)


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

    Examples:
        >>> to_pascal_case("effect-metrics")
        'EffectMetrics'
        >>> to_pascal_case("user_profile")
        'UserProfile'
    """
    return "".join(_capitalize(word) for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("effect-metrics")
        'effectMetrics'
    """
    words: Tuple[str, ...] = _extract_words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(word) for word in words[1:])


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """Convert any string to snake_case."""
    return "_".join(word.lower() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """Convert any string to kebab-case (``UserProfile`` -> ``user-profile``)."""
    return "-".join(word.lower() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_constant_case(name: str) -> str:
    """Convert any string to SCREAMING_SNAKE_CASE."""
    return "_".join(word.upper() for word in _extract_words(name))


# ---------------------------------------------------------------------------
# NamingVariants
# ---------------------------------------------------------------------------


class NamingVariants(BaseModel):
    """
    The derived name forms for one generation request.

    Immutable: computed once by :func:`create_naming_variants` and passed to
    templates through :meth:`to_context`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    class_name: str = Field(..., alias="className", description="PascalCase name.")
    file_name: str = Field(..., alias="fileName", description="kebab-case name (the input).")
    property_name: str = Field(..., alias="propertyName", description="camelCase name.")
    constant_name: str = Field(
        ..., alias="constantName", description="SCREAMING_SNAKE_CASE name."
    )
    scope: str = Field(default=DEFAULT_SCOPE, description="Workspace namespace prefix.")

    def to_context(self) -> Dict[str, str]:
        """Return the placeholder map keyed by the camelCase context names."""
        return self.model_dump(by_alias=True)

    def __repr__(self) -> str:
        return f"<NamingVariants {self.file_name} -> {self.class_name} ({self.scope})>"


def validate_name(name: object) -> str:
    """Return *name* unchanged if it is lowercase kebab-case, else raise ``InvalidNameError``."""
    if not isinstance(name, str):
        raise InvalidNameError(name, f"expected a string, got {type(name).__name__}")
    if not name:
        raise InvalidNameError(name, "name must not be empty")
    if not KEBAB_NAME_RE.match(name):
        raise InvalidNameError(name)
    return name


def check_scope(scope: str) -> str:
    """Return *scope* if it looks like ``@name``, else raise ``ValueError``."""
    if not scope.startswith("@") or len(scope) < 2 or "/" in scope:
        raise ValueError(f"scope must look like '@name', got {scope!r}")
    return scope


def create_naming_variants(name: str, scope: str = DEFAULT_SCOPE) -> NamingVariants:
    """
    Derive :class:`NamingVariants` from a kebab-case *name*.

    ``className`` capitalises each hyphen segment and concatenates them;
    empty segments (``a--b``) contribute nothing.

    Raises:
        InvalidNameError: if *name* does not match ``^[a-z][a-z0-9-]*$``.
    """
    validate_name(name)
    segments: List[str] = [segment for segment in name.split("-") if segment]
    class_name: str = "".join(segment[0].upper() + segment[1:] for segment in segments)
    property_name: str = class_name[:1].lower() + class_name[1:]
    constant_name: str = "_".join(segment.upper() for segment in segments)

    variants: NamingVariants = NamingVariants(
        class_name=class_name,
        file_name=name,
        property_name=property_name,
        constant_name=constant_name,
        scope=scope,
    )
    logger.debug("Derived naming variants: %r", variants)
    return variants


__all__: List[str] = [
    "DEFAULT_SCOPE",
    "KEBAB_NAME_RE",
    "NamingVariants",
    "check_scope",
    "create_naming_variants",
    "validate_name",
    "to_pascal_case",
    "to_camel_case",
    "to_snake_case",
    "to_kebab_case",
    "to_constant_case",
]
