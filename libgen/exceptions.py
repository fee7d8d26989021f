# File: libgen/exceptions.py
"""
libgen - Error Taxonomy
========================
Every failure the engine can report derives from ``LibgenError``.  All of them
are raised synchronously by the call that discovered the problem; nothing is
retried and no partial output is ever returned alongside an error.

    LibgenError
    ├── InvalidNameError          naming input is not kebab-case
    ├── UnknownPlaceholderError   template references a value that was not supplied
    ├── MalformedTemplateError    definition breaks a structural invariant
    ├── TemplateNotFoundError     no template registered for a library/file type
    └── ContextValidationError    context variables are missing or unusable

None of these subclass ``ValueError``: pydantic wraps ``ValueError`` raised in
model validators into ``ValidationError``, and the definition models raise
``MalformedTemplateError`` from their validators.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class LibgenError(Exception):
    """Base class for all libgen errors."""


class InvalidNameError(LibgenError):
    """Raised when a library name is not lowercase kebab-case."""

    def __init__(self, name: object, reason: str = "") -> None:
        self.name: object = name
        self.reason: str = reason or "expected lowercase kebab-case matching ^[a-z][a-z0-9-]*$"
        super().__init__(f"Invalid name {name!r}: {self.reason}")


class UnknownPlaceholderError(LibgenError):
    """
    Raised when template text references a placeholder with no value.

    ``name`` is the first offending placeholder in scan order; ``names`` holds
    every missing placeholder found in the same call.
    """

    def __init__(
        self,
        name: str,
        template_id: Optional[str] = None,
        names: Optional[Sequence[str]] = None,
    ) -> None:
        self.name: str = name
        self.template_id: Optional[str] = template_id
        self.names: List[str] = list(names) if names else [name]
        where: str = f" in template '{template_id}'" if template_id else ""
        extra: str = ""
        if len(self.names) > 1:
            extra = f" (missing: {', '.join(self.names)})"
        super().__init__(f"Unknown placeholder '{{{name}}}'{where}{extra}")


class MalformedTemplateError(LibgenError):
    """Raised when a template definition violates a structural invariant."""

    def __init__(self, reason: str, template_id: Optional[str] = None) -> None:
        self.reason: str = reason
        self.template_id: Optional[str] = template_id
        prefix: str = f"Malformed template '{template_id}'" if template_id else "Malformed template"
        super().__init__(f"{prefix}: {reason}")


class TemplateNotFoundError(LibgenError):
    """Raised when the registry has no template for ``library_type/file_type``."""

    def __init__(self, library_type: str, file_type: str) -> None:
        self.library_type: str = library_type
        self.file_type: str = file_type
        self.key: str = f"{library_type}/{file_type}"
        super().__init__(f"Template not found: {self.key}")


class ContextValidationError(LibgenError):
    """
    Raised when a generation context lacks required variables, or when a
    variable is present but holds a value the template cannot use (*reason*
    says why).
    """

    def __init__(
        self, template_key: str, missing: Sequence[str], reason: Optional[str] = None
    ) -> None:
        self.template_key: str = template_key
        self.missing: List[str] = list(missing)
        self.reason: Optional[str] = reason
        if reason:
            message: str = f"Invalid context for '{template_key}': {reason}"
        else:
            message = (
                f"Missing required context variables for '{template_key}': "
                f"{', '.join(self.missing)}"
            )
        super().__init__(message)


__all__: List[str] = [
    "LibgenError",
    "InvalidNameError",
    "UnknownPlaceholderError",
    "MalformedTemplateError",
    "TemplateNotFoundError",
    "ContextValidationError",
]
