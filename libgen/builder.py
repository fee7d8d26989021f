# File: libgen/builder.py
"""
libgen - SourceBuilder (fluent TypeScript emitter)
===================================================
The primitive every generated file goes through.  A ``SourceBuilder`` owns a
single append-only list of lines; each ``add_*`` method appends zero or more
lines and returns the builder so calls can be chained.  ``to_string()`` joins
the buffer with ``"\\n"`` and can be called any number of times.

The builder emits text, it does not check it: callers are responsible for the
syntax of whatever they pass to :meth:`SourceBuilder.add_raw`.

Usage::

    code = (
        SourceBuilder()
        .add_file_header("Widget Errors", "Errors for the widget service.", module="@acme/widget")
        .add_blank_line()
        .add_import("effect", "Data")
        .add_blank_line()
        .add_section_comment("Errors")
        .add_type_alias("WidgetError", "WidgetNotFound | WidgetInvalid")
        .to_string()
    )
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.builder")

# ---------------------------------------------------------------------------
# Formatting constants
# ---------------------------------------------------------------------------

BANNER_WIDTH: int = 80
_BANNER_FILL: str = "="
_INDENT: str = "  "


class ImportLike(Protocol):
    """Anything shaped like an import entry (``ImportDefinition`` satisfies it)."""

    source: str
    items: Sequence[str]
    is_type_only: bool


def format_import(source: str, items: Sequence[str], type_only: bool = False) -> str:
    """
    Render a single ES module import statement.

    Examples:
        >>> format_import("effect", ["Effect", "Context"])
        'import { Effect, Context } from "effect"'
        >>> format_import("./types", ["User"], type_only=True)
        'import type { User } from "./types"'
        >>> format_import("./polyfill", [])
        'import "./polyfill"'
    """
    if not items:
        return f'import "{source}"'
    keyword: str = "import type" if type_only else "import"
    return f'{keyword} {{ {", ".join(items)} }} from "{source}"'


def format_banner(text: str, width: int = BANNER_WIDTH) -> str:
    """Single-line section banner padded with ``=`` to *width* columns."""
    head: str = f"// {_BANNER_FILL * 2} {text} "
    return head + _BANNER_FILL * max(2, width - len(head))


def format_static_layer(name: str, implementation: str, jsdoc: Optional[str] = None) -> str:
    """
    One ``static readonly <name> = <implementation>`` class member, unindented.

    Examples:
        >>> format_static_layer("Test", "this.Live")
        'static readonly Test = this.Live'
    """
    member: str = f"static readonly {name} = {implementation}"
    if not jsdoc:
        return member
    doc: List[str] = ["/**", *(f" * {line}".rstrip() for line in jsdoc.split("\n")), " */"]
    return "\n".join([*doc, member])


def indent_block(text: str, indent: str = _INDENT) -> str:
    """Prefix every non-empty line of *text* with *indent*."""
    return "\n".join(_indent_members([text], indent))


class SourceBuilder:
    """
    Imperative, write-then-read-many emitter for TypeScript source text.

    Nothing is shared between instances; build a fresh one per generated file.
    """

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        self._lines: List[str] = []

    # -----------------------------------------------------------------
    # Document structure
    # -----------------------------------------------------------------

    def add_file_header(
        self,
        title: str,
        description: str = "",
        module: Optional[str] = None,
        since: Optional[str] = None,
        see: Sequence[str] = (),
    ) -> "SourceBuilder":
        """
        Append the file's leading documentation comment.

        *description* may span several lines; each line gets its own `` * ``
        prefix.  Tag lines (``@module``, ``@since``, ``@see``) follow after a
        separator line, only when present.
        """
        block: List[str] = ["/**", f" * {title}".rstrip()]
        if description:
            block.append(" *")
            block.extend(f" * {line}".rstrip() for line in description.split("\n"))

        tags: List[str] = []
        if module:
            tags.append(f" * @module {module}")
        if since:
            tags.append(f" * @since {since}")
        tags.extend(f" * @see {ref}" for ref in see)
        if tags:
            block.append(" *")
            block.extend(tags)

        block.append(" */")
        self._lines.extend(block)
        return self

    def add_imports(self, entries: Iterable[ImportLike]) -> "SourceBuilder":
        """Append one import statement per entry, in the given order."""
        for entry in entries:
            self._lines.append(format_import(entry.source, list(entry.items), entry.is_type_only))
        return self

    def add_import(self, source: str, name: str, type_only: bool = False) -> "SourceBuilder":
        """Append a single-name import statement."""
        self._lines.append(format_import(source, [name], type_only))
        return self

    def add_blank_line(self) -> "SourceBuilder":
        """Append exactly one empty line."""
        self._lines.append("")
        return self

    def add_section_comment(self, text: str) -> "SourceBuilder":
        """Append a single-line banner comment."""
        self._lines.append(format_banner(text))
        return self

    def add_comment(self, text: str, style: str = "line") -> "SourceBuilder":
        """
        Append a comment in one of three styles.

        ``line`` prefixes every line of *text* with ``//``; ``section`` is
        :meth:`add_section_comment`; ``block`` is :meth:`add_jsdoc`.
        """
        if style == "section":
            return self.add_section_comment(text)
        if style == "block":
            return self.add_jsdoc(text)
        if style != "line":
            raise ValueError(f"Unknown comment style: {style!r}")
        self._lines.extend(f"// {line}".rstrip() for line in text.split("\n"))
        return self

    def add_jsdoc(self, text: str, indent: str = "") -> "SourceBuilder":
        """Append a ``/** ... */`` block, one `` * `` line per line of *text*."""
        self._lines.append(f"{indent}/**")
        self._lines.extend(f"{indent} * {line}".rstrip() for line in text.split("\n"))
        self._lines.append(f"{indent} */")
        return self

    def add_raw(self, text: str) -> "SourceBuilder":
        """Append *text* verbatim, split on its existing newlines."""
        self._lines.extend(text.split("\n"))
        return self

    # -----------------------------------------------------------------
    # Declarations
    # -----------------------------------------------------------------

    def add_type_alias(
        self,
        name: str,
        type_expr: str,
        exported: bool = True,
        jsdoc: Optional[str] = None,
        type_params: Sequence[str] = (),
    ) -> "SourceBuilder":
        """
        Append ``[export ]type Name<T> = <type_expr>`` with an optional doc comment.

        A multi-line *type_expr* (typically a union, one ``| Member`` per line)
        starts on the line after the ``=`` and is indented one level.
        """
        if jsdoc:
            self.add_jsdoc(jsdoc)
        params: str = f"<{', '.join(type_params)}>" if type_params else ""
        head: str = f"{_export(exported)}type {name}{params} ="
        if "\n" not in type_expr:
            self._lines.append(f"{head} {type_expr}")
            return self
        self._lines.append(head)
        self._lines.extend(_indent_members([type_expr]))
        return self

    def add_const(
        self,
        name: str,
        value: str,
        type_annotation: Optional[str] = None,
        exported: bool = True,
        jsdoc: Optional[str] = None,
    ) -> "SourceBuilder":
        """Append ``[export ]const name[: T] = <value>`` with an optional doc comment."""
        if jsdoc:
            self.add_jsdoc(jsdoc)
        annotation: str = f": {type_annotation}" if type_annotation else ""
        return self.add_raw(f"{_export(exported)}const {name}{annotation} = {value}")

    def add_interface(
        self,
        name: str,
        members: Sequence[str] = (),
        extends: Sequence[str] = (),
        exported: bool = True,
        jsdoc: Optional[str] = None,
    ) -> "SourceBuilder":
        """
        Append an interface declaration.

        Each entry of *members* is one member (possibly multi-line, e.g. with
        its own doc comment); every line is indented one level.
        """
        if jsdoc:
            self.add_jsdoc(jsdoc)
        clause: str = f" extends {', '.join(extends)}" if extends else ""
        if not members:
            self._lines.append(f"{_export(exported)}interface {name}{clause} {{}}")
            return self
        self._lines.append(f"{_export(exported)}interface {name}{clause} {{")
        self._lines.extend(_indent_members(members))
        self._lines.append("}")
        return self

    def add_tagged_error(
        self,
        class_name: str,
        tag: Optional[str] = None,
        fields: Sequence[str] = (),
        exported: bool = True,
        jsdoc: Optional[str] = None,
    ) -> "SourceBuilder":
        """
        Append an Effect ``Data.TaggedError`` class.

        *fields* are already formatted members such as ``readonly message: string``.
        """
        if jsdoc:
            self.add_jsdoc(jsdoc)
        head: str = f'{_export(exported)}class {class_name} extends Data.TaggedError("{tag or class_name}")'
        if not fields:
            self._lines.append(f"{head}<{{}}> {{}}")
            return self
        self._lines.append(f"{head}<{{")
        self._lines.extend(_indent_members(fields))
        self._lines.append("}> {}")
        return self

    def add_context_tag(
        self,
        service_name: str,
        tag_identifier: Optional[str] = None,
        methods: Sequence[str] = (),
        interface_name: Optional[str] = None,
        static_layers: Sequence[str] = (),
        exported: bool = True,
        jsdoc: Optional[str] = None,
    ) -> "SourceBuilder":
        """
        Append an Effect ``Context.Tag`` service class.

        The service shape is *interface_name* when given, otherwise an inline
        object type with one line per entry of *methods* (already formatted,
        e.g. ``readonly get: (id: string) => Effect.Effect<User>``).
        *static_layers* are class members from :func:`format_static_layer`;
        they are separated by blank lines inside the class body.
        """
        if jsdoc:
            self.add_jsdoc(jsdoc)
        head: str = (
            f"{_export(exported)}class {service_name} extends "
            f'Context.Tag("{tag_identifier or service_name}")'
        )
        # An empty class body closes on the opening line.
        close: str = "" if static_layers else "}"
        if interface_name:
            self._lines.append(f"{head}<{service_name}, {interface_name}>() {{{close}")
        elif methods:
            self._lines.extend([f"{head}<", f"{_INDENT}{service_name},", f"{_INDENT}{{"])
            self._lines.extend(_indent_members(methods, _INDENT * 2))
            self._lines.extend([f"{_INDENT}}}", f">() {{{close}"])
        else:
            self._lines.append(f"{head}<{service_name}, {{}}>() {{{close}")

        if not static_layers:
            return self
        for index, layer in enumerate(static_layers):
            if index:
                self._lines.append("")
            self._lines.extend(_indent_members([layer]))
        self._lines.append("}")
        return self

    # -----------------------------------------------------------------
    # Buffer access
    # -----------------------------------------------------------------

    @property
    def lines(self) -> List[str]:
        """A copy of the emitted lines."""
        return list(self._lines)

    def clear(self) -> "SourceBuilder":
        """Drop everything emitted so far."""
        self._lines.clear()
        return self

    def to_string(self) -> str:
        """Join the emitted lines with newlines.  Repeatable; does not consume the buffer."""
        return "\n".join(self._lines)

    def build(self) -> str:
        """Alias of :meth:`to_string`."""
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"<SourceBuilder {len(self._lines)} lines>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _export(exported: bool) -> str:
    return "export " if exported else ""


def _indent_members(members: Iterable[str], indent: str = _INDENT) -> List[str]:
    out: List[str] = []
    for member in members:
        out.extend(f"{indent}{line}".rstrip() for line in member.split("\n"))
    return out


__all__: List[str] = [
    "BANNER_WIDTH",
    "ImportLike",
    "SourceBuilder",
    "format_banner",
    "format_import",
    "format_static_layer",
    "indent_block",
]
