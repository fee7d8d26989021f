# File: libgen/renderer.py
"""
libgen - Section/Import Renderer
=================================
Turns a ``TemplateDefinition`` plus a value map into the final file text by
driving a fresh :class:`~libgen.builder.SourceBuilder`:

    header doc comment
    <blank>
    import lines          (only when there are imports)
    <blank>
    [banner] section 1
    <blank>
    [banner] section 2
    <blank>

Each content kind has its own emitter, looked up by the content's ``type``
tag.  The output always ends with exactly one newline and is byte-identical
for identical inputs.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from libgen.builder import SourceBuilder, format_static_layer
from libgen.models import (
    ConstantContent,
    ContextTagContent,
    InterfaceContent,
    MethodSignature,
    PropertyDefinition,
    RawContent,
    SectionDefinition,
    TaggedErrorContent,
    TemplateDefinition,
    TypeAliasContent,
)
from libgen.resolver import resolve_definition

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.renderer")


# ---------------------------------------------------------------------------
# Content emitters
# ---------------------------------------------------------------------------


def _emit_raw(builder: SourceBuilder, content: RawContent) -> None:
    builder.add_raw(content.value)


def _emit_type_alias(builder: SourceBuilder, content: TypeAliasContent) -> None:
    cfg = content.config
    builder.add_type_alias(
        cfg.name, cfg.type, exported=cfg.exported, jsdoc=cfg.jsdoc, type_params=cfg.type_params
    )


def _emit_constant(builder: SourceBuilder, content: ConstantContent) -> None:
    cfg = content.config
    builder.add_const(cfg.name, cfg.value, cfg.type, exported=cfg.exported, jsdoc=cfg.jsdoc)


def _property_member(prop: PropertyDefinition) -> str:
    if prop.jsdoc:
        return f"/** {prop.jsdoc} */\n{prop.signature}"
    return prop.signature


def _emit_interface(builder: SourceBuilder, content: InterfaceContent) -> None:
    cfg = content.config
    builder.add_interface(
        cfg.name,
        [_property_member(prop) for prop in cfg.properties],
        extends=cfg.extends,
        exported=cfg.exported,
        jsdoc=cfg.jsdoc,
    )


def _emit_tagged_error(builder: SourceBuilder, content: TaggedErrorContent) -> None:
    cfg = content.config
    builder.add_tagged_error(
        cfg.class_name,
        cfg.tag_name,
        [field.signature for field in cfg.fields],
        exported=cfg.exported,
        jsdoc=cfg.jsdoc,
    )


def _method_member(method: MethodSignature) -> str:
    if method.jsdoc:
        return f"/** {method.jsdoc} */\n{method.signature}"
    return method.signature


def _emit_context_tag(builder: SourceBuilder, content: ContextTagContent) -> None:
    cfg = content.config
    builder.add_context_tag(
        cfg.service_name,
        cfg.tag_identifier,
        [_method_member(method) for method in cfg.methods],
        interface_name=cfg.interface_name,
        static_layers=[
            format_static_layer(layer.name, layer.implementation, layer.jsdoc)
            for layer in cfg.static_layers
        ],
        exported=cfg.exported,
        jsdoc=cfg.jsdoc,
    )


Emitter = Callable[[SourceBuilder, Any], None]

CONTENT_EMITTERS: Dict[str, Emitter] = {
    "raw": _emit_raw,
    "typeAlias": _emit_type_alias,
    "constant": _emit_constant,
    "interface": _emit_interface,
    "taggedError": _emit_tagged_error,
    "contextTag": _emit_context_tag,
}


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """
    Stateless renderer; one instance can serve any number of renders.

    ``render`` resolves placeholders first, so a missing value fails before a
    single line is emitted.  ``render_resolved`` skips resolution and is total.
    """

    def __init__(self, emitters: Mapping[str, Emitter] = CONTENT_EMITTERS) -> None:
        self._emitters: Dict[str, Emitter] = dict(emitters)

    def render(self, definition: TemplateDefinition, values: Mapping[str, Any]) -> str:
        """Resolve *definition* against *values* and render it."""
        resolved: TemplateDefinition = resolve_definition(definition, values)
        output: str = self.render_resolved(resolved)
        logger.debug("Rendered %s (%d chars).", definition.id, len(output))
        return output

    def render_resolved(self, definition: TemplateDefinition) -> str:
        """
        Render a definition whose strings are already final.

        Conditionals and ``condition`` fields are ignored here; use
        :meth:`render` to have them applied.
        """
        builder: SourceBuilder = SourceBuilder()
        meta = definition.meta
        builder.add_file_header(meta.title, meta.description, meta.module)
        builder.add_blank_line()

        if definition.imports:
            builder.add_imports(definition.imports)
            builder.add_blank_line()

        for section in definition.sections:
            self._render_section(builder, section)

        # The final blank line becomes the file's trailing newline.
        return builder.to_string()

    def _render_section(self, builder: SourceBuilder, section: SectionDefinition) -> None:
        if section.title:
            builder.add_section_comment(section.title)
        for index, content in enumerate(section.contents):
            if index:
                builder.add_blank_line()
            self._emitters[content.type](builder, content)
        builder.add_blank_line()


_DEFAULT_RENDERER: TemplateRenderer = TemplateRenderer()


def render_template(definition: TemplateDefinition, values: Mapping[str, Any]) -> str:
    """Render *definition* with the default renderer."""
    return _DEFAULT_RENDERER.render(definition, values)


__all__: List[str] = [
    "CONTENT_EMITTERS",
    "TemplateRenderer",
    "render_template",
]
