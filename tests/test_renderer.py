"""
tests/test_renderer.py
Tests for libgen.renderer: exact layout of rendered files, per-kind content
emission, conditionals and failure behaviour.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from libgen.builder import format_banner
from libgen.exceptions import UnknownPlaceholderError
from libgen.models import (
    ContextTagConfig,
    ContextTagContent,
    LayerConfig,
    RawContent,
    SectionDefinition,
    TemplateDefinition,
    TemplateMeta,
)
from libgen.renderer import CONTENT_EMITTERS, TemplateRenderer, render_template

WIDGET_OUTPUT: str = (
    "/**\n"
    " * Widget Widget\n"
    " *\n"
    " * Widget for @acme\n"
    " *\n"
    " * @module @acme/widget\n"
    " */\n"
    "\n"
    'export const WidgetId = "widget";\n'
)


class TestWidgetExample:
    def test_exact_output(
        self, widget_definition_dict: Dict[str, Any], widget_values: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(widget_definition_dict)
        assert render_template(definition, widget_values) == WIDGET_OUTPUT

    def test_deterministic(
        self, widget_definition_dict: Dict[str, Any], widget_values: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(widget_definition_dict)
        renderer = TemplateRenderer()
        assert renderer.render(definition, widget_values) == renderer.render(definition, widget_values)

    def test_missing_value_produces_no_output(
        self, widget_definition_dict: Dict[str, Any], widget_values: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(widget_definition_dict)
        del widget_values["fileName"]
        with pytest.raises(UnknownPlaceholderError) as exc_info:
            render_template(definition, widget_values)
        assert exc_info.value.name == "fileName"
        assert exc_info.value.template_id == "widget/id"


class TestLayout:
    def test_header_only(self) -> None:
        definition = TemplateDefinition(id="x/y", meta=TemplateMeta(title="Empty"))
        assert render_template(definition, {}) == "/**\n * Empty\n */\n"

    def test_imports_block(self) -> None:
        definition = TemplateDefinition.from_dict(
            {
                "id": "x/y",
                "meta": {"title": "T"},
                "imports": [
                    {"from": "effect", "items": ["Data", "Effect"]},
                    {"from": "./types", "items": ["User"], "is_type_only": True},
                ],
                "sections": [{"content": {"type": "raw", "value": "const a = 1"}}],
            }
        )
        assert render_template(definition, {}) == (
            "/**\n * T\n */\n\n"
            'import { Data, Effect } from "effect"\n'
            'import type { User } from "./types"\n'
            "\n"
            "const a = 1\n"
        )

    def test_sections_separated_by_one_blank_line(self) -> None:
        definition = TemplateDefinition(
            id="x/y",
            meta=TemplateMeta(title="T"),
            sections=[
                SectionDefinition(title="First", content=RawContent(value="a")),
                SectionDefinition(content=[RawContent(value="b"), RawContent(value="c")]),
            ],
        )
        out = render_template(definition, {})
        assert out == (
            "/**\n * T\n */\n\n"
            f"{format_banner('First')}\n"
            "a\n"
            "\n"
            "b\n"
            "\n"
            "c\n"
        )

    def test_titled_section_without_content_renders_banner(self) -> None:
        definition = TemplateDefinition(
            id="x/y", meta=TemplateMeta(title="T"), sections=[SectionDefinition(title="Later")]
        )
        assert render_template(definition, {}).endswith(f"{format_banner('Later')}\n")

    def test_ends_with_single_newline(
        self, errors_definition_dict: Dict[str, Any], widget_context: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(errors_definition_dict)
        out = render_template(definition, widget_context)
        assert out.endswith("\n")
        assert not out.endswith("\n\n")


class TestContentKinds:
    def test_all_kinds_registered(self) -> None:
        assert set(CONTENT_EMITTERS) == {
            "raw",
            "typeAlias",
            "constant",
            "interface",
            "taggedError",
            "contextTag",
        }

    def test_errors_definition(
        self, errors_definition_dict: Dict[str, Any], widget_context: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(errors_definition_dict)
        out = render_template(definition, {**widget_context, "withMetrics": True})

        assert 'import { Counter } from "./metrics"' in out
        assert 'import type { WidgetId } from "./types"' in out
        assert (
            'export class WidgetNotFoundError extends Data.TaggedError("WidgetNotFoundError")<{\n'
            "  readonly id: WidgetId\n"
            "}> {}\n"
            "\n"
            "export type WidgetError = WidgetNotFoundError\n"
        ) in out
        assert 'export const widgetErrors = Counter.make("widget")\n' in out
        assert out.index(format_banner("Errors")) < out.index(format_banner("Metrics"))
        assert "{" + "className}" not in out

    def test_conditional_off(
        self, errors_definition_dict: Dict[str, Any], widget_context: Dict[str, Any]
    ) -> None:
        definition = TemplateDefinition.from_dict(errors_definition_dict)
        out = render_template(definition, widget_context)
        assert "./metrics" not in out
        assert "Metrics" not in out
        assert "debug build" not in out

    def test_interface_with_property_docs(self, widget_context: Dict[str, Any]) -> None:
        definition = TemplateDefinition.from_dict(
            {
                "id": "x/y",
                "meta": {"title": "T"},
                "sections": [
                    {
                        "content": {
                            "type": "interface",
                            "config": {
                                "name": "{className}Config",
                                "jsdoc": "Config",
                                "properties": [
                                    {"name": "timeout", "type": "number", "readonly": True, "jsdoc": "ms"},
                                    {"name": "name", "type": "string", "optional": True},
                                ],
                            },
                        }
                    }
                ],
            }
        )
        out = render_template(definition, widget_context)
        assert (
            "/**\n * Config\n */\n"
            "export interface WidgetConfig {\n"
            "  /** ms */\n"
            "  readonly timeout: number\n"
            "  name?: string\n"
            "}\n"
        ) in out

    def test_multiline_constant(self, widget_context: Dict[str, Any]) -> None:
        definition = TemplateDefinition.from_dict(
            {
                "id": "x/y",
                "meta": {"title": "T"},
                "sections": [
                    {
                        "content": {
                            "type": "constant",
                            "config": {
                                "name": "default{className}Config",
                                "type": "{className}Config",
                                "value": "{\n  timeout: 30_000\n}",
                            },
                        }
                    }
                ],
            }
        )
        out = render_template(definition, widget_context)
        assert "export const defaultWidgetConfig: WidgetConfig = {\n  timeout: 30_000\n}\n" in out

    def test_context_tag_inline_methods(self, widget_context: Dict[str, Any]) -> None:
        definition = TemplateDefinition.from_dict(
            {
                "id": "x/y",
                "meta": {"title": "T"},
                "sections": [
                    {
                        "content": {
                            "type": "contextTag",
                            "config": {
                                "service_name": "{className}Repository",
                                "jsdoc": "{className} port",
                                "methods": [
                                    {
                                        "name": "findById",
                                        "params": [{"name": "id", "type": "string"}],
                                        "return_type": "Effect.Effect<{className}>",
                                        "jsdoc": "Look up one",
                                    },
                                    {
                                        "name": "list",
                                        "params": [
                                            {"name": "limit", "type": "number", "optional": True},
                                            {"name": "offset", "type": "number", "optional": True},
                                        ],
                                        "return_type": "Effect.Effect<ReadonlyArray<{className}>>",
                                    },
                                ],
                            },
                        }
                    }
                ],
            }
        )
        out = render_template(definition, widget_context)
        assert (
            "/**\n * Widget port\n */\n"
            'export class WidgetRepository extends Context.Tag("WidgetRepository")<\n'
            "  WidgetRepository,\n"
            "  {\n"
            "    /** Look up one */\n"
            "    readonly findById: (id: string) => Effect.Effect<Widget>\n"
            "    readonly list: (limit?: number, offset?: number) => Effect.Effect<ReadonlyArray<Widget>>\n"
            "  }\n"
            ">() {}\n"
        ) in out

    def test_context_tag_interface_and_layers(self, widget_context: Dict[str, Any]) -> None:
        definition = TemplateDefinition(
            id="x/y",
            meta=TemplateMeta(title="T"),
            sections=[
                SectionDefinition(
                    content=ContextTagContent(
                        config=ContextTagConfig(
                            service_name="{className}Service",
                            tag_identifier="{scope}/{className}Service",
                            interface_name="{className}ServiceInterface",
                            static_layers=[
                                LayerConfig(
                                    name="Live",
                                    implementation="Layer.succeed(\n  this,\n  impl\n)",
                                    jsdoc="Live layer",
                                ),
                                LayerConfig(name="Test", implementation="this.Live"),
                            ],
                        )
                    )
                )
            ],
        )
        out = render_template(definition, widget_context)
        assert out.endswith(
            'export class WidgetService extends Context.Tag("@acme/WidgetService")'
            "<WidgetService, WidgetServiceInterface>() {\n"
            "  /**\n"
            "   * Live layer\n"
            "   */\n"
            "  static readonly Live = Layer.succeed(\n"
            "    this,\n"
            "    impl\n"
            "  )\n"
            "\n"
            "  static readonly Test = this.Live\n"
            "}\n"
        )

    def test_render_resolved_ignores_conditions(self) -> None:
        definition = TemplateDefinition(
            id="x/y",
            meta=TemplateMeta(title="T"),
            sections=[SectionDefinition(condition="never", content=RawContent(value="kept"))],
        )
        assert "kept" in TemplateRenderer().render_resolved(definition)
        assert "kept" not in TemplateRenderer().render(definition, {})
