"""
tests/test_registry.py
Tests for libgen.registry and the document loader it builds on
(libgen.loader), including the built-in template set.
"""

from __future__ import annotations

import pathlib
from typing import Any, Callable, Dict

import pytest

from libgen.exceptions import MalformedTemplateError, TemplateNotFoundError
from libgen.loader import load_definitions_dir, load_template_document, parse_template_document
from libgen.models import LibraryType, TemplateDefinition
from libgen.registry import (
    BASE_CONTEXT,
    RegistryEntry,
    TemplateMetadata,
    TemplateRegistry,
    create_template_registry,
    get_template_registry,
)
from libgen.renderer import render_template

BUILTIN_KEYS = {
    "contract/index",
    "contract/ports",
    "data-access/errors",
    "data-access/layers",
    "feature/layers",
    "infra/config",
    "infra/errors",
    "infra/service",
    "provider/errors",
}


def _document(template_id: str = "infra/widget", value: str = "// {className}") -> Dict[str, Any]:
    return {
        "description": "Widget file",
        "template": {
            "id": template_id,
            "meta": {"title": "{className}"},
            "sections": [{"content": {"type": "raw", "value": value}}],
        },
    }


# ===========================================================================
# Loader
# ===========================================================================


class TestLoader:
    def test_load_yaml_document(self, write_yaml: Callable[[str, Any], pathlib.Path]) -> None:
        path = write_yaml("infra/widget.yaml", _document())
        document = load_template_document(path)
        assert document.template.id == "infra/widget"
        assert document.description == "Widget file"
        assert document.required_context is None
        assert document.optional_context == []

    def test_load_json_document(self, write_json: Callable[[str, Any], pathlib.Path]) -> None:
        path = write_json("widget.json", _document())
        assert load_template_document(path).template.id == "infra/widget"

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_template_document(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("template: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError):
            load_template_document(path)

    def test_top_level_must_be_mapping(self, write_yaml: Callable[[str, Any], pathlib.Path]) -> None:
        path = write_yaml("list.yaml", ["a", "b"])
        with pytest.raises(ValueError):
            load_template_document(path)

    def test_missing_template_block(self) -> None:
        with pytest.raises(MalformedTemplateError):
            parse_template_document({"description": "no template"})

    def test_malformed_template_block(self) -> None:
        data = _document()
        data["template"]["sections"].append({})
        with pytest.raises(MalformedTemplateError) as exc_info:
            parse_template_document(data)
        assert exc_info.value.template_id == "infra/widget"

    def test_unknown_document_key(self) -> None:
        data = _document()
        data["surprise"] = 1
        with pytest.raises(MalformedTemplateError):
            parse_template_document(data)

    def test_load_directory_sorted(self, write_yaml: Callable[[str, Any], pathlib.Path], tmp_path: pathlib.Path) -> None:
        write_yaml("provider/b.yaml", _document("provider/b"))
        write_yaml("infra/a.yaml", _document("infra/a"))
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        documents = load_definitions_dir(tmp_path)
        assert [d.template.id for d in documents] == ["infra/a", "provider/b"]

    def test_load_directory_missing(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_definitions_dir(tmp_path / "absent")


# ===========================================================================
# Registry mechanics
# ===========================================================================


class TestRegistration:
    def test_register_definition(self, empty_registry: TemplateRegistry) -> None:
        definition = TemplateDefinition.from_dict(_document()["template"])
        metadata = empty_registry.register_definition(definition, "Widget file")
        assert isinstance(metadata, TemplateMetadata)
        assert metadata.library_type == "infra"
        assert metadata.file_type == "widget"
        assert metadata.required_context == BASE_CONTEXT
        assert "infra/widget" in empty_registry
        assert empty_registry.has("infra/widget")
        assert len(empty_registry) == 1

    def test_duplicate_rejected(self, empty_registry: TemplateRegistry) -> None:
        definition = TemplateDefinition.from_dict(_document()["template"])
        empty_registry.register_definition(definition)
        with pytest.raises(MalformedTemplateError):
            empty_registry.register_definition(definition)
        empty_registry.register_definition(definition, "again", replace=True)
        assert empty_registry.require("infra/widget").metadata.description == "again"

    def test_undeclared_placeholder_rejected(self, empty_registry: TemplateRegistry) -> None:
        definition = TemplateDefinition.from_dict(_document(value="{mystery}")["template"])
        with pytest.raises(MalformedTemplateError) as exc_info:
            empty_registry.register_definition(definition)
        assert "mystery" in str(exc_info.value)
        assert "infra/widget" not in empty_registry

    def test_optional_context_declares_placeholder(self, empty_registry: TemplateRegistry) -> None:
        definition = TemplateDefinition.from_dict(_document(value="{mystery}")["template"])
        empty_registry.register_definition(definition, optional_context=["mystery"])
        assert empty_registry.has("infra/widget")

    def test_validation_can_be_disabled(self) -> None:
        registry = TemplateRegistry(validate=False)
        definition = TemplateDefinition.from_dict(_document(value="{mystery}")["template"])
        registry.register_definition(definition)
        assert registry.has("infra/widget")

    def test_register_factory(self, empty_registry: TemplateRegistry) -> None:
        calls = []

        def factory(context: Dict[str, Any]) -> TemplateDefinition:
            calls.append(context["fileName"])
            return TemplateDefinition.from_dict(_document("infra/dynamic")["template"])

        empty_registry.register_factory("infra/dynamic", factory, "Dynamic")
        entry = empty_registry.require("infra/dynamic")
        assert entry.is_factory
        assert calls == ["sample"]
        entry.definition_for({"fileName": "widget"})
        assert calls == ["sample", "widget"]

    def test_factory_id_mismatch(self) -> None:
        registry = TemplateRegistry(validate=False)
        registry.register_factory(
            "infra/dynamic", lambda _ctx: TemplateDefinition.from_dict(_document("infra/other")["template"])
        )
        with pytest.raises(MalformedTemplateError):
            registry.require("infra/dynamic").definition_for({})

    def test_entry_needs_exactly_one_source(self) -> None:
        metadata = TemplateMetadata(id="x/y", library_type="x", file_type="y")
        with pytest.raises(ValueError):
            RegistryEntry(metadata)

    def test_entry_stripped_of_its_source(self) -> None:
        metadata = TemplateMetadata(id="infra/dynamic", library_type="infra", file_type="dynamic")
        entry = RegistryEntry(
            metadata, factory=lambda _ctx: TemplateDefinition.from_dict(_document("infra/dynamic")["template"])
        )
        entry.factory = None
        with pytest.raises(MalformedTemplateError) as exc_info:
            entry.definition_for({})
        assert exc_info.value.template_id == "infra/dynamic"


class TestLookup:
    def test_require_missing(self, empty_registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            empty_registry.require("feature/service")
        assert exc_info.value.library_type == "feature"
        assert exc_info.value.file_type == "service"
        assert empty_registry.get("feature/service") is None

    def test_get_by_library_type(self, builtin_registry: TemplateRegistry) -> None:
        keys = [e.key for e in builtin_registry.get_by_library_type(LibraryType.INFRA)]
        assert set(keys) == {"infra/config", "infra/errors", "infra/service"}
        assert builtin_registry.get_by_library_type("nope") == []

    def test_validate_context(self, builtin_registry: TemplateRegistry, widget_context: Dict[str, Any]) -> None:
        assert builtin_registry.validate_context("infra/errors", widget_context).valid
        partial = {k: v for k, v in widget_context.items() if k not in ("scope", "projectName")}
        partial["className"] = None
        check = builtin_registry.validate_context("infra/errors", partial)
        assert not check.valid
        assert check.missing == ["className", "scope", "projectName"]

    def test_validate_context_unknown_key(self, empty_registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateNotFoundError):
            empty_registry.validate_context("x/y", {})


# ===========================================================================
# Built-in templates
# ===========================================================================


class TestBuiltinRegistry:
    def test_keys(self, builtin_registry: TemplateRegistry) -> None:
        assert set(builtin_registry.keys()) == BUILTIN_KEYS

    def test_shared_instance(self) -> None:
        assert get_template_registry() is get_template_registry()

    def test_without_factories(self) -> None:
        registry = create_template_registry(include_factories=False)
        assert not registry.has("infra/service")
        assert registry.has("infra/errors")

    @pytest.mark.parametrize("key", sorted(BUILTIN_KEYS))
    def test_every_builtin_renders(
        self, builtin_registry: TemplateRegistry, user_profile_context: Dict[str, Any], key: str
    ) -> None:
        definition = builtin_registry.require(key).definition_for(user_profile_context)
        out = render_template(definition, user_profile_context)
        assert out.startswith("/**\n")
        assert out.endswith("\n") and not out.endswith("\n\n")
        assert "{className}" not in out
        assert "{scope}" not in out

    def test_infra_errors(self, builtin_registry: TemplateRegistry, widget_context: Dict[str, Any]) -> None:
        definition = builtin_registry.require("infra/errors").definition_for(widget_context)
        out = render_template(definition, widget_context)
        assert 'import { Data } from "effect"' in out
        assert 'extends Data.TaggedError("WidgetNotFoundError")' in out

    def test_provider_errors_external_service(
        self, builtin_registry: TemplateRegistry, widget_context: Dict[str, Any]
    ) -> None:
        definition = builtin_registry.require("provider/errors").definition_for(widget_context)
        out = render_template(definition, {**widget_context, "externalService": "Stripe"})
        assert "Rate limit exceeded on Stripe" in out
        assert "export type WidgetServiceError =\n  | WidgetError\n" in out

    def test_contract_index_cqrs(
        self, builtin_registry: TemplateRegistry, user_profile_context: Dict[str, Any]
    ) -> None:
        definition = builtin_registry.require("contract/index").definition_for(user_profile_context)
        plain = render_template(definition, user_profile_context)
        cqrs = render_template(definition, {**user_profile_context, "includeCQRS": True})
        assert "CreateUserProfileCommand" not in plain
        assert "CreateUserProfileCommand" in cqrs
        assert cqrs.startswith(plain[: plain.index("// Errors")])

    def test_contract_ports_entity_source(
        self, builtin_registry: TemplateRegistry, user_profile_context: Dict[str, Any]
    ) -> None:
        definition = builtin_registry.require("contract/ports").definition_for(user_profile_context)
        out = render_template(definition, {**user_profile_context, "entityTypeSource": "@acme/types"})
        assert 'import type { UserProfile } from "@acme/types"' in out
        assert "export interface UserProfileFilters {" in out
        assert "UserProfileProjectionRepository" not in out

    def test_contract_ports_repository_tag(
        self, builtin_registry: TemplateRegistry, user_profile_context: Dict[str, Any]
    ) -> None:
        definition = builtin_registry.require("contract/ports").definition_for(user_profile_context)
        plain = render_template(definition, user_profile_context)
        cqrs = render_template(definition, {**user_profile_context, "includeCQRS": True})
        assert 'export class UserProfileRepository extends Context.Tag("UserProfileRepository")<\n' in plain
        assert (
            "    readonly findAll: (filters?: UserProfileFilters, pagination?: OffsetPaginationParams, "
            "sort?: SortOptions) => Effect.Effect<ReadonlyArray<UserProfile>, UserProfileRepositoryError>"
        ) in plain
        assert "  }\n>() {}\n" in plain
        assert 'extends Context.Tag("UserProfileProjectionRepository")<' in cqrs

    def test_data_access_errors_type_only_import(
        self, builtin_registry: TemplateRegistry, widget_context: Dict[str, Any]
    ) -> None:
        definition = builtin_registry.require("data-access/errors").definition_for(widget_context)
        out = render_template(definition, widget_context)
        assert 'import type { WidgetRepositoryError } from "@acme/contract-widget"' in out
        assert "export type WidgetDataAccessError = WidgetRepositoryError | WidgetInfrastructureError" in out
