# File: libgen/layers.py
"""
libgen - Layer Composition Factories
=====================================
Templates whose shape depends on the generation context: how many
infrastructure packages are imported, which sub-module layers are merged,
which static layers a service exposes.

Each factory takes the generation context and returns an ordinary
``TemplateDefinition``.  ``Layer.mergeAll`` bodies are assembled with a
:class:`~libgen.builder.SourceBuilder` and embedded as raw content; static
layers become ``LayerConfig`` members of a ``contextTag`` content item.
List-valued context entries (``subModules``, ``infrastructureServices``) and
``layerType`` are checked, and bad values raise ``ContextValidationError``.
The returned definitions still contain ``{className}``/``{scope}``/``{fileName}``
placeholders and go through the renderer like any static template.

Factories registered by :mod:`libgen.registry`:

- ``data-access/layers``  -> :func:`data_access_layers_definition`
- ``feature/layers``      -> :func:`feature_layers_definition`
- ``infra/service``       -> :func:`infra_service_definition`
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from libgen.builder import SourceBuilder, format_static_layer, indent_block
from libgen.exceptions import ContextValidationError
from libgen.models import (
    ContextTagConfig,
    ContextTagContent,
    ImportDefinition,
    InterfaceConfig,
    InterfaceContent,
    LayerConfig,
    PropertyDefinition,
    RawContent,
    SectionDefinition,
    TemplateDefinition,
    TemplateMeta,
)
from libgen.naming import create_naming_variants

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("libgen.layers")

# ---------------------------------------------------------------------------
# Infrastructure presets
# ---------------------------------------------------------------------------

INFRASTRUCTURE_SERVICES: Dict[str, Tuple[str, ...]] = {
    "data-access": ("DatabaseService", "LoggingService", "MetricsService", "CacheService"),
    "feature": (
        "DatabaseService",
        "LoggingService",
        "MetricsService",
        "CacheService",
        "PubsubService",
        "QueueService",
    ),
    "provider": ("LoggingService",),
}

# Services that ship together in one infra package
_CONSOLIDATED_PACKAGES: Dict[str, str] = {
    "LoggingService": "observability",
    "MetricsService": "observability",
}

LAYER_METHODS: Tuple[str, ...] = ("succeed", "effect", "sync")

DefinitionFactory = Callable[[Mapping[str, Any]], TemplateDefinition]


def infra_package_name(service: str) -> str:
    """
    Infra package that exports *service*.

    Examples:
        >>> infra_package_name("DatabaseService")
        'database'
        >>> infra_package_name("MetricsService")
        'observability'
    """
    if service in _CONSOLIDATED_PACKAGES:
        return _CONSOLIDATED_PACKAGES[service]
    base: str = service[: -len("Service")] if service.endswith("Service") else service
    return base.lower()


def group_services_by_package(services: Sequence[str]) -> Dict[str, List[str]]:
    """Map infra package -> sorted service names, packages in first-seen order."""
    grouped: Dict[str, List[str]] = {}
    for service in services:
        grouped.setdefault(infra_package_name(service), []).append(service)
    return {package: sorted(names) for package, names in grouped.items()}


def infra_imports(services: Sequence[str]) -> List[ImportDefinition]:
    """One import per infra package, e.g. ``{scope}/infra-observability``."""
    return [
        ImportDefinition(source=f"{{scope}}/infra-{package}", items=names)
        for package, names in group_services_by_package(services).items()
    ]


# ---------------------------------------------------------------------------
# Builder-driven bodies
# ---------------------------------------------------------------------------


def _merge_all(
    builder: SourceBuilder,
    name: str,
    members: Sequence[str],
    jsdoc: str,
    provide: Optional[str] = None,
) -> None:
    builder.add_jsdoc(jsdoc)
    body: str = ",\n  ".join(members)
    tail: str = f".pipe(Layer.provide({provide}))" if provide else ""
    builder.add_raw(f"export const {name} = Layer.mergeAll(\n  {body}\n){tail}")


def build_infrastructure_layers(services: Sequence[str], include_dev: bool = True) -> str:
    """``InfrastructureLive``/``Test``/``Dev`` merging every service's layer."""
    builder: SourceBuilder = SourceBuilder()
    variants: List[Tuple[str, str]] = [
        ("Live", "Production infrastructure."),
        ("Test", "Testing infrastructure with in-memory implementations."),
    ]
    if include_dev:
        variants.append(("Dev", "Development infrastructure with local services."))

    for index, (variant, doc) in enumerate(variants):
        if index:
            builder.add_blank_line()
        _merge_all(
            builder,
            f"Infrastructure{variant}",
            [f"{service}.{variant}" for service in services],
            f"{variant} Infrastructure Layer\n\n{doc}",
        )
    return builder.to_string()


def build_domain_layers(
    domain_services: Sequence[str],
    layer_prefix: str,
    sub_module_layers: Sequence[str] = (),
    include_dev: bool = True,
) -> str:
    """
    ``{className}<prefix>Live``/``Test``/``Dev`` layers.

    Domain services contribute their ``.Live`` layer to every variant (tests
    swap infrastructure, not the domain); sub-module layer names are given
    without a suffix and get ``Live``/``Test`` appended.
    """
    builder: SourceBuilder = SourceBuilder()
    variants: List[str] = ["Live", "Test"] + (["Dev"] if include_dev else [])

    for index, variant in enumerate(variants):
        if index:
            builder.add_blank_line()
        members: List[str] = [f"{service}.Live" for service in domain_services]
        suffix: str = "Test" if variant == "Test" else "Live"
        members.extend(f"{layer}{suffix}" for layer in sub_module_layers)
        _merge_all(
            builder,
            f"{{className}}{layer_prefix}{variant}",
            members,
            f"{{className}} {layer_prefix} {variant} Layer\n\n"
            f"Domain services composed with Infrastructure{variant}.",
            provide=f"Infrastructure{variant}",
        )
    return builder.to_string()


def static_layer_configs(
    class_ref: str,
    layer_type: str,
    live_impl: str,
    test_impl: Optional[str] = None,
    dev_impl: Optional[str] = None,
    test_via_dependencies: bool = False,
    env_var: str = "NODE_ENV",
) -> List[LayerConfig]:
    """
    Static ``Live``/``Test``/``Dev``/``Auto`` members of a Context.Tag class.

    Implementations are unindented; the Context.Tag emitter indents them into
    the class body.

    Raises:
        ValueError: if *layer_type* is not one of ``succeed``, ``effect``, ``sync``.
    """
    if layer_type not in LAYER_METHODS:
        raise ValueError(f"Unknown layer type {layer_type!r}; expected one of {LAYER_METHODS}")

    layers: List[LayerConfig] = [
        LayerConfig(
            name="Live",
            implementation=f"Layer.{layer_type}(\n  this,\n  {live_impl}\n)",
            jsdoc="Live layer - production implementation",
        )
    ]

    if test_via_dependencies:
        layers.append(
            LayerConfig(
                name="Test",
                implementation="this.Live",
                jsdoc="Test layer - same as Live\n\nTests swap the infrastructure layers instead.",
            )
        )
    else:
        test_method: str = "sync" if layer_type == "effect" else layer_type
        layers.append(
            LayerConfig(
                name="Test",
                implementation=f"Layer.{test_method}(\n  this,\n  {test_impl or live_impl}\n)",
                jsdoc="Test layer - in-memory implementation",
            )
        )

    dev: str = dev_impl or (
        "Effect.gen(function*() {\n"
        f"    const live = yield* {class_ref}.Live.pipe(\n"
        "      Layer.build,\n"
        f"      Effect.map(Context.unsafeGet({class_ref}))\n"
        "    )\n"
        f'    yield* Effect.logDebug("{class_ref} running with Dev layer")\n'
        "    return live\n"
        "  })"
    )
    layers.append(
        LayerConfig(
            name="Dev",
            implementation=f"Layer.effect(\n  this,\n  {dev}\n)",
            jsdoc="Dev layer - Live with extra logging",
        )
    )

    layers.append(
        LayerConfig(
            name="Auto",
            implementation=(
                "Layer.suspend(() => {\n"
                f"  switch (process.env.{env_var}) {{\n"
                '    case "test":\n'
                f"      return {class_ref}.Test\n"
                '    case "development":\n'
                f"      return {class_ref}.Dev\n"
                "    default:\n"
                f"      return {class_ref}.Live\n"
                "  }\n"
                "})"
            ),
            jsdoc=f"Auto layer - selected from process.env.{env_var}",
        )
    )
    return layers


def build_static_layers(
    class_ref: str,
    layer_type: str,
    live_impl: str,
    test_impl: Optional[str] = None,
    dev_impl: Optional[str] = None,
    test_via_dependencies: bool = False,
    env_var: str = "NODE_ENV",
) -> str:
    """
    :func:`static_layer_configs` rendered as text, indented for placement
    inside a class body.

    Raises:
        ValueError: if *layer_type* is not one of ``succeed``, ``effect``, ``sync``.
    """
    layers: List[LayerConfig] = static_layer_configs(
        class_ref, layer_type, live_impl, test_impl, dev_impl, test_via_dependencies, env_var
    )
    return "\n\n".join(
        indent_block(format_static_layer(layer.name, layer.implementation, layer.jsdoc))
        for layer in layers
    )


# ---------------------------------------------------------------------------
# Definition factories
# ---------------------------------------------------------------------------


def _context_names(context: Mapping[str, Any], key: str, template_key: str) -> List[str]:
    """
    ``context[key]`` as a list of strings (empty when absent).

    Raises:
        ContextValidationError: if the value is not a list or tuple of strings.
    """
    value: Any = context.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ContextValidationError(
            template_key,
            [key],
            reason=f"'{key}' must be a list of names, got {value!r}",
        )
    return list(value)


def _services_for(context: Mapping[str, Any], library_type: str) -> List[str]:
    override: List[str] = _context_names(
        context, "infrastructureServices", f"{library_type}/layers"
    )
    return override or list(INFRASTRUCTURE_SERVICES[library_type])


def _sub_module_classes(context: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """(fileName, className) for every entry of ``context['subModules']``."""
    names: List[str] = _context_names(context, "subModules", "feature/layers")
    return [(name, create_naming_variants(name).class_name) for name in names]


def data_access_layers_definition(context: Mapping[str, Any]) -> TemplateDefinition:
    """``data-access/layers``: repository layers over the data-access infrastructure."""
    services: List[str] = _services_for(context, "data-access")
    logger.debug("Building data-access/layers with %d infra service(s).", len(services))

    return TemplateDefinition(
        id="data-access/layers",
        meta=TemplateMeta(
            title="{className} Data Access Layers",
            description=(
                "Layer compositions for {className} data access.\n\n"
                "- Live: production infrastructure\n"
                "- Test: in-memory infrastructure\n"
                "- Dev: local infrastructure with verbose logging"
            ),
            module="{scope}/data-access-{fileName}/layers",
        ),
        imports=[
            ImportDefinition(source="effect", items=["Layer"]),
            ImportDefinition(source="./repository", items=["{className}Repository"]),
            *infra_imports(services),
        ],
        sections=[
            SectionDefinition(
                title="Infrastructure Layer Compositions",
                content=RawContent(value=build_infrastructure_layers(services)),
            ),
            SectionDefinition(
                title="Data Access Layer Compositions",
                content=RawContent(
                    value=build_domain_layers(["{className}Repository"], "DataAccess")
                ),
            ),
        ],
    )


def feature_layers_definition(context: Mapping[str, Any]) -> TemplateDefinition:
    """
    ``feature/layers``: service, repository and sub-module layers.

    ``context['subModules']`` lists kebab-case sub-module names; each one adds
    an import line and its ``Live``/``Test`` layers to the composition.
    """
    services: List[str] = _services_for(context, "feature")
    sub_modules: List[Tuple[str, str]] = _sub_module_classes(context)
    logger.debug(
        "Building feature/layers with %d infra service(s), %d sub-module(s).",
        len(services),
        len(sub_modules),
    )

    imports: List[ImportDefinition] = [
        ImportDefinition(source="effect", items=["Layer"]),
        ImportDefinition(source="./service", items=["{className}Service"]),
    ]
    imports.extend(
        ImportDefinition(source=f"./{file_name}", items=[f"{cls}Live", f"{cls}Test"])
        for file_name, cls in sub_modules
    )
    imports.append(
        ImportDefinition(source="{scope}/data-access-{fileName}", items=["{className}Repository"])
    )
    imports.extend(infra_imports(services))

    description: str = (
        "Layer composition for the {fileName} feature.\n\n"
        "- Live: production with all infrastructure\n"
        "- Test: in-memory infrastructure\n"
        "- Dev: local infrastructure\n"
        "- Auto: selected from NODE_ENV by {className}Service.Auto"
    )
    if sub_modules:
        description += "\n\nSub-modules: " + ", ".join(cls for _, cls in sub_modules)

    return TemplateDefinition(
        id="feature/layers",
        meta=TemplateMeta(
            title="{className} Layers",
            description=description,
            module="{scope}/feature-{fileName}/server/layers",
        ),
        imports=imports,
        sections=[
            SectionDefinition(
                title="Infrastructure Layer Compositions",
                content=RawContent(value=build_infrastructure_layers(services)),
            ),
            SectionDefinition(
                title="Full Feature Layers",
                content=RawContent(
                    value=build_domain_layers(
                        ["{className}Service", "{className}Repository"],
                        "Feature",
                        sub_module_layers=[cls for _, cls in sub_modules],
                    )
                ),
            ),
        ],
    )


_INFRA_SERVICE_OPERATIONS: Tuple[Tuple[str, str], ...] = (
    ("get", "(id: string) => Effect.Effect<Option.Option<string>>"),
    ("set", "(id: string, value: string) => Effect.Effect<void>"),
    ("health", "() => Effect.Effect<boolean>"),
)

_INFRA_LIVE_IMPL: str = """\
Effect.sync(() => {
    const store = new Map<string, string>()
    return {
      get: (id: string) => Effect.sync(() => Option.fromNullable(store.get(id))),
      set: (id: string, value: string) => Effect.sync(() => void store.set(id, value)),
      health: () => Effect.succeed(true)
    }
  })"""


def infra_service_definition(context: Mapping[str, Any]) -> TemplateDefinition:
    """
    ``infra/service``: Context.Tag service with static layers.

    ``context['layerType']`` picks the Layer constructor (default ``effect``).

    Raises:
        ContextValidationError: if ``layerType`` is not a known Layer constructor.
    """
    layer_type: str = str(context.get("layerType") or "effect")
    if layer_type not in LAYER_METHODS:
        raise ContextValidationError(
            "infra/service",
            ["layerType"],
            reason=f"layerType must be one of {', '.join(LAYER_METHODS)}, got {layer_type!r}",
        )
    static_layers: List[LayerConfig] = static_layer_configs(
        "{className}Service",
        layer_type,
        _INFRA_LIVE_IMPL,
        env_var=str(context.get("envVar") or "NODE_ENV"),
    )

    interface: InterfaceContent = InterfaceContent(
        config=InterfaceConfig(
            name="{className}ServiceInterface",
            jsdoc=(
                "{className} service operations\n\n"
                "TODO: replace with the operations this service provides"
            ),
            properties=[
                PropertyDefinition(name=name, type=signature, readonly=True)
                for name, signature in _INFRA_SERVICE_OPERATIONS
            ],
        )
    )
    tag: ContextTagContent = ContextTagContent(
        config=ContextTagConfig(
            service_name="{className}Service",
            tag_identifier="{scope}/infra-{fileName}/{className}Service",
            interface_name="{className}ServiceInterface",
            static_layers=static_layers,
        )
    )

    return TemplateDefinition(
        id="infra/service",
        meta=TemplateMeta(
            title="{className} Service",
            description=(
                "Infrastructure service for {className}.\n\n"
                "Live, Test, Dev and Auto layers are static members of {className}Service."
            ),
            module="{scope}/infra-{fileName}/service",
        ),
        imports=[ImportDefinition(source="effect", items=["Context", "Effect", "Layer", "Option"])],
        sections=[
            SectionDefinition(title="Service Interface", content=interface),
            SectionDefinition(title="Context.Tag", content=tag),
        ],
    )


# key -> (factory, description, optional context keys)
LAYER_FACTORIES: Dict[str, Tuple[DefinitionFactory, str, Tuple[str, ...]]] = {
    "data-access/layers": (
        data_access_layers_definition,
        "Effect layer compositions for data-access",
        ("infrastructureServices",),
    ),
    "feature/layers": (
        feature_layers_definition,
        "Feature layer compositions",
        ("infrastructureServices", "subModules"),
    ),
    "infra/service": (
        infra_service_definition,
        "Infrastructure service with Context.Tag",
        ("layerType", "envVar"),
    ),
}


__all__: List[str] = [
    "INFRASTRUCTURE_SERVICES",
    "LAYER_FACTORIES",
    "LAYER_METHODS",
    "DefinitionFactory",
    "build_domain_layers",
    "build_infrastructure_layers",
    "build_static_layers",
    "data_access_layers_definition",
    "feature_layers_definition",
    "group_services_by_package",
    "infra_imports",
    "infra_package_name",
    "infra_service_definition",
    "static_layer_configs",
]
