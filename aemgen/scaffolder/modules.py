"""Module generators: the ``app`` and ``tests-it`` module kinds.

Both kinds share one ``ModuleGenerator`` implementation; what differs between
them (options, property keys, prompts, templates and the artifacts they need)
is described by a ``ModuleKind`` record.  ``MODULE_GENERATORS`` maps each
module-type tag to its factory.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from aemgen.errors import PropertyValidationError, UnknownModuleError
from aemgen.maven_client import ArtifactCoordinate, api_coordinates, testing_client_coordinates
from aemgen.utils import print_node_header, print_success

from .node import GeneratorContext, GeneratorNode
from .prompts import PromptSpec, unresolved
from .properties import (
    COMMON_OPTIONS,
    OptionSpec,
    PropertyBag,
    PropertyResolver,
    validate_package,
)
from .registry import ModuleRecord, ModuleType, check_invariant
from .selector import TemplateSet, select_templates


@dataclass(frozen=True)
class ModuleKind:
    """Everything that distinguishes one module type from another."""

    module_type: ModuleType
    title: str
    default_path: str
    options: Mapping[str, OptionSpec]
    resolver: PropertyResolver
    templates: TemplateSet
    prompts: Callable[[PropertyBag], Sequence[PromptSpec]]
    coordinates: Callable[[str], dict[str, ArtifactCoordinate]]

    @property
    def template_dir(self) -> str:
        return self.module_type.value


# ---------------------------------------------------------------------------
# Shared option and prompt definitions
# ---------------------------------------------------------------------------

PACKAGE_OPTION = OptionSpec("package", str, 'Java Source Package (e.g. "com.mysite").')


def _parent_group_id(parent: PropertyBag | None) -> str | None:
    return parent.get("group_id") if parent is not None else None


def _package_prompt(bag: PropertyBag) -> PromptSpec:
    return PromptSpec(
        name="package",
        message='Java Source Package (e.g. "com.mysite")',
        when=unresolved("package"),
        validator=validate_package,
        default=_parent_group_id(bag.parent),
    )


# ---------------------------------------------------------------------------
# app: application code bundle
# ---------------------------------------------------------------------------


def _app_defaults(values: Mapping[str, Any], parent: PropertyBag | None) -> dict[str, Any]:
    return {"package": _parent_group_id(parent), "examples": False}


def _app_prompts(bag: PropertyBag) -> list[PromptSpec]:
    return [
        _package_prompt(bag),
        PromptSpec(
            name="examples",
            message="Include demo/example code and content?",
            when=unresolved("examples"),
            default=False,
            confirm=True,
        ),
    ]


APP = ModuleKind(
    module_type=ModuleType.APP,
    title="Application Bundle",
    default_path="core",
    options={**COMMON_OPTIONS, "package": PACKAGE_OPTION},
    resolver=PropertyResolver(
        keys=("package", "examples"),
        validators={"package": validate_package},
        defaults=_app_defaults,
    ),
    templates=TemplateSet(
        shared=(
            "shared/pom.xml",
            "shared/bnd.bnd",
            "shared/src/main/java/__packagePath__/core/package-info.java",
        ),
        gated={
            "examples": (
                "examples/src/main/java/__packagePath__/core/models/HelloWorldModel.java",
                "examples/src/test/java/__packagePath__/core/models/HelloWorldModelTest.java",
            ),
        },
    ),
    prompts=_app_prompts,
    coordinates=lambda platform: {"aem": api_coordinates(platform)},
)


# ---------------------------------------------------------------------------
# tests-it: integration tests
# ---------------------------------------------------------------------------


def _tests_it_defaults(values: Mapping[str, Any], parent: PropertyBag | None) -> dict[str, Any]:
    return {"package": _parent_group_id(parent), "publish": True}


def _tests_it_prompts(bag: PropertyBag) -> list[PromptSpec]:
    return [
        _package_prompt(bag),
        PromptSpec(
            name="publish",
            message="Whether or not there is a Publish tier in the target AEM environments.",
            when=unresolved("publish"),
            default=True,
            confirm=True,
        ),
    ]


TESTS_IT = ModuleKind(
    module_type=ModuleType.TESTS_IT,
    title="Integration Tests",
    default_path="it.tests",
    options={
        **COMMON_OPTIONS,
        "package": PACKAGE_OPTION,
        "publish": OptionSpec(
            "publish", bool,
            "Indicate whether or not there is a Publish tier in the target AEM environments.",
        ),
    },
    resolver=PropertyResolver(
        keys=("package", "publish"),
        validators={"package": validate_package},
        defaults=_tests_it_defaults,
    ),
    templates=TemplateSet(
        shared=(
            "shared/pom.xml",
            "shared/src/main/java/__packagePath__/it/tests/package-info.java",
            "shared/src/test/java/__packagePath__/it/tests/AuthorIT.java",
        ),
        gated={
            "publish": (
                "publish/src/test/java/__packagePath__/it/tests/PublishIT.java",
            ),
        },
    ),
    prompts=_tests_it_prompts,
    coordinates=lambda platform: {
        "testing_client": testing_client_coordinates(platform),
        "aem": api_coordinates(platform),
    },
)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ModuleGenerator(GeneratorNode):
    """Generates one module of a given ``ModuleKind``.

    Composed by the project generator, the node receives the project's bag as
    ``parent``.  Invoked on its own, it loads the persisted project properties
    as parent and becomes the composition root, validating the project's
    module invariants itself.
    """

    def __init__(
        self,
        kind: ModuleKind,
        context: GeneratorContext,
        options: Mapping[str, Any] | None = None,
        *,
        parent: PropertyBag | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(context, options, parent=parent, path=path or kind.default_path)
        self.kind = kind
        self.title = kind.title
        self._standalone = parent is None

    @property
    def is_composition_root(self) -> bool:
        return self._standalone

    async def initializing(self) -> None:
        print_node_header(f"{self.title} ({self.path})")
        parent = self.parent
        if parent is None:
            parent = PropertyBag(self.context.store.get_project())

        for required in ("group_id", "artifact_id", "aem_version"):
            if parent.get(required) is None:
                raise PropertyValidationError(
                    required, "the project is not configured; generate the project first."
                )

        record = self.context.store.get(self.path)
        persisted = record.properties() if record is not None else None
        self._set_props(
            self.kind.resolver.resolve(
                self.options, persisted, None, self.use_defaults, parent
            )
        )

    def prompts(self) -> Sequence[PromptSpec]:
        return self.kind.prompts(self.props)

    async def configuring(self) -> None:
        store = self.context.store
        if self.is_composition_root:
            check_invariant(store.get_all(), self.kind.module_type.value, self.path)
        store.set(
            self.path,
            ModuleRecord(path=self.path, module_type=self.kind.module_type.value, **self.props),
        )

    async def writing(self) -> None:
        platform = self.props.parent["aem_version"]
        coordinates = self.kind.coordinates(platform)
        resolved = await self.context.maven.resolve_all(list(coordinates.values()), platform)

        context_bag = self.props.extend(
            {key: meta.model_dump() for key, meta in zip(coordinates, resolved)}
        ).extend({"module_type": self.kind.module_type.value, "module_path": self.path})

        templates = select_templates(self.kind.templates, self.props)
        self.written = await self.context.renderer.emit(
            self.kind.template_dir,
            templates,
            self.context.project_root / self.path,
            context_bag.to_context(),
        )

    async def end(self) -> None:
        print_success(f"{self.title} module '{self.path}' generated ({len(self.written)} files).")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

MODULE_KINDS: dict[str, ModuleKind] = {
    kind.module_type.value: kind for kind in (APP, TESTS_IT)
}


def _factory(kind: ModuleKind) -> Callable[..., ModuleGenerator]:
    def create(context: GeneratorContext, options=None, *, parent=None, path=None) -> ModuleGenerator:
        return ModuleGenerator(kind, context, options, parent=parent, path=path)

    return create


MODULE_GENERATORS: dict[str, Callable[..., ModuleGenerator]] = {
    tag: _factory(kind) for tag, kind in MODULE_KINDS.items()
}


def module_kind(module_type: str) -> ModuleKind:
    """Look up a registered kind.

    Raises:
        UnknownModuleError: If *module_type* has no registered generator.
    """
    try:
        return MODULE_KINDS[module_type]
    except KeyError:
        raise UnknownModuleError(module_type) from None


def create_module_generator(
    module_type: str,
    context: GeneratorContext,
    options: Mapping[str, Any] | None = None,
    *,
    parent: PropertyBag | None = None,
    path: str | None = None,
) -> ModuleGenerator:
    """Instantiate the generator registered for *module_type*."""
    if module_type not in MODULE_GENERATORS:
        raise UnknownModuleError(module_type)
    return MODULE_GENERATORS[module_type](context, options, parent=parent, path=path)
