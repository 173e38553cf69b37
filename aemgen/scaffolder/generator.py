"""Project root generator.

Resolves the project-wide properties (group id, artifact id, version, target
AEM platform), validates the requested modules against the modules already
recorded for the project, composes one module generator per requested module
type and finally writes the parent ``pom.xml`` listing every module.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from aemgen.errors import GeneratorError
from aemgen.utils import print_error, print_node_header, print_success

from .descriptor import read_pom
from .modules import create_module_generator, module_kind
from .node import GeneratorContext, GeneratorNode
from .prompts import PromptSpec, unresolved
from .properties import (
    COMMON_OPTIONS,
    DEFAULT_PLATFORM,
    DEFAULT_VERSION,
    SUPPORTED_PLATFORMS,
    OptionSpec,
    PropertyBag,
    PropertyResolver,
    validate_artifact_id,
    validate_group_id,
    validate_platform,
    validate_version,
)
from .registry import check_invariant
from .selector import TemplateSet, select_templates


PROJECT_OPTIONS: dict[str, OptionSpec] = {
    **COMMON_OPTIONS,
    "group_id": OptionSpec("group_id", str, 'Base Maven Group ID (e.g. "com.mysite").'),
    "artifact_id": OptionSpec("artifact_id", str, 'Base Maven Artifact ID (e.g. "mysite").'),
    "name": OptionSpec("name", str, "Project name."),
    "version": OptionSpec("version", str, "Project version (e.g. 1.0.0-SNAPSHOT)."),
    "aem_version": OptionSpec("aem_version", str, "Target AEM version (e.g. 6.5 or cloud)."),
    "modules": OptionSpec("modules", list, "List of modules to generate."),
}


def _project_defaults(values: Mapping[str, Any], parent: PropertyBag | None) -> dict[str, Any]:
    defaults: dict[str, Any] = {
        "version": DEFAULT_VERSION,
        "aem_version": DEFAULT_PLATFORM,
        "examples": False,
    }
    group_id = values.get("group_id")
    if group_id:
        artifact_id = values.get("artifact_id") or group_id.split(".")[-1]
        defaults["artifact_id"] = artifact_id
        defaults["name"] = values.get("name") or artifact_id
    return defaults


def _default_artifact_id(bag: PropertyBag) -> str | None:
    group_id = bag.get("group_id")
    return group_id.split(".")[-1] if group_id else None


PROJECT_RESOLVER = PropertyResolver(
    keys=("group_id", "artifact_id", "name", "version", "aem_version", "examples"),
    validators={
        "group_id": validate_group_id,
        "artifact_id": validate_artifact_id,
        "version": validate_version,
        "aem_version": validate_platform,
    },
    defaults=_project_defaults,
)

PROJECT_TEMPLATES = TemplateSet(
    shared=("shared/pom.xml", "shared/README.md", "shared/.gitignore"),
)


def requested_modules(value: Sequence[str] | str | None) -> list[str]:
    """Normalise the ``modules`` option into an ordered, duplicate-free list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    seen: list[str] = []
    for item in value:
        tag = item.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class ProjectGenerator(GeneratorNode):
    """Root of composition for a whole project."""

    title = "AEM Project"

    def __init__(
        self,
        context: GeneratorContext,
        options: Mapping[str, Any] | None = None,
        *,
        module_options: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        super().__init__(context, options)
        self.module_options = dict(module_options or {})
        self.modules = requested_modules(self.options.get("modules"))

    async def initializing(self) -> None:
        print_node_header(self.title)
        persisted = self.context.store.get_project()
        descriptor = read_pom(self.context.project_root)
        self._set_props(
            PROJECT_RESOLVER.resolve(self.options, persisted, descriptor, self.use_defaults)
        )

    def prompts(self) -> Sequence[PromptSpec]:
        return [
            PromptSpec(
                name="group_id",
                message='Base Maven Group ID (e.g. "com.mysite")',
                when=unresolved("group_id"),
                validator=validate_group_id,
            ),
            PromptSpec(
                name="artifact_id",
                message='Base Maven Artifact ID (e.g. "mysite")',
                when=unresolved("artifact_id"),
                validator=validate_artifact_id,
                default=_default_artifact_id,
            ),
            PromptSpec(
                name="name",
                message="Project name",
                when=unresolved("name"),
                default=lambda bag: bag.get("artifact_id"),
            ),
            PromptSpec(
                name="version",
                message="Project version",
                when=unresolved("version"),
                validator=validate_version,
                default=DEFAULT_VERSION,
            ),
            PromptSpec(
                name="aem_version",
                message="Target AEM version",
                when=unresolved("aem_version"),
                validator=validate_platform,
                default=DEFAULT_PLATFORM,
                choices=SUPPORTED_PLATFORMS,
            ),
            PromptSpec(
                name="examples",
                message="Include demo/example code and content?",
                when=unresolved("examples"),
                default=False,
                confirm=True,
            ),
        ]

    async def configuring(self) -> None:
        store = self.context.store
        existing = store.get_all()
        for tag in self.modules:
            kind = module_kind(tag)
            check_invariant(existing, tag, kind.default_path)

        store.set_project(self.props)

    def _child_options(self, tag: str) -> dict[str, Any]:
        options: dict[str, Any] = {
            key: self.props[key] for key in COMMON_OPTIONS if key in self.props
        }
        options["defaults"] = self.use_defaults
        options.update(self.module_options.get(tag, {}))
        return options

    async def composing(self) -> None:
        for tag in self.modules:
            child = create_module_generator(
                tag, self.context, self._child_options(tag), parent=self.props
            )
            self.children.append(child)
            try:
                await child.run()
            except GeneratorError as exc:
                print_error(f"{child.title} module '{child.path}' failed: {exc}")

    async def writing(self) -> None:
        context = self.props.to_context()
        context["modules"] = list(self.context.store.get_all())
        self.written = await self.context.renderer.emit(
            "project",
            select_templates(PROJECT_TEMPLATES, self.props),
            self.context.project_root,
            context,
        )

    async def end(self) -> None:
        print_success("Thanks for using the AEM Project Generator.")
