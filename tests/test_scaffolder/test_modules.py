"""Unit tests for the app and tests-it module generators."""

from __future__ import annotations

from dataclasses import replace

import pytest

from aemgen.errors import (
    DuplicateModuleError,
    PropertyValidationError,
    ResolutionError,
    UnknownModuleError,
)
from aemgen.scaffolder.modules import (
    APP,
    MODULE_GENERATORS,
    TESTS_IT,
    ModuleGenerator,
    create_module_generator,
    module_kind,
)
from aemgen.scaffolder.node import LifecycleState
from aemgen.scaffolder.properties import PropertyBag
from aemgen.scaffolder.registry import ModuleRecord


@pytest.fixture
def parent_bag(project_props) -> PropertyBag:
    return PropertyBag(project_props)


# ---------------------------------------------------------------------------
# Registry lookups
# ---------------------------------------------------------------------------


class TestRegistry:
    @pytest.mark.unit
    def test_registered_tags(self):
        assert set(MODULE_GENERATORS) == {"app", "tests-it"}
        assert module_kind("tests-it") is TESTS_IT
        assert module_kind("app") is APP

    @pytest.mark.unit
    def test_unknown_tag(self, context):
        with pytest.raises(UnknownModuleError, match="'frontend'"):
            module_kind("frontend")
        with pytest.raises(UnknownModuleError):
            create_module_generator("frontend", context)

    @pytest.mark.unit
    def test_factory_uses_default_path(self, context, parent_bag):
        node = create_module_generator("tests-it", context, parent=parent_bag)
        assert isinstance(node, ModuleGenerator)
        assert node.path == "it.tests"
        assert node.kind is TESTS_IT
        assert not node.is_composition_root


# ---------------------------------------------------------------------------
# Composed under a project (parent bag supplied)
# ---------------------------------------------------------------------------


class TestComposedModule:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_tests_it_with_defaults(self, context, parent_bag, project_dir, maven, store):
        node = create_module_generator("tests-it", context, {"defaults": True}, parent=parent_bag)

        await node.run()

        assert node.completed
        assert node.props["package"] == "com.mysite"
        assert node.props["publish"] is True
        assert node.props.parent is parent_bag
        assert maven.calls == [
            ("com.adobe.cq:aem-cloud-testing-clients", "cloud"),
            ("com.adobe.aem:aem-sdk-api", "cloud"),
        ]

        record = store.get("it.tests")
        assert record.module_type == "tests-it"
        assert record.properties() == {"package": "com.mysite", "publish": True}

        module_dir = project_dir / "it.tests"
        pom = (module_dir / "pom.xml").read_text(encoding="utf-8")
        assert "<artifactId>aem-cloud-testing-clients</artifactId>" in pom
        assert "<artifactId>mysite.it.tests</artifactId>" in pom
        assert "it.publish.url" in pom
        assert (module_dir / "src/test/java/com/mysite/it/tests/AuthorIT.java").is_file()
        assert (module_dir / "src/test/java/com/mysite/it/tests/PublishIT.java").is_file()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_publish_disabled(self, context, parent_bag, project_dir):
        node = create_module_generator(
            "tests-it", context, {"publish": False, "package": "com.mysite"}, parent=parent_bag
        )

        await node.run()

        module_dir = project_dir / "it.tests"
        assert not (module_dir / "src/test/java/com/mysite/it/tests/PublishIT.java").exists()
        assert "it.publish.url" not in (module_dir / "pom.xml").read_text(encoding="utf-8")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_legacy_platform_coordinates(self, context, project_props, project_dir, maven):
        parent = PropertyBag({**project_props, "aem_version": "6.5"})
        node = create_module_generator("tests-it", context, {"defaults": True}, parent=parent)

        await node.run()

        assert maven.calls == [
            ("com.adobe.cq:cq-testing-clients-65", "6.5"),
            ("com.adobe.aem:uber-jar", "6.5"),
        ]
        assert "uber-jar" in (project_dir / "it.tests" / "pom.xml").read_text(encoding="utf-8")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_app_examples(self, context, parent_bag, project_dir, maven):
        node = create_module_generator(
            "app", context, {"defaults": True, "examples": True}, parent=parent_bag
        )

        await node.run()

        assert maven.calls == [("com.adobe.aem:aem-sdk-api", "cloud")]
        core = project_dir / "core"
        assert (core / "bnd.bnd").is_file()
        assert (core / "src/main/java/com/mysite/core/package-info.java").is_file()
        assert (core / "src/main/java/com/mysite/core/models/HelloWorldModel.java").is_file()
        assert (core / "src/test/java/com/mysite/core/models/HelloWorldModelTest.java").is_file()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_package_falls_back_to_default(self, context, parent_bag):
        node = create_module_generator(
            "tests-it", context, {"defaults": True, "package": "com123"}, parent=parent_bag
        )

        await node.run()

        assert node.props["package"] == "com.mysite"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_persisted_record_reused(self, context, parent_bag, store, make_prompter):
        store.set("it.tests", ModuleRecord(path="it.tests", module_type="tests-it",
                                           package="com.mysite", publish=False))
        prompter = make_prompter()
        context = replace(context, prompter=prompter)

        node = create_module_generator("tests-it", context, {}, parent=parent_bag)
        await node.run()

        assert prompter.asked == []
        assert node.props["publish"] is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_child_does_not_check_invariant(self, context, parent_bag, store):
        store.set("it.tests", ModuleRecord(path="it.tests", module_type="tests-it"))

        node = create_module_generator(
            "tests-it", context, {"defaults": True}, parent=parent_bag, path="other.tests"
        )
        await node.run()

        assert node.completed

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_property_without_prompting(self, context, parent_bag):
        node = create_module_generator("tests-it", context, {"package": "com.mysite"}, parent=parent_bag)

        with pytest.raises(PropertyValidationError, match="'publish'"):
            await node.run()

        assert node.state is LifecycleState.PROMPTING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolution_failure_stops_writing(
        self, context, parent_bag, project_dir, store, make_maven
    ):
        context = replace(context, maven=make_maven(fail={"com.adobe.aem:aem-sdk-api"}))
        node = create_module_generator("tests-it", context, {"defaults": True}, parent=parent_bag)

        with pytest.raises(ResolutionError):
            await node.run()

        assert node.state is LifecycleState.WRITING
        assert store.get("it.tests") is not None
        assert not (project_dir / "it.tests").exists()


# ---------------------------------------------------------------------------
# Standalone invocation
# ---------------------------------------------------------------------------


class TestStandaloneModule:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_requires_configured_project(self, context):
        node = create_module_generator("tests-it", context, {"defaults": True})

        with pytest.raises(PropertyValidationError, match="generate the project first"):
            await node.run()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_loads_project_from_store(self, context, store, project_props):
        store.set_project(project_props)
        node = create_module_generator("tests-it", context, {"defaults": True})

        await node.run()

        assert node.is_composition_root
        assert node.props.parent["group_id"] == "com.mysite"
        assert node.props["package"] == "com.mysite"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_second_tests_module_rejected(self, context, store, project_props, project_dir):
        store.set_project(project_props)
        store.set("it.tests", ModuleRecord(path="it.tests", module_type="tests-it"))
        node = create_module_generator("tests-it", context, {"defaults": True}, path="other.tests")

        with pytest.raises(DuplicateModuleError):
            await node.run()

        assert node.state is LifecycleState.CONFIGURING
        assert store.get("other.tests") is None
        assert not (project_dir / "other.tests").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_path_reconfiguration(self, context, store, project_props):
        store.set_project(project_props)
        store.set("it.tests", ModuleRecord(path="it.tests", module_type="tests-it",
                                           package="com.mysite", publish=True))
        node = create_module_generator("tests-it", context, {})

        await node.run()

        assert node.completed
