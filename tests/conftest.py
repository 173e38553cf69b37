"""Shared pytest fixtures for the aemgen test suite.

Provides reusable fixtures for:
- Temporary project directories and settings
- A persisted configuration store
- A recording Maven client (no network)
- A scripted prompter
- Sample ``pom.xml`` documents
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest

from aemgen.config import Settings
from aemgen.errors import ResolutionError
from aemgen.maven_client import ArtifactCoordinate, ArtifactMetadata, MavenClient
from aemgen.scaffolder.node import GeneratorContext
from aemgen.scaffolder.prompts import NonInteractivePrompter, PromptSpec
from aemgen.scaffolder.registry import ConfigStore
from aemgen.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class RecordingMavenClient(MavenClient):
    """Answers every lookup locally and records what was asked."""

    def __init__(
        self,
        versions: Mapping[str, str] | None = None,
        fail: Iterable[str] = (),
    ) -> None:
        super().__init__()
        self.versions = dict(versions or {})
        self.fail = set(fail)
        self.calls: list[tuple[str, str]] = []

    async def latest(self, coordinate: ArtifactCoordinate, platform: str) -> ArtifactMetadata:
        self.calls.append((str(coordinate), platform))
        if str(coordinate) in self.fail:
            raise ResolutionError(str(coordinate), "service unavailable")
        return ArtifactMetadata(
            group_id=coordinate.group_id,
            artifact_id=coordinate.artifact_id,
            version=self.versions.get(str(coordinate), "2024.1.0"),
        )


class ScriptedPrompter:
    """Replays scripted answers per property name."""

    def __init__(self, answers: Mapping[str, list[Any]] | None = None) -> None:
        self.answers = {name: list(values) for name, values in (answers or {}).items()}
        self.asked: list[str] = []
        self.errors: list[tuple[str, str]] = []

    def ask(self, spec: PromptSpec) -> Any:
        self.asked.append(spec.name)
        queue = self.answers.get(spec.name)
        if not queue:
            return spec.default
        return queue.pop(0)

    def report(self, spec: PromptSpec, error: str) -> None:
        self.errors.append((spec.name, error))


# ---------------------------------------------------------------------------
# Paths & settings
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project directory (auto-cleanup)."""
    path = tmp_path / "mysite"
    path.mkdir()
    return path


@pytest.fixture
def settings(project_dir: Path) -> Settings:
    return Settings(output_dir=project_dir)


@pytest.fixture
def store(settings: Settings) -> ConfigStore:
    return ConfigStore(settings.config_path)


@pytest.fixture
def maven() -> RecordingMavenClient:
    return RecordingMavenClient()


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def context(
    project_dir: Path,
    store: ConfigStore,
    renderer: TemplateRenderer,
    maven: RecordingMavenClient,
) -> GeneratorContext:
    """Generator context that never prompts."""
    return GeneratorContext(
        project_root=project_dir,
        store=store,
        renderer=renderer,
        maven=maven,
        prompter=NonInteractivePrompter(),
    )


@pytest.fixture
def project_props() -> dict[str, Any]:
    """Project-wide properties as the root generator persists them."""
    return {
        "group_id": "com.mysite",
        "artifact_id": "mysite",
        "name": "My Site",
        "version": "1.0.0-SNAPSHOT",
        "aem_version": "cloud",
        "examples": False,
    }


# ---------------------------------------------------------------------------
# POM documents
# ---------------------------------------------------------------------------


SAMPLE_POM = textwrap.dedent(
    """\
    <?xml version="1.0" encoding="UTF-8"?>
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <modelVersion>4.0.0</modelVersion>
      <groupId>com.frompom</groupId>
      <artifactId>frompom</artifactId>
      <version>3.0.0</version>
      <name>From POM</name>
      <properties>
        <aem.version>6.5</aem.version>
      </properties>
    </project>
    """
)


@pytest.fixture
def sample_pom(project_dir: Path) -> Path:
    """A namespaced ``pom.xml`` written into the project directory."""
    path = project_dir / "pom.xml"
    path.write_text(SAMPLE_POM, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_prompter():
    """Factory for ``ScriptedPrompter`` instances."""
    return ScriptedPrompter


@pytest.fixture
def make_maven():
    """Factory for ``RecordingMavenClient`` instances."""
    return RecordingMavenClient
