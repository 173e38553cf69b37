"""aemgen settings.

Centralised, typed settings for the scaffolding engine. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class MavenConfig(BaseModel):
    """Configuration for the remote artifact-metadata service."""

    url: str = Field(default="https://search.maven.org")
    timeout: int = Field(default=30, ge=1, description="Per-request timeout in seconds")


class Settings(BaseModel):
    """Global aemgen settings.

    Instances are typically created once by the CLI entry point and then
    passed to the ``CompositionEngine``.
    """

    output_dir: Path = Field(default=Path("."))
    config_file: str = Field(
        default=".aemgen.json",
        description="Name of the persisted project configuration file",
    )
    templates_dir: Path | None = Field(
        default=None,
        description="Override for the bundled Jinja2 template directory",
    )
    maven: MavenConfig = Field(default_factory=MavenConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def config_path(self) -> Path:
        """Path to the persisted project configuration store."""
        return self.output_dir / self.config_file

    @property
    def pom_path(self) -> Path:
        """Path to the project's root ``pom.xml``."""
        return self.output_dir / "pom.xml"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return the written path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            AEMGEN_OUTPUT_DIR, AEMGEN_CONFIG_FILE, AEMGEN_TEMPLATES_DIR,
            AEMGEN_MAVEN_URL, AEMGEN_MAVEN_TIMEOUT.
        """
        maven_kwargs: dict[str, Any] = {}
        if os.environ.get("AEMGEN_MAVEN_URL"):
            maven_kwargs["url"] = os.environ["AEMGEN_MAVEN_URL"]
        if os.environ.get("AEMGEN_MAVEN_TIMEOUT"):
            maven_kwargs["timeout"] = int(os.environ["AEMGEN_MAVEN_TIMEOUT"])

        kwargs: dict[str, Any] = {
            "output_dir": Path(os.environ.get("AEMGEN_OUTPUT_DIR", ".")),
            "maven": MavenConfig(**maven_kwargs),
        }
        if os.environ.get("AEMGEN_CONFIG_FILE"):
            kwargs["config_file"] = os.environ["AEMGEN_CONFIG_FILE"]
        if os.environ.get("AEMGEN_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["AEMGEN_TEMPLATES_DIR"])

        return cls(**kwargs)
