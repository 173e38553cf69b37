"""Jinja2 template rendering for module scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``aemgen/scaffolder/templates/`` directory and writes them into the generated
project.  Templates are grouped per generator kind (``project``, ``app``,
``tests-it``) and, inside a kind, per tier (``shared``, ``publish``,
``examples``).  A template identifier is the path inside its kind directory
without the ``.j2`` suffix, e.g. ``shared/pom.xml``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Path segment replaced by the Java package directory (``com/mysite``).
PACKAGE_PATH_TOKEN = "__packagePath__"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for the generated Maven modules.

    Undefined template variables raise at render time.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["package_path"] = _package_path_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template (path relative to the template root)."""
        template = self.env.get_template(template_path)
        return template.render(**context)

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output
        path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    async def emit(
        self,
        kind: str,
        template_ids: Sequence[str],
        output_dir: str | Path,
        context: dict[str, Any],
    ) -> list[Path]:
        """Render *template_ids* of generator *kind* into *output_dir*, in order.

        Args:
            kind: Template kind directory (``"app"``, ``"tests-it"``, ...).
            template_ids: Identifiers as returned by ``select_templates``.
            output_dir: Module root directory.
            context: Template context; ``package`` drives the
                ``__packagePath__`` path segment.

        Returns:
            List of written file paths.
        """
        out_base = Path(output_dir)
        written: list[Path] = []
        for template_id in template_ids:
            target = out_base / output_path_for(template_id, context)
            path = await self.render_to_file(f"{kind}/{template_id}.j2", target, context)
            written.append(path)
        return written

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


def output_path_for(template_id: str, context: dict[str, Any]) -> Path:
    """Map a template identifier to its path inside the module.

    The leading tier segment is dropped and ``__packagePath__`` becomes the
    Java package directory::

        output_path_for("shared/src/main/java/__packagePath__/it/HttpIT.java",
                        {"package": "com.mysite"})
        -> Path("src/main/java/com/mysite/it/HttpIT.java")
    """
    _tier, _, relative = template_id.partition("/")
    if PACKAGE_PATH_TOKEN in relative:
        relative = relative.replace(
            PACKAGE_PATH_TOKEN, _package_path_filter(context["package"])
        )
    return Path(relative)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _package_path_filter(value: str) -> str:
    """Convert ``com.mysite`` to ``com/mysite``."""
    return "/".join(part for part in value.split(".") if part)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
