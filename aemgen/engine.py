"""aemgen composition engine and command-line entry point.

The engine wires the shared collaborators (configuration store, template
renderer, Maven client, prompter) into a ``GeneratorContext``, runs a root
generator node through its lifecycle and reports, per node, how far it got.

Usage::

    aemgen project --group-id com.mysite --modules app,tests-it --defaults
    aemgen tests-it --package com.mysite --no-publish
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
import traceback
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from aemgen.config import Settings
from aemgen.errors import GeneratorError
from aemgen.maven_client import MavenClient
from aemgen.scaffolder.generator import PROJECT_OPTIONS, ProjectGenerator
from aemgen.scaffolder.modules import MODULE_KINDS, create_module_generator
from aemgen.scaffolder.node import GeneratorContext, GeneratorNode
from aemgen.scaffolder.prompts import ConsolePrompter, NonInteractivePrompter, Prompter
from aemgen.scaffolder.properties import OptionSpec
from aemgen.scaffolder.registry import ConfigStore
from aemgen.scaffolder.templates import TemplateRenderer
from aemgen.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class NodeOutcome(BaseModel):
    """How far one generator node got through its lifecycle."""

    title: str
    path: str
    state: str | None = Field(default=None, description="Last lifecycle state entered")
    completed: bool = False
    error: str | None = None
    files: list[str] = Field(default_factory=list)


class CompositionResult(BaseModel):
    """Outcome of one engine invocation."""

    success: bool = False
    error: str | None = Field(default=None, description="Failure that aborted the whole composition")
    nodes: list[NodeOutcome] = Field(default_factory=list)
    duration: str = ""


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class CompositionEngine:
    """Runs generator trees against one project directory.

    Attributes:
        settings: Global settings (output directory, Maven service, ...).
        store: Persisted configuration of the target project.
        interactive: Whether missing properties may be prompted for.  Even
            when true, an invocation with ``defaults`` never prompts.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        maven: MavenClient | None = None,
        renderer: TemplateRenderer | None = None,
        prompter: Prompter | None = None,
        interactive: bool = True,
    ) -> None:
        self.settings = settings
        self.store = ConfigStore(settings.config_path)
        self.maven = maven or MavenClient(
            base_url=settings.maven.url, timeout=settings.maven.timeout
        )
        self.renderer = renderer or TemplateRenderer(settings.templates_dir)
        self.prompter = prompter
        self.interactive = interactive

    def _context(self, options: Mapping[str, Any]) -> GeneratorContext:
        prompter = self.prompter
        if prompter is None:
            if self.interactive and not options.get("defaults"):
                prompter = ConsolePrompter()
            else:
                prompter = NonInteractivePrompter()
        return GeneratorContext(
            project_root=self.settings.output_dir,
            store=self.store,
            renderer=self.renderer,
            maven=self.maven,
            prompter=prompter,
        )

    async def run_project(
        self,
        options: Mapping[str, Any],
        module_options: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> CompositionResult:
        """Generate (or re-configure) the project and its requested modules."""
        root = ProjectGenerator(self._context(options), options, module_options=module_options)
        return await self._execute(root)

    async def run_module(
        self,
        module_type: str,
        options: Mapping[str, Any],
        path: str | None = None,
    ) -> CompositionResult:
        """Add a single module to an existing project.

        Once the module completes, the project generator re-runs without
        requested modules so the parent ``pom.xml`` lists the new module.
        """
        context = self._context(options)
        node = create_module_generator(module_type, context, options, path=path)
        result = await self._execute(node)
        if result.success:
            refresh = ProjectGenerator(context, {"defaults": options.get("defaults")})
            refreshed = await self._execute(refresh)
            result.nodes.extend(refreshed.nodes)
            result.success = refreshed.success
            result.error = refreshed.error
        return result

    async def _execute(self, root: GeneratorNode) -> CompositionResult:
        start = time.monotonic()
        result = CompositionResult()
        try:
            await root.run()
        except GeneratorError as exc:
            result.error = str(exc)
            print_error(f"{root.title} FAILED: {exc}")
        except Exception as exc:
            result.error = f"Unexpected error: {exc}"
            print_error(f"{root.title} FAILED: {exc}")
            console.print(f"[dim]{traceback.format_exc()}[/dim]")

        result.nodes = [_outcome(node) for node in root.iter_nodes()]
        result.success = result.error is None and all(n.completed for n in result.nodes)
        result.duration = format_duration(time.monotonic() - start)
        return result


def _outcome(node: GeneratorNode) -> NodeOutcome:
    return NodeOutcome(
        title=node.title,
        path=node.path,
        state=node.state.value if node.state is not None else None,
        completed=node.completed,
        error=str(node.error) if node.error is not None else None,
        files=[str(p) for p in node.written],
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _add_schema_arguments(parser: argparse.ArgumentParser, schema: Mapping[str, OptionSpec]) -> None:
    """Expose an option schema as command-line flags."""
    for spec in schema.values():
        flag = "--" + spec.name.replace("_", "-")
        if spec.type is bool:
            parser.add_argument(
                flag, dest=spec.name, action=argparse.BooleanOptionalAction,
                default=None, help=spec.description,
            )
        elif spec.type is list:
            parser.add_argument(flag, dest=spec.name, type=_split_list, help=spec.description)
        else:
            parser.add_argument(flag, dest=spec.name, type=spec.type, help=spec.description)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aemgen",
        description="aemgen -- AEM multi-module Maven project generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  aemgen project --group-id com.mysite --modules app,tests-it --defaults\n"
            "  aemgen tests-it --package com.mysite --no-publish\n"
        ),
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Project directory (default: current directory or $AEMGEN_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Fail instead of prompting for missing properties",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    project = commands.add_parser("project", help="Generate the project and its modules")
    _add_schema_arguments(project, PROJECT_OPTIONS)

    for tag, kind in MODULE_KINDS.items():
        module = commands.add_parser(tag, help=f"Add the {kind.title} module to a project")
        module.add_argument("--path", default=None, help=f"Module directory (default: {kind.default_path})")
        _add_schema_arguments(module, kind.options)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``aemgen``."""
    args = build_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.output:
        settings.output_dir = Path(args.output)

    try:
        engine = CompositionEngine(settings, interactive=not args.no_prompt)
    except GeneratorError as exc:
        print_error(str(exc))
        sys.exit(1)

    if args.command == "project":
        options = {name: getattr(args, name) for name in PROJECT_OPTIONS}
        result = asyncio.run(engine.run_project(options))
    else:
        kind = MODULE_KINDS[args.command]
        options = {name: getattr(args, name) for name in kind.options}
        result = asyncio.run(engine.run_module(args.command, options, path=args.path))

    print_summary_table(
        {
            f"{node.title} ({node.path})": "done" if node.completed else f"stopped in {node.state}"
            for node in result.nodes
        },
        title=f"aemgen ({result.duration})",
    )

    if result.success:
        print_success("Generation completed successfully!")
    else:
        print_error("Generation failed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
