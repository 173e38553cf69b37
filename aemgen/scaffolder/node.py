"""The generator node: one unit of composition and its lifecycle.

Every node walks the same strictly ordered states::

    INITIALIZING -> PROMPTING -> CONFIGURING -> COMPOSING_CHILDREN -> WRITING -> END

Subclasses fill in the per-state hooks.  An exception raised by a hook
aborts the node's remaining states; ``state`` keeps the state that failed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from aemgen.maven_client import MavenClient

from .prompts import Prompter, PromptSpec, resolve_interactively
from .properties import PropertyBag
from .registry import ConfigStore
from .templates import TemplateRenderer


class LifecycleState(str, Enum):
    INITIALIZING = "initializing"
    PROMPTING = "prompting"
    CONFIGURING = "configuring"
    COMPOSING_CHILDREN = "composing_children"
    WRITING = "writing"
    END = "end"


LIFECYCLE: tuple[LifecycleState, ...] = tuple(LifecycleState)


@dataclass
class GeneratorContext:
    """Collaborators shared by every node of one composition."""

    project_root: Path
    store: ConfigStore
    renderer: TemplateRenderer
    maven: MavenClient
    prompter: Prompter


class GeneratorNode:
    """Base class for project and module generators.

    Attributes:
        context: Shared collaborators.
        options: Explicit invocation options for this node.
        path: Location of the node relative to the project root.
        props: The node's resolved ``PropertyBag``.
        state: Last lifecycle state entered (``None`` before ``run``).
        error: The exception that aborted the node, if any.
        written: Files emitted during WRITING.
    """

    title = "Generator"

    def __init__(
        self,
        context: GeneratorContext,
        options: Mapping[str, Any] | None = None,
        *,
        parent: PropertyBag | None = None,
        path: str = ".",
    ) -> None:
        self.context = context
        self.options: dict[str, Any] = dict(options or {})
        self.parent = parent
        self.path = path
        self.props = PropertyBag(parent=parent)
        self.state: LifecycleState | None = None
        self.error: Exception | None = None
        self.children: list[GeneratorNode] = []
        self.written: list[Path] = []

    @property
    def is_composition_root(self) -> bool:
        """A node without a parent bag validates the project itself."""
        return self.parent is None

    @property
    def use_defaults(self) -> bool:
        return bool(self.options.get("defaults"))

    @property
    def completed(self) -> bool:
        return self.state is LifecycleState.END and self.error is None

    # -- Lifecycle ---------------------------------------------------------

    async def run(self) -> None:
        """Run every lifecycle state in order.

        ``COMPOSING_CHILDREN`` is entered by every node, but only a
        composition root runs its hook.
        """
        hooks = {
            LifecycleState.INITIALIZING: self.initializing,
            LifecycleState.PROMPTING: self.prompting,
            LifecycleState.CONFIGURING: self.configuring,
            LifecycleState.COMPOSING_CHILDREN: self.composing,
            LifecycleState.WRITING: self.writing,
            LifecycleState.END: self.end,
        }
        for state in LIFECYCLE:
            self.state = state
            if state is LifecycleState.COMPOSING_CHILDREN and not self.is_composition_root:
                continue
            try:
                await hooks[state]()
            except Exception as exc:
                self.error = exc
                raise

    def _set_props(self, props: PropertyBag) -> None:
        if self.state not in (LifecycleState.INITIALIZING, LifecycleState.PROMPTING):
            raise RuntimeError(f"Properties are frozen once {self.title} leaves PROMPTING")
        self.props = props

    async def initializing(self) -> None:
        raise NotImplementedError

    def prompts(self) -> Sequence[PromptSpec]:
        return ()

    async def prompting(self) -> None:
        self._set_props(
            resolve_interactively(self.props, self.prompts(), self.context.prompter)
        )

    async def configuring(self) -> None:
        pass

    async def composing(self) -> None:
        pass

    async def writing(self) -> None:
        pass

    async def end(self) -> None:
        pass

    def iter_nodes(self):
        """Yield this node followed by every descendant."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()
