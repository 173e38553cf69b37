"""Interactive resolution of properties that are still unset.

Each node declares a sequence of ``PromptSpec`` records.  A spec whose
``when`` predicate is false is skipped and the bag keeps whatever it already
holds; otherwise the ``Prompter`` is asked, and re-asked until the validator
accepts the answer.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

from rich.prompt import Confirm, Prompt

from aemgen.errors import PropertyValidationError
from aemgen.utils import console, print_error

from .properties import PropertyBag, Validator


@dataclass(frozen=True)
class PromptSpec:
    """A single question asked during the Prompting state.

    ``default`` may be a callable taking the bag resolved so far, for defaults
    derived from earlier answers.
    """

    name: str
    message: str
    when: Callable[[PropertyBag], bool]
    validator: Validator | None = None
    default: Any = None
    confirm: bool = False
    choices: tuple[str, ...] | None = None


def unresolved(name: str) -> Callable[[PropertyBag], bool]:
    """``when`` predicate: ask only while *name* has no value in the bag."""

    def _when(bag: PropertyBag) -> bool:
        return bag.get(name) is None

    return _when


class Prompter(Protocol):
    def ask(self, spec: PromptSpec) -> Any: ...

    def report(self, spec: PromptSpec, error: str) -> None: ...


class ConsolePrompter:
    """Asks questions on the terminal through ``rich.prompt``."""

    def ask(self, spec: PromptSpec) -> Any:
        if spec.confirm:
            default = True if spec.default is None else bool(spec.default)
            return Confirm.ask(spec.message, default=default, console=console)
        kwargs: dict[str, Any] = {"console": console}
        if spec.default is not None:
            kwargs["default"] = str(spec.default)
        if spec.choices:
            kwargs["choices"] = list(spec.choices)
        return Prompt.ask(spec.message, **kwargs)

    def report(self, spec: PromptSpec, error: str) -> None:
        print_error(error)


class NonInteractivePrompter:
    """Used when prompting is disabled: every question is a missing property."""

    def ask(self, spec: PromptSpec) -> Any:
        raise PropertyValidationError(spec.name, "no value supplied and prompting is disabled.")

    def report(self, spec: PromptSpec, error: str) -> None:
        raise PropertyValidationError(spec.name, error)


def resolve_interactively(
    bag: PropertyBag,
    specs: Sequence[PromptSpec],
    prompter: Prompter,
) -> PropertyBag:
    """Return a new bag holding an answer for every spec that was not skipped."""
    current = bag
    for spec in specs:
        if not spec.when(current):
            continue
        if callable(spec.default):
            spec = replace(spec, default=spec.default(current))
        while True:
            value = prompter.ask(spec)
            error = spec.validator(value) if spec.validator else None
            if not error:
                break
            prompter.report(spec, error)
        current = current.extend({spec.name: value})
    return current
