"""Property bags and their precedence-ordered resolution.

A ``PropertyBag`` is the resolved configuration of one generator node.  Bags
are immutable: every operation that adds values returns a new bag, and a key
that already holds a value can never be re-assigned to something else.

Resolution follows a strict precedence order:

1. explicit invocation options
2. configuration persisted for the node's project path
3. values parsed out of the project's ``pom.xml``
4. computed defaults (only when the ``defaults`` flag is set)

Validation runs as its own step between merging (1-3) and defaults (4), so a
malformed value is dropped and re-prompted instead of silently kept.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from aemgen.utils import print_warning

# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

INVALID_PACKAGE = re.compile(r"[^a-zA-Z.]")

SUPPORTED_PLATFORMS: tuple[str, ...] = ("cloud", "6.5")

DEFAULT_VERSION = "1.0.0-SNAPSHOT"
DEFAULT_PLATFORM = "cloud"

# A validator returns an error message, or ``None`` when the value is fine.
Validator = Callable[[Any], "str | None"]


def validate_package(value: Any) -> str | None:
    """Java packages may only use letters and periods."""
    if not value:
        return "Package must be provided."
    if INVALID_PACKAGE.search(str(value)):
        return "Package must only contain letters or periods (.)."
    return None


def validate_group_id(value: Any) -> str | None:
    if not value:
        return "Group ID must be provided."
    if INVALID_PACKAGE.search(str(value)):
        return "Group ID must only contain letters or periods (.)."
    return None


def validate_artifact_id(value: Any) -> str | None:
    if not value:
        return "Artifact ID must be provided."
    if not re.fullmatch(r"[a-zA-Z0-9._-]+", str(value)):
        return "Artifact ID may only contain letters, digits, periods, hyphens or underscores."
    return None


def validate_version(value: Any) -> str | None:
    if not value or not str(value).strip():
        return "Version must be provided."
    return None


def validate_platform(value: Any) -> str | None:
    if value not in SUPPORTED_PLATFORMS:
        return f"Target AEM version must be one of: {', '.join(SUPPORTED_PLATFORMS)}."
    return None


# ---------------------------------------------------------------------------
# Option schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OptionSpec:
    """One named invocation option accepted by a generator kind."""

    name: str
    type: type
    description: str


COMMON_OPTIONS: dict[str, OptionSpec] = {
    "defaults": OptionSpec("defaults", bool, "Use defaults for any values not provided."),
    "examples": OptionSpec("examples", bool, "Include demo/example code and content."),
}


# ---------------------------------------------------------------------------
# PropertyBag
# ---------------------------------------------------------------------------


class PropertyBag(Mapping[str, Any]):
    """Immutable, resolved configuration for a single generator node.

    ``parent`` is a read-only reference to the bag of the node that composed
    this one (``None`` at the root of composition).
    """

    __slots__ = ("_values", "parent")

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        parent: PropertyBag | None = None,
    ) -> None:
        self._values = MappingProxyType(dict(values or {}))
        self.parent = parent

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyBag):
            return NotImplemented
        return dict(self._values) == dict(other._values) and self.parent == other.parent

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PropertyBag({dict(self._values)!r}, parent={self.parent!r})"

    def extend(self, values: Mapping[str, Any]) -> PropertyBag:
        """Return a new bag with *values* added.

        Raises:
            ValueError: If a key already resolved in this bag would change.
        """
        merged = dict(self._values)
        for key, value in values.items():
            if key in merged and merged[key] != value:
                raise ValueError(
                    f"Property '{key}' is already resolved to {merged[key]!r}"
                )
            merged[key] = value
        return PropertyBag(merged, parent=self.parent)

    def to_context(self) -> dict[str, Any]:
        """Flatten into a plain dict suitable for template rendering."""
        context = {
            key: value.to_context() if isinstance(value, PropertyBag) else value
            for key, value in self._values.items()
        }
        if self.parent is not None:
            context["parent"] = self.parent.to_context()
        return context


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _supplied(source: Mapping[str, Any] | None, key: str) -> bool:
    return source is not None and source.get(key) is not None


@dataclass(frozen=True)
class PropertyResolver:
    """Resolves the ``keys`` a node kind owns from its property sources.

    Attributes:
        keys: Property names this node resolves, in declaration order.
        validators: Per-key validators used to discard malformed values.
        defaults: Computes fallback values from the values resolved so far
            and the parent bag; applied only when resolution runs with
            ``use_defaults``.
    """

    keys: tuple[str, ...]
    validators: Mapping[str, Validator] = field(default_factory=dict)
    defaults: Callable[[Mapping[str, Any], PropertyBag | None], Mapping[str, Any]] | None = None

    def merge(self, *sources: Mapping[str, Any] | None) -> dict[str, Any]:
        """Merge *sources* in precedence order; earlier sources win."""
        values: dict[str, Any] = {}
        for source in sources:
            for key in self.keys:
                if key not in values and _supplied(source, key):
                    values[key] = source[key]
        return values

    def validate(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of *values* without the keys that fail validation."""
        valid: dict[str, Any] = {}
        for key, value in values.items():
            validator = self.validators.get(key)
            error = validator(value) if validator else None
            if error:
                print_warning(f"Discarding invalid value {value!r} for '{key}': {error}")
                continue
            valid[key] = value
        return valid

    def resolve(
        self,
        options: Mapping[str, Any] | None,
        persisted: Mapping[str, Any] | None,
        descriptor: Mapping[str, Any] | None,
        use_defaults: bool,
        parent: PropertyBag | None = None,
    ) -> PropertyBag:
        """Resolve a fresh ``PropertyBag``; the source mappings are never mutated."""
        values = self.validate(self.merge(options, persisted, descriptor))

        if use_defaults and self.defaults is not None:
            for key, value in self.defaults(dict(values), parent).items():
                if key in self.keys and key not in values and value is not None:
                    values[key] = value

        return PropertyBag(values, parent=parent)
