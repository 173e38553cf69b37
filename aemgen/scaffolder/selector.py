"""Choosing which templates a module renders."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TemplateSet:
    """Templates of one generator kind, split into tiers.

    ``shared`` is always rendered.  Each entry of ``gated`` maps a boolean
    property name to the templates rendered only when that property is true.
    """

    shared: tuple[str, ...]
    gated: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def all(self) -> tuple[str, ...]:
        ids = list(self.shared)
        for group in self.gated.values():
            ids.extend(group)
        return tuple(ids)


def select_templates(template_set: TemplateSet, flags: Mapping[str, Any]) -> tuple[str, ...]:
    """Return the ordered template identifiers enabled by *flags*.

    Shared templates come first, followed by each gated group whose flag is
    truthy, in declaration order.
    """
    selected = list(template_set.shared)
    for flag, group in template_set.gated.items():
        if flags.get(flag):
            selected.extend(group)
    return tuple(selected)
