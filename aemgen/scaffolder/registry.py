"""Persisted module records and the cross-module invariant check.

The ``ConfigStore`` is the project's persisted configuration: one JSON file at
the project root holding the project-wide properties and one ``ModuleRecord``
per module path.  It is handed explicitly to every generator node.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aemgen.errors import ConfigStoreError, DuplicateModuleError
from aemgen.utils import load_json, write_json



class ModuleType(str, Enum):
    """Module kinds a project can contain."""

    APP = "app"
    TESTS_IT = "tests-it"


# Module types a project may contain at most once.
SINGLETON_MODULE_TYPES: frozenset[str] = frozenset({ModuleType.TESTS_IT.value})


class ModuleRecord(BaseModel):
    """Persisted metadata identifying a module's path and type.

    Any other resolved module property (``package``, ``publish``, ...) is kept
    as an extra field.
    """

    model_config = ConfigDict(extra="allow")

    path: str = Field(..., description="Module location relative to the project root")
    module_type: str = Field(..., description="Tag from ModuleType")

    def properties(self) -> dict[str, Any]:
        """Return the persisted properties other than path and type."""
        return self.model_dump(exclude={"path", "module_type"})


def check_invariant(
    existing: Mapping[str, ModuleRecord],
    module_type: str,
    path: str,
) -> None:
    """Reject a second instance of a singleton module type.

    Re-configuring the module already recorded at *path* is allowed.

    Raises:
        DuplicateModuleError: If another path already holds *module_type*
            and that type is a singleton.
    """
    if module_type not in SINGLETON_MODULE_TYPES:
        return
    for record_path, record in existing.items():
        if record.module_type == module_type and record_path != path:
            raise DuplicateModuleError(module_type, record_path, path)


class ConfigStore:
    """JSON-backed persisted configuration, keyed by project-relative path.

    Every ``set`` is written through to disk immediately.

    Raises:
        ConfigStoreError: If the file exists but is not valid JSON or holds
            malformed module records.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            raw = load_json(self.path)
            self._project: dict[str, Any] = dict(raw.get("project", {}))
            self._modules: dict[str, ModuleRecord] = {
                key: ModuleRecord(path=key, **value)
                for key, value in raw.get("modules", {}).items()
            }
        except (ValueError, TypeError, AttributeError) as exc:
            raise ConfigStoreError(str(self.path), str(exc)) from exc

    # -- Project-wide properties -------------------------------------------

    def get_project(self) -> dict[str, Any]:
        return dict(self._project)

    def set_project(self, properties: Mapping[str, Any]) -> None:
        self._project = dict(properties)
        self._save()

    # -- Module records ----------------------------------------------------

    def get_all(self) -> dict[str, ModuleRecord]:
        return dict(self._modules)

    def get(self, path: str) -> ModuleRecord | None:
        return self._modules.get(path)

    def set(self, path: str, record: ModuleRecord) -> None:
        self._modules[path] = record
        self._save()

    def _save(self) -> None:
        write_json(
            {
                "project": self._project,
                "modules": {
                    key: record.model_dump(exclude={"path"})
                    for key, record in self._modules.items()
                },
            },
            self.path,
        )
