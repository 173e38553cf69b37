"""Exception hierarchy for the scaffolding engine."""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for every expected scaffolding failure."""


class PropertyValidationError(GeneratorError):
    """A required property is missing or holds a malformed value."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Property '{name}': {message}")


class InvariantViolationError(GeneratorError):
    """A project-wide invariant would be broken by the requested change."""


class DuplicateModuleError(InvariantViolationError):
    """A second instance of a singleton module type was requested."""

    def __init__(self, module_type: str, existing_path: str, candidate_path: str) -> None:
        self.module_type = module_type
        self.existing_path = existing_path
        self.candidate_path = candidate_path
        super().__init__(
            f"Refusing to create a second '{module_type}' module at '{candidate_path}': "
            f"one already exists at '{existing_path}'."
        )


class UnknownModuleError(GeneratorError):
    """A module type tag has no registered generator."""

    def __init__(self, module_type: str) -> None:
        self.module_type = module_type
        super().__init__(f"Unknown module type: '{module_type}'")


class ResolutionError(GeneratorError):
    """Artifact metadata could not be resolved from the remote service."""

    def __init__(self, coordinate: str, message: str) -> None:
        self.coordinate = coordinate
        super().__init__(f"Could not resolve {coordinate}: {message}")


class ConfigStoreError(GeneratorError):
    """The persisted project configuration cannot be read."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot read project configuration {path}: {message}")
