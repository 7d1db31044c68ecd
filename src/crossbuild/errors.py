"""Exception types raised by crossbuild."""

from __future__ import annotations

from collections.abc import Iterable


class CrossBuildError(Exception):
    """Base class for crossbuild errors."""


class ConfigError(CrossBuildError):
    """Raised when configuration is missing or malformed."""


class OptionError(CrossBuildError):
    pass


class MissingOptionError(OptionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"missing required option {name!r}")
        self.name = name


class OptionValidationError(OptionError):
    """All constraint violations found for one set of options."""

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems = tuple(problems)
        super().__init__("; ".join(self.problems))


class ComponentLoadError(CrossBuildError):
    """Raised by a definition source that cannot produce its components."""


class SyncError(CrossBuildError):
    """Raised when a remote command catalog rejects a bulk replace."""
