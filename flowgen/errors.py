"""Configuration error taxonomy.

Every failure raised while reading a client configuration file derives from
``ConfigError`` so that callers can decide their own termination policy.
"""

from __future__ import annotations

from pathlib import Path


class ConfigError(ValueError):
    """Base class for client configuration failures.

    Attributes:
        path: Configuration file the error refers to, when known.
        line_number: 1-based line number of the offending directive, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        line_number: int | None = None,
    ) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is not None and self.line_number is not None:
            return f"{self.path}:{self.line_number}: {self.message}"
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigFileError(ConfigError):
    """Configuration file could not be opened or read."""


class SchemaError(ConfigError):
    """A directive key outside the recognized set was found."""


class CardinalityError(ConfigError):
    """A mandatory directive appears the wrong number of times."""


class AllocationError(ConfigError):
    """Tables sized from the counting pass could not be allocated."""


class MalformedFieldError(ConfigError):
    """A recognized directive carries missing or unparseable fields."""
