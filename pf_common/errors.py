"""Shared error taxonomy for pyfacter."""

from __future__ import annotations

from typing import Any, Mapping


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class PFError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(PFError):
    """Failure due to invalid configuration or command-line input."""


class OptionConflictError(ConfigurationError):
    """Two or more mutually exclusive command-line options were supplied."""


class LocaleSetupError(PFError):
    """The logging system could not initialize the process locale."""


class ExternalFactError(PFError):
    """Failure reading or parsing an external fact source."""


class CustomFactError(PFError):
    """Failure loading or resolving a custom fact."""


class ScriptingError(PFError):
    """Failure in the custom-fact scripting runtime itself."""


def error_to_payload(error: PFError) -> dict[str, Any]:
    """Convert a PFError to a flat payload suitable for structured logs."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
