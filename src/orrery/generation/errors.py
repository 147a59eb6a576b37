"""Error types raised by the generation engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError


class OrreryError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(OrreryError):
    """A generation parameter is out of range or inconsistent.

    Raised before any entity is created. ``field`` names the offending
    parameter using its snake_case name.
    """

    def __init__(
        self,
        field: str,
        message: str,
        errors: Optional[Sequence[Dict[str, Any]]] = None,
    ):
        self.field = field
        self.message = message
        self.errors: List[Dict[str, Any]] = list(errors or [])
        super().__init__(f"{field}: {message}")

    @classmethod
    def from_validation_error(
        cls,
        exc: ValidationError,
        aliases: Optional[Dict[str, str]] = None,
    ) -> "ConfigurationError":
        """Convert a pydantic error, reporting the first failing field.

        ``aliases`` maps camelCase input names back to field names.
        """
        details = exc.errors()
        if not details:
            return cls("config", str(exc))
        first = details[0]
        aliases = aliases or {}
        loc = [aliases.get(str(part), str(part)) for part in first.get("loc", ())]
        return cls(".".join(loc) or "config", first.get("msg", "invalid value"), details)


class UniverseValidationError(OrreryError):
    """Raised on request when a validation report carries violations."""

    def __init__(self, violations: Sequence[Any]):
        self.violations = list(violations)
        summary = ", ".join(sorted({v.code for v in self.violations}))
        super().__init__(f"{len(self.violations)} invariant violation(s): {summary}")
