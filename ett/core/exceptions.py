"""Custom exception hierarchy for the ETT compliance core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class EttError(Exception):
    """Base class for application specific errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class ConfigurationError(EttError):
    """Raised when a policy value cannot be resolved."""


class EntityNotFoundError(EttError):
    """Raised when an entity cannot be found in storage."""


class PersonnelLoadError(EttError):
    """Raised when the roster of an entity cannot be assembled."""


class InvalidInputError(EttError):
    """Raised when a caller supplies input the core cannot act on."""
