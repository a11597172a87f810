"""Error taxonomy shared by the authentication, session and worker layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


class StudioTestError(Exception):
    """Base class for all suite errors."""


class ConfigLoadError(StudioTestError):
    """Configuration could not be loaded. Fatal before any browser work."""


class AuthenticationError(StudioTestError):
    """The interactive login sequence failed."""


class AuthenticationVerificationError(AuthenticationError):
    """A supposedly authenticated page landed on a sign-in/login URL."""

    def __init__(self, url: str) -> None:
        super().__init__(
            f"Authentication verification failed - redirected to login page ({url})"
        )
        self.url = url


@dataclass
class UIInteractionError(StudioTestError):
    """Raised when a browser step's element or condition was not met."""

    name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    message: str = ""

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


@dataclass
class StepTimeoutError(UIInteractionError):
    """A bounded wait was exceeded."""

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} timed out ({self.message}) with payload={self.payload}"
