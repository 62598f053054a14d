"""Exception taxonomy for the override registry.

Failures raised by an implementation are never translated into these; they
reach the dispatch caller unchanged.
"""
from __future__ import annotations

from collections.abc import Iterable


class BridgeError(Exception):
    """Base class for errors raised by the registry itself."""
    pass


class ReservedNameError(BridgeError, ValueError):
    """Raised when a default implementation is supplied under a control name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Key {name!r} is reserved and cannot be used as an operation name."
        )


class InvalidOperationError(BridgeError, ValueError):
    """Raised when the declared operation names cannot form a registry."""

    def __init__(self, message: str, name: str | None = None) -> None:
        self.name = name
        super().__init__(message)


class UnknownOperationError(BridgeError, LookupError):
    """Raised when a control call or lookup names an undeclared operation."""

    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Operation {name!r} not found. Available: {self.available}"
        )
