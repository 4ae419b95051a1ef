"""Exceções compartilhadas pelos fluxos do Super Seed."""

from __future__ import annotations


class SuperSeedError(Exception):
    """Base class for every recoverable client error."""


class ValidationError(SuperSeedError):
    """Raised locally, before any request reaches the engine."""


class RemoteError(SuperSeedError):
    """The engine rejected or failed a request."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class DeadlineExceeded(SuperSeedError, TimeoutError):
    """A request did not answer before its local deadline."""

    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class WorkflowBusyError(SuperSeedError):
    """Raised when a workflow already has a request in flight."""
