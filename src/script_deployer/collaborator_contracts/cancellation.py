"""Explicit cancellation signal threaded through every collaborator call."""

from __future__ import annotations


class DeploymentCancelledError(Exception):
    """Raised when a deployment run observes a cancellation request."""


class CancellationToken:
    """Cooperative cancellation flag owned by the caller of a run."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            message = "Deployment was cancelled."
            if self._reason:
                message = f"Deployment was cancelled: {self._reason}"
            raise DeploymentCancelledError(message)

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a token nobody will cancel."""
        return cls()
