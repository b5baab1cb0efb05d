"""Cancellation token tests."""

from __future__ import annotations

import pytest
from script_deployer.collaborator_contracts.cancellation import (
    CancellationToken,
    DeploymentCancelledError,
)


def test_new_token_is_not_cancelled() -> None:
    token = CancellationToken.none()

    token.raise_if_cancelled()
    assert token.is_cancelled is False
    assert token.reason is None


def test_cancelled_token_raises_with_reason() -> None:
    token = CancellationToken()
    token.cancel("interrupted")

    with pytest.raises(DeploymentCancelledError, match="Deployment was cancelled: interrupted"):
        token.raise_if_cancelled()


def test_first_cancel_reason_is_kept() -> None:
    token = CancellationToken()
    token.cancel("first")
    token.cancel("second")

    assert token.is_cancelled is True
    assert token.reason == "first"
