"""Deploy operation lifecycle.

An operation is single-use: once executed it can only end as succeeded
or failed, and no state leads back to ``configured``.
"""

from __future__ import annotations

from enum import StrEnum


class DeployState(StrEnum):
    """Lifecycle states of a deploy operation."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    EXECUTED = "executed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


DEPLOY_TRANSITIONS: dict[str, list[str]] = {
    "unconfigured": ["configured"],
    "configured": ["configured", "executed"],  # reconfiguring before execute is fine
    "executed": ["succeeded", "failed"],
    "succeeded": [],
    "failed": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = DEPLOY_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
