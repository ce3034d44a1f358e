"""Utilities for reading and writing Kubernetes status conditions."""

from __future__ import annotations

from ..constants import (
    COND_CONFIGURED,
    COND_READY,
    MILESTONE_CONFIGURED,
    MILESTONE_NONE,
    MILESTONE_READY,
)
from ..models import Condition

# Milestone name -> condition type; None means "do not wait"
MILESTONE_CONDITIONS: dict[str, str | None] = {
    MILESTONE_READY: COND_READY,
    MILESTONE_CONFIGURED: COND_CONFIGURED,
    MILESTONE_NONE: None,
}


def condition_type_for(milestone: str) -> str | None:
    """Return the condition type a milestone waits on.

    Raises:
        KeyError: If the milestone is unknown
    """
    return MILESTONE_CONDITIONS[milestone]


def latest_condition(conditions: list[Condition], condition_type: str) -> Condition | None:
    """Return the most recent condition of the given type.

    Conditions are ordered by append, so earlier entries of the same type are
    stale and the last one wins.
    """
    for cond in reversed(conditions):
        if cond.type == condition_type:
            return cond
    return None


def is_stale(condition: Condition, generation: int) -> bool:
    """Check whether a condition was computed against an older generation."""
    observed = condition.observed_generation
    return generation > 0 and 0 < observed < generation


def describe_condition(condition: Condition) -> str:
    """One-line description used in wait diagnostics."""
    text = f"last observed {condition.type}={condition.status}"
    if condition.reason or condition.message:
        text += f" ({condition.reason}: {condition.message})"
    return text

