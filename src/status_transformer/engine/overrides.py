"""Override policy for condition setters.

A condition type can be set once per run:
- NORMAL setter → skipped when the type is already set
- FORCE setter → always applied, replacing the earlier condition

The set of condition types is shared by every hook in the run, so a type
set by one hook blocks non-forceful setters in all later hooks.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from status_transformer.input import SetCondition

logger = logging.getLogger(__name__)


class OverrideMode(Enum):
    """Override mode for a condition setter."""

    NORMAL = "normal"  # First setter of a type wins
    FORCE = "force"  # Always set


def override_mode(setter: SetCondition) -> OverrideMode:
    """Get the override mode of a setter (NORMAL unless force is true)."""
    return OverrideMode.FORCE if setter.is_forceful else OverrideMode.NORMAL


def should_set(conditions_set: set[str], condition_type: str, mode: OverrideMode) -> bool:
    """Determine if a condition of the given type may be set.

    Args:
        conditions_set: Condition types already set during the run
        condition_type: Type of the condition about to be set
        mode: Override mode of the setter

    Returns:
        True if the setter should be applied
    """
    if mode == OverrideMode.FORCE:
        return True
    return condition_type not in conditions_set


def mark_set(conditions_set: set[str], condition_type: str) -> None:
    """Record that a condition type has been set."""
    if condition_type in conditions_set:
        logger.debug("Condition '%s' overridden by forceful setter", condition_type)
    conditions_set.add(condition_type)
