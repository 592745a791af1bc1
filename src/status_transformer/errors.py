"""Error taxonomy for status-transformer.

Fatal errors abort a run before any hook is evaluated:
- ConfigurationError: function input could not be parsed or validated
- ResourceAccessError: composite, observed or extra resources could not be read

Recoverable errors abort a single hook or a single setter/event and are
recorded as failure conditions while the run continues:
- MatchEvaluationError: a regular expression inside a matcher failed to compile
- ConditionRenderError: a message template or enum value could not be rendered
"""

from __future__ import annotations

# Condition reasons reported on the function success condition
REASON_AVAILABLE = "Available"
REASON_INPUT_FAILURE = "InputFailure"
REASON_MATCH_FAILURE = "MatchFailure"
REASON_SET_CONDITION_FAILURE = "SetConditionFailure"


class StatusTransformerError(Exception):
    """Base class for all status-transformer errors."""

    reason: str = REASON_INPUT_FAILURE

    def wrap(self, message: str) -> str:
        """Prefix the error text with context, ``"<message>: <error>"``."""
        return f"{message}: {self}"


class ConfigurationError(StatusTransformerError):
    """Function input could not be parsed or validated."""

    reason = REASON_INPUT_FAILURE


class ResourceAccessError(StatusTransformerError):
    """The composite, observed or extra resources could not be obtained."""

    reason = REASON_INPUT_FAILURE


class MatchEvaluationError(StatusTransformerError):
    """A matcher could not be evaluated (regex compile failure)."""

    reason = REASON_MATCH_FAILURE


class ConditionRenderError(StatusTransformerError):
    """A condition or event could not be rendered."""

    reason = REASON_SET_CONDITION_FAILURE
