"""Run state and results for a single evaluation.

RunState is created fresh for every evaluation, mutated only by the
HookEvaluator and discarded once the EvaluationResult is built.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from status_transformer.errors import REASON_AVAILABLE, StatusTransformerError
from status_transformer.input import Target
from status_transformer.resources import ConditionStatus, ExtraResource

# Type of the function success condition
TYPE_FUNCTION_SUCCESS = "StatusTransformationSuccess"

ExtraResourcesProvider = Callable[[], list[ExtraResource]]


class Severity(str, Enum):
    NORMAL = "Normal"
    WARNING = "Warning"


@dataclass(frozen=True)
class ConditionResult:
    """A condition to set on the target(s)."""

    type: str
    status: ConditionStatus
    reason: str
    message: str | None = None
    target: Target = Target.COMPOSITE

    def to_dict(self) -> dict[str, str]:
        data = {
            "type": self.type,
            "status": self.status.value,
            "reason": self.reason,
            "target": self.target.value,
        }
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class EventResult:
    """An event to record on the target(s)."""

    severity: Severity
    message: str
    reason: str | None = None
    target: Target = Target.COMPOSITE

    def to_dict(self) -> dict[str, str]:
        data = {
            "severity": self.severity.value,
            "message": self.message,
            "target": self.target.value,
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class Failure:
    """A recorded run-level failure.

    Attributes:
        reason: Condition reason (MatchFailure, SetConditionFailure, ...)
        message: Full diagnostic including hook/matcher/setter indices
    """

    reason: str
    message: str

    def to_condition(self) -> ConditionResult:
        return ConditionResult(
            type=TYPE_FUNCTION_SUCCESS,
            status=ConditionStatus.FALSE,
            reason=self.reason,
            message=self.message,
        )


@dataclass
class RunState:
    """Mutable state threaded through one evaluation.

    Attributes:
        conditions_set: Condition types already set during this run
        conditions: Emitted conditions and failure conditions, in run order
        events: Emitted events, in run order
        failures: Recorded non-fatal failures, in run order
        extra_resources_provider: Loads extra resources on first use
    """

    extra_resources_provider: ExtraResourcesProvider | None = None
    conditions_set: set[str] = field(default_factory=set)
    conditions: list[ConditionResult] = field(default_factory=list)
    events: list[EventResult] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)
    _extra_resources: list[ExtraResource] | None = field(default=None, repr=False)

    @property
    def failed(self) -> bool:
        """True if any non-fatal failure was recorded."""
        return bool(self.failures)

    @property
    def extra_resources(self) -> list[ExtraResource]:
        """Extra resources, fetched at most once per run.

        Raises:
            ResourceAccessError: If the provider fails
        """
        if self._extra_resources is None:
            provider = self.extra_resources_provider
            self._extra_resources = list(provider()) if provider is not None else []
        return self._extra_resources

    def record_failure(self, error: StatusTransformerError, message: str) -> Failure:
        """Record a non-fatal failure and emit its failure condition.

        Args:
            error: The error that caused the failure
            message: Context prefixed to the error text

        Returns:
            The recorded Failure
        """
        failure = Failure(reason=error.reason, message=error.wrap(message))
        self.failures.append(failure)
        self.conditions.append(failure.to_condition())
        return failure

    def to_result(self) -> EvaluationResult:
        """Finish the run and build its result."""
        conditions = list(self.conditions)
        if not self.failed:
            conditions.append(success_condition())
        return EvaluationResult(
            conditions=conditions,
            events=list(self.events),
            failures=list(self.failures),
        )


@dataclass(frozen=True)
class EvaluationResult:
    """Output of one evaluation.

    Attributes:
        conditions: Conditions to set, in order; ends with the success
            condition when no failure was recorded
        events: Events to record, in order
        failures: Non-fatal failures, in order
    """

    conditions: list[ConditionResult]
    events: list[EventResult]
    failures: list[Failure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def summary(self) -> ConditionResult:
        """Overall health: Available, or the last recorded failure."""
        if self.failures:
            return self.failures[-1].to_condition()
        return success_condition()

    @classmethod
    def fatal(cls, error: StatusTransformerError, message: str) -> EvaluationResult:
        """Result of a run aborted by a fatal error."""
        failure = Failure(reason=error.reason, message=error.wrap(message))
        return cls(conditions=[failure.to_condition()], events=[], failures=[failure])


def success_condition() -> ConditionResult:
    return ConditionResult(
        type=TYPE_FUNCTION_SUCCESS,
        status=ConditionStatus.TRUE,
        reason=REASON_AVAILABLE,
    )
