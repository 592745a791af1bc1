"""Transformation of matched hooks into conditions and events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from status_transformer.engine.context import ConditionResult, EventResult, Severity
from status_transformer.engine.template import render_message
from status_transformer.errors import ConditionRenderError
from status_transformer.input import EventType, Target
from status_transformer.resources import ConditionStatus

if TYPE_CHECKING:
    from status_transformer.engine.predicate import Groups
    from status_transformer.input import CreateEvent, SetCondition

_STATUSES = {
    ConditionStatus.TRUE.value: ConditionStatus.TRUE,
    ConditionStatus.FALSE.value: ConditionStatus.FALSE,
}

_SEVERITIES = {
    EventType.NORMAL.value: Severity.NORMAL,
    EventType.WARNING.value: Severity.WARNING,
}


def resolve_target(target: str | None) -> Target:
    """Resolve a target, defaulting to the composite."""
    if target == Target.COMPOSITE_AND_CLAIM.value:
        return Target.COMPOSITE_AND_CLAIM
    return Target.COMPOSITE


def resolve_status(status: str | None) -> ConditionStatus:
    """Resolve a condition status; anything but True or False is Unknown."""
    return _STATUSES.get(status or "", ConditionStatus.UNKNOWN)


def resolve_severity(event_type: str | None) -> Severity:
    """Resolve an event severity.

    Raises:
        ConditionRenderError: If the type is neither Normal nor Warning
    """
    if event_type is None:
        return Severity.NORMAL
    try:
        return _SEVERITIES[event_type]
    except KeyError:
        raise ConditionRenderError(f"invalid type {event_type}, must be one of [Normal, Warning]") from None


def render_condition(setter: SetCondition, groups: Groups) -> ConditionResult:
    """Render the condition of a setter.

    Args:
        setter: Condition setter
        groups: Captured groups of the hook's matchers

    Raises:
        ConditionRenderError: If the message template cannot be rendered
    """
    template = setter.condition
    return ConditionResult(
        type=template.type,
        status=resolve_status(template.status),
        reason=template.reason,
        message=render_message(template.message, groups),
        target=resolve_target(setter.target),
    )


def render_event(creator: CreateEvent, groups: Groups) -> EventResult:
    """Render the event of an event creator.

    Args:
        creator: Event creator
        groups: Captured groups of the hook's matchers

    Raises:
        ConditionRenderError: If the type is invalid or the message template
            cannot be rendered
    """
    template = creator.event
    severity = resolve_severity(template.type)
    return EventResult(
        severity=severity,
        message=render_message(template.message, groups) or "",
        reason=template.reason,
        target=resolve_target(creator.target),
    )
