"""Hook evaluator.

Evaluates status condition hooks in declared order. Each hook ends up
MATCHED, UNMATCHED or MATCH_FAILED.

A hook matches when every one of its matchers matches. A matched hook sets
its conditions and creates its events in declared order. Failures are
isolated: a matcher error abandons its hook, a render error abandons one
setter or event, and the run continues with a failure recorded.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from status_transformer.engine.context import EvaluationResult, ExtraResourcesProvider, RunState
from status_transformer.engine.matcher import evaluate_matcher
from status_transformer.engine.overrides import mark_set, override_mode, should_set
from status_transformer.engine.predicate import Groups
from status_transformer.engine.selector import select_resources
from status_transformer.engine.transform import render_condition, render_event
from status_transformer.errors import ConditionRenderError, MatchEvaluationError, ResourceAccessError

if TYPE_CHECKING:
    from status_transformer.input import StatusConditionHook
    from status_transformer.resources import ObservedObject

logger = logging.getLogger(__name__)


class HookState(Enum):
    """Final matching state of a hook."""

    MATCHED = "matched"
    UNMATCHED = "unmatched"
    MATCH_FAILED = "match_failed"


class HookEvaluator:
    """Evaluates status condition hooks against observed resources.

    Attributes:
        hooks: Hooks in evaluation order
    """

    def __init__(self, hooks: list[StatusConditionHook]) -> None:
        self.hooks = list(hooks)
        logger.debug("Hook evaluator initialized with %d hook(s)", len(self.hooks))

    def evaluate(
        self,
        observed: dict[str, ObservedObject],
        composite: ObservedObject | None = None,
        extra_resources: ExtraResourcesProvider | None = None,
    ) -> EvaluationResult:
        """Evaluate all hooks.

        Args:
            observed: Observed objects by key
            composite: The composite resource
            extra_resources: Loads extra resources; called at most once, and
                only if a matcher includes extra resources

        Returns:
            Conditions, events and failures of the run
        """
        state = RunState(extra_resources_provider=extra_resources)

        for hook_index, hook in enumerate(self.hooks):
            try:
                hook_state, groups = self._match_hook(hook_index, hook, observed, composite, state)
            except ResourceAccessError as e:
                logger.error("cannot load extra-resources: %s", e)
                return EvaluationResult.fatal(e, "cannot load extra-resources")

            if hook_state != HookState.MATCHED:
                logger.debug("Hook %d %s", hook_index, hook_state.value)
                continue

            self._set_conditions(hook_index, hook, groups, state)
            self._create_events(hook_index, hook, groups, state)

        result = state.to_result()
        if result.succeeded:
            logger.debug("Evaluated %d hook(s) successfully", len(self.hooks))
        else:
            logger.info(
                "Evaluated %d hook(s) with %d failure(s): %s",
                len(self.hooks),
                len(result.failures),
                result.summary.message,
            )
        return result

    def _match_hook(
        self,
        hook_index: int,
        hook: StatusConditionHook,
        observed: dict[str, ObservedObject],
        composite: ObservedObject | None,
        state: RunState,
    ) -> tuple[HookState, Groups]:
        """Match all matchers of a hook.

        Returns:
            (final hook state, captured groups merged across matchers)

        Raises:
            ResourceAccessError: If extra resources cannot be loaded
        """
        if not hook.matchers:
            return HookState.UNMATCHED, {}

        groups: Groups = {}
        for matcher_index, matcher in enumerate(hook.matchers):
            logger.debug(
                "Matching hook %d, matcher %d%s",
                hook_index,
                matcher_index,
                f" ({matcher.name})" if matcher.name else "",
            )
            try:
                selection = select_resources(
                    matcher, observed, composite, lambda: state.extra_resources
                )
                matched, matcher_groups = evaluate_matcher(matcher, selection)
            except MatchEvaluationError as e:
                logger.info(
                    "cannot match resources, statusConditionHookIndex: %d, matchConditionIndex: %d: %s",
                    hook_index,
                    matcher_index,
                    e,
                )
                state.record_failure(
                    e,
                    f"cannot match resources, statusConditionHookIndex: {hook_index}, "
                    f"matchConditionIndex: {matcher_index}",
                )
                return HookState.MATCH_FAILED, {}

            if not matched:
                return HookState.UNMATCHED, {}
            groups = {**groups, **matcher_groups}

        return HookState.MATCHED, groups

    def _set_conditions(
        self,
        hook_index: int,
        hook: StatusConditionHook,
        groups: Groups,
        state: RunState,
    ) -> None:
        for setter_index, setter in enumerate(hook.set_conditions):
            condition_type = setter.condition.type
            if not should_set(state.conditions_set, condition_type, override_mode(setter)):
                logger.debug(
                    "Skipping setCondition %d of hook %d: condition '%s' is already set and setter is not forceful",
                    setter_index,
                    hook_index,
                    condition_type,
                )
                continue

            try:
                condition = render_condition(setter, groups)
            except ConditionRenderError as e:
                logger.info(
                    "cannot set condition, statusConditionHookIndex: %d, setConditionIndex: %d: %s",
                    hook_index,
                    setter_index,
                    e,
                )
                state.record_failure(
                    e,
                    f"cannot set condition, statusConditionHookIndex: {hook_index}, setConditionIndex: {setter_index}",
                )
                continue

            state.conditions.append(condition)
            mark_set(state.conditions_set, condition_type)
            logger.debug("Set condition '%s' (hook %d)", condition_type, hook_index)

    def _create_events(
        self,
        hook_index: int,
        hook: StatusConditionHook,
        groups: Groups,
        state: RunState,
    ) -> None:
        for event_index, creator in enumerate(hook.create_events):
            try:
                event = render_event(creator, groups)
            except ConditionRenderError as e:
                logger.info(
                    "cannot create event, statusConditionHookIndex: %d, createEventIndex: %d: %s",
                    hook_index,
                    event_index,
                    e,
                )
                state.record_failure(
                    e,
                    f"cannot create event, statusConditionHookIndex: {hook_index}, createEventIndex: {event_index}",
                )
                continue

            state.events.append(event)


def evaluate(
    hooks: list[StatusConditionHook],
    observed: dict[str, ObservedObject],
    composite: ObservedObject | None = None,
    extra_resources: ExtraResourcesProvider | None = None,
) -> EvaluationResult:
    """Evaluate hooks against observed resources (see HookEvaluator.evaluate)."""
    return HookEvaluator(hooks).evaluate(observed, composite, extra_resources)
