"""Quantified matching of resources against condition predicates.

Each quantifier is one function over (predicates, selection):

    AnyResourceMatchesAnyCondition   ∃r ∃c  match(c, r)
    AnyResourceMatchesAllConditions  ∃r ∀c  match(c, r)
    AllResourcesMatchAnyCondition    ∀r ∃c  match(c, r)
    AllResourcesMatchAllConditions   ∀r ∀c  match(c, r)

Resources are visited in sorted key order so that the captured groups of
the "first" match are reproducible. Captured groups are merged with later
values overwriting earlier ones.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from status_transformer.engine.predicate import Groups, match_condition
from status_transformer.input import Quantifier

if TYPE_CHECKING:
    from status_transformer.input import ConditionMatcher, Matcher
    from status_transformer.resources import ObservedObject

logger = logging.getLogger(__name__)

Selection = dict[str, "ObservedObject"]
QuantifierFn = Callable[[list["ConditionMatcher"], Selection], tuple[bool, Groups]]


def _ordered(selection: Selection) -> list[ObservedObject]:
    return [selection[key] for key in sorted(selection)]


def any_resource_matches_any_condition(
    predicates: list[ConditionMatcher], selection: Selection
) -> tuple[bool, Groups]:
    """Succeed on the first (resource, predicate) pair that matches.

    Captured groups are those of the matching pair only.
    """
    for obj in _ordered(selection):
        for predicate in predicates:
            matched, groups = match_condition(predicate, obj)
            if matched:
                return True, groups
    return False, {}


def any_resource_matches_all_conditions(
    predicates: list[ConditionMatcher], selection: Selection
) -> tuple[bool, Groups]:
    """Succeed on the first resource that matches every predicate.

    Captured groups are merged across that resource's predicates.
    """
    for obj in _ordered(selection):
        captured: Groups = {}
        for predicate in predicates:
            matched, groups = match_condition(predicate, obj)
            if not matched:
                break
            captured = {**captured, **groups}
        else:
            return True, captured
    return False, {}


def all_resources_match_any_condition(
    predicates: list[ConditionMatcher], selection: Selection
) -> tuple[bool, Groups]:
    """Require every resource to match at least one predicate.

    Captured groups of each resource's first matching predicate are merged
    across resources.
    """
    captured: Groups = {}
    for obj in _ordered(selection):
        for predicate in predicates:
            matched, groups = match_condition(predicate, obj)
            if matched:
                captured = {**captured, **groups}
                break
        else:
            logger.debug("resource %s matched none of %d condition(s)", obj.id, len(predicates))
            return False, {}
    return True, captured


def all_resources_match_all_conditions(
    predicates: list[ConditionMatcher], selection: Selection
) -> tuple[bool, Groups]:
    """Require every resource to match every predicate.

    Captured groups are merged across all pairs.
    """
    captured: Groups = {}
    for obj in _ordered(selection):
        for predicate in predicates:
            matched, groups = match_condition(predicate, obj)
            if not matched:
                return False, {}
            captured = {**captured, **groups}
    return True, captured


QUANTIFIERS: dict[Quantifier, QuantifierFn] = {
    Quantifier.ANY_RESOURCE_ANY_CONDITION: any_resource_matches_any_condition,
    Quantifier.ANY_RESOURCE_ALL_CONDITIONS: any_resource_matches_all_conditions,
    Quantifier.ALL_RESOURCES_ANY_CONDITION: all_resources_match_any_condition,
    Quantifier.ALL_RESOURCES_ALL_CONDITIONS: all_resources_match_all_conditions,
}


def evaluate_matcher(matcher: Matcher, selection: Selection) -> tuple[bool, Groups]:
    """Evaluate a matcher against its selected resources.

    A matcher with no resources or no conditions never matches.

    Args:
        matcher: Matcher holding the quantifier and predicates
        selection: Objects selected for the matcher

    Returns:
        (matched, captured groups)

    Raises:
        MatchEvaluationError: If a predicate regular expression does not compile
    """
    if not selection:
        logger.debug("no resources to match against")
        return False, {}
    if not matcher.conditions:
        logger.debug("no conditions to match against")
        return False, {}

    return QUANTIFIERS[matcher.type](matcher.conditions, selection)
