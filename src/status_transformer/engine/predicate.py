"""Condition predicates.

A ConditionMatcher is evaluated against one object's conditions:
- type selects the condition (missing → Unknown, empty reason and message)
- reason and status are exact comparisons, wildcards when omitted
- message is a regular expression searched in the condition message;
  its named groups are captured for message templates

Patterns are compiled with Python's re module. Named groups may be written
as (?P<Name>...) or (?<Name>...). re is more permissive than RE2: lookaround
and backreferences compile here although RE2 would reject them.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from status_transformer.errors import MatchEvaluationError

if TYPE_CHECKING:
    from status_transformer.input import ConditionMatcher
    from status_transformer.resources import ObservedObject

logger = logging.getLogger(__name__)

Groups = dict[str, str]

# (?<Name>...) outside an escape, but not lookbehind (?<= or (?<!
_NAMED_GROUP = re.compile(r"(?<!\\)\(\?<(?=[A-Za-z_])")


def compile_pattern(pattern: str, what: str) -> re.Pattern[str]:
    """Compile a user supplied regular expression.

    Args:
        pattern: Regular expression
        what: Description used in the error message

    Raises:
        MatchEvaluationError: If the pattern does not compile
    """
    try:
        return re.compile(_NAMED_GROUP.sub("(?P<", pattern))
    except re.error as e:
        raise MatchEvaluationError(f"cannot compile {what}: error parsing regexp: {e}") from e


def match_condition(matcher: ConditionMatcher, obj: ObservedObject) -> tuple[bool, Groups]:
    """Match a condition predicate against an object.

    Args:
        matcher: Condition predicate
        obj: Object whose conditions are checked

    Returns:
        (matched, captured groups)

    Raises:
        MatchEvaluationError: If the message regular expression does not compile
    """
    condition = obj.get_condition(matcher.type)

    if matcher.reason is not None and matcher.reason != condition.reason:
        logger.debug(
            "condition reason %r did not match %r (resource: %s)", condition.reason, matcher.reason, obj.id
        )
        return False, {}

    if matcher.status is not None and matcher.status != condition.status:
        logger.debug(
            "condition status %r did not match %r (resource: %s)", condition.status, matcher.status, obj.id
        )
        return False, {}

    if matcher.message is None:
        logger.debug("condition %s matched (resource: %s)", matcher.type, obj.id)
        return True, {}

    regex = compile_pattern(matcher.message, "message regex")
    match = regex.search(condition.message)
    if match is None:
        logger.debug(
            "condition message %r did not match %r (resource: %s)", condition.message, matcher.message, obj.id
        )
        return False, {}

    # Unmatched optional groups capture the empty string
    groups = {name: value or "" for name, value in match.groupdict().items()}
    logger.debug("condition matched - total captured groups: %s", groups)
    return True, groups
