"""Resource selection for matchers.

Resolves which objects a matcher applies to:
- observed resources whose key matches any resource name pattern
- extra resources whose composite key matches, when includeExtraResources
- the composite resource under a reserved key, when includeCompositeAsResource
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from status_transformer.engine.predicate import compile_pattern
from status_transformer.errors import MatchEvaluationError
from status_transformer.resources import COMPOSITE_RESOURCE_KEY

if TYPE_CHECKING:
    from collections.abc import Callable

    from status_transformer.input import Matcher
    from status_transformer.resources import ExtraResource, ObservedObject

logger = logging.getLogger(__name__)


def select_resources(
    matcher: Matcher,
    observed: dict[str, ObservedObject],
    composite: ObservedObject | None = None,
    extra_resources: Callable[[], list[ExtraResource]] | None = None,
) -> dict[str, ObservedObject]:
    """Select the objects a matcher applies to.

    Args:
        matcher: Matcher with resource name patterns
        observed: Observed objects by key
        composite: The composite resource
        extra_resources: Returns extra resources; only called when the
            matcher includes extra resources

    Returns:
        Selected objects by key (may be empty)

    Raises:
        MatchEvaluationError: If a resource name pattern does not compile
        ResourceAccessError: If extra resources cannot be loaded
    """
    selected: dict[str, ObservedObject] = {}

    extra: list[ExtraResource] = []
    if matcher.include_extra_resources and extra_resources is not None:
        extra = extra_resources()

    for i, resource_matcher in enumerate(matcher.resources):
        try:
            regex = compile_pattern(resource_matcher.name, f"resource key regex, resourcesIndex: {i}")
        except MatchEvaluationError as e:
            logger.info("%s", e)
            raise

        for key, obj in observed.items():
            if regex.search(key):
                selected[key] = obj

        for resource in extra:
            key = resource.key
            if regex.search(key):
                selected[key] = resource.obj

    if matcher.include_composite_as_resource and composite is not None:
        selected[COMPOSITE_RESOURCE_KEY] = composite

    logger.debug("Selected %d resource(s): %s", len(selected), sorted(selected))
    return selected
