"""Observed objects and their status conditions.

Provides typed views over the unstructured (Kubernetes-style) resources
handed to the function. Only status conditions and object coordinates are
modeled; everything else in the object is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from status_transformer.errors import ResourceAccessError

logger = logging.getLogger(__name__)

# Key under which the composite resource is added when a matcher asks for it
RESERVED_KEY_PREFIX = "function-status-transformer.reserved-keys."
COMPOSITE_RESOURCE_KEY = RESERVED_KEY_PREFIX + "composite-resource"

EXTRA_RESOURCE_KEY_PREFIX = "extra-resource"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Condition:
    """A single status condition of an object.

    Attributes:
        type: Identity of the condition within the object
        status: True, False or Unknown (kept verbatim as observed)
        reason: Machine-readable reason
        message: Human-readable message
    """

    type: str
    status: str = ConditionStatus.UNKNOWN.value
    reason: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        """Create a Condition from a ``status.conditions`` entry."""
        return cls(
            type=str(data.get("type", "")),
            status=str(data.get("status", ConditionStatus.UNKNOWN.value)),
            reason=str(data.get("reason") or ""),
            message=str(data.get("message") or ""),
        )


@dataclass(frozen=True)
class ObservedObject:
    """An object whose conditions are matched against.

    Attributes:
        id: Key of the object in the observed map
        conditions: Status conditions in observed order
        api_version: apiVersion of the object
        kind: Kind of the object
        name: metadata.name
        namespace: metadata.namespace
    """

    id: str
    conditions: tuple[Condition, ...] = ()
    api_version: str = ""
    kind: str = ""
    name: str = ""
    namespace: str = ""

    @classmethod
    def from_unstructured(cls, key: str, data: dict[str, Any]) -> ObservedObject:
        """Create an ObservedObject from an unstructured resource.

        Args:
            key: Identity of the object (observed map key)
            data: Resource with apiVersion, kind, metadata and status.conditions

        Returns:
            ObservedObject instance

        Raises:
            ResourceAccessError: If the resource is not shaped like an object
        """
        if not isinstance(data, dict):
            raise ResourceAccessError(f"cannot convert resource to object, key: {key}: expected a mapping")

        metadata = data.get("metadata") or {}
        status = data.get("status") or {}
        if not isinstance(metadata, dict) or not isinstance(status, dict):
            raise ResourceAccessError(f"cannot convert resource to object, key: {key}: malformed metadata or status")

        raw_conditions = status.get("conditions") or []
        if not isinstance(raw_conditions, list):
            raise ResourceAccessError(f"cannot convert resource to object, key: {key}: malformed metadata or status")

        conditions = tuple(Condition.from_dict(c) for c in raw_conditions if isinstance(c, dict))

        return cls(
            id=key,
            conditions=conditions,
            api_version=str(data.get("apiVersion", "")),
            kind=str(data.get("kind", "")),
            name=str(metadata.get("name", "")),
            namespace=str(metadata.get("namespace", "")),
        )

    @property
    def group(self) -> str:
        """API group parsed from apiVersion (empty for the core group)."""
        if "/" not in self.api_version:
            return ""
        return self.api_version.split("/", 1)[0]

    def get_condition(self, condition_type: str) -> Condition:
        """Get the condition of the given type.

        The first condition of that type wins. A missing condition is
        reported as Unknown with empty reason and message.
        """
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return Condition(type=condition_type)


@dataclass(frozen=True)
class ExtraResource:
    """A resource supplied by an extra-resources function.

    Attributes:
        into: Label the extra resources were requested under
        obj: The resource itself
    """

    into: str
    obj: ObservedObject = field(repr=False)

    @property
    def key(self) -> str:
        """Key used to match resource name patterns.

        Format: ``extra-resource.<into>.<group>.<kind>.<namespace>.<name>``
        """
        return ".".join(
            [
                EXTRA_RESOURCE_KEY_PREFIX,
                self.into,
                self.obj.group,
                self.obj.kind,
                self.obj.namespace,
                self.obj.name,
            ]
        )


def observed_from_unstructured(resources: dict[str, Any]) -> dict[str, ObservedObject]:
    """Convert an observed resource map to ObservedObjects.

    Args:
        resources: Mapping of key to ``{"resource": {...}}`` entries

    Raises:
        ResourceAccessError: If any entry cannot be converted
    """
    if not isinstance(resources, dict):
        raise ResourceAccessError(f"unexpected observed resources type: {type(resources).__name__}")

    observed: dict[str, ObservedObject] = {}
    for key, entry in resources.items():
        if not isinstance(entry, dict):
            raise ResourceAccessError(f"cannot convert resource to object, key: {key}: expected a mapping")
        observed[key] = ObservedObject.from_unstructured(key, entry.get("resource") or {})
    return observed


def extra_resources_from_context(value: Any) -> list[ExtraResource]:
    """Convert the extra-resources context value to ExtraResources.

    Args:
        value: Mapping of ``into`` label to a list of unstructured resources

    Raises:
        ResourceAccessError: If the value is not shaped as expected
    """
    if value is None:
        return []
    if not isinstance(value, dict):
        raise ResourceAccessError(f"unexpected extra-resources type: {type(value).__name__}")

    extra: list[ExtraResource] = []
    for into, items in value.items():
        if not isinstance(items, list):
            raise ResourceAccessError(f"unexpected extra-resources value type for {into}: {type(items).__name__}")
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise ResourceAccessError(
                    f"unexpected extra-resources value type for {into} [{i}]: {type(item).__name__}"
                )
            obj = ObservedObject.from_unstructured(f"{into}[{i}]", item)
            extra.append(ExtraResource(into=into, obj=obj))

    logger.debug("Loaded %d extra resource(s)", len(extra))
    return extra
