"""Function input models.

A StatusTransformation is the declarative policy handed to the function:

    apiVersion: function-status-transformer.fn.crossplane.io/v1beta1
    kind: StatusTransformation
    statusConditionHooks:
      - matchers:
          - resources:
              - name: example-mr
            conditions:
              - type: Synced
                status: "False"
                message: "Something went wrong: (?P<Error>.+)"
        setConditions:
          - condition:
              type: CustomReady
              status: "False"
              reason: InternalError
              message: "{{ .Error }}"

Field names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from status_transformer.errors import ConfigurationError

logger = logging.getLogger(__name__)

API_VERSION = "function-status-transformer.fn.crossplane.io/v1beta1"
KIND = "StatusTransformation"


class Quantifier(str, Enum):
    """How a matcher combines its resources and its conditions."""

    ANY_RESOURCE_ANY_CONDITION = "AnyResourceMatchesAnyCondition"
    ANY_RESOURCE_ALL_CONDITIONS = "AnyResourceMatchesAllConditions"
    ALL_RESOURCES_ANY_CONDITION = "AllResourcesMatchAnyCondition"
    ALL_RESOURCES_ALL_CONDITIONS = "AllResourcesMatchAllConditions"


class Target(str, Enum):
    """Objects that receive a condition or event."""

    COMPOSITE = "Composite"  # Primary
    COMPOSITE_AND_CLAIM = "CompositeAndClaim"  # Primary and secondary


class EventType(str, Enum):
    NORMAL = "Normal"
    WARNING = "Warning"


class _InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _status_from_yaml_bool(cls, value: Any) -> Any:
        # Unquoted True/False in YAML arrive as booleans
        if isinstance(value, bool):
            return "True" if value else "False"
        return value


class ConditionMatcher(_InputModel):
    """A condition that must exist on a resource. Omitted fields are wildcards."""

    type: str
    """Type of the condition. Required."""

    status: str | None = None
    """Status of the condition (True, False or Unknown)."""

    reason: str | None = None
    """Reason of the condition, compared exactly."""

    message: str | None = None
    """Regular expression searched in the condition message. Named groups are captured."""


class ResourceMatcher(_InputModel):
    """Selects one or more observed resources by key."""

    name: str
    """Observed resource map key, or a regular expression matched against the keys."""


class Matcher(_InputModel):
    """A quantified rule over a set of resources and a set of conditions."""

    name: str | None = None
    """Name of the matcher. Only used in logging."""

    type: Quantifier = Quantifier.ALL_RESOURCES_ALL_CONDITIONS
    resources: list[ResourceMatcher] = Field(default_factory=list)
    conditions: list[ConditionMatcher] = Field(default_factory=list)

    include_composite_as_resource: bool = False
    """Add the composite resource to the resources being matched."""

    include_extra_resources: bool = False
    """Match resource patterns against extra resources as well."""


class ConditionTemplate(_InputModel):
    type: str
    status: str | None = None
    reason: str = ""
    message: str | None = None
    """Optional message template. Captured groups are available as ``{{ .Name }}``."""


class SetCondition(_InputModel):
    """Sets a condition on the target(s) when a hook matches."""

    target: str | None = None
    """Composite (default) or CompositeAndClaim."""

    force: bool | None = None
    """Override a condition of the same type set earlier in the run."""

    condition: ConditionTemplate

    @property
    def is_forceful(self) -> bool:
        return bool(self.force)


class EventTemplate(_InputModel):
    type: str | None = None
    """Normal (default) or Warning."""

    reason: str | None = None
    message: str
    """Required message template."""


class CreateEvent(_InputModel):
    """Creates an event for the target(s) when a hook matches."""

    target: str | None = None
    event: EventTemplate


class StatusConditionHook(_InputModel):
    """Sets conditions and creates events when all matchers match."""

    matchers: list[Matcher] = Field(default_factory=list)
    set_conditions: list[SetCondition] = Field(default_factory=list)
    create_events: list[CreateEvent] = Field(default_factory=list)


class StatusTransformation(_InputModel):
    """Input of the function: an ordered list of status condition hooks."""

    api_version: str | None = None
    kind: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    status_condition_hooks: list[StatusConditionHook]


def load_input(data: Any) -> StatusTransformation:
    """Validate raw function input.

    Args:
        data: Deserialized input mapping

    Returns:
        Validated StatusTransformation

    Raises:
        ConfigurationError: If the input is not a valid StatusTransformation
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"expected a mapping, got {type(data).__name__}")

    try:
        transformation = StatusTransformation.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e

    if transformation.kind is not None and transformation.kind != KIND:
        raise ConfigurationError(f"unexpected kind {transformation.kind!r}, expected {KIND}")
    if transformation.api_version is not None and transformation.api_version != API_VERSION:
        logger.warning("Unexpected input apiVersion %s, expected %s", transformation.api_version, API_VERSION)

    logger.debug("Loaded %d status condition hook(s)", len(transformation.status_condition_hooks))
    return transformation


def load_input_file(path: Path) -> StatusTransformation:
    """Load and validate a StatusTransformation from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"cannot read {path}: {e}") from e

    return load_input(data)


def _format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError to ``loc: msg`` pairs."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
