"""Tests for function input validation."""

import logging
from pathlib import Path

import pytest

from status_transformer.errors import ConfigurationError
from status_transformer.input import (
    API_VERSION,
    Quantifier,
    StatusTransformation,
    load_input,
    load_input_file,
)

VALID_INPUT = {
    "apiVersion": API_VERSION,
    "kind": "StatusTransformation",
    "statusConditionHooks": [
        {
            "matchers": [
                {
                    "name": "database-failing",
                    "type": "AnyResourceMatchesAnyCondition",
                    "includeCompositeAsResource": True,
                    "resources": [{"name": "database"}],
                    "conditions": [{"type": "Synced", "status": "False", "message": "(?P<Error>.+)"}],
                }
            ],
            "setConditions": [
                {
                    "target": "CompositeAndClaim",
                    "force": True,
                    "condition": {"type": "DatabaseReady", "status": "False", "reason": "Failed", "message": "x"},
                }
            ],
            "createEvents": [{"event": {"type": "Warning", "reason": "Failed", "message": "{{ .Error }}"}}],
        }
    ],
}


class TestLoadInput:
    """Test validating function input."""

    def test_valid_input(self):
        """Test that a complete input is parsed into models."""
        transformation = load_input(VALID_INPUT)

        assert isinstance(transformation, StatusTransformation)
        hook = transformation.status_condition_hooks[0]
        matcher = hook.matchers[0]
        assert matcher.name == "database-failing"
        assert matcher.type == Quantifier.ANY_RESOURCE_ANY_CONDITION
        assert matcher.include_composite_as_resource is True
        assert matcher.include_extra_resources is False
        assert matcher.conditions[0].message == "(?P<Error>.+)"
        assert hook.set_conditions[0].target == "CompositeAndClaim"
        assert hook.set_conditions[0].is_forceful
        assert hook.create_events[0].event.type == "Warning"

    def test_defaults(self):
        """Test defaults of optional fields."""
        transformation = load_input(
            {
                "statusConditionHooks": [
                    {
                        "matchers": [{"resources": [{"name": "a"}], "conditions": [{"type": "Ready"}]}],
                        "setConditions": [{"condition": {"type": "Ready"}}],
                    }
                ]
            }
        )

        matcher = transformation.status_condition_hooks[0].matchers[0]
        assert matcher.type == Quantifier.ALL_RESOURCES_ALL_CONDITIONS
        assert matcher.conditions[0].status is None
        assert matcher.conditions[0].reason is None

        setter = transformation.status_condition_hooks[0].set_conditions[0]
        assert setter.target is None
        assert not setter.is_forceful
        assert setter.condition.reason == ""
        assert setter.condition.message is None

    def test_empty_hooks(self):
        """Test that an empty hook list is valid."""
        assert load_input({"statusConditionHooks": []}).status_condition_hooks == []

    def test_yaml_boolean_status(self):
        """Test that unquoted YAML booleans are accepted as statuses."""
        transformation = load_input(
            {
                "statusConditionHooks": [
                    {
                        "matchers": [{"conditions": [{"type": "Ready", "status": False}]}],
                        "setConditions": [{"condition": {"type": "Ready", "status": True}}],
                    }
                ]
            }
        )

        hook = transformation.status_condition_hooks[0]
        assert hook.matchers[0].conditions[0].status == "False"
        assert hook.set_conditions[0].condition.status == "True"

    def test_unknown_field(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_input({"statusConditionHooks": [{"matchers": [], "bogus": 1}]})

        assert "statusConditionHooks.0.bogus" in str(exc_info.value)
        assert exc_info.value.reason == "InputFailure"

    def test_missing_hooks(self):
        """Test that statusConditionHooks is required."""
        with pytest.raises(ConfigurationError, match="statusConditionHooks"):
            load_input({"kind": "StatusTransformation"})

    def test_invalid_quantifier(self):
        """Test that an unknown matcher type is rejected."""
        with pytest.raises(ConfigurationError, match="type"):
            load_input({"statusConditionHooks": [{"matchers": [{"type": "SomeResourcesMatch"}]}]})

    def test_event_message_required(self):
        """Test that an event without a message is rejected."""
        with pytest.raises(ConfigurationError, match="message"):
            load_input({"statusConditionHooks": [{"createEvents": [{"event": {"type": "Normal"}}]}]})

    def test_not_a_mapping(self):
        """Test that non-mapping input is rejected."""
        with pytest.raises(ConfigurationError, match="expected a mapping, got list"):
            load_input([])

    def test_missing_input(self):
        """Test that missing input is rejected."""
        with pytest.raises(ConfigurationError, match="got NoneType"):
            load_input(None)

    def test_wrong_kind(self):
        """Test that another kind is rejected."""
        with pytest.raises(ConfigurationError, match="unexpected kind"):
            load_input({"kind": "Resources", "statusConditionHooks": []})

    def test_other_api_version_warns(self, caplog):
        """Test that another apiVersion is accepted with a warning."""
        with caplog.at_level(logging.WARNING, logger="status_transformer"):
            load_input({"apiVersion": "example.org/v1", "statusConditionHooks": []})

        assert "Unexpected input apiVersion example.org/v1" in caplog.text


class TestLoadInputFile:
    """Test loading input files."""

    def test_yaml_file(self, tmp_path: Path):
        """Test loading a YAML input file."""
        input_file = tmp_path / "input.yaml"
        input_file.write_text(
            """\
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
"""
        )

        transformation = load_input_file(input_file)

        assert transformation.status_condition_hooks[0].set_conditions[0].condition.message == "{{ .Error }}"

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file raises a ConfigurationError."""
        with pytest.raises(ConfigurationError, match="cannot read"):
            load_input_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        """Test that invalid YAML raises a ConfigurationError."""
        input_file = tmp_path / "input.yaml"
        input_file.write_text("statusConditionHooks: [unclosed\n")

        with pytest.raises(ConfigurationError, match="cannot read"):
            load_input_file(input_file)
