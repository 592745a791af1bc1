"""Tests for message templates."""

import pytest

from status_transformer.engine.template import NO_VALUE, Template, render_message
from status_transformer.errors import ConditionRenderError


class TestTemplate:
    """Test parsing and rendering templates."""

    def test_plain_text(self):
        """Test that text without actions renders unchanged."""
        assert Template("all good").render({"A": "b"}) == "all good"

    def test_field(self):
        """Test that a field action renders the captured group."""
        assert Template("Error: {{ .Error }}").render({"Error": "boom"}) == "Error: boom"

    def test_field_without_spaces(self):
        """Test that spaces inside the delimiters are optional."""
        assert Template("{{.Error}}!").render({"Error": "boom"}) == "boom!"

    def test_multiple_fields(self):
        """Test that several fields render in place."""
        template = Template("{{ .Kind }} failed: {{ .Error }}")
        assert template.render({"Kind": "Bucket", "Error": "denied"}) == "Bucket failed: denied"

    def test_missing_field(self):
        """Test that a missing group renders as <no value>."""
        assert Template("{{ .Missing }}").render({"Error": "boom"}) == NO_VALUE

    def test_dot(self):
        """Test that the dot renders every group as a sorted map."""
        assert Template("{{ . }}").render({"b": "2", "a": "1"}) == "map[a:1 b:2]"

    def test_comment(self):
        """Test that comments render nothing."""
        assert Template("a{{/* note */}}b").render({"X": "y"}) == "ab"

    def test_trim_markers(self):
        """Test that trim markers remove adjacent whitespace."""
        assert Template("value:   {{- .V -}}   !").render({"V": "x"}) == "value:x!"

    def test_trim_left_only(self):
        """Test that a left trim marker keeps trailing whitespace."""
        assert Template("a  {{- .V }}  b").render({"V": "x"}) == "ax  b"

    def test_trim_markers_with_tab_and_newline(self):
        """Test that any whitespace character completes a trim marker."""
        assert Template("a  {{-\t.V\n-}}  b").render({"V": "x"}) == "axb"

    def test_dash_without_space_is_not_a_trim_marker(self):
        """Test that a dash glued to the operand is not a trim marker."""
        with pytest.raises(ConditionRenderError, match="unexpected"):
            Template("a {{-.V}}")

    def test_trimmed_comment(self):
        """Test that comments may follow trim markers."""
        assert Template("a  {{- /* note */ -}}  b").render({"X": "y"}) == "ab"

    def test_comment_must_touch_delimiter(self):
        """Test that whitespace between the delimiter and a comment is a parse error."""
        with pytest.raises(ConditionRenderError, match='unexpected "/" in command'):
            Template("{{ /* note */ }}")

    def test_unclosed_action(self):
        """Test that an unclosed action is a parse error."""
        with pytest.raises(ConditionRenderError, match="cannot parse template: template: :1: unclosed action"):
            Template("{{ .Error")

    def test_parse_error_reports_line(self):
        """Test that parse errors report the line of the action."""
        with pytest.raises(ConditionRenderError, match=":2: "):
            Template("line one\n{{ .Error")

    def test_empty_action(self):
        """Test that an empty action is a parse error."""
        with pytest.raises(ConditionRenderError, match="missing value for command"):
            Template("{{ }}")

    def test_unclosed_comment(self):
        """Test that an unterminated comment is a parse error."""
        with pytest.raises(ConditionRenderError, match="unclosed comment"):
            Template("{{/* note }}")

    def test_unsupported_operand(self):
        """Test that unsupported actions are parse errors."""
        with pytest.raises(ConditionRenderError, match="unexpected"):
            Template("{{ printf .Error }}")

    def test_parse_error_reason(self):
        """Test that parse errors are reported as SetConditionFailure."""
        with pytest.raises(ConditionRenderError) as exc_info:
            Template("{{")
        assert exc_info.value.reason == "SetConditionFailure"


class TestRenderMessage:
    """Test rendering optional messages."""

    def test_none_message(self):
        """Test that a missing message stays missing."""
        assert render_message(None, {"A": "b"}) is None

    def test_empty_groups_returns_message_verbatim(self):
        """Test that no captured groups leaves the template text untouched."""
        assert render_message("{{ .Error }}", {}) == "{{ .Error }}"

    def test_empty_groups_skips_parsing(self):
        """Test that an invalid template is not parsed without captured groups."""
        assert render_message("{{ .Error", {}) == "{{ .Error"

    def test_renders_with_groups(self):
        """Test that messages render against captured groups."""
        assert render_message("Error: {{ .Error }}", {"Error": "boom"}) == "Error: boom"
