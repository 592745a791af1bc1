"""Message templates.

Messages use Go text/template style actions bound to the captured groups:

    {{ .Error }}        captured group "Error" ("<no value>" when missing)
    {{ . }}             all captured groups, as map[Key:value ...]
    {{/* comment */}}   nothing
    {{- .Error -}}      trim whitespace before/after the action

Anything else inside an action is a parse error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from status_transformer.errors import ConditionRenderError

NO_VALUE = "<no value>"

_FIELD = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*)")
_LEFT_DELIM = "{{"
_RIGHT_DELIM = "}}"
_SPACE = " \t\r\n"


@dataclass(frozen=True)
class _Text:
    value: str


@dataclass(frozen=True)
class _Action:
    kind: str  # "field", "dot" or "comment"
    name: str = ""
    trim_left: bool = False
    trim_right: bool = False


class Template:
    """A parsed message template."""

    def __init__(self, source: str) -> None:
        """Parse a template.

        Args:
            source: Template text

        Raises:
            ConditionRenderError: If the template cannot be parsed
        """
        self.source = source
        self._nodes = _parse(source)

    def render(self, values: dict[str, str]) -> str:
        """Render the template against captured groups."""
        out: list[str] = []
        for node in self._nodes:
            if isinstance(node, _Text):
                out.append(node.value)
            elif node.kind == "field":
                out.append(values.get(node.name, NO_VALUE))
            elif node.kind == "dot":
                out.append(_format_map(values))
        return "".join(out)


def render_message(message: str | None, values: dict[str, str]) -> str | None:
    """Render a message template.

    With no message or no captured groups the message is returned as-is.

    Raises:
        ConditionRenderError: If the template cannot be parsed
    """
    if message is None or not values:
        return message
    return Template(message).render(values)


def _parse(source: str) -> list[_Text | _Action]:
    nodes: list[_Text | _Action] = []
    pos = 0
    trim_next = False
    while True:
        start = source.find(_LEFT_DELIM, pos)
        text = source[pos:] if start == -1 else source[pos:start]
        if trim_next:
            text = text.lstrip()
        if text:
            nodes.append(_Text(text))
        if start == -1:
            return nodes

        end = source.find(_RIGHT_DELIM, start + len(_LEFT_DELIM))
        if end == -1:
            raise _parse_error(source, start, "unclosed action")

        action = _parse_action(source, start, source[start + len(_LEFT_DELIM) : end])
        if action.trim_left and nodes and isinstance(nodes[-1], _Text):
            trimmed = nodes[-1].value.rstrip()
            nodes[-1:] = [_Text(trimmed)] if trimmed else []
        nodes.append(action)
        trim_next = action.trim_right
        pos = end + len(_RIGHT_DELIM)


def _parse_action(source: str, start: int, body: str) -> _Action:
    # A trim marker is a dash plus one whitespace character next to the delimiter
    trim_left = len(body) >= 2 and body[0] == "-" and body[1] in _SPACE
    if trim_left:
        body = body[2:]
    trim_right = len(body) >= 2 and body[-1] == "-" and body[-2] in _SPACE
    if trim_right:
        body = body[:-2]

    # Comments must touch the delimiters (or their trim markers)
    if body.startswith("/*"):
        if len(body) < 4 or not body.endswith("*/"):
            raise _parse_error(source, start, "unclosed comment")
        return _Action("comment", trim_left=trim_left, trim_right=trim_right)

    inner = body.strip(_SPACE)
    if inner.startswith("/*"):
        raise _parse_error(source, start, 'unexpected "/" in command')
    if not inner:
        raise _parse_error(source, start, "missing value for command")
    if inner == ".":
        return _Action("dot", trim_left=trim_left, trim_right=trim_right)

    field = _FIELD.fullmatch(inner)
    if field is None:
        raise _parse_error(source, start, f"unexpected {inner!r} in operand")
    return _Action("field", name=field.group(1), trim_left=trim_left, trim_right=trim_right)


def _parse_error(source: str, offset: int, detail: str) -> ConditionRenderError:
    line = source.count("\n", 0, offset) + 1
    return ConditionRenderError(f"cannot parse template: template: :{line}: {detail}")


def _format_map(values: dict[str, str]) -> str:
    return "map[" + " ".join(f"{k}:{values[k]}" for k in sorted(values)) + "]"
