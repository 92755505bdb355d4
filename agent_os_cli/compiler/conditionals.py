"""Conditional compilation blocks.

    {{IF use_claude_code_subagents}}
    Delegate to the implementer subagent.
    {{ENDIF use_claude_code_subagents}}
    {{UNLESS use_claude_code_subagents}}
    Implement the tasks yourself.
    {{ENDUNLESS use_claude_code_subagents}}

Blocks nest. A line holding a tag is consumed entirely; other lines are kept
only while every enclosing block is active. Tag defects are reported as
warnings and never abort compilation.
"""

import logging
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass

from .models import CONDITIONAL_CLOSE_PATTERN
from .models import CONDITIONAL_OPEN_PATTERN

logger = logging.getLogger(__name__)

CLOSER_FOR = {"IF": "ENDIF", "UNLESS": "ENDUNLESS"}


@dataclass
class _Frame:
    previous_include: bool
    kind: str
    flag: str


class ConditionalProcessor:
    """Evaluates IF/UNLESS blocks against a flag set."""

    def __init__(self, flags: Mapping[str, bool], on_warning: Callable[[str], None] | None = None):
        """
        Args:
            flags: Flag name to value
            on_warning: Receives each warning message (defaults to logging)
        """
        self.flags = dict(flags)
        self._warn = on_warning or logger.warning

    def _condition_met(self, kind: str, flag: str) -> bool:
        if flag not in self.flags:
            self._warn(f"Unknown conditional flag: {flag}")
            return False
        value = bool(self.flags[flag])
        return value if kind == "IF" else not value

    def process(self, text: str) -> str:
        output: list[str] = []
        stack: list[_Frame] = []
        include = True

        for line in text.split("\n"):
            opener = CONDITIONAL_OPEN_PATTERN.search(line)
            if opener:
                kind, flag = opener.group(1), opener.group(2)
                met = self._condition_met(kind, flag)
                stack.append(_Frame(previous_include=include, kind=kind, flag=flag))
                include = include and met
                continue

            closer = CONDITIONAL_CLOSE_PATTERN.search(line)
            if closer:
                kind, flag = closer.group(1), closer.group(2)
                if not stack:
                    self._warn(f"Unmatched template tag: {{{{{kind} {flag}}}}} has no opening tag")
                    include = True
                    continue

                frame = stack.pop()
                if CLOSER_FOR[frame.kind] != kind or frame.flag != flag:
                    self._warn(
                        f"Mismatched template tags: {{{{{kind} {flag}}}}} closes {{{{{frame.kind} {frame.flag}}}}}"
                    )
                include = frame.previous_include
                continue

            if include:
                output.append(line)

        if stack:
            self._warn(f"Unclosed conditional block detected (nesting level: {len(stack)})")

        return "\n".join(output)


def process_conditionals(
    text: str,
    flags: Mapping[str, bool],
    on_warning: Callable[[str], None] | None = None,
) -> str:
    """Evaluate every conditional block in ``text``.

    Examples:
        >>> process_conditionals("a\\n{{IF x}}\\nb\\n{{ENDIF x}}\\nc", {"x": False})
        'a\\nc'
    """
    return ConditionalProcessor(flags, on_warning).process(text)
