"""Tests for error message formatting and markup escaping."""

from io import StringIO
from unittest.mock import patch

from rich.console import Console

from agent_os_cli.console import print_error
from agent_os_cli.utils.error_format import escape_markup
from agent_os_cli.utils.error_format import format_error_message


class TestFormatErrorMessage:
    def test_includes_type(self):
        assert format_error_message(ValueError("invalid input")) == "ValueError: invalid input"

    def test_without_type(self):
        assert format_error_message(ValueError("invalid input"), include_type=False) == "invalid input"

    def test_empty_message_uses_friendly_text(self):
        assert format_error_message(PermissionError()) == "PermissionError: Permission denied."
        assert format_error_message(KeyboardInterrupt(), include_type=False) == "Operation interrupted by user."

    def test_unknown_empty_exception(self):
        assert format_error_message(RuntimeError()) == "RuntimeError: (no additional details)"


class TestEscapeMarkup:
    def test_template_tag_survives_rendering(self):
        """Exclusion patterns like [standards/*] must not be eaten as markup."""
        buf = StringIO()
        c = Console(file=buf, force_terminal=False, no_color=True)
        c.print(f"[yellow]Warning:[/yellow] {escape_markup('[standards/*] excluded')}")
        assert "[standards/*] excluded" in buf.getvalue()

    def test_handles_non_string_input(self):
        assert escape_markup(ValueError("boom")) == "boom"
        assert escape_markup(42) == "42"

    def test_plain_text_unchanged(self):
        assert escape_markup("Profile not found") == "Profile not found"


def test_print_error_escapes_paths():
    buf = StringIO()
    with patch("agent_os_cli.console.error_console", Console(file=buf, force_terminal=False, no_color=True)):
        print_error(FileNotFoundError("[/tmp/project/agent-os]"))
    assert buf.getvalue().strip() == "Error: [/tmp/project/agent-os]"
