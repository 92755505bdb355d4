"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when their
str() representation is empty (e.g., KeyboardInterrupt, PermissionError
raised without arguments).
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

# Friendly messages for exception types known to have empty str()
FRIENDLY_MESSAGES: dict[type, str] = {
    KeyboardInterrupt: "Operation interrupted by user.",
    PermissionError: "Permission denied.",
    IsADirectoryError: "Expected a file but found a directory.",
    FileNotFoundError: "File not found.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a useful display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}" if include_type else friendly_msg

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings.

    Prevents Rich from interpreting brackets in paths or template tags such
    as ``[standards/*]`` as markup.
    """
    return _escape_markup(str(value))
