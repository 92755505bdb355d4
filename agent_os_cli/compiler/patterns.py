"""Glob-style pattern matching for profile exclusion and selection lists.

Supported syntax:
- ``**`` matches any run of characters, including ``/``
- ``*`` matches any run of characters except ``/``
- ``?`` matches exactly one character

Everything else in the pattern is matched literally.
"""

import re
from functools import lru_cache

_DOUBLE_STAR = "\x00DOUBLE_STAR\x00"


@lru_cache(maxsize=256)
def pattern_to_regex(pattern: str) -> re.Pattern:
    """Translate a glob pattern into an anchored regular expression.

    Args:
        pattern: Glob pattern (e.g. ``standards/**`` or ``workflows/*.md``)

    Returns:
        Compiled regex that must match the whole path
    """
    regex = re.escape(pattern)

    # re.escape turns the wildcards into literals; put them back
    regex = regex.replace(r"\?", ".")
    regex = regex.replace(r"\*\*", _DOUBLE_STAR)
    regex = regex.replace(r"\*", "[^/]*")
    regex = regex.replace(_DOUBLE_STAR, ".*")

    return re.compile(f"^{regex}$", re.DOTALL)


def matches_pattern(path: str, pattern: str) -> bool:
    """Check whether a relative path matches a glob pattern.

    Empty paths and empty patterns never match.

    Examples:
        >>> matches_pattern("standards/frontend/css.md", "standards/**")
        True
        >>> matches_pattern("standards/frontend/css.md", "standards/*.md")
        False
        >>> matches_pattern("", "*")
        False
    """
    if not path or not pattern:
        return False
    return pattern_to_regex(pattern).match(path) is not None


def matches_any(path: str, patterns: list[str]) -> str | None:
    """Return the first pattern in ``patterns`` that matches ``path``, or None."""
    for pattern in patterns:
        if matches_pattern(path, pattern):
            return pattern
    return None
