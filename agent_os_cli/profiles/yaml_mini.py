"""Minimal reader for flat YAML configuration files.

Profile configs (``profile-config.yml``) and installation configs
(``config.yml``) only ever hold top-level scalars and simple lists, so this
reader handles exactly that:

    inherits_from: default        # trailing comments are ignored
    name: "quoted values"
    exclude_inherited_files:
      - standards/backend/*
      - 'workflows/planning/*.md'
    flow_list: [a.md, b.md]

Nested maps, block scalars, anchors/aliases and mixed indentation are NOT
supported. Anything needing those must go through a real YAML library.
"""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

TAB_WIDTH = 4
QUOTES = ("'", '"')


def _read_lines(file: Path) -> list[str] | None:
    try:
        text = Path(file).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read YAML file {file}: {e}")
        return None
    return [line.replace("\t", " " * TAB_WIDTH).rstrip() for line in text.splitlines()]


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _key_regex(key: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(key)}\s*:(.*)$")


def _strip_quotes(value: str) -> str:
    if value[:1] in QUOTES:
        value = value[1:]
    if value[-1:] in QUOTES:
        value = value[:-1]
    return value


def _clean_scalar(raw: str) -> str:
    """Strip an inline comment and surrounding quotes from a scalar value."""
    value = raw.strip()
    if not value or value.startswith("#"):
        return ""

    if value[0] in QUOTES:
        # Keep everything up to the last matching quote; comments after it are dropped
        closing = value.rfind(value[0])
        if closing > 0:
            value = value[: closing + 1]
    else:
        value = re.sub(r"\s+#.*$", "", value)

    return _strip_quotes(value)


def _parse_flow_list(raw: str) -> list[str] | None:
    """Parse ``[a, 'b', "c"]`` into a list, or None if ``raw`` isn't a flow list."""
    value = re.sub(r"\s+#.*$", "", raw.strip())
    if not (value.startswith("[") and value.endswith("]")):
        return None
    inner = value[1:-1].strip()
    if not inner:
        return []
    return [_strip_quotes(item.strip()) for item in inner.split(",") if item.strip()]


def get_yaml_value(file: Path | str, key: str, default: str = "") -> str:
    """Read a top-level scalar value.

    Args:
        file: Path to the YAML file
        key: Top-level key name
        default: Returned when the file or key is missing, or the value is empty

    Returns:
        The value with quotes and trailing comments removed
    """
    lines = _read_lines(Path(file))
    if lines is None:
        return default

    pattern = _key_regex(key)
    for line in lines:
        match = pattern.match(line)
        if match:
            value = _clean_scalar(match.group(1))
            return value if value else default

    return default


def get_yaml_array(file: Path | str, key: str) -> list[str]:
    """Read the list of ``- item`` entries under a key.

    Collects the contiguous items at the indentation of the first item and
    stops at the first non-blank line indented at or before the key itself.
    A flow list on the key line (``key: [a, b]``) is also accepted.

    Args:
        file: Path to the YAML file
        key: Key whose list to read (matched at any indentation)

    Returns:
        List of item strings, empty if the file or key is missing
    """
    lines = _read_lines(Path(file))
    if lines is None:
        return []

    pattern = _key_regex(key)
    items: list[str] = []
    key_indent = -1
    item_indent = -1

    for line in lines:
        stripped = line.lstrip(" ")
        indent = _indent_of(line)

        if key_indent < 0:
            match = pattern.match(stripped)
            if match:
                key_indent = indent
                flow = _parse_flow_list(match.group(1))
                if flow is not None:
                    return flow
            continue

        if not stripped:
            continue
        if indent <= key_indent:
            break
        if stripped.startswith("#"):
            continue

        if re.match(r"^-(\s|$)", stripped):
            if item_indent < 0:
                item_indent = indent
            if indent == item_indent:
                item = _clean_scalar(stripped[1:])
                if item:
                    items.append(item)

    return items
