"""Template compilation pipeline.

One document passes through, in order:

1. role substitution (``{{key}}`` from a role map)
2. conditional blocks
3. workflow references
4. protocol references
5. standards references
6. phase embedding (embed mode only)
7. capability macros on the ``tools:`` line

Each step only sees the previous step's output.
"""

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from ..utils.atomic_write import AtomicFileWriter
from .conditionals import process_conditionals
from .models import DEFAULT_POINTER_ROOT
from .models import CompilationContext
from .models import CompilationFlags
from .models import CompiledArtifact
from .references import ReferenceExpander

if TYPE_CHECKING:
    from ..profiles.resolver import ProfileResolver

logger = logging.getLogger(__name__)

ROLE_RECORD_START = re.compile(r"^<<<(.+)>>>$")
ROLE_RECORD_END = "<<<END>>>"

# A single capability token on the tools: line expands to its full tool list
CAPABILITY_MACROS: dict[str, tuple[str, ...]] = {
    "Playwright": (
        "mcp__playwright__browser_close",
        "mcp__playwright__browser_console_messages",
        "mcp__playwright__browser_handle_dialog",
        "mcp__playwright__browser_evaluate",
        "mcp__playwright__browser_file_upload",
        "mcp__playwright__browser_fill_form",
        "mcp__playwright__browser_install",
        "mcp__playwright__browser_press_key",
        "mcp__playwright__browser_type",
        "mcp__playwright__browser_navigate",
        "mcp__playwright__browser_navigate_back",
        "mcp__playwright__browser_network_requests",
        "mcp__playwright__browser_take_screenshot",
        "mcp__playwright__browser_snapshot",
        "mcp__playwright__browser_click",
        "mcp__playwright__browser_drag",
        "mcp__playwright__browser_hover",
        "mcp__playwright__browser_select_option",
        "mcp__playwright__browser_tabs",
        "mcp__playwright__browser_wait_for",
        "mcp__ide__getDiagnostics",
        "mcp__ide__executeCode",
        "mcp__playwright__browser_resize",
    ),
}


def parse_role_data(data: str) -> dict[str, str]:
    """Parse delimiter-framed role records.

    Each record is a ``<<<key>>>`` line, any number of value lines, and a
    ``<<<END>>>`` line, so values may span several lines:

        <<<role_description>>>
        You are a backend specialist.
        You own the database layer.
        <<<END>>>

    Lines outside records are ignored. An unterminated final record keeps
    whatever value lines were read.
    """
    roles: dict[str, str] = {}
    key: str | None = None
    value_lines: list[str] = []

    for line in data.split("\n"):
        if key is None:
            match = ROLE_RECORD_START.match(line)
            if match and line != ROLE_RECORD_END:
                key = match.group(1)
                value_lines = []
            continue

        if line == ROLE_RECORD_END:
            roles[key] = "\n".join(value_lines)
            key = None
            continue
        value_lines.append(line)

    if key is not None:
        logger.warning(f"Role record '{key}' is missing its {ROLE_RECORD_END} line")
        roles[key] = "\n".join(value_lines)

    return roles


def format_role_data(roles: Mapping[str, str]) -> str:
    """Serialize a role map into the delimiter-framed record format."""
    records = [f"<<<{key}>>>\n{value}\n{ROLE_RECORD_END}" for key, value in roles.items()]
    return "\n".join(records)


def substitute_roles(text: str, roles: Mapping[str, str]) -> str:
    for key, value in roles.items():
        if key:
            text = text.replace("{{" + key + "}}", value)
    return text


def expand_capability_macros(text: str) -> str:
    """Expand capability tokens on ``tools:`` lines into their tool lists."""
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if not line.startswith("tools:"):
            continue
        for token, tools in CAPABILITY_MACROS.items():
            line = re.sub(rf"\b{re.escape(token)}\b", ", ".join(tools), line)
        lines[index] = line
    return "\n".join(lines)


class TemplateCompiler:
    """Compiles profile documents into their installed form."""

    def __init__(
        self,
        resolver: "ProfileResolver",
        flags: CompilationFlags | None = None,
        pointer_root: str = DEFAULT_POINTER_ROOT,
        writer: AtomicFileWriter | None = None,
    ):
        """
        Args:
            resolver: Locates documents through profile inheritance
            flags: Conditional flags (compiled_single_command is managed per document)
            pointer_root: Folder name used in lazy pointers
            writer: Destination writer; compile_document only returns content without one
        """
        self.resolver = resolver
        self.flags = flags or CompilationFlags()
        self.pointer_root = pointer_root
        self.writer = writer

    def new_context(self, profile: str, embed_phases: bool = False) -> CompilationContext:
        return CompilationContext(
            resolver=self.resolver,
            profile=profile,
            flags=self.flags.with_overrides(compiled_single_command=False),
            pointer_root=self.pointer_root,
            embed_phases=embed_phases,
        )

    def compile_text(
        self,
        text: str,
        context: CompilationContext,
        roles: Mapping[str, str] | None = None,
    ) -> str:
        """Run ``text`` through the full pipeline."""
        if roles:
            text = substitute_roles(text, roles)

        expander = ReferenceExpander(context)
        text = process_conditionals(text, context.flags.as_dict(), context.warn)
        text = expander.expand_workflows(text)
        text = expander.expand_protocols(text)
        text = expander.expand_standards(text)
        text = expander.expand_phases(text, lambda embedded: self._compile_embedded(embedded, context))
        return expand_capability_macros(text)

    def _compile_embedded(self, text: str, context: CompilationContext) -> str:
        """Pipeline for a phase document embedded into a single command."""
        child = context.derive(compiled_single_command=True)
        expander = ReferenceExpander(child)
        text = process_conditionals(text, child.flags.as_dict(), child.warn)
        text = expander.expand_workflows(text)
        text = expander.expand_protocols(text)
        return expander.expand_standards(text)

    def compile_document(
        self,
        source: Path,
        destination: Path,
        profile: str,
        roles: Mapping[str, str] | None = None,
        embed_phases: bool = False,
    ) -> CompiledArtifact:
        """Compile ``source`` and write the result to ``destination``.

        Args:
            source: Template document (usually located via ``resolve_file``)
            destination: Where the compiled document goes
            profile: Profile whose chain resolves references
            roles: Optional role map for ``{{key}}`` placeholders
            embed_phases: Embed PHASE documents (single-command mode)

        Returns:
            CompiledArtifact with content and every warning raised

        Raises:
            AtomicWriteError: If the destination cannot be written
        """
        context = self.new_context(profile, embed_phases=embed_phases)
        text = Path(source).read_text(encoding="utf-8")
        content = self.compile_text(text, context, roles)

        artifact = CompiledArtifact(
            content=content,
            destination=Path(destination),
            source=Path(source),
            warnings=list(context.warnings),
        )

        if self.writer is not None:
            self.writer.write(content, artifact.destination)
            artifact.written = not self.writer.dry_run
            logger.debug(f"Compiled {source} -> {destination}")

        return artifact
