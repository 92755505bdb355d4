"""Shared data structures for template compilation."""

import logging
import re
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..profiles.resolver import ProfileResolver

logger = logging.getLogger(__name__)

# Prefix used in lazy pointers, e.g. "@agent-os/workflows/planning/gather.md"
DEFAULT_POINTER_ROOT = "agent-os"

# Maximum nesting of inlined workflow references
MAX_REFERENCE_DEPTH = 20

WARNING_MARK = "⚠️"

# Tag syntax
CONDITIONAL_OPEN_PATTERN = re.compile(r"\{\{(IF|UNLESS)\s+([A-Za-z_][A-Za-z0-9_]*)\}\}")
CONDITIONAL_CLOSE_PATTERN = re.compile(r"\{\{(ENDIF|ENDUNLESS)\s+([A-Za-z_][A-Za-z0-9_]*)\}\}")
WORKFLOW_PATTERN = re.compile(r"\{\{workflows/([^}]+)\}\}")
PROTOCOL_PATTERN = re.compile(r"\{\{protocols/([^}]+)\}\}")
STANDARDS_PATTERN = re.compile(r"\{\{standards/([^}]+)\}\}")
PHASE_PATTERN = re.compile(r"\{\{(PHASE\s+[^:}]+):\s*@([^/}]+)/commands/([^}]+)\}\}")


@dataclass(frozen=True)
class CompilationFlags:
    """Boolean switches addressed by ``{{IF name}}`` / ``{{UNLESS name}}``."""

    use_claude_code_subagents: bool = True
    standards_as_claude_code_skills: bool = True
    lazy_load_workflows: bool = False
    compiled_single_command: bool = False

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)

    def with_overrides(self, **overrides: bool) -> "CompilationFlags":
        return replace(self, **overrides)


@dataclass
class CompilationContext:
    """Everything one compilation needs besides the document text.

    ``warnings`` accumulates every recoverable defect found while compiling,
    in the order encountered.
    """

    resolver: "ProfileResolver"
    profile: str
    flags: CompilationFlags = field(default_factory=CompilationFlags)
    pointer_root: str = DEFAULT_POINTER_ROOT
    embed_phases: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def base_dir(self) -> Path:
        return self.resolver.base_dir

    def pointer(self, relative_path: str) -> str:
        return f"@{self.pointer_root}/{relative_path}"

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def derive(self, **flag_overrides: bool) -> "CompilationContext":
        """Child context sharing resolver and warnings but with different flags."""
        return replace(self, flags=self.flags.with_overrides(**flag_overrides), warnings=self.warnings)


@dataclass
class CompiledArtifact:
    """A fully compiled document and where it is meant to go."""

    content: str
    destination: Path
    source: Path | None = None
    warnings: list[str] = field(default_factory=list)
    written: bool = False
