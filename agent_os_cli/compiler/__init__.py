"""Template compiler for Agent OS profile documents.

Resolves conditional blocks and workflow, protocol, standards and phase
references into fully compiled command and agent documents.
"""

from .conditionals import ConditionalProcessor
from .conditionals import process_conditionals
from .models import CompilationContext
from .models import CompilationFlags
from .models import CompiledArtifact
from .naming import humanize_filename
from .naming import normalize_name
from .naming import phase_title
from .naming import skill_name
from .patterns import matches_pattern
from .references import ReferenceExpander
from .template import TemplateCompiler
from .template import format_role_data
from .template import parse_role_data

__all__ = [
    "CompilationContext",
    "CompilationFlags",
    "CompiledArtifact",
    "ConditionalProcessor",
    "ReferenceExpander",
    "TemplateCompiler",
    "format_role_data",
    "humanize_filename",
    "matches_pattern",
    "normalize_name",
    "parse_role_data",
    "phase_title",
    "process_conditionals",
    "skill_name",
]
