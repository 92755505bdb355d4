"""Expansion of workflow, protocol, standards and phase references.

    {{workflows/planning/gather-requirements}}   inlined (or a lazy pointer)
    {{protocols/verification}}                   always a pointer
    {{standards/global/*}}                       one pointer line per document
    {{PHASE 1: @agent-os/commands/plan-product/1-product-concept.md}}

Targets are located through the profile chain. A reference that cannot be
located stays in place with a visible warning line after it, so a single
broken reference never blocks the rest of a document.
"""

import logging
import posixpath
import re
from collections.abc import Callable

from .models import MAX_REFERENCE_DEPTH
from .models import PHASE_PATTERN
from .models import PROTOCOL_PATTERN
from .models import STANDARDS_PATTERN
from .models import WARNING_MARK
from .models import WORKFLOW_PATTERN
from .models import CompilationContext
from .naming import phase_title

logger = logging.getLogger(__name__)

# Standards documents that only carry metadata for tooling
STANDARDS_INDEX_SUFFIX = "_index.md"


def _unique_matches(pattern: re.Pattern, text: str) -> list[re.Match]:
    """One match per distinct tag, ordered by tag text."""
    seen: dict[str, re.Match] = {}
    for match in pattern.finditer(text):
        seen.setdefault(match.group(0), match)
    return [seen[tag] for tag in sorted(seen)]


class ReferenceExpander:
    """Resolves reference tags for one compilation context."""

    def __init__(self, context: CompilationContext):
        self.context = context
        self.resolver = context.resolver

    def _missing(self, text: str, tag: str, kind: str, relative_path: str, reason: str) -> str:
        location = self.resolver.profiles_dir / self.context.profile / relative_path
        self.context.warn(f"{kind.capitalize()} reference {tag} could not be resolved ({reason})")
        banner = f"{WARNING_MARK} This {kind} file was not found in profile '{self.context.profile}': {location}"
        return text.replace(tag, f"{tag}\n{banner}")

    def _read(self, relative_path: str) -> tuple[str | None, str]:
        resolution = self.resolver.resolve_file(self.context.profile, relative_path)
        if not resolution.ok or resolution.path is None:
            return None, resolution.detail or resolution.status.value
        return resolution.path.read_text(encoding="utf-8").rstrip("\n"), ""

    # ----- workflows -----

    def expand_workflows(self, text: str, expanding: frozenset[str] = frozenset(), depth: int = 0) -> str:
        """Inline (or point to) every ``{{workflows/...}}`` reference.

        Args:
            text: Document text
            expanding: Workflow paths currently being inlined above this level
            depth: Current nesting level

        Returns:
            Text with workflow references substituted
        """
        if depth >= MAX_REFERENCE_DEPTH:
            self.context.warn(
                f"Maximum workflow recursion depth ({MAX_REFERENCE_DEPTH}) exceeded; "
                "nested references left unexpanded"
            )
            return text

        for match in _unique_matches(WORKFLOW_PATTERN, text):
            tag = match.group(0)
            workflow = match.group(1).strip()
            relative_path = f"workflows/{workflow}.md"

            if self.context.flags.lazy_load_workflows:
                resolution = self.resolver.resolve_file(self.context.profile, relative_path)
                if not resolution.ok:
                    text = self._missing(text, tag, "workflow", relative_path, resolution.status.value)
                    continue
                text = text.replace(tag, self.context.pointer(relative_path))
                continue

            if workflow in expanding:
                self.context.warn(f"Circular workflow reference detected: {workflow}")
                text = text.replace(tag, f"{tag}\n{WARNING_MARK} Circular workflow reference not expanded: {workflow}")
                continue

            content, reason = self._read(relative_path)
            if content is None:
                text = self._missing(text, tag, "workflow", relative_path, reason)
                continue

            content = self.expand_workflows(content, expanding | {workflow}, depth + 1)
            text = text.replace(tag, content)
            logger.debug(f"Inlined workflow {relative_path} (depth {depth})")

        return text

    # ----- protocols -----

    def expand_protocols(self, text: str) -> str:
        """Replace every ``{{protocols/...}}`` with a pointer to the protocol file."""
        for match in _unique_matches(PROTOCOL_PATTERN, text):
            tag = match.group(0)
            relative_path = f"protocols/{match.group(1).strip()}.md"

            resolution = self.resolver.resolve_file(self.context.profile, relative_path)
            if not resolution.ok:
                text = self._missing(text, tag, "protocol", relative_path, resolution.status.value)
                continue
            text = text.replace(tag, self.context.pointer(relative_path))

        return text

    # ----- standards -----

    def standards_documents(self, pattern: str) -> list[str]:
        """Relative paths of the standards documents selected by ``pattern``.

        ``pattern`` is either a document name without extension
        (``global/tech-stack``) or a prefix ending in ``*`` (``global/*``).
        """
        if "*" not in pattern:
            relative_path = f"standards/{pattern}.md"
            resolution = self.resolver.resolve_file(self.context.profile, relative_path)
            return [relative_path] if resolution.ok else []

        prefix = "standards/" + pattern.replace("*", "")
        directory = prefix.rstrip("/") if prefix.endswith("/") else posixpath.dirname(prefix)

        listing = self.resolver.resolve_files(self.context.profile, directory)
        return sorted(
            path
            for path in listing
            if path.startswith(prefix) and path.endswith(".md") and not path.endswith(STANDARDS_INDEX_SUFFIX)
        )

    def expand_standards(self, text: str) -> str:
        """Replace every ``{{standards/...}}`` with newline-joined pointer lines."""
        for match in _unique_matches(STANDARDS_PATTERN, text):
            tag = match.group(0)
            pattern = match.group(1).strip()

            documents = self.standards_documents(pattern)
            if not documents:
                text = self._missing(text, tag, "standards", f"standards/{pattern}", "no matching documents")
                continue

            pointers = sorted({self.context.pointer(path) for path in documents})
            text = text.replace(tag, "\n".join(pointers))

        return text

    # ----- phases -----

    def _phase_source(self, file_ref: str) -> str | None:
        command, filename = posixpath.split(file_ref)
        candidates = [f"commands/{file_ref}"]
        if posixpath.basename(command) != "single-agent":
            candidates.insert(0, f"commands/{command}/single-agent/{filename}")

        for candidate in candidates:
            if self.resolver.resolve_file(self.context.profile, candidate).ok:
                return candidate
        return None

    def expand_phases(self, text: str, compile_embedded: Callable[[str], str]) -> str:
        """Embed the documents referenced by ``{{PHASE n: @root/commands/...}}`` tags.

        Only active when the context is in embed mode; otherwise phase tags
        pass through unchanged.

        Args:
            text: Document text
            compile_embedded: Runs the embedded document through the pipeline
                with ``compiled_single_command`` set
        """
        if not self.context.embed_phases:
            return text

        for match in _unique_matches(PHASE_PATTERN, text):
            tag = match.group(0)
            label = " ".join(match.group(1).split())
            file_ref = match.group(3).strip()

            source = self._phase_source(file_ref)
            if source is None:
                text = self._missing(text, tag, "phase", f"commands/{file_ref}", "not found")
                continue

            content, reason = self._read(source)
            if content is None:
                text = self._missing(text, tag, "phase", source, reason)
                continue

            embedded = compile_embedded(content).rstrip("\n")
            title = phase_title(posixpath.basename(file_ref))
            text = text.replace(tag, f"# {label}: {title}\n\n{embedded}")
            logger.debug(f"Embedded {source} as '{label}: {title}'")

        return text
