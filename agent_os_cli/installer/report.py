"""Results collected while installing into a project."""

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path


@dataclass
class InstallFailure:
    """One destination that could not be produced."""

    destination: Path
    reason: str


@dataclass
class InstallReport:
    """What an installation wrote (or, in dry-run mode, would write)."""

    project_dir: Path
    dry_run: bool = False
    written: list[Path] = field(default_factory=list)
    failures: list[InstallFailure] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record(self, step: str, destination: Path) -> None:
        self.written.append(destination)
        self.counts[step] = self.counts.get(step, 0) + 1

    def fail(self, destination: Path, reason: str) -> None:
        self.failures.append(InstallFailure(destination=destination, reason=reason))

    def skip(self, destination: Path) -> None:
        self.skipped.append(destination)

    def relative_paths(self, paths: list[Path] | None = None) -> list[str]:
        """Written (or given) paths relative to the project, for display."""
        result = []
        for path in self.written if paths is None else paths:
            try:
                result.append(path.relative_to(self.project_dir).as_posix())
            except ValueError:
                result.append(str(path))
        return result
