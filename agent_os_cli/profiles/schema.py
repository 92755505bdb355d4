"""Profile models and tagged resolution results."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel
from pydantic import Field

PROFILE_CONFIG_FILE = "profile-config.yml"
DEFAULT_PROFILE = "default"

# Maximum number of profiles visited along one inheritance chain
MAX_INHERITANCE_DEPTH = 10


class Profile(BaseModel):
    """One profile directory and its inheritance settings."""

    name: str = Field(..., description="Profile directory name")
    directory: Path = Field(..., description="Absolute path of the profile directory")
    parent: str | None = Field(None, description="Profile this one inherits from, None for a root")
    exclude_inherited_files: list[str] = Field(
        default_factory=list, description="Glob patterns hidden when inheriting from the parent"
    )
    has_config: bool = Field(False, description="Whether profile-config.yml exists")

    @property
    def config_file(self) -> Path:
        return self.directory / PROFILE_CONFIG_FILE


class ResolveStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    EXCLUDED = "excluded"
    CIRCULAR_REFERENCE = "circular_reference"
    TOO_DEEP = "too_deep"


@dataclass
class Resolution:
    """Outcome of looking up one relative path through a profile chain."""

    status: ResolveStatus
    relative_path: str
    path: Path | None = None
    profile: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResolveStatus.OK


@dataclass
class ChainResolution:
    """Inheritance chain from the requested profile up to its root ancestor."""

    status: ResolveStatus
    profiles: list[Profile] = field(default_factory=list)
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResolveStatus.OK


@dataclass
class FileListing:
    """Relative paths visible under a subdirectory of a profile chain."""

    status: ResolveStatus
    paths: list[str] = field(default_factory=list)
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResolveStatus.OK

    def __iter__(self):
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, item: object) -> bool:
        return item in self.paths
