"""Profile inheritance resolution.

Profiles live in ``<base_dir>/profiles/<name>/`` and may inherit from one
parent via ``profile-config.yml``:

    inherits_from: default
    exclude_inherited_files:
      - standards/backend/*
      - workflows/implementation/*.md

A file that physically exists in a profile always wins over any inherited
copy. Exclusion patterns declared by a profile hide matching files coming
from its ancestors, never its own files.
"""

import logging
from pathlib import Path
from pathlib import PurePosixPath

from ..compiler.patterns import matches_any
from .schema import DEFAULT_PROFILE
from .schema import MAX_INHERITANCE_DEPTH
from .schema import PROFILE_CONFIG_FILE
from .schema import ChainResolution
from .schema import FileListing
from .schema import Profile
from .schema import Resolution
from .schema import ResolveStatus
from .yaml_mini import get_yaml_array
from .yaml_mini import get_yaml_value

logger = logging.getLogger(__name__)

# Only these document types take part in profile enumeration
PROFILE_FILE_SUFFIXES = (".md", ".yml", ".yaml")


def _is_safe_relative(path: str) -> bool:
    pure = PurePosixPath(path)
    return bool(path) and not pure.is_absolute() and ".." not in pure.parts


def _is_valid_profile_reference(name: str) -> bool:
    return bool(name) and "/" not in name and "\\" not in name and ".." not in name


class ProfileResolver:
    """Finds the effective copy of profile files through inheritance chains."""

    def __init__(self, base_dir: Path):
        """
        Initialize resolver.

        Args:
            base_dir: Base installation directory containing ``profiles/``
        """
        self.base_dir = Path(base_dir)
        self.profiles_dir = self.base_dir / "profiles"
        self._profiles: dict[str, Profile] = {}

    def profile_exists(self, name: str) -> bool:
        return _is_valid_profile_reference(name) and (self.profiles_dir / name).is_dir()

    def load_profile(self, name: str) -> Profile:
        """Load a profile's inheritance settings (cached per resolver)."""
        if name in self._profiles:
            return self._profiles[name]

        directory = self.profiles_dir / name
        config_file = directory / PROFILE_CONFIG_FILE
        has_config = config_file.is_file()

        parent: str | None = None
        excludes: list[str] = []
        if has_config:
            inherits_from = get_yaml_value(config_file, "inherits_from", "")
            if not inherits_from:
                # Implicit parent is the default profile, which itself is a root
                parent = DEFAULT_PROFILE if name != DEFAULT_PROFILE else None
            elif inherits_from.lower() != "false":
                parent = inherits_from
            excludes = get_yaml_array(config_file, "exclude_inherited_files")

        profile = Profile(
            name=name,
            directory=directory,
            parent=parent,
            exclude_inherited_files=excludes,
            has_config=has_config,
        )
        self._profiles[name] = profile
        logger.debug(f"Loaded profile '{name}' (parent={parent}, excludes={len(excludes)})")
        return profile

    def resolve_chain(self, profile: str) -> ChainResolution:
        """Walk from ``profile`` up to its root ancestor.

        Returns:
            ChainResolution with profiles ordered leaf first, or a
            CIRCULAR_REFERENCE / TOO_DEEP / NOT_FOUND status
        """
        chain: list[Profile] = []
        visited: list[str] = []
        current: str | None = profile

        while current is not None:
            guard = self._guard(current, visited)
            if guard is not None:
                status, detail = guard
                return ChainResolution(status=status, profiles=chain, detail=detail)

            visited.append(current)
            loaded = self.load_profile(current)
            chain.append(loaded)
            current = loaded.parent

        return ChainResolution(status=ResolveStatus.OK, profiles=chain)

    def resolve_file(self, profile: str, relative_path: str) -> Resolution:
        """Find the effective copy of ``relative_path`` for ``profile``.

        At each step the profile's own copy wins immediately; otherwise the
        profile's exclusion list is consulted before moving to its parent.

        Args:
            profile: Requesting profile name
            relative_path: Path relative to the profile root (e.g. ``standards/global/tech-stack.md``)

        Returns:
            Resolution with status OK and the file path, or the reason it
            could not be resolved
        """
        relative_path = relative_path.lstrip("/")
        if not _is_safe_relative(relative_path):
            return Resolution(ResolveStatus.NOT_FOUND, relative_path, detail="invalid relative path")

        visited: list[str] = []
        current = profile

        while True:
            guard = self._guard(current, visited)
            if guard is not None:
                status, detail = guard
                return Resolution(status, relative_path, profile=current, detail=detail)
            visited.append(current)

            loaded = self.load_profile(current)
            candidate = loaded.directory / relative_path
            if candidate.is_file():
                return Resolution(ResolveStatus.OK, relative_path, path=candidate, profile=current)

            if loaded.parent is None:
                return Resolution(ResolveStatus.NOT_FOUND, relative_path, profile=current)

            pattern = matches_any(relative_path, loaded.exclude_inherited_files)
            if pattern is not None:
                logger.debug(f"'{relative_path}' excluded by profile '{current}' (pattern '{pattern}')")
                return Resolution(
                    ResolveStatus.EXCLUDED,
                    relative_path,
                    profile=current,
                    detail=f"excluded by pattern '{pattern}'",
                )

            current = loaded.parent

    def resolve_files(self, profile: str, subdirectory: str = "") -> FileListing:
        """List every relative path visible under ``subdirectory``.

        Profiles are scanned from the root ancestor down to ``profile``. A
        file found in a profile is hidden when any descendant of that profile
        in the chain declares a matching exclusion pattern, which keeps the
        listing in agreement with ``resolve_file``. The content for a path
        must still be fetched via ``resolve_file``.

        Returns:
            FileListing of sorted POSIX relative paths
        """
        subdirectory = subdirectory.strip("/")
        if subdirectory and not _is_safe_relative(subdirectory):
            return FileListing(ResolveStatus.NOT_FOUND, detail="invalid subdirectory")

        chain = self.resolve_chain(profile)
        if not chain.ok:
            logger.warning(f"Cannot list files for profile '{profile}': {chain.detail}")
            return FileListing(chain.status, detail=chain.detail)

        seen: set[str] = set()
        # chain is leaf first; walk root first so ancestors are scanned before descendants
        for index in range(len(chain.profiles) - 1, -1, -1):
            current = chain.profiles[index]
            descendant_patterns = [p for d in chain.profiles[:index] for p in d.exclude_inherited_files]

            for relative_path in self._scan(current, subdirectory):
                if relative_path in seen:
                    continue
                if matches_any(relative_path, descendant_patterns) is not None:
                    continue
                seen.add(relative_path)

        return FileListing(ResolveStatus.OK, sorted(seen))

    def read_file(self, profile: str, relative_path: str) -> str | None:
        """Return the effective content of ``relative_path`` or None."""
        resolution = self.resolve_file(profile, relative_path)
        if not resolution.ok or resolution.path is None:
            return None
        return resolution.path.read_text(encoding="utf-8")

    def _scan(self, profile: Profile, subdirectory: str) -> list[str]:
        search_dir = profile.directory / subdirectory if subdirectory else profile.directory
        if not search_dir.is_dir():
            return []

        found = []
        for path in search_dir.rglob("*"):
            if not path.is_file() or path.suffix not in PROFILE_FILE_SUFFIXES:
                continue
            relative = path.relative_to(profile.directory).as_posix()
            if relative == PROFILE_CONFIG_FILE:
                continue
            found.append(relative)
        return sorted(found)

    def _guard(self, current: str, visited: list[str]) -> tuple[ResolveStatus, str] | None:
        if len(visited) >= MAX_INHERITANCE_DEPTH:
            logger.error(
                f"Profile inheritance chain too deep (max {MAX_INHERITANCE_DEPTH} levels): {' -> '.join(visited)}"
            )
            return ResolveStatus.TOO_DEEP, f"inheritance chain exceeds {MAX_INHERITANCE_DEPTH} profiles"

        if current in visited:
            logger.warning(f"Circular inheritance detected: {' -> '.join(visited)} -> {current}")
            return ResolveStatus.CIRCULAR_REFERENCE, f"circular inheritance at profile '{current}'"

        if not _is_valid_profile_reference(current):
            logger.error(f"Malformed parent profile reference: '{current}'")
            return ResolveStatus.NOT_FOUND, f"malformed profile reference '{current}'"

        return None
