"""Re-install with snapshot and rollback.

A re-install deletes the managed directories and installs from scratch. The
directories are first copied into ``.agent-os-reinstall-backup.*`` inside the
project; if the new installation does not complete, the copy is restored.

    with ReinstallTransaction(project_dir, skill_names) as transaction:
        ProjectInstaller(base_dir, project_dir, config).install()
        transaction.mark_complete()
"""

import logging
import shutil
import tempfile
from pathlib import Path

from ..compiler.naming import skill_name
from ..exceptions import ReinstallError
from ..paths import get_claude_skills_dir
from ..paths import get_managed_dirs
from ..profiles.resolver import ProfileResolver

logger = logging.getLogger(__name__)

BACKUP_PREFIX = ".agent-os-reinstall-backup."


def installed_skill_names(resolver: ProfileResolver, profile: str, project_dir: Path) -> list[str]:
    """Skill directories in the project that were generated from ``profile``'s standards."""
    skills_dir = get_claude_skills_dir(project_dir)
    if not skills_dir.is_dir():
        return []

    names = []
    for standards_path in resolver.resolve_files(profile, "standards"):
        if not standards_path.endswith(".md"):
            continue
        name = skill_name(standards_path)
        if (skills_dir / name).is_dir():
            names.append(name)
    return names


class ReinstallTransaction:
    """Snapshot the managed directories, delete them, restore them on failure.

    Contract:
    - Entering snapshots and verifies, then deletes; ReinstallError means
      nothing was deleted
    - Leaving after ``mark_complete()`` without an exception removes the backup
    - Leaving any other way restores the snapshot; a partial restore keeps the
      backup directory and logs its location
    """

    def __init__(self, project_dir: Path, skill_names: list[str] | None = None, dry_run: bool = False):
        self.project_dir = Path(project_dir)
        self.skill_names = list(skill_names or [])
        self.dry_run = dry_run
        self.backup_dir: Path | None = None
        self.completed = False
        self._items: list[Path] = []

    def __enter__(self) -> "ReinstallTransaction":
        self._items = [path for path in self.managed_paths() if path.exists()]
        if self.dry_run:
            for path in self._items:
                logger.info(f"[dry-run] Would remove {path}")
            return self

        self.snapshot()
        self.remove_installation()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.dry_run or self.backup_dir is None:
            return False

        if self.completed and exc_type is None:
            self.discard_backup()
        else:
            logger.warning("Re-installation failed, rolling back from backup")
            self.rollback()
        return False

    def managed_paths(self) -> list[Path]:
        skills_dir = get_claude_skills_dir(self.project_dir)
        return [*get_managed_dirs(self.project_dir), *(skills_dir / name for name in self.skill_names)]

    def mark_complete(self) -> None:
        self.completed = True

    def _backup_path(self, path: Path) -> Path:
        if self.backup_dir is None:
            raise ReinstallError("No backup has been taken for this re-installation")
        return self.backup_dir / path.relative_to(self.project_dir)

    def snapshot(self) -> Path:
        """Copy every existing managed directory into a fresh backup directory.

        Raises:
            ReinstallError: If the backup cannot be created or verified
        """
        try:
            self.backup_dir = Path(tempfile.mkdtemp(prefix=BACKUP_PREFIX, dir=self.project_dir))
        except OSError as e:
            raise ReinstallError(f"Failed to create backup directory in {self.project_dir}: {e}") from e

        try:
            for path in self._items:
                target = self._backup_path(path)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copytree(path, target, symlinks=True)
        except OSError as e:
            self.discard_backup()
            raise ReinstallError(f"Failed to back up existing installation: {e}") from e

        missing = [path for path in self._items if not self._backup_path(path).is_dir()]
        if missing:
            self.discard_backup()
            names = ", ".join(str(path.relative_to(self.project_dir)) for path in missing)
            raise ReinstallError(f"Backup verification failed ({names} not in backup); aborting to prevent data loss")

        logger.info(f"Backed up {len(self._items)} item(s) to {self.backup_dir}")
        return self.backup_dir

    def remove_installation(self) -> None:
        for path in self._items:
            shutil.rmtree(path)
            logger.debug(f"Removed {path}")

    def rollback(self) -> bool:
        """Restore every backed-up directory.

        Returns:
            True when everything was restored and the backup removed

        Raises:
            ReinstallError: If no snapshot was taken
        """
        if self.backup_dir is None:
            raise ReinstallError("No backup has been taken for this re-installation")

        failed: list[str] = []
        for path in self._items:
            source = self._backup_path(path)
            try:
                if path.exists():
                    shutil.rmtree(path)
                path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copytree(source, path, symlinks=True)
            except OSError as e:
                logger.error(f"Could not restore {path}: {e}")
                failed.append(str(path.relative_to(self.project_dir)))

        # Directories created by the failed attempt that did not exist before
        for path in get_managed_dirs(self.project_dir):
            if path not in self._items and path.exists():
                shutil.rmtree(path, ignore_errors=True)

        if failed:
            logger.error(
                f"PARTIAL RESTORE: could not restore {', '.join(failed)}; backup preserved at {self.backup_dir}"
            )
            return False

        self.discard_backup()
        logger.info(f"Rollback complete, previous installation restored ({len(self._items)} item(s))")
        return True

    def discard_backup(self) -> None:
        if self.backup_dir is not None and self.backup_dir.exists():
            shutil.rmtree(self.backup_dir)
            logger.debug(f"Removed backup directory: {self.backup_dir}")
        self.backup_dir = None
