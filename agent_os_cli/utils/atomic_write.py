"""Crash-safe file writes.

Content goes to a temporary file in the destination's own directory and is
then renamed over the destination, so readers only ever see the old file or
the complete new one. Temp files are owned by an ``AtomicFileWriter`` scope:
leaving the ``with`` block (normally, by exception, or by KeyboardInterrupt /
SystemExit raised from a signal handler) removes any that are still pending.
"""

import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".tmp."
DEFAULT_FILE_MODE = 0o644


class AtomicWriteError(OSError):
    """A single destination could not be written."""


class AtomicFileWriter:
    """Writes files atomically and cleans up its own temp files.

    Contract:
    - Inputs: content (str) and destination path per write
    - Outputs: destination path (also reported in dry-run mode)
    - Side effects: creates parent directories, temp files, renames
    - Errors: AtomicWriteError for that file only; earlier writes stay intact

    Example:
        with AtomicFileWriter(dry_run=False) as writer:
            writer.write("# Hello\\n", project_dir / "agent-os" / "README.md")
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.written: list[Path] = []
        self._temp_files: set[Path] = set()

    def __enter__(self) -> "AtomicFileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def pending_temp_files(self) -> list[Path]:
        return sorted(self._temp_files)

    def write(self, content: str, destination: Path | str) -> Path:
        """Atomically replace ``destination`` with ``content``.

        Args:
            content: Full text to write
            destination: Target file path

        Returns:
            The destination path

        Raises:
            AtomicWriteError: If the directory can't be created or written,
                or the temp file can't be created or renamed
        """
        dest = Path(destination)
        if self.dry_run:
            logger.debug(f"[dry-run] Would write: {dest}")
            self.written.append(dest)
            return dest

        return self._write_bytes(content.encode("utf-8"), dest, mode=None)

    def copy(self, source: Path | str, destination: Path | str) -> Path:
        """Atomically copy ``source`` to ``destination``, preserving its mode."""
        src = Path(source)
        dest = Path(destination)
        if not src.is_file():
            raise AtomicWriteError(f"Source file not found: {src}")

        if self.dry_run:
            logger.debug(f"[dry-run] Would copy: {src} -> {dest}")
            self.written.append(dest)
            return dest

        try:
            data = src.read_bytes()
        except OSError as e:
            raise AtomicWriteError(f"Failed to read {src}: {e}") from e

        written = self._write_bytes(data, dest, mode=src.stat().st_mode & 0o777)
        with contextlib.suppress(OSError):
            shutil.copystat(src, written)
        return written

    def _write_bytes(self, data: bytes, dest: Path, mode: int | None) -> Path:
        dest_dir = self._ensure_writable_dir(dest.parent)

        try:
            tmp_file = tempfile.NamedTemporaryFile(
                mode="wb", dir=dest_dir, prefix=TEMP_PREFIX, suffix=f".{dest.name}", delete=False
            )
        except OSError as e:
            raise AtomicWriteError(f"Failed to create temporary file for: {dest}") from e

        temp_path = Path(tmp_file.name)
        self._temp_files.add(temp_path)

        try:
            with tmp_file:
                tmp_file.write(data)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())

            if mode is None:
                mode = dest.stat().st_mode & 0o777 if dest.exists() else DEFAULT_FILE_MODE
            temp_path.chmod(mode)

            temp_path.replace(dest)
        except OSError as e:
            self._discard(temp_path)
            raise AtomicWriteError(f"Failed to write {dest}: {e}") from e

        self._temp_files.discard(temp_path)
        self.written.append(dest)
        logger.debug(f"Wrote file: {dest}")
        return dest

    def _ensure_writable_dir(self, directory: Path) -> Path:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AtomicWriteError(f"Failed to create directory: {directory}") from e

        if not directory.is_dir():
            raise AtomicWriteError(f"Directory does not exist after creation attempt: {directory}")
        if not os.access(directory, os.W_OK):
            raise AtomicWriteError(f"Directory is not writable: {directory}")
        return directory

    def _discard(self, temp_path: Path) -> None:
        with contextlib.suppress(FileNotFoundError):
            temp_path.unlink()
        self._temp_files.discard(temp_path)

    def cleanup(self) -> int:
        """Remove every temp file this writer still owns.

        Returns:
            Number of temp files removed
        """
        removed = 0
        for temp_path in list(self._temp_files):
            try:
                temp_path.unlink()
                removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove temporary file {temp_path}: {e}")
                continue
            self._temp_files.discard(temp_path)

        if removed:
            logger.debug(f"Removed {removed} leftover temporary file(s)")
        return removed


def sweep_stale_temp_files(directory: Path) -> list[Path]:
    """Delete temp files left behind in ``directory`` by a killed writer.

    A process killed with SIGKILL gets no chance to clean up, so the next run
    sweeps the destination tree before writing.
    """
    removed: list[Path] = []
    if not directory.is_dir():
        return removed

    for candidate in directory.rglob(f"{TEMP_PREFIX}*"):
        if candidate.is_file():
            with contextlib.suppress(OSError):
                candidate.unlink()
                removed.append(candidate)

    if removed:
        logger.info(f"Swept {len(removed)} stale temporary file(s) under {directory}")
    return removed
