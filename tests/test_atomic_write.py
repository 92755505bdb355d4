"""
Tests for crash-safe file writes.

Focus on what a reader of the destination can observe after failures and
interruptions, and on temp-file hygiene.
"""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from agent_os_cli.utils.atomic_write import TEMP_PREFIX
from agent_os_cli.utils.atomic_write import AtomicFileWriter
from agent_os_cli.utils.atomic_write import AtomicWriteError
from agent_os_cli.utils.atomic_write import sweep_stale_temp_files


def temp_files(directory: Path) -> list[Path]:
    return list(directory.rglob(f"{TEMP_PREFIX}*"))


def mode_of(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestAtomicFileWriter:
    def test_write_creates_parent_directories(self, tmp_path):
        destination = tmp_path / "a" / "b" / "doc.md"

        with AtomicFileWriter() as writer:
            returned = writer.write("# Hello\n", destination)

        assert returned == destination
        assert destination.read_text() == "# Hello\n"
        assert writer.written == [destination]
        assert temp_files(tmp_path) == []

    def test_new_files_get_default_mode(self, tmp_path):
        destination = tmp_path / "doc.md"
        AtomicFileWriter().write("x", destination)
        assert mode_of(destination) == 0o644

    def test_existing_mode_is_kept(self, tmp_path):
        destination = tmp_path / "doc.md"
        destination.write_text("old")
        destination.chmod(0o600)

        AtomicFileWriter().write("new", destination)

        assert destination.read_text() == "new"
        assert mode_of(destination) == 0o600

    def test_dry_run_touches_nothing(self, tmp_path):
        destination = tmp_path / "sub" / "doc.md"

        writer = AtomicFileWriter(dry_run=True)
        assert writer.write("x", destination) == destination

        assert not destination.exists()
        assert not destination.parent.exists()
        assert writer.written == [destination]

    def test_failed_rename_keeps_previous_content(self, tmp_path):
        destination = tmp_path / "doc.md"
        destination.write_text("previous")

        with AtomicFileWriter() as writer:
            with patch.object(Path, "replace", side_effect=OSError("rename failed")):
                with pytest.raises(AtomicWriteError):
                    writer.write("new", destination)
            assert writer.pending_temp_files == []

        assert destination.read_text() == "previous"
        assert temp_files(tmp_path) == []

    def test_failure_only_affects_that_file(self, tmp_path):
        with AtomicFileWriter() as writer:
            writer.write("first", tmp_path / "first.md")
            with patch("agent_os_cli.utils.atomic_write.os.access", return_value=False):
                with pytest.raises(AtomicWriteError, match="not writable"):
                    writer.write("second", tmp_path / "second.md")
            writer.write("third", tmp_path / "third.md")

        assert (tmp_path / "first.md").read_text() == "first"
        assert not (tmp_path / "second.md").exists()
        assert (tmp_path / "third.md").read_text() == "third"

    def test_interrupt_mid_write_is_cleaned_up_on_exit(self, tmp_path):
        destination = tmp_path / "doc.md"
        destination.write_text("previous")

        with pytest.raises(KeyboardInterrupt):
            with AtomicFileWriter() as writer:
                with patch("agent_os_cli.utils.atomic_write.os.fsync", side_effect=KeyboardInterrupt):
                    writer.write("new", destination)

        assert destination.read_text() == "previous"
        assert temp_files(tmp_path) == []

    def test_cleanup_reports_removed_files(self, tmp_path):
        writer = AtomicFileWriter()
        with patch("agent_os_cli.utils.atomic_write.os.fsync", side_effect=SystemExit(143)):
            with pytest.raises(SystemExit):
                writer.write("new", tmp_path / "doc.md")

        assert len(writer.pending_temp_files) == 1
        assert writer.cleanup() == 1
        assert writer.pending_temp_files == []
        assert temp_files(tmp_path) == []

    def test_copy_preserves_mode(self, tmp_path):
        source = tmp_path / "script.sh"
        source.write_text("#!/bin/sh\n")
        source.chmod(0o755)
        destination = tmp_path / "out" / "script.sh"

        AtomicFileWriter().copy(source, destination)

        assert destination.read_text() == "#!/bin/sh\n"
        assert mode_of(destination) == 0o755

    def test_copy_missing_source(self, tmp_path):
        with pytest.raises(AtomicWriteError, match="Source file not found"):
            AtomicFileWriter().copy(tmp_path / "missing.md", tmp_path / "out.md")

    def test_error_is_an_os_error(self):
        assert issubclass(AtomicWriteError, OSError)


class TestSweepStaleTempFiles:
    def test_removes_leftovers_from_killed_runs(self, tmp_path):
        nested = tmp_path / "agent-os" / "standards"
        nested.mkdir(parents=True)
        stale = nested / f"{TEMP_PREFIX}abc123.tech-stack.md"
        stale.write_text("partial")
        keep = nested / "tech-stack.md"
        keep.write_text("complete")

        removed = sweep_stale_temp_files(tmp_path / "agent-os")

        assert removed == [stale]
        assert not stale.exists()
        assert keep.read_text() == "complete"

    def test_missing_directory(self, tmp_path):
        assert sweep_stale_temp_files(tmp_path / "nope") == []

    def test_next_run_leaves_no_stray_files(self, tmp_path):
        destination = tmp_path / "doc.md"
        destination.write_text("previous")
        # Simulates a SIGKILL between temp creation and rename
        (tmp_path / f"{TEMP_PREFIX}dead.doc.md").write_text("half")

        sweep_stale_temp_files(tmp_path)
        with AtomicFileWriter() as writer:
            writer.write("new", destination)

        assert destination.read_text() == "new"
        assert temp_files(tmp_path) == []
        assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.md"]


def test_umask_does_not_affect_explicit_mode(tmp_path):
    old_umask = os.umask(0o077)
    try:
        AtomicFileWriter().write("x", tmp_path / "doc.md")
    finally:
        os.umask(old_umask)
    assert mode_of(tmp_path / "doc.md") == 0o644
