"""Tests for TemporalFileManager staging files."""
import shutil

import pytest

from tracker.core.exceptions import TemporalFileError
from tracker.core.temporal_files import TemporalFileManager


class TestTemporalFileManager:

    def test_create_temp_file_in_base_dir(self, tmp_path):
        manager = TemporalFileManager(tmp_path / "exports")
        staging = manager.create_temp_file(suffix=".csv")

        assert staging.exists()
        assert staging.parent == tmp_path / "exports"
        assert staging.name.startswith(".tracker_")
        assert staging.suffix == ".csv"

    def test_cleanup_removes_remaining_files(self, tmp_path):
        manager = TemporalFileManager(tmp_path)
        first = manager.create_temp_file()
        second = manager.create_temp_file()

        stats = manager.cleanup()

        assert stats == {"files_removed": 2, "errors": 0}
        assert not first.exists()
        assert not second.exists()
        assert manager.active_files == []

    def test_moved_file_survives_context_exit(self, tmp_path):
        final = tmp_path / "export.txt"

        with TemporalFileManager(tmp_path) as manager:
            staging = manager.create_temp_file(suffix=".txt")
            staging.write_text("content", encoding="utf-8")
            shutil.move(str(staging), str(final))

        assert final.read_text(encoding="utf-8") == "content"
        assert list(tmp_path.glob(".tracker_*")) == []

    def test_context_exit_removes_unmoved_file(self, tmp_path):
        with pytest.raises(RuntimeError):
            with TemporalFileManager(tmp_path) as manager:
                staging = manager.create_temp_file()
                raise RuntimeError("interrupted")

        assert not staging.exists()

    def test_unusable_base_dir_raises(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(TemporalFileError):
            TemporalFileManager(blocker).create_temp_file()
