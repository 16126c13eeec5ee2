#!/usr/bin/env python3
"""
temporal_files.py
--------------------
Temporary staging files for safe writes.

Exports are written to a staging file first and moved into place only
once complete, so an interrupted export never leaves a truncated file
behind under the final name.

Usage:
    from tracker.core.temporal_files import TemporalFileManager

    with TemporalFileManager(output_dir) as temp_manager:
        staging = temp_manager.create_temp_file(suffix=".csv")
        staging.write_text(content)
        shutil.move(str(staging), str(final_path))
    # Anything left behind is removed on exit
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Local imports ---
from .exceptions import TemporalFileError


class TemporalFileManager:
    """
    Creates temporary files and removes the ones still present on exit.

    Args:
        base_dir: Directory for temporary files. Uses the system temp
            directory if None. Staging next to the final file keeps the
            final move on one filesystem.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
        self.active_files: List[Path] = []

    def create_temp_file(self, suffix: str = "", prefix: str = ".tracker_") -> Path:
        """
        Create an empty temporary file and track it for cleanup.

        Raises:
            TemporalFileError: If the file cannot be created
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            temp_file = tempfile.NamedTemporaryFile(
                suffix=suffix, prefix=prefix, dir=self.base_dir, delete=False
            )
            temp_file.close()
        except OSError as e:
            raise TemporalFileError(f"Failed to create temporary file: {e}") from e

        temp_path = Path(temp_file.name)
        self.active_files.append(temp_path)
        return temp_path

    def cleanup(self) -> Dict[str, int]:
        """
        Remove tracked files that still exist.

        Returns:
            Dictionary with cleanup statistics
        """
        stats = {"files_removed": 0, "errors": 0}
        for temp_file in self.active_files[:]:
            try:
                if temp_file.exists():
                    temp_file.unlink()
                    stats["files_removed"] += 1
                self.active_files.remove(temp_file)
            except OSError:
                stats["errors"] += 1
        return stats

    def __enter__(self) -> "TemporalFileManager":
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()
