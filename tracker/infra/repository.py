"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access from the tracking logic. The services only ever see
Snapshot objects; where and how the JSON document is stored stays here.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from tracker.domain.exceptions import FormatError, StorageError
from tracker.domain.models import Snapshot
from tracker.infra.snapshot_codec import serialize, deserialize, parse_import, default_snapshot

logger = logging.getLogger(__name__)


class SnapshotRepository:
    """
    Handles snapshot persistence (JSON file based) plus export/import files.

    Export naming convention: productivity-tracker-backup-YYYY-MM-DD.json
    """

    EXPORT_PREFIX = "productivity-tracker-backup-"
    EXPORT_EXTENSION = ".json"

    def __init__(self, data_path: Path):
        self.data_path = Path(data_path)

    def exists(self) -> bool:
        return self.data_path.exists()

    def load(self) -> Snapshot:
        """
        Load the stored snapshot.

        A missing file, unreadable file or corrupt content all give the
        default snapshot; read failures are logged.
        """
        if not self.data_path.exists():
            return default_snapshot()

        try:
            blob = self.data_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to read {self.data_path}, using defaults: {e}")
            return default_snapshot()
        return deserialize(blob)

    def save(self, snapshot: Snapshot) -> None:
        """
        Write the snapshot.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so a failed write never truncates the old file
            tmp_path = self.data_path.with_suffix(self.data_path.suffix + ".tmp")
            tmp_path.write_text(serialize(snapshot), encoding="utf-8")
            tmp_path.replace(self.data_path)
        except OSError as e:
            raise StorageError(f"Failed to save {self.data_path}: {e}") from e

    def clear(self) -> None:
        """Remove the stored snapshot"""
        try:
            self.data_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {self.data_path}: {e}") from e

    def _generate_export_filename(self, today: Optional[date] = None) -> str:
        today = today or date.today()
        return f"{self.EXPORT_PREFIX}{today.isoformat()}{self.EXPORT_EXTENSION}"

    def export_to(self, snapshot: Snapshot, directory: Path, today: Optional[date] = None) -> Path:
        """
        Write a pretty-printed copy of the snapshot named with today's date.

        Args:
            snapshot: State to export
            directory: Target directory (created if missing)
            today: Date used in the file name

        Returns:
            Path to the export file
        """
        directory = Path(directory)
        export_file = directory / self._generate_export_filename(today)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            export_file.write_text(serialize(snapshot, pretty=True), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to export to {export_file}: {e}") from e

        logger.info(f"Export created: {export_file}")
        return export_file

    def read_import(self, path: Path) -> Snapshot:
        """
        Read and validate a user-selected file.

        Raises:
            FormatError: If the file cannot be read or is not a snapshot
        """
        path = Path(path)
        try:
            blob = path.read_bytes()
        except OSError as e:
            raise FormatError(f"Failed to read file: {e}") from e
        return parse_import(blob)
