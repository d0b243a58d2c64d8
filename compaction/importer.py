"""Build the new database from the script artifact."""

import logging
import sqlite3
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from compaction.errors import ImportFailed

logger = logging.getLogger(__name__)


class ScriptImporter:
    """Replays ``backup.sql.gz`` into a new database file and analyzes it."""

    def __init__(self, engine, storage, paths):
        self.engine = engine
        self.storage = storage
        self.paths = paths

    def rebuild(self, backup_file: Path) -> Path:
        """Create the new live database.

        Args:
            backup_file: The renamed original, which must still exist

        Returns:
            Path of the new database file

        Raises:
            ImportFailed: If a precondition does not hold or the engine fails
        """
        if not self.storage.exists(backup_file):
            raise ImportFailed(f"Backup file '{backup_file}' is missing")
        for candidate in self.paths.live_candidates:
            if self.storage.exists(candidate):
                raise ImportFailed(f"'{candidate}' is still present")

        try:
            return self.engine.import_script(self.paths.script)
        except (SQLAlchemyError, sqlite3.Error, OSError, EOFError, UnicodeError) as e:
            raise ImportFailed(f"Unable to create the new database: {e}") from e
