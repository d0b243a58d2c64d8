"""Export the live database to the script artifact."""

import logging
import sqlite3

from sqlalchemy.exc import SQLAlchemyError

from compaction.errors import ArtifactCleanupFailed, ExportFailed

logger = logging.getLogger(__name__)


class ScriptExporter:
    """Writes ``backup.sql.gz`` from the live database."""

    def __init__(self, engine, storage, paths):
        self.engine = engine
        self.storage = storage
        self.paths = paths

    def export(self):
        """Create a fresh script artifact.

        Returns:
            Path of the script artifact

        Raises:
            ArtifactCleanupFailed: If a stale artifact cannot be deleted
            ExportFailed: If the engine cannot produce the script
        """
        script = self.paths.script
        if self.storage.exists(script):
            logger.info(f"Removing stale script '{script}'")
            if not self.storage.delete(script):
                raise ArtifactCleanupFailed(f"Unable to delete '{script}'")

        try:
            self.engine.export_script(script)
        except (SQLAlchemyError, sqlite3.Error, OSError) as e:
            raise ExportFailed(f"Unable to create '{script}': {e}") from e
        return script
