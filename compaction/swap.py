"""Move the live database out of the way of the rebuild."""

import logging
from pathlib import Path

from compaction.errors import SwapFailed

logger = logging.getLogger(__name__)


class SwapManager:
    """Renames the live database file to its backup name."""

    def __init__(self, storage, paths):
        self.storage = storage
        self.paths = paths

    def swap(self, live_file: Path) -> Path:
        """Rename ``live_file`` to its ``.bak`` name.

        The rename result is checked explicitly. An existing backup is
        never overwritten.

        Returns:
            Path of the backup file

        Raises:
            SwapFailed: If the backup already exists or the rename did not happen
        """
        backup = self.paths.backup_for(live_file)
        if self.storage.exists(backup):
            raise SwapFailed(f"Backup file '{backup}' already exists")
        if not self.storage.rename(live_file, backup):
            raise SwapFailed(f"Unable to rename '{live_file}' to '{backup}'")
        logger.debug(f"Renamed '{live_file}' to '{backup}'")
        return backup
