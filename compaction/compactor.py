"""Compact the XAX database by rebuilding it from a SQL script.

The database must not be in use while this runs: nothing here stops
another process from writing to the file between the export and the
swap.

Steps, each logged so the last one reached is visible after a crash:

    1. resolve the database directory from the connection URL
    2. dump the database to ``backup.sql.gz``
    3. rename ``xax.h2.db`` (or ``xax.mv.db``) to ``<name>.bak``
    4. build a new database from the script and ANALYZE it
    5. delete the script and the backup

Any failure rolls back according to the last completed step.
"""

import logging

from compaction.engine import ConnectionTarget, ScriptEngine
from compaction.errors import AmbiguousDatabase, CompactionError, DatabaseNotFound, RestoreFailed
from compaction.exporter import ScriptExporter
from compaction.importer import ScriptImporter
from compaction.paths import CompactionPaths
from compaction.recovery import Phase, RecoveryCoordinator, recover_from_journal
from compaction.storage import LocalStorage
from compaction.swap import SwapManager

logger = logging.getLogger(__name__)


class DatabaseCompactor:
    """Runs one compaction of the database behind a connection target."""

    def __init__(self, target: ConnectionTarget, storage=None, engine=None):
        self.target = target
        self.storage = storage or LocalStorage()
        self.engine = engine or ScriptEngine(target)

    def run(self) -> int:
        """Compact the database.

        Returns:
            0 on success, 1 on any failure
        """
        try:
            paths = self._resolve_paths()
        except CompactionError as e:
            logger.error(str(e))
            return 1

        try:
            leftover = recover_from_journal(self.storage, paths)
        except RestoreFailed as e:
            logger.critical(f"{e}. Manual recovery is required.")
            return 1
        except (ValueError, KeyError, OSError) as e:
            logger.error(f"Unreadable compaction journal '{paths.journal}': {e}")
            return 1
        if leftover is not None and not leftover.clean:
            logger.warning("Previous compaction left files that could not be deleted")

        live_files = paths.find_live_files(self.storage)
        if not live_files:
            logger.error(str(DatabaseNotFound(f"XAX database not found in '{paths.directory}'")))
            return 1
        if len(live_files) > 1:
            names = ", ".join(f"'{p.name}'" for p in live_files)
            logger.error(str(AmbiguousDatabase(
                f"Found {names} in '{paths.directory}'; keep exactly one database file"
            )))
            return 1
        live_file = live_files[0]

        exit_code = 0
        coordinator = RecoveryCoordinator(self.storage, paths)
        try:
            self._rebuild(paths, live_file, coordinator)
        except Exception:
            logger.exception("Unable to compact the database")
            exit_code = 1
        finally:
            try:
                coordinator.recover()
            except RestoreFailed as e:
                logger.critical(f"{e}. Manual recovery is required.")
                exit_code = 1

        if exit_code == 0:
            logger.info("Database successfully compacted")
        return exit_code

    def _resolve_paths(self) -> CompactionPaths:
        paths = CompactionPaths.from_url(self.target.url)
        if not self.storage.is_dir(paths.directory):
            raise DatabaseNotFound(f"Database directory '{paths.directory}' does not exist")
        logger.info(f"Database directory is '{paths.directory}'")
        return paths

    def _rebuild(self, paths: CompactionPaths, live_file, coordinator: RecoveryCoordinator) -> None:
        coordinator.begin(live_file)

        logger.info("Creating the SQL script")
        script = ScriptExporter(self.engine, self.storage, paths).export()
        logger.info(f"SQL script created: '{script}'")

        logger.info("Creating the new database")
        backup = SwapManager(self.storage, paths).swap(live_file)
        coordinator.advance(Phase.SWAPPED)

        new_file = ScriptImporter(self.engine, self.storage, paths).rebuild(backup)
        coordinator.advance(Phase.IMPORTED)
        logger.info(f"New database created: '{new_file}'")


def compact_database(target: ConnectionTarget, storage=None, engine=None) -> int:
    """Compact the database behind ``target`` and return the exit status."""
    return DatabaseCompactor(target, storage, engine).run()
