"""Crash-safe compaction of the embedded XAX database.

Rebuilds the database file from a SQL dump to reclaim space, keeping the
original until the new file is complete.
"""

from .compactor import DatabaseCompactor, compact_database
from .engine import ConnectionTarget, ScriptEngine
from .errors import (
    CompactionError,
    MalformedURL,
    UnsupportedEngineType,
    DatabaseNotFound,
    AmbiguousDatabase,
    ArtifactCleanupFailed,
    ExportFailed,
    SwapFailed,
    ImportFailed,
    RestoreFailed,
    CleanupWarning,
)
from .paths import CompactionPaths, database_directory
from .recovery import Phase, PhaseJournal, RecoveryCoordinator, recover_from_journal
from .storage import LocalStorage

__all__ = [
    'DatabaseCompactor',
    'compact_database',
    'ConnectionTarget',
    'ScriptEngine',
    'CompactionError',
    'MalformedURL',
    'UnsupportedEngineType',
    'DatabaseNotFound',
    'AmbiguousDatabase',
    'ArtifactCleanupFailed',
    'ExportFailed',
    'SwapFailed',
    'ImportFailed',
    'RestoreFailed',
    'CleanupWarning',
    'CompactionPaths',
    'database_directory',
    'Phase',
    'PhaseJournal',
    'RecoveryCoordinator',
    'recover_from_journal',
    'LocalStorage',
]
