"""Exception hierarchy for the database compaction run.

Every failure the compactor can hit maps onto one class here so the
top-level run can log it with context and turn it into an exit status.
``RestoreFailed`` is the only outcome that needs an operator; the others
leave the live database untouched or restored.
"""

__all__ = [
    "CompactionError",
    "MalformedURL",
    "UnsupportedEngineType",
    "DatabaseNotFound",
    "AmbiguousDatabase",
    "ArtifactCleanupFailed",
    "ExportFailed",
    "SwapFailed",
    "ImportFailed",
    "RestoreFailed",
    "CleanupWarning",
]


class CompactionError(RuntimeError):
    """Base exception for compaction failures."""


class MalformedURL(CompactionError):
    """Raised when the database directory cannot be derived from the URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Malformed database URL: {url}")
        self.url = url


class UnsupportedEngineType(CompactionError):
    """Raised when the configured engine is not the embedded one we can compact."""


class DatabaseNotFound(CompactionError):
    """Raised when the database directory or live database file is missing."""


class AmbiguousDatabase(CompactionError):
    """Raised when both recognized database layouts are present at once."""


class ArtifactCleanupFailed(CompactionError):
    """Raised when a stale script artifact cannot be removed before export."""


class ExportFailed(CompactionError):
    """Raised when the engine cannot write the script artifact."""


class SwapFailed(CompactionError):
    """Raised when the live database file cannot be renamed to its backup name."""


class ImportFailed(CompactionError):
    """Raised when the new database cannot be built or analyzed."""


class RestoreFailed(CompactionError):
    """Raised when the backup cannot be renamed back over the live name.

    Manual intervention is required: the backup file and the script
    artifact are the only remaining copies of the data.
    """


class CleanupWarning(CompactionError):
    """A leftover file could not be deleted. Logged, never raised from a run."""
