"""Phase tracking and failure recovery for a compaction run.

The coordinator records the last completed phase and, when the run ends
for any reason, applies the recovery action for that phase:

    EXPORTING  delete the script artifact; the live file was never moved
    SWAPPED    delete any partial new file, rename the backup back
    IMPORTED   delete the script artifact and the backup

The phase is also written to a small journal file in the database
directory after every transition. If the process dies before recovery
runs, the next run reads the journal and applies the same table before
starting over.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from compaction.errors import CleanupWarning, RestoreFailed

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Last completed step of a compaction run."""
    EXPORTING = "EXPORTING"
    SWAPPED = "SWAPPED"
    IMPORTED = "IMPORTED"


_PHASE_ORDER = [Phase.EXPORTING, Phase.SWAPPED, Phase.IMPORTED]


@dataclass
class RecoveryOutcome:
    """Result of applying the recovery table."""
    phase: Phase
    restored: bool = False
    warnings: List[CleanupWarning] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings


class PhaseJournal:
    """Persists the current phase next to the database."""

    def __init__(self, storage, paths):
        self.storage = storage
        self.path = paths.journal

    def record(self, phase: Phase, live_file: Path) -> None:
        self.storage.write_json(self.path, {
            'phase': phase.value,
            'live_file': Path(live_file).name,
        })

    def load(self, directory: Path):
        """Return ``(phase, live_file)`` from a leftover journal, or None.

        Raises:
            ValueError: If the journal is not a phase record
        """
        data = self.storage.read_json(self.path)
        if data is None:
            return None
        if not isinstance(data, dict) or not isinstance(data.get('live_file'), str):
            raise ValueError(f"Not a compaction journal: {data!r}")
        return Phase(data.get('phase')), Path(directory) / data['live_file']

    def clear(self) -> bool:
        return self.storage.delete(self.path)


class RecoveryCoordinator:
    """Tracks the phase of one run and undoes or finishes it."""

    def __init__(self, storage, paths, journal: Optional[PhaseJournal] = None):
        self.storage = storage
        self.paths = paths
        self.journal = journal or PhaseJournal(storage, paths)
        self.phase = Phase.EXPORTING
        self.live_file: Optional[Path] = None

    def begin(self, live_file: Path) -> None:
        """Start tracking a run on ``live_file``."""
        self.live_file = Path(live_file)
        self.phase = Phase.EXPORTING
        self.journal.record(self.phase, self.live_file)

    def advance(self, phase: Phase) -> None:
        """Record that ``phase`` has been reached.

        The in-memory phase is updated before the journal is written so a
        failed journal write still recovers from the right phase.
        """
        if _PHASE_ORDER.index(phase) != _PHASE_ORDER.index(self.phase) + 1:
            raise ValueError(f"Cannot move from {self.phase.value} to {phase.value}")
        self.phase = phase
        self.journal.record(phase, self.live_file)

    def recover(self) -> RecoveryOutcome:
        """Apply the recovery action for the current phase.

        The journal is removed only when every step succeeded, so a later
        run repeats whatever was left undone.

        Raises:
            RestoreFailed: If the backup could not be put back
        """
        if self.live_file is None:
            return RecoveryOutcome(self.phase)

        action = _ACTIONS[self.phase]
        outcome = RecoveryOutcome(self.phase)
        action(self, outcome)

        for warning in outcome.warnings:
            logger.warning(str(warning))
        if outcome.clean and not self.journal.clear():
            logger.warning(f"Unable to delete '{self.journal.path}'")
        return outcome

    def _delete(self, path: Path, outcome: RecoveryOutcome) -> None:
        if self.storage.exists(path) and not self.storage.delete(path):
            outcome.warnings.append(CleanupWarning(f"Unable to delete '{path}'"))

    def _recover_exporting(self, outcome: RecoveryOutcome) -> None:
        self._delete(self.paths.script, outcome)

        # A crash between the rename and the journal write leaves only the backup
        backup = self.paths.backup_for(self.live_file)
        if self.paths.find_live_file(self.storage) is None and self.storage.exists(backup):
            self._restore(backup)
            outcome.restored = True

    def _recover_swapped(self, outcome: RecoveryOutcome) -> None:
        backup = self.paths.backup_for(self.live_file)
        if not self.storage.exists(backup):
            if self.paths.find_live_file(self.storage) is None:
                raise RestoreFailed(
                    f"Neither '{self.live_file}' nor '{backup}' exists; "
                    f"the data is only in '{self.paths.script}'"
                )
            # Restored by an earlier recovery that did not finish
            self._delete(self.paths.script, outcome)
            return

        for candidate in self.paths.live_candidates:
            self._delete(candidate, outcome)
        self._restore(backup)
        outcome.restored = True
        self._delete(self.paths.script, outcome)

    def _recover_imported(self, outcome: RecoveryOutcome) -> None:
        self._delete(self.paths.script, outcome)
        self._delete(self.paths.backup_for(self.live_file), outcome)

    def _restore(self, backup: Path) -> None:
        if not self.storage.rename(backup, self.live_file):
            raise RestoreFailed(f"Unable to rename '{backup}' to '{self.live_file}'")
        logger.info(f"Restored '{self.live_file}' from '{backup}'")


_ACTIONS = {
    Phase.EXPORTING: RecoveryCoordinator._recover_exporting,
    Phase.SWAPPED: RecoveryCoordinator._recover_swapped,
    Phase.IMPORTED: RecoveryCoordinator._recover_imported,
}


def recover_from_journal(storage, paths) -> Optional[RecoveryOutcome]:
    """Finish or undo a run that died before its own recovery could run.

    Returns:
        The recovery outcome, or None when there was no journal

    Raises:
        RestoreFailed: If the backup could not be put back
    """
    journal = PhaseJournal(storage, paths)
    entry = journal.load(paths.directory)
    if entry is None:
        return None

    phase, live_file = entry
    logger.warning(f"Found unfinished compaction in phase {phase.value}, recovering")
    coordinator = RecoveryCoordinator(storage, paths, journal)
    coordinator.phase = phase
    coordinator.live_file = live_file
    return coordinator.recover()
