"""Database URL parsing and the on-disk layout used by the compactor."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from compaction.errors import MalformedURL

DATABASE_NAME = "xax"
# Checked in order; the first existing variant is the live database
DATABASE_EXTENSIONS = (".h2.db", ".mv.db")
SCRIPT_NAME = "backup.sql.gz"
BACKUP_SUFFIX = ".bak"
JOURNAL_NAME = "compact.phase"


def location_token(url: str) -> str:
    """Return the database location operand of a connection URL.

    The location is the third colon-separated operand, terminated by a
    semicolon or the end of the string, with an optional ``file:`` prefix
    removed.

    Args:
        url: Connection URL such as ``xax:sqlite:/data/db/xax;MV_STORE=FALSE``

    Returns:
        Location string such as ``/data/db/xax``

    Raises:
        MalformedURL: If the URL has fewer than two colons
    """
    pos = url.find(':')
    if pos >= 0:
        pos = url.find(':', pos + 1)
    if pos < 0:
        raise MalformedURL(url)

    start = pos + 1
    end = url.find(';', start)
    location = url[start:] if end < 0 else url[start:end]

    if location.startswith('file:'):
        location = location[5:]
    return location


def database_directory(url: str) -> str:
    """Return the directory holding the database files.

    Either path separator is accepted, whichever occurs last, since the
    URL may come from a Windows or a POSIX configuration.

    Raises:
        MalformedURL: If the location has no path separator or the
            resulting directory is empty
    """
    location = location_token(url)
    end = max(location.rfind('\\'), location.rfind('/'))
    if end <= 0:
        raise MalformedURL(url)
    return location[:end]


def url_parameters(url: str) -> Dict[str, str]:
    """Return the ``;KEY=VALUE`` settings of a URL with upper-cased keys."""
    params = {}
    for part in url.split(';')[1:]:
        if '=' not in part:
            continue
        key, value = part.split('=', 1)
        params[key.strip().upper()] = value.strip()
    return params


@dataclass(frozen=True)
class CompactionPaths:
    """Every file the compactor touches inside the database directory."""
    directory: Path
    script: Path
    journal: Path
    live_candidates: Tuple[Path, ...]

    @classmethod
    def for_directory(cls, directory) -> "CompactionPaths":
        directory = Path(directory)
        return cls(
            directory=directory,
            script=directory / SCRIPT_NAME,
            journal=directory / JOURNAL_NAME,
            live_candidates=tuple(
                directory / f"{DATABASE_NAME}{ext}" for ext in DATABASE_EXTENSIONS
            ),
        )

    @classmethod
    def from_url(cls, url: str) -> "CompactionPaths":
        return cls.for_directory(database_directory(url))

    def find_live_files(self, storage) -> List[Path]:
        """Return every live database file present, in lookup order."""
        return [candidate for candidate in self.live_candidates if storage.exists(candidate)]

    def find_live_file(self, storage) -> Optional[Path]:
        """Return the first existing live database file, if any."""
        for candidate in self.live_candidates:
            if storage.exists(candidate):
                return candidate
        return None

    @staticmethod
    def backup_for(live_file: Path) -> Path:
        return live_file.with_name(live_file.name + BACKUP_SUFFIX)
