import json
import sqlite3
from pathlib import Path

import pytest

from compaction.paths import CompactionPaths

DB_DIR = Path("/data/db")
DB_URL = "xax:sqlite:/data/db/xax;MV_STORE=FALSE"


class FakeStorage:
    """In-memory storage backend that records every call."""

    def __init__(self, files=None, dirs=(DB_DIR,)):
        self.files = {Path(p): content for p, content in (files or {}).items()}
        self.dirs = {Path(d) for d in dirs}
        self.calls = []
        self.refuse_delete = set()
        self.refuse_rename = set()

    def exists(self, path):
        self.calls.append(('exists', Path(path)))
        return Path(path) in self.files

    def is_dir(self, path):
        self.calls.append(('is_dir', Path(path)))
        return Path(path) in self.dirs

    def delete(self, path):
        path = Path(path)
        self.calls.append(('delete', path))
        if path in self.refuse_delete:
            return False
        self.files.pop(path, None)
        return True

    def rename(self, source, target):
        source, target = Path(source), Path(target)
        self.calls.append(('rename', source, target))
        if source in self.refuse_rename or source not in self.files or target in self.files:
            return False
        self.files[target] = self.files.pop(source)
        return True

    def read_json(self, path):
        data = self.files.get(Path(path))
        return None if data is None else json.loads(data)

    def write_json(self, path, data):
        self.files[Path(path)] = json.dumps(data)

    def names(self):
        return sorted(p.name for p in self.files)


class FakeEngine:
    """Script engine that works on FakeStorage contents."""

    def __init__(self, storage, paths, fail_export=False, fail_import=False,
                 leave_partial=False, new_ext=".h2.db"):
        self.storage = storage
        self.paths = paths
        self.fail_export = fail_export
        self.fail_import = fail_import
        self.leave_partial = leave_partial
        self.new_file = paths.directory / f"xax{new_ext}"
        self.exported = 0
        self.imported = 0

    def export_script(self, script_path):
        if self.fail_export:
            self.storage.files[Path(script_path)] = "partial script"
            raise sqlite3.OperationalError("database is locked")
        live = self.paths.find_live_file(self.storage)
        self.storage.files[Path(script_path)] = f"script of {self.storage.files[live]}"
        self.exported += 1

    def import_script(self, script_path):
        if self.fail_import:
            if self.leave_partial:
                self.storage.files[self.new_file] = "partial database"
            raise sqlite3.OperationalError("disk I/O error")
        self.storage.files[self.new_file] = f"rebuilt from {self.storage.files[Path(script_path)]}"
        self.imported += 1
        return self.new_file


@pytest.fixture
def paths() -> CompactionPaths:
    return CompactionPaths.for_directory(DB_DIR)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage({DB_DIR / "xax.h2.db": "original"})


def create_database(path: Path, rows) -> None:
    """Create a small alias database at ``path``."""
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            "CREATE TABLE aliases (id BIGINT PRIMARY KEY, account_id BIGINT NOT NULL, "
            "alias_name VARCHAR(100) NOT NULL, alias_uri TEXT NOT NULL, timestamp INTEGER NOT NULL)"
        )
        conn.execute("CREATE INDEX ix_aliases_account_id ON aliases (account_id)")
        conn.executemany("INSERT INTO aliases VALUES (?, ?, ?, ?, ?)", rows)
        conn.commit()
    finally:
        conn.close()


def read_rows(path: Path):
    conn = sqlite3.connect(path)
    try:
        return conn.execute("SELECT * FROM aliases ORDER BY id").fetchall()
    finally:
        conn.close()


ALIAS_ROWS = [
    (1, 100, "Zeta", "https://zeta.example", 50),
    (2, 100, "alpha", "acct:alpha", 10),
    (3, 100, "Beta", "", 30),
    (4, 200, "gamma", "acct:gamma", 20),
    (5, 100, "delta", "acct:delta", 40),
]
