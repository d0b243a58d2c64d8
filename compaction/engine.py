"""Script export and import against the embedded SQLite database.

The engine is the only code that talks SQL during a compaction. Each
operation opens its own short-lived session and releases it before
returning, so no file handle is held open across a rename.
"""

import gzip
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from compaction.paths import DATABASE_EXTENSIONS, location_token, url_parameters

logger = logging.getLogger(__name__)

SUPPORTED_ENGINE_TYPE = "sqlite"
MV_STORE_FLAG = "MV_STORE"


@dataclass(frozen=True)
class ConnectionTarget:
    """How to reach the database engine."""
    url: str
    username: str = "sa"
    password: str = "sa"

    @property
    def mv_store(self) -> bool:
        """Whether new databases use the ``.mv.db`` layout."""
        value = url_parameters(self.url).get(MV_STORE_FLAG, "FALSE")
        return value.upper() == "TRUE"


class ScriptEngine:
    """Dump and rebuild an embedded database through a gzip SQL script."""

    def __init__(self, target: ConnectionTarget):
        self.target = target

    def database_file(self) -> Path:
        """Return the file a session on this target opens.

        An existing file in either layout wins; otherwise the layout is
        chosen by the ``MV_STORE`` URL flag.
        """
        location = location_token(self.target.url)
        for ext in DATABASE_EXTENSIONS:
            candidate = Path(location + ext)
            if candidate.exists():
                return candidate
        return Path(location + (".mv.db" if self.target.mv_store else ".h2.db"))

    def connection_string(self) -> str:
        """SQLAlchemy connection string for the current database file."""
        return f"sqlite:///{self.database_file()}"

    @contextmanager
    def session(self, must_exist: bool = True):
        """Yield a DBAPI connection, closing it and the engine on exit.

        Raises:
            FileNotFoundError: If ``must_exist`` is set and there is no database
        """
        path = self.database_file()
        if must_exist and not path.exists():
            raise FileNotFoundError(f"Database file not found: {path}")

        logger.debug(f"Opening session on {path} as '{self.target.username}'")
        engine = create_engine(f"sqlite:///{path}", poolclass=NullPool)
        try:
            connection = engine.raw_connection()
            try:
                yield connection.driver_connection
            finally:
                connection.close()
        finally:
            engine.dispose()

    def export_script(self, script_path: Path) -> None:
        """Write the full database contents as a gzip UTF-8 SQL script."""
        with self.session() as conn:
            with gzip.open(script_path, 'wt', encoding='utf-8') as f:
                for statement in conn.iterdump():
                    f.write(f"{statement}\n")

    def import_script(self, script_path: Path) -> Path:
        """Build a new database from a script, then refresh its statistics.

        Returns:
            Path of the database file that was built
        """
        with gzip.open(script_path, 'rt', encoding='utf-8') as f:
            script = f.read()

        path = self.database_file()
        with self.session(must_exist=False) as conn:
            conn.executescript(script)
            conn.execute("ANALYZE")
            conn.commit()
        return path
