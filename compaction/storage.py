"""Filesystem access for the compactor.

Deletes and renames report success as a boolean instead of raising, and
callers must check the result. A rename that quietly did nothing would
otherwise let the importer build a new database while the old one is
still in place.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """Storage backend over the local filesystem."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def delete(self, path: Path) -> bool:
        """Delete a file.

        Returns:
            True if the file is gone afterwards, False if the delete was refused
        """
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.debug(f"Delete of {path} refused: {e}")
            return False
        return True

    def rename(self, source: Path, target: Path) -> bool:
        """Rename a file, never replacing an existing target.

        Returns:
            True if the rename happened, False otherwise
        """
        source, target = Path(source), Path(target)
        if not source.exists() or target.exists():
            return False
        try:
            os.rename(source, target)
        except OSError as e:
            logger.debug(f"Rename of {source} to {target} refused: {e}")
            return False
        return True

    def read_json(self, path: Path) -> Optional[dict]:
        path = Path(path)
        if not path.exists():
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, path: Path, data: dict) -> None:
        """Write a JSON document so readers never see a partial file."""
        path = Path(path)
        tmp_path = path.with_name(path.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
