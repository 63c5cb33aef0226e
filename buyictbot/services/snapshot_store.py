from __future__ import annotations
# buyictbot/services/snapshot_store.py
import json
import os
import tempfile

from buyictbot.scrapers.errors import PersistenceError
from buyictbot.scrapers.models import RunSnapshot
from buyictbot.utils.logger import logger


class SnapshotStore:
    """
    Single-file JSON store for the run snapshot.
    Writes go to a temp file in the same directory and are renamed over the
    target, so readers only ever see the previous or the new snapshot.
    """

    def __init__(self, path: str):
        self.path = path

    def write(self, snapshot: RunSnapshot) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            payload = json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)
            fd, tmp_path = tempfile.mkstemp(prefix=".snapshot-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not write snapshot: {e}", self.path) from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.info(f"Snapshot written: {len(snapshot.opportunities)} opportunities -> {self.path}")

    def load(self) -> RunSnapshot:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return RunSnapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"Could not read snapshot: {e}", self.path) from e
