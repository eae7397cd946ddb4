import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from domain.errors import PersistenceError
from domain.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class JsonSessionRepositoryImpl(SessionRepository):
    """State document in one JSON file, replaced atomically on every save."""

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read state from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"State file {self.path} does not hold an object")
        return data

    def save(self, document: dict):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write state to {self.path}: {e}") from e

    def clear(self):
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot remove {self.path}: {e}") from e
        logger.info("Removed state file %s", self.path)
