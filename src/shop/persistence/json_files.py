"""JSON file adapter — one pretty-printed UTF-8 file per store."""

import json
import os
import tempfile
from pathlib import Path

from shop.persistence.port import PersistencePort
from shop.utils.logging import get_logger

logger = get_logger(__name__)


class JsonFileStore(PersistencePort):
    """Stores ``<store>.json`` documents under ``data_dir``.

    Writes go to a temporary file in the same directory that is then renamed
    over the target, so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, data_dir: str | Path = "data"):
        self.data_dir = Path(data_dir)

    def path_for(self, store: str) -> Path:
        return self.data_dir / f"{store}.json"

    def load(self, store: str) -> dict:
        path = self.path_for(store)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("Store file not found, starting empty", store=store, path=str(path))
            return {}
        except (OSError, ValueError) as exc:
            logger.error("Failed to read store", store=store, path=str(path), error=str(exc))
            return {}

        if not isinstance(data, dict):
            logger.error("Store document is not an object", store=store, path=str(path))
            return {}
        return data

    def save(self, store: str, data: dict) -> bool:
        path = self.path_for(store)
        tmp_path = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{store}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save store", store=store, path=str(path), error=str(exc))
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            return False

        logger.debug("Store saved", store=store, path=str(path))
        return True
