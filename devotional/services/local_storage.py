"""
Local key/value storage of JSON documents.

Each key is one file in ``settings.LOCAL_STORAGE_DIR``. Reads never fail:
a missing, unreadable or malformed document loads as an empty list.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Type, TypeVar, Union

from django.conf import settings
from pydantic import BaseModel, ValidationError

from ..schemas import dump_record


logger = logging.getLogger(__name__)

STORAGE_RECORDS = "devotion-records"
STORAGE_CHECKINS = "checkin-records"

M = TypeVar("M", bound=BaseModel)


class LocalStorage:
    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    @classmethod
    def from_settings(cls) -> "LocalStorage":
        return cls(settings.LOCAL_STORAGE_DIR)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        """Write the value atomically (temp file + rename)."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass

    def load_list(self, key: str, model: Type[M]) -> List[M]:
        """
        Load a JSON array stored under ``key`` as a list of ``model``.

        Entries that do not validate are skipped with a warning.
        """
        try:
            raw = self.get_item(key)
        except OSError as e:
            logger.warning("Could not read local storage key %s: %s", key, e)
            return []
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Local storage key %s does not hold valid JSON; ignoring it", key)
            return []
        if not isinstance(parsed, list):
            return []

        items: List[M] = []
        for index, entry in enumerate(parsed):
            try:
                items.append(model.model_validate(entry))
            except ValidationError as e:
                logger.warning("Skipping invalid entry %d under %s: %s", index, key, e)
        return items

    def save_list(self, key: str, records: Sequence[BaseModel]) -> bool:
        """Serialize the records under ``key``. Returns False if the write failed."""
        payload = json.dumps([dump_record(r) for r in records], ensure_ascii=False)
        try:
            self.set_item(key, payload)
        except OSError as e:
            logger.error("Could not write local storage key %s: %s", key, e)
            return False
        return True
