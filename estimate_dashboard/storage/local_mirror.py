import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Protocol

from estimate_dashboard.config.sections.storage import DEFAULT_STORAGE_KEY
from estimate_dashboard.models import Estimate
from estimate_dashboard.type_defs import is_json_array

logger = logging.getLogger(__name__)


class StorageUnavailableError(OSError):
    pass


class BlobStore(Protocol):
    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class FileBlobStore:
    """Key -> string blobs kept in one JSON file, rewritten whole on every set."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError) as error:
            raise StorageUnavailableError(f"Cannot read {self.path}: {error}") from error
        if not isinstance(data, dict):
            raise StorageUnavailableError(f"Unexpected storage layout in {self.path}")
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageUnavailableError:
            logger.warning("[EMD] Discarding unreadable storage file %s", self.path)
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as file:
                json.dump(data, file)
            os.replace(temp_name, self.path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise


class LocalMirror:
    def __init__(self, store: BlobStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> list[Estimate]:
        try:
            raw_value = self.store.get_item(self.key)
        except OSError as error:
            logger.warning("[EMD] Local storage read failed: %s", error)
            return []

        if not raw_value:
            return []

        try:
            data = json.loads(raw_value)
        except ValueError as error:
            logger.warning("[EMD] Local storage blob under %s is corrupt: %s", self.key, error)
            return []

        if not is_json_array(data):
            logger.warning("[EMD] Local storage blob under %s is not a list", self.key)
            return []

        return Estimate.from_list(data)

    def save(self, estimates: Iterable[Estimate]) -> None:
        try:
            payload = json.dumps([estimate.to_dict() for estimate in estimates])
            self.store.set_item(self.key, payload)
        except (OSError, TypeError, ValueError) as error:
            logger.warning("[EMD] Local storage write failed: %s", error)
