from pathlib import Path

from estimate_dashboard.config.serializable import Serializable

DEFAULT_STORAGE_KEY = "emd_estimates_v1"


class Storage(Serializable):
    path: str = str(Path.home() / ".local" / "share" / "estimate-dashboard" / "storage.json")
    key: str = DEFAULT_STORAGE_KEY

    @property
    def storage_path(self) -> Path:
        return Path(self.path).expanduser()
