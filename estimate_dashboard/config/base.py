import os
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Mapping, Self

import toml

from estimate_dashboard.config.sections import Remote, Storage
from estimate_dashboard.config.serializable import Serializable
from estimate_dashboard.type_defs import JsonObject, JsonValue

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "ESTIMATE_DASHBOARD_CONFIG_FILE"


class UnknownSettingError(AttributeError):
    pass


class AppSettings(Serializable):
    _instance = None
    debug: bool = False

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.remote = Remote()
        self.storage = Storage()
        if not self.config_file_path.exists():
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_file_path.touch()

        self.load()  # Load config during instance creation
        self.remote.apply_environment(os.environ if environ is None else environ)

    @classmethod
    def get_instance(cls) -> Self:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    @contextmanager
    def debug_on(self) -> Generator[None, None, None]:
        original_value = self.debug
        self.debug = True
        try:
            yield
        finally:
            self.debug = original_value

    @property
    def config_file_path(self) -> Path:
        configured_path = os.getenv(CONFIG_FILE_ENV_VAR)
        if configured_path:
            return Path(configured_path).expanduser()
        project_name = Path(__file__).parent.parent.name.replace("_", "-")
        file_path = Path.home() / ".config" / project_name / "config.toml"
        return file_path

    def load(self) -> None:
        try:
            with self.config_file_path.open() as file:
                data = toml.load(file)
                for key, value in data.items():
                    if key.startswith("_"):
                        continue
                    attr = getattr(self, key, None)
                    if isinstance(attr, Serializable):
                        attr.from_dict(value)
                    else:
                        setattr(self, key, value)
        except (FileNotFoundError, OSError, toml.TomlDecodeError) as error:
            logger.exception(f"Error loading configuration {str(error)}")
        self.save()

    def save(self) -> None:
        data = self.to_dict()
        data = self.sort_dict(data)
        try:
            with self.config_file_path.open("w") as file:
                toml.dump(data, file)
        except (FileNotFoundError, OSError) as error:
            logger.exception(f"Error saving configuration: {str(error)}")

    def update_and_save(self, **kwargs: JsonValue) -> None:
        for key, value in kwargs.items():
            parts = key.split("__")
            if len(parts) > 1 and hasattr(self, parts[0]):
                obj = getattr(self, parts[0])
                if not hasattr(obj, parts[1]) or parts[1].startswith("_"):
                    raise UnknownSettingError(f"Unknown setting: {key}")
                setattr(obj, parts[1], value)
            elif hasattr(self, key) and not key.startswith("_"):
                setattr(self, key, value)
            else:
                raise UnknownSettingError(f"Unknown setting: {key}")
        self.save()

    def sort_dict(self, d: Mapping[str, JsonValue]) -> JsonObject:
        sorted_dict: JsonObject = {}
        for key in sorted(d.keys()):
            value = d[key]
            if isinstance(value, dict):
                sorted_dict[key] = self.sort_dict(value)
            else:
                sorted_dict[key] = value
        return sorted_dict
