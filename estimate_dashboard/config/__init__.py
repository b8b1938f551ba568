from .base import AppSettings, UnknownSettingError


def get_settings() -> AppSettings:
    return AppSettings.get_instance()
