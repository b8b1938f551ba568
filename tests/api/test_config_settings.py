from __future__ import annotations

import pytest
import toml

from estimate_dashboard.config import AppSettings, UnknownSettingError, get_settings
from estimate_dashboard.config.display_settings import display_settings
from estimate_dashboard.config.sections import Remote, Storage


def test_serializable_round_trips_section_values() -> None:
    remote = Remote()

    remote.from_dict({"url": "https://a.example.co", "table": "claims", "seed_empty_remote": True})

    serialized = remote.to_dict()
    assert serialized["url"] == "https://a.example.co"
    assert serialized["table"] == "claims"
    assert serialized["seed_empty_remote"] is True
    assert serialized["timeout"] == 10.0
    assert not any(key.startswith("_") for key in serialized)


def test_serializable_skips_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    storage = Storage()

    storage.from_dict({"key": "custom", "bogus": 1})

    assert storage.key == "custom"
    assert "bogus not in Storage" in caplog.text


def test_app_settings_creates_and_persists_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "settings" / "config.toml"
    monkeypatch.setenv("ESTIMATE_DASHBOARD_CONFIG_FILE", str(config_path))

    app_settings = AppSettings(environ={})
    app_settings.debug = True
    app_settings.remote.table = "claims"
    app_settings.storage.key = "other_key"
    app_settings.save()

    reloaded = AppSettings(environ={})
    assert config_path.exists()
    assert reloaded.debug is True
    assert reloaded.remote.table == "claims"
    assert reloaded.storage.key == "other_key"
    assert reloaded.remote.configured is False


def test_environment_credentials_configure_remote_but_stay_out_of_file(tmp_path, monkeypatch) -> None:
    config_path = tmp_path / "config.toml"
    monkeypatch.setenv("ESTIMATE_DASHBOARD_CONFIG_FILE", str(config_path))

    app_settings = AppSettings(
        environ={"VITE_SUPABASE_URL": "https://env.example.co/", "VITE_SUPABASE_ANON_KEY": "secret-key"}
    )
    app_settings.save()

    assert app_settings.remote.configured is True
    assert app_settings.remote.endpoint_url == "https://env.example.co"
    assert app_settings.remote.access_token == "secret-key"
    written = toml.load(config_path)
    assert written["remote"]["url"] == ""
    assert "secret-key" not in config_path.read_text()


def test_remote_requires_both_url_and_token() -> None:
    remote = Remote()
    remote.apply_environment({"SUPABASE_URL": "https://env.example.co"})

    assert remote.configured is False

    remote.token = "file-token"
    assert remote.configured is True


def test_update_and_save_sets_nested_values_and_rejects_unknown() -> None:
    app_settings = AppSettings(environ={})

    app_settings.update_and_save(remote__seed_empty_remote=True)
    assert AppSettings(environ={}).remote.seed_empty_remote is True

    with pytest.raises(UnknownSettingError):
        app_settings.update_and_save(remote__nonexistent=1)


def test_get_settings_returns_singleton() -> None:
    assert get_settings() is get_settings()


def test_display_settings_masks_token() -> None:
    app_settings = AppSettings(environ={})
    app_settings.remote.token = "abcdefghijklmnop"

    sections = display_settings(app_settings)

    remote_fields = sections[0]["fields"]
    assert sections[0]["section"] == "Remote"
    assert remote_fields["token"] == "abcd..."
    assert remote_fields["configured"] is False
    assert sections[1]["fields"]["key"] == "emd_estimates_v1"


def test_debug_on_restores_previous_value() -> None:
    app_settings = AppSettings(environ={})

    with app_settings.debug_on():
        assert app_settings.debug is True
    assert app_settings.debug is False

    with pytest.raises(RuntimeError):
        with app_settings.debug_on():
            raise RuntimeError("boom")
    assert app_settings.debug is False


def test_display_settings_masks_non_text_token() -> None:
    app_settings = AppSettings(environ={})
    app_settings.remote.token = 123456789

    assert display_settings(app_settings)[0]["fields"]["token"] == "1234..."
