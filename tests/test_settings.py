import pytest

from partyconnect.config.settings import get_logging_config, get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_packaged_defaults(fresh_settings):
    settings = fresh_settings()

    assert settings.storage.event_key == "event-storage"
    assert settings.storage.user_key == "user-storage"
    assert settings.geo.default_radius_km == 50
    assert (settings.ratings.min, settings.ratings.max) == (0, 5)
    assert settings.profile.default.id == "current-user"
    assert settings.profile.default.coordinates == (34.0522, -118.2437)


def test_environment_overrides(monkeypatch, fresh_settings, tmp_path):
    monkeypatch.setenv("PARTYCONNECT_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("PARTYCONNECT_STORAGE_BACKEND", "Memory")
    monkeypatch.setenv("PARTYCONNECT_LOG_LEVEL", "debug")

    settings = fresh_settings()

    assert settings.storage.dir == str(tmp_path)
    assert settings.storage.backend == "memory"
    assert settings.app.log_level == "debug"


def test_external_config_file(monkeypatch, fresh_settings, tmp_path):
    path = tmp_path / "partyconnect.yaml"
    path.write_text("geo:\n  default_radius_km: 5\ncatalog:\n  seed_sample_events: false\n", encoding="utf-8")
    monkeypatch.setenv("PARTYCONNECT_CONFIG_PATH", str(path))

    settings = fresh_settings()

    assert settings.geo.default_radius_km == 5
    assert settings.catalog.seed_sample_events is False
    assert settings.storage.event_key == "event-storage"


def test_external_config_must_be_a_mapping(monkeypatch, fresh_settings, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    monkeypatch.setenv("PARTYCONNECT_CONFIG_PATH", str(path))

    with pytest.raises(ValueError, match="expected a mapping"):
        fresh_settings()


def test_logging_config_is_dict_config():
    config = get_logging_config()
    assert config["version"] == 1
    assert config["disable_existing_loggers"] is False
    assert "console" in config["handlers"]
