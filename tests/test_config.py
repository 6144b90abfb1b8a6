"""Tests for configuration loading."""

import pytest
import yaml

from feedpulse.config import (
    Config,
    ConfigModel,
    IngestionConfig,
    SourceConfig,
    load_config,
    load_sources,
    save_config,
    save_sources,
)


def test_defaults():
    config = ConfigModel()
    assert config.ingestion.timeout_seconds == 5.0
    assert config.ingestion.default_language == "fr"
    assert config.ingestion.supported_languages == ["fr", "en", "es", "de", "it"]
    assert config.scheduler.interval_minutes == 30
    assert config.retention.days == 7


def test_default_language_must_be_supported():
    with pytest.raises(ValueError):
        IngestionConfig(default_language="pt")


def test_unknown_log_level_rejected():
    with pytest.raises(ValueError):
        ConfigModel(logging={"level": "chatty"})


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "config.yaml")


def test_invalid_config_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("scheduler:\n  interval_minutes: 0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_empty_config_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ConfigModel()


def test_save_and_load_config(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    config = ConfigModel(ingestion={"timeout_seconds": 12.5}, scheduler={"interval_minutes": 10})
    save_config(config, path)
    assert load_config(path) == config


def test_invalid_sources_are_skipped(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text(
        yaml.safe_dump({
            "sources": [
                {"name": "Bon", "url": "https://bon.example.com", "rss_url": "https://bon.example.com/rss"},
                {"name": "Mauvais", "url": "https://m.example.com", "rss_url": "feed://m.example.com"},
                {"name": "Incomplet"},
            ]
        }),
        encoding="utf-8",
    )
    assert [s.name for s in load_sources(path)] == ["Bon"]


def test_sources_keep_accents(tmp_path):
    path = tmp_path / "sources.yaml"
    source = SourceConfig(
        name="Libération",
        url="https://www.liberation.fr",
        rss_url="https://www.liberation.fr/rss",
        orientation=["gauche"],
        categories=["société"],
    )
    save_sources([source], path)
    assert "Libération" in path.read_text(encoding="utf-8")
    assert load_sources(path) == [source]


def test_password_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    save_config(ConfigModel(postgres={"password_env": "TEST_FEEDPULSE_PW"}), path)
    monkeypatch.setenv("TEST_FEEDPULSE_PW", "s3cret")

    db_config = Config(path).get_db_config()

    assert db_config["password"] == "s3cret"
    assert db_config["database"] == "feedpulse"


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    monkeypatch.setenv("FEEDPULSE_CONFIG", str(path))
    config = Config()
    assert config.config_path == path
    assert config.sources_path == tmp_path / "sources.yaml"
