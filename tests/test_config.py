"""Tests for advisory_admin.config (YAML + env)."""

from pathlib import Path

import pytest

from advisory_admin.config import DEFAULT_DATABASE_URL, AppConfig, load_config
from advisory_admin.errors import AdminError, ErrorKind


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    """A missing config file yields the defaults."""
    config = load_config(tmp_path / "missing.yaml")
    assert isinstance(config, AppConfig)
    assert config.database.url == DEFAULT_DATABASE_URL
    assert config.database.path == Path(".")
    assert config.database.branch == "master"
    assert config.github.api_url == "https://api.github.com"
    assert config.github.repository == "rustsec/advisory-db"


def test_yaml_values_and_env_substitution(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """YAML values are read and ${VAR} is substituted from the environment."""
    monkeypatch.setenv("MY_DB_TOKEN", "tok-123")
    path = tmp_path / "config.yaml"
    path.write_text(
        "database:\n"
        "  url: https://git.example.com/advisory-db.git\n"
        "  path: /srv/advisory-db\n"
        "github:\n"
        "  repository: example/advisory-db\n"
        "  token: ${MY_DB_TOKEN}\n"
        "git:\n"
        "  ssh_key_paths: [/keys/deploy]\n"
        "logging:\n"
        "  level: DEBUG\n"
    )
    config = load_config(path)
    assert config.database.url == "https://git.example.com/advisory-db.git"
    assert config.database.path == Path("/srv/advisory-db")
    assert config.github.repository == "example/advisory-db"
    assert config.github_token_resolved == "tok-123"
    assert config.git.ssh_key_paths == [Path("/keys/deploy")]
    assert config.logging.level == "DEBUG"


def test_token_from_secret_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """GITHUB_TOKEN_FILE supplies the token when GITHUB_TOKEN is unset."""
    secret = tmp_path / "token"
    secret.write_text("from-file\n")
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN_FILE", str(secret))
    config = load_config(tmp_path / "missing.yaml")
    assert config.github_token_resolved == "from-file"


def test_missing_secret_file_is_io_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """An unreadable token file is an IO error."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN_FILE", str(tmp_path / "nope"))
    config = load_config(tmp_path / "missing.yaml")
    with pytest.raises(AdminError) as exc_info:
        config.github_token_resolved
    assert exc_info.value.kind is ErrorKind.IO


def test_malformed_yaml_is_config_error(tmp_path: Path) -> None:
    """Unparseable YAML is a config error."""
    path = tmp_path / "config.yaml"
    path.write_text("database: [unclosed\n")
    with pytest.raises(AdminError) as exc_info:
        load_config(path)
    assert exc_info.value.kind is ErrorKind.CONFIG


def test_non_mapping_is_config_error(tmp_path: Path) -> None:
    """A top-level list is a config error."""
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(AdminError) as exc_info:
        load_config(path)
    assert exc_info.value.kind is ErrorKind.CONFIG


def test_invalid_value_is_config_error(tmp_path: Path) -> None:
    """A value of the wrong type is a config error."""
    path = tmp_path / "config.yaml"
    path.write_text("git:\n  ssh_key_paths: 12\n")
    with pytest.raises(AdminError) as exc_info:
        load_config(path)
    assert exc_info.value.kind is ErrorKind.CONFIG
