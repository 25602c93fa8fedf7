"""Configuration loading from YAML and environment.

The GitHub token (if any) is only handed to git as a fetch credential; the
pull request API is queried anonymously. Never put real tokens in config
files committed to the repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from advisory_admin.errors import ErrorKind

DEFAULT_DATABASE_URL = "https://github.com/RustSec/advisory-db.git"

# Injected by load_config so ${VAR} substitution reads a snapshot of the env
_current_env: dict[str, str] = {}


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        try:
            return Path(file_path).read_text().strip()
        except OSError as e:
            raise ErrorKind.IO.context(e, f"couldn't read secret file {file_path}") from e
    return None


class DatabaseConfig(BaseSettings):
    """Advisory database location."""

    model_config = SettingsConfigDict(env_prefix="ADVISORY_DB_", extra="ignore")

    url: str = Field(default=DEFAULT_DATABASE_URL, description="Upstream advisory database git URL")
    path: Path = Field(default=Path("."), description="Local clone of the advisory database")
    branch: str = Field(default="master", description="Upstream branch to fetch")


class GitHubConfig(BaseSettings):
    """Code hosting API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    api_url: str = Field(default="https://api.github.com", description="API base URL")
    repository: str = Field(default="rustsec/advisory-db", description="Repository pull requests are opened against")
    token: str | None = Field(default=None, description="Token offered to git when fetching; use env or secret file")


class GitConfig(BaseSettings):
    """Git transport settings."""

    model_config = SettingsConfigDict(env_prefix="GIT_", extra="ignore")

    ssh_key_paths: list[Path] = Field(
        default_factory=list,
        description="SSH private keys to offer; defaults to ~/.ssh/id_ed25519, id_ecdsa, id_rsa",
    )


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file yields defaults (plus env overrides). Unreadable or
    malformed files and invalid values raise AdminError(CONFIG).
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        try:
            return AppConfig()
        except ValidationError as e:
            raise ErrorKind.CONFIG.context(e, "invalid configuration from environment") from e

    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except OSError as e:
        raise ErrorKind.IO.context(e, f"couldn't read config file {path}") from e
    except yaml.YAMLError as e:
        raise ErrorKind.CONFIG.context(e, f"malformed config file {path}") from e
    if not isinstance(raw, dict):
        raise ErrorKind.CONFIG.context(None, f"config file {path} must contain a mapping")
    raw = _substitute_env(raw)

    try:
        return AppConfig(
            database=DatabaseConfig(**(raw.get("database") or {})),
            github=GitHubConfig(**(raw.get("github") or {})),
            git=GitConfig(**(raw.get("git") or {})),
            logging=LoggingConfig(**(raw.get("logging") or {})),
        )
    except ValidationError as e:
        raise ErrorKind.CONFIG.context(e, f"invalid config file {path}") from e
