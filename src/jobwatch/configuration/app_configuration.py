from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from jobwatch.configuration.ai_settings import AISettings
from jobwatch.configuration.errors import ConfigurationError
from jobwatch.util.logger import get_logger

logger = get_logger("app_configuration")


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. JOBWATCH_HOME environment variable, if set.
    2. Otherwise, the repository root (three levels above this package).
    """
    if env_home := os.getenv("JOBWATCH_HOME"):
        return Path(env_home).resolve()

    return Path(__file__).resolve().parents[3]


BASE_DIR = resolve_base_dir()


def resolve_config_path() -> Path:
    """Return JOBWATCH_CONFIG if set, else config/app_config.yml under BASE_DIR."""
    if env_config := os.getenv("JOBWATCH_CONFIG"):
        return Path(env_config).resolve()
    return BASE_DIR / "config" / "app_config.yml"


CONFIG_PATH = resolve_config_path()


class AppConfig:
    """File-lock based accessor around the optional YAML application configuration.

    A missing file is not an error: every setting has a compiled-in default.
    A file that exists but cannot be read or parsed raises
    :class:`ConfigurationError` so the process refuses to start half
    configured.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.info("[APP CONFIGURATION] No config file at %s; using defaults.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"failed to load config {self.config_path}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"config {self.config_path} must contain a mapping, got {type(data).__name__}"
            )
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers must not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def ai_settings(self) -> AISettings:
        """Return the ``ai_settings`` section wrapped in an AISettings helper."""
        settings = self._data.get("ai_settings", {})
        if not isinstance(settings, dict):
            raise ConfigurationError("'ai_settings' must be a mapping")
        return AISettings(settings)

    @property
    def moderation(self) -> Dict[str, Any]:
        """Return the raw ``moderation`` section (self id, report channels, summary size)."""
        section = self._data.get("moderation", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'moderation' must be a mapping")
        return section


def load_app_config(config_path: Path | None = None) -> AppConfig:
    """Load the application configuration, raising ConfigurationError on bad input."""
    return AppConfig(config_path or CONFIG_PATH)
