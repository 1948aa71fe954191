"""Locate, read and write firefly.yaml."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import AuthenticationError
from .models import FireflyCatalogConfig, FireflyCredentials

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Reads firefly.yaml from the project directory or ~/.firefly-catalog.

    A project file shadows the user file completely; the two are not merged.
    """

    CONFIG_FILENAME = "firefly.yaml"
    USER_CONFIG_DIR = Path.home() / ".firefly-catalog"

    def __init__(self, project_path: Path | None = None):
        self._project_path = project_path or Path.cwd()

    def search_paths(self) -> list[Path]:
        """Candidate config files, highest priority first."""
        return [
            self._project_path / self.CONFIG_FILENAME,
            self.USER_CONFIG_DIR / self.CONFIG_FILENAME,
        ]

    def get_config_path(self) -> Path | None:
        return next((p for p in self.search_paths() if p.is_file()), None)

    def load(self) -> FireflyCatalogConfig:
        """Load the first config file found, or the defaults if there is none."""
        found = self.get_config_path()
        if found is None:
            logger.debug("No firefly.yaml found, using default settings")
            return FireflyCatalogConfig()
        return self.load_file(found)

    def load_file(self, config_path: Path) -> FireflyCatalogConfig:
        """Parse one config file.

        An unreadable or invalid file is reported and replaced by the
        defaults, so a typo never keeps the sync from starting.
        """
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
            config = FireflyCatalogConfig.model_validate(raw or {})
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return FireflyCatalogConfig()

        logger.info(f"Using config {config_path}")
        return config

    def save(self, config: FireflyCatalogConfig, user_level: bool = False) -> Path:
        """Write config as YAML to the project or user directory."""
        target_dir = self.USER_CONFIG_DIR if user_level else self._project_path
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / self.CONFIG_FILENAME

        text = yaml.safe_dump(
            config.model_dump(mode="json", exclude_none=True),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        target.write_text(text, encoding="utf-8")
        logger.info(f"Saved config to {target}")
        return target


def load_config(project_path: Path | str | None = None) -> FireflyCatalogConfig:
    return ConfigLoader(Path(project_path) if project_path else None).load()


def load_credentials() -> FireflyCredentials:
    """Read the Firefly API keys from the environment.

    Raises:
        AuthenticationError: If either key is missing.
    """
    credentials = FireflyCredentials()
    if not credentials.is_complete:
        logger.error("Firefly access key and secret key are not set")
        raise AuthenticationError("Firefly access key and secret key are not set")
    return credentials
