"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (YAML, env vars, defaults)
- Easy to test with different configurations
"""

import os
from pathlib import Path
from typing import Optional
import yaml

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from tracker.domain.models import UserPreferences


def default_app_dir(app_name: str, posix_base: Path, platform: str = os.name) -> Path:
    """Per-user directory for the app: under %APPDATA% on Windows, posix_base elsewhere"""
    if platform == 'nt':
        appdata = os.getenv('APPDATA')
        base = Path(appdata) if appdata else Path.home()
    else:
        base = posix_base
    return base / app_name.lower()


class Settings(BaseSettings):
    """
    Application settings with multiple sources:
    1. Default values (hardcoded)
    2. YAML config file
    3. Environment variables (highest priority)
    """
    model_config = SettingsConfigDict(
        env_prefix='PRODTRACKER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Application paths
    app_name: str = "ProductivityTracker"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None
    data_file: str = "productivity-tracker-data.json"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # User preferences
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        self._load_yaml_config()

    def _init_paths(self):
        """Fill in per-user config and data directories and create them"""
        if self.config_dir is None:
            self.config_dir = default_app_dir(self.app_name, Path.home() / '.config')
        if self.data_dir is None:
            self.data_dir = default_app_dir(self.app_name, Path.home() / '.local' / 'share')

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _load_yaml_config(self):
        """Preferences from config/settings.yaml in the working directory, else the config dir"""
        candidates = [Path("config") / "settings.yaml", self.config_dir / "settings.yaml"]
        config_file = next((path for path in candidates if path.exists()), None)
        if config_file is None:
            return

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)
        if config_data:
            self.preferences = UserPreferences(**config_data)

    def save_preferences(self):
        """Save current preferences to YAML file"""
        config_file = self.config_dir / "settings.yaml"
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(self.preferences.model_dump(), f, default_flow_style=False)

    def get_data_path(self) -> Path:
        """Path of the snapshot file"""
        return self.data_dir / self.data_file

    def get_log_path(self) -> Path:
        if self.log_file:
            return self.log_file
        return self.data_dir / "logs" / "tracker.log"

    def get_export_dir(self) -> Path:
        if self.preferences.export_directory:
            return Path(self.preferences.export_directory)
        return Path.home()


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
