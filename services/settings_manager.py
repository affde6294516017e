"""
Settings Manager.

Handles application settings with JSON file storage.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class CanvasSettings:
    """Canvas appearance and interaction settings."""
    show_grid: bool = True
    grid_size: int = 12
    min_zoom: float = 0.1
    max_zoom: float = 5.0
    zoom_step: float = 1.15
    node_width: float = 150.0
    node_height: float = 44.0
    show_minimap: bool = False


@dataclass
class PathSettings:
    """
    Workspace and file path settings.

    Supports multiple workspace configurations:
    - default: Normal user workspace
    - test: Automated testing workspace
    - custom: User-defined workspace
    """
    # Active workspace profile
    active_profile: str = "default"

    # Workspace profiles - maps profile name to base directory
    # If empty, uses platform-specific default
    workspaces: Dict[str, str] = field(default_factory=dict)

    # Subdirectory holding one JSON record per automation
    automations_subdir: str = "automations"

    # Automation opened last, reopened on startup
    last_automation_id: str = ""

    def get_workspace_root(self, profile: Optional[str] = None) -> Path:
        """
        Get the root directory for a workspace profile.

        Args:
            profile: Profile name, or None to use active profile

        Returns:
            Path to workspace root directory
        """
        profile = profile or self.active_profile

        if profile in self.workspaces and self.workspaces[profile]:
            return Path(self.workspaces[profile])

        return self._get_default_workspace()

    def _get_default_workspace(self) -> Path:
        """Get platform-specific default workspace directory."""
        import platform
        system = platform.system()

        if system == "Windows":
            docs = Path(os.environ.get("USERPROFILE", "~")) / "Documents"
            return docs.expanduser() / "AutomationCanvas"
        elif system == "Darwin":  # macOS
            return Path.home() / "Documents" / "AutomationCanvas"
        else:  # Linux and others
            return Path.home() / "automation-canvas"

    def get_automations_dir(self, profile: Optional[str] = None) -> Path:
        """Get the automations directory for a profile."""
        return self.get_workspace_root(profile) / self.automations_subdir

    def ensure_workspace_dirs(self, profile: Optional[str] = None):
        """Create workspace directories if they don't exist."""
        self.get_automations_dir(profile).mkdir(parents=True, exist_ok=True)


@dataclass
class AppSettings:
    """Complete application settings."""
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    recent_automations: list = field(default_factory=list)
    recent_max: int = 10
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "canvas": asdict(self.canvas),
            "paths": asdict(self.paths),
            "recent_automations": self.recent_automations,
            "recent_max": self.recent_max,
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary. Unknown keys are ignored."""
        settings = cls()

        if isinstance(data.get("canvas"), dict):
            settings.canvas = CanvasSettings(**_known_fields(CanvasSettings, data["canvas"]))
        if isinstance(data.get("paths"), dict):
            settings.paths = PathSettings(**_known_fields(PathSettings, data["paths"]))
        if isinstance(data.get("recent_automations"), list):
            settings.recent_automations = data["recent_automations"]
        if isinstance(data.get("recent_max"), int):
            settings.recent_max = data["recent_max"]
        if isinstance(data.get("window_geometry"), dict):
            settings.window_geometry = data["window_geometry"]

        return settings


def _known_fields(cls, data: dict) -> dict:
    names = set(cls.__dataclass_fields__)
    return {k: v for k, v in data.items() if k in names}


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/AutomationCanvas/settings.json
    - Linux: ~/.config/AutomationCanvas/settings.json
    - macOS: ~/Library/Application Support/AutomationCanvas/settings.json
    """

    APP_NAME = "AutomationCanvas"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def canvas(self) -> CanvasSettings:
        return self._settings.canvas

    @property
    def paths(self) -> PathSettings:
        """Get path settings."""
        return self._settings.paths

    @property
    def last_automation_id(self) -> str:
        return self._settings.paths.last_automation_id

    @last_automation_id.setter
    def last_automation_id(self, value: str):
        self._settings.paths.last_automation_id = value
        self.save()

    def get_automations_dir(self) -> Path:
        """Get the active automations directory."""
        return self._settings.paths.get_automations_dir()

    def set_workspace_profile(self, profile: str):
        """Set the active workspace profile."""
        self._settings.paths.active_profile = profile
        self.save()

    def set_workspace_path(self, profile: str, path: str):
        """Set the path for a workspace profile."""
        self._settings.paths.workspaces[profile] = path
        self.save()

    def ensure_workspace(self):
        """Ensure workspace directories exist for active profile."""
        self._settings.paths.ensure_workspace_dirs()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file does not hold an object")
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def add_recent_automation(self, automation_id: str):
        """Add an automation to the recent list."""
        if automation_id in self._settings.recent_automations:
            self._settings.recent_automations.remove(automation_id)

        self._settings.recent_automations.insert(0, automation_id)
        self._settings.recent_automations = self._settings.recent_automations[:self._settings.recent_max]

        self.save()

    def get_recent_automations(self) -> list:
        return list(self._settings.recent_automations)

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        import base64
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        import base64
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except (ValueError, TypeError):
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
