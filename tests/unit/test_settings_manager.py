"""
Unit tests for the JSON settings manager.

Tests:
- Defaults and file creation
- Load / save round trip
- Tolerance of unknown keys and corrupt files
- Workspace profiles and recent automations
"""

import json

import pytest

from services import (
    SettingsManager, AppSettings, CanvasSettings, PathSettings,
    get_settings, reset_settings_manager
)


@pytest.fixture
def settings_file(temp_dir):
    return temp_dir / "config" / "settings.json"


@pytest.fixture
def manager(settings_file):
    return SettingsManager(config_override=str(settings_file))


class TestDefaults:
    """Tests for default settings values."""

    def test_canvas_defaults(self):
        canvas = CanvasSettings()
        assert canvas.show_grid is True
        assert canvas.min_zoom < 1.0 < canvas.max_zoom
        assert canvas.zoom_step > 1.0
        assert canvas.node_width > 0 and canvas.node_height > 0

    def test_path_defaults(self):
        paths = PathSettings()
        assert paths.active_profile == "default"
        assert paths.automations_subdir == "automations"
        assert paths.last_automation_id == ""

    def test_missing_file_keeps_defaults(self, manager, settings_file):
        """Test that a missing settings file is not an error."""
        assert not settings_file.exists()
        assert manager.load() is False
        assert manager.canvas == CanvasSettings()
        assert settings_file.parent.exists()


class TestPersistence:
    """Tests for saving and loading settings."""

    def test_save_and_reload(self, manager, settings_file):
        """Test that saved values survive a new manager instance."""
        manager.canvas.grid_size = 24
        manager.canvas.show_grid = False
        assert manager.save() is True

        reloaded = SettingsManager(config_override=str(settings_file))
        assert reloaded.canvas.grid_size == 24
        assert reloaded.canvas.show_grid is False

    def test_show_minimap_round_trip(self, manager, settings_file):
        assert manager.canvas.show_minimap is False
        manager.canvas.show_minimap = True
        manager.save()

        reloaded = SettingsManager(config_override=str(settings_file))
        assert reloaded.canvas.show_minimap is True
        assert json.loads(settings_file.read_text())["canvas"]["show_minimap"] is True

    def test_unknown_keys_ignored(self, settings_file):
        """Test that settings written by another version still load."""
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(json.dumps({
            "canvas": {"grid_size": 16, "shiny_new_option": True},
            "paths": {"automations_subdir": "flows", "legacy": 1},
            "plugins": {"enabled": []},
        }))

        manager = SettingsManager(config_override=str(settings_file))
        assert manager.canvas.grid_size == 16
        assert manager.paths.automations_subdir == "flows"

    def test_corrupt_file_falls_back_to_defaults(self, settings_file):
        """Test that a broken settings file does not stop startup."""
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{ not json")

        manager = SettingsManager(config_override=str(settings_file))
        assert manager.canvas == CanvasSettings()

    def test_non_object_file(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("[1, 2, 3]")
        manager = SettingsManager(config_override=str(settings_file))
        assert manager.load() is False

    def test_reset(self, manager, settings_file):
        manager.canvas.grid_size = 99
        manager.reset()
        assert manager.canvas.grid_size == CanvasSettings().grid_size
        assert json.loads(settings_file.read_text())["canvas"]["grid_size"] == CanvasSettings().grid_size

    def test_app_settings_round_trip(self):
        settings = AppSettings()
        settings.recent_automations = ["a", "b"]
        settings.paths.workspaces["test"] = "/tmp/ws"
        restored = AppSettings.from_dict(settings.to_dict())
        assert restored.recent_automations == ["a", "b"]
        assert restored.paths.workspaces == {"test": "/tmp/ws"}


class TestWorkspace:
    """Tests for workspace profiles."""

    def test_custom_profile_path(self, manager, temp_dir):
        """Test that a configured profile directory is used."""
        manager.set_workspace_path("test", str(temp_dir / "ws"))
        manager.set_workspace_profile("test")
        assert manager.get_automations_dir() == temp_dir / "ws" / "automations"

    def test_ensure_workspace_creates_dirs(self, manager, temp_dir):
        manager.set_workspace_path("test", str(temp_dir / "ws"))
        manager.set_workspace_profile("test")
        manager.ensure_workspace()
        assert (temp_dir / "ws" / "automations").is_dir()

    def test_unknown_profile_uses_default(self, manager):
        paths = manager.paths
        assert paths.get_workspace_root("nope") == paths.get_workspace_root("default")

    def test_last_automation_id_persisted(self, manager, settings_file):
        manager.last_automation_id = "abc"
        reloaded = SettingsManager(config_override=str(settings_file))
        assert reloaded.last_automation_id == "abc"


class TestRecentAutomations:
    """Tests for the recent automations list."""

    def test_most_recent_first(self, manager):
        manager.add_recent_automation("a")
        manager.add_recent_automation("b")
        manager.add_recent_automation("a")
        assert manager.get_recent_automations() == ["a", "b"]

    def test_capped(self, manager):
        manager.settings.recent_max = 3
        for i in range(5):
            manager.add_recent_automation(str(i))
        assert manager.get_recent_automations() == ["4", "3", "2"]


class TestWindowGeometry:
    """Tests for window geometry storage."""

    def test_round_trip(self, manager):
        manager.save_window_geometry(b"\x01\x02geo", b"\x00state")
        assert manager.get_window_geometry() == (b"\x01\x02geo", b"\x00state")

    def test_empty(self, manager):
        assert manager.get_window_geometry() == (None, None)


class TestGlobalSettings:
    """Tests for the global settings accessor."""

    def test_singleton_and_reset(self, settings_file):
        reset_settings_manager()
        try:
            first = get_settings(str(settings_file))
            assert get_settings() is first
            reset_settings_manager()
            assert get_settings(str(settings_file)) is not first
        finally:
            reset_settings_manager()
