"""Tests for workspace unit resolution."""
import pytest

from botdeploy.core.errors import UnitNotFound, ValidationError
from botdeploy.services.resolver import (
    DEFAULT_CONFIG_FILES,
    TargetResolver,
    config_files_for,
)


class TestConfigFileTable:
    """Test the unit -> config files lookup."""

    def test_cleanup_bot_ships_env_and_config(self):
        assert config_files_for("cleanup-bot") == (".env", "config.toml")

    def test_summarizer_bot_ships_env_only(self):
        assert config_files_for("summarizer-bot") == (".env",)

    def test_unknown_unit_gets_default(self):
        assert config_files_for("brand-new-bot") == DEFAULT_CONFIG_FILES == (".env",)

    def test_override_wins(self):
        """Workspace overrides replace the built-in entry."""
        overrides = {"cleanup-bot": ("settings.json",)}
        assert config_files_for("cleanup-bot", overrides) == ("settings.json",)


class TestTargetResolver:
    """Test TargetResolver.resolve and available_units."""

    def test_resolve_existing_unit(self, workspace):
        resolver = TargetResolver(workspace)
        unit = resolver.resolve("cleanup-bot")

        assert unit.name == "cleanup-bot"
        assert unit.config_files == (".env", "config.toml")
        assert unit.target == "aarch64-unknown-linux-gnu"
        assert unit.source_dir == workspace / "cleanup-bot"
        assert unit.binary_path == (
            workspace / "target" / "aarch64-unknown-linux-gnu" / "release" / "cleanup-bot"
        )

    def test_resolve_uses_overrides_and_target(self, workspace):
        resolver = TargetResolver(
            workspace,
            units={"sample-bot": (".env", "config.toml")},
            target="x86_64-unknown-linux-gnu",
        )
        unit = resolver.resolve("sample-bot")

        assert unit.config_files == (".env", "config.toml")
        assert unit.binary_path.parts[-3] == "x86_64-unknown-linux-gnu"

    def test_missing_unit_lists_siblings(self, workspace):
        """Unknown units fail with the available units as hints."""
        resolver = TargetResolver(workspace)

        with pytest.raises(UnitNotFound) as exc_info:
            resolver.resolve("ghost-bot")

        error = exc_info.value
        assert isinstance(error, ValidationError)
        assert error.name == "ghost-bot"
        assert error.available == ["cleanup-bot", "sample-bot", "shared"]
        assert "ghost-bot" in str(error)

    @pytest.mark.parametrize("name", ["", ".", "..", "sample-bot/../shared", "Cargo.toml"])
    def test_rejects_non_directory_names(self, workspace, name):
        with pytest.raises(UnitNotFound):
            TargetResolver(workspace).resolve(name)

    def test_available_units_skips_non_units(self, workspace):
        """docs/ and target/ have no manifest and no -bot suffix."""
        (workspace / "legacy-bot").mkdir()
        (workspace / ".git").mkdir()

        names = TargetResolver(workspace).available_units()

        assert names == ["cleanup-bot", "legacy-bot", "sample-bot", "shared"]
        assert "docs" not in names
        assert "target" not in names

    def test_available_units_missing_workspace(self, tmp_path):
        assert TargetResolver(tmp_path / "nope").available_units() == []
