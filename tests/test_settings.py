"""
Unit tests for configuration loading and run settings.
"""

import pytest

from src.catalog.records import BadgeTier, TypeCategory
from src.shared.settings import (
    SelectionConfig,
    SelectionConfigError,
    SelectionSettings,
    load_selection_config,
)


def _write(tmp_path, text):
    path = tmp_path / "selection.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadSelectionConfig:
    """Test class for YAML configuration loading."""

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = _write(tmp_path, "scoring:\n  curated_bonus: 50\n")
        config = load_selection_config(path)

        assert config.scoring.curated_bonus == 50
        assert config.scoring.max_total_score == 500
        assert config.tiers == SelectionConfig().tiers

    def test_tiers_sorted_rarest_first(self, tmp_path):
        path = _write(tmp_path, "tiers:\n  STANDARD: 60\n  LEGENDARY: 40\ntype_quotas: {}\n")
        config = load_selection_config(path)
        assert config.tier_order == [BadgeTier.LEGENDARY, BadgeTier.STANDARD]

    def test_type_quota_keys_parsed(self, tmp_path):
        path = _write(tmp_path, (
            "tiers:\n  LEGENDARY: 100\n"
            "type_quotas:\n  LEGENDARY:\n    Star: 3\n    Star Cluster: 1\n    other: 1\n"
        ))
        config = load_selection_config(path)
        assert config.type_quotas[BadgeTier.LEGENDARY] == {
            TypeCategory.STAR: 3, TypeCategory.STAR_CLUSTER: 1, TypeCategory.OTHER: 1,
        }

    @pytest.mark.parametrize("text", [
        "tiers:\n  LEGENDARY: 60\n  ELITE: 60\ntype_quotas: {}\n",
        "tiers:\n  LEGENDARY: -1\n  ELITE: 50\ntype_quotas: {}\n",
        "tiers:\n  MYTHIC: 10\n",
        "tiers:\n  LEGENDARY: 100\ntype_quotas:\n  ELITE:\n    Star: 1\n",
        "type_quotas:\n  LEGENDARY:\n    Comet: 1\n",
        "normalizer:\n  ranges:\n    distance: {min: 10, max: 1}\n",
        "normalizer:\n  default_score: 150\n",
        "scoring:\n  max_total_score: 0\n",
    ])
    def test_invalid_values_rejected(self, tmp_path, text):
        with pytest.raises(SelectionConfigError):
            load_selection_config(_write(tmp_path, text))

    def test_missing_file(self, tmp_path):
        with pytest.raises(SelectionConfigError, match="not found"):
            load_selection_config(tmp_path / "missing.yaml")

    def test_unparseable_yaml(self, tmp_path):
        with pytest.raises(SelectionConfigError):
            load_selection_config(_write(tmp_path, "tiers: [unclosed\n"))


class TestSelectionSettings:
    """Test class for environment-driven run settings."""

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = SelectionSettings()

        assert settings.target_count == 20000
        assert settings.input_path == "staging/hyg-scored.json"
        assert settings.output_path == "staging/selected-nfts.json"
        assert settings.generated_at is None

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SELECTION_TARGET_COUNT", "500")
        monkeypatch.setenv("SELECTION_GENERATED_AT", "2025-01-01T00:00:00Z")
        settings = SelectionSettings()

        assert settings.target_count == 500
        assert settings.generated_at.year == 2025

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("SELECTION_INPUT_PATH=data/catalog.json\n", encoding="utf-8")
        assert SelectionSettings().input_path == "data/catalog.json"

    def test_non_positive_target_rejected(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SELECTION_TARGET_COUNT", "0")
        with pytest.raises(ValueError):
            SelectionSettings()

    def test_load_config_uses_config_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = _write(tmp_path, "tiers:\n  STANDARD: 70\n  ELITE: 30\ntype_quotas: {}\n")
        monkeypatch.setenv("SELECTION_CONFIG_PATH", str(path))
        config = SelectionSettings().load_config()

        assert config.tier_order == [BadgeTier.ELITE, BadgeTier.STANDARD]
        assert config.tiers[BadgeTier.STANDARD] == 70

    def test_load_config_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = SelectionSettings(config_path=str(tmp_path / "missing.yaml"))
        with pytest.raises(SelectionConfigError, match="not found"):
            settings.load_config()
