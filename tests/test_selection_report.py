"""
Unit tests for selection diagnostics, saved-selection loading and charts.
"""

import json

import pytest

from src.catalog.catalog_loader import CatalogLoadError
from src.catalog.records import BadgeTier
from src.tasks.reporting.selection_report import (
    build_selection_report,
    render_text_report,
    selection_frame,
)
from src.tasks.reporting.selection_visualization import create_selection_plots
from src.utils.data_loader import load_selection_document, load_selection_frame

TIERS = {"LEGENDARY": 20, "ELITE": 80}


@pytest.fixture
def selected(make_record):
    L, E = BadgeTier.LEGENDARY, BadgeTier.ELITE
    return [
        make_record("Sirius", "Star", 480, L, curated=True),
        make_record("M31", "Galaxy", 400, E, curated=True),
        make_record("HD 1", "Star", 300, E),
        make_record("HD 2", "Star", 200, E),
        make_record("Crab Nebula", "Nebula", 100, E, low_confidence=True),
    ]


class TestSelectionReport:
    """Test class for report statistics."""

    def test_counts_and_percentages(self, selected):
        report = build_selection_report(selection_frame(selected), 10, TIERS)

        assert report.actual_count == 5
        assert report.shortfall == 5
        assert report.curated_count == 2
        assert report.low_confidence_count == 1
        assert report.tier_table.loc["LEGENDARY", "count"] == 1
        assert report.tier_table.loc["ELITE", "percent"] == pytest.approx(80.0)
        assert report.tier_table.loc["ELITE", "target_percent"] == 80
        assert list(report.type_table.index) == ["Star", "Galaxy", "Nebula"]

    def test_score_statistics(self, selected):
        stats = build_selection_report(selection_frame(selected), 5, TIERS).score_stats

        assert (stats.min, stats.max) == (100, 480)
        assert stats.mean == pytest.approx(296.0)
        assert stats.median == pytest.approx(300.0)
        # population standard deviation
        assert stats.std == pytest.approx(135.882, abs=1e-3)

    def test_tier_type_breakdown_uses_object_types(self, selected):
        report = build_selection_report(selection_frame(selected), 5, TIERS)
        assert report.tier_type_counts == {
            "LEGENDARY": {"Star": 1},
            "ELITE": {"Star": 2, "Galaxy": 1, "Nebula": 1},
        }

    def test_top_records(self, selected):
        report = build_selection_report(selection_frame(selected), 5, TIERS, top_n=2)
        assert list(report.top_records["name"]) == ["Sirius", "M31"]

    def test_render_text(self, selected):
        text = render_text_report(build_selection_report(selection_frame(selected), 10, TIERS), bar_width=8)

        assert "BALANCED SELECTION REPORT" in text
        assert "Selected: 5 / 10 (5 short)" in text
        # 2 of 4 ELITE records are stars: half of an 8 character bar
        assert f"    {'Star':<20} {2:>6} ####" in text
        assert f"    {'Galaxy':<20} {1:>6} ##" in text

    def test_empty_selection(self):
        report = build_selection_report(selection_frame([]), 10, TIERS)

        assert report.actual_count == 0
        assert report.score_stats is None
        assert report.tier_type_counts == {}
        assert "(no records selected)" in render_text_report(report)


class TestSavedSelection:
    """Test class for reading selection files back."""

    def test_load_frame(self, selected, tmp_path):
        path = tmp_path / "selected.json"
        document = {
            "metadata": {"targetCount": 10, "actualCount": 5},
            "objects": [record.to_output_dict() for record in selected],
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        frame, metadata = load_selection_frame(path)
        report = build_selection_report(frame, metadata["targetCount"], TIERS)

        assert metadata["actualCount"] == 5
        assert len(frame) == 5
        assert report.curated_count == 2
        assert report.tier_table.loc["ELITE", "count"] == 4

    def test_rejects_non_selection_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"name": "X"}]), encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            load_selection_document(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError):
            load_selection_document(tmp_path / "missing.json")


class TestSelectionPlots:
    """Test class for chart output."""

    def test_plots_written(self, selected, tmp_path):
        paths = create_selection_plots(selection_frame(selected), TIERS, tmp_path / "plots")

        assert [p.name for p in paths] == [
            "tier_distribution.png", "score_distribution.png", "tier_type_heatmap.png",
        ]
        assert all(p.exists() and p.stat().st_size > 0 for p in paths)

    def test_empty_frame_skips_plots(self, tmp_path):
        assert create_selection_plots(selection_frame([]), TIERS, tmp_path) == []
