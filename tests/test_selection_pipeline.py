"""
End-to-end tests for the balanced selection pipeline.
"""

import json
import random
from datetime import datetime, timezone

import pytest

from src.catalog.catalog_loader import CatalogLoadError
from src.catalog.records import BadgeTier
from src.shared.settings import NormalizerConfig, SelectionConfig, load_selection_config
from src.tasks.selection.selection_pipeline import BalancedSelectionPipeline, resolve_generated_at

PINNED = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

OBJECT_TYPES = ["Star", "Star", "Star", "Galaxy", "Nebula", "Exoplanet", "Black Hole", "Pulsar"]


@pytest.fixture
def catalog_path(tmp_path):
    rng = random.Random(7)
    objects = []
    for i in range(400):
        entry = {
            "name": f"HIP {1000 + i}",
            "objectType": rng.choice(OBJECT_TYPES),
            "distanceLy": round(10 ** rng.uniform(0.5, 9), 3),
            "temperature": rng.choice([None, rng.randint(2500, 40000)]),
            "magnitude": round(rng.uniform(-1, 15), 2),
        }
        if rng.random() < 0.3:
            entry["luminosity"] = round(10 ** rng.uniform(-3, 5), 4)
        objects.append(entry)
    # Collides with the curated entry and must be dropped
    objects.append({"name": "sirius", "objectType": "Star", "distanceLy": 8.6})

    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"objects": objects}), encoding="utf-8")
    return path


@pytest.fixture
def pipeline():
    return BalancedSelectionPipeline(SelectionConfig(normalizer=NormalizerConfig(reference_year=2025)))


class TestResolveGeneratedAt:
    """Test class for metadata timestamps."""

    def test_pinned_value_wins(self, monkeypatch):
        monkeypatch.setenv("SOURCE_DATE_EPOCH", "0")
        assert resolve_generated_at(PINNED) == "2025-06-01T12:00:00Z"

    def test_naive_datetime_is_utc(self):
        assert resolve_generated_at(datetime(2025, 1, 1)) == "2025-01-01T00:00:00Z"

    def test_source_date_epoch(self, monkeypatch):
        monkeypatch.setenv("SOURCE_DATE_EPOCH", "0")
        assert resolve_generated_at() == "1970-01-01T00:00:00Z"

    def test_current_time_fallback(self, monkeypatch):
        monkeypatch.delenv("SOURCE_DATE_EPOCH", raising=False)
        assert resolve_generated_at().endswith("Z")


class TestSelectionRun:
    """Test class for complete selection runs."""

    def test_writes_document(self, pipeline, catalog_path, tmp_path):
        output = tmp_path / "out" / "selected.json"
        result = pipeline.run(100, catalog_path, output, generated_at=PINNED)

        assert result.output_path == output
        document = json.loads(output.read_text(encoding="utf-8"))
        assert list(document) == ["metadata", "objects"]
        assert list(document["metadata"]) == [
            "generatedAt", "targetCount", "actualCount", "inputFile",
            "tierDistribution", "typeDistribution",
        ]
        metadata = document["metadata"]
        assert metadata["generatedAt"] == "2025-06-01T12:00:00Z"
        assert metadata["targetCount"] == 100
        assert metadata["actualCount"] == len(document["objects"]) <= 100
        assert sum(metadata["tierDistribution"].values()) == metadata["actualCount"]
        assert sum(metadata["typeDistribution"].values()) == metadata["actualCount"]

    def test_selected_records_are_unique_and_labeled(self, pipeline, catalog_path):
        result = pipeline.run(150, catalog_path)
        names = [obj["name"].lower() for obj in result.document["objects"]]

        assert len(names) == len(set(names))
        assert all(obj["badgeTier"] for obj in result.document["objects"])
        assert result.output_path is None

    def test_curated_duplicate_wins(self, pipeline, catalog_path):
        pool = pipeline.load_pool(catalog_path)
        sirius = [record for record in pool if record.name_key == "sirius"]
        assert len(sirius) == 1
        assert sirius[0].is_curated

    def test_curated_descriptions_reach_output(self, pipeline, catalog_path, tmp_path):
        output = tmp_path / "selected.json"
        pipeline.run(100, catalog_path, output, generated_at=PINNED)
        objects = json.loads(output.read_text(encoding="utf-8"))["objects"]

        curated = [obj for obj in objects if obj["catalogSource"] == "curated"]
        assert curated
        for obj in curated:
            assert isinstance(obj["alternateNames"], list)
            assert obj["notableFeatures"]
            assert obj["scientificSignificance"]
        generated = [obj for obj in objects if obj["catalogSource"] == "generated"]
        assert all("notableFeatures" not in obj for obj in generated)

    def test_pinned_runs_are_byte_identical(self, pipeline, catalog_path, tmp_path):
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"
        pipeline.run(120, catalog_path, first, generated_at=PINNED)
        BalancedSelectionPipeline(pipeline.config).run(120, catalog_path, second, generated_at=PINNED)

        assert first.read_bytes() == second.read_bytes()

    def test_dry_run_writes_nothing(self, pipeline, catalog_path, tmp_path):
        output = tmp_path / "selected.json"
        result = pipeline.run(50, catalog_path, output, dry_run=True)

        assert not output.exists()
        assert result.output_path is None
        assert result.selection.actual_count > 0

    def test_malformed_input_aborts_without_output(self, pipeline, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"objects": [{"name": "X"', encoding="utf-8")
        output = tmp_path / "selected.json"

        with pytest.raises(CatalogLoadError):
            pipeline.run(50, bad, output)
        assert not output.exists()

    def test_existing_output_is_replaced(self, pipeline, catalog_path, tmp_path):
        output = tmp_path / "selected.json"
        output.write_text("stale", encoding="utf-8")
        pipeline.run(30, catalog_path, output, generated_at=PINNED)

        assert json.loads(output.read_text(encoding="utf-8"))["metadata"]["targetCount"] == 30
        assert [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")] == []

    def test_pool_smaller_than_target_reports_shortfall(self, pipeline, tmp_path):
        path = tmp_path / "tiny.json"
        path.write_text(json.dumps([{"name": "HD 1", "objectType": "Star"}]), encoding="utf-8")
        result = pipeline.run(5000, path)

        assert result.selection.shortfall > 0
        assert result.report.shortfall == result.selection.shortfall

    def test_invalid_target(self, pipeline, catalog_path):
        with pytest.raises(ValueError):
            pipeline.run(0, catalog_path)


class TestScoreCatalog:
    """Test class for stand-alone catalog scoring."""

    def test_scored_document(self, pipeline, catalog_path):
        document = pipeline.score_catalog(catalog_path, generated_at=PINNED)
        objects = document["objects"]

        assert document["metadata"]["count"] == len(objects) == 401
        scores = [obj["totalScore"] for obj in objects]
        assert scores == sorted(scores, reverse=True)
        assert all(obj["catalogSource"] == "generated" for obj in objects)
        assert sum(document["metadata"]["tierDistribution"].values()) == 401
        assert document["metadata"]["lowConfidenceCount"] == sum(obj["lowConfidence"] for obj in objects)


class TestPackagedConfig:
    """The shipped YAML mirrors the built-in defaults."""

    def test_yaml_matches_defaults(self, repo_root):
        loaded = load_selection_config(repo_root / "configs" / "selection" / "selection.yaml")
        assert loaded.model_dump() == SelectionConfig().model_dump()

    def test_tier_percentages_rarest_first(self):
        config = SelectionConfig(tiers={BadgeTier.STANDARD: 75, BadgeTier.LEGENDARY: 25}, type_quotas={})
        pipeline = BalancedSelectionPipeline(config)
        assert pipeline.tier_percentages == {"LEGENDARY": 25.0, "STANDARD": 75.0}
        assert list(pipeline.tier_percentages) == ["LEGENDARY", "STANDARD"]
