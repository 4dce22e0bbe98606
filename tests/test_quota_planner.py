"""
Unit tests for quota planning.
"""

import pytest

from src.catalog.records import BadgeTier, TypeCategory
from src.shared.settings import SelectionConfig
from src.tasks.selection.quota_planner import QuotaPlanner


class TestQuotaPlanner:
    """Test class for tier and type quota derivation."""

    @pytest.fixture
    def planner(self):
        config = SelectionConfig()
        return QuotaPlanner(config.tiers, config.type_quotas)

    def test_default_plan_for_20000(self, planner):
        plan = planner.plan(20000)

        assert plan.tier_quotas == {
            BadgeTier.LEGENDARY: 200,
            BadgeTier.ELITE: 600,
            BadgeTier.PREMIUM: 1200,
            BadgeTier.EXCEPTIONAL: 3000,
            BadgeTier.STANDARD: 15000,
        }
        assert plan.type_quotas[BadgeTier.LEGENDARY] == {
            TypeCategory.STAR: 100,
            TypeCategory.BLACK_HOLE: 25,
            TypeCategory.NEBULA: 30,
            TypeCategory.GALAXY: 25,
            TypeCategory.QUASAR: 10,
            TypeCategory.OTHER: 10,
        }
        assert plan.drift == 0

    def test_scaled_type_quotas(self, planner):
        plan = planner.plan(20000)
        # 1200 * 600 / 1200 etc.
        assert plan.type_quotas[BadgeTier.PREMIUM][TypeCategory.STAR] == 600
        # 600 * 40 / 600
        assert plan.type_quotas[BadgeTier.ELITE][TypeCategory.EXOPLANET] == 40

    def test_rounding_drift_is_accepted(self, planner):
        plan = planner.plan(10)
        # 0.1, 0.3, 0.6, 1.5, 7.5 rounded half up
        assert list(plan.tier_quotas.values()) == [0, 0, 1, 2, 8]
        assert plan.total_planned == 11
        assert plan.drift == 1

    def test_category_resolution(self, planner):
        plan = planner.plan(1000)
        assert plan.category_for(BadgeTier.LEGENDARY, "Star") == TypeCategory.STAR
        assert plan.category_for(BadgeTier.LEGENDARY, "Magnetar") == TypeCategory.OTHER
        # Exoplanets have no LEGENDARY entry but do have an ELITE one
        assert plan.category_for(BadgeTier.LEGENDARY, "Exoplanet") == TypeCategory.OTHER
        assert plan.category_for(BadgeTier.ELITE, "Exoplanet") == TypeCategory.EXOPLANET

    def test_tier_without_type_table(self):
        planner = QuotaPlanner({BadgeTier.LEGENDARY: 50, BadgeTier.ELITE: 50},
                               {BadgeTier.LEGENDARY: {TypeCategory.STAR: 3, TypeCategory.GALAXY: 2}})
        plan = planner.plan(10)
        assert plan.tier_quotas == {BadgeTier.LEGENDARY: 5, BadgeTier.ELITE: 5}
        assert plan.type_quotas == {BadgeTier.LEGENDARY: {TypeCategory.STAR: 3, TypeCategory.GALAXY: 2}}
        assert not plan.is_tracked(BadgeTier.ELITE, TypeCategory.STAR)

    def test_non_positive_target_rejected(self, planner):
        with pytest.raises(ValueError):
            planner.plan(0)
