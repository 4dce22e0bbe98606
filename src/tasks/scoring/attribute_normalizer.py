# src/tasks/scoring/attribute_normalizer.py
"""
Attribute normalizer for catalog scoring.
Maps optional raw physical attributes into bounded 0-100 metric scores using
logarithmic scaling, with a neutral default for anything missing.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from src.catalog.records import CatalogRecord, MetricScores, METRIC_NAMES
from src.shared.numeric import clamp, round_half_up
from src.shared.settings import NormalizerConfig

logger = logging.getLogger(__name__)


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def normalize(value: Optional[float], min_value: float, max_value: float,
              default: float = 50) -> float:
    """
    Log-scale a positive value into 0-100.

    Args:
        value: Raw value; None, NaN and non-positive values are treated as missing
        min_value: Value mapped to 0
        max_value: Value mapped to 100
        default: Score returned for missing values or a degenerate range

    Returns:
        Score in [0, 100]
    """
    if _is_missing(value) or value <= 0:
        return default

    log_min = math.log10(min_value)
    log_max = math.log10(max_value)
    if log_max == log_min:
        return default

    clamped = clamp(value, min_value, max_value)
    score = (math.log10(clamped) - log_min) / (log_max - log_min) * 100
    return clamp(score, 0.0, 100.0)


@dataclass(frozen=True)
class NormalizationResult:
    """Container for the metric scores of one record."""
    scores: MetricScores
    missing_metrics: List[str]
    low_confidence: bool


class AttributeNormalizer:
    """
    Scores the five metrics of a catalog record.

    Each metric scorer returns None when the record has no usable data for it;
    score_record is the only place where the default score is substituted.
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        """Initialize the normalizer with metric ranges and bonuses."""
        self.config = config or NormalizerConfig()
        self.default_score = self.config.default_score
        self.reference_year = self.config.reference_year or datetime.now().year
        self._multipliers = {
            name.strip().lower(): value for name, value in self.config.type_multipliers.items()
        }

    def _range_score(self, metric: str, value: float) -> float:
        metric_range = self.config.ranges[metric]
        return normalize(value, metric_range.min, metric_range.max, self.default_score)

    def score_distance(self, distance_ly: Optional[float]) -> Optional[float]:
        """Nearby objects score high, the far edge of the observable universe scores higher."""
        if _is_missing(distance_ly) or distance_ly <= 0:
            return None
        rules = self.config.distance
        if distance_ly < rules.near_threshold:
            return rules.near_ceiling - (distance_ly / rules.near_threshold) * rules.near_span
        if distance_ly > rules.far_threshold:
            excess = (distance_ly - rules.far_threshold) / rules.far_threshold * rules.far_bonus_cap
            return rules.far_floor + min(rules.far_bonus_cap, excess)
        return self._range_score("distance", distance_ly)

    def score_mass(self, mass: Optional[float]) -> Optional[float]:
        if _is_missing(mass) or mass <= 0:
            return None
        rules = self.config.mass
        score = self._range_score("mass", mass)
        if mass > rules.supermassive_threshold:
            score += rules.supermassive_bonus
        if mass < rules.substellar_threshold:
            score += rules.substellar_bonus
        return min(100.0, score)

    def score_luminosity(self, luminosity: Optional[float],
                         magnitude: Optional[float] = None) -> Optional[float]:
        """Luminosity on a log scale; apparent magnitude stands in when luminosity is unknown."""
        if not _is_missing(luminosity) and luminosity > 0:
            return self._range_score("luminosity", luminosity)
        if not _is_missing(magnitude):
            fallback = self.config.magnitude_fallback
            # brighter objects have lower magnitudes
            return clamp(100 - ((magnitude + fallback.offset) / fallback.span) * 100, 0.0, 100.0)
        return None

    def score_temperature(self, temperature: Optional[float]) -> Optional[float]:
        if _is_missing(temperature) or temperature <= 0:
            return None
        rules = self.config.temperature
        score = self._range_score("temperature", temperature)
        if temperature > rules.hot_threshold:
            score += rules.hot_bonus
        if temperature < rules.cold_threshold:
            score += rules.cold_bonus
        return min(100.0, score)

    def score_discovery(self, discovery_year: Optional[int]) -> Optional[float]:
        """Bucket the discovery year into historical eras."""
        if _is_missing(discovery_year):
            return None
        for era in self.config.discovery_eras:
            if discovery_year < era.before:
                return era.score
        if discovery_year > self.reference_year - self.config.recent_window_years:
            return self.config.recent_score
        return self.config.modern_score

    def type_multiplier(self, object_type: str) -> float:
        """Multiplier for an object type, matched case-insensitively like type categories."""
        return self._multipliers.get(object_type.strip().lower(), 1.0)

    def score_record(self, record: CatalogRecord) -> NormalizationResult:
        """
        Score all metrics of a record.

        Args:
            record: Catalog record with optional raw attributes

        Returns:
            NormalizationResult with integer metric scores and missing-data flags
        """
        raw = {
            "distance": self.score_distance(record.distance_ly),
            "mass": self.score_mass(record.mass),
            "luminosity": self.score_luminosity(record.luminosity, record.magnitude),
            "temperature": self.score_temperature(record.temperature),
            "discovery": self.score_discovery(record.discovery_year),
        }

        multiplier = self.type_multiplier(record.object_type)
        missing = []
        final = {}
        for metric in METRIC_NAMES:
            score = raw[metric]
            if score is None:
                missing.append(metric)
                score = self.default_score
            final[metric] = round_half_up(min(100.0, score * multiplier))

        low_confidence = len(missing) >= self.config.low_confidence_min_missing
        if low_confidence:
            logger.debug(f"Low confidence score for '{record.name}': missing {missing}")

        return NormalizationResult(
            scores=MetricScores(**final),
            missing_metrics=missing,
            low_confidence=low_confidence,
        )
