# src/catalog/records.py
"""
Core data model for catalog records.
A record is created when read from a source catalog, scored once, tier-labeled
once per run and then either selected (as immutable output) or discarded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class BadgeTier(str, Enum):
    """Rarity tiers, declared rarest first."""
    LEGENDARY = "LEGENDARY"
    ELITE = "ELITE"
    PREMIUM = "PREMIUM"
    EXCEPTIONAL = "EXCEPTIONAL"
    STANDARD = "STANDARD"

    @property
    def rank(self) -> int:
        return list(BadgeTier).index(self)


class CatalogSource(str, Enum):
    CURATED = "curated"
    GENERATED = "generated"


class TypeCategory(str, Enum):
    """
    Closed set of object categories tracked by type quotas.
    Anything that is not one of the named categories counts as OTHER.
    """
    STAR = "Star"
    GALAXY = "Galaxy"
    NEBULA = "Nebula"
    BLACK_HOLE = "Black Hole"
    QUASAR = "Quasar"
    EXOPLANET = "Exoplanet"
    STAR_CLUSTER = "Star Cluster"
    OTHER = "other"

    @classmethod
    def from_object_type(cls, object_type: str) -> "TypeCategory":
        """Resolve a free-form object type to its category (OTHER if unknown)."""
        return _CATEGORY_BY_LABEL.get(object_type.strip().lower(), cls.OTHER)


_CATEGORY_BY_LABEL = {category.value.lower(): category for category in TypeCategory}


METRIC_NAMES = ("distance", "mass", "luminosity", "temperature", "discovery")


@dataclass(frozen=True)
class MetricScores:
    """Per-metric scores, each an integer in 0-100."""
    distance: int
    mass: int
    luminosity: int
    temperature: int
    discovery: int

    @property
    def total(self) -> int:
        return self.distance + self.mass + self.luminosity + self.temperature + self.discovery

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in METRIC_NAMES}


@dataclass(frozen=True)
class CatalogRecord:
    """
    One candidate entity of the catalog.

    Raw numeric attributes are optional and stay None when unknown; they are
    never coerced to zero. Derived fields (scores, total_score, badge_tier,
    missing_metrics, low_confidence) are filled by the scoring and tiering
    stages through dataclasses.replace, so every stage hands out new records.
    """
    name: str
    object_type: str
    catalog_source: CatalogSource = CatalogSource.GENERATED

    # Raw attributes
    distance_ly: Optional[float] = None
    mass: Optional[float] = None
    luminosity: Optional[float] = None
    temperature: Optional[float] = None
    magnitude: Optional[float] = None
    absolute_magnitude: Optional[float] = None
    discovery_year: Optional[int] = None

    # Descriptive passthrough
    constellation: Optional[str] = None
    spectral_type: Optional[str] = None
    description: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    # Derived
    scores: Optional[MetricScores] = None
    total_score: int = 0
    badge_tier: Optional[BadgeTier] = None
    missing_metrics: Tuple[str, ...] = ()
    low_confidence: bool = False

    @property
    def name_key(self) -> str:
        """Case-insensitive identity of the record."""
        return self.name.strip().lower()

    @property
    def is_curated(self) -> bool:
        return self.catalog_source == CatalogSource.CURATED

    def to_output_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase output shape with a fixed key order."""
        data: Dict[str, Any] = {
            "name": self.name,
            "objectType": self.object_type,
            "catalogSource": self.catalog_source.value,
            "constellation": self.constellation,
            "spectralType": self.spectral_type,
            "distanceLy": self.distance_ly,
            "mass": self.mass,
            "luminosity": self.luminosity,
            "temperature": self.temperature,
            "magnitude": self.magnitude,
            "absoluteMagnitude": self.absolute_magnitude,
            "discoveryYear": self.discovery_year,
            "description": self.description,
        }
        for key, value in self.extra.items():
            if key not in data:
                data[key] = value
        data["scores"] = self.scores.to_dict() if self.scores else None
        data["totalScore"] = self.total_score
        data["badgeTier"] = self.badge_tier.value if self.badge_tier else None
        data["missingData"] = list(self.missing_metrics)
        data["lowConfidence"] = self.low_confidence
        return data
