# src/shared/settings.py
"""
Configuration for scoring, tiering and balanced selection.
Run options come from the environment (SELECTION_* variables or a .env file);
the scoring and quota tables are loaded from YAML with OmegaConf and
validated with pydantic.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.catalog.records import BadgeTier, TypeCategory

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/selection/selection.yaml"


class SelectionConfigError(Exception):
    """Raised when the selection configuration is missing or invalid."""


class MetricRange(BaseModel):
    """Log-scale span of a physical metric."""
    min: float = Field(gt=0)
    max: float = Field(gt=0)

    @model_validator(mode="after")
    def check_order(self):
        if self.max < self.min:
            raise ValueError(f"range max ({self.max}) is below min ({self.min})")
        return self


def _default_ranges() -> Dict[str, MetricRange]:
    return {
        "distance": MetricRange(min=100, max=1e9),
        "mass": MetricRange(min=1e-5, max=1e11),
        "luminosity": MetricRange(min=1e-5, max=1e13),
        "temperature": MetricRange(min=3, max=1e9),
    }


class DistanceRules(BaseModel):
    near_threshold: float = Field(default=100, gt=0)
    near_ceiling: float = 90
    near_span: float = 40
    far_threshold: float = Field(default=1e9, gt=0)
    far_floor: float = 80
    far_bonus_cap: float = 20


class MassRules(BaseModel):
    supermassive_threshold: float = 1e6
    supermassive_bonus: float = 15
    substellar_threshold: float = 0.001
    substellar_bonus: float = 10


class TemperatureRules(BaseModel):
    hot_threshold: float = 1e5
    hot_bonus: float = 10
    cold_threshold: float = 100
    cold_bonus: float = 10


class MagnitudeFallback(BaseModel):
    offset: float = 5
    span: float = Field(default=35, gt=0)


class DiscoveryEra(BaseModel):
    before: int
    score: float = Field(ge=0, le=100)


def _default_eras() -> List[DiscoveryEra]:
    return [
        DiscoveryEra(before=1600, score=95),
        DiscoveryEra(before=1800, score=85),
        DiscoveryEra(before=1900, score=70),
        DiscoveryEra(before=1960, score=55),
        DiscoveryEra(before=2000, score=45),
    ]


def _default_multipliers() -> Dict[str, float]:
    return {
        "Black Hole": 1.15,
        "Quasar": 1.15,
        "Magnetar": 1.12,
        "Pulsar": 1.10,
        "Neutron Star": 1.10,
        "Supernova Remnant": 1.08,
        "Exoplanet": 1.05,
        "Galaxy": 1.03,
        "Nebula": 1.02,
    }


class NormalizerConfig(BaseModel):
    """Settings of the per-metric 0-100 normalization."""
    default_score: float = Field(default=50, ge=0, le=100)
    reference_year: Optional[int] = None
    ranges: Dict[str, MetricRange] = Field(default_factory=_default_ranges)
    distance: DistanceRules = Field(default_factory=DistanceRules)
    mass: MassRules = Field(default_factory=MassRules)
    temperature: TemperatureRules = Field(default_factory=TemperatureRules)
    magnitude_fallback: MagnitudeFallback = Field(default_factory=MagnitudeFallback)
    discovery_eras: List[DiscoveryEra] = Field(default_factory=_default_eras)
    recent_window_years: int = Field(default=5, ge=0)
    recent_score: float = Field(default=80, ge=0, le=100)
    modern_score: float = Field(default=40, ge=0, le=100)
    low_confidence_min_missing: int = Field(default=3, ge=1)
    type_multipliers: Dict[str, float] = Field(default_factory=_default_multipliers)

    @field_validator("ranges")
    @classmethod
    def validate_ranges(cls, v):
        """All four log-scaled metrics need a range."""
        missing = [name for name in ("distance", "mass", "luminosity", "temperature") if name not in v]
        if missing:
            raise ValueError(f"missing metric ranges: {missing}")
        return v

    @field_validator("discovery_eras")
    @classmethod
    def sort_eras(cls, v):
        return sorted(v, key=lambda era: era.before)

    @field_validator("type_multipliers")
    @classmethod
    def validate_multipliers(cls, v):
        negative = [name for name, value in v.items() if value < 0]
        if negative:
            raise ValueError(f"negative type multipliers: {negative}")
        return v


class ScoringConfig(BaseModel):
    curated_bonus: int = Field(default=100, ge=0)
    max_total_score: int = Field(default=500, gt=0)


class ReportConfig(BaseModel):
    top_n: int = Field(default=10, ge=0)
    bar_width: int = Field(default=30, gt=0)


def _default_tiers() -> Dict[BadgeTier, float]:
    return {
        BadgeTier.LEGENDARY: 1,
        BadgeTier.ELITE: 3,
        BadgeTier.PREMIUM: 6,
        BadgeTier.EXCEPTIONAL: 15,
        BadgeTier.STANDARD: 75,
    }


def _default_type_quotas() -> Dict[BadgeTier, Dict[TypeCategory, float]]:
    star, galaxy, nebula = TypeCategory.STAR, TypeCategory.GALAXY, TypeCategory.NEBULA
    black_hole, quasar = TypeCategory.BLACK_HOLE, TypeCategory.QUASAR
    exoplanet, cluster, other = TypeCategory.EXOPLANET, TypeCategory.STAR_CLUSTER, TypeCategory.OTHER
    return {
        BadgeTier.LEGENDARY: {star: 100, black_hole: 25, nebula: 30, galaxy: 25, quasar: 10, other: 10},
        BadgeTier.ELITE: {star: 300, galaxy: 100, nebula: 80, black_hole: 40, exoplanet: 40, other: 40},
        BadgeTier.PREMIUM: {star: 600, galaxy: 200, nebula: 150, exoplanet: 100, cluster: 50, other: 100},
        BadgeTier.EXCEPTIONAL: {star: 1500, galaxy: 500, nebula: 400, exoplanet: 300, cluster: 100, other: 200},
        BadgeTier.STANDARD: {star: 10000, galaxy: 1500, nebula: 1000, exoplanet: 1000, cluster: 500, other: 1000},
    }


class SelectionConfig(BaseModel):
    """Complete scoring, tiering and quota configuration."""
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    tiers: Dict[BadgeTier, float] = Field(default_factory=_default_tiers)
    type_quotas: Dict[BadgeTier, Dict[TypeCategory, float]] = Field(default_factory=_default_type_quotas)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @field_validator("tiers")
    @classmethod
    def validate_tiers(cls, v):
        """Tier shares are non-negative, total at most 100 and are kept rarest first."""
        if not v:
            raise ValueError("at least one tier is required")
        negative = [tier.value for tier, pct in v.items() if pct < 0]
        if negative:
            raise ValueError(f"negative tier percentages: {negative}")
        total = sum(v.values())
        if total <= 0 or total > 100 + 1e-9:
            raise ValueError(f"tier percentages must sum to a value in (0, 100], got {total}")
        return {tier: v[tier] for tier in sorted(v, key=lambda t: t.rank)}

    @field_validator("type_quotas")
    @classmethod
    def validate_type_quotas(cls, v):
        for tier, table in v.items():
            negative = [category.value for category, base in table.items() if base < 0]
            if negative:
                raise ValueError(f"negative type quotas in {tier.value}: {negative}")
        return v

    @model_validator(mode="after")
    def check_quota_tiers(self):
        unknown = [tier.value for tier in self.type_quotas if tier not in self.tiers]
        if unknown:
            raise ValueError(f"type quotas given for tiers without a percentage: {unknown}")
        return self

    @property
    def tier_order(self) -> List[BadgeTier]:
        return list(self.tiers)


def load_selection_config(config_path: Optional[Union[str, Path]] = None) -> SelectionConfig:
    """
    Load and validate the selection configuration from YAML.

    Args:
        config_path: Path to the YAML file (defaults to configs/selection/selection.yaml)

    Returns:
        Validated SelectionConfig

    Raises:
        SelectionConfigError: If the file is missing or fails validation
    """
    config_path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        raise SelectionConfigError(f"Selection config file not found: {config_path}")

    try:
        raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    except Exception as e:
        logger.error(f"Failed to load selection configuration: {e}")
        raise SelectionConfigError(f"Invalid selection configuration file: {e}") from e

    try:
        config = SelectionConfig.model_validate(raw or {})
    except ValidationError as e:
        raise SelectionConfigError(f"Invalid selection configuration in {config_path}: {e}") from e

    logger.info(f"Loaded selection configuration from {config_path}")
    return config


class SelectionSettings(BaseSettings):
    """Run options of a selection (CLI flags override these)."""

    target_count: int = Field(default=20000, gt=0)
    input_path: str = "staging/hyg-scored.json"
    output_path: str = "staging/selected-nfts.json"
    config_path: str = DEFAULT_CONFIG_PATH
    curated_path: Optional[str] = None
    # Pins metadata.generatedAt so repeated runs produce identical files
    generated_at: Optional[datetime] = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SELECTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def load_config(self) -> SelectionConfig:
        """Load the YAML configuration this run points at."""
        return load_selection_config(self.config_path)
