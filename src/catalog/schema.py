# src/catalog/schema.py
"""
Pydantic models for validating raw catalog entries.
Catalog files use camelCase keys; the snake_case field names are accepted too.
Descriptive fields the model does not know (alternate names, notable
features, ...) are kept and passed through to the output unchanged.
"""

import math
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .records import CatalogRecord, CatalogSource

# Derived fields from a previous run; always recomputed, never trusted.
STALE_KEYS = {
    "scores", "totalScore", "total_score", "badgeTier", "badge_tier",
    "catalogSource", "catalog_source", "missingData", "missing_data",
    "lowConfidence", "low_confidence", "qualityFlags",
}


def _coerce_optional_number(value: Any) -> Optional[float]:
    """Turn anything that is not a finite number into None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class RawCatalogEntry(BaseModel):
    """Request-style model for one raw catalog entry."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    object_type: str = Field(validation_alias=AliasChoices("objectType", "object_type", "type"))

    distance_ly: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("distanceLy", "distance_ly", "distance")
    )
    mass: Optional[float] = None
    luminosity: Optional[float] = None
    temperature: Optional[float] = None
    magnitude: Optional[float] = None
    absolute_magnitude: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("absoluteMagnitude", "absolute_magnitude")
    )
    discovery_year: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("discoveryYear", "discovery_year")
    )

    constellation: Optional[str] = None
    spectral_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("spectralType", "spectral_type")
    )
    description: Optional[str] = None

    @field_validator("name", "object_type")
    @classmethod
    def validate_required_text(cls, v):
        """Required text fields must be non-empty after stripping."""
        v = v.strip()
        if not v:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("distance_ly", "mass", "luminosity", "temperature",
                     "magnitude", "absolute_magnitude", mode="before")
    @classmethod
    def coerce_numeric(cls, v):
        """Invalid numeric values degrade to missing instead of failing."""
        return _coerce_optional_number(v)

    @field_validator("discovery_year", mode="before")
    @classmethod
    def coerce_year(cls, v):
        number = _coerce_optional_number(v)
        return int(number) if number is not None else None

    @field_validator("constellation", "spectral_type", "description", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def passthrough_fields(self) -> Dict[str, Any]:
        """Unrecognised descriptive fields, minus stale derived ones."""
        extra = self.model_extra or {}
        return {key: value for key, value in extra.items() if key not in STALE_KEYS}

    def to_record(self, source: CatalogSource) -> CatalogRecord:
        return CatalogRecord(
            name=self.name,
            object_type=self.object_type,
            catalog_source=source,
            distance_ly=self.distance_ly,
            mass=self.mass,
            luminosity=self.luminosity,
            temperature=self.temperature,
            magnitude=self.magnitude,
            absolute_magnitude=self.absolute_magnitude,
            discovery_year=self.discovery_year,
            constellation=self.constellation,
            spectral_type=self.spectral_type,
            description=self.description,
            extra=self.passthrough_fields(),
        )
