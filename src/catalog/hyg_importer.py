# src/catalog/hyg_importer.py
"""
Import of the HYG star database (CSV) into generated catalog entries.
Produces camelCase dictionaries in the same shape as generated catalog files,
so the result can be written to JSON and fed to the selection pipeline.
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

PARSECS_TO_LIGHT_YEARS = 3.26156
SUN_ABSOLUTE_MAGNITUDE = 4.83
# HYG uses 100000 pc as the "unknown distance" marker
HYG_UNKNOWN_DISTANCE_PC = 100000

# Effective temperature range (K) per spectral class, (coolest, hottest)
SPECTRAL_CLASS_TEMPERATURES = {
    "O": (30000, 50000),
    "B": (10000, 30000),
    "A": (7500, 10000),
    "F": (6000, 7500),
    "G": (5200, 6000),
    "K": (3700, 5200),
    "M": (2400, 3700),
    "L": (1300, 2400),
    "T": (550, 1300),
    "Y": (300, 550),
}

CONSTELLATION_NAMES = {
    "And": "Andromeda", "Ant": "Antlia", "Aps": "Apus", "Aqr": "Aquarius",
    "Aql": "Aquila", "Ara": "Ara", "Ari": "Aries", "Aur": "Auriga",
    "Boo": "Bootes", "Cae": "Caelum", "Cam": "Camelopardalis", "Cnc": "Cancer",
    "CVn": "Canes Venatici", "CMa": "Canis Major", "CMi": "Canis Minor",
    "Cap": "Capricornus", "Car": "Carina", "Cas": "Cassiopeia", "Cen": "Centaurus",
    "Cep": "Cepheus", "Cet": "Cetus", "Cha": "Chamaeleon", "Cir": "Circinus",
    "Col": "Columba", "Com": "Coma Berenices", "CrA": "Corona Australis",
    "CrB": "Corona Borealis", "Crv": "Corvus", "Crt": "Crater", "Cru": "Crux",
    "Cyg": "Cygnus", "Del": "Delphinus", "Dor": "Dorado", "Dra": "Draco",
    "Equ": "Equuleus", "Eri": "Eridanus", "For": "Fornax", "Gem": "Gemini",
    "Gru": "Grus", "Her": "Hercules", "Hor": "Horologium", "Hya": "Hydra",
    "Hyi": "Hydrus", "Ind": "Indus", "Lac": "Lacerta", "Leo": "Leo",
    "LMi": "Leo Minor", "Lep": "Lepus", "Lib": "Libra", "Lup": "Lupus",
    "Lyn": "Lynx", "Lyr": "Lyra", "Men": "Mensa", "Mic": "Microscopium",
    "Mon": "Monoceros", "Mus": "Musca", "Nor": "Norma", "Oct": "Octans",
    "Oph": "Ophiuchus", "Ori": "Orion", "Pav": "Pavo", "Peg": "Pegasus",
    "Per": "Perseus", "Phe": "Phoenix", "Pic": "Pictor", "Psc": "Pisces",
    "PsA": "Piscis Austrinus", "Pup": "Puppis", "Pyx": "Pyxis", "Ret": "Reticulum",
    "Sge": "Sagitta", "Sgr": "Sagittarius", "Sco": "Scorpius", "Scl": "Sculptor",
    "Sct": "Scutum", "Ser": "Serpens", "Sex": "Sextans", "Tau": "Taurus",
    "Tel": "Telescopium", "Tri": "Triangulum", "TrA": "Triangulum Australe",
    "Tuc": "Tucana", "UMa": "Ursa Major", "UMi": "Ursa Minor", "Vel": "Vela",
    "Vir": "Virgo", "Vol": "Volans", "Vul": "Vulpecula",
}

# Catalog designations in display-name precedence order: (column, prefix)
_DESIGNATIONS = [("hd", "HD "), ("hip", "HIP "), ("hr", "HR "), ("gl", "Gliese ")]


def _text(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def display_name(row: Dict[str, Any]) -> str:
    """Proper name, then Bayer/Flamsteed, then HD/HIP/HR/Gliese, then the row id."""
    for column in ("proper", "bf"):
        text = _text(row.get(column))
        if text:
            return text
    for column, prefix in _DESIGNATIONS:
        text = _text(row.get(column))
        if text:
            return f"{prefix}{text}"
    return f"Star {_text(row.get('id'))}"


def alternate_names(row: Dict[str, Any]) -> List[str]:
    """Catalog designations other than the chosen display name."""
    proper, bayer = _text(row.get("proper")), _text(row.get("bf"))
    names = []
    if proper or bayer:
        for column, prefix in _DESIGNATIONS[:2]:
            text = _text(row.get(column))
            if text:
                names.append(f"{prefix}{text}")
        if proper:
            hr = _text(row.get("hr"))
            if hr:
                names.append(f"HR {hr}")
            if bayer:
                names.append(bayer)
    gliese = _text(row.get("gl"))
    if gliese:
        names.append(f"Gliese {gliese}")
    variable = _text(row.get("var"))
    if variable:
        names.append(variable)
    return names


def estimate_temperature(spectral_type: Optional[str]) -> Optional[int]:
    """
    Estimate effective temperature from the spectral class and subtype digit.

    Args:
        spectral_type: Spectral type string such as "G2V" or "M1-2Ia-Iab"

    Returns:
        Temperature in Kelvin, or None for unknown classes
    """
    if not spectral_type:
        return None
    temperatures = SPECTRAL_CLASS_TEMPERATURES.get(spectral_type[0].upper())
    if temperatures is None:
        return None
    coolest, hottest = temperatures
    digit = spectral_type[1:2]
    # a missing or zero subtype digit counts as mid-class
    subtype = int(digit) if digit.isdigit() else 0
    subtype = subtype or 5
    return math.floor(hottest - (hottest - coolest) * subtype / 10 + 0.5)


def estimate_luminosity(absolute_magnitude: Optional[float]) -> Optional[float]:
    """Solar luminosities from absolute magnitude."""
    if absolute_magnitude is None:
        return None
    return 10 ** ((SUN_ABSOLUTE_MAGNITUDE - absolute_magnitude) / 2.5)


def row_to_entry(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert one HYG row into a generated catalog entry."""
    parsecs = _number(row.get("dist"))
    distance_ly = None
    if parsecs is not None and 0 < parsecs < HYG_UNKNOWN_DISTANCE_PC:
        distance_ly = parsecs * PARSECS_TO_LIGHT_YEARS

    magnitude = _number(row.get("mag"))
    absolute_magnitude = _number(row.get("absmag"))
    luminosity = _number(row.get("lum"))
    if luminosity is None or luminosity <= 0:
        luminosity = estimate_luminosity(absolute_magnitude)

    spectral_type = _text(row.get("spect"))
    abbreviation = _text(row.get("con"))
    constellation = CONSTELLATION_NAMES.get(abbreviation, abbreviation) if abbreviation else None

    parts = [f"Spectral type {spectral_type}" if spectral_type else "Star"]
    if constellation:
        parts.append(f"in {constellation}")
    if distance_ly is not None:
        parts.append(f"{distance_ly:.1f} light years from Earth")
    if magnitude is not None:
        parts.append(f"with apparent magnitude {magnitude:.2f}")

    return {
        "name": display_name(row),
        "objectType": "Star",
        "description": ", ".join(parts) + ".",
        "spectralType": spectral_type,
        "constellation": constellation,
        "distanceLy": distance_ly,
        "magnitude": magnitude,
        "absoluteMagnitude": absolute_magnitude,
        "luminosity": luminosity if luminosity and luminosity > 0 else None,
        "temperature": estimate_temperature(spectral_type),
        "alternateNames": alternate_names(row),
    }


def import_hyg_csv(csv_path: Union[str, Path], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Read a HYG database CSV and convert its rows into catalog entries.

    Args:
        csv_path: Path to the HYG CSV (hygdata_v3/v4 column layout)
        limit: Optional maximum number of rows to convert

    Returns:
        List of catalog entry dictionaries in file order
    """
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, na_values=[""])
    df.columns = [str(column).strip().lower() for column in df.columns]
    if limit is not None:
        df = df.head(limit)

    logger.info(f"Converting {len(df)} HYG rows from {csv_path}")
    rows = df.to_dict(orient="records")
    entries = [row_to_entry(row) for row in rows]

    named = sum(1 for row in rows if _text(row.get("proper")))
    logger.info(f"Converted {len(entries)} stars ({named} with proper names)")
    return entries
