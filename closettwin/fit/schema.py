"""
ClosetTwin Fit — Core Data Schemas

Body measurements, garment spec, fit preferences and the fit report.
Frozen dataclasses: every value here is an immutable snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────

class Gender(str, Enum):
    FEMALE = "female"
    MALE = "male"
    NONBINARY = "nonbinary"
    UNSPECIFIED = "unspecified"


class GarmentCategory(str, Enum):
    # Tops
    TSHIRT = "tshirt"
    SHIRT = "shirt"
    HOODIE = "hoodie"
    DRESS = "dress"
    JACKET = "jacket"
    # Bottoms
    JEANS = "jeans"
    TROUSERS = "trousers"
    SKIRT = "skirt"

    @property
    def is_top(self) -> bool:
        return self in _TOP_CATEGORIES

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_TOP_CATEGORIES = frozenset({
    GarmentCategory.TSHIRT,
    GarmentCategory.SHIRT,
    GarmentCategory.HOODIE,
    GarmentCategory.DRESS,
    GarmentCategory.JACKET,
})

_DISPLAY_NAMES = {
    GarmentCategory.TSHIRT: "T-Shirt",
    GarmentCategory.SHIRT: "Shirt",
    GarmentCategory.HOODIE: "Hoodie",
    GarmentCategory.DRESS: "Dress",
    GarmentCategory.JACKET: "Jacket",
    GarmentCategory.JEANS: "Jeans",
    GarmentCategory.TROUSERS: "Trousers",
    GarmentCategory.SKIRT: "Skirt",
}


class FitZone(str, Enum):
    CHEST = "chest"
    WAIST = "waist"
    HIP = "hip"
    SHOULDER = "shoulder"
    THIGH = "thigh"
    HEM = "hem"


class FitMode(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        """Report label: "Basic" / "Advanced"."""
        return self.value.capitalize()


class FitRating(str, Enum):
    """Per-zone verdict. OVERSIZED is basic-mode only, RELAXED advanced-only."""
    TOO_TIGHT = "Too Tight"
    CLOSE = "Close"
    COMFY = "Comfy"
    OVERSIZED = "Oversized"
    RELAXED = "Relaxed"


class OverallFit(str, Enum):
    TIGHT = "Tight"
    CLOSE = "Close"
    COMFY = "Comfy"
    LOOSE = "Loose"


# ──────────────────────────────────────────────
# Zones per category
# ──────────────────────────────────────────────

TOP_ZONES: Tuple[FitZone, ...] = (
    FitZone.CHEST, FitZone.WAIST, FitZone.HIP, FitZone.SHOULDER,
)
BOTTOM_ZONES: Tuple[FitZone, ...] = (
    FitZone.WAIST, FitZone.HIP, FitZone.THIGH, FitZone.HEM,
)


def zones_for_category(category: GarmentCategory) -> Tuple[FitZone, ...]:
    """Zones evaluated for a garment category, in report order."""
    return TOP_ZONES if category.is_top else BOTTOM_ZONES


# ──────────────────────────────────────────────
# Data Classes
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class BodyMeasurements:
    """One person's measurements at one point in time (cm). None = not measured."""
    height: Optional[float] = None
    chest_bust: Optional[float] = None      # circumference
    underbust: Optional[float] = None
    waist: Optional[float] = None
    high_hip: Optional[float] = None
    low_hip_seat: Optional[float] = None
    shoulder_width: Optional[float] = None
    arm_length: Optional[float] = None
    bicep: Optional[float] = None
    inseam: Optional[float] = None
    thigh: Optional[float] = None
    calf: Optional[float] = None

    # informational
    name: Optional[str] = None   # "Everyday", "Gym bulk", ...
    gender: Gender = Gender.UNSPECIFIED

    def circumference(self, zone: FitZone) -> Optional[float]:
        """Body value compared against the garment for ``zone``.

        Hem has no dedicated body measurement and reuses the calf.
        """
        attr = _BODY_FIELD_BY_ZONE.get(zone)
        if attr is None:
            return None
        return getattr(self, attr)


_BODY_FIELD_BY_ZONE: Dict[FitZone, str] = {
    FitZone.CHEST: "chest_bust",
    FitZone.WAIST: "waist",
    FitZone.HIP: "high_hip",
    FitZone.SHOULDER: "shoulder_width",
    FitZone.THIGH: "thigh",
    FitZone.HEM: "calf",
}


@dataclass(frozen=True)
class GarmentMeasurements:
    """Garment spec. Flat widths are single-layer (×2 = circumference)."""
    chest_flat: Optional[float] = None
    waist_flat: Optional[float] = None
    hip_flat: Optional[float] = None
    shoulder: Optional[float] = None        # seam to seam, not doubled
    sleeve: Optional[float] = None
    length: Optional[float] = None
    thigh_flat: Optional[float] = None
    knee_flat: Optional[float] = None
    hem_flat: Optional[float] = None
    rise_front: Optional[float] = None
    rise_back: Optional[float] = None

    # raw circumferences, preferred over flat widths when present
    chest_circ: Optional[float] = None
    waist_circ: Optional[float] = None
    hip_circ: Optional[float] = None

    def circumference(self, zone: FitZone) -> Optional[float]:
        """Garment circumference for ``zone``, or None when not measured.

        chest/waist/hip: explicit circumference, else flat ×2.
        shoulder: flat value as-is.
        thigh/hem: flat ×2 only.
        """
        if zone in _CIRC_OR_FLAT:
            circ_attr, flat_attr = _CIRC_OR_FLAT[zone]
            circ = getattr(self, circ_attr)
            if circ is not None:
                return circ
            flat = getattr(self, flat_attr)
            return flat * 2 if flat is not None else None
        if zone == FitZone.SHOULDER:
            return self.shoulder
        if zone == FitZone.THIGH:
            return self.thigh_flat * 2 if self.thigh_flat is not None else None
        if zone == FitZone.HEM:
            return self.hem_flat * 2 if self.hem_flat is not None else None
        return None


_CIRC_OR_FLAT: Dict[FitZone, Tuple[str, str]] = {
    FitZone.CHEST: ("chest_circ", "chest_flat"),
    FitZone.WAIST: ("waist_circ", "waist_flat"),
    FitZone.HIP: ("hip_circ", "hip_flat"),
}


@dataclass(frozen=True)
class Fabric:
    # 0–2 non-stretch, 3–7 slight, 8–15 stretch
    stretch_percent: float = 0.0
    weight_gsm: Optional[float] = None


@dataclass(frozen=True)
class Garment:
    category: GarmentCategory
    intended_fit: str  # "slim" / "regular" / "oversized"
    measurements: GarmentMeasurements = field(default_factory=GarmentMeasurements)
    fabric: Optional[Fabric] = None

    name: Optional[str] = None
    brand: Optional[str] = None
    sku: Optional[str] = None

    def __post_init__(self):
        # plain strings are accepted; unknown labels fall back to tshirt
        if not isinstance(self.category, GarmentCategory):
            try:
                category = GarmentCategory(self.category)
            except (TypeError, ValueError):
                logger.debug("unknown garment category %r, using tshirt", self.category)
                category = GarmentCategory.TSHIRT
            object.__setattr__(self, "category", category)


@dataclass(frozen=True)
class FitPreferences:
    tightness_tolerance_cm: float = 2.0
    preferred_fit: str = "regular"  # not consulted by the engine


@dataclass(frozen=True)
class FitZoneResult:
    """Verdict for a single zone."""
    zone: FitZone
    delta_cm: float              # garment - (body + ease)
    rating: FitRating
    strain: Optional[float] = None  # advanced mode only, [0, 1]


@dataclass(frozen=True)
class FitReport:
    """Full fit verdict."""
    summary: str
    mode: str                            # "Basic" / "Advanced"
    zones: Tuple[FitZoneResult, ...]
    overall: OverallFit
    size_match_percent: Optional[int] = None

    @property
    def rating_by_zone(self) -> Dict[str, str]:
        return {z.zone.value: z.rating.value for z in self.zones}

    @property
    def delta_by_zone(self) -> Dict[str, float]:
        return {z.zone.value: z.delta_cm for z in self.zones}

    @property
    def strain_by_zone(self) -> Dict[str, Optional[float]]:
        return {z.zone.value: z.strain for z in self.zones}

    def to_dict(self) -> dict:
        """Plain JSON-ready dict for the presentation layer."""
        return {
            "summary": self.summary,
            "mode": self.mode,
            "zones": [
                {
                    "zone": z.zone.value,
                    "deltaCm": z.delta_cm,
                    "rating": z.rating.value,
                    "strain": z.strain,
                }
                for z in self.zones
            ],
            "overall": self.overall.value,
            "sizeMatchPercent": self.size_match_percent,
        }

    def to_vector(self) -> np.ndarray:
        """Per-zone deltas followed by strains (0 where absent), zone order kept."""
        deltas = [z.delta_cm for z in self.zones]
        strains = [z.strain if z.strain is not None else 0.0 for z in self.zones]
        return np.array(deltas + strains, dtype=np.float64)
