"""
Rule-Based Fit Engine

Per-zone garment vs body comparison using fixed ease tables.

Basic mode rates the signed delta (cm) between garment circumference and
body + ease. Advanced mode models fabric strain: how far the stretched
garment capacity falls short of what the body needs, normalized to [0, 1].

Pure and stateless: no I/O, nothing cached between calls. Missing data
never raises, it resolves to 0.
"""

from __future__ import annotations

import logging
from collections import Counter
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from closettwin.fit.schema import (
    BodyMeasurements,
    Fabric,
    FitMode,
    FitPreferences,
    FitRating,
    FitReport,
    FitZone,
    FitZoneResult,
    Garment,
    GarmentCategory,
    OverallFit,
    zones_for_category,
)

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Ease Tables (cm, conservative defaults)
# ──────────────────────────────────────────────
# intended_fit -> zone -> required ease beyond the body measurement

def _frozen(table: dict) -> Mapping:
    return MappingProxyType({k: MappingProxyType(v) for k, v in table.items()})


TOP_EASE = _frozen({
    "slim":      {FitZone.CHEST: 4.0,  FitZone.WAIST: 3.0,  FitZone.HIP: 3.0,  FitZone.SHOULDER: 1.0},
    "regular":   {FitZone.CHEST: 6.0,  FitZone.WAIST: 5.0,  FitZone.HIP: 5.0,  FitZone.SHOULDER: 1.5},
    "oversized": {FitZone.CHEST: 12.0, FitZone.WAIST: 10.0, FitZone.HIP: 10.0, FitZone.SHOULDER: 2.0},
})

BOTTOM_EASE = _frozen({
    "slim":      {FitZone.WAIST: 2.0, FitZone.HIP: 3.0, FitZone.THIGH: 2.0, FitZone.HEM: 0.0},
    "regular":   {FitZone.WAIST: 3.0, FitZone.HIP: 4.0, FitZone.THIGH: 3.0, FitZone.HEM: 0.0},
    "oversized": {FitZone.WAIST: 6.0, FitZone.HIP: 8.0, FitZone.THIGH: 6.0, FitZone.HEM: 0.0},
})

EASE_TABLES = MappingProxyType({"top": TOP_EASE, "bottom": BOTTOM_EASE})


# ──────────────────────────────────────────────
# Thresholds / constants
# ──────────────────────────────────────────────

# basic mode: delta (cm) bands
TOO_TIGHT_DELTA = -2.0   # delta < -2           -> Too Tight
CLOSE_MAX_DELTA = 1.0    # -2 <= delta <= 1     -> Close
COMFY_MAX_DELTA = 5.0    # 1 < delta <= 5       -> Comfy, above -> Oversized

# advanced mode
STRETCH_COEFFICIENT = 0.4   # share of nominal stretch % usable as capacity
STRAIN_NORMALIZER = 1.5
STRESS_ZONES = frozenset({FitZone.HIP, FitZone.WAIST, FitZone.CHEST})
STRESS_ZONE_BIAS = 1.15
TOLERANCE_DIVISOR = 10.0    # cm of tolerance -> strain units

TOO_TIGHT_STRAIN = 0.8
CLOSE_STRAIN = 0.5
COMFY_STRAIN = 0.2

HIGH_STRAIN = 0.7
LOW_STRAIN = 0.3

_GOOD_RATINGS = frozenset({FitRating.COMFY, FitRating.CLOSE})
_LOOSE_RATINGS = frozenset({FitRating.OVERSIZED, FitRating.RELAXED})


def required_ease(category: GarmentCategory, intended_fit: str, zone: FitZone) -> float:
    """Ease lookup. Unknown intended fit or zone -> 0."""
    table = EASE_TABLES["top" if category.is_top else "bottom"]
    row = table.get(intended_fit)
    if row is None:
        return 0.0
    return row.get(zone, 0.0)


def stretch_factor(fabric: Optional[Fabric]) -> float:
    if fabric is None:
        return 1.0
    return 1.0 + (fabric.stretch_percent / 100.0) * STRETCH_COEFFICIENT


class FitEngine:
    """
    Rule-based fit evaluation.

    Usage:
        engine = FitEngine()
        report = engine.evaluate(garment, body, prefs, FitMode.ADVANCED)
    """

    def evaluate(
        self,
        garment: Garment,
        body: BodyMeasurements,
        preferences: Optional[FitPreferences] = None,
        mode: Union[FitMode, str] = FitMode.BASIC,
    ) -> FitReport:
        """
        Evaluate one garment against one body.

        Args:
            garment: garment spec (category, intended fit, measurements, fabric)
            body: body measurements
            preferences: user fit preferences (defaults apply when None)
            mode: FitMode or "basic"/"advanced"

        Returns:
            FitReport with one FitZoneResult per evaluated zone
        """
        if preferences is None:
            preferences = FitPreferences()
        fit_mode = self._coerce_mode(mode)

        if fit_mode == FitMode.ADVANCED:
            return self._advanced_fit(garment, body, preferences)
        return self._basic_fit(garment, body)

    # ──────────────────────────────────────────
    # Modes
    # ──────────────────────────────────────────

    def _basic_fit(self, garment: Garment, body: BodyMeasurements) -> FitReport:
        zones = []
        for zone in zones_for_category(garment.category):
            body_circ, garment_circ, ease = self._zone_inputs(zone, garment, body)
            delta = garment_circ - (body_circ + ease)
            rating = self.delta_to_rating(delta)
            logger.debug("basic %s: garment=%.2f body=%.2f ease=%.2f delta=%.2f -> %s",
                         zone.value, garment_circ, body_circ, ease, delta, rating.value)
            zones.append(FitZoneResult(zone=zone, delta_cm=delta, rating=rating))

        return self._build_report(FitMode.BASIC, zones, self._basic_summary)

    def _advanced_fit(
        self,
        garment: Garment,
        body: BodyMeasurements,
        preferences: FitPreferences,
    ) -> FitReport:
        factor = stretch_factor(garment.fabric)
        zones = []
        for zone in zones_for_category(garment.category):
            body_circ, garment_circ, ease = self._zone_inputs(zone, garment, body)
            strain = self.zone_strain(
                zone, body_circ, garment_circ, ease, factor,
                preferences.tightness_tolerance_cm,
            )
            rating = self.strain_to_rating(strain)
            delta = garment_circ - (body_circ + ease)
            logger.debug("advanced %s: garment=%.2f body=%.2f ease=%.2f stretch=%.3f strain=%.3f -> %s",
                         zone.value, garment_circ, body_circ, ease, factor, strain, rating.value)
            zones.append(FitZoneResult(zone=zone, delta_cm=delta, rating=rating, strain=strain))

        return self._build_report(FitMode.ADVANCED, zones, self._advanced_summary)

    def _build_report(self, fit_mode: FitMode, zones: Sequence[FitZoneResult], summarize) -> FitReport:
        ratings = [z.rating for z in zones]
        overall = self.overall_rating(ratings)
        return FitReport(
            summary=summarize(fit_mode.label, zones, overall),
            mode=fit_mode.label,
            zones=tuple(zones),
            overall=overall,
            size_match_percent=self.size_match_percent(ratings),
        )

    # ──────────────────────────────────────────
    # Zone math
    # ──────────────────────────────────────────

    @staticmethod
    def _zone_inputs(
        zone: FitZone,
        garment: Garment,
        body: BodyMeasurements,
    ) -> Tuple[float, float, float]:
        """(body circumference, garment circumference, ease); unmeasured -> 0."""
        body_circ = body.circumference(zone)
        garment_circ = garment.measurements.circumference(zone)
        ease = required_ease(garment.category, garment.intended_fit, zone)
        return (
            body_circ if body_circ is not None else 0.0,
            garment_circ if garment_circ is not None else 0.0,
            ease,
        )

    @staticmethod
    def zone_strain(
        zone: FitZone,
        body_circ: float,
        garment_circ: float,
        ease: float,
        factor: float,
        tolerance_cm: float,
    ) -> float:
        """Strain in [0, 1] after normalization, stress bias and user tolerance."""
        capacity = garment_circ * factor
        if capacity <= 0:
            # nothing measured: no capacity to strain
            raw = 0.0
        else:
            raw = max(0.0, (body_circ + ease - capacity) / capacity)
        strain = min(1.0, raw / STRAIN_NORMALIZER)

        if zone in STRESS_ZONES:
            strain *= STRESS_ZONE_BIAS

        strain = max(0.0, strain - tolerance_cm / TOLERANCE_DIVISOR)
        return float(np.clip(strain, 0.0, 1.0))

    @staticmethod
    def delta_to_rating(delta: float) -> FitRating:
        if delta < TOO_TIGHT_DELTA:
            return FitRating.TOO_TIGHT
        if delta <= CLOSE_MAX_DELTA:
            return FitRating.CLOSE
        if delta <= COMFY_MAX_DELTA:
            return FitRating.COMFY
        return FitRating.OVERSIZED

    @staticmethod
    def strain_to_rating(strain: float) -> FitRating:
        if strain >= TOO_TIGHT_STRAIN:
            return FitRating.TOO_TIGHT
        if strain >= CLOSE_STRAIN:
            return FitRating.CLOSE
        if strain >= COMFY_STRAIN:
            return FitRating.COMFY
        return FitRating.RELAXED

    # ──────────────────────────────────────────
    # Aggregation
    # ──────────────────────────────────────────

    @staticmethod
    def overall_rating(ratings: Iterable[FitRating]) -> OverallFit:
        """Ordered rule chain; Oversized and Relaxed share the loose bucket."""
        counts = Counter(ratings)
        tight = counts[FitRating.TOO_TIGHT]
        close = counts[FitRating.CLOSE]
        comfy = counts[FitRating.COMFY]
        loose = sum(counts[r] for r in _LOOSE_RATINGS)

        if tight > 0:
            return OverallFit.TIGHT
        if close > comfy + loose:
            return OverallFit.CLOSE
        if comfy >= close + loose:
            return OverallFit.COMFY
        return OverallFit.LOOSE

    @staticmethod
    def size_match_percent(ratings: Sequence[FitRating]) -> int:
        if not ratings:
            return 0
        good = sum(1 for r in ratings if r in _GOOD_RATINGS)
        # rounded, not truncated; identical for up to 4 zones
        return int(round(100.0 * good / len(ratings)))

    # ──────────────────────────────────────────
    # Summaries
    # ──────────────────────────────────────────

    @staticmethod
    def _basic_summary(label: str, zones: Sequence[FitZoneResult], overall: OverallFit) -> str:
        total = len(zones)
        tight = sum(1 for z in zones if z.rating == FitRating.TOO_TIGHT)
        comfy = sum(1 for z in zones if z.rating == FitRating.COMFY)
        verdict = f"Overall fit is {overall.value.lower()}."

        if tight > 0:
            return f"{label} analysis shows tightness in {tight} of {total} zones. {verdict}"
        if comfy == total:
            return f"{label} analysis shows comfortable fit across all {total} zones. {verdict}"
        return f"{label} analysis shows mixed fit results across {total} zones. {verdict}"

    @staticmethod
    def _advanced_summary(label: str, zones: Sequence[FitZoneResult], overall: OverallFit) -> str:
        high = sum(1 for z in zones if (z.strain or 0.0) > HIGH_STRAIN)
        low = sum(1 for z in zones if (z.strain or 0.0) < LOW_STRAIN)

        if high > 0:
            return (
                f"{label} analysis with strain modeling shows high stress in {high} zones. "
                "Consider sizing up or choosing stretchier fabric."
            )
        if low == len(zones):
            return f"{label} analysis shows low strain across all zones. Fabric will drape comfortably."
        return (
            f"{label} analysis with strain modeling shows moderate fit with some stress points. "
            f"Overall fit is {overall.value.lower()}."
        )

    @staticmethod
    def _coerce_mode(mode: Union[FitMode, str]) -> FitMode:
        if isinstance(mode, FitMode):
            return mode
        try:
            return FitMode(str(mode).strip().lower())
        except ValueError:
            logger.debug("unknown fit mode %r, falling back to basic", mode)
            return FitMode.BASIC


_DEFAULT_ENGINE = FitEngine()


def evaluate(
    garment: Garment,
    body: BodyMeasurements,
    preferences: Optional[FitPreferences] = None,
    mode: Union[FitMode, str] = FitMode.BASIC,
) -> FitReport:
    """Module-level shortcut for ``FitEngine().evaluate``."""
    return _DEFAULT_ENGINE.evaluate(garment, body, preferences, mode)
