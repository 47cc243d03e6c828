"""
ClosetTwin Fit — closettwin.fit package
"""

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
    GarmentMeasurements,
    Gender,
    OverallFit,
)
from closettwin.fit.fit_engine import FitEngine, evaluate
from closettwin.fit.payload import (
    PayloadError,
    encode_partner_payload,
    parse_body_measurements,
    parse_partner_payload,
)
