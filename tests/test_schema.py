import dataclasses

import numpy as np
import pytest

from closettwin.fit.schema import (
    BOTTOM_ZONES,
    TOP_ZONES,
    BodyMeasurements,
    FitMode,
    FitRating,
    FitReport,
    FitZone,
    FitZoneResult,
    Garment,
    GarmentCategory,
    GarmentMeasurements,
    OverallFit,
    zones_for_category,
)


@pytest.mark.parametrize("category, is_top", [
    (GarmentCategory.TSHIRT, True),
    (GarmentCategory.SHIRT, True),
    (GarmentCategory.HOODIE, True),
    (GarmentCategory.DRESS, True),
    (GarmentCategory.JACKET, True),
    (GarmentCategory.JEANS, False),
    (GarmentCategory.TROUSERS, False),
    (GarmentCategory.SKIRT, False),
])
def test_category_classification(category, is_top):
    assert category.is_top is is_top
    assert zones_for_category(category) == (TOP_ZONES if is_top else BOTTOM_ZONES)


def test_display_names():
    assert GarmentCategory.TSHIRT.display_name == "T-Shirt"
    assert GarmentCategory.TROUSERS.display_name == "Trousers"


def test_mode_labels():
    assert FitMode.BASIC.label == "Basic"
    assert FitMode.ADVANCED.label == "Advanced"


def test_body_zone_mapping():
    body = BodyMeasurements(chest_bust=90, waist=75, high_hip=95, low_hip_seat=100,
                            shoulder_width=45, thigh=55, calf=35)
    assert body.circumference(FitZone.CHEST) == 90
    assert body.circumference(FitZone.HIP) == 95
    assert body.circumference(FitZone.SHOULDER) == 45
    assert body.circumference(FitZone.THIGH) == 55
    # hem is approximated by the calf
    assert body.circumference(FitZone.HEM) == 35
    assert BodyMeasurements().circumference(FitZone.WAIST) is None


def test_garment_circumference_prefers_raw_circ():
    m = GarmentMeasurements(chest_flat=40, chest_circ=100, waist_flat=45, hip_circ=104)
    assert m.circumference(FitZone.CHEST) == 100
    assert m.circumference(FitZone.WAIST) == 90
    assert m.circumference(FitZone.HIP) == 104


def test_garment_circumference_doubling_rules():
    m = GarmentMeasurements(shoulder=46, thigh_flat=30, hem_flat=20)
    assert m.circumference(FitZone.SHOULDER) == 46
    assert m.circumference(FitZone.THIGH) == 60
    assert m.circumference(FitZone.HEM) == 40


def test_missing_and_zero_stay_distinct():
    assert GarmentMeasurements().circumference(FitZone.CHEST) is None
    assert GarmentMeasurements(chest_flat=0).circumference(FitZone.CHEST) == 0
    assert GarmentMeasurements(hem_flat=0).circumference(FitZone.HEM) == 0


def test_models_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        BodyMeasurements(waist=70).waist = 80


def _report():
    return FitReport(
        summary="s",
        mode="Advanced",
        zones=(
            FitZoneResult(FitZone.WAIST, 2.0, FitRating.COMFY, 0.25),
            FitZoneResult(FitZone.HIP, -3.0, FitRating.CLOSE, 0.6),
        ),
        overall=OverallFit.CLOSE,
        size_match_percent=100,
    )


def test_report_views():
    report = _report()
    assert report.rating_by_zone == {"waist": "Comfy", "hip": "Close"}
    assert report.strain_by_zone == {"waist": 0.25, "hip": 0.6}
    np.testing.assert_allclose(report.to_vector(), [2.0, -3.0, 0.25, 0.6])


def test_report_to_dict():
    d = _report().to_dict()
    assert d["mode"] == "Advanced"
    assert d["overall"] == "Close"
    assert d["sizeMatchPercent"] == 100
    assert d["zones"][1] == {"zone": "hip", "deltaCm": -3.0, "rating": "Close", "strain": 0.6}


@pytest.mark.parametrize("raw, category", [
    ("jeans", GarmentCategory.JEANS),
    (GarmentCategory.DRESS, GarmentCategory.DRESS),
    ("poncho", GarmentCategory.TSHIRT),
    (None, GarmentCategory.TSHIRT),
])
def test_garment_category_coercion(raw, category):
    garment = Garment(category=raw, intended_fit="regular")
    assert garment.category is category
