"""
Partner payload codec.

Brand partners ship garment specs as a compact JSON document (usually
carried inside a QR code). Pydantic models describe that wire format; this
module maps it to and from ``Garment`` and reads saved measurement sets
into ``BodyMeasurements``.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, model_validator

from closettwin.fit.schema import (
    BodyMeasurements,
    Fabric,
    Garment,
    GarmentCategory,
    GarmentMeasurements,
    Gender,
)

logger = logging.getLogger(__name__)

PAYLOAD_VERSION = 1


class PayloadError(ValueError):
    """Payload could not be decoded into a model."""


# ──────────────────────────────────────────────
# Wire models
# ──────────────────────────────────────────────

class PayloadMeasurements(BaseModel):
    """Garment measurements (cm). Field names mirror GarmentMeasurements."""
    model_config = ConfigDict(populate_by_name=True)

    chest_flat: Optional[float] = Field(None, alias="chestFlatCm")
    waist_flat: Optional[float] = Field(None, alias="waistFlatCm")
    hip_flat: Optional[float] = Field(None, alias="hipFlatCm")
    shoulder: Optional[float] = Field(None, alias="shoulderCm")
    sleeve: Optional[float] = Field(None, alias="sleeveCm")
    length: Optional[float] = Field(None, alias="lengthCm")
    thigh_flat: Optional[float] = Field(None, alias="thighFlatCm")
    knee_flat: Optional[float] = Field(None, alias="kneeFlatCm")
    hem_flat: Optional[float] = Field(None, alias="hemFlatCm")
    rise_front: Optional[float] = Field(None, alias="riseFrontCm")
    rise_back: Optional[float] = Field(None, alias="riseBackCm")
    chest_circ: Optional[float] = Field(None, alias="chestCircumferenceCm")
    waist_circ: Optional[float] = Field(None, alias="waistCircumferenceCm")
    hip_circ: Optional[float] = Field(None, alias="hipCircumferenceCm")

    def has_any(self, *names: str) -> bool:
        return any(getattr(self, n) is not None for n in names)


class PayloadFabric(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stretch_percent: float = Field(..., alias="stretchPercent")
    weight_gsm: Optional[float] = Field(None, alias="weightGsm")


class PartnerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    v: Literal[1]
    brand: str
    sku: str
    name: str = Field(..., min_length=1)
    category: GarmentCategory
    intended_fit: str = Field(..., alias="intendedFit")
    measurements: PayloadMeasurements
    fabric: Optional[PayloadFabric] = None
    sig: Optional[str] = None

    @model_validator(mode="after")
    def check_key_measurements(self) -> "PartnerPayload":
        # tops need chest or waist, bottoms need waist or hip
        m = self.measurements
        if self.category.is_top:
            ok = m.has_any("chest_flat", "chest_circ", "waist_flat", "waist_circ")
            needed = "chest or waist"
        else:
            ok = m.has_any("waist_flat", "waist_circ", "hip_flat", "hip_circ")
            needed = "waist or hip"
        if not ok:
            raise ValueError(f"{self.category.value} payload needs a {needed} measurement")
        return self

    @field_serializer("measurements")
    def _dump_measurements(self, m: PayloadMeasurements):
        return m.model_dump(by_alias=True, exclude_none=True)

    def to_garment(self) -> Garment:
        fabric = None
        if self.fabric is not None:
            fabric = Fabric(
                stretch_percent=self.fabric.stretch_percent,
                weight_gsm=self.fabric.weight_gsm,
            )
        return Garment(
            category=self.category,
            intended_fit=self.intended_fit,
            measurements=GarmentMeasurements(**self.measurements.model_dump()),
            fabric=fabric,
            name=self.name,
            brand=self.brand or None,
            sku=self.sku or None,
        )


class MeasurementSetPayload(BaseModel):
    """Saved body measurement set (cm)."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    gender: Optional[str] = None
    height: Optional[float] = Field(None, alias="heightCm")
    chest_bust: Optional[float] = Field(None, alias="chestBustCm")
    underbust: Optional[float] = Field(None, alias="underbustCm")
    waist: Optional[float] = Field(None, alias="waistCm")
    high_hip: Optional[float] = Field(None, alias="highHipCm")
    low_hip_seat: Optional[float] = Field(None, alias="lowHipSeatCm")
    shoulder_width: Optional[float] = Field(None, alias="shoulderWidthCm")
    arm_length: Optional[float] = Field(None, alias="armLengthCm")
    bicep: Optional[float] = Field(None, alias="bicepCm")
    inseam: Optional[float] = Field(None, alias="inseamCm")
    thigh: Optional[float] = Field(None, alias="thighCm")
    calf: Optional[float] = Field(None, alias="calfCm")

    def to_body(self) -> BodyMeasurements:
        try:
            gender = Gender(self.gender) if self.gender is not None else Gender.UNSPECIFIED
        except ValueError:
            logger.warning("unknown gender %r, using unspecified", self.gender)
            gender = Gender.UNSPECIFIED
        values = self.model_dump(exclude={"name", "gender"})
        return BodyMeasurements(**values, name=self.name, gender=gender)


# ──────────────────────────────────────────────
# Decoding
# ──────────────────────────────────────────────

def parse_partner_payload(data: Union[str, bytes, Mapping[str, Any]]) -> Garment:
    """
    Decode a partner garment payload.

    Args:
        data: JSON text/bytes or an already-decoded mapping

    Returns:
        Garment (empty brand/sku -> None)

    Raises:
        PayloadError: malformed JSON, wrong version, empty name, unknown
            category, or no key measurement for the category
    """
    return _validate(PartnerPayload, data).to_garment()


def parse_body_measurements(data: Union[str, bytes, Mapping[str, Any]]) -> BodyMeasurements:
    """Read a saved measurement set. Missing values stay None."""
    return _validate(MeasurementSetPayload, data).to_body()


# ──────────────────────────────────────────────
# Encoding
# ──────────────────────────────────────────────

def garment_to_payload(garment: Garment, sig: Optional[str] = None) -> dict:
    return _payload_for(garment, sig).model_dump(mode="json", by_alias=True)


def encode_partner_payload(garment: Garment, sig: Optional[str] = None) -> str:
    """Compact JSON suitable for embedding in a QR code."""
    return _payload_for(garment, sig).model_dump_json(by_alias=True)


def _payload_for(garment: Garment, sig: Optional[str]) -> PartnerPayload:
    m = garment.measurements
    fabric = None
    if garment.fabric is not None:
        fabric = PayloadFabric(
            stretch_percent=garment.fabric.stretch_percent,
            weight_gsm=garment.fabric.weight_gsm,
        )
    # encoding mirrors the garment as-is; validation applies on decode only
    return PartnerPayload.model_construct(
        v=PAYLOAD_VERSION,
        brand=garment.brand or "",
        sku=garment.sku or "",
        name=garment.name or "",
        category=garment.category,
        intended_fit=garment.intended_fit,
        measurements=PayloadMeasurements(**{k: getattr(m, k) for k in PayloadMeasurements.model_fields}),
        fabric=fabric,
        sig=sig,
    )


def _validate(model, data):
    try:
        if isinstance(data, (str, bytes)):
            return model.model_validate_json(data)
        if isinstance(data, Mapping):
            return model.model_validate(dict(data))
    except ValidationError as e:
        raise PayloadError(f"invalid {model.__name__}: {e}") from e
    raise PayloadError(f"cannot decode {type(data).__name__} as {model.__name__}")
