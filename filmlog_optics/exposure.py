"""Exposure resolution: simulated film exposure -> device ISO and shutter.

The simulated camera (aperture, film speed, shutter, compensation) defines a
target exposure value. The real capture device has a fixed lens aperture and a
bounded ISO/shutter envelope, so the target is realised as an (ISO, shutter)
pair satisfying

    ISO * shutter = 100 * N_device^2 / 2^EV_target

The resolver starts from the lowest ISO, then trades shutter for ISO only when
that brings the shutter down to a flicker-safe duration. Two clamp passes are
enough because the ISO/shutter relation is monotonic in both variables.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from . import constants

logger = logging.getLogger(__name__)

# Keeps 2**EV finite and non-zero
_EV_LIMIT = 1000.0


class InvalidExposureInput(ValueError):
    """Aperture, film speed or shutter of the simulated exposure is not positive."""


class InvalidDeviceEnvelope(ValueError):
    """The device's ISO/shutter bounds, aperture or mains frequency are malformed."""


@dataclass(frozen=True)
class ExposureTriad:
    """Exposure settings of the simulated film camera."""

    fstop: float
    film_speed_iso: float
    shutter_seconds: float
    compensation_stops: float = 0.0


@dataclass(frozen=True)
class DeviceExposureEnvelope:
    """Hardware capture limits of the real device."""

    min_iso: float
    max_iso: float
    min_shutter_seconds: float
    max_shutter_seconds: float
    physical_aperture: float
    mains_frequency_hz: int = constants.DEVICE_MAINS_FREQUENCY_HZ


@dataclass(frozen=True)
class ResolvedExposure:
    """Device settings realising the simulated exposure."""

    applied_iso: float
    applied_shutter_seconds: float
    flicker_risk: bool


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def validate_triad(triad: ExposureTriad) -> None:
    for name in ("fstop", "film_speed_iso", "shutter_seconds"):
        value = getattr(triad, name)
        if not _positive(value):
            raise InvalidExposureInput(f"{name} must be positive, got {value}")
    if not math.isfinite(triad.compensation_stops):
        raise InvalidExposureInput(
            f"compensation_stops must be finite, got {triad.compensation_stops}"
        )


def validate_envelope(envelope: DeviceExposureEnvelope) -> None:
    for name in ("min_iso", "max_iso", "min_shutter_seconds", "max_shutter_seconds", "physical_aperture"):
        value = getattr(envelope, name)
        if not _positive(value):
            raise InvalidDeviceEnvelope(f"{name} must be positive, got {value}")
    if envelope.min_iso > envelope.max_iso:
        raise InvalidDeviceEnvelope(
            f"min_iso {envelope.min_iso} exceeds max_iso {envelope.max_iso}"
        )
    if envelope.min_shutter_seconds > envelope.max_shutter_seconds:
        raise InvalidDeviceEnvelope(
            f"min_shutter_seconds {envelope.min_shutter_seconds} exceeds "
            f"max_shutter_seconds {envelope.max_shutter_seconds}"
        )
    if envelope.mains_frequency_hz not in constants.MAINS_FREQUENCIES_HZ:
        raise InvalidDeviceEnvelope(
            f"Unsupported mains frequency: {envelope.mains_frequency_hz} Hz"
        )


def simulated_ev(triad: ExposureTriad) -> float:
    """EV of the simulated exposure, normalised to ISO 100."""
    # Summed in log space so extreme but finite inputs cannot overflow
    return (
        2.0 * math.log2(triad.fstop)
        - math.log2(triad.shutter_seconds)
        - math.log2(triad.film_speed_iso)
        + math.log2(constants.REFERENCE_ISO)
    )


def target_ev(triad: ExposureTriad, calibration_offset_stops: float = 0.0) -> float:
    """EV the device must realise after compensation and calibration offset."""
    return simulated_ev(triad) - triad.compensation_stops + calibration_offset_stops


def flicker_threshold(mains_frequency_hz: float) -> float:
    """Shortest shutter (s) that integrates a full half-cycle of mains light."""
    return 1.0 / (2.0 * mains_frequency_hz)


def preferred_min_shutter(mains_frequency_hz: float) -> float:
    return max(flicker_threshold(mains_frequency_hz), constants.PREFERRED_SHUTTER_SECONDS)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def resolve(
    triad: ExposureTriad,
    envelope: DeviceExposureEnvelope,
    calibration_offset_stops: float = constants.DEFAULT_CALIBRATION_OFFSET_STOPS,
) -> ResolvedExposure:
    """Resolve a simulated exposure into in-bounds device ISO and shutter.

    Raises InvalidExposureInput / InvalidDeviceEnvelope for bad inputs; every
    valid input produces an ISO and shutter inside the envelope.
    """
    validate_triad(triad)
    validate_envelope(envelope)

    ev = _clamp(target_ev(triad, calibration_offset_stops), -_EV_LIMIT, _EV_LIMIT)
    ev_factor = 2.0 ** ev
    numerator = constants.REFERENCE_ISO * envelope.physical_aperture ** 2

    min_s = envelope.min_shutter_seconds
    max_s = envelope.max_shutter_seconds
    threshold = flicker_threshold(envelope.mains_frequency_hz)
    preferred = _clamp(preferred_min_shutter(envelope.mains_frequency_hz), min_s, max_s)

    def shutter_for(iso: float) -> float:
        return _clamp(numerator / (ev_factor * iso), min_s, max_s)

    def iso_for(shutter: float) -> float:
        return numerator / (ev_factor * shutter)

    # Lowest noise first
    iso = envelope.min_iso
    shutter = shutter_for(iso)

    # Pass 1: shorten a slow shutter to the flicker-safe one by raising ISO
    if shutter > preferred:
        candidate_iso = iso_for(preferred)
        if candidate_iso <= envelope.max_iso:
            iso, shutter = candidate_iso, preferred
        else:
            iso = envelope.max_iso
            shutter = shutter_for(iso)

    # Pass 2: bring ISO in line with the (possibly clamped) shutter
    implied_iso = iso_for(shutter)
    if implied_iso > envelope.max_iso:
        iso = envelope.max_iso
        shutter = shutter_for(iso)
    else:
        iso = _clamp(implied_iso, envelope.min_iso, envelope.max_iso)

    risk = shutter < threshold
    if risk:
        logger.debug(
            "Shutter %.6fs below flicker threshold %.6fs at EV %.2f",
            shutter, threshold, ev,
        )

    return ResolvedExposure(
        applied_iso=iso,
        applied_shutter_seconds=shutter,
        flicker_risk=risk,
    )
