"""Thin-lens depth of field and hyperfocal distance.

All distances are in millimetres, measured from the lens. An unbounded far
limit is reported as ``math.inf``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from . import constants
from .formats import FilmSize


@dataclass(frozen=True)
class DepthOfFieldResult:
    near_limit_mm: float
    far_limit_mm: float
    hyperfocal_mm: float
    hyperfocal_near_limit_mm: float
    dof_mm: float

    @property
    def is_computable(self) -> bool:
        """False for the all-zero result of degenerate inputs."""
        return self.hyperfocal_mm > 0

    @property
    def far_is_infinite(self) -> bool:
        return math.isinf(self.far_limit_mm)


NOT_COMPUTABLE = DepthOfFieldResult(0.0, 0.0, 0.0, 0.0, 0.0)


def hyperfocal_distance(
    focal_length_mm: float,
    aperture: float,
    circle_of_confusion_mm: float,
) -> float:
    return focal_length_mm ** 2 / (aperture * circle_of_confusion_mm) + focal_length_mm


def compute(
    focal_length_mm: float,
    aperture: float,
    focus_distance_mm: float,
    circle_of_confusion_mm: float,
) -> DepthOfFieldResult:
    """Near/far sharpness limits for a lens focused at *focus_distance_mm*.

    Returns NOT_COMPUTABLE if any input is not positive, or if the focus
    distance is not beyond the focal length (no real image forms there).
    """
    inputs = (focal_length_mm, aperture, focus_distance_mm, circle_of_confusion_mm)
    if not all(math.isfinite(v) and v > 0 for v in inputs):
        return NOT_COMPUTABLE
    if focus_distance_mm <= focal_length_mm:
        return NOT_COMPUTABLE

    f = focal_length_mm
    d = focus_distance_mm
    h = hyperfocal_distance(f, aperture, circle_of_confusion_mm)

    near = (h * d) / (h + (d - f))

    far_denominator = h - (d - f)
    if far_denominator > 0:
        far = (h * d) / far_denominator
        dof = max(0.0, far - near)
    else:
        far = math.inf
        dof = math.inf

    return DepthOfFieldResult(
        near_limit_mm=near,
        far_limit_mm=far,
        hyperfocal_mm=h,
        hyperfocal_near_limit_mm=h / 2.0,
        dof_mm=dof,
    )


def compute_for_format(
    film: FilmSize,
    focal_length_mm: float,
    aperture: float,
    focus_distance_mm: float,
) -> DepthOfFieldResult:
    """Depth of field using the format's own circle of confusion."""
    return compute(focal_length_mm, aperture, focus_distance_mm, film.circle_of_confusion)


def format_distance(distance_mm: float) -> str:
    """Human-readable distance: metres with one decimal, or "inf"."""
    if math.isinf(distance_mm) or distance_mm > constants.INFINITY_DISPLAY_THRESHOLD_MM:
        return "inf"
    return f"{distance_mm / 1000.0:.1f} m"
