"""Film format geometry and catalog lookups.

Resolves the user-facing labels (film format, aspect ratio, shutter speed,
filter) into the numbers the projection and exposure code consume.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction

from . import constants
from .projection import OpticalGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilmSize:
    """Physical gate of a film format (mm)."""

    width_mm: float
    height_mm: float

    @property
    def aspect_ratio(self) -> float:
        return self.width_mm / self.height_mm

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width_mm, self.height_mm)

    @property
    def circle_of_confusion(self) -> float:
        """Acceptable blur spot for this format, diagonal / 1442 (mm)."""
        return self.diagonal / constants.COC_DIAGONAL_DIVISOR

    def angle_of_view(self, focal_length_mm: float) -> tuple[float, float, float]:
        """Return (horizontal, vertical, diagonal) angle of view in degrees."""
        if focal_length_mm <= 0:
            return (0.0, 0.0, 0.0)

        def _angle(extent: float) -> float:
            return math.degrees(2.0 * math.atan(extent / (2.0 * focal_length_mm)))

        return (
            _angle(self.width_mm),
            _angle(self.height_mm),
            _angle(self.diagonal),
        )


DEFAULT_FILM_SIZE = FilmSize(constants.DEFAULT_FILM_WIDTH_MM, constants.DEFAULT_FILM_HEIGHT_MM)


def film_size(label: str | None) -> FilmSize:
    """Look up a film format by label, falling back to 135."""
    for name, width, height in constants.FILM_SIZES:
        if name == label:
            return FilmSize(width, height)
    if label not in (None, "", "-"):
        logger.debug("Unknown film size %r, using %s", label, constants.DEFAULT_FILM_LABEL)
    return DEFAULT_FILM_SIZE


def film_labels() -> list[str]:
    return [name for name, _, _ in constants.FILM_SIZES]


def aspect_ratio(label: str | None) -> float:
    """Resolve an aspect ratio label ("16:9", "2.39", "-") to a float.

    Labels outside the table are parsed as "w:h" or a plain number. "-",
    empty and unparsable labels give 0.0 (use the film's own ratio).
    """
    if not label:
        return 0.0
    for name, value in constants.ASPECT_RATIOS:
        if name == label:
            return value
    try:
        if ":" in label:
            w, h = label.split(":", 1)
            return float(w) / float(h)
        return float(label)
    except (ValueError, ZeroDivisionError):
        logger.debug("Unparsable aspect ratio %r, using film default", label)
        return 0.0


def shutter_seconds(label: str) -> float:
    """Parse a shutter label such as "1/125", "2" or "0.5" into seconds.

    Raises ValueError for a label that is not a number or fraction.
    """
    for name, value in constants.SHUTTER_SPEEDS:
        if name == label:
            return value
    try:
        return float(Fraction(label))
    except (ValueError, ZeroDivisionError) as exc:
        raise ValueError(f"Invalid shutter: {label}") from exc


def filter_compensation(*labels: str) -> float:
    """Sum the exposure compensation (stops) of the named filters.

    Colour and ND filters stack, e.g. ``filter_compensation("85", "ND 0.6")``.
    Raises ValueError for a label not in the filter table.
    """
    table = dict(constants.FILTERS)
    total = 0.0
    for label in labels:
        if label not in table:
            raise ValueError(f"Unknown filter: {label}")
        total += table[label]
    return total


def geometry_for(
    film_label: str | None,
    focal_length_mm: float,
    device_horizontal_fov_degrees: float,
    aspect_label: str | None = None,
) -> OpticalGeometry:
    """Build an OpticalGeometry from catalog labels."""
    film = film_size(film_label)
    return OpticalGeometry(
        focal_length_mm=focal_length_mm,
        film_width_mm=film.width_mm,
        film_aspect_ratio=film.aspect_ratio,
        desired_aspect_ratio=aspect_ratio(aspect_label),
        device_horizontal_fov_degrees=device_horizontal_fov_degrees,
    )
