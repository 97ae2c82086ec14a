"""Frame projection: how a film format/lens frame lands on a pixel surface.

A surface (live preview or captured still) displays the device's own
horizontal field of view. A lens of focal length f on a film gate of width w
covers ``2 * atan(w / 2f)``; the ratio of the half-angle tangents gives the
size of the film frame in surface pixels.

All geometry is in the native (landscape, lens-relative) orientation. Callers
rotate surfaces into that space with ``SurfaceSize.native()`` and rotate
results back themselves.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceSize:
    """Pixel dimensions of a surface, tagged with its orientation.

    ``rotated`` is True when width/height are swapped relative to the native
    orientation (e.g. a portrait preview). The zero size is the failure
    sentinel returned by ``project``.
    """

    width: float
    height: float
    rotated: bool = False

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def aspect(self) -> float:
        if self.height <= 0:
            return 0.0
        return self.width / self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def rotate(self) -> SurfaceSize:
        """Swap axes and flip the orientation tag."""
        return SurfaceSize(self.height, self.width, not self.rotated)

    def native(self) -> SurfaceSize:
        return self.rotate() if self.rotated else self

    def scaled(self, factor: float) -> SurfaceSize:
        return replace(self, width=self.width * factor, height=self.height * factor)

    def exceeds(self, other: SurfaceSize) -> bool:
        """True if this size is larger than *other* on either axis."""
        return self.width > other.width or self.height > other.height


ZERO_SIZE = SurfaceSize(0.0, 0.0)


@dataclass(frozen=True)
class OpticalGeometry:
    """Lens and film format driving a projection."""

    focal_length_mm: float
    film_width_mm: float
    film_aspect_ratio: float
    device_horizontal_fov_degrees: float
    desired_aspect_ratio: float = 0.0

    @property
    def target_aspect_ratio(self) -> float:
        """Desired output ratio, or the film's own when unset (0)."""
        if self.desired_aspect_ratio > 0:
            return self.desired_aspect_ratio
        return self.film_aspect_ratio


@dataclass(frozen=True)
class ProjectedFrame:
    full_frame: SurfaceSize
    aspect_cropped_frame: SurfaceSize

    @property
    def is_empty(self) -> bool:
        return self.full_frame.is_empty


EMPTY_FRAME = ProjectedFrame(ZERO_SIZE, ZERO_SIZE)


def _is_valid_extent(value: float) -> bool:
    return math.isfinite(value) and value > 0


def full_frame_size(geometry: OpticalGeometry, surface: SurfaceSize) -> SurfaceSize:
    """Size in surface pixels of the whole film frame, or ZERO_SIZE."""
    focal = geometry.focal_length_mm
    fov_deg = geometry.device_horizontal_fov_degrees
    if not _is_valid_extent(focal) or not _is_valid_extent(fov_deg):
        return ZERO_SIZE

    film_hfov = 2.0 * math.atan(geometry.film_width_mm / (2.0 * focal))
    device_half_tan = math.tan(math.radians(fov_deg) / 2.0)
    if device_half_tan == 0.0:
        return ZERO_SIZE

    try:
        width = surface.width * (math.tan(film_hfov / 2.0) / device_half_tan)
        height = width / geometry.film_aspect_ratio
    except ZeroDivisionError:
        return ZERO_SIZE

    if not (_is_valid_extent(width) and _is_valid_extent(height)):
        return ZERO_SIZE
    return SurfaceSize(width, height)


def aspect_crop(frame: SurfaceSize, target_aspect: float) -> SurfaceSize:
    """Largest *target_aspect* rectangle inside *frame*."""
    if frame.is_empty or not _is_valid_extent(target_aspect):
        return ZERO_SIZE
    if frame.aspect > target_aspect:
        height = frame.height
        width = height * target_aspect
    else:
        width = frame.width
        height = width / target_aspect
    return SurfaceSize(width, height, frame.rotated)


def project(geometry: OpticalGeometry, surface: SurfaceSize) -> ProjectedFrame:
    """Project the film frame onto *surface*.

    Returns EMPTY_FRAME (zero sizes) when the geometry cannot be projected;
    callers must check ``is_empty`` before using the result.
    """
    full = full_frame_size(geometry, surface)
    if full.is_empty:
        logger.debug(
            "No projection for focal=%s fov=%s surface=%sx%s",
            geometry.focal_length_mm,
            geometry.device_horizontal_fov_degrees,
            surface.width,
            surface.height,
        )
        return EMPTY_FRAME
    return ProjectedFrame(full, aspect_crop(full, geometry.target_aspect_ratio))


# ---------------------------------------------------------------------------
# Overflow compositing and capture cropping
# ---------------------------------------------------------------------------

def overflow_scale(frame: SurfaceSize, surface: SurfaceSize) -> float:
    """Factor that shrinks *frame* to fit *surface*; 1.0 when it already fits."""
    if frame.is_empty or surface.is_empty or not frame.exceeds(surface):
        return 1.0
    return min(surface.width / frame.width, surface.height / frame.height)


def compose_overflow(image: np.ndarray, scale: float) -> np.ndarray:
    """Shrink *image* by *scale* and centre it on a black canvas of its own size."""
    if not 0.0 < scale <= 1.0:
        raise ValueError(f"Overflow scale must be in (0, 1], got {scale}")

    h, w = image.shape[:2]
    scaled_w = max(1, int(round(w * scale)))
    scaled_h = max(1, int(round(h * scale)))
    resized = cv2.resize(image, (scaled_w, scaled_h), interpolation=cv2.INTER_AREA)

    canvas = np.zeros_like(image)
    x0 = (w - scaled_w) // 2
    y0 = (h - scaled_h) // 2
    canvas[y0:y0 + scaled_h, x0:x0 + scaled_w] = resized
    return canvas


def crop_rect(container: SurfaceSize, frame: SurfaceSize) -> tuple[int, int, int, int]:
    """Centred integer crop (x, y, w, h) of *frame* inside *container*."""
    cw, ch = int(container.width), int(container.height)
    w = min(max(1, int(round(frame.width))), cw)
    h = min(max(1, int(round(frame.height))), ch)
    return ((cw - w) // 2, (ch - h) // 2, w, h)


def crop_capture(
    image: np.ndarray,
    geometry: OpticalGeometry,
    aspect_cropped: bool = True,
) -> np.ndarray | None:
    """Crop a captured still to the projected film frame.

    *image* must already be in native orientation. When the projected frame
    is larger than the image, the image is composited onto a black canvas so
    the whole frame stays visible. Returns None if nothing can be projected.
    """
    h, w = image.shape[:2]
    surface = SurfaceSize(w, h)
    frame = project(geometry, surface)
    if frame.is_empty:
        logger.warning("Cannot project frame onto %dx%d capture", w, h)
        return None

    scale = overflow_scale(frame.full_frame, surface)
    if scale < 1.0:
        logger.info("Projected frame exceeds capture, compositing at scale %.4f", scale)
        image = compose_overflow(image, scale)

    target = frame.aspect_cropped_frame if aspect_cropped else frame.full_frame
    x, y, cw, ch = crop_rect(surface, target.scaled(scale))
    return image[y:y + ch, x:x + cw].copy()
