"""OpenCV viewfinder overlay and HUD helpers."""

from __future__ import annotations

import cv2
import numpy as np

from .depth_of_field import DepthOfFieldResult, format_distance
from .exposure import ExposureTriad, ResolvedExposure
from .projection import ProjectedFrame, SurfaceSize, crop_rect


# Colours (BGR)
WHITE = (255, 255, 255)
BG_DARK = (30, 30, 30)

FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.55
FONT_THICKNESS = 1
LINE_HEIGHT = 22

# Opacity of the mask outside the film frame
MASK_OPACITY = 0.6


def draw_frame_overlay(image: np.ndarray, frame: ProjectedFrame) -> np.ndarray:
    """Dim everything outside the film frame and outline the aspect crop.

    Returns a copy; an empty frame leaves the image undimmed.
    """
    out = image.copy()
    if frame.is_empty:
        return out

    h, w = out.shape[:2]
    surface = SurfaceSize(w, h)

    x, y, fw, fh = crop_rect(surface, frame.full_frame)
    mask = np.ones((h, w), dtype=bool)
    mask[y:y + fh, x:x + fw] = False
    out[mask] = (out[mask] * (1.0 - MASK_OPACITY)).astype(out.dtype)

    ax, ay, aw, ah = crop_rect(surface, frame.aspect_cropped_frame)
    cv2.rectangle(out, (ax, ay), (ax + aw - 1, ay + ah - 1), WHITE, 1)
    return out


def exposure_lines(
    triad: ExposureTriad,
    resolved: ResolvedExposure,
) -> list[str]:
    """HUD text for a simulated exposure and the device settings realising it."""
    comp = triad.compensation_stops
    comp_text = f" ({comp:+.1f})" if comp != 0 else ""
    shutter = shutter_label(triad.shutter_seconds)
    lines = [
        f"f/{triad.fstop:g} {shutter} ISO {triad.film_speed_iso:g}{comp_text}",
        f"Device: ISO {resolved.applied_iso:.0f}  {shutter_label(resolved.applied_shutter_seconds)}",
    ]
    if resolved.flicker_risk:
        lines.append("FLICKER RISK")
    return lines


def depth_of_field_lines(result: DepthOfFieldResult) -> list[str]:
    if not result.is_computable:
        return ["DOF: -"]
    return [
        f"Near {format_distance(result.near_limit_mm)}  Far {format_distance(result.far_limit_mm)}",
        f"Hyperfocal {format_distance(result.hyperfocal_mm)}",
    ]


def draw_hud(image: np.ndarray, lines: list[str]) -> np.ndarray:
    """Render *lines* at the bottom-left of a copy of *image*."""
    out = image.copy()
    _draw_hud(out, lines, y_start=max(0, out.shape[0] - len(lines) * LINE_HEIGHT - 20))
    return out


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def shutter_label(seconds: float) -> str:
    if seconds <= 0:
        return "-"
    if seconds < 1.0:
        return f"1/{round(1.0 / seconds):d}"
    return f"{seconds:g}s"


def _draw_hud(
    image: np.ndarray,
    lines: list[str],
    y_start: int = 10,
) -> None:
    """Render text lines with a semi-transparent background strip."""
    if not lines:
        return

    max_width = max(
        cv2.getTextSize(line, FONT, FONT_SCALE, FONT_THICKNESS)[0][0]
        for line in lines
    )
    h = len(lines) * LINE_HEIGHT + 10
    w = max_width + 20

    overlay = image.copy()
    cv2.rectangle(overlay, (5, y_start), (5 + w, y_start + h), BG_DARK, -1)
    cv2.addWeighted(overlay, 0.65, image, 0.35, 0, image)

    for i, line in enumerate(lines):
        y = y_start + 20 + i * LINE_HEIGHT
        cv2.putText(image, line, (10, y), FONT, FONT_SCALE, WHITE, FONT_THICKNESS)
