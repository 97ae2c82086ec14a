"""Tests for frame projection, aspect cropping and overflow compositing."""

import math

import numpy as np
import pytest

from filmlog_optics import projection
from filmlog_optics.projection import OpticalGeometry, SurfaceSize


def _geometry(**overrides) -> OpticalGeometry:
    values = dict(
        focal_length_mm=50.0,
        film_width_mm=36.0,
        film_aspect_ratio=1.5,
        device_horizontal_fov_degrees=60.0,
        desired_aspect_ratio=0.0,
    )
    values.update(overrides)
    return OpticalGeometry(**values)


def _matching_fov(film_width_mm: float, focal_length_mm: float, ratio: float = 1.0) -> float:
    """Device FOV at which the film frame spans *ratio* of the surface width."""
    half_tan = film_width_mm / (2.0 * focal_length_mm) / ratio
    return math.degrees(2.0 * math.atan(half_tan))


class TestSurfaceSize:
    def test_rotate_swaps_axes_and_flips_tag(self):
        portrait = SurfaceSize(1000, 1500, rotated=True)
        native = portrait.rotate()
        assert (native.width, native.height, native.rotated) == (1500, 1000, False)
        assert native.rotate() == portrait

    def test_native_only_rotates_tagged_surfaces(self):
        assert SurfaceSize(1000, 1500, rotated=True).native() == SurfaceSize(1500, 1000)
        assert SurfaceSize(1500, 1000).native() == SurfaceSize(1500, 1000)

    def test_empty(self):
        assert projection.ZERO_SIZE.is_empty
        assert SurfaceSize(0, 100).is_empty
        assert not SurfaceSize(1, 1).is_empty

    def test_exceeds(self):
        surface = SurfaceSize(1000, 800)
        assert SurfaceSize(1001, 10).exceeds(surface)
        assert SurfaceSize(10, 801).exceeds(surface)
        assert not SurfaceSize(1000, 800).exceeds(surface)


class TestProject:
    def test_reference_projection(self):
        """50mm on 35mm film, 60 degree device, 1000x1500 surface."""
        frame = projection.project(_geometry(), SurfaceSize(1000, 1500))
        full = frame.full_frame

        expected_width = 1000 * (0.36 / math.tan(math.radians(30)))
        assert full.width == pytest.approx(expected_width)
        assert full.aspect == pytest.approx(1.5)
        assert math.isfinite(full.width) and full.width > 0
        assert math.isfinite(full.height) and full.height > 0

    def test_matching_fov_fills_surface_width(self):
        fov = _matching_fov(36.0, 35.0)
        frame = projection.project(
            _geometry(focal_length_mm=35.0, device_horizontal_fov_degrees=fov),
            SurfaceSize(1920, 1080),
        )
        assert frame.full_frame.width == pytest.approx(1920)

    def test_longer_lens_gives_smaller_frame(self):
        surface = SurfaceSize(1920, 1080)
        wide = projection.project(_geometry(focal_length_mm=28), surface)
        tele = projection.project(_geometry(focal_length_mm=85), surface)
        assert tele.full_frame.width < wide.full_frame.width

    def test_scales_linearly_with_surface_width(self):
        small = projection.project(_geometry(), SurfaceSize(500, 500))
        large = projection.project(_geometry(), SurfaceSize(1000, 500))
        assert large.full_frame.width == pytest.approx(2 * small.full_frame.width)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"focal_length_mm": 0.0},
            {"focal_length_mm": -50.0},
            {"device_horizontal_fov_degrees": 0.0},
            {"device_horizontal_fov_degrees": -60.0},
            {"device_horizontal_fov_degrees": 200.0},
            {"device_horizontal_fov_degrees": float("nan")},
            {"film_aspect_ratio": 0.0},
            {"film_width_mm": 0.0},
        ],
    )
    def test_degenerate_geometry_gives_zero_sentinel(self, overrides):
        frame = projection.project(_geometry(**overrides), SurfaceSize(1000, 1500))
        assert frame == projection.EMPTY_FRAME
        assert frame.is_empty
        assert frame.full_frame.width == 0 and frame.full_frame.height == 0
        assert frame.aspect_cropped_frame.is_empty

    def test_zero_surface_gives_zero_sentinel(self):
        frame = projection.project(_geometry(), SurfaceSize(0, 0))
        assert frame.is_empty


class TestAspectCrop:
    def test_default_uses_film_aspect(self):
        frame = projection.project(_geometry(), SurfaceSize(1000, 1500))
        assert frame.aspect_cropped_frame.width == pytest.approx(frame.full_frame.width)
        assert frame.aspect_cropped_frame.height == pytest.approx(frame.full_frame.height)

    def test_wider_target_crops_height(self):
        frame = projection.project(_geometry(desired_aspect_ratio=2.39), SurfaceSize(1000, 1500))
        cropped = frame.aspect_cropped_frame
        assert cropped.width == pytest.approx(frame.full_frame.width)
        assert cropped.height < frame.full_frame.height
        assert cropped.aspect == pytest.approx(2.39, abs=1e-6)

    def test_narrower_target_crops_width(self):
        frame = projection.project(_geometry(desired_aspect_ratio=1.0), SurfaceSize(1000, 1500))
        cropped = frame.aspect_cropped_frame
        assert cropped.height == pytest.approx(frame.full_frame.height)
        assert cropped.width < frame.full_frame.width
        assert cropped.aspect == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("focal", [19, 35, 50, 135, 300])
    @pytest.mark.parametrize("target", [0.0, 1.0, 1.43, 1.5, 16 / 9, 2.39, 2.55])
    def test_crop_fits_and_matches_target(self, focal, target):
        geometry = _geometry(focal_length_mm=focal, desired_aspect_ratio=target)
        frame = projection.project(geometry, SurfaceSize(1920, 1080))
        full, cropped = frame.full_frame, frame.aspect_cropped_frame

        assert cropped.area <= full.area * (1 + 1e-12)
        assert cropped.width <= full.width * (1 + 1e-12)
        assert cropped.height <= full.height * (1 + 1e-12)
        assert cropped.aspect == pytest.approx(geometry.target_aspect_ratio, abs=1e-6)


class TestOverflow:
    def test_scale_is_one_when_frame_fits(self):
        assert projection.overflow_scale(SurfaceSize(800, 600), SurfaceSize(1000, 1000)) == 1.0

    def test_scale_uses_tighter_axis(self):
        scale = projection.overflow_scale(SurfaceSize(2000, 1000), SurfaceSize(1000, 800))
        assert scale == pytest.approx(0.5)

    def test_compose_centres_scaled_image_on_black(self):
        image = np.full((100, 200, 3), 255, dtype=np.uint8)
        composed = projection.compose_overflow(image, 0.5)

        assert composed.shape == image.shape
        assert composed[0, 0].tolist() == [0, 0, 0]
        assert composed[99, 199].tolist() == [0, 0, 0]
        assert composed[50, 100].tolist() == [255, 255, 255]
        # Scaled image occupies 100x50 centred at (50, 25)
        assert composed[25:75, 50:150].min() == 255
        assert composed[:, :49].max() == 0

    @pytest.mark.parametrize("scale", [0.0, -0.5, 1.5])
    def test_compose_rejects_invalid_scale(self, scale):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        with pytest.raises(ValueError, match="Overflow scale"):
            projection.compose_overflow(image, scale)


class TestCropRect:
    def test_centred(self):
        rect = projection.crop_rect(SurfaceSize(1000, 800), SurfaceSize(500, 400))
        assert rect == (250, 200, 500, 400)

    def test_clamped_to_container(self):
        rect = projection.crop_rect(SurfaceSize(1000, 800), SurfaceSize(1200, 900))
        assert rect == (0, 0, 1000, 800)


class TestCropCapture:
    def test_frame_within_capture(self):
        """FOV chosen so the film frame spans half the capture width."""
        image = np.full((1000, 1500, 3), 128, dtype=np.uint8)
        geometry = _geometry(device_horizontal_fov_degrees=_matching_fov(36.0, 50.0, ratio=0.5))

        cropped = projection.crop_capture(image, geometry)
        assert cropped is not None
        assert cropped.shape[1] == pytest.approx(750, abs=1)
        assert cropped.shape[0] == pytest.approx(500, abs=1)

    def test_aspect_crop_applied(self):
        image = np.full((1000, 1500, 3), 128, dtype=np.uint8)
        geometry = _geometry(
            device_horizontal_fov_degrees=_matching_fov(36.0, 50.0, ratio=0.5),
            desired_aspect_ratio=2.0,
        )
        cropped = projection.crop_capture(image, geometry)
        assert cropped.shape[1] == pytest.approx(750, abs=1)
        assert cropped.shape[0] == pytest.approx(375, abs=1)

        full = projection.crop_capture(image, geometry, aspect_cropped=False)
        assert full.shape[0] == pytest.approx(500, abs=1)

    def test_overflow_composites_onto_black_canvas(self):
        """A 24mm frame is wider than the device's 60 degree view."""
        image = np.full((1000, 1500, 3), 255, dtype=np.uint8)
        geometry = _geometry(focal_length_mm=24.0)

        frame = projection.project(geometry, SurfaceSize(1500, 1000))
        assert frame.full_frame.exceeds(SurfaceSize(1500, 1000))

        cropped = projection.crop_capture(image, geometry)
        assert cropped is not None
        assert cropped.shape[1] == pytest.approx(1500, abs=1)
        assert cropped.shape[0] == pytest.approx(1000, abs=1)
        # Border comes from the black canvas, centre from the capture
        assert cropped[0, 0].tolist() == [0, 0, 0]
        assert cropped[500, 750].tolist() == [255, 255, 255]

    def test_unprojectable_returns_none(self):
        image = np.zeros((100, 150, 3), dtype=np.uint8)
        assert projection.crop_capture(image, _geometry(focal_length_mm=0.0)) is None
