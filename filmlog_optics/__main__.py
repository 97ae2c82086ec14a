"""filmlog-optics entry point.

Usage:
    python3 -m filmlog_optics exposure --fstop 8 --iso 100 --shutter 1/125
    python3 -m filmlog_optics project --width 1920 --height 1080 --focal 35
    python3 -m filmlog_optics dof --focal 50 --aperture 8 --distance 3000
    python3 -m filmlog_optics crop capture.jpg framed.jpg --film "120 (6x7)" --focal 80
    python3 -m filmlog_optics overlay preview.png overlay.png --aspect 2.39 \
        --fstop 8 --iso 400 --shutter 1/125 --distance 3000
    python3 -m filmlog_optics init-config
"""

from __future__ import annotations

import argparse
import logging
import sys

import cv2

from . import (
    cli,
    config_manager,
    depth_of_field,
    display,
    exposure,
    formats,
    projection,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("filmlog-optics")


def _load_config(args: argparse.Namespace) -> dict:
    """Load the config file, or fall back to built-in defaults when none exists."""
    try:
        config_path = config_manager.resolve_config_path(args.config)
    except FileNotFoundError:
        logger.info("No optics config found, using built-in device defaults")
        return config_manager.default_config()

    config = config_manager.load_config(config_path)
    logger.info("Config loaded from %s", config_path)
    return config


def _film_label(args: argparse.Namespace, config: dict) -> str:
    if args.film is not None:
        return args.film
    return config_manager.get_defaults(config)["film_size"]


def _triad(args: argparse.Namespace) -> exposure.ExposureTriad:
    compensation = args.compensation + formats.filter_compensation(*args.filters)
    return exposure.ExposureTriad(
        fstop=args.fstop,
        film_speed_iso=args.iso,
        shutter_seconds=formats.shutter_seconds(args.shutter),
        compensation_stops=compensation,
    )


def _geometry(args: argparse.Namespace, config: dict) -> projection.OpticalGeometry:
    defaults = config_manager.get_defaults(config)
    film = _film_label(args, config)
    focal = args.focal if args.focal is not None else float(defaults["focal_length_mm"])
    aspect = args.aspect if args.aspect is not None else defaults["aspect_ratio"]
    fov = args.fov if args.fov is not None else config_manager.get_device_fov(config)
    return formats.geometry_for(film, focal, fov, aspect)


def _describe_geometry(geometry: projection.OpticalGeometry) -> str:
    return (
        f"{geometry.film_width_mm:g}mm gate  {geometry.focal_length_mm:g}mm lens  "
        f"aspect {geometry.target_aspect_ratio:.2f}"
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def run_exposure(args: argparse.Namespace, config: dict) -> int:
    triad = _triad(args)
    envelope = config_manager.get_device_envelope(config)
    offset = config_manager.get_calibration_offset(config)

    resolved = exposure.resolve(triad, envelope, offset)
    logger.info("Target EV %.2f (calibration offset %+.2f)", exposure.target_ev(triad, offset), offset)
    logger.info(
        "Device ISO %.1f, shutter %.6fs (%s)",
        resolved.applied_iso,
        resolved.applied_shutter_seconds,
        display.shutter_label(resolved.applied_shutter_seconds),
    )
    if resolved.flicker_risk:
        logger.warning(
            "Shutter faster than flicker threshold %.4fs at %d Hz mains",
            exposure.flicker_threshold(envelope.mains_frequency_hz),
            envelope.mains_frequency_hz,
        )
    return 0


def run_project(args: argparse.Namespace, config: dict) -> int:
    surface = projection.SurfaceSize(args.width, args.height, args.rotated)
    geometry = _geometry(args, config)
    frame = projection.project(geometry, surface.native())
    if frame.is_empty:
        logger.error("Cannot project %s", _describe_geometry(geometry))
        return 1

    full, cropped = frame.full_frame, frame.aspect_cropped_frame
    if args.rotated:
        full, cropped = full.rotate(), cropped.rotate()

    logger.info("%s", _describe_geometry(geometry))
    logger.info("Full frame: %.1f x %.1f px", full.width, full.height)
    logger.info("Aspect crop: %.1f x %.1f px", cropped.width, cropped.height)
    if frame.full_frame.exceeds(surface.native()):
        logger.info(
            "Frame overflows the surface (fit scale %.4f)",
            projection.overflow_scale(frame.full_frame, surface.native()),
        )
    return 0


def run_dof(args: argparse.Namespace, config: dict) -> int:
    if args.coc is not None:
        coc = args.coc
    else:
        coc = formats.film_size(_film_label(args, config)).circle_of_confusion

    result = depth_of_field.compute(args.focal, args.aperture, args.distance, coc)
    if not result.is_computable:
        logger.error("Depth of field not computable for these inputs")
        return 1

    fmt = depth_of_field.format_distance
    logger.info("Circle of confusion: %.4f mm", coc)
    logger.info("Near limit: %s  Far limit: %s", fmt(result.near_limit_mm), fmt(result.far_limit_mm))
    logger.info("Depth of field: %s", fmt(result.dof_mm))
    logger.info(
        "Hyperfocal: %s (near limit %s)",
        fmt(result.hyperfocal_mm),
        fmt(result.hyperfocal_near_limit_mm),
    )
    return 0


def run_crop(args: argparse.Namespace, config: dict) -> int:
    image = cv2.imread(str(args.image))
    if image is None:
        logger.error("Cannot read image %s", args.image)
        return 1

    geometry = _geometry(args, config)
    cropped = projection.crop_capture(image, geometry, aspect_cropped=not args.full_frame)
    if cropped is None:
        return 1

    cv2.imwrite(str(args.output), cropped)
    logger.info("Cropped %s -> %s (%dx%d)", args.image, args.output, cropped.shape[1], cropped.shape[0])
    return 0


def run_overlay(args: argparse.Namespace, config: dict) -> int:
    image = cv2.imread(str(args.image))
    if image is None:
        logger.error("Cannot read image %s", args.image)
        return 1

    geometry = _geometry(args, config)
    h, w = image.shape[:2]
    frame = projection.project(geometry, projection.SurfaceSize(w, h))
    if frame.is_empty:
        logger.warning("Cannot project %s, writing image without frame", _describe_geometry(geometry))

    lines = [_describe_geometry(geometry)]
    exposure_args = (args.fstop, args.iso, args.shutter)
    if all(v is not None for v in exposure_args):
        triad = _triad(args)
        resolved = exposure.resolve(
            triad,
            config_manager.get_device_envelope(config),
            config_manager.get_calibration_offset(config),
        )
        lines.extend(display.exposure_lines(triad, resolved))
    elif any(v is not None for v in exposure_args):
        logger.warning("Exposure HUD needs --fstop, --iso and --shutter together")

    if args.distance is not None:
        if args.fstop is None:
            logger.error("Depth-of-field HUD needs --fstop")
            return 1
        film = formats.film_size(_film_label(args, config))
        result = depth_of_field.compute_for_format(
            film, geometry.focal_length_mm, args.fstop, args.distance
        )
        lines.extend(display.depth_of_field_lines(result))

    out = display.draw_frame_overlay(image, frame)
    out = display.draw_hud(out, lines)
    cv2.imwrite(str(args.output), out)
    logger.info("Overlay written to %s", args.output)
    return 0


def run_init_config(args: argparse.Namespace) -> int:
    path = args.path if args.path is not None else config_manager.default_config_path()
    backup = config_manager.save_config(config_manager.default_config(), path)
    logger.info("Default config written to %s", path)
    if backup is not None:
        logger.info("Previous config backed up to %s", backup)
    return 0


_COMMANDS = {
    "exposure": run_exposure,
    "project": run_project,
    "dof": run_dof,
    "crop": run_crop,
    "overlay": run_overlay,
}


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    args = cli.parse_args(argv)

    if args.command == "init-config":
        return run_init_config(args)

    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        logger.error("Failed to load config: %s", e)
        return 1

    try:
        return _COMMANDS[args.command](args, config)
    except ValueError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
