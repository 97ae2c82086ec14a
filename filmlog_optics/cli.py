"""Command-line argument parsing for filmlog-optics."""

import argparse
from pathlib import Path

from . import constants


def _add_geometry_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--film",
        default=None,
        help=f"Film format label (default from config, e.g. '{constants.DEFAULT_FILM_LABEL}')",
    )
    parser.add_argument(
        "--focal",
        type=float,
        default=None,
        help="Lens focal length in mm (default from config)",
    )
    parser.add_argument(
        "--aspect",
        default=None,
        help="Output aspect ratio label, e.g. 16:9 or 2.39 ('-' = film default)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=None,
        help="Device horizontal field of view in degrees (default from config)",
    )


def _add_exposure_args(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--fstop", type=float, required=required, help="Simulated aperture (f-number)")
    parser.add_argument("--iso", type=float, required=required, help="Film speed (ISO)")
    parser.add_argument("--shutter", required=required, help="Shutter, e.g. 1/125 or 2")
    parser.add_argument(
        "--compensation",
        type=float,
        default=0.0,
        help="Exposure compensation in stops",
    )
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        dest="filters",
        help="Colour or ND filter label (repeatable), e.g. 85 or 'ND 0.6'",
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="filmlog-optics",
        description="Film viewfinder optics: exposure resolution, frame projection, depth of field",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to optics_config.json (built-in defaults if omitted and none found)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    exposure = sub.add_parser("exposure", help="Resolve device ISO/shutter for a film exposure")
    _add_exposure_args(exposure, required=True)

    project = sub.add_parser("project", help="Project a film frame onto a surface")
    project.add_argument("--width", type=float, required=True, help="Surface width in pixels")
    project.add_argument("--height", type=float, required=True, help="Surface height in pixels")
    project.add_argument(
        "--rotated",
        action="store_true",
        help="Surface is given in portrait (rotated) orientation",
    )
    _add_geometry_args(project)

    dof = sub.add_parser("dof", help="Depth of field and hyperfocal distance")
    dof.add_argument("--focal", type=float, required=True, help="Focal length in mm")
    dof.add_argument("--aperture", type=float, required=True, help="Aperture (f-number)")
    dof.add_argument("--distance", type=float, required=True, help="Focus distance in mm")
    dof.add_argument(
        "--coc",
        type=float,
        default=None,
        help="Circle of confusion in mm (default: derived from --film)",
    )
    dof.add_argument("--film", default=None, help="Film format label for the circle of confusion")

    for name, help_text in (
        ("crop", "Crop a captured still to the projected film frame"),
        ("overlay", "Draw the film frame mask and HUD on a preview image"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("image", type=Path, help="Input image")
        p.add_argument("output", type=Path, help="Output image")
        _add_geometry_args(p)
        if name == "crop":
            p.add_argument(
                "--full-frame",
                action="store_true",
                help="Crop to the full film frame instead of the aspect crop",
            )
        else:
            # HUD shows exposure with --fstop/--iso/--shutter, focus with --fstop/--distance
            _add_exposure_args(p, required=False)
            p.add_argument(
                "--distance",
                type=float,
                default=None,
                help="Focus distance in mm for the depth-of-field HUD line",
            )

    init = sub.add_parser("init-config", help="Write the default configuration file")
    init.add_argument("path", type=Path, nargs="?", default=None, help="Destination (default ~/.filmlog/config)")

    return parser.parse_args(argv)
