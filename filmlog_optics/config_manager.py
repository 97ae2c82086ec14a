"""Read/write the optics_config.json used by the viewfinder simulation.

The file holds the capture device's exposure envelope and field of view, the
preview pipeline's calibration offset, and the default lens/format selection.
Every save first writes a timestamped backup of the previous file.
"""

import json
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from . import constants
from .exposure import DeviceExposureEnvelope, validate_envelope

CONFIG_ENV_VAR = "FILMLOG_OPTICS_CONFIG"


def default_config() -> dict:
    """Config populated with the built-in device defaults."""
    return {
        "device": {
            "min_iso": constants.DEVICE_MIN_ISO,
            "max_iso": constants.DEVICE_MAX_ISO,
            "min_shutter_seconds": constants.DEVICE_MIN_SHUTTER_SECONDS,
            "max_shutter_seconds": constants.DEVICE_MAX_SHUTTER_SECONDS,
            "physical_aperture": constants.DEVICE_PHYSICAL_APERTURE,
            "mains_frequency_hz": constants.DEVICE_MAINS_FREQUENCY_HZ,
            "horizontal_fov_degrees": constants.DEVICE_HORIZONTAL_FOV_DEG,
        },
        "exposure": {
            "calibration_offset_stops": constants.DEFAULT_CALIBRATION_OFFSET_STOPS,
        },
        "defaults": {
            "film_size": constants.DEFAULT_FILM_LABEL,
            "focal_length_mm": 50.0,
            "aspect_ratio": "-",
            "circle_of_confusion_mm": None,
        },
    }


def load_config(path: Path) -> dict:
    with open(path, "r") as f:
        return json.load(f)


def save_config(config: dict, path: Path) -> Path | None:
    """Write config to *path*, backing up any existing file first.

    Returns the backup path, or None when there was nothing to back up.
    """
    backup_path = _create_backup(path) if path.exists() else None
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=4)
        f.write("\n")
    return backup_path


def _create_backup(path: Path) -> Path:
    """Copy *path* to <path>_BACKUP_<timestamp>.json."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup = Path(f"{path}_BACKUP_{timestamp}.json")
    shutil.copy2(path, backup)
    return backup


def default_config_path() -> Path:
    return Path.home() / ".filmlog" / "config" / "optics_config.json"


def resolve_config_path(explicit: Path | None) -> Path:
    """Resolve the config file path.

    Priority: explicit argument > $FILMLOG_OPTICS_CONFIG >
    ~/.filmlog/config/optics_config.json.
    """
    if explicit is not None:
        return explicit.resolve()

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser().resolve()

    candidate = default_config_path()
    if candidate.exists():
        return candidate.resolve()

    raise FileNotFoundError(
        f"Cannot find optics config at {candidate}. "
        "Run 'filmlog-optics init-config' or pass --config."
    )


# ---------------------------------------------------------------------------
# Device envelope
# ---------------------------------------------------------------------------

def _section(config: dict, name: str) -> dict:
    try:
        return config[name]
    except KeyError:
        raise ValueError(f"Config is missing the '{name}' section") from None


def get_device_envelope(config: dict) -> DeviceExposureEnvelope:
    """Build and validate the device envelope stored in *config*."""
    device = _section(config, "device")
    try:
        envelope = DeviceExposureEnvelope(
            min_iso=float(device["min_iso"]),
            max_iso=float(device["max_iso"]),
            min_shutter_seconds=float(device["min_shutter_seconds"]),
            max_shutter_seconds=float(device["max_shutter_seconds"]),
            physical_aperture=float(device["physical_aperture"]),
            mains_frequency_hz=int(device.get("mains_frequency_hz", constants.DEVICE_MAINS_FREQUENCY_HZ)),
        )
    except KeyError as e:
        raise ValueError(f"Config device section is missing {e}") from None
    validate_envelope(envelope)
    return envelope


def set_device_envelope(config: dict, envelope: DeviceExposureEnvelope) -> None:
    validate_envelope(envelope)
    device = config.setdefault("device", {})
    device.update({
        "min_iso": envelope.min_iso,
        "max_iso": envelope.max_iso,
        "min_shutter_seconds": envelope.min_shutter_seconds,
        "max_shutter_seconds": envelope.max_shutter_seconds,
        "physical_aperture": envelope.physical_aperture,
        "mains_frequency_hz": envelope.mains_frequency_hz,
    })


def get_device_fov(config: dict) -> float:
    device = _section(config, "device")
    return float(device.get("horizontal_fov_degrees", constants.DEVICE_HORIZONTAL_FOV_DEG))


def set_device_fov(config: dict, fov_degrees: float) -> None:
    config.setdefault("device", {})["horizontal_fov_degrees"] = float(fov_degrees)


# ---------------------------------------------------------------------------
# Exposure calibration and defaults
# ---------------------------------------------------------------------------

def get_calibration_offset(config: dict) -> float:
    exposure = config.get("exposure", {})
    return float(exposure.get("calibration_offset_stops", constants.DEFAULT_CALIBRATION_OFFSET_STOPS))


def set_calibration_offset(config: dict, offset_stops: float) -> None:
    config.setdefault("exposure", {})["calibration_offset_stops"] = float(offset_stops)


def get_defaults(config: dict) -> dict[str, Any]:
    """Default lens/format selection, filled in from built-ins where absent."""
    merged = dict(default_config()["defaults"])
    merged.update(config.get("defaults", {}))
    return merged
