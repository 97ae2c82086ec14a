"""Optical and exposure constants for filmlog cameras.

Film gate sizes are the camera aperture dimensions (mm) used by the viewfinder
simulation. Cine formats list the 4-perf / 3-perf projection gates.
"""

# Default film format: 135 full frame (mm)
DEFAULT_FILM_LABEL = "135 (35mm)"
DEFAULT_FILM_WIDTH_MM = 36.0
DEFAULT_FILM_HEIGHT_MM = 24.0

# Circle of confusion = format diagonal / 1442 (Zeiss-style d/1442 criterion)
COC_DIAGONAL_DIVISOR = 1442.0

# Reference film speed for EV computations
REFERENCE_ISO = 100.0

# Floor for the preferred flicker-safe shutter (seconds)
PREFERRED_SHUTTER_SECONDS = 1.0 / 100.0

# Mains frequencies (Hz) supported for flicker avoidance
MAINS_FREQUENCIES_HZ = (50, 60)

# Distances above this are displayed as infinity (mm)
INFINITY_DISPLAY_THRESHOLD_MM = 1_000_000.0

# Default device exposure envelope (typical phone wide camera)
DEVICE_MIN_ISO = 50.0
DEVICE_MAX_ISO = 3200.0
DEVICE_MIN_SHUTTER_SECONDS = 1.0 / 8000.0
DEVICE_MAX_SHUTTER_SECONDS = 1.0
DEVICE_PHYSICAL_APERTURE = 1.8
DEVICE_MAINS_FREQUENCY_HZ = 50
DEVICE_HORIZONTAL_FOV_DEG = 69.4

# Opaque exposure bias of the preview rendering pipeline (stops)
DEFAULT_CALIBRATION_OFFSET_STOPS = 0.0

# (label, width_mm, height_mm)
FILM_SIZES = [
    ("135 (35mm)", 36.0, 24.0),
    ("120 (6x6)", 60.0, 60.0),
    ("120 (6x7)", 70.0, 60.0),
    ("120 (6x9)", 90.0, 60.0),
    ("Large Format (4x5)", 127.0, 101.6),
    ("35mm Academy (4-perf)", 21.95, 16.00),
    ("35mm Full Aperture (Silent)", 24.89, 18.66),
    ("Super 35 (4-perf)", 24.89, 18.66),
    ("Super 35 (3-perf)", 24.89, 13.87),
    ("Techniscope (2-perf)", 22.00, 9.47),
    ("70mm (5-perf)", 48.56, 22.10),
    ("IMAX 70mm (15-perf)", 70.41, 52.63),
    ("Alexa Mini / Classic (Open Gate)", 28.17, 18.13),
    ("Alexa Mini / Classic (16:9)", 23.76, 13.37),
    ("Alexa Mini / Classic (4:3)", 23.76, 17.82),
    ("Alexa LF (Open Gate)", 36.70, 25.54),
    ("Alexa LF (16:9)", 31.68, 17.82),
    ("Alexa 65 (Open Gate)", 54.12, 25.58),
]

# (label, ratio); 0.0 means "use the film format's own ratio"
ASPECT_RATIOS = [
    ("-", 0.0),
    ("3:2", 3.0 / 2.0),
    ("16:9", 16.0 / 9.0),
    ("2.0", 2.0),
    ("2.35", 2.35),
    ("2.39", 2.39),
    ("2.55", 2.55),
    ("1.43", 1.43),
    ("1.90", 1.90),
]

# (label, seconds)
SHUTTER_SPEEDS = [
    ("1/1000", 1.0 / 1000),
    ("1/500", 1.0 / 500),
    ("1/250", 1.0 / 250),
    ("1/125", 1.0 / 125),
    ("1/60", 1.0 / 60),
    ("1/50", 1.0 / 50),
    ("1/30", 1.0 / 30),
    ("1/15", 1.0 / 15),
    ("1/8", 1.0 / 8),
    ("1/4", 1.0 / 4),
    ("1/2", 1.0 / 2),
    ("1", 1.0),
    ("2", 2.0),
    ("4", 4.0),
]

# (label, exposure compensation in stops); filter factors expressed as
# negative stops because they remove light
FILTERS = [
    ("-", 0.0),
    ("81A", -1.0 / 3.0),
    ("81EF", -2.0 / 3.0),
    ("85", -2.0 / 3.0),
    ("85B", -2.0 / 3.0),
    ("80A", -2.0),
    ("80B", -5.0 / 3.0),
    ("82A", -1.0 / 3.0),
    ("ND 0.3", -1.0),
    ("ND 0.6", -2.0),
    ("ND 0.9", -3.0),
    ("ND 1.2", -4.0),
    ("ND 1.8", -6.0),
    ("ND 3.0", -10.0),
]
