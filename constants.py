"""
Shared tuning values for the weather simulation.

This module defines constants used throughout the project, such as the size
of the rain volume, cloud placement bands and the time-of-day buckets.
Keeping these values in one place makes it easy to tweak the look and feel of
the weather without hunting through the simulation code.  Values that users
are expected to change at runtime live in :mod:`settings` instead.
"""

import math

# Frames per second of the headless demo loop
FPS = 30

# Default transition length for ``set_weather`` (seconds)
DEFAULT_TRANSITION = 5.0

# ---------------------------------------------------------------------------
# Clouds
# ---------------------------------------------------------------------------
# Horizontal half extent of the cloud layer around the origin
CLOUD_FIELD_EXTENT = 1000.0
# Base population height band
CLOUD_BASE_HEIGHT = (500.0, 700.0)
# Clouds drifting further than this from the origin wrap to the opposite side
CLOUD_MAX_DISTANCE = 1500.0
# Drift speed range for base clouds
CLOUD_SPEED_RANGE = (0.05, 0.15)
# Number of sub shapes per cloud unit, inclusive
CLOUD_PUFFS = (5, 9)
# Radius range of each sub shape
CLOUD_PUFF_RADIUS = (20.0, 50.0)
# Random offset of sub shapes around the unit centre (x, y, z)
CLOUD_PUFF_OFFSET = (40.0, 20.0, 40.0)
# Upper bound on clouds a single weather burst may add
MAX_TRANSIENT_PER_BURST = 30

# Cloud base colour and the dark tint used for storms
CLOUD_WHITE = (255, 255, 255)
CLOUD_GREY = (0xCF, 0xCF, 0xCF)
CLOUD_DARK = (0x66, 0x66, 0x66)

# ---------------------------------------------------------------------------
# Rain
# ---------------------------------------------------------------------------
RAIN_AREA_WIDTH = 2000.0
RAIN_AREA_HEIGHT = 1000.0
RAIN_AREA_DEPTH = 2000.0
# Fall speed without rain intensity
RAIN_BASE_SPEED = -10.0
# Extra fall speed at full intensity
RAIN_SPEED_BOOST = -10.0
# Full range of per drop velocity jitter (horizontal, vertical)
RAIN_JITTER_XZ = 2.0
RAIN_JITTER_Y = 5.0
# Drop size range
RAIN_DROP_SIZE = (2.0, 5.0)
# Opacity at full intensity
RAIN_MAX_OPACITY = 0.6
# Drops below this height are recycled to the top of the volume
RAIN_GROUND_THRESHOLD = -10.0
# Height of the fade bands at the top and bottom of the volume
RAIN_TOP_FADE = 100.0
RAIN_BOTTOM_FADE = 100.0
# Accumulated time after which the field is regenerated
RAIN_TIME_LIMIT = 1000.0

# ---------------------------------------------------------------------------
# Ground
# ---------------------------------------------------------------------------
GROUND_SIZE = 2000.0
PUDDLE_SIZE = (20.0, 50.0)
PUDDLE_MAX_ACCUMULATION = (0.7, 1.0)
PUDDLE_DRYING_RATE = (0.05, 0.15)
# Puddles sit slightly above the ground plane to avoid z-fighting
PUDDLE_LIFT = 0.1
# Rate at which puddles fill relative to rain intensity
PUDDLE_FILL_RATE = 0.5
# Exposure (rain intensity x seconds) needed to spawn a puddle
PUDDLE_EXPOSURE_THRESHOLD = 1.0
# Wet ground material
WET_ROUGHNESS = 0.1
WET_METALNESS = 0.3
WET_NORMAL_SCALE = 0.2
# Friction modifier range
FRICTION_MIN = 0.3
FRICTION_MAX = 1.0
FRICTION_RAIN_FACTOR = 0.5

# ---------------------------------------------------------------------------
# Fog
# ---------------------------------------------------------------------------
FOG_NEAR = 100.0
FOG_NEAR_RANGE = 400.0
FOG_FAR = 1000.0
FOG_FAR_RANGE = 500.0

# ---------------------------------------------------------------------------
# Time of day (hours)
# ---------------------------------------------------------------------------
# Fog and clouds are halved in this window so the stars stay visible
DAWN_WINDOW = (4.5, 6.0)
DAWN_HOURS = (5.0, 7.0)
DAY_HOURS = (7.0, 17.0)
DUSK_HOURS = (17.0, 19.0)

FOG_COLOURS = {
    "dawn": (0xFF, 0xB7, 0x4D),
    "day": (0xCF, 0xCF, 0xCF),
    "dusk": (0xFF, 0x98, 0x00),
    "night": (0x22, 0x22, 0x22),
}
CLOUD_EMISSIVE = {
    "dawn": (0x55, 0x22, 0x11),
    "day": (0x00, 0x00, 0x00),
    "dusk": (0x55, 0x22, 0x11),
    "night": (0x22, 0x22, 0x22),
}

# ---------------------------------------------------------------------------
# Storm wind
# ---------------------------------------------------------------------------
STORM_WIND_SPEED = (5.0, 15.0)
STORM_WIND_ANGLE = (0.0, 2 * math.pi)
