# constants.py

"""
Application Constants

This module defines static configuration values for the visualizer.
These are not expected to change between runs; live-tunable values
live in config.json instead.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Window dimensions (initial; the window is resizable)
WIDTH = 1440  # Pixels
HEIGHT = 900  # Pixels

# Framerate
FPS = 60  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
RED = (255, 0, 0)

# Window Title
TITLE = "dotwave"

# --- Sampling ---
# Hard ceiling on the number of particles produced by a build.
MAX_PARTICLES = 500

# Base size of a particle as a fraction of the requested dot size.
BASE_SIZE_FACTOR = 0.7

# Initial jitter applied around the rest position.
POSITION_JITTER = 5.0  # Pixels
VELOCITY_JITTER = 0.5  # Pixels per tick

# Per-particle noise seeds are drawn from [0, NOISE_SEED_RANGE).
NOISE_SEED_RANGE = 1000.0

# Tone mapping (Y2K grade): green is scaled and capped, alpha floors at a minimum.
GREEN_SCALE = 0.6
GREEN_CAP = 180
ALPHA_MIN = 0.3
ALPHA_MAX = 1.0

# --- Forces ---
AUDIO_INPUT_MAX = 255.0  # Nominal top of the bass energy range.
AUDIO_FORCE_MAX = 2.2    # Audio force at full bass energy.

NOISE_TIME_SCALE = 0.01  # Noise time advanced per tick.
NOISE_Y_OFFSET = 100.0   # Decorrelates the y-axis noise lane from the x-axis lane.
NOISE_GAIN = 0.45        # Multiplied with chaos strength.

SPRING_STIFFNESS = 0.08

MOUSE_RADIUS = 120.0  # Pixels
MOUSE_FORCE = 3.0
DISTANCE_EPSILON = 0.0001

DAMPING = 0.88

# Render size = base_size * (SIZE_BASE + SIZE_AUDIO_GAIN * audio_force)
SIZE_BASE = 0.5
SIZE_AUDIO_GAIN = 2.8

# --- Noise lattice ---
NOISE_TABLE_SIZE = 4096  # Must be a power of two.
NOISE_OCTAVES = 4
NOISE_FALLOFF = 0.5

# --- Audio analysis ---
FFT_SIZE = 2048            # Samples per analysis window; 1024 frequency bins.
FFT_SMOOTHING = 0.8        # Temporal smoothing between consecutive spectra.
FFT_MIN_DB = -100.0        # Maps to energy 0.
FFT_MAX_DB = -30.0         # Maps to energy 255.
BASS_BAND = (20.0, 140.0)  # Hz

# --- Rendering ---
RECT_CORNER_RADIUS = 2  # Pixels

# Bloom effect settings
BLOOM_RADIUS = 12 # Downscale factor of the glow pass. Larger is more diffuse.
BLOOM_INTENSITY = 60 # The brightness of the glow (0-255).

# Diagnostics are logged every N ticks.
LOG_EVERY_TICKS = 100
