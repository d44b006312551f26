# noise_texture/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the noise
texture generator. These values are used if they are not explicitly provided
by the user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC TEXTURE.
Instead, pass a configuration dictionary to the NoiseTextureGenerator instance.
================================================================================
"""

# --- Seed ---
# None means "draw a fresh seed from OS entropy". The drawn seed is logged and
# written to the generation config so the texture can be reproduced.
DEFAULT_SEED = None
SEED_MIN = -(2 ** 31)
SEED_MAX = 2 ** 31 - 1

# --- Permutation Table ---
# 256 unique shuffled values, stored twice so p[p[x] + y] never wraps.
PERMUTATION_SIZE = 256
TABLE_SIZE = PERMUTATION_SIZE * 2
# Lattice coordinates are masked with this before indexing the table.
LATTICE_MASK = PERMUTATION_SIZE - 1

# --- Grid ---
# The grid is square: GRID_SIZE x GRID_SIZE pixels.
DEFAULT_GRID_SIZE = 500

# --- Fractal (fBm) Settings ---
DEFAULT_OCTAVES = 3
# Sample spacing of the first octave. 0.005 means one lattice cell spans
# 200 pixels.
DEFAULT_BASE_FREQUENCY = 0.005
DEFAULT_BASE_AMPLITUDE = 1.0
# Applied after every octave.
DEFAULT_FREQUENCY_GROWTH = 2.0
DEFAULT_AMPLITUDE_DECAY = 0.5
# Contrast boost applied to the summed octaves before clamping to [-1, 1].
DEFAULT_FINAL_GAIN = 1.2

# --- Pixel Output ---
CHANNELS = 4  # RGBA
ALPHA_OPAQUE = 255
COLOR_MAX = 255

# --- Texture Export ---
DEFAULT_TEXTURE_NAME = "NoiseTexture"
DEFAULT_OUTPUT_DIR = "baked_textures"
GENERATION_CONFIG_FILENAME = "generation_config.json"
