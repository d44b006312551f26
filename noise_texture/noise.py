# noise_texture/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides the 2D Perlin noise kernels: gradient selection, corner
dot products, the fade curve, interpolation and octave summation. It is
designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - p: The 512-entry permutation table (int array, see permutation.py).
    - x, y: Sample coordinates in lattice units.
    - octaves, base_frequency, base_amplitude, frequency_growth,
      amplitude_decay: Standard fBm parameters.
- Outputs:
    - Noise values. A single octave stays within [-1, 1]; octave sums may
      exceed that range and are clamped by the caller.
- Side Effects: None.
- Invariants: Lattice coordinates are masked into [0, 255] before every table
  lookup, so p[p[ix] + iy] is always a valid index for any integer lattice
  point, including negative ones.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS

# Pre-defined gradient vectors, indexed by (v & 3).
_GRADIENT_VECTORS = np.array([[1.0, 1.0], [-1.0, 1.0], [-1.0, -1.0], [1.0, -1.0]])
_LATTICE_MASK = DEFAULTS.LATTICE_MASK


@njit
def fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)


@njit
def lerp(t, a1, a2):
    "Linear interpolation. t is not clamped."
    return a1 + t * (a2 - a1)


@njit
def constant_vector(v):
    """Returns the gradient selected by the low two bits of v."""
    g = _GRADIENT_VECTORS[v & 3]
    # Use explicit indexing for Numba compatibility
    return g[0], g[1]


@njit
def dot_product(p, ix, iy, x, y):
    """
    Dot product between the gradient of lattice point (ix, iy) and the
    distance vector from that lattice point to (x, y).
    """
    gx, gy = constant_vector(p[p[ix & _LATTICE_MASK] + (iy & _LATTICE_MASK)])
    return gx * (x - ix) + gy * (y - iy)


@njit
def perlin(p, x, y):
    """Single octave of 2D gradient noise at (x, y)."""
    # Upper left corner of the cell
    lx = int(np.floor(x))
    ly = int(np.floor(y))

    # Bottom right corner of the cell
    rx = lx + 1
    ry = ly + 1

    wx = fade(x - lx)
    wy = fade(y - ly)

    # X first, then Y.
    top = lerp(wx, dot_product(p, lx, ly, x, y), dot_product(p, rx, ly, x, y))
    bottom = lerp(wx, dot_product(p, lx, ry, x, y), dot_product(p, rx, ry, x, y))

    return lerp(wy, top, bottom)


@njit
def fractal_value(p, x, y, octaves, base_frequency, base_amplitude,
                  frequency_growth, amplitude_decay):
    """Sums `octaves` layers of perlin() at growing frequency and decaying amplitude."""
    value = 0.0
    frequency = base_frequency
    amplitude = base_amplitude

    for _ in range(octaves):
        value += perlin(p, x * frequency, y * frequency) * amplitude
        frequency *= frequency_growth
        amplitude *= amplitude_decay

    return value


@njit
def accumulate_field(p, grid_size, octaves, base_frequency, base_amplitude,
                     frequency_growth, amplitude_decay, x_start, x_stop):
    """
    Evaluates fractal_value() for every pixel of the columns [x_start, x_stop).
    This function is JIT-compiled with Numba. The result is indexed [x, y],
    matching the x-outer / y-inner order of the pixel buffer.
    """
    values = np.zeros((x_stop - x_start, grid_size))

    for i in range(x_stop - x_start):
        x = float(x_start + i)
        for j in range(grid_size):
            values[i, j] = fractal_value(
                p, x, float(j), octaves, base_frequency, base_amplitude,
                frequency_growth, amplitude_decay
            )

    return values
