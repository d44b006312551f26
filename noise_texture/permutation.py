# noise_texture/permutation.py

"""
================================================================================
PERMUTATION TABLE
================================================================================
This module builds the seeded permutation table that the noise kernels use to
pick pseudo-random gradients for each lattice point.

Data Contract:
---------------
- Inputs:
    - seed: A 32-bit integer. Negative values are accepted and reinterpreted
      as their unsigned 32-bit pattern.
- Outputs:
    - PermutationTable: 512 integers in [0, 255]. The first 256 are a
      permutation of 0..255, the last 256 are an exact copy of the first.
- Side Effects: None.
- Invariants: The same seed always yields the same table. The backing array
  is read-only, so one table can be shared between workers without locking.

Random Stream:
---------------
The shuffle is driven by NumPy's PCG64 bit generator, seeded directly with the
unsigned 32-bit seed. Each Fisher-Yates step draws j with
Generator.integers(0, z, endpoint=True).
================================================================================
"""

import numpy as np

from . import config as DEFAULTS


class PermutationTable:
    """An immutable, doubled permutation table."""

    def __init__(self, values: np.ndarray, seed: int):
        values = np.array(values, dtype=np.int64)
        values.flags.writeable = False
        self.values = values
        self.seed = seed

    def lookup(self, index: int) -> int:
        assert 0 <= index < DEFAULTS.TABLE_SIZE, f"Permutation index {index} out of range"
        return int(self.values[index])

    def __len__(self):
        return len(self.values)

    def __eq__(self, other):
        if not isinstance(other, PermutationTable):
            return NotImplemented
        return np.array_equal(self.values, other.values)

    def __repr__(self):
        return f"PermutationTable(seed={self.seed}, size={len(self.values)})"


def draw_seed() -> int:
    """Draws a fresh signed 32-bit seed from OS entropy."""
    rng = np.random.default_rng()
    return int(rng.integers(DEFAULTS.SEED_MIN, DEFAULTS.SEED_MAX, endpoint=True))


def build_permutation_table(seed: int) -> PermutationTable:
    """
    Shuffles 0..255 with a seeded Fisher-Yates pass and doubles the result.
    """
    rng = np.random.Generator(np.random.PCG64(seed & 0xFFFFFFFF))

    p = np.arange(DEFAULTS.PERMUTATION_SIZE, dtype=np.int64)
    for z in range(DEFAULTS.PERMUTATION_SIZE - 1, 0, -1):
        j = int(rng.integers(0, z, endpoint=True))
        p[z], p[j] = p[j], p[z]

    # Double the table for easy indexing
    return PermutationTable(np.concatenate([p, p]), seed)
