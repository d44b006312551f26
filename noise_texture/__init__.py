# noise_texture/__init__.py

# This file makes the 'noise_texture' directory a Python package.
# We can also use it to define the public API of the package.

from .permutation import PermutationTable, build_permutation_table
from .generator import (
    InvalidConfigurationError,
    NoiseTextureGenerator,
    generate_field,
)

__all__ = [
    "PermutationTable",
    "build_permutation_table",
    "InvalidConfigurationError",
    "NoiseTextureGenerator",
    "generate_field",
]
