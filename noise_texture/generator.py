# noise_texture/generator.py

"""
================================================================================
CORE NOISE TEXTURE GENERATOR
================================================================================
This module contains the NoiseTextureGenerator class, responsible for turning a
seed and a set of fBm parameters into a flat RGBA8 grayscale pixel buffer.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of noise parameters which can override the
      internal defaults. Expected keys include 'seed', 'grid_size', 'octaves'.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - generate_values(): raw fBm values, float array indexed [x, y].
    - generate_pixels(): flat uint8 array of length grid_size * grid_size * 4,
      laid out x-outer / y-inner with (c, c, c, 255) per pixel.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is
  byte-identical, regardless of the number of worker processes.
================================================================================
"""

import logging
import math
import multiprocessing
import os
import time

import numpy as np
from tqdm import tqdm

from . import config as DEFAULTS
from . import noise
from .permutation import PermutationTable, build_permutation_table, draw_seed


class InvalidConfigurationError(ValueError):
    """Raised when noise parameters are rejected before generation starts."""


def resolve_settings(user_config: dict) -> dict:
    """Consolidates a user configuration with the internal defaults."""
    return {
        'seed': user_config.get('seed', DEFAULTS.DEFAULT_SEED),
        'grid_size': user_config.get('grid_size', DEFAULTS.DEFAULT_GRID_SIZE),
        'octaves': user_config.get('octaves', DEFAULTS.DEFAULT_OCTAVES),
        'base_frequency': user_config.get('base_frequency', DEFAULTS.DEFAULT_BASE_FREQUENCY),
        'base_amplitude': user_config.get('base_amplitude', DEFAULTS.DEFAULT_BASE_AMPLITUDE),
        'frequency_growth': user_config.get('frequency_growth', DEFAULTS.DEFAULT_FREQUENCY_GROWTH),
        'amplitude_decay': user_config.get('amplitude_decay', DEFAULTS.DEFAULT_AMPLITUDE_DECAY),
        'final_gain': user_config.get('final_gain', DEFAULTS.DEFAULT_FINAL_GAIN),
    }


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


def validate_settings(settings: dict) -> None:
    """
    Rejects invalid parameters up front so no partial buffer is ever produced.
    Raises InvalidConfigurationError on the first problem found.
    """
    seed = settings['seed']
    if seed is not None:
        if not _is_int(seed):
            raise InvalidConfigurationError(f"seed must be an integer, got {seed!r}")
        if not DEFAULTS.SEED_MIN <= seed <= DEFAULTS.SEED_MAX:
            raise InvalidConfigurationError(f"seed must fit in 32 bits, got {seed}")

    for key in ('grid_size', 'octaves'):
        value = settings[key]
        if not _is_int(value) or value <= 0:
            raise InvalidConfigurationError(f"{key} must be a positive integer, got {value!r}")

    for key in ('base_frequency', 'base_amplitude', 'frequency_growth', 'amplitude_decay', 'final_gain'):
        value = settings[key]
        if not _is_real(value) or not math.isfinite(value):
            raise InvalidConfigurationError(f"{key} must be a finite number, got {value!r}")

    if settings['base_frequency'] <= 0:
        raise InvalidConfigurationError(f"base_frequency must be positive, got {settings['base_frequency']}")
    if settings['base_amplitude'] <= 0:
        raise InvalidConfigurationError(f"base_amplitude must be positive, got {settings['base_amplitude']}")
    if not 0 < settings['amplitude_decay'] <= 1:
        raise InvalidConfigurationError(f"amplitude_decay must be in (0, 1], got {settings['amplitude_decay']}")
    if settings['frequency_growth'] < 1:
        raise InvalidConfigurationError(f"frequency_growth must be >= 1, got {settings['frequency_growth']}")


def coerce_settings(settings: dict) -> None:
    """
    Converts validated NumPy scalars to plain Python numbers in place, so the
    settings dict can always be written as JSON.
    """
    for key in ('seed', 'grid_size', 'octaves'):
        if settings[key] is not None:
            settings[key] = int(settings[key])
    for key in ('base_frequency', 'base_amplitude', 'frequency_growth', 'amplitude_decay', 'final_gain'):
        settings[key] = float(settings[key])


def normalize_to_bytes(values: np.ndarray, gain: float) -> np.ndarray:
    """
    Applies the final gain, saturates to [-1, 1] and maps to [0, 255].
    The conversion truncates rather than rounds.
    """
    clamped = np.clip(values * gain, -1.0, 1.0)
    return ((clamped + 1.0) * 0.5 * DEFAULTS.COLOR_MAX).astype(np.uint8)


def pack_grayscale_rgba(colors: np.ndarray) -> np.ndarray:
    """Expands a 2D array of gray levels into a flat (c, c, c, 255) buffer."""
    rgba = np.empty(colors.shape + (DEFAULTS.CHANNELS,), dtype=np.uint8)
    rgba[..., :3] = colors[..., np.newaxis]
    rgba[..., 3] = DEFAULTS.ALPHA_OPAQUE
    return rgba.ravel()


def split_bands(grid_size: int, num_bands: int) -> list:
    """Splits the x axis into contiguous, non-overlapping [start, stop) bands."""
    num_bands = max(1, min(num_bands, grid_size))
    edges = np.linspace(0, grid_size, num_bands + 1).astype(int)
    return [(int(edges[i]), int(edges[i + 1])) for i in range(num_bands)]


# In-process runs still use several bands so the progress bar advances.
SEQUENTIAL_BANDS = 16

# --- Global variables for worker processes ---
worker_table = None
worker_settings = {}


def init_worker(table_values, settings):
    """Initializes the global state for each worker process."""
    global worker_table, worker_settings
    worker_table = table_values
    worker_settings = settings
    logging.getLogger(f"Worker-{os.getpid()}").debug("Worker received permutation table.")


def _evaluate_band(p, settings, band):
    x_start, x_stop = band
    return noise.accumulate_field(
        p,
        settings['grid_size'],
        settings['octaves'],
        float(settings['base_frequency']),
        float(settings['base_amplitude']),
        float(settings['frequency_growth']),
        float(settings['amplitude_decay']),
        x_start,
        x_stop,
    )


def process_band(band):
    """Evaluates one band inside a worker. Returns the band and its raw values."""
    return band, _evaluate_band(worker_table, worker_settings, band)


class NoiseTextureGenerator:
    """
    Generates the pixel data for a seeded, multi-octave Perlin noise texture.
    This class is backend-only and does not handle any texture persistence.
    """
    def __init__(self, config: dict, logger: logging.Logger, permutation_table: PermutationTable = None):
        """
        Initializes the noise texture generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            permutation_table (PermutationTable, optional): A pre-built table.
                If None, one will be generated from the seed.

        Raises:
            InvalidConfigurationError: If any parameter is out of range.
        """
        self.logger = logger
        self.user_config = config

        # --- Consolidate Configuration ---
        self.settings = resolve_settings(self.user_config)
        if permutation_table is not None:
            if self.settings['seed'] is None:
                self.settings['seed'] = permutation_table.seed
            elif self.settings['seed'] != permutation_table.seed:
                raise InvalidConfigurationError(
                    f"seed {self.settings['seed']} does not match the injected "
                    f"permutation table's seed {permutation_table.seed}"
                )
        validate_settings(self.settings)
        coerce_settings(self.settings)

        if self.settings['seed'] is None:
            self.settings['seed'] = draw_seed()
            self.logger.info("No seed provided, drew a random one.")

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.grid_size = self.settings['grid_size']

        # --- Initialize Noise ---
        if permutation_table is not None:
            self.permutation_table = permutation_table
            self.logger.debug("Initialized with injected permutation table.")
        else:
            self.logger.debug("No permutation table provided, generating new one from seed.")
            self.permutation_table = build_permutation_table(self.seed)

        self.logger.info(f"NoiseTextureGenerator initialized with seed: {self.seed}")
        self.logger.info(
            f"Texture: {self.grid_size}x{self.grid_size} pixels, "
            f"{self.settings['octaves']} octave(s), base frequency {self.settings['base_frequency']}"
        )

    def generate_values(self, workers: int = 1, progress: bool = False) -> np.ndarray:
        """
        Returns the raw fBm values (before gain and clamping), indexed [x, y].
        With workers > 1 the columns are split into bands and evaluated by a
        process pool; every band lands in its own slice of the result.
        """
        p = self.permutation_table.values
        values = np.empty((self.grid_size, self.grid_size))
        bands = split_bands(self.grid_size, workers * 4 if workers > 1 else SEQUENTIAL_BANDS)

        start_time = time.perf_counter()
        if workers <= 1:
            for band in tqdm(bands, desc="Generating Noise", disable=not progress):
                values[band[0]:band[1]] = _evaluate_band(p, self.settings, band)
        else:
            self.logger.info(f"Using {workers} worker processes for {len(bands)} bands.")
            init_args = (p, self.settings)
            with multiprocessing.Pool(processes=workers, initializer=init_worker, initargs=init_args) as pool:
                results_iterator = pool.imap_unordered(process_band, bands)
                for (x_start, x_stop), band_values in tqdm(
                    results_iterator, total=len(bands), desc="Generating Noise", disable=not progress
                ):
                    values[x_start:x_stop] = band_values

        elapsed = time.perf_counter() - start_time
        self.logger.debug(f"Evaluated {self.grid_size * self.grid_size} pixels in {elapsed:.2f} seconds.")
        return values

    def generate_pixels(self, workers: int = 1, progress: bool = False) -> np.ndarray:
        """Returns the flat RGBA8 grayscale pixel buffer."""
        values = self.generate_values(workers=workers, progress=progress)
        colors = normalize_to_bytes(values, self.settings['final_gain'])
        return pack_grayscale_rgba(colors)


def generate_field(config: dict, seed: int = None, logger: logging.Logger = None, workers: int = 1) -> np.ndarray:
    """
    Pure entry point: builds the table from the seed and returns the pixel
    buffer. An explicit seed argument takes precedence over config['seed'].
    """
    config = dict(config)
    if seed is not None:
        config['seed'] = seed
    generator = NoiseTextureGenerator(config=config, logger=logger or logging.getLogger(__name__))
    return generator.generate_pixels(workers=workers)
