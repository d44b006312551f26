import logging

import numpy as np
import pytest

from noise_texture import config as DEFAULTS
from noise_texture.generator import (
    InvalidConfigurationError,
    NoiseTextureGenerator,
    generate_field,
    normalize_to_bytes,
    pack_grayscale_rgba,
    resolve_settings,
    split_bands,
)
from noise_texture.permutation import build_permutation_table

logger = logging.getLogger("test")

SMALL = {'grid_size': 16, 'octaves': 3, 'base_frequency': 0.13}


def test_resolve_settings_uses_defaults():
    settings = resolve_settings({})
    assert settings['grid_size'] == 500
    assert settings['octaves'] == 3
    assert settings['base_frequency'] == 0.005
    assert settings['base_amplitude'] == 1.0
    assert settings['frequency_growth'] == 2.0
    assert settings['amplitude_decay'] == 0.5
    assert settings['final_gain'] == 1.2
    assert settings['seed'] is None


def test_field_is_deterministic():
    a = generate_field(SMALL, seed=42)
    b = generate_field(SMALL, seed=42)
    assert a.dtype == np.uint8
    assert np.array_equal(a, b)


def test_field_changes_with_seed():
    assert not np.array_equal(generate_field(SMALL, seed=1), generate_field(SMALL, seed=2))


def test_buffer_layout_is_grayscale_rgba():
    pixels = generate_field(SMALL, seed=5)
    assert pixels.shape == (16 * 16 * 4,)
    rgba = pixels.reshape(-1, 4)
    assert np.all(rgba[:, 3] == 255)
    assert np.array_equal(rgba[:, 0], rgba[:, 1])
    assert np.array_equal(rgba[:, 1], rgba[:, 2])


def test_buffer_is_x_outer_y_inner():
    generator = NoiseTextureGenerator(config=dict(SMALL, seed=3), logger=logger)
    values = generator.generate_values()
    colors = normalize_to_bytes(values, generator.settings['final_gain'])
    pixels = generator.generate_pixels()
    x, y = 11, 4
    assert pixels[(x * 16 + y) * 4] == colors[x, y]


def test_normalize_clamps_and_truncates():
    values = np.array([-5.0, -1.0, 0.0, 1.0, 5.0])
    assert normalize_to_bytes(values, 1.0).tolist() == [0, 0, 127, 255, 255]


def test_normalize_applies_gain_before_clamping():
    values = np.array([0.5, 0.9])
    assert normalize_to_bytes(values, 2.0).tolist() == [255, 255]


def test_pack_grayscale_rgba():
    colors = np.array([[10, 20], [30, 40]], dtype=np.uint8)
    assert pack_grayscale_rgba(colors).tolist() == [
        10, 10, 10, 255, 20, 20, 20, 255, 30, 30, 30, 255, 40, 40, 40, 255,
    ]


def test_raw_values_may_exceed_unit_range_but_bytes_do_not():
    config = dict(SMALL, grid_size=32, octaves=4, base_amplitude=3.0, seed=11)
    generator = NoiseTextureGenerator(config=config, logger=logger)
    values = generator.generate_values()
    assert np.abs(values).max() > 1.0
    colors = generator.generate_pixels().reshape(-1, 4)[:, 0]
    saturated = np.abs(values * generator.settings['final_gain']) >= 1.0
    expected = np.where(values.ravel() > 0, 255, 0)
    assert np.array_equal(colors[saturated.ravel()], expected[saturated.ravel()])


def test_split_bands_cover_grid_without_overlap():
    bands = split_bands(10, 3)
    assert bands[0][0] == 0 and bands[-1][1] == 10
    for (_, stop), (start, _) in zip(bands, bands[1:]):
        assert stop == start
    assert split_bands(2, 8) == [(0, 1), (1, 2)]


def test_parallel_output_matches_sequential():
    sequential = generate_field(SMALL, seed=8, workers=1)
    parallel = generate_field(SMALL, seed=8, workers=2)
    assert np.array_equal(sequential, parallel)


def test_explicit_seed_overrides_config_seed():
    assert np.array_equal(generate_field(dict(SMALL, seed=1), seed=9), generate_field(SMALL, seed=9))


def test_missing_seed_is_drawn_and_recorded():
    generator = NoiseTextureGenerator(config=SMALL, logger=logger)
    assert isinstance(generator.seed, int)
    assert generator.settings['seed'] == generator.seed
    assert generator.permutation_table == build_permutation_table(generator.seed)


def test_injected_permutation_table_is_used():
    table = build_permutation_table(77)
    generator = NoiseTextureGenerator(config=SMALL, logger=logger, permutation_table=table)
    assert generator.seed == 77
    assert generator.permutation_table is table
    assert np.array_equal(generator.generate_pixels(), generate_field(SMALL, seed=77))


def test_reference_defaults_produce_full_size_buffer():
    pixels = generate_field({'grid_size': DEFAULTS.DEFAULT_GRID_SIZE}, seed=42)
    assert pixels.size == 500 * 500 * 4


@pytest.mark.parametrize("override", [
    {'grid_size': 0},
    {'grid_size': -3},
    {'grid_size': 2.5},
    {'grid_size': True},
    {'octaves': 0},
    {'octaves': -1},
    {'base_frequency': float('nan')},
    {'base_frequency': 0.0},
    {'base_amplitude': float('inf')},
    {'base_amplitude': -1.0},
    {'amplitude_decay': 0.0},
    {'amplitude_decay': 1.5},
    {'frequency_growth': 0.5},
    {'final_gain': float('-inf')},
    {'seed': 2 ** 31},
    {'seed': "42"},
])
def test_invalid_configuration_is_rejected(override):
    with pytest.raises(InvalidConfigurationError):
        NoiseTextureGenerator(config=dict(SMALL, **override), logger=logger)


def test_invalid_configuration_is_a_value_error():
    with pytest.raises(ValueError):
        generate_field({'grid_size': 0}, seed=1)


def test_seed_mismatch_with_injected_table_is_rejected():
    table = build_permutation_table(2)
    with pytest.raises(InvalidConfigurationError):
        NoiseTextureGenerator(config=dict(SMALL, seed=1), logger=logger, permutation_table=table)


def test_matching_seed_with_injected_table_is_accepted():
    table = build_permutation_table(2)
    generator = NoiseTextureGenerator(config=dict(SMALL, seed=2), logger=logger, permutation_table=table)
    assert np.array_equal(generator.generate_pixels(), generate_field(SMALL, seed=2))


def test_numpy_scalar_settings_become_plain_numbers():
    config = {
        'seed': np.int64(5), 'grid_size': np.int32(4), 'octaves': np.int64(2),
        'base_frequency': np.float32(0.25), 'final_gain': np.float64(1.2),
    }
    generator = NoiseTextureGenerator(config=config, logger=logger)
    for key in ('seed', 'grid_size', 'octaves'):
        assert type(generator.settings[key]) is int
    for key in ('base_frequency', 'base_amplitude', 'frequency_growth', 'amplitude_decay', 'final_gain'):
        assert type(generator.settings[key]) is float
    assert generator.generate_pixels().size == 4 * 4 * 4


def test_sequential_generation_runs_in_several_bands(monkeypatch):
    from noise_texture import generator as generator_module

    calls = []
    original = generator_module._evaluate_band

    def counting(p, settings, band):
        calls.append(band)
        return original(p, settings, band)

    monkeypatch.setattr(generator_module, '_evaluate_band', counting)
    generator = NoiseTextureGenerator(config=dict(SMALL, grid_size=32, seed=1), logger=logger)
    generator.generate_values(workers=1)
    assert len(calls) == generator_module.SEQUENTIAL_BANDS
    assert calls[0][0] == 0 and calls[-1][1] == 32


def test_lattice_aligned_grid_is_uniform_mid_gray():
    pixels = generate_field({'grid_size': 4, 'octaves': 1, 'base_frequency': 1.0, 'base_amplitude': 1.0}, seed=42)
    rgba = pixels.reshape(-1, 4)
    assert rgba.shape == (16, 4)
    assert np.all(rgba[:, :3] == 127)
    assert np.all(rgba[:, 3] == 255)
