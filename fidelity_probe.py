# fidelity_probe.py

"""
Regenerates a baked texture from its generation_config.json and checks that
the result is byte-identical to the PNG on disk.

Usage:
    python fidelity_probe.py baked_textures/seed_42
"""

import argparse
import json
import logging
import os
import sys

import numpy as np

from noise_texture.generator import InvalidConfigurationError, NoiseTextureGenerator
from noise_texture import config as DEFAULTS
from noise_texture import texture_io


def run_probe(bake_dir: str, name: str, logger: logging.Logger) -> bool:
    """Returns True when the regenerated buffer matches the baked texture."""
    # --- 1. Load the baked texture and the GENERATION config ---
    texture_path = os.path.join(bake_dir, f"{name}.png")
    logger.info(f"Loading baked texture from '{texture_path}'...")
    try:
        baked_pixels = texture_io.load_texture(texture_path)
        gen_settings = texture_io.load_generation_config(bake_dir)
    except FileNotFoundError as e:
        logger.critical(f"Baked texture not found. Run bake_texture.py first. ({e})")
        return False
    except json.JSONDecodeError as e:
        logger.error(f"❌ FAILURE: Generation config is not valid JSON: {e}")
        return False

    if not isinstance(gen_settings, dict):
        logger.error("❌ FAILURE: Generation config must be a JSON object.")
        return False

    # --- 2. Regenerate "Ground Truth" from the recorded settings ---
    try:
        generator = NoiseTextureGenerator(config=gen_settings, logger=logger)
    except InvalidConfigurationError as e:
        logger.error(f"❌ FAILURE: Generation config is invalid: {e}")
        return False
    live_pixels = generator.generate_pixels()

    if live_pixels.shape != baked_pixels.shape:
        logger.error(f"❌ FAILURE: Size mismatch. Baked={baked_pixels.shape}, Live={live_pixels.shape}")
        return False

    # --- 3. Compare ---
    mismatches = np.count_nonzero(live_pixels != baked_pixels)
    if mismatches:
        first = int(np.flatnonzero(live_pixels != baked_pixels)[0]) // DEFAULTS.CHANNELS
        px, py = divmod(first, generator.grid_size)
        logger.error(f"❌ FAILURE: {mismatches} byte(s) differ, first at pixel ({px}, {py}).")
        return False

    logger.info("✅ SUCCESS: Baked texture is faithful to a fresh generation.")
    return True


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logger = logging.getLogger("FidelityProbe")

    parser = argparse.ArgumentParser(description="Verify a baked noise texture against a fresh generation.")
    parser.add_argument("bake_dir", type=str, help="Directory written by bake_texture.py.")
    parser.add_argument("--name", type=str, default=DEFAULTS.DEFAULT_TEXTURE_NAME)
    args = parser.parse_args()

    sys.exit(0 if run_probe(args.bake_dir, args.name, logger) else 1)
