# bake_texture.py

"""
================================================================================
OFFLINE TEXTURE BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a Perlin noise texture and
saving it to disk as a PNG, together with a generation_config.json recording
the exact settings (including the seed) that produced it.

Usage:
    python bake_texture.py --seed 42 --grid-size 500 --octaves 3
    python bake_texture.py --config path/to/your/config.json --workers 4
================================================================================
"""
import argparse
import json
import logging
import multiprocessing
import os
import sys
import time

from noise_texture.generator import InvalidConfigurationError, NoiseTextureGenerator
from noise_texture import config as DEFAULTS
from noise_texture import texture_io


def load_config(config_path: str) -> dict:
    """Reads the 'noise_parameters' section of a JSON configuration file."""
    with open(config_path, 'r') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Top level of '{config_path}' must be a JSON object")
    noise_params = config.get('noise_parameters', {})
    if not isinstance(noise_params, dict):
        raise ValueError("'noise_parameters' must be a JSON object")
    return noise_params


def bake_texture(noise_params: dict, output_dir: str, name: str, workers: int, logger: logging.Logger) -> str:
    """
    Generates the texture and writes it, plus its generation config, to
    output_dir. Returns the path of the saved PNG.
    """
    start_time = time.perf_counter()

    generator = NoiseTextureGenerator(config=noise_params, logger=logger)
    pixels = generator.generate_pixels(workers=workers, progress=True)

    texture_path = texture_io.save_texture(pixels, generator.grid_size, generator.grid_size, output_dir, name)
    texture_io.write_generation_config(generator.settings, output_dir)

    end_time = time.perf_counter()
    logger.info(f"Bake complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(f"Texture and generation_config.json saved to: {output_dir}")
    return texture_path


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline Perlin noise texture baker.")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a JSON file with a 'noise_parameters' section.")
    parser.add_argument("--seed", type=int, default=None, help="32-bit seed. Random if omitted.")
    parser.add_argument("--grid-size", type=int, default=None, help="Texture width and height in pixels.")
    parser.add_argument("--octaves", type=int, default=None, help="Number of noise octaves.")
    parser.add_argument("--workers", type=int, default=1,
                        help="Worker processes. 0 uses all cores but one.")
    parser.add_argument("--output", type=str, default=None, help="Output directory.")
    parser.add_argument("--name", type=str, default=DEFAULTS.DEFAULT_TEXTURE_NAME, help="Texture file name.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    noise_params = {}
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            noise_params = load_config(args.config)
        except (FileNotFoundError, ValueError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return 1

    # Command-line flags take precedence over the config file.
    for key, value in (('seed', args.seed), ('grid_size', args.grid_size), ('octaves', args.octaves)):
        if value is not None:
            noise_params[key] = value

    workers = args.workers if args.workers > 0 else max(1, multiprocessing.cpu_count() - 1)

    seed = noise_params.get('seed')
    output_dir = args.output or os.path.join(
        DEFAULTS.DEFAULT_OUTPUT_DIR, f"seed_{seed}" if seed is not None else "random_seed"
    )

    try:
        bake_texture(noise_params, output_dir, args.name, workers, logger)
    except InvalidConfigurationError as e:
        logger.critical(f"Invalid noise parameters: {e}")
        return 1

    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
