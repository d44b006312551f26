# noise_texture/texture_io.py

"""
================================================================================
TEXTURE EXPORT UTILITIES
================================================================================
This module turns a generated pixel buffer into an image file on disk, and
records the settings used to produce it. It sits outside the noise core: the
generator never imports it.

Data Contract:
---------------
- Inputs:
    - pixels: Flat uint8 RGBA buffer laid out x-outer / y-inner, i.e. a
      (width, height, 4) array flattened in C order.
    - width, height: Texture dimensions in pixels.
- Outputs:
    - PNG files and a generation_config.json "birth certificate".
- Side Effects: Writes to the file system.
================================================================================
"""

import json
import os

import numpy as np
from PIL import Image

from . import config as DEFAULTS


def pixels_to_image(pixels: np.ndarray, width: int, height: int) -> Image.Image:
    """Wraps a flat RGBA buffer in a Pillow image."""
    pixels = np.asarray(pixels, dtype=np.uint8)
    if pixels.size != width * height * DEFAULTS.CHANNELS:
        raise ValueError(
            f"Pixel buffer holds {pixels.size} bytes, expected {width * height * DEFAULTS.CHANNELS} "
            f"for a {width}x{height} RGBA texture"
        )

    pixel_data_whc = pixels.reshape(width, height, DEFAULTS.CHANNELS)
    # Transpose from (W, H, C) to (H, W, C) for Pillow
    pixel_data_hwc = np.ascontiguousarray(np.transpose(pixel_data_whc, (1, 0, 2)))
    return Image.fromarray(pixel_data_hwc, 'RGBA')


def image_to_pixels(img: Image.Image) -> np.ndarray:
    """Inverse of pixels_to_image(): returns the flat x-outer / y-inner buffer."""
    pixel_data_hwc = np.array(img.convert('RGBA'), dtype=np.uint8)
    return np.transpose(pixel_data_hwc, (1, 0, 2)).ravel()


def save_texture(pixels: np.ndarray, width: int, height: int, output_dir: str,
                 name: str = DEFAULTS.DEFAULT_TEXTURE_NAME) -> str:
    """Saves the buffer as a lossless PNG and returns the file path."""
    os.makedirs(output_dir, exist_ok=True)
    file_path = os.path.join(output_dir, f"{name}.png")
    pixels_to_image(pixels, width, height).save(file_path, 'PNG')
    return file_path


def load_texture(file_path: str) -> np.ndarray:
    with Image.open(file_path) as img:
        return image_to_pixels(img)


def write_generation_config(settings: dict, output_dir: str) -> str:
    """Writes the exact settings (including the resolved seed) next to the texture."""
    os.makedirs(output_dir, exist_ok=True)
    gen_config_path = os.path.join(output_dir, DEFAULTS.GENERATION_CONFIG_FILENAME)
    # Serialize first so a bad value never leaves a truncated file behind.
    payload = json.dumps(settings, indent=4)
    tmp_path = f"{gen_config_path}.tmp"
    with open(tmp_path, 'w') as f:
        f.write(payload)
    os.replace(tmp_path, gen_config_path)
    return gen_config_path


def load_generation_config(output_dir: str) -> dict:
    gen_config_path = os.path.join(output_dir, DEFAULTS.GENERATION_CONFIG_FILENAME)
    with open(gen_config_path, 'r') as f:
        return json.load(f)
