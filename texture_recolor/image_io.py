# texture_recolor/image_io.py
from __future__ import annotations

"""
Image file I/O (RGBA in sRGB) for the command line front end.
"""

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps

from .core_types import PixelBuffer

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def load_image(path: Path) -> PixelBuffer:
    """Open any Pillow-readable image as an RGBA PixelBuffer."""
    with Image.open(path) as im0:
        im = _convert_to_srgb_rgba(im0)
    return PixelBuffer(np.array(im, dtype=np.uint8))


def save_image(path: Path, buffer: PixelBuffer) -> Path:
    """Write `buffer` as an RGBA PNG; the suffix is forced to .png."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(buffer.rgba.copy()).save(path)
    return path


__all__ = ["load_image", "save_image"]
