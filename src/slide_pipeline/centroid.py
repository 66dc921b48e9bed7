"""Foreground pivot extraction from an alpha-masked cut-out."""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from utils.errors import ArtifactError

logger = logging.getLogger(__name__)

# Alpha (0-255) above which a pixel belongs to the foreground
ALPHA_THRESHOLD = 10


@dataclass(frozen=True)
class CenterResult:
    """Pivot point plus the full source image size."""

    x: float
    y: float
    width: int
    height: int


def _alpha_channel(image: Image.Image) -> np.ndarray:
    """Return the alpha plane as uint8, treating images without alpha as opaque."""
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")

    if "A" in image.getbands():
        return np.asarray(image.getchannel("A"), dtype=np.uint8)

    return np.full((image.height, image.width), 255, dtype=np.uint8)


def find_center(image_path: Path) -> CenterResult:
    """Find the bounding-box center of the opaque pixels of an image.

    The center is the midpoint of the axis-aligned box around every pixel with
    alpha above ``ALPHA_THRESHOLD``; the pixel distribution inside the box does
    not matter. A fully transparent image yields the geometric image center.

    Args:
        image_path: Path to the foreground cut-out

    Returns:
        CenterResult with the pivot and the full image dimensions

    Raises:
        ArtifactError: If the file is missing, truncated or not an image
    """
    try:
        with Image.open(image_path) as image:
            image.load()
            width, height = image.size
            alpha = _alpha_channel(image)
    except OSError as e:
        raise ArtifactError(
            f"Cannot read cut-out {image_path}: {e}. "
            "It may be left over from an interrupted run; remove it or run: slidecast clean --yes"
        ) from e

    ys, xs = np.nonzero(alpha > ALPHA_THRESHOLD)

    if xs.size == 0:
        logger.warning(f"No foreground pixels in {image_path}, using image center")
        return CenterResult(x=width / 2, y=height / 2, width=width, height=height)

    center_x = (int(xs.min()) + int(xs.max())) / 2
    center_y = (int(ys.min()) + int(ys.max())) / 2

    logger.info(f"Foreground center: x={center_x:.0f}, y={center_y:.0f}")

    return CenterResult(x=center_x, y=center_y, width=width, height=height)
