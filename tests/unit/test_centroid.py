"""Unit tests for foreground pivot extraction."""

import pytest
from conftest import write_cutout
from PIL import Image

from slide_pipeline.centroid import CenterResult, find_center
from utils.errors import ArtifactError


@pytest.mark.unit
def test_block_center(temp_dir):
    """100x60 opaque block at (50, 50) on a 400x300 canvas."""
    path = temp_dir / "cutout.png"
    write_cutout(path, size=(400, 300), box=(50, 50, 150, 110))

    assert find_center(path) == CenterResult(x=99.5, y=79.5, width=400, height=300)


@pytest.mark.unit
def test_fully_transparent_uses_image_center(temp_dir):
    path = temp_dir / "empty.png"
    write_cutout(path, size=(401, 301), box=None)

    assert find_center(path) == CenterResult(x=200.5, y=150.5, width=401, height=301)


@pytest.mark.unit
def test_faint_alpha_is_background(temp_dir):
    """Alpha at the threshold does not count, alpha above it does."""
    path = temp_dir / "faint.png"
    image = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    image.paste((0, 0, 0, 10), (0, 0, 50, 50))
    image.putpixel((80, 90), (0, 0, 0, 11))
    image.save(path)

    result = find_center(path)

    assert (result.x, result.y) == (80.0, 90.0)


@pytest.mark.unit
def test_bounding_box_ignores_pixel_distribution(temp_dir):
    path = temp_dir / "two_blobs.png"
    image = Image.new("RGBA", (200, 100), (0, 0, 0, 0))
    image.paste((255, 255, 255, 255), (0, 0, 90, 100))
    image.putpixel((199, 0), (255, 255, 255, 255))
    image.save(path)

    result = find_center(path)

    assert result.x == pytest.approx(99.5)
    assert result.y == pytest.approx(49.5)


@pytest.mark.unit
def test_image_without_alpha_is_fully_opaque(temp_dir):
    path = temp_dir / "rgb.png"
    Image.new("RGB", (400, 300), (1, 2, 3)).save(path)

    assert find_center(path) == CenterResult(x=199.5, y=149.5, width=400, height=300)


@pytest.mark.unit
def test_grayscale_alpha(temp_dir):
    path = temp_dir / "la.png"
    image = Image.new("LA", (50, 40), (0, 0))
    image.paste((255, 255), (10, 10, 21, 31))
    image.save(path)

    result = find_center(path)

    assert (result.x, result.y) == (15.0, 20.0)
    assert (result.width, result.height) == (50, 40)


@pytest.mark.unit
def test_palette_with_transparency(temp_dir):
    path = temp_dir / "palette.png"
    image = Image.new("P", (20, 20), 0)
    image.putpalette([0, 0, 0, 255, 0, 0] + [0] * (254 * 3))
    image.paste(1, (4, 6, 9, 11))
    image.save(path, transparency=0)

    result = find_center(path)

    assert (result.x, result.y) == (6.0, 8.0)


@pytest.mark.unit
def test_truncated_cutout_raises_artifact_error(temp_dir):
    path = temp_dir / "object_output" / "original_rgba.png"
    write_cutout(path)
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])

    with pytest.raises(ArtifactError, match="original_rgba.png"):
        find_center(path)


@pytest.mark.unit
def test_non_image_file_raises_artifact_error(temp_dir):
    path = temp_dir / "original_rgba.png"
    path.write_bytes(b"not a png")

    with pytest.raises(ArtifactError, match="slidecast clean"):
        find_center(path)
