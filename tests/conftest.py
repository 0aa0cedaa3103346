"""Shared fixtures for the test suite.

Image fixtures are real Pillow-encoded bytes / files so tests exercise the
actual decode and encode paths rather than hand-crafted stubs.
"""

import io
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from vision_tool.enhancement import PixelBuffer


# ── CLI runner ─────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


# ── Image fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def png_bytes() -> bytes:
    """A real, valid 10×10 red PNG image as raw bytes."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """The PNG written to a temporary file on disk."""
    path = tmp_path / "test.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def wide_png_file(tmp_path: Path) -> Path:
    """A 1000×500 white PNG, large enough for readable synthetic layouts."""
    path = tmp_path / "page.png"
    Image.new("RGB", (1000, 500), color=(255, 255, 255)).save(path, format="PNG")
    return path


# ── Pixel buffers ──────────────────────────────────────────────────────────


@pytest.fixture
def gradient_buffer() -> PixelBuffer:
    """A 16×16 RGBA buffer covering every channel value with varying alpha."""
    data = bytearray()
    for y in range(16):
        for x in range(16):
            v = y * 16 + x
            data += bytes((v, 255 - v, (v * 7) % 256, (v * 3) % 256))
    return PixelBuffer(16, 16, bytes(data))
