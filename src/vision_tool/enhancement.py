"""Brightness / contrast / saturation adjustment over raw RGBA pixels.

The transform works on a decoded :class:`PixelBuffer` and never touches the
filesystem.  Pillow is only used at the edges (``decode_image`` /
``encode_image``) to turn image bytes into a buffer and back.

Per-channel pipeline
--------------------
1. Brightness  — ``c + brightness``
2. Contrast    — ``factor * (c - 128) + 128`` where
                 ``factor = 259 * (contrast + 255) / (255 * (259 - contrast))``
3. Saturation  — blend each channel away from the luma of the *post-contrast*
                 pixel: ``gray + (c - gray) * (1 + saturation / 100)``.
                 Skipped when saturation is 0.
4. Clamp to 0–255 and round to the nearest integer.

Alpha passes through untouched.  Settings are not range-checked: values
outside -100..100 simply produce clipped output.
"""

import io
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
_LUMA_R = 0.2989
_LUMA_G = 0.587
_LUMA_B = 0.114


@dataclass(frozen=True)
class EnhancementSettings:
    brightness: int = 0
    contrast: int = 0
    saturation: int = 0


QUICK_ENHANCE = EnhancementSettings(brightness=40, contrast=20, saturation=10)


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA samples, four bytes per pixel."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"RGBA buffer for {self.width}x{self.height} needs {expected} bytes, "
                f"got {len(self.data)}"
            )


def _contrast_factor(contrast: float) -> float:
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def enhance(buffer: PixelBuffer, settings: EnhancementSettings) -> PixelBuffer:
    """Apply *settings* to every pixel of *buffer* and return a new buffer."""
    logger.debug(
        "Enhancing %dx%d buffer with %s", buffer.width, buffer.height, settings
    )
    pixels = np.frombuffer(buffer.data, dtype=np.uint8).reshape(buffer.height, buffer.width, 4)
    factor = _contrast_factor(settings.contrast)

    rgb = pixels[..., :3].astype(np.float64)
    rgb = factor * ((rgb + settings.brightness) - 128) + 128

    if settings.saturation != 0:
        gray = _LUMA_R * rgb[..., 0] + _LUMA_G * rgb[..., 1] + _LUMA_B * rgb[..., 2]
        gray = gray[..., np.newaxis]
        rgb = gray + (rgb - gray) * (1 + settings.saturation / 100)

    out = pixels.copy()
    # np.rint is half-to-even, same as a clamped 8-bit canvas store
    out[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return PixelBuffer(buffer.width, buffer.height, out.tobytes())


def quick_enhance(buffer: PixelBuffer) -> PixelBuffer:
    """One-click preset: brightness +40, contrast +20, saturation +10."""
    return enhance(buffer, QUICK_ENHANCE)


# ── Image I/O ──────────────────────────────────────────────────────────────────


def decode_image(image_bytes: bytes) -> PixelBuffer:
    """Decode any Pillow-readable image into an RGBA buffer."""
    img = Image.open(io.BytesIO(image_bytes)).convert("RGBA")
    return PixelBuffer(img.width, img.height, img.tobytes())


def encode_image(buffer: PixelBuffer) -> bytes:
    """Encode *buffer* as PNG bytes."""
    img = Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def enhance_image(image_bytes: bytes, settings: EnhancementSettings) -> bytes:
    """Decode, enhance and re-encode an image; returns PNG bytes."""
    return encode_image(enhance(decode_image(image_bytes), settings))
