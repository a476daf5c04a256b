"""Text rasterization and binarization.

Handles:
- Drawing strings with a decoded font tag into monochrome images
- Thresholding monochrome images to pure black and white
- Converting RGBA screenshots to monochrome intensity
"""

from dataclasses import dataclass, field

import numpy as np

from .font import FontResource
from .regions import BINARY_CUTOFF, LUMA_WEIGHTS, TEMPLATE_INTENSITY


@dataclass(eq=False)
class MonochromeImage:
    """Single channel image, optionally remembering the text it was drawn from.

    Images compare by identity.
    """

    pixels: np.ndarray
    text: str = ""
    _scratch: np.ndarray | None = field(default=None, init=False, repr=False)

    def scratch(self) -> np.ndarray:
        """Reusable uint8 buffer with the same shape as the pixels."""
        if self._scratch is None or self._scratch.shape != self.pixels.shape:
            self._scratch = np.empty(self.pixels.shape, dtype=np.uint8)
        return self._scratch

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


# -----------------------------------------------------------------------------
# Rasterization
# -----------------------------------------------------------------------------


def render_text(text: str, font: FontResource) -> MonochromeImage:
    """Draw a string using the font's glyph bitmaps.

    The image is one line tall (ascending + descending height) and as wide as
    the sum of the advance widths. Characters the font does not define take no
    space. Glyph samples are scaled to 3/4 intensity and clipped to the image.

    Args:
        text: String to draw
        font: Decoded font tag

    Returns:
        MonochromeImage labelled with the drawn text
    """
    entries = [font.character(char) for char in text]
    ascending = font.metrics.ascending_height
    height = max(font.metrics.line_height, 0)
    width = max(sum(entry.advance_width for entry in entries), 0)

    pixels = np.zeros((height, width), dtype=np.uint8)
    numerator, denominator = TEMPLATE_INTENSITY

    x_cursor = 0
    for entry in entries:
        if entry.has_bitmap:
            glyph = font.glyph_bitmap(entry)
            top = ascending - entry.origin_y
            left = x_cursor

            # Clip the glyph rectangle to the image
            y0, y1 = max(top, 0), min(top + entry.bitmap_height, height)
            x0, x1 = max(left, 0), min(left + entry.bitmap_width, width)
            if y0 < y1 and x0 < x1:
                source = glyph[y0 - top : y1 - top, x0 - left : x1 - left]
                pixels[y0:y1, x0:x1] = source.astype(np.uint16) * numerator // denominator

        x_cursor += entry.advance_width

    return MonochromeImage(pixels=pixels, text=text)


# -----------------------------------------------------------------------------
# Binarization
# -----------------------------------------------------------------------------


def threshold(pixels: np.ndarray, cutoff: int = BINARY_CUTOFF) -> np.ndarray:
    """Map samples at or above the cutoff to 0xFF and everything else to 0.

    Args:
        pixels: uint8 intensity array of any shape

    Returns:
        New binary uint8 array of the same shape
    """
    return np.where(pixels >= cutoff, 0xFF, 0).astype(np.uint8)


def binarize(image: MonochromeImage) -> MonochromeImage:
    """Threshold a rendered image, keeping its text label."""
    return MonochromeImage(pixels=threshold(image.pixels), text=image.text)


def to_monochrome(rgba: np.ndarray) -> np.ndarray:
    """Convert an RGBA (or RGB) image to single channel intensity.

    Each channel contributes channel * weight / 255, rounded to the nearest
    integer; the weights sum to 255 so white stays at 0xFF.

    Args:
        rgba: (height, width, 3 or 4) uint8 array in RGB channel order

    Returns:
        (height, width) uint8 intensity array
    """
    channels = rgba[..., :3].astype(np.uint32)
    intensity = np.zeros(rgba.shape[:2], dtype=np.uint32)
    for channel, weight in enumerate(LUMA_WEIGHTS):
        intensity += (channels[..., channel] * weight + 128) // 255
    return intensity.astype(np.uint8)
