"""Shared utility functions for carnage report reading."""

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np

from .errors import ImageLoadError, UnsupportedScreenshotShape
from .regions import SCREEN_HEIGHT
from .render import threshold, to_monochrome

PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_DIR = PROJECT_ROOT / "output"
DEFAULT_REPORT_PATH = OUTPUT_DIR / "carnage_report.csv"


def load_image(path: Path) -> np.ndarray:
    """Load image as an RGBA numpy array."""
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise ImageLoadError(f"Could not load image: {path}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class Screenshot:
    """A carnage report screenshot and the buffers derived from it.

    Attributes:
        rgba: Original (height, width, 4) pixels, RGB channel order
        mono: Weighted grayscale intensity before thresholding
        binary: Thresholded copy; the only buffer template matching reads
    """

    rgba: np.ndarray
    mono: np.ndarray
    binary: np.ndarray

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> "Screenshot":
        """Build the grayscale and binary buffers for an RGBA image.

        Raises:
            UnsupportedScreenshotShape: If the image is not 480 pixels tall
        """
        if rgba.ndim != 3 or rgba.shape[0] != SCREEN_HEIGHT:
            raise UnsupportedScreenshotShape(
                f"Cannot support non-{SCREEN_HEIGHT}p images right now "
                f"(got shape {rgba.shape})"
            )
        rgba = np.array(rgba, dtype=np.uint8)
        mono = to_monochrome(rgba)
        binary = threshold(mono)
        return cls(rgba=_read_only(rgba), mono=_read_only(mono), binary=_read_only(binary))

    @property
    def width(self) -> int:
        return self.binary.shape[1]

    @property
    def height(self) -> int:
        return self.binary.shape[0]


def load_screenshot(path: Path) -> Screenshot:
    """Load a screenshot from disk and prepare it for matching."""
    return Screenshot.from_rgba(load_image(path))
