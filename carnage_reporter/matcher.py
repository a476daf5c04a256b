"""Template comparison against the binarized screenshot.

Handles:
- Scoring a template at a fixed position (fraction of matching pixels)
- Sweeping a set of templates over a small displacement window
- Rendering and caching binarized text templates
"""

from dataclasses import dataclass
from typing import Callable, Iterable

import cv2
import numpy as np

from .font import FontResource
from .regions import MATCH_TOLERANCE
from .render import MonochromeImage, binarize, render_text

DIGITS = "0123456789-"

# Printable ASCII range considered when building the glyph template set
GLYPH_CODES = range(0x20, 0x7F)


# -----------------------------------------------------------------------------
# Core Comparison
# -----------------------------------------------------------------------------


def similarity(template: MonochromeImage, screen: np.ndarray, x: int, y: int) -> float:
    """Score a template placed with its top-left corner at (x, y).

    Args:
        template: Binarized template image
        screen: Binarized (height, width) screenshot buffer
        x, y: Placement of the template's top-left corner

    Returns:
        Fraction of template pixels within MATCH_TOLERANCE of the screen, or
        0.0 if the template is empty or does not fit inside the screen.
    """
    height, width = template.pixels.shape
    if width == 0 or height == 0 or x < 0 or y < 0:
        return 0.0
    if x + width > screen.shape[1] or y + height > screen.shape[0]:
        return 0.0

    window = screen[y : y + height, x : x + width]

    # Difference and hit mask are written into the template's own buffer
    buffer = template.scratch()
    cv2.absdiff(template.pixels, window, dst=buffer)
    cv2.threshold(buffer, MATCH_TOLERANCE - 1, 0xFF, cv2.THRESH_BINARY_INV, dst=buffer)
    hits = cv2.countNonZero(buffer)
    return float(hits / template.pixels.size)


@dataclass
class TemplateMatch:
    """Best template found by a displacement sweep."""

    template: MonochromeImage | None
    confidence: float
    x: int = 0
    y: int = 0

    @property
    def text(self) -> str:
        return self.template.text if self.template is not None else ""

    def __bool__(self) -> bool:
        """Return True if any template scored above zero."""
        return bool(self.template is not None and self.confidence > 0.0)


def find_best_template_match(
    screen: np.ndarray,
    templates: Iterable[MonochromeImage],
    x: int,
    y: int,
    reach: int,
    accept: Callable[[MonochromeImage], bool] | None = None,
) -> TemplateMatch:
    """Find the best scoring template within +/- reach pixels of (x, y).

    Displacements are visited top to bottom, left to right, and templates in
    the given order; only a strictly better score replaces the current best,
    so earlier candidates win ties.

    Args:
        screen: Binarized screenshot buffer
        templates: Candidate templates
        x, y: Nominal position
        reach: Maximum displacement in each direction
        accept: Optional filter deciding whether a template may be tried

    Returns:
        TemplateMatch with the winning template and position; its template is
        None if nothing scored above zero.
    """
    candidates = [t for t in templates if accept is None or accept(t)]
    best_match = TemplateMatch(template=None, confidence=0.0, x=x, y=y)

    for dy in range(-reach, reach + 1):
        for dx in range(-reach, reach + 1):
            for template in candidates:
                score = similarity(template, screen, x + dx, y + dy)
                if score > best_match.confidence:
                    best_match = TemplateMatch(
                        template=template, confidence=score, x=x + dx, y=y + dy
                    )

    return best_match


# -----------------------------------------------------------------------------
# Template Management
# -----------------------------------------------------------------------------


class TemplateManager:
    """Renders binarized text templates on demand and caches them by string."""

    def __init__(self, font: FontResource):
        self.font = font
        self._cache: dict[str, MonochromeImage] = {}
        self._digits: list[MonochromeImage] | None = None
        self._glyphs: list[MonochromeImage] | None = None

    def render(self, text: str) -> MonochromeImage:
        """Get the binarized rendering of a string."""
        if text not in self._cache:
            self._cache[text] = binarize(render_text(text, self.font))
        return self._cache[text]

    @property
    def digits(self) -> list[MonochromeImage]:
        """Templates for 0-9 and the minus sign."""
        if self._digits is None:
            self._digits = [self.render(char) for char in DIGITS]
        return self._digits

    @property
    def glyphs(self) -> list[MonochromeImage]:
        """Templates for every printable ASCII character the font defines."""
        if self._glyphs is None:
            self._glyphs = [
                self.render(chr(code))
                for code in GLYPH_CODES
                if self.font.characters[code].advance_width
            ]
        return self._glyphs
