"""Template based text decoding for a single table field.

Handles:
- Finding the right edge of a text run (trailing blank columns)
- Greedy left-to-right glyph matching with positional leeway
- Second-pass correction of easily confused characters
- Parsing decoded digits into integers
"""

import logging
import re
from typing import Sequence

import numpy as np

from .errors import LowConfidenceDecode
from .matcher import TemplateManager, TemplateMatch, find_best_template_match, similarity
from .regions import ASCENDER_SKIP_ROWS, GLYPH_OVERRUN_FRACTION, GLYPH_SEARCH_REACH
from .render import MonochromeImage

logger = logging.getLogger(__name__)

# Applied in order at every position; later pairs see earlier corrections
CONFUSABLE_PAIRS: tuple[tuple[str, str], ...] = (
    ("l", "i"),
    ("I", "i"),
    ("I", "l"),
    ("2", "Z"),
    ("a", "e"),
    ("n", "m"),
)

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def parse_number(text: str) -> int:
    """Parse the leading base-10 integer of a decoded field, 0 if there is none."""
    match = _LEADING_INTEGER.match(text)
    return int(match.group(1)) if match else 0


class TextDecoder:
    """Reads text out of a table field on the binarized screenshot.

    Args:
        screen: Binarized screenshot buffer
        templates: Template manager used to re-render candidate strings
        band_height: Height of the pixel band scanned for a row
    """

    def __init__(self, screen: np.ndarray, templates: TemplateManager, band_height: int):
        self.screen = screen
        self.templates = templates
        self.band_height = band_height

    def text_extent(self, start_x: int, row_y: int, end_x: int) -> int:
        """Find where the text run starting at start_x ends.

        Columns after start_x are scanned up to end_x (exclusive); the run ends
        after the last column with a lit pixel in the row band. The top
        ASCENDER_SKIP_ROWS rows of the band are ignored.

        Returns:
            x just past the run's last lit column
        """
        top = max(row_y + ASCENDER_SKIP_ROWS, 0)
        band = self.screen[top : row_y + self.band_height, start_x + 1 : end_x]

        # Trailing blank columns (the drought) are not part of the run
        lit_columns = np.flatnonzero(band.any(axis=0))
        run_width = lit_columns[-1] + 1 if lit_columns.size else 0
        return start_x + 1 + int(run_width)

    def _next_glyph(
        self, x: int, row_y: int, max_x: int, template_set: Sequence[MonochromeImage]
    ) -> TemplateMatch:
        match = find_best_template_match(
            self.screen,
            template_set,
            x,
            row_y,
            GLYPH_SEARCH_REACH,
            accept=lambda t: x + t.width * GLYPH_OVERRUN_FRACTION <= max_x,
        )
        if not match:
            raise LowConfidenceDecode(x, row_y)
        return match

    def decode(
        self,
        start_x: int,
        row_y: int,
        end_x: int,
        template_set: Sequence[MonochromeImage],
        fuzzy: bool = False,
    ) -> str:
        """Decode the field between start_x and end_x on the row at row_y.

        Args:
            start_x: Column origin of the field
            row_y: Top of the row band
            end_x: Column origin of the next field (or the screen width)
            template_set: Single character templates to match against
            fuzzy: Whether to run the confusable character pass (names)

        Returns:
            Decoded text with trailing spaces removed
        """
        max_x = self.text_extent(start_x, row_y, end_x)

        characters = []
        x = start_x
        while x < max_x:
            try:
                match = self._next_glyph(x, row_y, max_x, template_set)
            except LowConfidenceDecode as error:
                logger.debug("Ending text run early: %s", error)
                break
            characters.append(match.text)
            x += match.template.width

        text = "".join(characters).rstrip(" ")

        if fuzzy:
            text = self.correct_confusables(text, start_x, row_y)
        return text

    def correct_confusables(self, text: str, x: int, y: int) -> str:
        """Re-decide easily confused characters by whole-string comparison.

        At every position holding either character of a confusable pair, the
        string is rendered with each alternative and the one matching the
        field at (x, y) better is kept; ties go to the second alternative.
        """
        characters = list(text)
        for index in range(len(characters)):
            for first, second in CONFUSABLE_PAIRS:
                if characters[index] not in (first, second):
                    continue

                characters[index] = first
                first_score = similarity(self.templates.render("".join(characters)), self.screen, x, y)
                characters[index] = second
                second_score = similarity(self.templates.render("".join(characters)), self.screen, x, y)

                characters[index] = first if first_score > second_score else second

        corrected = "".join(characters)
        if corrected != text:
            logger.debug('Corrected "%s" to "%s"', text, corrected)
        return corrected
