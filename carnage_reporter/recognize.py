"""Recognition module for carnage report extraction.

Handles:
- Team color detection from the original screenshot colors
- Player name matching against an optional roster
- Player name decoding by glyph template matching
- Digit template matching for stats
- Frame processing (header location and the row loop)
"""

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .decode import TextDecoder
from .digit_matcher import DigitMatcher
from .font import FontResource
from .layout import ColumnLayout, RowSegmenter, locate_headers
from .matcher import TemplateManager, find_best_template_match
from .regions import ROSTER_MIN_CONFIDENCE, ROSTER_SEARCH_REACH, TEAM_COLOR_CUTOFF
from .render import MonochromeImage
from .utils import Screenshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerStats:
    """Data extracted for a single player row."""

    red: bool
    name: str
    score: int
    kills: int
    assists: int
    deaths: int


# -----------------------------------------------------------------------------
# Roster Matching
# -----------------------------------------------------------------------------


class Roster:
    """Candidate player names, each matched at most once.

    Names are rendered when the roster is built. A name that matches a row is
    removed so it cannot be assigned to a later row.
    """

    def __init__(self, names: Iterable[str], templates: TemplateManager):
        self._candidates: list[MonochromeImage] = [templates.render(name) for name in names if name]

    @property
    def names(self) -> list[str]:
        return [candidate.text for candidate in self._candidates]

    def claim(self, screen: np.ndarray, x: int, y: int) -> str | None:
        """Take the roster name best matching the field at (x, y).

        Returns:
            The matched name, or None if the pool is empty or no name scores
            above ROSTER_MIN_CONFIDENCE
        """
        if not self._candidates:
            return None

        match = find_best_template_match(screen, self._candidates, x, y, ROSTER_SEARCH_REACH)
        if match.confidence <= ROSTER_MIN_CONFIDENCE:
            logger.debug("No roster name matched at %d,%d (best %.2f)", x, y, match.confidence)
            return None

        self._candidates.remove(match.template)
        return match.text


# -----------------------------------------------------------------------------
# Team Detection
# -----------------------------------------------------------------------------


def detect_team(screenshot: Screenshot, layout: ColumnLayout, row_y: int, band_height: int) -> bool:
    """Decide whether a row belongs to the red team.

    Takes the first pixel (top to bottom, left to right) between the name and
    kills columns that is lit in the binarized buffer and also bright in the
    original grayscale, and compares its red and blue channels.

    Returns:
        True if red dominates blue, False otherwise or if no pixel qualifies
    """
    rows = slice(max(row_y, 0), row_y + band_height)
    columns = slice(layout.name_x, layout.kills_x)

    bright = (screenshot.binary[rows, columns] > TEAM_COLOR_CUTOFF) & (
        screenshot.mono[rows, columns] > TEAM_COLOR_CUTOFF
    )
    candidates = np.argwhere(bright)
    if candidates.size == 0:
        return False

    dy, dx = candidates[0]
    red, _, blue = screenshot.rgba[rows, columns][dy, dx, :3]
    return bool(red > blue)


# -----------------------------------------------------------------------------
# Frame Processing
# -----------------------------------------------------------------------------


class FrameReader:
    """Everything needed to read rows from one screenshot."""

    def __init__(self, screenshot: Screenshot, font: FontResource, roster: Iterable[str] = ()):
        self.screenshot = screenshot
        self.templates = TemplateManager(font)
        self.band_height = font.metrics.ascending_height
        self.decoder = TextDecoder(screenshot.binary, self.templates, self.band_height)
        self.digits = DigitMatcher(self.decoder)
        self.roster = Roster(roster, self.templates)

    def read_name(self, layout: ColumnLayout, row_y: int) -> str:
        """Read a player name, preferring the roster when it has a close match."""
        name = self.roster.claim(self.screenshot.binary, layout.name_x, row_y)
        if name is not None:
            return name
        return self.decoder.decode(
            layout.name_x, row_y, layout.score_x, self.templates.glyphs, fuzzy=True
        )


def process_player(reader: FrameReader, layout: ColumnLayout, row_y: int) -> PlayerStats:
    """Extract all data for a single player row.

    Args:
        reader: Frame reader for the screenshot
        layout: Column origins
        row_y: Top of the row band

    Returns:
        PlayerStats with all fields read
    """
    red = detect_team(reader.screenshot, layout, row_y, reader.band_height)
    name = reader.read_name(layout, row_y)

    digits = reader.digits
    player = PlayerStats(
        red=red,
        name=name,
        score=digits.recognize(layout.score_x, row_y, layout.kills_x),
        kills=digits.recognize(layout.kills_x, row_y, layout.assists_x),
        assists=digits.recognize(layout.assists_x, row_y, layout.deaths_x),
        deaths=digits.recognize(layout.deaths_x, row_y, reader.screenshot.width),
    )
    logger.debug("Row at y=%d: %s", row_y, player)
    return player


def process_frame(
    screenshot: Screenshot, font: FontResource, roster: Iterable[str] = ()
) -> list[PlayerStats]:
    """Process a screenshot and extract every player row.

    Args:
        screenshot: Loaded 480 pixel tall screenshot
        font: Decoded font tag the report was rendered with
        roster: Optional candidate player names

    Returns:
        List of PlayerStats in on-screen order, top to bottom

    Raises:
        HeaderNotFound: If any column header cannot be located
    """
    reader = FrameReader(screenshot, font, roster)
    layout = locate_headers(screenshot.binary, reader.templates)

    segmenter = RowSegmenter(screenshot.binary, layout, reader.band_height)
    players = [process_player(reader, layout, row_y) for row_y in segmenter.rows()]

    logger.debug("Read %d player rows", len(players))
    return players
