"""Column and row geometry of the carnage report table.

Handles:
- Locating the five column headers by exhaustive template search
- Walking the table downward one row at a time using pixel activity
"""

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .errors import HeaderNotFound
from .matcher import TemplateManager, similarity
from .regions import (
    HEADER_LABELS,
    HEADER_MIN_CONFIDENCE,
    HEADER_Y_BACKOFF,
    NAME_SEARCH_ORIGIN,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Header Location
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class HeaderMatch:
    """Position of a column header label."""

    label: str
    x: int
    y: int
    confidence: float


@dataclass(frozen=True)
class ColumnLayout:
    """Column x-origins shared by every row, plus the header row's y."""

    name_x: int
    score_x: int
    kills_x: int
    assists_x: int
    deaths_x: int
    header_y: int

    def __post_init__(self):
        columns = self.columns
        for (left_label, left), (right_label, right) in zip(columns, columns[1:]):
            if not left < right:
                raise HeaderNotFound(
                    right_label,
                    right,
                    self.header_y,
                    0.0,
                    reason=(
                        f'Column "{right_label}" at x={right} is not right of '
                        f'"{left_label}" at x={left}'
                    ),
                )

    @property
    def columns(self) -> list[tuple[str, int]]:
        """(label, x) pairs from left to right."""
        return list(
            zip(
                HEADER_LABELS,
                (self.name_x, self.score_x, self.kills_x, self.assists_x, self.deaths_x),
            )
        )


def find_header(
    screen: np.ndarray,
    templates: TemplateManager,
    label: str,
    min_x: int,
    min_y: int,
    search_height: int,
) -> HeaderMatch:
    """Find a header label by sweeping every position in a band.

    The band spans from min_x to the right edge of the screen and
    search_height rows starting at min_y.

    Raises:
        HeaderNotFound: If the best position scores below HEADER_MIN_CONFIDENCE
    """
    template = templates.render(label)
    screen_width = screen.shape[1]

    found_x, found_y, found_confidence = min_x, min_y, 0.0
    for y in range(min_y, min_y + search_height):
        for x in range(min_x, screen_width):
            score = similarity(template, screen, x, y)
            if score > found_confidence:
                found_x, found_y, found_confidence = x, y, score

    if found_confidence < HEADER_MIN_CONFIDENCE:
        raise HeaderNotFound(label, found_x, found_y, found_confidence)

    logger.debug(
        'Found "%s" at %d,%d (%.1f%% match)', label, found_x, found_y, found_confidence * 100.0
    )
    return HeaderMatch(label=label, x=found_x, y=found_y, confidence=found_confidence)


def locate_headers(screen: np.ndarray, templates: TemplateManager) -> ColumnLayout:
    """Locate all column headers, left to right.

    "Name" is searched from NAME_SEARCH_ORIGIN; each following header starts
    at the previous header's x and a little above the "Name" row.

    Args:
        screen: Binarized screenshot buffer
        templates: Template manager for the screenshot's font

    Returns:
        ColumnLayout with the x-origin of each column
    """
    search_height = templates.font.metrics.ascending_height
    first_label, *other_labels = HEADER_LABELS

    min_x, min_y = NAME_SEARCH_ORIGIN
    name = find_header(screen, templates, first_label, min_x, min_y, search_height)

    matches = [name]
    for label in other_labels:
        previous = matches[-1]
        matches.append(
            find_header(
                screen,
                templates,
                label,
                previous.x,
                name.y - HEADER_Y_BACKOFF,
                search_height,
            )
        )

    return ColumnLayout(*(match.x for match in matches), header_y=name.y)


# -----------------------------------------------------------------------------
# Row Segmentation
# -----------------------------------------------------------------------------


class RowSegmenter:
    """Walks the table rows below the header using the rightmost column.

    The cursor starts on the header row. advance_to_next_row() moves it past
    the current row's content to the first blank pixel row; has_row_content()
    reports whether another row starts there.
    """

    def __init__(self, screen: np.ndarray, layout: ColumnLayout, band_height: int):
        self.screen = screen
        self.layout = layout
        self.band_height = band_height
        self.y = layout.header_y

    def _probe(self) -> np.ndarray:
        # Deaths is the rightmost column, so it is the cheapest to scan
        return self.screen[:, self.layout.deaths_x :]

    def advance_to_next_row(self) -> None:
        """Step half a line down, then on to the first empty pixel row."""
        probe = self._probe()
        self.y += self.band_height // 2
        while self.y < probe.shape[0] and probe[self.y].any():
            self.y += 1

    def has_row_content(self) -> bool:
        """Check the line band at the cursor for any lit pixel."""
        band = self._probe()[max(self.y, 0) : self.y + self.band_height]
        return bool(band.any())

    def rows(self) -> Iterator[int]:
        """Yield the y of each table row until a blank band is reached."""
        self.advance_to_next_row()
        while self.has_row_content():
            yield self.y
            self.advance_to_next_row()
