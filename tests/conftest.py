"""Shared fixtures: a synthetic font tag and carnage report screenshots."""

import struct

import numpy as np
import pytest

from carnage_reporter.font import decode_font
from carnage_reporter.matcher import TemplateManager
from carnage_reporter.regions import SCREEN_HEIGHT

GLYPH_SCALE = 2
ASCENDING_HEIGHT = 16
DESCENDING_HEIGHT = 4
ADVANCE_WIDTH = 12

# 5x7 patterns, '#' lit
PATTERNS = {
    "A": [".###.", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"],
    "D": ["####.", "#...#", "#...#", "#...#", "#...#", "#...#", "####."],
    "I": ["#####", "..#..", "..#..", "..#..", "..#..", "..#..", "#####"],
    "K": ["#...#", "#..#.", "#.#..", "##...", "#.#..", "#..#.", "#...#"],
    "N": ["#...#", "##..#", "#.#.#", "#..##", "#...#", "#...#", "#...#"],
    "S": [".####", "#....", "#....", ".###.", "....#", "....#", "####."],
    "a": [".....", ".....", ".###.", "....#", ".####", "#...#", ".####"],
    "c": [".....", ".....", ".###.", "#....", "#....", "#....", ".###."],
    "e": [".....", ".....", ".###.", "#...#", "#####", "#....", ".###."],
    "h": ["#....", "#....", "####.", "#...#", "#...#", "#...#", "#...#"],
    "i": ["..#..", ".....", ".##..", "..#..", "..#..", "..#..", ".###."],
    "l": [".##..", "..#..", "..#..", "..#..", "..#..", "..#..", ".###."],
    "m": [".....", ".....", "##.#.", "#.#.#", "#.#.#", "#.#.#", "#.#.#"],
    "n": [".....", ".....", "####.", "#...#", "#...#", "#...#", "#...#"],
    "o": [".....", ".....", ".###.", "#...#", "#...#", "#...#", ".###."],
    "r": [".....", ".....", "#.##.", "##..#", "#....", "#....", "#...."],
    "s": [".....", ".....", ".####", "#....", ".###.", "....#", "####."],
    "t": [".#...", ".#...", "####.", ".#...", ".#...", ".#..#", "..##."],
    "0": [".###.", "#...#", "#..##", "#.#.#", "##..#", "#...#", ".###."],
    "1": ["..#..", ".##..", "..#..", "..#..", "..#..", "..#..", ".###."],
    "2": [".###.", "#...#", "....#", "...#.", "..#..", ".#...", "#####"],
    "3": ["####.", "....#", "....#", ".###.", "....#", "....#", "####."],
    "4": ["...#.", "..##.", ".#.#.", "#..#.", "#####", "...#.", "...#."],
    "5": ["#####", "#....", "####.", "....#", "....#", "#...#", ".###."],
    "6": ["..##.", ".#...", "#....", "####.", "#...#", "#...#", ".###."],
    "7": ["#####", "....#", "...#.", "..#..", ".#...", ".#...", ".#..."],
    "8": [".###.", "#...#", "#...#", ".###.", "#...#", "#...#", ".###."],
    "9": [".###.", "#...#", "#...#", ".####", "....#", "...#.", ".##.."],
    "-": [".....", ".....", ".....", "#####", ".....", ".....", "....."],
}

# Where the synthetic report draws its headers
HEADER_POSITIONS = {
    "Name": (130, 124),
    "Score": (250, 124),
    "Kills": (330, 124),
    "Assists": (400, 124),
    "Deaths": (500, 124),
}
SCREEN_WIDTH = 600

# Rows after the first land two pixels below the row cursor, inside the
# glyph search leeway
ROW_PITCH = 18

WHITE = (255, 255, 255)
RED = (255, 64, 64)
BLUE = (64, 64, 255)


def glyph_bitmap(pattern: list[str]) -> np.ndarray:
    """Scale a 5x7 pattern up to a full intensity glyph bitmap."""
    cells = np.array([[0xFF if c == "#" else 0 for c in row] for row in pattern], dtype=np.uint8)
    return np.kron(cells, np.ones((GLYPH_SCALE, GLYPH_SCALE), dtype=np.uint8))


def build_font_tag(
    patterns: dict[str, list[str]] = PATTERNS,
    table_sizes: tuple[int, ...] = (3, 1),
    stray_codes: tuple[int, ...] = (0, 300, -5),
    pixel_padding: int = 0,
) -> bytes:
    """Assemble a big-endian font tag.

    Args:
        patterns: Character to 5x7 pattern
        table_sizes: Element counts of the character table reflexives
        stray_codes: Extra character records with codes the decoder must drop
        pixel_padding: Extra atlas bytes declared and appended after the glyphs
    """
    atlas = bytearray()
    records = []
    for char, pattern in patterns.items():
        bitmap = glyph_bitmap(pattern)
        height, width = bitmap.shape
        records.append(
            struct.pack(">7h2xI", ord(char), ADVANCE_WIDTH, width, height, 0, height, 0, len(atlas))
        )
        atlas += bitmap.tobytes()
    for code in stray_codes:
        records.append(struct.pack(">7h2xI", code, ADVANCE_WIDTH, 2, 2, 0, 2, 0, 0))
    atlas += bytes(pixel_padding)

    header = struct.pack(
        ">ihhhh36x3I64x3I5I",
        0,
        ASCENDING_HEIGHT,
        DESCENDING_HEIGHT,
        0,
        0,
        len(table_sizes), 0, 0,
        len(records), 0, 0,
        len(atlas), 0, 0, 0, 0,
    )
    tables = b"".join(struct.pack(">3I", size, 0, 0) for size in table_sizes)
    payloads = b"".join(b"\xab" * (2 * size) for size in table_sizes)

    return bytes(0x40) + header + tables + payloads + b"".join(records) + bytes(atlas)


def blank_rgba(width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> np.ndarray:
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 3] = 0xFF
    return rgba


@pytest.fixture
def font_tag() -> bytes:
    return build_font_tag()


@pytest.fixture
def font(font_tag):
    return decode_font(font_tag)


@pytest.fixture
def templates(font) -> TemplateManager:
    return TemplateManager(font)


@pytest.fixture
def draw(templates):
    """Paint a string into an RGBA buffer wherever its binarized render is lit."""

    def _draw(rgba: np.ndarray, text: str, x: int, y: int, color=WHITE) -> None:
        lit = templates.render(text).pixels > 0
        height, width = lit.shape
        region = rgba[y : y + height, x : x + width, :3]
        region[lit] = color

    return _draw


@pytest.fixture
def report_rgba(draw) -> np.ndarray:
    """A report screenshot with the five headers and no player rows."""
    rgba = blank_rgba()
    for label, (x, y) in HEADER_POSITIONS.items():
        draw(rgba, label, x, y)
    return rgba


@pytest.fixture
def first_row_y() -> int:
    # Glyphs sit on the baseline, so the first blank row below the header
    # is one ascending height down
    return HEADER_POSITIONS["Name"][1] + ASCENDING_HEIGHT


@pytest.fixture
def add_row(draw, first_row_y):
    """Draw a player row at the given row index below the header."""

    def _add_row(rgba, name, score, kills, assists, deaths, row=0, color=RED):
        y = first_row_y + row * ROW_PITCH
        fields = (name, str(score), str(kills), str(assists), str(deaths))
        for label, text in zip(HEADER_POSITIONS, fields):
            draw(rgba, text, HEADER_POSITIONS[label][0], y, color)
        return y

    return _add_row
