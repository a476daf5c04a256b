"""Font tag decoding.

Handles:
- Reading the big-endian font tag header (metrics and table counts)
- Skipping the character table reflexives
- Scattering character entries into a 256 slot table
- Loading the monochrome pixel atlas shared by every glyph

Every integer in the tag is stored big-endian. All reads go through explicit
'>' struct formats so the host byte order never leaks into the geometry.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .errors import MalformedFont

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Tag Layout
# -----------------------------------------------------------------------------

HEADER_OFFSET = 0x40

# flags, ascending/descending/leading height, leading width, padding,
# character tables reflexive, bold/italic/condense/underline references,
# characters reflexive, pixels data offset
HEADER_FORMAT = struct.Struct(">ihhhh36x3I64x3I5I")
HEADER_SIZE = HEADER_FORMAT.size

REFLEXIVE_FORMAT = struct.Struct(">3I")

# character, advance width, bitmap width/height, origin x/y,
# hardware character index, padding, pixels offset
CHARACTER_FORMAT = struct.Struct(">7h2xI")

# Each character table entry is a 16-bit index
CHARACTER_TABLE_ELEMENT_SIZE = 2

CHARACTER_SLOTS = 256


# -----------------------------------------------------------------------------
# Data Model
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FontMetrics:
    """Vertical metrics shared by every glyph."""

    ascending_height: int
    descending_height: int
    leading_height: int = 0
    leading_width: int = 0
    flags: int = 0

    @property
    def line_height(self) -> int:
        return self.ascending_height + self.descending_height


@dataclass(frozen=True)
class CharacterEntry:
    """Placement of a single character code."""

    code: int
    advance_width: int = 0
    bitmap_width: int = 0
    bitmap_height: int = 0
    origin_x: int = 0
    origin_y: int = 0
    hardware_index: int = 0
    pixels_offset: int = 0

    @property
    def has_bitmap(self) -> bool:
        return self.bitmap_width > 0 and self.bitmap_height > 0


@dataclass(frozen=True)
class FontResource:
    """A decoded font tag: metrics, character table and pixel atlas.

    Attributes:
        metrics: Font wide vertical metrics
        characters: 256 entries indexed by character code; codes the tag does
            not define hold an empty entry with zero advance width
        atlas: Flat, read-only uint8 intensity samples
        size: Number of bytes of the tag consumed by decoding
    """

    metrics: FontMetrics
    characters: tuple[CharacterEntry, ...]
    atlas: np.ndarray
    size: int

    def character(self, char: str) -> CharacterEntry:
        """Look up the entry for a single character, empty if undefined."""
        code = ord(char)
        if code >= CHARACTER_SLOTS:
            return CharacterEntry(code=code)
        return self.characters[code]

    def glyph_bitmap(self, entry: CharacterEntry) -> np.ndarray:
        """Return the (height, width) view of a glyph inside the atlas."""
        if not entry.has_bitmap:
            return np.zeros((0, 0), dtype=np.uint8)
        count = entry.bitmap_width * entry.bitmap_height
        pixels = self.atlas[entry.pixels_offset : entry.pixels_offset + count]
        return pixels.reshape(entry.bitmap_height, entry.bitmap_width)

    def defined_characters(self) -> list[str]:
        """Characters with a non-zero advance width, in code order."""
        return [chr(entry.code) for entry in self.characters if entry.advance_width]


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


class _TagReader:
    """Sequential reader over the tag bytes with bounds checking."""

    def __init__(self, data: bytes, position: int = 0):
        self.data = data
        self.position = position

    def require(self, count: int, what: str) -> None:
        if count < 0 or self.position + count > len(self.data):
            raise MalformedFont(
                f"{what} needs {count} bytes at 0x{self.position:X}, "
                f"but only {max(len(self.data) - self.position, 0)} remain"
            )

    def unpack(self, layout: struct.Struct, what: str) -> tuple:
        self.require(layout.size, what)
        values = layout.unpack_from(self.data, self.position)
        self.position += layout.size
        return values

    def skip(self, count: int, what: str) -> None:
        self.require(count, what)
        self.position += count

    def take(self, count: int, what: str) -> np.ndarray:
        self.require(count, what)
        if count:
            pixels = np.frombuffer(self.data, dtype=np.uint8, count=count, offset=self.position)
        else:
            pixels = np.zeros(0, dtype=np.uint8)
        pixels.flags.writeable = False
        self.position += count
        return pixels


def decode_font(data: bytes) -> FontResource:
    """Decode a font tag.

    Args:
        data: Raw bytes of the tag file

    Returns:
        FontResource with metrics, character table and atlas

    Raises:
        MalformedFont: If the header is short or any declared count reads
            past the end of the data
    """
    if len(data) < HEADER_OFFSET + HEADER_SIZE:
        raise MalformedFont(
            f"Font header expects 0x{HEADER_SIZE:X} bytes at 0x{HEADER_OFFSET:X}, "
            f"but the tag is only 0x{len(data):X} bytes long"
        )

    reader = _TagReader(data, HEADER_OFFSET)
    (
        flags,
        ascending_height,
        descending_height,
        leading_height,
        leading_width,
        table_count, _, _,
        character_count, _, _,
        pixel_count, _, _, _, _,
    ) = reader.unpack(HEADER_FORMAT, "font header")

    metrics = FontMetrics(
        ascending_height=ascending_height,
        descending_height=descending_height,
        leading_height=leading_height,
        leading_width=leading_width,
        flags=flags,
    )

    # Character tables are not used, but their payloads sit between the
    # header and the characters
    reader.require(table_count * REFLEXIVE_FORMAT.size, "character table reflexives")
    table_sizes = [
        reader.unpack(REFLEXIVE_FORMAT, "character table reflexive")[0]
        for _ in range(table_count)
    ]
    for size in table_sizes:
        reader.skip(size * CHARACTER_TABLE_ELEMENT_SIZE, "character table")

    reader.require(character_count * CHARACTER_FORMAT.size, "character entries")
    characters = [CharacterEntry(code=code) for code in range(CHARACTER_SLOTS)]
    for _ in range(character_count):
        entry = CharacterEntry(*reader.unpack(CHARACTER_FORMAT, "character entry"))
        if 0 < entry.code < CHARACTER_SLOTS:
            characters[entry.code] = entry

    atlas = reader.take(pixel_count, "pixel atlas")

    for entry in characters:
        if entry.has_bitmap:
            end = entry.pixels_offset + entry.bitmap_width * entry.bitmap_height
            if end > len(atlas):
                raise MalformedFont(
                    f"Glyph {entry.code:#04x} reads atlas bytes up to 0x{end:X}, "
                    f"but the atlas is only 0x{len(atlas):X} bytes"
                )

    logger.debug(
        "Decoded font: %d tables, %d characters, %d atlas bytes, line height %d",
        table_count,
        character_count,
        pixel_count,
        metrics.line_height,
    )

    return FontResource(
        metrics=metrics,
        characters=tuple(characters),
        atlas=atlas,
        size=reader.position,
    )


def load_font(path: Path) -> FontResource:
    """Read and decode a font tag from disk."""
    return decode_font(Path(path).read_bytes())
