"""Fixed measurements and thresholds for the carnage report screen.

All resolution-dependent values are defined here.
Measured at 480 pixel tall screenshots.
"""

SCREEN_HEIGHT: int = 480

# Column headers, in the left-to-right order they are searched for
HEADER_LABELS: tuple[str, ...] = ("Name", "Score", "Kills", "Assists", "Deaths")

# Where the search for the "Name" header starts (x, y)
NAME_SEARCH_ORIGIN: tuple[int, int] = (120, 120)

# Later headers start searching this many pixels above the "Name" row
HEADER_Y_BACKOFF: int = 10

HEADER_MIN_CONFIDENCE: float = 0.85
ROSTER_MIN_CONFIDENCE: float = 0.80

# Positional leeway (+/- pixels) when matching glyphs and roster names
GLYPH_SEARCH_REACH: int = 3
ROSTER_SEARCH_REACH: int = 2

# Top rows of a line band that hold ascenders of the row above
ASCENDER_SKIP_ROWS: int = 4

# A glyph is only tried if this fraction of its width fits before the run ends
GLYPH_OVERRUN_FRACTION: float = 0.5

# --- Pixel thresholds ---

BINARY_CUTOFF: int = 0x4F
MATCH_TOLERANCE: int = 0x10
TEAM_COLOR_CUTOFF: int = 0x7F

# Rendered glyphs are scaled to 3/4 intensity
TEMPLATE_INTENSITY: tuple[int, int] = (3, 4)

# Red, green, blue weights for grayscale conversion (sum to 255)
LUMA_WEIGHTS: tuple[int, int, int] = (0x90, 0x0F, 0x60)
