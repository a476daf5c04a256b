"""Read player statistics from postgame carnage report screenshots.

The report's own bitmap font is the recognition template set: headers,
names and numbers are found by matching rendered strings against the
binarized screenshot.
"""

from .errors import (
    CarnageReportError,
    HeaderNotFound,
    ImageLoadError,
    LowConfidenceDecode,
    MalformedFont,
    UnsupportedScreenshotShape,
)
from .font import FontResource, decode_font, load_font
from .recognize import PlayerStats, process_frame
from .utils import Screenshot, load_screenshot

__all__ = [
    "CarnageReportError",
    "FontResource",
    "HeaderNotFound",
    "ImageLoadError",
    "LowConfidenceDecode",
    "MalformedFont",
    "PlayerStats",
    "Screenshot",
    "UnsupportedScreenshotShape",
    "decode_font",
    "load_font",
    "load_screenshot",
    "process_frame",
]
