"""Error types raised while reading a carnage report."""


class CarnageReportError(ValueError):
    """Base class for every failure raised by the reader."""


class ImageLoadError(CarnageReportError):
    """The screenshot could not be decoded."""


class MalformedFont(CarnageReportError):
    """The font tag is truncated or its declared counts are inconsistent."""


class UnsupportedScreenshotShape(CarnageReportError):
    """The screenshot is not the fixed height the layout was measured at."""


class HeaderNotFound(CarnageReportError):
    """A column header could not be located with enough confidence."""

    def __init__(self, label: str, x: int, y: int, confidence: float, reason: str | None = None):
        self.label = label
        self.x = x
        self.y = y
        self.confidence = confidence
        if reason is None:
            reason = (
                f'Failed to find "{label}". Best guess was {x},{y}, '
                f"but we only got a {confidence * 100.0:.2f}% match."
            )
        super().__init__(reason)


class LowConfidenceDecode(CarnageReportError):
    """No template matched at the current position of a text run."""

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y
        super().__init__(f"No glyph matched at {x},{y}")
