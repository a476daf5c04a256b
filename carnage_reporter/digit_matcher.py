"""Digit template matcher for stat recognition.

Reads the score, kills, assists and deaths columns by matching rendered digit
templates (0-9 and the minus sign) left to right across a field.
Templates are rendered from the font on first use.
"""

import logging

from .decode import TextDecoder, parse_number
from .render import MonochromeImage

logger = logging.getLogger(__name__)


class DigitMatcher:
    """Numeric field reader sharing a TextDecoder's screen and templates."""

    def __init__(self, decoder: TextDecoder):
        self.decoder = decoder

    @property
    def templates(self) -> list[MonochromeImage]:
        """Digit templates, rendered on first access."""
        return self.decoder.templates.digits

    def read(self, x: int, y: int, end_x: int) -> str:
        """Decode the raw digit string of a field.

        The result only ever contains digits and the minus sign.
        """
        return self.decoder.decode(x, y, end_x, self.templates)

    def recognize(self, x: int, y: int, end_x: int) -> int:
        """Recognize the number in the field between x and end_x.

        Args:
            x: Column origin of the field
            y: Top of the row band
            end_x: Column origin of the next field (or the screen width)

        Returns:
            Parsed integer; 0 if nothing readable was found
        """
        text = self.read(x, y, end_x)
        value = parse_number(text)
        if not text:
            logger.debug("Empty numeric field at %d,%d", x, y)
        return value

