"""Tests for field decoding and confusable character correction."""

import numpy as np
import pytest

from carnage_reporter.decode import CONFUSABLE_PAIRS, TextDecoder, parse_number
from carnage_reporter.digit_matcher import DigitMatcher
from carnage_reporter.matcher import similarity

from conftest import ADVANCE_WIDTH, ASCENDING_HEIGHT

FIELD_X = 10
FIELD_Y = 10


@pytest.fixture
def screen():
    return np.zeros((60, 200), dtype=np.uint8)


@pytest.fixture
def paste(templates):
    def _paste(screen, text, x=FIELD_X, y=FIELD_Y):
        template = templates.render(text)
        screen[y : y + template.height, x : x + template.width] |= template.pixels

    return _paste


@pytest.fixture
def decoder(screen, templates):
    return TextDecoder(screen, templates, ASCENDING_HEIGHT)


class TestTextExtent:
    def test_extent_ends_after_last_lit_column(self, screen, paste, decoder):
        paste(screen, "Ian")
        # The 'n' bitmap is 10 wide inside a 12 pixel advance
        assert decoder.text_extent(FIELD_X, FIELD_Y, 200) == FIELD_X + 2 * ADVANCE_WIDTH + 10

    def test_extent_is_limited_by_end(self, screen, paste, decoder):
        paste(screen, "Ian")
        assert decoder.text_extent(FIELD_X, FIELD_Y, FIELD_X + 15) <= FIELD_X + 15

    def test_blank_field(self, decoder):
        assert decoder.text_extent(FIELD_X, FIELD_Y, 200) == FIELD_X + 1

    def test_ascender_rows_are_ignored(self, screen, decoder):
        # Pixels in the top rows of the band belong to the row above
        screen[FIELD_Y : FIELD_Y + 4, 100:110] = 0xFF
        assert decoder.text_extent(FIELD_X, FIELD_Y, 200) == FIELD_X + 1


class TestDecode:
    def test_decodes_name(self, screen, paste, decoder, templates):
        paste(screen, "Alice")
        assert decoder.decode(FIELD_X, FIELD_Y, 200, templates.glyphs) == "Alice"

    def test_decodes_with_displacement(self, screen, paste, decoder, templates):
        paste(screen, "Shot", x=FIELD_X + 2, y=FIELD_Y + 3)
        assert decoder.decode(FIELD_X, FIELD_Y, 200, templates.glyphs) == "Shot"

    def test_decodes_digits(self, screen, paste, decoder, templates):
        paste(screen, "-12")
        assert decoder.decode(FIELD_X, FIELD_Y, 200, templates.digits) == "-12"

    def test_empty_field_decodes_to_empty_string(self, decoder, templates):
        assert decoder.decode(FIELD_X, FIELD_Y, 200, templates.glyphs) == ""

    def test_run_outside_screen_ends_early(self, templates):
        # The band fits, but no template does: every score is zero
        screen = np.zeros((20, 40), dtype=np.uint8)
        screen[8:12, 5:30] = 0xFF
        decoder = TextDecoder(screen, templates, ASCENDING_HEIGHT)
        assert decoder.decode(2, 4, 40, templates.glyphs) == ""

    def test_stops_at_end_of_field(self, screen, paste, decoder, templates):
        paste(screen, "Kost")
        paste(screen, "10", x=FIELD_X + 5 * ADVANCE_WIDTH)
        assert decoder.decode(FIELD_X, FIELD_Y, FIELD_X + 5 * ADVANCE_WIDTH, templates.glyphs) == "Kost"

    def test_digit_templates_never_emit_letters(self, screen, paste, decoder, templates):
        paste(screen, "Kost")
        text = decoder.decode(FIELD_X, FIELD_Y, 200, templates.digits)
        assert set(text) <= set("0123456789-")


class TestConfusables:
    def test_pairs_are_ordered(self):
        assert CONFUSABLE_PAIRS[:3] == (("l", "i"), ("I", "i"), ("I", "l"))

    def test_picks_higher_scoring_render(self, screen, paste, decoder, templates):
        paste(screen, "Ian")
        # Perturb one pixel of the I's top bar toward an l
        screen[FIELD_Y + 2, FIELD_X] = 0

        scores = {
            text: similarity(templates.render(text), screen, FIELD_X, FIELD_Y)
            for text in ("Ian", "lan")
        }
        expected = "Ian" if scores["Ian"] > scores["lan"] else "lan"

        results = {decoder.correct_confusables("lan", FIELD_X, FIELD_Y) for _ in range(3)}
        assert results == {expected}
        assert expected == "Ian"

    def test_fuzzy_decode_fixes_name(self, screen, paste, decoder, templates):
        paste(screen, "Ian")
        assert decoder.decode(FIELD_X, FIELD_Y, 200, templates.glyphs, fuzzy=True) == "Ian"

    def test_correct_text_is_kept(self, screen, paste, decoder):
        paste(screen, "Alice")
        assert decoder.correct_confusables("Alice", FIELD_X, FIELD_Y) == "Alice"

    def test_corrects_each_position(self, screen, paste, decoder):
        paste(screen, "mean")
        assert decoder.correct_confusables("naen", FIELD_X, FIELD_Y) == "mean"

    def test_tie_goes_to_second_alternative(self, decoder):
        # Neither render fits at this position, both score zero
        assert decoder.correct_confusables("l", 195, FIELD_Y) == "i"


class TestDigitMatcher:
    def test_recognize(self, screen, paste, decoder):
        paste(screen, "42")
        assert DigitMatcher(decoder).recognize(FIELD_X, FIELD_Y, 200) == 42

    def test_negative(self, screen, paste, decoder):
        paste(screen, "-3")
        assert DigitMatcher(decoder).recognize(FIELD_X, FIELD_Y, 200) == -3

    def test_blank_field_is_zero(self, decoder):
        assert DigitMatcher(decoder).recognize(FIELD_X, FIELD_Y, 200) == 0


@pytest.mark.parametrize(
    "text, expected",
    [("10", 10), ("-7", -7), ("", 0), ("-", 0), ("3-4", 3), ("--2", 0), ("007", 7)],
)
def test_parse_number(text, expected):
    assert parse_number(text) == expected
