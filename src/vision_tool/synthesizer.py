"""Word-level bounding boxes synthesised from plain recognised text.

Vision models return a transcript but no geometry.  To highlight words on the
image we lay the transcript out again as if it were set in a monospace font:
every line gets a fixed vertical slot and every word a width proportional to
its character count.  The boxes are approximations, not measurements.

All layout constants are fractions of the image size so the same transcript
lands in the same relative place on any resolution:

=================  =====================
line height        15 % of image height
top padding         9 % of image height
left padding        4 % of image width
average char      2.2 % of image width
space             half a character
word gap          0.8 of a character
=================  =====================

Blank lines keep their slot, so a paragraph break pushes the following lines
down by one line height.
"""

import logging
import math
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

NO_TEXT_DETECTED = "No text detected"
BLOCK_CONFIDENCE = 0.95

LINE_HEIGHT_RATIO = 0.15
PADDING_TOP_RATIO = 0.09
PADDING_LEFT_RATIO = 0.04
CHAR_WIDTH_RATIO = 0.022
SPACE_RATIO = 0.5
WORD_GAP_RATIO = 0.8
BOX_HEIGHT_RATIO = 0.55


@dataclass(frozen=True)
class TextBlock:
    text: str
    x: int
    y: int
    width: int
    height: int
    confidence: float = BLOCK_CONFIDENCE


@dataclass
class OCRResult:
    text_blocks: list[TextBlock] = field(default_factory=list)
    full_text: str = NO_TEXT_DETECTED
    language: str = "en"


def _round(value: float) -> int:
    """Round half up; layout values are never negative."""
    return math.floor(value + 0.5)


def synthesize(raw_text: str, image_width: float, image_height: float) -> OCRResult:
    """Lay *raw_text* out over an image of the given size.

    Returns the sentinel result (no blocks, ``"No text detected"``) when the
    text is empty or whitespace only.
    """
    text = raw_text.strip()
    if not text:
        return OCRResult()

    line_height = image_height * LINE_HEIGHT_RATIO
    padding_top = image_height * PADDING_TOP_RATIO
    padding_left = image_width * PADDING_LEFT_RATIO
    avg_char_width = image_width * CHAR_WIDTH_RATIO
    space_width = avg_char_width * SPACE_RATIO
    word_gap = avg_char_width * WORD_GAP_RATIO
    box_height = _round(line_height * BOX_HEIGHT_RATIO)

    blocks: list[TextBlock] = []
    for index, line in enumerate(text.split("\n")):
        words = line.split()
        if not words:
            continue
        y = _round(padding_top + index * line_height)
        x = padding_left
        for word in words:
            word_width = len(word) * avg_char_width
            blocks.append(TextBlock(
                text=word,
                x=_round(x),
                y=y,
                width=_round(word_width),
                height=box_height,
            ))
            x += word_width + space_width + word_gap

    logger.debug(
        "Synthesised %d block(s) for %gx%g image", len(blocks), image_width, image_height
    )
    return OCRResult(text_blocks=blocks, full_text=text, language="en")
