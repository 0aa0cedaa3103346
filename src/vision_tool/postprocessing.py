"""Post-processing for recognised text before it is laid out.

The synthesiser treats every ``\\n`` as a line slot, so the transcript must be
cleaned up without disturbing its line structure.

Steps
-----
1. Line endings   — ``\\r\\n`` becomes ``\\n``.  A bare ``\\r`` is left
                    alone and does not start a new line.
2. Code fences    — a transcript wrapped in a single Markdown code fence
                    (three backticks, optional language tag) is unwrapped.
                    Models add these even when told not to.
3. Trailing space — stripped from every line.

Blank lines are kept: a blank line between two paragraphs still shifts the
following lines down on the image.
"""

import re


# Whole-transcript fence: opening ``` with optional info string, closing ```
_WRAPPING_FENCE = re.compile(r"\A\s*```[\w+-]*[ \t]*\n(.*?)\n?```\s*\Z", re.DOTALL)


def _normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def _strip_wrapping_fence(text: str) -> str:
    m = _WRAPPING_FENCE.match(text)
    return m.group(1) if m else text


def clean_recognized_text(text: str) -> str:
    """Normalise raw model output into a plain multi-line transcript."""
    text = _normalize_line_endings(text)
    text = _strip_wrapping_fence(text)
    return "\n".join(line.rstrip() for line in text.split("\n"))
