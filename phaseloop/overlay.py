"""
Text-overlay layout for preview images.

Computes where a semi-opaque caption band and its text go on a canvas.
Pure geometry: no pixels are touched here (see preview.py for rendering).
"""

import html
import re
from dataclasses import dataclass, field

# Reference design: an 800 px canvas with a 22 px headline and 14 px body
BASE_WIDTH = 800
HEADLINE_BASE_FONT = 22
BODY_BASE_FONT = 14
HEADLINE_FONT_RANGE = (16, 64)
BODY_FONT_RANGE = (12, 40)

# Average glyph width as a fraction of font size
HEADLINE_GLYPH_FACTOR = 0.9
BODY_GLYPH_FACTOR = 0.7

MAX_LINES_PER_BLOCK = 2
PADDING = 15
LINE_SPACING = 1.25
BLOCK_GAP = 6
BOTTOM_MARGIN = 20
MIN_BAND_HEIGHT = 90
BAND_OPACITY = 0.7

_BOLD_RE = re.compile(r"\*\*|__")
_SENTENCE_END_RE = re.compile(r"[.!?]")


@dataclass
class TextRow:
    """One line of text placed inside the band."""
    text: str
    font_size: int
    y: int  # Top of the line, relative to the band top
    is_headline: bool


@dataclass
class OverlaySpec:
    """Computed caption band layout for one canvas."""
    width: int
    height: int
    headline_lines: list[str]
    description_lines: list[str]
    headline_font_size: int
    description_font_size: int
    band_height: int
    band_top: int
    padding: int = PADDING
    line_spacing: float = LINE_SPACING
    opacity: float = BAND_OPACITY
    rows: list[TextRow] = field(default_factory=list)

    def to_svg(self) -> str:
        """Describe the band as an SVG fragment, with all text escaped."""
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" height="{self.band_height}">',
            f'<rect x="0" y="0" width="{self.width}" height="{self.band_height}" '
            f'fill="#000000" opacity="{self.opacity}"/>',
        ]
        for row in self.rows:
            baseline = row.y + row.font_size
            if row.is_headline:
                style = f"font-family: 'Arial Black', Gadget, sans-serif; font-size: {row.font_size}px; font-weight: 900;"
                fill = "#FFFFFF"
            else:
                style = f"font-family: Arial, sans-serif; font-size: {row.font_size}px;"
                fill = "#DDDDDD"
            parts.append(
                f'<text x="{self.padding}" y="{baseline}" style="{style}" fill="{fill}">'
                f"{escape_markup(row.text)}</text>"
            )
        parts.append("</svg>")
        return "".join(parts)


def strip_bold(text: str) -> str:
    """Remove markdown bold markers."""
    return _BOLD_RE.sub("", text).strip()


def escape_markup(text: str) -> str:
    """Escape < > & ' \" for embedding in markup."""
    return html.escape(text, quote=True)


def first_sentence(text: str) -> str:
    """Text up to the first sentence terminator, with a period re-appended."""
    sentence = _SENTENCE_END_RE.split(text or "", maxsplit=1)[0].strip()
    return f"{sentence}." if sentence else ""


def wrap_text(text: str, max_chars: int, max_lines: int = MAX_LINES_PER_BLOCK) -> list[str]:
    """
    Greedy word wrap.

    Words are appended while the line stays within max_chars; a word that
    would overflow starts a new line. A single word longer than max_chars
    (a URL, say) is cut into max_chars pieces. Lines past max_lines are dropped.
    """
    lines: list[str] = []
    current = ""
    for word in _split_long_words(text.split(), max_chars):
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= max_chars:
            current = f"{current} {word}"
        else:
            lines.append(current)
            if len(lines) == max_lines:
                return lines
            current = word
    if current:
        lines.append(current)
    return lines[:max_lines]


def _split_long_words(words: list[str], max_chars: int) -> list[str]:
    pieces: list[str] = []
    for word in words:
        pieces.extend(word[i:i + max_chars] for i in range(0, len(word), max(max_chars, 1)))
    return pieces


def scaled_font_size(width: int, base_size: int, bounds: tuple[int, int]) -> int:
    """Scale a reference font size with canvas width, clamped to bounds."""
    low, high = bounds
    return max(low, min(high, round(width * base_size / BASE_WIDTH)))


def chars_per_line(width: int, font_size: int, glyph_factor: float, padding: int = PADDING) -> int:
    """Approximate character budget for one line."""
    usable = max(width - 2 * padding, 1)
    return max(1, int(usable / (font_size * glyph_factor)))


def compute_overlay(headline: str, description: str, width: int, height: int) -> OverlaySpec:
    """
    Lay out a caption band for the bottom of a width x height canvas.

    Only the first sentence of the description is shown. Each text block is
    capped at two lines. The band has a minimum height and is anchored
    BOTTOM_MARGIN above the bottom edge; its top never goes above the canvas.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {width}x{height}")

    headline_font = scaled_font_size(width, HEADLINE_BASE_FONT, HEADLINE_FONT_RANGE)
    body_font = scaled_font_size(width, BODY_BASE_FONT, BODY_FONT_RANGE)

    headline_lines = wrap_text(
        strip_bold(headline or ""),
        chars_per_line(width, headline_font, HEADLINE_GLYPH_FACTOR),
    )
    description_lines = wrap_text(
        first_sentence(description or ""),
        chars_per_line(width, body_font, BODY_GLYPH_FACTOR),
    )

    rows: list[TextRow] = []
    y = float(PADDING)
    for line in headline_lines:
        rows.append(TextRow(text=line, font_size=headline_font, y=round(y), is_headline=True))
        y += headline_font * LINE_SPACING
    if headline_lines and description_lines:
        y += BLOCK_GAP
    for line in description_lines:
        rows.append(TextRow(text=line, font_size=body_font, y=round(y), is_headline=False))
        y += body_font * LINE_SPACING

    band_height = max(MIN_BAND_HEIGHT, height // 9, round(y + PADDING))
    band_height = min(band_height, height)
    band_top = max(0, height - band_height - BOTTOM_MARGIN)

    return OverlaySpec(
        width=width,
        height=height,
        headline_lines=headline_lines,
        description_lines=description_lines,
        headline_font_size=headline_font,
        description_font_size=body_font,
        band_height=band_height,
        band_top=band_top,
        rows=rows,
    )
