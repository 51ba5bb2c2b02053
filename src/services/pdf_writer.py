"""Minimal flowing-text PDF writer on top of PyMuPDF."""

import logging
from pathlib import Path

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

A4_WIDTH, A4_HEIGHT = fitz.paper_size("a4")


def trim(value: str, max_len: int) -> str:
    """Shorten to max_len characters, ending with '...' when cut."""
    if len(value) <= max_len:
        return value
    if max_len <= 3:
        return value[:max_len]
    return value[: max_len - 3] + "..."


class PdfWriter:
    """Writes lines and table rows top to bottom, adding pages as needed.

    A TrueType font (e.g. DejaVuSans) is embedded when ``font_path`` points to
    an existing file; otherwise the built-in Helvetica is used, which has no
    Cyrillic glyphs.
    """

    def __init__(self, font_path: str | None = None, margin: float = 40):
        self.margin = margin
        self.fontname = "helv"
        self.fontfile = None
        if font_path:
            if Path(font_path).is_file():
                self.fontname = "unicode"
                self.fontfile = str(font_path)
            else:
                logger.warning("PDF font %s not found, falling back to Helvetica", font_path)

        self.doc = fitz.open()
        self.page = None
        self.y = 0.0
        self.new_page()

    def new_page(self) -> None:
        self.page = self.doc.new_page(width=A4_WIDTH, height=A4_HEIGHT)
        self.y = self.margin

    def _ensure_room(self, height: float) -> None:
        if self.y + height > A4_HEIGHT - self.margin:
            self.new_page()

    def _text(self, x: float, text: str, size: float) -> None:
        self.page.insert_text(
            fitz.Point(x, self.y),
            text,
            fontsize=size,
            fontname=self.fontname,
            fontfile=self.fontfile,
        )

    def line(self, text: str = "", size: float = 10, indent: float = 0, gap: float = 4) -> None:
        self._ensure_room(size + gap)
        self.y += size
        if text:
            self._text(self.margin + indent, text, size)
        self.y += gap

    def skip(self, height: float) -> None:
        self.y += height

    def rule(self) -> None:
        self._ensure_room(4)
        self.page.draw_line(
            fitz.Point(self.margin, self.y + 2),
            fitz.Point(A4_WIDTH - self.margin, self.y + 2),
        )
        self.y += 4

    def row(self, cells: list[tuple[str, float]], size: float = 9, gap: float = 4) -> None:
        """Write one table row; each cell is (text, width in points)."""
        self._ensure_room(size + gap)
        self.y += size
        x = self.margin
        for text, width in cells:
            if text:
                self._text(x, text, size)
            x += width
        self.y += gap

    def tobytes(self) -> bytes:
        data = self.doc.tobytes()
        self.doc.close()
        return data


__all__ = ["PdfWriter", "trim", "A4_WIDTH", "A4_HEIGHT"]
