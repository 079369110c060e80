from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image
from PyPDF2 import PdfWriter


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Write a PDF with *pages* blank pages; page ``n`` is ``100 + n`` points wide."""

    def _make(name: str, pages: int = 1) -> Path:
        writer = PdfWriter()
        for number in range(pages):
            writer.add_blank_page(width=100 + number, height=200)
        path = tmp_path / name
        with open(path, "wb") as handle:
            writer.write(handle)
        return path

    return _make


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, size: tuple[int, int] = (40, 20), mode: str = "RGB") -> Path:
        path = tmp_path / name
        color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
        Image.new(mode, size, color).save(path)
        return path

    return _make
