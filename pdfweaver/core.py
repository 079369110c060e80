"""Merge engine shared by the command line and web front ends."""

from __future__ import annotations

import enum
import io
import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, LEGAL, LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

try:
    from PyPDF2 import PdfReader, PdfWriter
except Exception as exc:  # pragma: no cover - import guard kept for CLI compatibility
    raise RuntimeError(
        "PyPDF2 is required. Install with: python -m pip install PyPDF2"
    ) from exc

logger = logging.getLogger(__name__)

PAGE_SIZES = {
    "LETTER": LETTER,
    "LEGAL": LEGAL,
    "A4": A4,
}

DOCUMENT = "document"
IMAGE = "image"


class MergeError(Exception):
    """Base class for errors raised while merging a single entry."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ProcessingError(MergeError):
    """An existing file could not be parsed or rendered as its claimed format."""

    def __init__(self, path: str, reason: str = "could not be processed") -> None:
        super().__init__(path, reason)


class UnsupportedFormatError(MergeError):
    def __init__(self, path: str) -> None:
        super().__init__(path, "unsupported file format")


class WriteError(MergeError):
    def __init__(self, path: str, reason: str = "could not write output") -> None:
        super().__init__(path, reason)


@dataclass(frozen=True)
class Entry:
    """One candidate input: inclusion flag, name shown to the user, path on disk."""

    included: bool
    display_name: str
    path: str

    @classmethod
    def from_path(cls, path: str, included: bool = True) -> "Entry":
        return cls(included=included, display_name=os.path.basename(path), path=path)


class MergeStatus(enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class MergeResult:
    """Outcome of one :func:`merge_files` call."""

    status: MergeStatus
    output_path: str
    page_count: int = 0
    missing_paths: List[str] = field(default_factory=list)
    unsupported_paths: List[str] = field(default_factory=list)
    failed_paths: List[str] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is MergeStatus.SUCCESS


@dataclass(frozen=True)
class EngineConfig:
    """Page layout for rendered images and the recognized file extensions."""

    page_size: str = "LETTER"
    image_margin: float = 80.0
    document_extensions: Tuple[str, ...] = (".pdf",)
    image_extensions: Tuple[str, ...] = (".png", ".jpg", ".jpeg")

    @property
    def page_dimensions(self) -> Tuple[float, float]:
        try:
            return PAGE_SIZES[self.page_size]
        except KeyError:
            raise ValueError(
                f"Unknown page size {self.page_size!r}; expected one of {', '.join(PAGE_SIZES)}"
            ) from None

    @property
    def accepted_extensions(self) -> Tuple[str, ...]:
        return self.document_extensions + self.image_extensions


DEFAULT_CONFIG = EngineConfig()


def resolve_selection(entries: Iterable[Entry]) -> List[Entry]:
    """Return the included entries, in the order they were supplied."""

    return [entry for entry in entries if entry.included]


def classify(entry: Entry, config: EngineConfig = DEFAULT_CONFIG) -> str:
    """Return ``"document"`` or ``"image"`` for *entry* based on its file name.

    The extension is compared exactly as supplied, so ``scan.PDF`` is not a
    document. Anything else raises :class:`UnsupportedFormatError`.
    """

    extension = os.path.splitext(entry.display_name)[1]
    if extension in config.document_extensions:
        return DOCUMENT
    if extension in config.image_extensions:
        return IMAGE
    raise UnsupportedFormatError(entry.path)


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA", "P"):
        if image.mode == "P":
            image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image.copy()


def fit_within(
    image_size: Tuple[int, int],
    page_size: Tuple[float, float],
    margin: float,
) -> Tuple[float, float, float, float]:
    """Return ``(x, y, width, height)`` placing an image centred on a page.

    The image is scaled, up or down, to fit inside the page shrunk by
    *margin* on each dimension, keeping its aspect ratio.
    """

    image_w, image_h = image_size
    page_w, page_h = page_size
    box_w = max(page_w - margin, 1.0)
    box_h = max(page_h - margin, 1.0)
    scale = min(box_w / image_w, box_h / image_h)
    width = image_w * scale
    height = image_h * scale
    return (page_w - width) / 2, (page_h - height) / 2, width, height


def image_to_pdf_stream(path: str, config: EngineConfig = DEFAULT_CONFIG) -> io.BytesIO:
    """Render the image at *path* onto a single in-memory PDF page."""

    try:
        with Image.open(path) as source:
            source.load()
            image = _flatten_to_rgb(source)
    except Exception as exc:
        raise ProcessingError(path, "could not read image") from exc

    page_size = config.page_dimensions
    x, y, width, height = fit_within(image.size, page_size, config.image_margin)

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=page_size)
    pdf.drawImage(ImageReader(image), x, y, width=width, height=height)
    pdf.showPage()
    pdf.save()
    buffer.seek(0)
    return buffer


def load_fragment(entry: Entry, config: EngineConfig = DEFAULT_CONFIG) -> PdfReader:
    """Return a parsed PDF holding the pages *entry* contributes.

    Documents are read as-is; images become a single rendered page.
    """

    kind = classify(entry, config)
    if kind == IMAGE:
        source = image_to_pdf_stream(entry.path, config)
    else:
        source = entry.path

    try:
        reader = PdfReader(source)
        # PdfReader is lazy; touching the page tree surfaces broken files here.
        len(reader.pages)
    except Exception as exc:
        raise ProcessingError(entry.path, "could not parse PDF") from exc
    return reader


def _output_mode(output_path: str) -> int:
    """Return the permission bits the output should end up with."""

    try:
        return stat.S_IMODE(os.stat(output_path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_pdf_atomic(writer: PdfWriter, output_path: str) -> None:
    """Write *writer* to *output_path*, replacing any existing file in one step."""

    directory = os.path.dirname(os.path.abspath(output_path)) or "."
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".pdfweaver-", suffix=".pdf", dir=directory)
        with os.fdopen(fd, "wb") as out_file:
            writer.write(out_file)
        # mkstemp creates 0600; match what open(output_path, "wb") would leave.
        os.chmod(tmp_path, _output_mode(output_path))
        os.replace(tmp_path, output_path)
        tmp_path = None
    except Exception as exc:
        raise WriteError(output_path, f"could not write output ({exc})") from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)


def merge_files(
    entries: Sequence[Entry],
    output_path: str,
    config: Optional[EngineConfig] = None,
    skip_unreadable: bool = False,
) -> MergeResult:
    """Merge the included *entries*, in order, into a PDF at *output_path*.

    Missing and unsupported files are reported on the result and skipped.
    A file that exists but cannot be processed aborts the merge unless
    *skip_unreadable* is set. Failures never raise; they are reported through
    ``result.status`` and ``result.error``.
    """

    config = config or DEFAULT_CONFIG
    result = MergeResult(status=MergeStatus.SUCCESS, output_path=output_path)

    logger.info("Loading and merging %d file(s)", len(entries))
    writer = PdfWriter()

    try:
        for entry in resolve_selection(entries):
            if not os.path.exists(entry.path):
                logger.warning("Missing file: %s", entry.path)
                result.missing_paths.append(entry.path)
                continue

            try:
                fragment = load_fragment(entry, config)
            except UnsupportedFormatError:
                logger.warning("Unsupported file format: %s", entry.path)
                result.unsupported_paths.append(entry.path)
                continue
            except ProcessingError as exc:
                result.failed_paths.append(entry.path)
                if not skip_unreadable:
                    raise
                logger.warning("Skipping %s: %s", entry.path, exc.__cause__ or exc)
                continue

            logger.info("Merging %s", entry.path)
            for page in fragment.pages:
                writer.add_page(page)
                result.page_count += 1

        logger.info("Saving the result into %s", output_path)
        write_pdf_atomic(writer, output_path)
    except MergeError as exc:
        logger.error("Merge failed: %s", exc)
        result.status = MergeStatus.FAILURE
        result.error = exc
    except Exception as exc:
        logger.exception("Unexpected error during merge into %s", output_path)
        result.status = MergeStatus.FAILURE
        result.error = exc

    return result
