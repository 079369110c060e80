"""Core utilities for the PDF weaver project."""

from .core import (
    EngineConfig,
    Entry,
    MergeError,
    MergeResult,
    MergeStatus,
    ProcessingError,
    UnsupportedFormatError,
    WriteError,
    classify,
    fit_within,
    image_to_pdf_stream,
    load_fragment,
    merge_files,
    resolve_selection,
    write_pdf_atomic,
)
from .selection import EntrySelection, NothingToMergeError, discover_inputs, natural_key

__all__ = [
    "EngineConfig",
    "Entry",
    "EntrySelection",
    "MergeError",
    "MergeResult",
    "MergeStatus",
    "NothingToMergeError",
    "ProcessingError",
    "UnsupportedFormatError",
    "WriteError",
    "classify",
    "discover_inputs",
    "fit_within",
    "image_to_pdf_stream",
    "load_fragment",
    "merge_files",
    "natural_key",
    "resolve_selection",
    "write_pdf_atomic",
]
