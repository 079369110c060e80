#!/usr/bin/env python3
"""
weave_pdfs.py
--------------------------------
Merge PDF and image files, in the order given, into ONE PDF.

Features:
- PDFs contribute all of their pages, unchanged.
- PNG/JPEG images are placed centred on their own page (Letter by default).
- Missing or unsupported files are reported and skipped; the rest are merged.
- The output is replaced atomically, so a failed run never leaves a half-written file.

Usage (common cases):
  python weave_pdfs.py -i cover.png -i report.pdf
  python weave_pdfs.py -i a.pdf -i b.pdf -o merged.pdf
  python weave_pdfs.py -i a.pdf -i scan.jpg --page-size A4 --margin 40
  python weave_pdfs.py -i a.pdf -i broken.pdf -i c.pdf --skip-unreadable
"""

import argparse
import logging
import sys
from typing import List, Optional

from pdfweaver.core import PAGE_SIZES, EngineConfig, Entry, merge_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Merge PDF and image files, in order, into one PDF.")
    parser.add_argument("-i", "--input", dest="inputs", action="append", default=[], metavar="PATH", help="Input file; repeat for each file, in merge order (at least 2)")
    parser.add_argument("-o", "--output", default="output.pdf", help="Output PDF path (default: output.pdf)")
    parser.add_argument("--page-size", choices=sorted(PAGE_SIZES), default="LETTER", help="Page size used for images (default: LETTER)")
    parser.add_argument("--margin", type=float, default=80.0, help="Total margin in points around images on each dimension (default: 80)")
    parser.add_argument("--skip-unreadable", action="store_true", help="Skip files that cannot be parsed instead of aborting the merge")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every merged file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.inputs) < 2:
        parser.error("at least 2 input files are required, e.g. -i <input_file_1> -i <input_file_2>")
    if args.margin < 0:
        parser.error("--margin must not be negative")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = EngineConfig(page_size=args.page_size, image_margin=args.margin)
    entries = [Entry.from_path(path) for path in args.inputs]

    print(f"Merging {len(entries)} file(s) into: {args.output}")
    result = merge_files(entries, args.output, config=config, skip_unreadable=args.skip_unreadable)

    if result.missing_paths:
        print(f"Found {len(result.missing_paths)} missing file(s):")
        for path in result.missing_paths:
            print(f"  {path}")
    if result.unsupported_paths:
        print(f"Skipped {len(result.unsupported_paths)} unsupported file(s):")
        for path in result.unsupported_paths:
            print(f"  {path}")
    if result.failed_paths:
        print(f"Could not process {len(result.failed_paths)} file(s):")
        for path in result.failed_paths:
            print(f"  {path}")

    if not result.ok:
        print(f"\n❌ Merge failed: {result.error}", file=sys.stderr)
        return 1

    print(f"\n✅ Saved {result.page_count} page(s) to: {result.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
