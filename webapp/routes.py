"""Web routes for the PDF weaver application."""

from __future__ import annotations

import io
import os
import tempfile
import typing as t

from flask import Blueprint, Response, current_app, request, send_file
from werkzeug.utils import secure_filename

from pdfweaver.core import EngineConfig, Entry, MergeResult, merge_files

bp = Blueprint("routes", __name__)


def _engine_config() -> EngineConfig:
    return EngineConfig(
        page_size=current_app.config["PDFWEAVER_PAGE_SIZE"],
        image_margin=float(current_app.config["PDFWEAVER_IMAGE_MARGIN"]),
    )


def _excluded_indexes(form_data: t.Any) -> set[int]:
    """Parse the ``excluded`` form values into upload positions."""

    indexes: set[int] = set()
    for value in form_data.getlist("excluded"):
        try:
            indexes.add(int(value))
        except ValueError:
            continue
    return indexes


@bp.post("/merge")
def merge() -> Response | tuple[str, int]:
    """Accept uploaded PDFs and images and return them merged, in upload order."""

    uploaded_files = [storage for storage in request.files.getlist("files") if storage.filename]
    if not uploaded_files:
        return "No files were uploaded.", 400

    excluded = _excluded_indexes(request.form)
    if all(index in excluded for index in range(len(uploaded_files))):
        return "No files are selected for merging.", 400

    with tempfile.TemporaryDirectory(prefix="pdfweaver-") as workdir:
        entries: list[Entry] = []
        for index, storage in enumerate(uploaded_files):
            # Prefix keeps uploads with the same name from overwriting each other.
            path = os.path.join(workdir, f"{index:04d}-{secure_filename(storage.filename) or 'upload'}")
            storage.save(path)
            entries.append(
                Entry(included=index not in excluded, display_name=storage.filename, path=path)
            )

        output_path = os.path.join(workdir, "merged.pdf")
        result: MergeResult = merge_files(
            entries,
            output_path,
            config=_engine_config(),
            skip_unreadable=current_app.config["PDFWEAVER_SKIP_UNREADABLE"],
        )

        names = {entry.path: entry.display_name for entry in entries}
        if not result.ok:
            message = "Unable to merge the provided files."
            if result.failed_paths:
                failed_list = ", ".join(names[path] for path in result.failed_paths)
                message = f"Unable to merge the provided files. Could not process: {failed_list}."
            return message, 422

        with open(output_path, "rb") as merged_file:
            buffer = io.BytesIO(merged_file.read())

    response = send_file(
        buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name="merged.pdf",
    )

    response.headers["X-PDFWeaver-Page-Count"] = str(result.page_count)
    if result.unsupported_paths:
        response.headers["X-PDFWeaver-Unsupported"] = ",".join(names[path] for path in result.unsupported_paths)
    if result.failed_paths:
        response.headers["X-PDFWeaver-Failed"] = ",".join(names[path] for path in result.failed_paths)

    return response
