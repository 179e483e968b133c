"""Convert stored PR screenshots into one single-page PDF each.

Screenshots are discovered from disk, so this step can run on its own after a
capture run (``prshot-pdf``) or be invoked in-process at the end of one.
"""
from __future__ import annotations

import argparse
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import fitz  # PyMuPDF
from PIL import Image

from . import config
from .error_codes import ErrorCode
from .logging_utils import _log_event
from .utils import log_line, short_error_message

SCREENSHOT_NAME_PATTERN = re.compile(r"pr-(\d+)\.png")


class ScreenshotsDirMissing(Exception):
    pass


class AssemblyError(Exception):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code


@dataclass(frozen=True)
class ScreenshotFile:
    identifier: int
    path: Path


@dataclass(frozen=True)
class AssembledDocument:
    identifier: int
    source_image_path: Path
    output_path: Path
    page_width: float
    page_height: float


@dataclass
class AssemblyStatistics:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    documents: List[AssembledDocument] = field(default_factory=list)
    failures: List[Tuple[int, str]] = field(default_factory=list)


def list_screenshots(screenshots_dir: Optional[Path] = None) -> List[ScreenshotFile]:
    """Return ``pr-*.png`` files under ``screenshots_dir`` sorted by PR number."""

    directory = screenshots_dir or config.SCREENSHOTS_DIR
    if not directory.is_dir():
        raise ScreenshotsDirMissing(f"Screenshot directory not found: {directory}")

    shots = []
    for path in directory.glob("pr-*.png"):
        if not path.is_file():
            continue
        match = SCREENSHOT_NAME_PATTERN.fullmatch(path.name)
        shots.append(ScreenshotFile(identifier=int(match.group(1)) if match else 0, path=path))
    return sorted(shots, key=lambda shot: (shot.identifier, shot.path.name))


def compute_page_size(
    width: float, height: float, max_width: Optional[float] = None
) -> Tuple[float, float]:
    """Return the page size for an image of ``width`` x ``height``.

    Images wider than ``max_width`` are scaled down uniformly; narrower ones
    keep their size. Height is never clamped.
    """

    limit = config.PDF_MAX_WIDTH if max_width is None else max_width
    if width > limit:
        return float(limit), height * (limit / width)
    return float(width), float(height)


def read_image_size(path: Path) -> Tuple[int, int]:
    """Return the pixel size of ``path`` without decoding the raster.

    Full-page captures can be far taller than Pillow's decompression-bomb
    limit; the guard is lifted while reading our own screenshots.
    """

    limit = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = None
    try:
        with Image.open(path) as image:
            size = image.size
            image.verify()
        return size
    except Exception as exc:  # noqa: BLE001
        raise AssemblyError(ErrorCode.IMAGE_READ_FAILED, short_error_message(exc)) from exc
    finally:
        Image.MAX_IMAGE_PIXELS = limit


def render_pdf(image_path: Path, page_width: float, page_height: float) -> bytes:
    """Return PDF bytes holding ``image_path`` stretched over one page."""

    try:
        with fitz.open() as doc:
            page = doc.new_page(width=page_width, height=page_height)
            page.insert_image(page.rect, filename=str(image_path), keep_proportion=False)
            return doc.tobytes(garbage=3, deflate=True)
    except Exception as exc:  # noqa: BLE001
        raise AssemblyError(ErrorCode.ENCODING_FAILED, short_error_message(exc)) from exc


def assemble_document(shot: ScreenshotFile, pdfs_dir: Optional[Path] = None) -> AssembledDocument:
    """Write the single-page PDF for ``shot`` and describe it."""

    width, height = read_image_size(shot.path)
    page_width, page_height = compute_page_size(width, height)
    data = render_pdf(shot.path, page_width, page_height)

    output_path = config.pdf_path(shot.identifier, pdfs_dir)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
    except OSError as exc:
        raise AssemblyError(ErrorCode.ENCODING_FAILED, short_error_message(exc)) from exc

    return AssembledDocument(
        identifier=shot.identifier,
        source_image_path=shot.path,
        output_path=output_path,
        page_width=page_width,
        page_height=page_height,
    )


def assemble_all(
    screenshots_dir: Optional[Path] = None,
    pdfs_dir: Optional[Path] = None,
) -> AssemblyStatistics:
    """Create one PDF per stored screenshot; per-image failures are counted."""

    shots = list_screenshots(screenshots_dir)
    stats = AssemblyStatistics(total=len(shots))
    if not shots:
        log_line(f"No screenshots found in {screenshots_dir or config.SCREENSHOTS_DIR}")
        return stats

    log_line(f"Found {len(shots)} screenshot(s)")
    for index, shot in enumerate(shots, start=1):
        log_line(f"[{index}/{len(shots)}] Building PDF for PR #{shot.identifier}")
        try:
            document = assemble_document(shot, pdfs_dir)
        except AssemblyError as exc:
            stats.failed += 1
            stats.failures.append((shot.identifier, str(exc)))
            log_line(f"  [PDF][ERROR] PR #{shot.identifier}: {exc}")
            _log_event(
                "pdf", identifier=shot.identifier, outcome="failure", error_code=exc.error_code
            )
            continue

        stats.succeeded += 1
        stats.documents.append(document)
        log_line(
            f"  Saved -> {document.output_path.name} "
            f"({document.page_width:.0f}x{document.page_height:.0f}pt)"
        )
        _log_event("pdf", identifier=shot.identifier, outcome="success")
    return stats


def report_assembly(stats: AssemblyStatistics, pdfs_dir: Optional[Path] = None) -> None:
    log_line("=== PDF generation finished ===")
    log_line(f"Total: {stats.total}")
    log_line(f"Succeeded: {stats.succeeded}")
    log_line(f"Failed: {stats.failed}")
    log_line(f"Saved to: {pdfs_dir or config.PDFS_DIR}/")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the standalone PDF builder."""

    parser = argparse.ArgumentParser(
        description="Build one PDF per captured pull request screenshot.",
    )
    parser.add_argument("--screenshots-dir", type=Path, default=None)
    parser.add_argument("--pdfs-dir", type=Path, default=None)
    args = parser.parse_args(list(argv) if argv is not None else None)

    (args.pdfs_dir or config.PDFS_DIR).mkdir(parents=True, exist_ok=True)
    try:
        stats = assemble_all(args.screenshots_dir, args.pdfs_dir)
    except ScreenshotsDirMissing as exc:
        log_line(f"[PDF][ERROR] {exc}")
        return 1
    if stats.total:
        report_assembly(stats, args.pdfs_dir)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())


__all__ = [
    "AssembledDocument",
    "AssemblyError",
    "AssemblyStatistics",
    "ScreenshotFile",
    "ScreenshotsDirMissing",
    "assemble_all",
    "assemble_document",
    "compute_page_size",
    "list_screenshots",
    "main",
]
