"""
Document acquisition and conversion helpers.

- Fetch the input document (http(s) URL or local path) into the run's temp dir
- Convert office/text documents to PDF with headless LibreOffice
- Rasterize PDF pages to PNG files named page_NNNN.png
"""

import logging
import mimetypes
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests
from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from pdf2image.pdf2image import pdfinfo_from_path

from infra.errors import ConversionError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg"}
DEFAULT_DPI = 300
DOWNLOAD_TIMEOUT = 60
OFFICE_TIMEOUT = 300
_PDF2IMAGE_ERRORS = (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError)


def is_url(file_path: str) -> bool:
    return urlparse(file_path).scheme in ("http", "https")


def download_file(file_path: str, temp_dir: Path) -> Tuple[Path, str]:
    """
    Fetch the input document into temp_dir.

    Args:
        file_path: http(s) URL or local filesystem path
        temp_dir: Run working directory (must exist)

    Returns:
        (local_path, extension) with extension lowercased, including the dot

    Raises:
        ConversionError: If the URL cannot be fetched or the local file is missing
    """
    if is_url(file_path):
        return _download_url(file_path, temp_dir)

    source = Path(file_path).expanduser()
    if not source.is_file():
        raise ConversionError(f"File not found: {source}")

    local_path = temp_dir / source.name
    shutil.copyfile(source, local_path)
    logger.debug(f"Copied {source} to {local_path}")
    return local_path, local_path.suffix.lower()


def _download_url(url: str, temp_dir: Path) -> Tuple[Path, str]:
    name = Path(unquote(urlparse(url).path)).name or "document"

    try:
        response = requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise ConversionError(f"Failed to download {url}: {e}") from e

    extension = Path(name).suffix.lower()
    if not extension:
        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        extension = mimetypes.guess_extension(content_type) or ""
        name = f"{name}{extension}"

    local_path = temp_dir / name
    with response, open(local_path, "wb") as f:
        for chunk in response.iter_content(chunk_size=1 << 16):
            f.write(chunk)

    logger.debug(f"Downloaded {url} to {local_path}")
    return local_path, extension


def _find_office_binary() -> Optional[str]:
    for candidate in ("soffice", "libreoffice"):
        found = shutil.which(candidate)
        if found:
            return found
    return None


def convert_file_to_pdf(local_path: Path, temp_dir: Path) -> Path:
    """
    Convert an office/text document to PDF with headless LibreOffice.

    Raises:
        ConversionError: If LibreOffice is missing or the conversion fails
    """
    binary = _find_office_binary()
    if binary is None:
        raise ConversionError(
            f"Cannot convert {local_path.name}: LibreOffice (soffice) is not installed"
        )

    cmd = [binary, "--headless", "--convert-to", "pdf", "--outdir", str(temp_dir), str(local_path)]
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        completed = subprocess.run(cmd, capture_output=True, text=True, timeout=OFFICE_TIMEOUT)
    except subprocess.TimeoutExpired as e:
        raise ConversionError(f"LibreOffice timed out converting {local_path.name}") from e

    pdf_path = temp_dir / f"{local_path.stem}.pdf"
    if completed.returncode != 0 or not pdf_path.exists():
        raise ConversionError(
            f"LibreOffice failed to convert {local_path.name} "
            f"(exit {completed.returncode}): {completed.stderr.strip()}"
        )

    return pdf_path


def get_page_count(pdf_path: Path) -> int:
    try:
        info = pdfinfo_from_path(str(pdf_path))
    except _PDF2IMAGE_ERRORS as e:
        raise ConversionError(f"Cannot read {pdf_path.name}: {e}") from e
    return int(info["Pages"])


def convert_pdf_to_images(
    pdf_path: Path,
    output_dir: Path,
    page_numbers: Optional[List[int]] = None,
    dpi: int = DEFAULT_DPI,
) -> List[Path]:
    """
    Rasterize PDF pages to PNG files.

    Args:
        pdf_path: PDF to convert
        output_dir: Directory for page_NNNN.png files (created if missing)
        page_numbers: 1-indexed pages to convert (None = every page).
                      Pages past the end of the document are skipped.
        dpi: Render resolution

    Returns:
        Paths of the written images, sorted by page number

    Raises:
        ConversionError: If poppler is missing or the PDF cannot be read
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    if page_numbers is None:
        page_numbers = list(range(1, get_page_count(pdf_path) + 1))

    logger.debug(f"Rasterizing {len(page_numbers)} pages of {pdf_path.name} at {dpi} DPI")

    written = {}
    for page_num in sorted(set(page_numbers)):
        try:
            images = convert_from_path(
                str(pdf_path),
                dpi=dpi,
                first_page=page_num,
                last_page=page_num,
            )
        except _PDF2IMAGE_ERRORS as e:
            raise ConversionError(f"Failed to rasterize page {page_num} of {pdf_path.name}: {e}") from e

        if not images:
            logger.warning(f"Page {page_num} not found in {pdf_path.name}")
            continue

        output_path = output_dir / f"page_{page_num:04d}.png"
        images[0].save(output_path, format="PNG")
        written[page_num] = output_path

    return [written[n] for n in sorted(written)]
