"""
Tests for infra/pdf_utils.py

pdf2image and requests are patched at the module boundary; rasterized
pages are real PIL images written to tmp_path.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch
from PIL import Image

from infra.errors import ConversionError
from infra.pdf_utils import (
    convert_file_to_pdf,
    convert_pdf_to_images,
    download_file,
    get_page_count,
    is_url,
)


def fake_page(*args, **kwargs):
    return [Image.new('RGB', (20, 30), color='white')]


class TestIsUrl:

    @pytest.mark.parametrize("value, expected", [
        ("https://example.com/a.pdf", True),
        ("http://example.com/a.pdf", True),
        ("ftp://example.com/a.pdf", False),
        ("/tmp/a.pdf", False),
        ("a.pdf", False),
    ])
    def test_is_url(self, value, expected):
        assert is_url(value) is expected


class TestDownloadFile:

    def test_local_file_copied(self, tmp_path, png_file):
        run_dir = tmp_path / "run"
        run_dir.mkdir()

        local_path, extension = download_file(str(png_file), run_dir)

        assert local_path == run_dir / "scan.png"
        assert local_path.read_bytes() == png_file.read_bytes()
        assert extension == ".png"

    def test_extension_lowercased(self, tmp_path):
        source = tmp_path / "REPORT.PDF"
        source.write_bytes(b"%PDF-1.4")
        run_dir = tmp_path / "run"
        run_dir.mkdir()

        _, extension = download_file(str(source), run_dir)

        assert extension == ".pdf"

    def test_missing_local_file(self, tmp_path):
        with pytest.raises(ConversionError, match="File not found"):
            download_file(str(tmp_path / "missing.pdf"), tmp_path)

    def test_url_download(self, tmp_path):
        response = MagicMock()
        response.headers = {"Content-Type": "application/pdf"}
        response.iter_content.return_value = [b"%PDF", b"-1.4"]

        with patch("infra.pdf_utils.requests.get", return_value=response) as get:
            local_path, extension = download_file("https://example.com/docs/My%20Report.pdf", tmp_path)

        assert get.call_args.args[0] == "https://example.com/docs/My%20Report.pdf"
        assert local_path == tmp_path / "My Report.pdf"
        assert local_path.read_bytes() == b"%PDF-1.4"
        assert extension == ".pdf"

    def test_url_without_extension_uses_content_type(self, tmp_path):
        response = MagicMock()
        response.headers = {"Content-Type": "application/pdf; charset=binary"}
        response.iter_content.return_value = [b"%PDF"]

        with patch("infra.pdf_utils.requests.get", return_value=response):
            local_path, extension = download_file("https://example.com/download", tmp_path)

        assert extension == ".pdf"
        assert local_path.name == "download.pdf"

    def test_url_failure(self, tmp_path):
        with patch("infra.pdf_utils.requests.get", side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(ConversionError, match="Failed to download"):
                download_file("https://example.com/a.pdf", tmp_path)


class TestConvertFileToPdf:

    def test_missing_libreoffice(self, tmp_path):
        source = tmp_path / "letter.docx"
        source.write_bytes(b"docx")

        with patch("infra.pdf_utils.shutil.which", return_value=None):
            with pytest.raises(ConversionError, match="LibreOffice"):
                convert_file_to_pdf(source, tmp_path)

    def test_successful_conversion(self, tmp_path):
        source = tmp_path / "letter.docx"
        source.write_bytes(b"docx")

        def fake_run(cmd, **kwargs):
            (tmp_path / "letter.pdf").write_bytes(b"%PDF")
            return MagicMock(returncode=0, stderr="")

        with patch("infra.pdf_utils.shutil.which", return_value="/usr/bin/soffice"), \
                patch("infra.pdf_utils.subprocess.run", side_effect=fake_run) as run:
            pdf_path = convert_file_to_pdf(source, tmp_path)

        assert pdf_path == tmp_path / "letter.pdf"
        cmd = run.call_args.args[0]
        assert cmd[:4] == ["/usr/bin/soffice", "--headless", "--convert-to", "pdf"]

    def test_failed_conversion(self, tmp_path):
        source = tmp_path / "letter.docx"
        source.write_bytes(b"docx")

        with patch("infra.pdf_utils.shutil.which", return_value="/usr/bin/soffice"), \
                patch("infra.pdf_utils.subprocess.run", return_value=MagicMock(returncode=1, stderr="bad file")):
            with pytest.raises(ConversionError, match="bad file"):
                convert_file_to_pdf(source, tmp_path)


class TestConvertPdfToImages:

    def test_all_pages(self, tmp_path):
        with patch("infra.pdf_utils.pdfinfo_from_path", return_value={"Pages": 3}), \
                patch("infra.pdf_utils.convert_from_path", side_effect=fake_page) as convert:
            paths = convert_pdf_to_images(tmp_path / "doc.pdf", tmp_path / "pages")

        assert [p.name for p in paths] == ["page_0001.png", "page_0002.png", "page_0003.png"]
        assert all(p.exists() for p in paths)
        assert convert.call_count == 3

    def test_selected_pages_sorted(self, tmp_path):
        with patch("infra.pdf_utils.convert_from_path", side_effect=fake_page) as convert:
            paths = convert_pdf_to_images(tmp_path / "doc.pdf", tmp_path / "pages", page_numbers=[7, 2, 5])

        assert [p.name for p in paths] == ["page_0002.png", "page_0005.png", "page_0007.png"]
        firsts = [c.kwargs["first_page"] for c in convert.call_args_list]
        assert firsts == [2, 5, 7]

    def test_pages_past_end_skipped(self, tmp_path):
        def page_or_nothing(path, dpi, first_page, last_page):
            return fake_page() if first_page <= 2 else []

        with patch("infra.pdf_utils.convert_from_path", side_effect=page_or_nothing):
            paths = convert_pdf_to_images(tmp_path / "doc.pdf", tmp_path / "pages", page_numbers=[1, 2, 9])

        assert [p.name for p in paths] == ["page_0001.png", "page_0002.png"]

    def test_unreadable_pdf(self, tmp_path):
        from pdf2image.exceptions import PDFPageCountError

        with patch("infra.pdf_utils.pdfinfo_from_path", side_effect=PDFPageCountError("broken")):
            with pytest.raises(ConversionError, match="broken"):
                get_page_count(tmp_path / "doc.pdf")
