"""DOCX to PDF conversion through headless LibreOffice."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path


class PdfConversionError(RuntimeError):
    """Raised when soffice is missing, fails, or produces no output."""


class PdfConverter:
    """Converts DOCX bytes to PDF bytes with ``soffice --headless --convert-to pdf``.

    Blocking; callers run it in a worker thread.
    """

    def __init__(self, soffice_path: str | None = None, timeout: int = 120):
        self.soffice_path = soffice_path
        self.timeout = timeout

    def _find_soffice(self) -> str:
        soffice = self.soffice_path or shutil.which("soffice") or shutil.which("libreoffice")
        if not soffice:
            raise PdfConversionError("LibreOffice (soffice) is not installed")
        return soffice

    def to_pdf(self, docx_bytes: bytes) -> bytes:
        soffice = self._find_soffice()
        with tempfile.TemporaryDirectory(prefix="orgportal_pdf_") as tmp:
            work_dir = Path(tmp)
            source = work_dir / "document.docx"
            source.write_bytes(docx_bytes)
            try:
                subprocess.run(
                    [
                        soffice,
                        "--headless",
                        "--convert-to",
                        "pdf",
                        "--outdir",
                        str(work_dir),
                        str(source),
                    ],
                    check=True,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise PdfConversionError(f"soffice timed out after {self.timeout}s") from e
            except (OSError, subprocess.CalledProcessError) as e:
                raise PdfConversionError(f"soffice failed: {e}") from e

            generated = work_dir / "document.pdf"
            if not generated.exists():
                raise PdfConversionError("soffice produced no PDF")
            return generated.read_bytes()
