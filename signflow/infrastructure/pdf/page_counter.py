"""PDF page counting with pypdf."""

from __future__ import annotations

import io

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from structlog import get_logger

logger = get_logger()


class PypdfPageCounter:
    """Counts pages of an in-memory PDF."""

    def count_pages(self, data: bytes) -> int:
        """Return the page count, or 0 if the PDF cannot be parsed."""
        try:
            return len(PdfReader(io.BytesIO(data)).pages)
        except (PdfReadError, ValueError, KeyError) as e:
            logger.warning("pdf_page_count_failed", error=str(e))
            return 0
