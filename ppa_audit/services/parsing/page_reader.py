"""Adapter: PDF bytes -> page-ordered text.

One extraction call per page, pages joined with a single space. The
backend is chosen by PDF_TEXT_BACKEND; the term extractor never sees it.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from typing import List

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from ppa_audit.core.config import settings
from ppa_audit.core.errors import ConfigError, DocumentReadError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = " "


def join_pages(page_texts: List[str]) -> str:
    return PAGE_SEPARATOR.join(t or "" for t in page_texts)


def read_pages_with_pypdf2(data: bytes) -> List[str]:
    try:
        reader = PdfReader(io.BytesIO(data))
        return [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise DocumentReadError(f"Error processing PDF file: {e}") from e


async def read_pages_with_llamaparse(data: bytes, filename: str = "contract.pdf") -> List[str]:
    if not settings.LLAMA_CLOUD_API_KEY:
        raise ConfigError("PDF_TEXT_BACKEND=llamaparse requires LLAMA_CLOUD_API_KEY")

    from llama_parse import LlamaParse

    with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as tmp:
        tmp.write(data)
        tmp_path = tmp.name
    logger.debug("llamaparse upload %s staged at %s", filename, tmp_path)

    try:
        parser = LlamaParse(
            api_key=settings.LLAMA_CLOUD_API_KEY,
            result_type="text",
            language="en",
        )
        docs = await parser.aload_data(tmp_path)
        return [d.text for d in docs]
    finally:
        try:
            os.remove(tmp_path)
        except OSError:
            logger.warning("could not remove temp file %s", tmp_path)


async def read_pdf_text(data: bytes, filename: str = "contract.pdf") -> str:
    if not data:
        raise DocumentReadError("Empty document")

    backend = settings.PDF_TEXT_BACKEND.strip().lower()
    if backend == "llamaparse":
        pages = await read_pages_with_llamaparse(data, filename)
    elif backend == "pypdf2":
        pages = read_pages_with_pypdf2(data)
    else:
        raise ConfigError(f"Unknown PDF_TEXT_BACKEND: {settings.PDF_TEXT_BACKEND}")

    logger.info("read %d pages from %s via %s", len(pages), filename, backend)
    return join_pages(pages)
