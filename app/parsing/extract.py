from __future__ import annotations

import logging
from io import BytesIO

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MB
SUPPORTED_EXTENSIONS = {"pdf", "docx", "txt"}


class ExtractionError(ValueError):
    pass


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _extract_txt(content: bytes) -> str:
    for encoding in ("utf-8", "utf-16", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ExtractionError("Unable to decode this text file.")


def _extract_pdf(content: bytes) -> str:
    from pypdf import PdfReader

    try:
        reader = PdfReader(BytesIO(content))
        page_chunks = [(page.extract_text() or "").strip() for page in reader.pages]
    except Exception as exc:
        logger.warning("pdf_extract_failed: %s", exc)
        raise ExtractionError("There was an error processing the document.") from exc
    return " ".join(chunk for chunk in page_chunks if chunk)


def _extract_docx(content: bytes) -> str:
    from docx import Document

    try:
        document = Document(BytesIO(content))
    except Exception as exc:
        logger.warning("docx_extract_failed: %s", exc)
        raise ExtractionError("There was an error processing the document.") from exc
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    return "\n".join(paragraphs)


def extract_text(filename: str, content: bytes) -> str:
    """Plain text of an uploaded resume (PDF, DOCX or TXT)."""
    if not content:
        raise ExtractionError("Failed to read file.")
    if len(content) > MAX_UPLOAD_BYTES:
        raise ExtractionError("File is too large. Maximum size is 10 MB.")

    ext = _extension(filename)
    if ext == "pdf":
        text = _extract_pdf(content)
    elif ext == "docx":
        text = _extract_docx(content)
    elif ext == "txt":
        text = _extract_txt(content)
    else:
        raise ExtractionError("Unsupported file type. Please upload a PDF or DOCX file.")

    text = text.strip()
    if not text:
        raise ExtractionError("No extractable text found in the document.")
    return text
