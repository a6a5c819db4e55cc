"""
Notes loading utilities for Quick Quiz.

Features:
- Extract text from PDF uploads (in-memory bytes or files on disk)
- Load plain text and Markdown notes
- Page-aware extraction that skips empty pages
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".txt", ".md", ".pdf")


@dataclass
class Document:
    """
    Extracted notes with their source metadata.

    Attributes:
        content: Text content
        metadata: Dict with source, type, page count, etc.
    """
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if "source" not in self.metadata:
            self.metadata["source"] = "unknown"

    def __repr__(self) -> str:
        source = self.metadata.get("source", "unknown")
        preview = self.content[:50].replace("\n", " ")
        return f"Document(source={source}, preview='{preview}...')"


def extract_pdf_text(data: bytes | BinaryIO, source: str = "upload.pdf") -> Document:
    """
    Extract the text of every non-empty page of a PDF.

    Args:
        data: Raw PDF bytes or a binary file object
        source: Name recorded in the metadata

    Returns:
        Document whose content joins the pages with blank lines
        (content is empty when the PDF carries no extractable text)

    Raises:
        ValueError: If the bytes are not a readable PDF
    """
    stream = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data

    try:
        reader = PdfReader(stream)
        pages: List[str] = []
        for page in reader.pages:
            text = page.extract_text() or ""
            if text.strip():
                pages.append(text.strip())
    except (PdfReadError, OSError) as e:
        raise ValueError(f"Failed to read PDF {source}: {e}") from e

    logger.debug("Extracted %d non-empty page(s) from %s", len(pages), source)

    return Document(
        content="\n\n".join(pages),
        metadata={
            "source": source,
            "type": "pdf",
            "pages": len(reader.pages),
            "pages_with_text": len(pages),
        },
    )


def load_notes(filepath: Path | str) -> Document:
    """
    Load a notes file from disk.

    Args:
        filepath: Path to a .txt, .md or .pdf file

    Returns:
        Document with the file's text

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file type is unsupported
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = filepath.suffix.lower()

    if suffix == ".pdf":
        with open(filepath, "rb") as f:
            return extract_pdf_text(f.read(), source=filepath.name)
    if suffix in (".txt", ".md"):
        content = filepath.read_text(encoding="utf-8", errors="ignore")
        return Document(
            content=content.strip(),
            metadata={
                "source": filepath.name,
                "type": "markdown" if suffix == ".md" else "text",
            },
        )

    raise ValueError(
        f"Unsupported file type: {suffix}. Supported: {', '.join(SUPPORTED_SUFFIXES)}"
    )
