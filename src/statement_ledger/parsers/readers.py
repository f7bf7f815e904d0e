"""Statement readers for PDF and plain-text statements."""

import io
from pathlib import Path

import pdfplumber

from statement_ledger.parsers.base import BaseReader, ParseError
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum number of pages to process to prevent resource exhaustion
MAX_PDF_PAGES = 500


class PDFStatementReader(BaseReader):
    """Reads the text layer of a PDF statement with pdfplumber.

    Only text-based PDFs are supported - no OCR.
    """

    def __init__(self, max_file_size_mb: int = 10, max_pages: int = MAX_PDF_PAGES):
        """Initialize PDF reader.

        Args:
            max_file_size_mb: Files larger than this are refused.
            max_pages: PDFs with more pages than this are refused.
        """
        super().__init__(max_file_size_mb=max_file_size_mb)
        self.max_pages = max_pages

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".pdf"]

    def extract_text(self, data: bytes, file_path: Path) -> str:
        """Extract text page by page.

        Args:
            data: Raw PDF bytes.
            file_path: Source path for error messages.

        Returns:
            Text of all pages joined by newlines.

        Raises:
            ParseError: If the PDF cannot be opened or has too many pages.
        """
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                if len(pdf.pages) > self.max_pages:
                    raise ParseError(
                        f"PDF has too many pages ({len(pdf.pages)}). "
                        f"Maximum allowed is {self.max_pages}",
                        file_path,
                    )
                pages = [page.extract_text() or "" for page in pdf.pages]
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to read PDF file: {e}", file_path) from e

        logger.debug(f"Extracted text from {len(pages)} pages of {file_path.name}")
        return "\n".join(pages)


class TextStatementReader(BaseReader):
    """Reads statements that were already converted to text (e.g. by pdftotext)."""

    ENCODINGS = ("utf-8", "cp1254", "iso-8859-9")

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".txt"]

    def extract_text(self, data: bytes, file_path: Path) -> str:
        """Decode the bytes, trying UTF-8 first and then Turkish code pages.

        Raises:
            ParseError: If no encoding can decode the content.
        """
        for encoding in self.ENCODINGS:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        raise ParseError("Could not decode text statement", file_path)


def get_reader(file_path: Path, max_file_size_mb: int = 10, max_pdf_pages: int = MAX_PDF_PAGES) -> BaseReader:
    """Pick a reader for a statement file by extension.

    Args:
        file_path: Path to the statement.
        max_file_size_mb: Size limit passed to the reader.
        max_pdf_pages: Page limit for PDF statements.

    Returns:
        A reader that can handle the file.

    Raises:
        ParseError: If no reader supports the file extension.
    """
    readers: list[BaseReader] = [
        PDFStatementReader(max_file_size_mb=max_file_size_mb, max_pages=max_pdf_pages),
        TextStatementReader(max_file_size_mb=max_file_size_mb),
    ]
    for reader in readers:
        if reader.can_read(file_path):
            return reader
    raise ParseError(f"Unsupported statement file type: {file_path.suffix or file_path.name}", file_path)
