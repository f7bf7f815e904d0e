"""Abstract base class for statement readers.

A reader is the text-extraction collaborator: it turns a statement file into
its raw bytes (for content hashing) and its ordered text lines (for the
windower). It does not interpret transactions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from statement_ledger.exceptions import ParseError
from statement_ledger.parsers.windowing import split_lines
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

__all__ = ["BaseReader", "ParseError", "StatementText"]


@dataclass
class StatementText:
    """Raw bytes and extracted lines of one statement file."""

    filename: str
    data: bytes
    lines: list[str]

    @property
    def byte_size(self) -> int:
        """Size of the raw bytes."""
        return len(self.data)


class BaseReader(ABC):
    """Abstract base class for all statement readers.

    Subclasses must implement:
    - supported_extensions: List of file extensions this reader handles
    - extract_text(): Pull the text out of the raw bytes
    """

    def __init__(self, max_file_size_mb: int = 10):
        """Initialize reader.

        Args:
            max_file_size_mb: Files larger than this are refused.
        """
        self.max_file_size_bytes = max_file_size_mb * 1024 * 1024

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this reader supports.

        Returns:
            List of extensions like ['.pdf'].
        """
        pass

    @property
    def name(self) -> str:
        """Return reader name for logging."""
        return self.__class__.__name__

    def can_read(self, file_path: Path) -> bool:
        """Check if this reader can handle the given file.

        Args:
            file_path: Path to the file to check.

        Returns:
            True if the extension is supported.
        """
        return file_path.suffix.lower() in self.supported_extensions

    @abstractmethod
    def extract_text(self, data: bytes, file_path: Path) -> str:
        """Extract the statement text from raw bytes.

        Args:
            data: Raw file content.
            file_path: Path the bytes were read from (for error messages).

        Returns:
            Extracted text with line breaks preserved.

        Raises:
            ParseError: If the content cannot be decoded.
        """
        pass

    def read(self, file_path: Path) -> StatementText:
        """Read a statement file into bytes and lines.

        Args:
            file_path: Path to the statement.

        Returns:
            StatementText with the raw bytes and normalized lines.

        Raises:
            FileNotFoundError: If the file does not exist.
            ParseError: If the file is too large or cannot be decoded.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        size = file_path.stat().st_size
        if size > self.max_file_size_bytes:
            raise ParseError(
                f"File is too large ({size} bytes). "
                f"Maximum allowed is {self.max_file_size_bytes} bytes",
                file_path,
            )

        data = file_path.read_bytes()
        text = self.extract_text(data, file_path)
        lines = split_lines(text)
        logger.info(f"{self.name} read {len(lines)} lines from {file_path.name}")
        return StatementText(filename=file_path.name, data=data, lines=lines)
