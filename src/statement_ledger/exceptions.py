"""Exceptions shared across the parsing layers."""

from pathlib import Path
from typing import Optional


class ParseError(ValueError):
    """Exception raised when a literal or a statement file cannot be parsed."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)
