"""Statement text readers and the windowing/extraction passes."""

from statement_ledger.parsers.base import BaseReader, ParseError, StatementText
from statement_ledger.parsers.extractor import TransactionExtractor
from statement_ledger.parsers.readers import (
    PDFStatementReader,
    TextStatementReader,
    get_reader,
)
from statement_ledger.parsers.windowing import ContextWindower, split_lines

__all__ = [
    "BaseReader",
    "ParseError",
    "StatementText",
    "TransactionExtractor",
    "PDFStatementReader",
    "TextStatementReader",
    "get_reader",
    "ContextWindower",
    "split_lines",
]
