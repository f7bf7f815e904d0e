"""Statement ledger: turns brokerage statement text into a deduplicated ledger."""

__version__ = "1.0.0"
