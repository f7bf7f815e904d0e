#!/usr/bin/env python3
"""Brokerage statement ledger.

This is the main entry point script for the statement ledger.
It wraps the package CLI for convenient execution.

Usage:
    python ingest_statement.py ingest ./statements/2025-07.pdf

For full documentation and options:
    python ingest_statement.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from statement_ledger.cli import main

if __name__ == "__main__":
    sys.exit(main())
