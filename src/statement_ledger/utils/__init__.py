"""Shared helpers: numeric parsing, dates, logging and output sanitization."""
