"""Output generation for CSV exports."""

from statement_ledger.output.csv_exporter import CSVExporter

__all__ = ["CSVExporter"]
