"""Tests for the command-line interface."""

import _thread
import csv
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from statement_ledger.cli import (
    EXIT_DUPLICATE_DOCUMENT,
    EXIT_ERROR,
    EXIT_OK,
    create_parser,
    get_log_level,
    ingest_interruptibly,
    main,
)
from statement_ledger.config import DATABASE_URL_ENV
from statement_ledger.models.ledger import LedgerRecord
from statement_ledger.models.report import IngestResult
from statement_ledger.parsers import TextStatementReader
from statement_ledger.processing import IngestionOrchestrator
from statement_ledger.storage import InMemoryLedgerStore, SqlLedgerStore, StorageUnavailable

STATEMENT = "\n".join([
    "VAKIF YATIRIM",
    "2025.07.01 valörlü GZ:",
    "GZ: -1.234,56 TL",
    "10:15:00 GARAN 100 ADET",
    "x12,34 TL ALIS",
    "2025.07.02 valörlü GZ: 2.000,00 TL",
    "11:00:00 THYAO 10 ADET",
    "x200,00 TL SATIS",
])


class InterruptingStore(InMemoryLedgerStore):
    """In-memory store that presses Ctrl-C for the main thread on its first insert."""

    def __init__(self, cancel_event: threading.Event):
        super().__init__()
        self.cancel_event = cancel_event

    def insert_record(self, record: LedgerRecord) -> int:
        record_id = super().insert_record(record)
        if not self.cancel_event.is_set():
            _thread.interrupt_main()
            self.cancel_event.wait(timeout=5)
        return record_id


class TestParser:
    """Tests for argument parsing helpers."""

    def test_log_levels(self) -> None:
        """Test verbosity to log level mapping."""
        assert get_log_level(0) == "WARNING"
        assert get_log_level(1) == "INFO"
        assert get_log_level(2) == "DEBUG"
        assert get_log_level(5) == "DEBUG"

    def test_ingest_arguments(self) -> None:
        """Test global options combine with a subcommand."""
        args = create_parser().parse_args(["-vv", "--database-url", "sqlite://", "ingest", "a.pdf", "b.txt"])

        assert args.verbose == 2
        assert args.database_url == "sqlite://"
        assert args.command == "ingest"
        assert args.files == [Path("a.pdf"), Path("b.txt")]

    def test_no_command(self) -> None:
        """Test running without a subcommand prints help and fails."""
        assert main([]) == EXIT_ERROR


class TestCommands:
    """End-to-end tests against a SQLite file in a temp directory."""

    @pytest.fixture(autouse=True)
    def workdir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        """Run each test in an empty directory with no inherited database URL."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
        return tmp_path

    @pytest.fixture
    def statement(self, workdir: Path) -> Path:
        """Write a two-transaction text statement."""
        path = workdir / "temmuz.txt"
        path.write_text(STATEMENT, encoding="utf-8")
        return path

    @pytest.fixture
    def db_args(self, workdir: Path) -> list[str]:
        """Global arguments pointing at a temp database."""
        return ["--database-url", f"sqlite:///{workdir / 'ledger.db'}"]

    def test_ingest_then_duplicate(self, statement: Path, db_args: list[str], workdir: Path) -> None:
        """Test ingesting twice returns the duplicate-document exit code."""
        assert main(db_args + ["ingest", str(statement)]) == EXIT_OK
        assert main(db_args + ["ingest", str(statement)]) == EXIT_DUPLICATE_DOCUMENT

        store = SqlLedgerStore.from_url(f"sqlite:///{workdir / 'ledger.db'}")
        assert len(store.list_records()) == 2
        assert len(store.list_documents()) == 1

    def test_all_duplicates_is_success(self, statement: Path, db_args: list[str], workdir: Path) -> None:
        """Test a new file with only known transactions is not an error."""
        copy = workdir / "temmuz-yeniden.txt"
        copy.write_text(STATEMENT + "\nSon sayfa", encoding="utf-8")

        assert main(db_args + ["ingest", str(statement)]) == EXIT_OK
        assert main(db_args + ["ingest", str(copy)]) == EXIT_OK

    def test_missing_file(self, db_args: list[str], workdir: Path) -> None:
        """Test a missing statement is an error."""
        assert main(db_args + ["ingest", str(workdir / "nope.txt")]) == EXIT_ERROR

    def test_error_outranks_duplicate(self, statement: Path, db_args: list[str], workdir: Path) -> None:
        """Test a batch with both a duplicate and a failure reports the failure."""
        main(db_args + ["ingest", str(statement)])

        code = main(db_args + ["ingest", str(workdir / "nope.txt"), str(statement)])
        assert code == EXIT_ERROR

    def test_unsupported_file(self, db_args: list[str], workdir: Path) -> None:
        """Test an unsupported extension is an error."""
        path = workdir / "ekstre.xlsx"
        path.write_bytes(b"PK")

        assert main(db_args + ["ingest", str(path)]) == EXIT_ERROR

    def test_preview_writes_csv(self, statement: Path, db_args: list[str], workdir: Path) -> None:
        """Test preview exports without touching the ledger."""
        out = workdir / "preview.csv"

        assert main(db_args + ["preview", str(statement), "--csv", str(out)]) == EXIT_OK

        with open(out, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert [row[4] for row in rows[1:]] == ["GARAN", "THYAO"]
        assert not (workdir / "ledger.db").exists()

    def test_read_commands(self, statement: Path, db_args: list[str]) -> None:
        """Test the query commands succeed on a populated ledger."""
        main(db_args + ["ingest", str(statement)])

        for command in (["list", "--limit", "1"], ["summary"], ["documents"], ["info"], ["sweep-duplicates"]):
            assert main(db_args + command) == EXIT_OK

    def test_export(self, statement: Path, db_args: list[str], workdir: Path) -> None:
        """Test exporting the ledger to CSV."""
        main(db_args + ["ingest", str(statement)])
        out = workdir / "ledger.csv"

        assert main(db_args + ["export", str(out)]) == EXIT_OK

        with open(out, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert len(rows) == 3
        assert {row[2] for row in rows[1:]} == {"gider", "gelir"}

    def test_storage_failure(self, db_args: list[str]) -> None:
        """Test a storage failure maps to the error exit code."""
        with patch(
            "statement_ledger.cli.SqlLedgerStore.from_url",
            side_effect=StorageUnavailable("unable to open database file"),
        ):
            assert main(db_args + ["summary"]) == EXIT_ERROR

    def test_invalid_config(self, workdir: Path, db_args: list[str]) -> None:
        """Test an invalid settings file is reported as an error."""
        settings = workdir / "settings.yaml"
        settings.write_text("statement:\n  max_window_lines: 0\n", encoding="utf-8")

        assert main(db_args + ["--config", str(settings), "summary"]) == EXIT_ERROR
        assert main(["--config", str(settings), "validate-config"]) == EXIT_ERROR

    def test_validate_config(self, workdir: Path) -> None:
        """Test validating the defaults succeeds."""
        assert main(["validate-config"]) == EXIT_OK


class TestInterrupt:
    """Tests for Ctrl-C handling during ingest."""

    def test_interrupt_cancels_between_records(self, tmp_path: Path) -> None:
        """Test Ctrl-C keeps the first record and stops before the second."""
        path = tmp_path / "temmuz.txt"
        path.write_text(STATEMENT, encoding="utf-8")
        cancel = threading.Event()
        store = InterruptingStore(cancel)

        result = ingest_interruptibly(IngestionOrchestrator(store), path, TextStatementReader(), cancel_event=cancel)

        assert result.cancelled is True
        assert result.accepted == 1
        assert result.total_records == 2
        assert len(store.list_records()) == 1
        assert store.list_documents()[0].ingested_record_count == 1

    def test_cancelled_file_stops_batch(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a cancelled ingest reports an error and skips remaining files."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
        first = tmp_path / "a.txt"
        second = tmp_path / "b.txt"
        first.write_text(STATEMENT, encoding="utf-8")
        second.write_text(STATEMENT + "\nSon sayfa", encoding="utf-8")

        cancelled = IngestResult(accepted=1, total_records=2, cancelled=True)
        with patch("statement_ledger.cli.ingest_interruptibly", return_value=cancelled) as ingest:
            code = main(["--database-url", "sqlite://", "ingest", str(first), str(second)])

        assert code == EXIT_ERROR
        assert ingest.call_count == 1
