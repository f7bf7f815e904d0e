"""Command-line interface for the statement ledger."""

import argparse
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from statement_ledger import __version__
from statement_ledger.config import Config, ConfigError, load_config
from statement_ledger.models.report import IngestResult
from statement_ledger.output import CSVExporter
from statement_ledger.parsers import (
    BaseReader,
    ContextWindower,
    ParseError,
    TransactionExtractor,
    get_reader,
)
from statement_ledger.processing import (
    DuplicateDocumentError,
    IngestionOrchestrator,
    RecordCanonicalizer,
    describe,
)
from statement_ledger.processing.canonicalizer import classify
from statement_ledger.storage import (
    InMemoryLedgerStore,
    LedgerStore,
    SqlLedgerStore,
    StorageUnavailable,
)
from statement_ledger.utils.logging_config import get_logger, mask_url_password, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DUPLICATE_DOCUMENT = 2

INTERRUPT_POLL_SECONDS = 0.2


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="statement-ledger",
        description=(
            "Ingest brokerage statements into a deduplicated, "
            "append-only transaction ledger"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ingest ./statements/2025-07.pdf
  %(prog)s preview ./statements/2025-07.pdf --csv preview.csv
  %(prog)s list --limit 20
  %(prog)s --database-url sqlite:///vakif.db summary
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )

    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (overrides LEDGER_DATABASE_URL and settings)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    ingest = subparsers.add_parser("ingest", help="Ingest statement files into the ledger")
    ingest.add_argument("files", type=Path, nargs="+", metavar="FILE", help="Statement files (.pdf, .txt)")

    preview = subparsers.add_parser("preview", help="Show transactions found in a statement without storing them")
    preview.add_argument("file", type=Path, metavar="FILE", help="Statement file (.pdf, .txt)")
    preview.add_argument("--csv", type=Path, default=None, metavar="OUT", help="Also write the preview to CSV")

    list_cmd = subparsers.add_parser("list", help="List ledger records, newest first")
    list_cmd.add_argument("--limit", type=int, default=50, metavar="N", help="Maximum rows to show (default: 50)")

    subparsers.add_parser("summary", help="Show totals by record kind")
    subparsers.add_parser("documents", help="List ingested statements")

    export = subparsers.add_parser("export", help="Export the ledger to CSV")
    export.add_argument("output", type=Path, metavar="OUT", help="Destination CSV file")

    subparsers.add_parser("sweep-duplicates", help="Remove records sharing a fingerprint, keeping the oldest")
    subparsers.add_parser("info", help="Show database diagnostics")
    subparsers.add_parser("validate-config", help="Validate the configuration file")

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def create_store(config: Config) -> LedgerStore:
    """Open the ledger store named by the configuration."""
    return SqlLedgerStore.from_url(config.database.url, sqlite_wal=config.database.sqlite_wal)


def create_orchestrator(config: Config, store: LedgerStore) -> IngestionOrchestrator:
    """Wire the ingestion pipeline from configuration."""
    return IngestionOrchestrator(
        store,
        windower=ContextWindower(
            anchor_marker=config.statement.anchor_marker,
            max_following_lines=config.statement.max_window_lines,
        ),
        extractor=TransactionExtractor(),
        canonicalizer=RecordCanonicalizer(
            category=config.statement.category,
            channel=config.statement.channel,
        ),
    )


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    console.print("[bold]Validating configuration files...[/bold]\n")

    settings_path = args.config or (args.config_dir / "settings.yaml")
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        console.print(f"[yellow]Warning:[/yellow] Settings file not found: {settings_path}")

    try:
        config = load_config(
            settings_path=args.config,
            config_dir=args.config_dir,
            database_url=args.database_url,
        )
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"\n[red]Errors:[/red]\n  - {e}")
        return EXIT_ERROR

    console.print("\n[green]✓[/green] Configuration loaded successfully")
    console.print(f"  - database: {mask_url_password(config.database.url)}")
    console.print(f"  - anchor marker: {config.statement.anchor_marker!r}")
    console.print(f"  - window: {config.statement.max_window_lines} lines")
    console.print(f"  - source tag: {config.statement.channel}")
    console.print("\n[green]Configuration is valid.[/green]")
    return EXIT_OK


def ingest_interruptibly(
    orchestrator: IngestionOrchestrator,
    file_path: Path,
    reader: BaseReader,
    cancel_event: threading.Event | None = None,
) -> IngestResult:
    """Ingest one file in a worker thread so Ctrl-C stops it between records.

    The first KeyboardInterrupt sets the cancel event; records inserted so far
    are kept and the result comes back with cancelled set.
    """
    if cancel_event is None:
        cancel_event = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(orchestrator.ingest_file, file_path, reader, cancel_event)
        while True:
            try:
                done, _ = wait([future], timeout=INTERRUPT_POLL_SECONDS)
            except KeyboardInterrupt:
                logger.warning(f"Interrupted, stopping ingestion of {file_path.name}")
                cancel_event.set()
                continue
            if done:
                return future.result()


def run_ingest(args: argparse.Namespace, config: Config) -> int:
    """Ingest each file in turn; a duplicate statement does not stop the rest.

    Ctrl-C cancels the file in progress and skips the remaining ones.
    """
    store = create_store(config)
    orchestrator = create_orchestrator(config, store)
    had_error = False
    had_duplicate = False

    for file_path in args.files:
        try:
            reader = get_reader(
                file_path,
                max_file_size_mb=config.ingest.max_file_size_mb,
                max_pdf_pages=config.ingest.max_pdf_pages,
            )
            with console.status(f"[bold green]Ingesting {file_path.name}..."):
                result = ingest_interruptibly(orchestrator, file_path, reader)
        except DuplicateDocumentError:
            console.print(f"[yellow]{file_path.name}: this statement was already ingested[/yellow]")
            had_duplicate = True
            continue
        except (ParseError, FileNotFoundError) as e:
            console.print(f"[red]{file_path.name}: {e}[/red]")
            had_error = True
            continue

        if result.cancelled:
            console.print(
                f"[red]{file_path.name}: cancelled, {result.message} "
                f"({result.total_records} found)[/red]"
            )
            return EXIT_ERROR

        color = "yellow" if result.all_duplicates else "green"
        console.print(f"[{color}]{file_path.name}: {result.message}[/{color}]")
        if result.rejected_windows:
            console.print(f"  [dim]{result.rejected_windows} blocks could not be read[/dim]")

    if had_error:
        return EXIT_ERROR
    if had_duplicate:
        return EXIT_DUPLICATE_DOCUMENT
    return EXIT_OK


def run_preview(args: argparse.Namespace, config: Config) -> int:
    """Extract transactions from a statement and print them."""
    try:
        reader = get_reader(
            args.file,
            max_file_size_mb=config.ingest.max_file_size_mb,
            max_pdf_pages=config.ingest.max_pdf_pages,
        )
        statement = reader.read(args.file)
    except (ParseError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return EXIT_ERROR

    orchestrator = IngestionOrchestrator(
        InMemoryLedgerStore(),
        windower=ContextWindower(
            anchor_marker=config.statement.anchor_marker,
            max_following_lines=config.statement.max_window_lines,
        ),
        extractor=TransactionExtractor(),
    )
    transactions, rejects = orchestrator.preview(statement.lines)

    table = Table(title=f"{statement.filename}: {len(transactions)} transactions")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Amount", justify="right")
    table.add_column("Description")
    for tx in transactions:
        table.add_row(tx.date.isoformat(), classify(tx).value, f"{tx.gross_amount:.2f}", describe(tx))
    console.print(table)

    if rejects:
        console.print(f"\n[yellow]Skipped {len(rejects)} blocks:[/yellow]")
        for reject in rejects[:10]:
            console.print(f"  - {reject}")
        if len(rejects) > 10:
            console.print(f"  ... and {len(rejects) - 10} more")

    if args.csv:
        path = CSVExporter(config).export_transactions(args.csv, transactions)
        console.print(f"\n[green]Wrote {path}[/green]")
    return EXIT_OK


def run_list(args: argparse.Namespace, config: Config) -> int:
    records = create_store(config).list_records()
    shown = records[: args.limit] if args.limit > 0 else records

    table = Table(title=f"Ledger ({len(records)} records)")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Amount", justify="right")
    table.add_column("Description")
    table.add_column("Source")
    for record in shown:
        table.add_row(
            str(record.id),
            record.date.isoformat(),
            record.kind.value,
            f"{record.signed_amount:.2f}",
            record.description,
            record.source,
        )
    console.print(table)
    if len(shown) < len(records):
        console.print(f"[dim]... and {len(records) - len(shown)} more (use --limit)[/dim]")
    return EXIT_OK


def run_summary(args: argparse.Namespace, config: Config) -> int:
    summary = create_store(config).summarize()

    table = Table(title="Ledger Summary")
    table.add_column("Kind")
    table.add_column("Total", justify="right")
    for kind, total in sorted(summary.totals_by_kind.items(), key=lambda item: item[0].value):
        table.add_row(kind.value, f"{total:.2f}")
    console.print(table)

    console.print(f"  Records: {summary.record_count}")
    console.print(f"  Active days: {summary.active_days}")
    console.print(f"  Categories: {summary.categories}")
    console.print(f"  Total income: {summary.total_income:.2f}")
    console.print(f"  Total expense: {summary.total_expense:.2f}")
    color = "green" if summary.net_income >= 0 else "red"
    console.print(f"  [bold]Net: [{color}]{summary.net_income:.2f}[/{color}][/bold]")
    return EXIT_OK


def run_documents(args: argparse.Namespace, config: Config) -> int:
    documents = create_store(config).list_documents()

    table = Table(title=f"Ingested statements ({len(documents)})")
    table.add_column("ID", justify="right")
    table.add_column("File")
    table.add_column("Hash")
    table.add_column("Records", justify="right")
    table.add_column("Ingested")
    for document in documents:
        table.add_row(
            str(document.id),
            document.filename,
            document.content_hash[:16],
            str(document.ingested_record_count),
            document.ingested_at.isoformat(sep=" ", timespec="seconds") if document.ingested_at else "",
        )
    console.print(table)
    return EXIT_OK


def run_export(args: argparse.Namespace, config: Config) -> int:

    records = create_store(config).list_records()
    path = CSVExporter(config).export_records(args.output, records)
    console.print(f"[green]Exported {len(records)} records to {path}[/green]")
    return EXIT_OK


def run_sweep(args: argparse.Namespace, config: Config) -> int:
    removed = create_store(config).remove_duplicate_records()
    color = "green" if removed == 0 else "yellow"
    console.print(f"[{color}]Removed {removed} duplicate records[/{color}]")
    return EXIT_OK


def run_info(args: argparse.Namespace, config: Config) -> int:
    info = create_store(config).database_info()
    console.print(f"[bold]Database:[/bold] {mask_url_password(config.database.url)}")
    console.print(f"  Records: {info.total_records}")
    console.print(f"  Statements: {info.total_documents}")
    console.print(f"  Duplicated fingerprints: {info.duplicate_fingerprints}")
    return EXIT_OK


COMMANDS = {
    "ingest": run_ingest,
    "preview": run_preview,
    "list": run_list,
    "summary": run_summary,
    "documents": run_documents,
    "export": run_export,
    "sweep-duplicates": run_sweep,
    "info": run_info,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Argument list (default: sys.argv[1:]).

    Returns:
        Exit code (0 success, 1 error, 2 duplicate statement).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    if args.command == "validate-config":
        setup_logging(level=get_log_level(args.verbose), console_output=args.verbose > 0)
        return validate_config(args)

    try:
        config = load_config(
            settings_path=args.config,
            config_dir=args.config_dir,
            database_url=args.database_url,
        )
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run 'statement-ledger validate-config' to check configuration files.")
        return EXIT_ERROR

    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file, console_output=args.verbose > 0)

    try:
        return COMMANDS[args.command](args, config)
    except StorageUnavailable as e:
        logger.error(f"Storage failure during '{args.command}': {e}")
        console.print(f"[red]Storage error: {e}[/red]")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
