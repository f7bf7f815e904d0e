"""Configuration loading and validation for the statement ledger."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from statement_ledger.parsers.windowing import DEFAULT_ANCHOR_MARKER, DEFAULT_MAX_FOLLOWING_LINES
from statement_ledger.processing.canonicalizer import DEFAULT_CATEGORY, DEFAULT_CHANNEL
from statement_ledger.storage.sql import DEFAULT_DATABASE_URL
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Environment variable that overrides database.url
DATABASE_URL_ENV = "LEDGER_DATABASE_URL"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def _positive_int(data: dict[str, object], key: str, default: int) -> int:
    raw = data.get(key, default)
    try:
        value = int(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value}")
    return value


@dataclass
class DatabaseConfig:
    """Configuration for the ledger database.

    Attributes:
        url: SQLAlchemy database URL.
        sqlite_wal: Use WAL journaling for file-backed SQLite.
    """

    url: str = DEFAULT_DATABASE_URL
    sqlite_wal: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DatabaseConfig":
        """Create from dictionary."""
        return cls(
            url=str(data.get("url", DEFAULT_DATABASE_URL)),
            sqlite_wal=bool(data.get("sqlite_wal", True)),
        )


@dataclass
class StatementConfig:
    """Configuration for the statement shape and record tags.

    Attributes:
        anchor_marker: Literal that marks the first line of a transaction.
        max_window_lines: Lines taken after an anchor before giving up.
        category: Category tag written on every ingested record.
        channel: Ingestion channel name written into the source tag.
    """

    anchor_marker: str = DEFAULT_ANCHOR_MARKER
    max_window_lines: int = DEFAULT_MAX_FOLLOWING_LINES
    category: str = DEFAULT_CATEGORY
    channel: str = DEFAULT_CHANNEL

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "StatementConfig":
        """Create from dictionary."""
        anchor_marker = str(data.get("anchor_marker", DEFAULT_ANCHOR_MARKER))
        if not anchor_marker.strip():
            raise ConfigError("'anchor_marker' must not be empty")
        return cls(
            anchor_marker=anchor_marker,
            max_window_lines=_positive_int(data, "max_window_lines", DEFAULT_MAX_FOLLOWING_LINES),
            category=str(data.get("category", DEFAULT_CATEGORY)),
            channel=str(data.get("channel", DEFAULT_CHANNEL)),
        )


@dataclass
class IngestConfig:
    """Limits applied to uploaded statement files.

    Attributes:
        max_file_size_mb: Files larger than this are refused.
        max_pdf_pages: PDFs with more pages than this are refused.
    """

    max_file_size_mb: int = 10
    max_pdf_pages: int = 500

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "IngestConfig":
        """Create from dictionary."""
        return cls(
            max_file_size_mb=_positive_int(data, "max_file_size_mb", 10),
            max_pdf_pages=_positive_int(data, "max_pdf_pages", 500),
        )


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        date_format: Date format for output.
        decimal_places: Number of decimal places.
    """

    date_format: str = "%Y-%m-%d"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            date_format=str(data.get("date_format", "%Y-%m-%d")),
            decimal_places=int(data.get("decimal_places", 2)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "statement_ledger.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "statement_ledger.log")),
        )


@dataclass
class Config:
    """Main configuration container."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    statement: StatementConfig = field(default_factory=StatementConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Config":
        """Create from the parsed contents of settings.yaml."""
        return cls(
            database=DatabaseConfig.from_dict(_section(data, "database")),
            statement=StatementConfig.from_dict(_section(data, "statement")),
            ingest=IngestConfig.from_dict(_section(data, "ingest")),
            output=OutputConfig.from_dict(_section(data, "output")),
            logging=LoggingConfig.from_dict(_section(data, "logging")),
        )


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
    database_url: Optional[str] = None,
) -> Config:
    """Load configuration from settings.yaml and the environment.

    Precedence for the database URL: explicit argument, then the
    LEDGER_DATABASE_URL environment variable, then settings.yaml.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).
        database_url: Explicit database URL override.

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the settings file is invalid.
    """
    if config_dir is None:
        config_dir = Path("config")

    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    if settings_path.exists():
        config = Config.from_dict(load_yaml_file(settings_path))
        logger.info(f"Loaded settings from {settings_path}")
    else:
        config = Config()
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    env_url = os.getenv(DATABASE_URL_ENV)
    if database_url:
        config.database.url = database_url
    elif env_url:
        config.database.url = env_url

    return config
