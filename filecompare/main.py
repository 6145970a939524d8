"""
Command line entry point for filecompare.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading and overrides
- Mode selection (text or binary)
- Printing the comparison result and mapping it to an exit code
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from filecompare.core.diff.comparator import comparator_for
from filecompare.core.diff.text_diff import DiffAlgorithm
from filecompare.core.models import (
    ComparisonResult,
    ContentCompareError,
    ContentType,
    DeltaType,
)
from filecompare.services.file_compare import FileContentComparer
from filecompare.services.file_io import FileIOService
from filecompare.services.settings import (
    ApplicationSettings,
    CompareMode,
    SettingsManager,
)


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "filecompare"
APP_VERSION = "1.1.0"

EXIT_EQUIVALENT = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2

AUTO_ENCODING = "auto"


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: str = ""
    right_path: str = ""
    mode: Optional[CompareMode] = None
    encoding: Optional[str] = None
    algorithm: Optional[DiffAlgorithm] = None
    strict_line_endings: bool = False
    chunk_size: Optional[int] = None
    config_file: Optional[str] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None
    quiet: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream: Optional[TextIO] = None):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Console output goes to stderr; stdout carries the report
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True, stream=sys.stderr))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('chardet').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two files line by line or byte by byte",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit status is 0 if the inputs are equivalent, 1 if they differ and 2
if they could not be compared.

Examples:
  %(prog)s expected.txt actual.txt              Compare two files
  %(prog)s --mode binary a.bin b.bin            Find the first differing byte
  %(prog)s --encoding latin-1 a.txt b.txt       Decode both files as Latin-1
  %(prog)s --strict-line-endings a.txt b.txt    Treat CRLF and LF as different
        """
    )

    parser.add_argument('left', help='Original (expected) file')
    parser.add_argument('right', help='Revised (actual) file')

    parser.add_argument(
        '--mode',
        choices=[m.value for m in CompareMode],
        default=None,
        help='Comparison mode (default: detect from content)'
    )
    parser.add_argument(
        '-e', '--encoding',
        default=None,
        help=f"Text encoding, or '{AUTO_ENCODING}' to guess per file"
    )
    parser.add_argument(
        '--algorithm',
        choices=[a.name.lower() for a in DiffAlgorithm],
        default=None,
        help='Line diff algorithm'
    )
    parser.add_argument(
        '--strict-line-endings',
        action='store_true',
        help='Report lines that differ only in their terminator'
    )
    parser.add_argument(
        '--chunk-size',
        type=int,
        default=None,
        help='Block size for binary comparison'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )

    # Output and logging
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Print nothing, only set the exit status'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        help='Also write log records to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.left_path = parsed.left
    result.right_path = parsed.right
    result.encoding = parsed.encoding
    result.strict_line_endings = parsed.strict_line_endings
    result.chunk_size = parsed.chunk_size
    result.config_file = parsed.config
    result.log_file = parsed.log_file
    result.quiet = parsed.quiet

    if parsed.mode:
        result.mode = CompareMode.from_string(parsed.mode)
    if parsed.algorithm:
        result.algorithm = DiffAlgorithm[parsed.algorithm.upper()]

    if parsed.verbose:
        result.log_level = 'DEBUG'
    else:
        result.log_level = parsed.log_level

    return result


def apply_overrides(settings: ApplicationSettings, args: CommandLineArgs) -> ApplicationSettings:
    """Let command line flags win over loaded settings."""
    comparison = settings.comparison
    if args.mode is not None:
        comparison.mode = args.mode
    if args.encoding is not None:
        comparison.encoding = args.encoding
    if args.algorithm is not None:
        comparison.algorithm = args.algorithm
    if args.strict_line_endings:
        comparison.ignore_line_endings = False
    if args.chunk_size is not None:
        comparison.chunk_size = args.chunk_size
    if args.log_level is not None:
        settings.logging.level = args.log_level
    if args.log_file is not None:
        settings.logging.log_file = args.log_file
    return settings


# =============================================================================
# Comparison
# =============================================================================

def run_comparison(
    args: CommandLineArgs,
    settings: ApplicationSettings,
    file_io: Optional[FileIOService] = None
) -> ComparisonResult:
    """Compare the two files named on the command line."""
    file_io = file_io or FileIOService()
    comparison = settings.comparison

    left = file_io.require_file(args.left_path)
    right = file_io.require_file(args.right_path)

    mode = comparison.mode
    if mode == CompareMode.AUTO:
        binary = file_io.is_binary_file(left) or file_io.is_binary_file(right)
        mode = CompareMode.BINARY if binary else CompareMode.TEXT
        logging.debug(f"run_comparison - Detected {mode.value} content")

    if mode == CompareMode.BINARY:
        comparator = comparator_for(
            ContentType.BINARY,
            binary_options=comparison.to_binary_options(),
        )
        return comparator.compare_files(left, right)

    if comparison.encoding.lower() == AUTO_ENCODING:
        left_encoding = file_io.detect_encoding(left)
        right_encoding = file_io.detect_encoding(right)
        logging.info(f"run_comparison - Guessed encodings {left_encoding} and {right_encoding}")
    else:
        left_encoding = right_encoding = comparison.encoding

    comparer = FileContentComparer(
        text_options=comparison.to_text_options(),
        binary_options=comparison.to_binary_options(),
        file_io=file_io,
    )
    return comparer.compare_files(right, right_encoding, left, left_encoding)


def format_result(result: ComparisonResult) -> List[str]:
    """Render a result as report lines."""
    if result.is_equivalent:
        return [f"{result.original_label} and {result.revised_label} are equivalent"]

    if result.content_type == ContentType.BINARY:
        divergence = result.divergence
        return [
            f"{result.revised_label} does not have expected binary content "
            f"at offset {divergence.offset}: expected "
            f"{divergence.format_byte(divergence.original_byte)}, was "
            f"{divergence.format_byte(divergence.revised_byte)}"
        ]

    lines = [f"--- {result.original_label}", f"+++ {result.revised_label}"]
    for delta in result.edit_script:
        lines.append(str(delta))
        if delta.delta_type in (DeltaType.DELETE, DeltaType.CHANGE):
            lines.extend(f"- {text}" for text in delta.original.texts)
        if delta.delta_type in (DeltaType.INSERT, DeltaType.CHANGE):
            lines.extend(f"+ {text}" for text in delta.revised.texts)
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line main entry point.

    Returns:
        Exit code: 0 equivalent, 1 different, 2 error
    """
    args = parse_arguments(argv)

    manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = apply_overrides(manager.settings, args)

    log_file = Path(settings.logging.log_file) if settings.logging.log_file else None
    logger = setup_logging(settings.logging.level, log_file)
    logger.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        result = run_comparison(args, settings)
    except ContentCompareError as e:
        logger.error(f"Cannot compare {args.left_path} and {args.right_path}: {e}")
        if not args.quiet:
            print(f"{APP_NAME}: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not args.quiet:
        for line in format_result(result):
            print(line)

    return EXIT_EQUIVALENT if result.is_equivalent else EXIT_DIFFERENT


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
