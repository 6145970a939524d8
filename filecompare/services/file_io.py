"""
File I/O service for reading comparison sources.

Handles:
- Text materialization under an explicit encoding
- Binary stream opening
- Binary content sniffing (to choose a comparison mode)
- Optional encoding detection for callers that ask for a guess
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional

import chardet

from filecompare.core.models import (
    ContentType,
    InputUnreadableError,
    LineSequence,
    PreconditionViolationError,
    require,
)


class FileIOService:
    """Service for reading comparison sources from disk."""

    # Binary file signatures (magic bytes)
    BINARY_SIGNATURES = [
        b'\x00',           # Null byte (strong indicator)
        b'\x89PNG',        # PNG
        b'\xff\xd8\xff',   # JPEG
        b'GIF8',           # GIF
        b'PK\x03\x04',     # ZIP
        b'\x1f\x8b',       # GZIP
        b'%PDF',           # PDF
        b'\x7fELF',        # ELF
        b'MZ',             # Windows executable
    ]

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        binary_check_size: int = 8192
    ):
        self.default_encoding = default_encoding
        self.binary_check_size = binary_check_size

    def read_lines(self, path: Path | str, encoding: str) -> LineSequence:
        """
        Read a text file into a LineSequence.

        Args:
            path: Path to the file
            encoding: Charset used to decode the file (never guessed here)

        Raises:
            PreconditionViolationError: if path is missing or not a regular file
            EncodingMismatchError: if the content is invalid for the encoding
            InputUnreadableError: if the file cannot be read
        """
        path = self.require_file(path)
        try:
            return LineSequence.read_file(path, encoding)
        except (InputUnreadableError, ValueError) as e:
            logging.error(f"FileIOService - Failed to read lines from {path} as {encoding}: {e}")
            raise

    def open_binary(self, path: Path | str) -> BinaryIO:
        """
        Open a file for binary reading.

        The caller owns the returned stream and must close it.
        """
        path = self.require_file(path)
        try:
            return open(path, 'rb')
        except OSError as e:
            logging.error(f"FileIOService - Failed to open {path}: {e}")
            raise InputUnreadableError(f"Unable to open {path}: {e}") from e

    def detect_content_type(self, path: Path | str) -> ContentType:
        """Choose a comparison mode for a file from its leading bytes."""
        return ContentType.BINARY if self.is_binary_file(path) else ContentType.TEXT

    def is_binary_file(self, path: Path | str) -> bool:
        """
        Check if a file is binary.

        Raises:
            InputUnreadableError: if the file cannot be read
        """
        path = self.require_file(path)
        try:
            with open(path, 'rb') as f:
                chunk = f.read(self.binary_check_size)
        except OSError as e:
            logging.error(f"FileIOService - Failed to sniff {path}: {e}")
            raise InputUnreadableError(f"Unable to read {path}: {e}") from e

        return self.is_binary_content(chunk)

    def is_binary_content(self, chunk: bytes) -> bool:
        """Check if a block of leading bytes looks binary."""
        # UTF-16/32 text carries NUL bytes but announces itself with a BOM
        if chunk.startswith((b'\xff\xfe', b'\xfe\xff')):
            return False

        for sig in self.BINARY_SIGNATURES:
            if chunk.startswith(sig):
                return True

        if b'\x00' in chunk:
            return True

        # Check ratio of non-text bytes
        non_text = sum(1 for b in chunk if b < 9 or (b > 13 and b < 32))
        if len(chunk) > 0 and non_text / len(chunk) > 0.3:
            return True

        return False

    def detect_encoding(self, path: Path | str) -> str:
        """
        Guess the encoding of a file.

        Only for callers that explicitly ask for a guess; the comparison
        engines always work with the encoding they are handed.
        """
        path = self.require_file(path)
        try:
            with open(path, 'rb') as f:
                header = f.read(self.binary_check_size)
        except OSError as e:
            logging.error(f"FileIOService - Failed to read {path} for encoding detection: {e}")
            raise InputUnreadableError(f"Unable to read {path}: {e}") from e
        return self._detect_encoding(header)

    def _detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        if content.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        result = chardet.detect(content)

        if result['confidence'] > 0.7 and result['encoding']:
            encoding = result['encoding'].lower()
            if encoding == 'ascii':
                return 'utf-8'  # ASCII is subset of UTF-8
            return encoding

        return self.default_encoding

    @staticmethod
    def require_file(path: Optional[Path | str]) -> Path:
        """Fail fast unless path names an existing regular file."""
        require(path, "The file path should not be None")
        path = Path(path)
        if not path.is_file():
            raise PreconditionViolationError(f"Expected file:<'{path}'> should be an existing file")
        return path
