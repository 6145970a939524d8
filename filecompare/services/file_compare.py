"""
File content comparison service.

Compares a file against another file, a string, or raw bytes, validating
inputs first and choosing text or binary comparison as needed. Results
are oriented as expected (original) versus actual (revised).
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from filecompare.core.diff.binary_diff import BinaryCompareOptions, BinaryDiffEngine
from filecompare.core.diff.text_diff import TextCompareOptions, TextDiffEngine
from filecompare.core.models import (
    ComparisonResult,
    ContentType,
    EncodingMismatchError,
    LineSequence,
    require,
)
from filecompare.services.file_io import FileIOService


class FileContentComparer:
    """
    Compares file content against an expected file, text, or bytes.

    Text comparison decodes each side with the charset it is given. When
    decoding fails the files are compared byte by byte instead: a byte
    difference is reported as a normal result, while byte-identical files
    that still cannot be decoded raise EncodingMismatchError.
    """

    def __init__(
        self,
        text_options: Optional[TextCompareOptions] = None,
        binary_options: Optional[BinaryCompareOptions] = None,
        file_io: Optional[FileIOService] = None
    ):
        self.text_engine = TextDiffEngine(text_options)
        self.binary_engine = BinaryDiffEngine(binary_options)
        self.file_io = file_io or FileIOService()

    def compare_files(
        self,
        actual: Path | str,
        actual_encoding: str,
        expected: Path | str,
        expected_encoding: str
    ) -> ComparisonResult:
        """
        Compare the content of two files.

        Raises:
            PreconditionViolationError: if either file is None or not a
                regular file
            EncodingMismatchError: if the files are byte-identical but
                cannot be decoded with the given charsets
            InputUnreadableError: if either file cannot be read
        """
        require(expected, "The file to compare to should not be None")
        expected_path = self.file_io.require_file(expected)
        require(actual, "The actual file should not be None")
        actual_path = self.file_io.require_file(actual)

        try:
            expected_lines = self.file_io.read_lines(expected_path, expected_encoding)
            actual_lines = self.file_io.read_lines(actual_path, actual_encoding)
        except EncodingMismatchError as e:
            logging.warning(
                f"FileContentComparer - Falling back to binary comparison of "
                f"{actual_path} and {expected_path}: {e}"
            )
            return self._compare_undecodable(actual_path, expected_path, e)

        return ComparisonResult(
            content_type=ContentType.TEXT,
            original_label=str(expected_path),
            revised_label=str(actual_path),
            edit_script=self.text_engine.diff(expected_lines, actual_lines),
        )

    def compare_with_text(
        self,
        actual: Path | str,
        expected_text: str,
        encoding: str
    ) -> ComparisonResult:
        """
        Compare a file's content with an expected string.

        Raises:
            PreconditionViolationError: if expected_text is None or the
                path is not a regular file
            EncodingMismatchError: if the file cannot be decoded
            InputUnreadableError: if the file cannot be read
        """
        require(expected_text, "The text to compare to should not be None")
        require(actual, "The actual file should not be None")
        actual_path = self.file_io.require_file(actual)

        actual_lines = self.file_io.read_lines(actual_path, encoding)
        return ComparisonResult(
            content_type=ContentType.TEXT,
            original_label="expected text",
            revised_label=str(actual_path),
            edit_script=self.text_engine.diff(LineSequence.from_text(expected_text), actual_lines),
        )

    def compare_binary_content(
        self,
        actual: Path | str,
        expected_bytes: bytes
    ) -> ComparisonResult:
        """Compare a file's raw bytes with expected bytes."""
        require(expected_bytes, "The binary content to compare to should not be None")
        require(actual, "The actual file should not be None")
        actual_path = self.file_io.require_file(actual)

        with self.file_io.open_binary(actual_path) as stream:
            divergence = self.binary_engine.compare(io.BytesIO(expected_bytes), stream)

        return ComparisonResult(
            content_type=ContentType.BINARY,
            original_label="expected bytes",
            revised_label=str(actual_path),
            divergence=divergence,
        )

    def _compare_undecodable(
        self,
        actual_path: Path,
        expected_path: Path,
        cause: EncodingMismatchError
    ) -> ComparisonResult:
        divergence = self.binary_engine.compare_files(expected_path, actual_path)
        if divergence.is_identical:
            raise EncodingMismatchError(
                f"Unable to compare contents of files:<{actual_path}> and:<{expected_path}>"
            ) from cause

        return ComparisonResult(
            content_type=ContentType.BINARY,
            original_label=str(expected_path),
            revised_label=str(actual_path),
            divergence=divergence,
        )
