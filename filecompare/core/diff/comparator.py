"""
Content comparators.

Wraps the text and binary engines behind one interface so a caller can
pick the comparison mode from the content type without either engine
knowing about the other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from filecompare.core.diff.binary_diff import BinaryCompareOptions, BinaryDiffEngine
from filecompare.core.diff.text_diff import TextCompareOptions, TextDiffEngine
from filecompare.core.models import (
    ComparisonResult,
    ContentType,
    LineSequence,
    PreconditionViolationError,
    require,
)


TextSource = Union[LineSequence, TextIO, str]


class ContentComparator(ABC):
    """
    Common capability of the text and binary comparators.

    Subclasses implement compare() for their own source type and
    compare_files() for paths.
    """

    content_type: ContentType

    @abstractmethod
    def compare(self, original, revised) -> ComparisonResult:
        """Compare two sources of this comparator's type."""

    @abstractmethod
    def compare_files(
        self,
        original_path: Path | str,
        revised_path: Path | str
    ) -> ComparisonResult:
        """Compare two files by path."""


class TextContentComparator(ContentComparator):
    """Line-oriented comparison of text sources decoded with a known encoding."""

    content_type = ContentType.TEXT

    def __init__(
        self,
        options: Optional[TextCompareOptions] = None,
        encoding: str = 'utf-8'
    ):
        self.engine = TextDiffEngine(options)
        self.encoding = require(encoding, "The encoding should not be None")

    def compare(
        self,
        original: TextSource,
        revised: TextSource,
        original_label: str = "original",
        revised_label: str = "revised"
    ) -> ComparisonResult:
        """
        Compare two text sources.

        Each source may be a LineSequence, a string, or a readable text
        stream. Streams are read to completion before diffing.
        """
        script = self.engine.diff(_as_lines(original), _as_lines(revised))
        return ComparisonResult(
            content_type=self.content_type,
            original_label=original_label,
            revised_label=revised_label,
            edit_script=script,
        )

    def compare_files(
        self,
        original_path: Path | str,
        revised_path: Path | str
    ) -> ComparisonResult:
        original = LineSequence.read_file(original_path, self.encoding)
        revised = LineSequence.read_file(revised_path, self.encoding)
        return self.compare(original, revised, str(original_path), str(revised_path))


class BinaryContentComparator(ContentComparator):
    """Byte-oriented comparison reporting the first divergence."""

    content_type = ContentType.BINARY

    def __init__(self, options: Optional[BinaryCompareOptions] = None):
        self.engine = BinaryDiffEngine(options)

    def compare(
        self,
        original: Union[BinaryIO, bytes],
        revised: Union[BinaryIO, bytes],
        original_label: str = "original",
        revised_label: str = "revised"
    ) -> ComparisonResult:
        """Compare two byte sources, either streams or bytes objects."""
        require(original, "The original source should not be None")
        require(revised, "The revised source should not be None")

        if isinstance(original, (bytes, bytearray)) and isinstance(revised, (bytes, bytearray)):
            divergence = self.engine.compare_bytes(bytes(original), bytes(revised))
        elif isinstance(original, (bytes, bytearray)) or isinstance(revised, (bytes, bytearray)):
            raise PreconditionViolationError("Cannot compare a bytes object with a stream")
        else:
            divergence = self.engine.compare(original, revised)

        return ComparisonResult(
            content_type=self.content_type,
            original_label=original_label,
            revised_label=revised_label,
            divergence=divergence,
        )

    def compare_files(
        self,
        original_path: Path | str,
        revised_path: Path | str
    ) -> ComparisonResult:
        divergence = self.engine.compare_files(original_path, revised_path)
        return ComparisonResult(
            content_type=self.content_type,
            original_label=str(original_path),
            revised_label=str(revised_path),
            divergence=divergence,
        )


def comparator_for(
    content_type: ContentType,
    text_options: Optional[TextCompareOptions] = None,
    binary_options: Optional[BinaryCompareOptions] = None,
    encoding: str = 'utf-8'
) -> ContentComparator:
    """Select the comparator matching a content type."""
    require(content_type, "The content type should not be None")
    if content_type == ContentType.TEXT:
        return TextContentComparator(text_options, encoding)
    if content_type == ContentType.BINARY:
        return BinaryContentComparator(binary_options)
    raise PreconditionViolationError(f"Unsupported content type: {content_type}")


def _as_lines(source: TextSource) -> LineSequence:
    require(source, "The text source should not be None")
    if isinstance(source, LineSequence):
        return source
    if isinstance(source, str):
        return LineSequence.from_text(source)
    return LineSequence.read(source)
