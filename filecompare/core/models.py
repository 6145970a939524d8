"""
Core data models for content comparison.

This module defines the shared vocabulary produced by the diff engines:
- Line models (Line, LineSequence)
- Edit script models (Delta, LineChunk, EditScript)
- Byte divergence model
- Error taxonomy

All models are:
- UI-agnostic (consumed by any reporting layer)
- Immutable (frozen dataclasses, tuples instead of lists)
- Type-hinted for IDE support
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO


# =============================================================================
# Enumerations
# =============================================================================

class DeltaType(Enum):
    """Type of a line-level edit operation."""
    INSERT = auto()   # Lines present only in the revised sequence
    DELETE = auto()   # Lines present only in the original sequence
    CHANGE = auto()   # Contiguous block replaced


class ContentType(Enum):
    """How a pair of sources should be compared."""
    TEXT = auto()
    BINARY = auto()


# =============================================================================
# Error Models
# =============================================================================

class ContentCompareError(Exception):
    """Base class for failures that prevent a comparison from completing."""


class InputUnreadableError(ContentCompareError, OSError):
    """A source could not be opened or fully read."""


class EncodingMismatchError(ContentCompareError, ValueError):
    """A source could not be decoded with the charset it was given."""


class PreconditionViolationError(ContentCompareError, ValueError):
    """A required input was missing or invalid."""


def require(value, message: str):
    """Return value, failing fast with PreconditionViolationError if it is None."""
    if value is None:
        raise PreconditionViolationError(message)
    return value


# =============================================================================
# Line Models
# =============================================================================

LINE_TERMINATORS = ('\r\n', '\n', '\r')


@dataclass(frozen=True)
class Line:
    """
    A single line of text.

    The terminator is kept apart from the text so that comparisons can
    ignore it while reports still show the original content.
    """
    text: str
    terminator: str = ''

    @property
    def raw(self) -> str:
        """Original text including its terminator."""
        return self.text + self.terminator

    def key(self, ignore_line_endings: bool = True) -> str:
        """Comparison key for this line."""
        return self.text if ignore_line_endings else self.raw

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class LineSequence:
    """Ordered, immutable sequence of lines produced once per source."""
    lines: tuple[Line, ...] = ()

    @classmethod
    def from_text(cls, content: str) -> LineSequence:
        """
        Split text into lines.

        CR, LF and CRLF all end a line. A terminator at the very end of
        the text does not start an extra empty line.
        """
        require(content, "The text to split should not be None")

        lines: list[Line] = []
        start = 0
        i = 0
        length = len(content)

        while i < length:
            char = content[i]
            if char == '\n':
                lines.append(Line(content[start:i], '\n'))
                start = i + 1
            elif char == '\r':
                if i + 1 < length and content[i + 1] == '\n':
                    lines.append(Line(content[start:i], '\r\n'))
                    i += 1
                else:
                    lines.append(Line(content[start:i], '\r'))
                start = i + 1
            i += 1

        if start < length:
            lines.append(Line(content[start:]))

        return cls(tuple(lines))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> LineSequence:
        """Build from already split strings, stripping any trailing terminator."""
        require(lines, "The lines to wrap should not be None")
        result = []
        for raw in lines:
            for terminator in LINE_TERMINATORS:
                if raw.endswith(terminator):
                    result.append(Line(raw[:-len(terminator)], terminator))
                    break
            else:
                result.append(Line(raw))
        return cls(tuple(result))

    @classmethod
    def read(cls, stream: TextIO) -> LineSequence:
        """
        Read a text stream to completion and split it.

        The stream must have been opened with newline='' (or be an
        in-memory buffer) for CR terminators to be preserved.

        Raises:
            InputUnreadableError: if the stream fails while being read
            EncodingMismatchError: if the stream cannot decode its bytes
        """
        require(stream, "The stream to read should not be None")
        try:
            content = stream.read()
        except UnicodeDecodeError as e:
            raise EncodingMismatchError(f"Unable to decode text: {e}") from e
        except OSError as e:
            raise InputUnreadableError(f"Unable to read text: {e}") from e
        return cls.from_text(content)

    @classmethod
    def read_file(cls, path: Path | str, encoding: str) -> LineSequence:
        """
        Read a whole file with an explicit encoding and split it.

        Decoding is strict: bytes that are invalid for the encoding raise
        EncodingMismatchError instead of being replaced.
        """
        require(path, "The path to read should not be None")
        require(encoding, "The encoding should not be None")
        try:
            with open(path, 'r', encoding=encoding, errors='strict', newline='') as f:
                return cls.read(f)
        except LookupError as e:
            raise PreconditionViolationError(f"Unknown encoding: {encoding}") from e
        except OSError as e:
            if isinstance(e, InputUnreadableError):
                raise
            raise InputUnreadableError(f"Unable to read {path}: {e}") from e

    def keys(self, ignore_line_endings: bool = True) -> list[str]:
        """Comparison keys for every line, in order."""
        return [line.key(ignore_line_endings) for line in self.lines]

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def __getitem__(self, index: int | slice) -> Line | LineSequence:
        if isinstance(index, slice):
            return LineSequence(self.lines[index])
        return self.lines[index]


# =============================================================================
# Edit Script Models
# =============================================================================

@dataclass(frozen=True)
class LineChunk:
    """A run of lines at a 0-based position in one of the two sequences."""
    position: int
    lines: tuple[Line, ...] = ()

    @property
    def size(self) -> int:
        return len(self.lines)

    @property
    def end(self) -> int:
        """Exclusive end index."""
        return self.position + len(self.lines)

    @property
    def texts(self) -> list[str]:
        return [line.text for line in self.lines]


@dataclass(frozen=True)
class Delta:
    """
    One line-level edit instruction.

    INSERT carries an empty original chunk positioned where the revised
    lines land; DELETE carries an empty revised chunk likewise.
    """
    delta_type: DeltaType
    original: LineChunk
    revised: LineChunk

    @classmethod
    def insert(cls, original_position: int, revised: LineChunk) -> Delta:
        return cls(DeltaType.INSERT, LineChunk(original_position), revised)

    @classmethod
    def delete(cls, original: LineChunk, revised_position: int) -> Delta:
        return cls(DeltaType.DELETE, original, LineChunk(revised_position))

    @classmethod
    def change(cls, original: LineChunk, revised: LineChunk) -> Delta:
        return cls(DeltaType.CHANGE, original, revised)

    def __str__(self) -> str:
        return (f"{self.delta_type.name} "
                f"original[{self.original.position}:{self.original.end}] "
                f"revised[{self.revised.position}:{self.revised.end}]")


@dataclass(frozen=True)
class EditScript:
    """
    Ordered list of deltas transforming one line sequence into another.

    Empty if and only if the two sequences are equivalent.
    """
    deltas: tuple[Delta, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.deltas

    def count(self, delta_type: DeltaType) -> int:
        """Number of deltas of the given type."""
        return sum(1 for d in self.deltas if d.delta_type == delta_type)

    def __len__(self) -> int:
        return len(self.deltas)

    def __iter__(self) -> Iterator[Delta]:
        return iter(self.deltas)

    def __getitem__(self, index: int) -> Delta:
        return self.deltas[index]

    def __bool__(self) -> bool:
        return bool(self.deltas)


# =============================================================================
# Binary Models
# =============================================================================

@dataclass(frozen=True)
class ByteDivergence:
    """
    First point of byte-level mismatch between two sources.

    An identical result has no offset. Otherwise a byte value of None
    means that side ended at the offset while the other continued.
    """
    offset: Optional[int] = None
    original_byte: Optional[int] = None
    revised_byte: Optional[int] = None

    @classmethod
    def identical(cls) -> ByteDivergence:
        return cls()

    @classmethod
    def differs_at(
        cls,
        offset: int,
        original_byte: Optional[int],
        revised_byte: Optional[int]
    ) -> ByteDivergence:
        return cls(offset, original_byte, revised_byte)

    @property
    def is_identical(self) -> bool:
        return self.offset is None

    @property
    def original_exhausted(self) -> bool:
        """True if the original ended at the divergence point."""
        return not self.is_identical and self.original_byte is None

    @property
    def revised_exhausted(self) -> bool:
        """True if the revised ended at the divergence point."""
        return not self.is_identical and self.revised_byte is None

    @staticmethod
    def format_byte(value: Optional[int]) -> str:
        return "EOF" if value is None else f"0x{value:02X}"

    def __str__(self) -> str:
        if self.is_identical:
            return "identical"
        original = self.format_byte(self.original_byte)
        revised = self.format_byte(self.revised_byte)
        return f"offset {self.offset}: {original} -> {revised}"


# =============================================================================
# Comparison Result Models
# =============================================================================

@dataclass(frozen=True)
class ComparisonResult:
    """
    Outcome of comparing two sources in either mode.

    Exactly one of edit_script and divergence is set, matching content_type.
    """
    content_type: ContentType
    original_label: str = "original"
    revised_label: str = "revised"
    edit_script: Optional[EditScript] = None
    divergence: Optional[ByteDivergence] = None

    @property
    def is_equivalent(self) -> bool:
        if self.content_type == ContentType.TEXT:
            return self.edit_script is not None and self.edit_script.is_empty
        return self.divergence is not None and self.divergence.is_identical

    @property
    def has_differences(self) -> bool:
        return not self.is_equivalent
