"""
Binary diff engine.

Provides byte-level comparison with:
- Chunk-based streaming (memory bounded by the chunk size)
- First divergence offset with the bytes on either side
- End-of-stream detection when one source is shorter
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from filecompare.core.models import (
    ByteDivergence,
    InputUnreadableError,
    PreconditionViolationError,
    require,
)


DEFAULT_CHUNK_SIZE = 4096


@dataclass
class BinaryCompareOptions:
    """Options for binary comparison."""
    chunk_size: int = DEFAULT_CHUNK_SIZE


class BinaryDiffEngine:
    """
    Engine for comparing byte streams.

    Reads both sources in lock-step and stops at the first mismatch.
    """

    def __init__(self, options: Optional[BinaryCompareOptions] = None):
        self.options = options or BinaryCompareOptions()
        if self.options.chunk_size <= 0:
            raise PreconditionViolationError(
                f"Chunk size must be positive, got {self.options.chunk_size}"
            )

    def compare(self, original: BinaryIO, revised: BinaryIO) -> ByteDivergence:
        """
        Compare two readable binary streams.

        Args:
            original: Stream holding the original bytes
            revised: Stream holding the revised bytes

        Returns:
            ByteDivergence describing the first mismatch, or identical

        Raises:
            PreconditionViolationError: if either stream is None
            InputUnreadableError: if either stream fails while being read
        """
        require(original, "The original stream should not be None")
        require(revised, "The revised stream should not be None")

        chunk_size = self.options.chunk_size
        offset = 0

        while True:
            left_chunk = self._read_chunk(original, chunk_size, "original")
            right_chunk = self._read_chunk(revised, chunk_size, "revised")

            if left_chunk == right_chunk:
                if not left_chunk:
                    return ByteDivergence.identical()
                offset += len(left_chunk)
                continue

            index = _first_mismatch(left_chunk, right_chunk)
            return ByteDivergence.differs_at(
                offset + index,
                left_chunk[index] if index < len(left_chunk) else None,
                right_chunk[index] if index < len(right_chunk) else None,
            )

    def compare_bytes(self, original: bytes, revised: bytes) -> ByteDivergence:
        """Compare two byte sequences directly."""
        require(original, "The original bytes should not be None")
        require(revised, "The revised bytes should not be None")
        return self.compare(io.BytesIO(original), io.BytesIO(revised))

    def compare_files(
        self,
        original_path: Path | str,
        revised_path: Path | str
    ) -> ByteDivergence:
        """
        Compare two files by path.

        Both files are opened and closed here; only the chunks needed to
        find the first divergence are read.
        """
        require(original_path, "The original path should not be None")
        require(revised_path, "The revised path should not be None")

        try:
            with open(original_path, 'rb') as left, open(revised_path, 'rb') as right:
                return self.compare(left, right)
        except InputUnreadableError:
            raise
        except OSError as e:
            logging.error(f"BinaryDiffEngine - Error opening {original_path} or {revised_path}: {e}")
            raise InputUnreadableError(f"Unable to open files for comparison: {e}") from e

    @staticmethod
    def _read_chunk(stream: BinaryIO, size: int, label: str) -> bytes:
        """
        Read up to size bytes, looping over short reads.

        Fewer than size bytes are returned only at end of stream, which
        keeps both sides aligned on the same offsets.
        """
        parts = []
        remaining = size
        try:
            while remaining > 0:
                data = stream.read(remaining)
                if not data:
                    break
                parts.append(data)
                remaining -= len(data)
        except OSError as e:
            logging.error(f"BinaryDiffEngine - Error reading {label} stream: {e}")
            raise InputUnreadableError(f"Unable to read {label} stream: {e}") from e
        return b''.join(parts)


def _first_mismatch(left: bytes, right: bytes) -> int:
    """Index of the first differing byte, or the shorter length."""
    for i, (lb, rb) in enumerate(zip(left, right)):
        if lb != rb:
            return i
    return min(len(left), len(right))
