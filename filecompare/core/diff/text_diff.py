"""
Text diff engine.

Provides line-by-line comparison with support for:
- Myers shortest edit script (minimal, LCS based)
- Patience diff (anchored on unique lines)
- Line ending normalization
- Grouping of edits into insert / delete / change deltas
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Sequence

from filecompare.core.models import (
    Delta,
    EditScript,
    LineChunk,
    LineSequence,
    PreconditionViolationError,
    require,
)


Opcode = tuple[str, int, int, int, int]


class DiffAlgorithm(Enum):
    """Available diff algorithms."""
    MYERS = auto()          # Minimal edit script (longest common subsequence)
    PATIENCE = auto()       # Anchors on unique lines, Myers between anchors


@dataclass
class TextCompareOptions:
    """Options for text comparison."""
    algorithm: DiffAlgorithm = DiffAlgorithm.MYERS
    ignore_line_endings: bool = True


class TextDiffEngine:
    """
    Engine for comparing sequences of lines.

    Stateless: every call works only on its arguments, so one engine
    can serve any number of callers.
    """

    def __init__(self, options: Optional[TextCompareOptions] = None):
        self.options = options or TextCompareOptions()

    def diff(self, original: LineSequence, revised: LineSequence) -> EditScript:
        """
        Compute the edit script transforming original into revised.

        Args:
            original: Lines of the original source
            revised: Lines of the revised source

        Returns:
            EditScript, empty if the sequences are equivalent

        Raises:
            PreconditionViolationError: if either sequence is None
        """
        require(original, "The original lines should not be None")
        require(revised, "The revised lines should not be None")

        ignore_eol = self.options.ignore_line_endings
        left = original.keys(ignore_eol)
        right = revised.keys(ignore_eol)

        opcodes = self._get_opcodes(left, right)
        return EditScript(tuple(self._build_deltas(opcodes, original, revised)))

    def diff_text(self, original: str, revised: str) -> EditScript:
        """Split two strings into lines and diff them."""
        return self.diff(LineSequence.from_text(original), LineSequence.from_text(revised))

    def _get_opcodes(self, left: list[str], right: list[str]) -> list[Opcode]:
        """Get diff opcodes using the configured algorithm."""
        if self.options.algorithm == DiffAlgorithm.PATIENCE:
            return self._patience_diff(left, right)
        elif self.options.algorithm == DiffAlgorithm.MYERS:
            return _myers_opcodes(left, right)
        raise PreconditionViolationError(f"Unsupported diff algorithm: {self.options.algorithm}")

    def _patience_diff(self, left: list[str], right: list[str]) -> list[Opcode]:
        """
        Patience diff algorithm.

        Anchors on lines occurring exactly once on each side, keeps the
        longest run of anchors that appear in the same order on both
        sides and fills the gaps with Myers.
        """
        left_unique: dict[str, Optional[int]] = {}
        right_unique: dict[str, Optional[int]] = {}

        for i, line in enumerate(left):
            left_unique[line] = None if line in left_unique else i

        for i, line in enumerate(right):
            right_unique[line] = None if line in right_unique else i

        common = []
        for line, left_idx in left_unique.items():
            if left_idx is not None and right_unique.get(line) is not None:
                common.append((left_idx, right_unique[line]))

        common.sort()

        if common:
            lis = _find_lis([c[1] for c in common])
            anchors = [common[i] for i in lis]
        else:
            anchors = []

        return self._build_opcodes_from_anchors(left, right, anchors)

    def _build_opcodes_from_anchors(
        self,
        left: list[str],
        right: list[str],
        anchors: list[tuple[int, int]]
    ) -> list[Opcode]:
        """Build opcodes using anchor points."""
        opcodes: list[Opcode] = []

        left_pos = 0
        right_pos = 0

        for left_idx, right_idx in anchors + [(len(left), len(right))]:
            for tag, i1, i2, j1, j2 in _myers_opcodes(
                left[left_pos:left_idx], right[right_pos:right_idx]
            ):
                opcodes.append((tag, left_pos + i1, left_pos + i2, right_pos + j1, right_pos + j2))

            if left_idx < len(left):
                opcodes.append(('equal', left_idx, left_idx + 1, right_idx, right_idx + 1))

            left_pos = left_idx + 1
            right_pos = right_idx + 1

        return _merge_opcodes(opcodes)

    def _build_deltas(
        self,
        opcodes: list[Opcode],
        original: LineSequence,
        revised: LineSequence
    ) -> Iterator[Delta]:
        """
        Fold opcodes into deltas.

        Unmatched runs sitting between the same pair of matched lines
        become a single CHANGE rather than a DELETE followed by an INSERT.
        """
        pending: Optional[list[int]] = None

        for tag, i1, i2, j1, j2 in opcodes:
            if tag == 'equal':
                if pending:
                    yield self._create_delta(pending, original, revised)
                    pending = None
                continue

            if pending is None:
                pending = [i1, i2, j1, j2]
            else:
                pending[1] = i2
                pending[3] = j2

        if pending:
            yield self._create_delta(pending, original, revised)

    def _create_delta(
        self,
        region: Sequence[int],
        original: LineSequence,
        revised: LineSequence
    ) -> Delta:
        """Create a delta for an unmatched region."""
        i1, i2, j1, j2 = region
        original_chunk = LineChunk(i1, original.lines[i1:i2])
        revised_chunk = LineChunk(j1, revised.lines[j1:j2])

        if not original_chunk.lines:
            return Delta.insert(i1, revised_chunk)
        if not revised_chunk.lines:
            return Delta.delete(original_chunk, j1)
        return Delta.change(original_chunk, revised_chunk)


def _myers_opcodes(left: Sequence[str], right: Sequence[str]) -> list[Opcode]:
    """
    Compute opcodes for the shortest edit script between two key lists.

    A line that occurs on only one side can never be matched, so such
    lines are set aside before the search and always end up as edits.
    Inputs with no line in common never reach the search at all.
    """
    left_keys = set(left)
    right_keys = set(right)
    left_index = [i for i, key in enumerate(left) if key in right_keys]
    right_index = [j for j, key in enumerate(right) if key in left_keys]

    a = [left[i] for i in left_index]
    b = [right[j] for j in right_index]

    matches: list[tuple[int, int]] = []
    _find_matches(a, 0, len(a), b, 0, len(b), matches)

    return _opcodes_from_matches(
        [(left_index[i], right_index[j]) for i, j in matches],
        len(left),
        len(right),
    )


def _opcodes_from_matches(
    matches: list[tuple[int, int]],
    n: int,
    m: int
) -> list[Opcode]:
    """Turn ascending matched index pairs into opcodes covering both sides."""
    opcodes: list[Opcode] = []
    i = j = 0

    for match_i, match_j in matches + [(n, m)]:
        if i < match_i:
            opcodes.append(('delete', i, match_i, j, j))
        if j < match_j:
            opcodes.append(('insert', match_i, match_i, j, match_j))
        if match_i < n:
            opcodes.append(('equal', match_i, match_i + 1, match_j, match_j + 1))
        i, j = match_i + 1, match_j + 1

    return _merge_opcodes(opcodes)


def _find_matches(
    a: Sequence[str],
    a_lo: int,
    a_hi: int,
    b: Sequence[str],
    b_lo: int,
    b_hi: int,
    matches: list[tuple[int, int]]
) -> None:
    """
    Append the matched pairs of a shortest edit script for a[a_lo:a_hi]
    and b[b_lo:b_hi], in ascending order.

    Linear space divide and conquer: the middle snake of an optimal path
    splits the box in two and each half is solved on its own.
    """
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        matches.append((a_lo, b_lo))
        a_lo += 1
        b_lo += 1

    suffix: list[tuple[int, int]] = []
    while a_lo < a_hi and b_lo < b_hi and a[a_hi - 1] == b[b_hi - 1]:
        a_hi -= 1
        b_hi -= 1
        suffix.append((a_hi, b_hi))

    if a_lo < a_hi and b_lo < b_hi:
        x, y, u, v = _middle_snake(a, a_lo, a_hi, b, b_lo, b_hi)
        _find_matches(a, a_lo, x, b, b_lo, y, matches)
        matches.extend((x + step, y + step) for step in range(u - x))
        _find_matches(a, u, a_hi, b, v, b_hi, matches)

    matches.extend(reversed(suffix))


def _middle_snake(
    a: Sequence[str],
    a_lo: int,
    a_hi: int,
    b: Sequence[str],
    b_lo: int,
    b_hi: int
) -> tuple[int, int, int, int]:
    """
    Find the middle snake of a shortest edit path through the box.

    Runs the forward and the reverse search of Myers' algorithm at the
    same time, keeping only the furthest x per diagonal, until the two
    overlap. Returns the snake as (x, y, u, v): it starts at (x, y) and
    ends at (u, v), both in absolute indices.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    delta = n - m
    odd = delta % 2 == 1
    max_d = (n + m + 1) // 2
    offset = max_d + 1

    # forward[k]: furthest x on diagonal x - y = k from the start
    # reverse[k]: furthest distance back from the end on diagonal k
    forward = [0] * (2 * max_d + 3)
    reverse = [0] * (2 * max_d + 3)

    for d in range(max_d + 1):
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and forward[offset + k - 1] < forward[offset + k + 1]):
                x = forward[offset + k + 1]
            else:
                x = forward[offset + k - 1] + 1
            y = x - k
            start_x, start_y = x, y

            while x < n and y < m and a[a_lo + x] == b[b_lo + y]:
                x += 1
                y += 1
            forward[offset + k] = x

            c = delta - k
            if odd and -(d - 1) <= c <= d - 1 and x + reverse[offset + c] >= n:
                return a_lo + start_x, b_lo + start_y, a_lo + x, b_lo + y

        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and reverse[offset + k - 1] < reverse[offset + k + 1]):
                x = reverse[offset + k + 1]
            else:
                x = reverse[offset + k - 1] + 1
            y = x - k
            start_x, start_y = x, y

            while x < n and y < m and a[a_hi - 1 - x] == b[b_hi - 1 - y]:
                x += 1
                y += 1
            reverse[offset + k] = x

            c = delta - k
            if not odd and -d <= c <= d and x + forward[offset + c] >= n:
                return a_hi - x, b_hi - y, a_hi - start_x, b_hi - start_y

    raise AssertionError("Middle snake not found")


def _merge_opcodes(opcodes: list[Opcode]) -> list[Opcode]:
    """Coalesce adjacent opcodes with the same tag and drop empty ones."""
    merged: list[Opcode] = []
    for tag, i1, i2, j1, j2 in opcodes:
        if i1 == i2 and j1 == j2:
            continue
        if merged and merged[-1][0] == tag:
            prev = merged[-1]
            merged[-1] = (tag, prev[1], i2, prev[3], j2)
        else:
            merged.append((tag, i1, i2, j1, j2))
    return merged


def _find_lis(sequence: list[int]) -> list[int]:
    """Find indices of Longest Increasing Subsequence."""
    if not sequence:
        return []

    n = len(sequence)
    # dp[i] = smallest ending element for LIS of length i+1
    dp: list[int] = []
    # parent[i] = index of previous element in LIS ending at i
    parent = [-1] * n
    # indices[i] = index in original sequence for dp[i]
    indices: list[int] = []

    for i, val in enumerate(sequence):
        lo, hi = 0, len(dp)
        while lo < hi:
            mid = (lo + hi) // 2
            if dp[mid] < val:
                lo = mid + 1
            else:
                hi = mid

        if lo == len(dp):
            dp.append(val)
            indices.append(i)
        else:
            dp[lo] = val
            indices[lo] = i

        parent[i] = indices[lo - 1] if lo > 0 else -1

    result = []
    idx = indices[-1]
    while idx >= 0:
        result.append(idx)
        idx = parent[idx]

    return list(reversed(result))
