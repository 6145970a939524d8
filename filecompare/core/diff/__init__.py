"""
Diff module for content comparison operations.

Provides engines for comparing:
- Text (line-by-line edit scripts)
- Binary data (first byte-level divergence)
"""

from filecompare.core.diff.text_diff import (
    TextDiffEngine,
    DiffAlgorithm,
    TextCompareOptions,
)
from filecompare.core.diff.binary_diff import (
    BinaryDiffEngine,
    BinaryCompareOptions,
)
from filecompare.core.diff.comparator import (
    ContentComparator,
    TextContentComparator,
    BinaryContentComparator,
    comparator_for,
)

__all__ = [
    # Text diff
    'TextDiffEngine',
    'DiffAlgorithm',
    'TextCompareOptions',
    # Binary diff
    'BinaryDiffEngine',
    'BinaryCompareOptions',
    # Comparators
    'ContentComparator',
    'TextContentComparator',
    'BinaryContentComparator',
    'comparator_for',
]
