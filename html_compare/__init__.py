"""
HTML Compare Module v1.0.0
==========================
Comparison of two versions of a rendered rich-text (HTML) document.

Features:
- Unit extraction of text lines, blocks, line breaks, images and tables
- Exact and similarity-based alignment of units across versions
- Character-level inline diffs with visible whitespace markers
- Position-aligned table (row/cell) and image comparison
- Formatting-only and whitespace change descriptions
- Side-by-side annotated markup with placeholders
"""

from .comparator import HtmlComparator, compare_documents, unchanged_result
from .models import (
    UnitKind,
    AlignmentKind,
    CellChangeKind,
    LineStatus,
    EntityStatus,
    FormattingSnapshot,
    WhitespaceStats,
    ImageSnapshot,
    CellSnapshot,
    TableSnapshot,
    ComparableUnit,
    AlignmentRecord,
    CellChange,
    ChangeSummary,
    LineRow,
    TableReport,
    ImageReport,
    DocumentDiff,
    ComparisonResult
)

__version__ = "1.0.0"
__all__ = [
    'HtmlComparator',
    'compare_documents',
    'unchanged_result',
    'UnitKind',
    'AlignmentKind',
    'CellChangeKind',
    'LineStatus',
    'EntityStatus',
    'FormattingSnapshot',
    'WhitespaceStats',
    'ImageSnapshot',
    'CellSnapshot',
    'TableSnapshot',
    'ComparableUnit',
    'AlignmentRecord',
    'CellChange',
    'ChangeSummary',
    'LineRow',
    'TableReport',
    'ImageReport',
    'DocumentDiff',
    'ComparisonResult'
]
