"""
HTML Compare Models v1.0.0
==========================
Data classes for comparable units, alignment records, structural
changes and comparison results.

Every instance is created fresh for one comparison and is immutable
once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Any, Tuple


class UnitKind(Enum):
    """Kind of a comparable unit."""
    TEXT = "text"
    BLOCK = "block"
    BREAK = "break"
    IMAGE = "image"
    TABLE = "table"


# Units reported as lines; images and tables are reported structurally
LINE_KINDS = frozenset({UnitKind.TEXT, UnitKind.BLOCK, UnitKind.BREAK})


class AlignmentKind(Enum):
    """Classification of an aligned pair of units."""
    EQUAL = "equal"
    MODIFIED = "modified"
    ADDED = "added"
    REMOVED = "removed"


class CellChangeKind(Enum):
    """Kind of a table cell change."""
    ROW_ADDED = "row-added"
    ROW_REMOVED = "row-removed"
    CELL_ADDED = "cell-added"
    CELL_REMOVED = "cell-removed"
    CELL_MODIFIED = "cell-modified"

    @property
    def is_addition(self) -> bool:
        return self in (CellChangeKind.ROW_ADDED, CellChangeKind.CELL_ADDED)

    @property
    def is_deletion(self) -> bool:
        return self in (CellChangeKind.ROW_REMOVED, CellChangeKind.CELL_REMOVED)


class LineStatus(Enum):
    """Status of a row in the line report."""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"
    UNCHANGED = "UNCHANGED"
    FORMATTING_ONLY = "FORMATTING-ONLY"


class EntityStatus(Enum):
    """Status of a table or image in the structural report."""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"


@dataclass(frozen=True)
class FormattingSnapshot:
    """
    Resolved style attributes of an element.

    Equality is attribute-wise. String attributes hold the raw CSS value
    ('' when unset).
    """
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font_size: str = ""
    color: str = ""
    background_color: str = ""
    font_family: str = ""
    text_align: str = ""
    line_height: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bold': self.bold,
            'italic': self.italic,
            'underline': self.underline,
            'font_size': self.font_size,
            'color': self.color,
            'background_color': self.background_color,
            'font_family': self.font_family,
            'text_align': self.text_align,
            'line_height': self.line_height
        }


@dataclass(frozen=True)
class WhitespaceStats:
    """Counts of whitespace characters in a unit's raw content."""
    space_count: int = 0
    tab_count: int = 0
    line_break_count: int = 0

    @classmethod
    def from_text(cls, text: str) -> 'WhitespaceStats':
        """Derive whitespace counts from raw text."""
        if not text:
            return cls()
        return cls(
            space_count=text.count(' '),
            tab_count=text.count('\t'),
            line_break_count=text.count('\n')
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'space_count': self.space_count,
            'tab_count': self.tab_count,
            'line_break_count': self.line_break_count
        }


@dataclass(frozen=True)
class ImageSnapshot:
    """Attributes of an image element used for comparison."""
    source: str = ""
    alt_text: str = ""
    width: str = ""
    height: str = ""
    title: str = ""
    css_class: str = ""
    inline_style: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            'source': self.source,
            'alt_text': self.alt_text,
            'width': self.width,
            'height': self.height,
            'title': self.title,
            'css_class': self.css_class,
            'inline_style': self.inline_style
        }


@dataclass(frozen=True)
class CellSnapshot:
    """A table cell: trimmed text, formatting and spans."""
    content: str
    formatting: FormattingSnapshot = field(default_factory=FormattingSnapshot)
    colspan: int = 1
    rowspan: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'content': self.content,
            'formatting': self.formatting.to_dict(),
            'colspan': self.colspan,
            'rowspan': self.rowspan
        }


@dataclass(frozen=True)
class TableSnapshot:
    """
    Row/cell grid of a table.

    Attributes:
        row_count: Number of rows owned by the table
        column_count: Number of cells in the first row
        cells: Rows of cells, in document order
    """
    row_count: int
    column_count: int
    cells: Tuple[Tuple[CellSnapshot, ...], ...] = ()

    def row(self, index: int) -> Optional[Tuple[CellSnapshot, ...]]:
        """Return the cells of a row, or None when the row does not exist."""
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row_count': self.row_count,
            'column_count': self.column_count,
            'cells': [[c.to_dict() for c in row] for row in self.cells]
        }


@dataclass(frozen=True)
class ComparableUnit:
    """
    Minimal content block assigned a position index for alignment.

    Attributes:
        index: 1-based document-order position, assigned once per side
        kind: Unit kind
        raw_content: Unmodified text of the unit ('' for images, tables, breaks)
        formatting: Resolved formatting of the owning element
        whitespace: Whitespace counts derived from raw_content
        table_data: Table grid (TABLE units only)
        image_data: Image attributes (IMAGE units only)
    """
    index: int
    kind: UnitKind
    raw_content: str = ""
    formatting: FormattingSnapshot = field(default_factory=FormattingSnapshot)
    whitespace: WhitespaceStats = field(default_factory=WhitespaceStats)
    table_data: Optional[TableSnapshot] = None
    image_data: Optional[ImageSnapshot] = None

    def matches_exactly(self, other: 'ComparableUnit') -> bool:
        """Same content, kind and formatting."""
        return (self.kind == other.kind
                and self.raw_content == other.raw_content
                and self.formatting == other.formatting)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'kind': self.kind.value,
            'raw_content': self.raw_content,
            'formatting': self.formatting.to_dict(),
            'whitespace': self.whitespace.to_dict(),
            'table_data': self.table_data.to_dict() if self.table_data else None,
            'image_data': self.image_data.to_dict() if self.image_data else None
        }


@dataclass(frozen=True)
class AlignmentRecord:
    """
    A pairing of units between two document versions.

    EQUAL and MODIFIED carry both units, ADDED only the right unit and
    REMOVED only the left unit.
    """
    kind: AlignmentKind
    left_unit: Optional[ComparableUnit] = None
    right_unit: Optional[ComparableUnit] = None

    def __post_init__(self):
        has_left = self.left_unit is not None
        has_right = self.right_unit is not None
        expected = {
            AlignmentKind.EQUAL: (True, True),
            AlignmentKind.MODIFIED: (True, True),
            AlignmentKind.ADDED: (False, True),
            AlignmentKind.REMOVED: (True, False),
        }[self.kind]
        if (has_left, has_right) != expected:
            raise ValueError(
                f"{self.kind.value} record requires left={expected[0]}, right={expected[1]}"
            )

    @property
    def unit_kind(self) -> UnitKind:
        return (self.left_unit or self.right_unit).kind


@dataclass(frozen=True)
class CellChange:
    """
    A change in one table cell (row/col are 0-based).

    content_changed and formatting_changed are only set for CELL_MODIFIED.
    left_html/right_html hold the intra-cell diff renderings when the
    content changed.
    """
    row: int
    col: int
    kind: CellChangeKind
    content_changed: Optional[bool] = None
    formatting_changed: Optional[bool] = None
    left_content: str = ""
    right_content: str = ""
    left_html: str = ""
    right_html: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'row': self.row,
            'col': self.col,
            'type': self.kind.value,
            'left_content': self.left_content,
            'right_content': self.right_content
        }
        if self.kind == CellChangeKind.CELL_MODIFIED:
            data['content_changed'] = self.content_changed
            data['formatting_changed'] = self.formatting_changed
            data['left_html'] = self.left_html
            data['right_html'] = self.right_html
        return data


@dataclass(frozen=True)
class ChangeSummary:
    """Addition/deletion counters; changes is always derived."""
    additions: int = 0
    deletions: int = 0

    @property
    def changes(self) -> int:
        return self.additions + self.deletions

    def __add__(self, other: 'ChangeSummary') -> 'ChangeSummary':
        return ChangeSummary(
            additions=self.additions + other.additions,
            deletions=self.deletions + other.deletions
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'additions': self.additions,
            'deletions': self.deletions,
            'changes': self.changes
        }


@dataclass(frozen=True)
class LineRow:
    """
    One row of the line report.

    Attributes:
        left_index: Unit index on the left side (None for additions)
        right_index: Unit index on the right side (None for removals)
        status: Row status
        rendered_diff: HTML of the intra-line diff
        format_changes: Human-readable formatting change lines
        whitespace_changes: Human-readable whitespace change lines
    """
    left_index: Optional[int]
    right_index: Optional[int]
    status: LineStatus
    rendered_diff: str = ""
    format_changes: Tuple[str, ...] = ()
    whitespace_changes: Tuple[str, ...] = ()
    content_changed: bool = False
    formatting_changed: bool = False
    whitespace_changed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'left_index': self.left_index,
            'right_index': self.right_index,
            'status': self.status.value,
            'rendered_diff': self.rendered_diff,
            'format_changes': list(self.format_changes),
            'whitespace_changes': list(self.whitespace_changes),
            'content_changed': self.content_changed,
            'formatting_changed': self.formatting_changed,
            'whitespace_changed': self.whitespace_changed
        }


@dataclass(frozen=True)
class TableReport:
    """Structural comparison result for one table position."""
    table_ordinal: int
    status: EntityStatus
    cell_changes: Tuple[CellChange, ...] = ()
    left_table: Optional[TableSnapshot] = None
    right_table: Optional[TableSnapshot] = None
    summary: ChangeSummary = field(default_factory=ChangeSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'table_ordinal': self.table_ordinal,
            'status': self.status.value,
            'cell_changes': [c.to_dict() for c in self.cell_changes],
            'left_table': self.left_table.to_dict() if self.left_table else None,
            'right_table': self.right_table.to_dict() if self.right_table else None
        }


@dataclass(frozen=True)
class ImageReport:
    """Structural comparison result for one image position."""
    image_ordinal: int
    status: EntityStatus
    left_image: Optional[ImageSnapshot] = None
    right_image: Optional[ImageSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'image_ordinal': self.image_ordinal,
            'status': self.status.value,
            'left_image': self.left_image.to_dict() if self.left_image else None,
            'right_image': self.right_image.to_dict() if self.right_image else None
        }


@dataclass(frozen=True)
class DocumentDiff:
    """Whole-document tag plus the annotated markup of one side."""
    type: str  # 'equal' or 'modified'
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'content': self.content}


@dataclass(frozen=True)
class ComparisonResult:
    """
    Complete comparison of two document versions.

    Attributes:
        summary: Aggregated addition/deletion counters
        lines: Line report rows in document order
        tables: Changed tables in ordinal order
        images: Changed images in ordinal order
        left_diffs: Single-entry list for the left document
        right_diffs: Single-entry list for the right document
    """
    summary: ChangeSummary
    lines: Tuple[LineRow, ...] = ()
    tables: Tuple[TableReport, ...] = ()
    images: Tuple[ImageReport, ...] = ()
    left_diffs: Tuple[DocumentDiff, ...] = ()
    right_diffs: Tuple[DocumentDiff, ...] = ()

    @property
    def has_changes(self) -> bool:
        return self.summary.changes > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'summary': self.summary.to_dict(),
            'detailed': {
                'lines': [r.to_dict() for r in self.lines],
                'tables': [t.to_dict() for t in self.tables],
                'images': [i.to_dict() for i in self.images]
            },
            'left_diffs': [d.to_dict() for d in self.left_diffs],
            'right_diffs': [d.to_dict() for d in self.right_diffs]
        }
