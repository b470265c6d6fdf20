"""
Structural Differencer v1.0.0
=============================
Position-aligned comparison of tables (row/cell grid) and images.

The Nth table (image) on the left is compared with the Nth table (image)
on the right; content similarity plays no part in pairing.
"""

import re
from typing import List, Optional, Sequence

from config_logging import get_logger
from .inline_diff import InlineDiffer, LEFT, RIGHT
from .models import (
    TableSnapshot, CellSnapshot, ImageSnapshot, CellChange, CellChangeKind,
    ChangeSummary, TableReport, ImageReport, EntityStatus
)

logger = get_logger('html_compare.structural')

_DIMENSION_RE = re.compile(r'^(\d+(?:\.\d+)?|\.\d+)\s*(px)?$', re.IGNORECASE)


def normalize_dimension(value) -> str:
    """
    Canonical form of a width/height value.

    Bare numbers and pixel values collapse to the same number
    (100, "100", "100px" and "100.0px" all become "100"); anything else
    is returned trimmed and lower-cased.
    """
    if value is None:
        return ''
    text = str(value).strip()
    match = _DIMENSION_RE.match(text)
    if not match:
        return text.lower()
    number = float(match.group(1))
    return str(int(number)) if number.is_integer() else repr(number)


def dimensions_equal(a, b) -> bool:
    return normalize_dimension(a) == normalize_dimension(b)


def image_modified(left: ImageSnapshot, right: ImageSnapshot) -> bool:
    """Source, alt text, width or height differ."""
    return (left.source != right.source
            or left.alt_text != right.alt_text
            or not dimensions_equal(left.width, right.width)
            or not dimensions_equal(left.height, right.height))


def compare_images(left_images: Sequence[ImageSnapshot],
                   right_images: Sequence[ImageSnapshot]) -> List[ImageReport]:
    """Compare images by ordinal position; only changed positions are reported."""
    reports = []
    for position in range(max(len(left_images), len(right_images))):
        left = left_images[position] if position < len(left_images) else None
        right = right_images[position] if position < len(right_images) else None

        if left is not None and right is None:
            status = EntityStatus.REMOVED
        elif left is None and right is not None:
            status = EntityStatus.ADDED
        elif image_modified(left, right):
            status = EntityStatus.MODIFIED
        else:
            continue

        reports.append(ImageReport(
            image_ordinal=position + 1,
            status=status,
            left_image=left,
            right_image=right
        ))

    if reports:
        logger.debug(f"Image comparison: {len(reports)} changed of "
                     f"{max(len(left_images), len(right_images))}")
    return reports


def image_summary(reports: Sequence[ImageReport]) -> ChangeSummary:
    """Added counts one addition, removed one deletion, modified one of each."""
    additions = sum(1 for r in reports if r.status in (EntityStatus.ADDED, EntityStatus.MODIFIED))
    deletions = sum(1 for r in reports if r.status in (EntityStatus.REMOVED, EntityStatus.MODIFIED))
    return ChangeSummary(additions=additions, deletions=deletions)


def _compare_cell(row: int, col: int, left: CellSnapshot, right: CellSnapshot,
                  differ: InlineDiffer) -> Optional[CellChange]:
    content_changed = left.content.strip() != right.content.strip()
    formatting_changed = left.formatting != right.formatting
    if not (content_changed or formatting_changed):
        return None

    left_html = right_html = ''
    if content_changed:
        left_html = differ.render(left.content, right.content, LEFT)
        right_html = differ.render(left.content, right.content, RIGHT)

    return CellChange(
        row=row,
        col=col,
        kind=CellChangeKind.CELL_MODIFIED,
        content_changed=content_changed,
        formatting_changed=formatting_changed,
        left_content=left.content,
        right_content=right.content,
        left_html=left_html,
        right_html=right_html
    )


def compare_table_grids(left: TableSnapshot, right: TableSnapshot,
                        differ: InlineDiffer) -> List[CellChange]:
    """Row-by-row, cell-by-cell comparison of two tables at the same position."""
    changes = []
    for r in range(max(left.row_count, right.row_count)):
        left_row = left.row(r)
        right_row = right.row(r)

        if left_row is not None and right_row is None:
            changes.extend(
                CellChange(row=r, col=c, kind=CellChangeKind.ROW_REMOVED, left_content=cell.content)
                for c, cell in enumerate(left_row)
            )
            continue
        if left_row is None and right_row is not None:
            changes.extend(
                CellChange(row=r, col=c, kind=CellChangeKind.ROW_ADDED, right_content=cell.content)
                for c, cell in enumerate(right_row)
            )
            continue

        for c in range(max(len(left_row), len(right_row))):
            left_cell = left_row[c] if c < len(left_row) else None
            right_cell = right_row[c] if c < len(right_row) else None

            if left_cell is not None and right_cell is None:
                changes.append(CellChange(row=r, col=c, kind=CellChangeKind.CELL_REMOVED,
                                          left_content=left_cell.content))
            elif left_cell is None and right_cell is not None:
                changes.append(CellChange(row=r, col=c, kind=CellChangeKind.CELL_ADDED,
                                          right_content=right_cell.content))
            else:
                change = _compare_cell(r, c, left_cell, right_cell, differ)
                if change is not None:
                    changes.append(change)
    return changes


def cell_change_summary(changes: Sequence[CellChange]) -> ChangeSummary:
    additions = sum(1 for c in changes
                    if c.kind.is_addition or c.kind == CellChangeKind.CELL_MODIFIED)
    deletions = sum(1 for c in changes
                    if c.kind.is_deletion or c.kind == CellChangeKind.CELL_MODIFIED)
    return ChangeSummary(additions=additions, deletions=deletions)


def compare_tables(left_tables: Sequence[TableSnapshot],
                   right_tables: Sequence[TableSnapshot],
                   differ: InlineDiffer) -> List[TableReport]:
    """Compare tables by ordinal position; only changed positions are reported."""
    reports = []
    for position in range(max(len(left_tables), len(right_tables))):
        left = left_tables[position] if position < len(left_tables) else None
        right = right_tables[position] if position < len(right_tables) else None

        if left is not None and right is None:
            reports.append(TableReport(
                table_ordinal=position + 1,
                status=EntityStatus.REMOVED,
                left_table=left,
                summary=ChangeSummary(deletions=1)
            ))
        elif left is None and right is not None:
            reports.append(TableReport(
                table_ordinal=position + 1,
                status=EntityStatus.ADDED,
                right_table=right,
                summary=ChangeSummary(additions=1)
            ))
        else:
            changes = compare_table_grids(left, right, differ)
            if changes:
                reports.append(TableReport(
                    table_ordinal=position + 1,
                    status=EntityStatus.MODIFIED,
                    cell_changes=tuple(changes),
                    left_table=left,
                    right_table=right,
                    summary=cell_change_summary(changes)
                ))

    if reports:
        logger.debug(f"Table comparison: {len(reports)} changed of "
                     f"{max(len(left_tables), len(right_tables))}")
    return reports


def table_summary(reports: Sequence[TableReport]) -> ChangeSummary:
    total = ChangeSummary()
    for report in reports:
        total = total + report.summary
    return total
