"""
Report Builder v1.0.0
=====================
Turns alignment records into line report rows with human-readable
formatting and whitespace change descriptions, and aggregates the
change counters.
"""

from typing import List, Sequence, Tuple

from .inline_diff import InlineDiffer, added_html, removed_html, visible
from .models import (
    AlignmentRecord, AlignmentKind, LineRow, LineStatus, ChangeSummary,
    FormattingSnapshot, WhitespaceStats, LINE_KINDS
)


def _on_off(value: bool) -> str:
    return 'ON' if value else 'OFF'


def _or_default(value: str) -> str:
    return value or 'default'


def describe_format_changes(left: FormattingSnapshot, right: FormattingSnapshot) -> List[str]:
    """One line per differing tracked attribute, in a fixed order."""
    changes = []

    if left.bold != right.bold:
        changes.append(f"Bold: {_on_off(left.bold)} → {_on_off(right.bold)}")
    if left.italic != right.italic:
        changes.append(f"Italic: {_on_off(left.italic)} → {_on_off(right.italic)}")
    if left.underline != right.underline:
        changes.append(f"Underline: {_on_off(left.underline)} → {_on_off(right.underline)}")
    if left.font_size != right.font_size:
        changes.append(f"Font Size: {_or_default(left.font_size)} → {_or_default(right.font_size)}")
    if left.color != right.color:
        changes.append(f"Color: {_or_default(left.color)} → {_or_default(right.color)}")
    if left.font_family != right.font_family:
        changes.append(f"Font: {_or_default(left.font_family)} → {_or_default(right.font_family)}")

    return changes


def describe_whitespace_changes(left: WhitespaceStats, right: WhitespaceStats) -> List[str]:
    """One line per differing whitespace counter."""
    changes = []

    if left.space_count != right.space_count:
        changes.append(f"Spaces: {left.space_count} → {right.space_count}")
    if left.tab_count != right.tab_count:
        changes.append(f"Tabs: {left.tab_count} → {right.tab_count}")
    if left.line_break_count != right.line_break_count:
        changes.append(f"Line breaks: {left.line_break_count} → {right.line_break_count}")

    return changes


def build_line_row(record: AlignmentRecord, differ: InlineDiffer) -> LineRow:
    """Build the report row for one TEXT, BLOCK or BREAK record."""
    left, right = record.left_unit, record.right_unit

    if record.kind == AlignmentKind.ADDED:
        return LineRow(
            left_index=None,
            right_index=right.index,
            status=LineStatus.ADDED,
            rendered_diff=added_html(right.raw_content),
            format_changes=('Line added',),
            content_changed=True
        )

    if record.kind == AlignmentKind.REMOVED:
        return LineRow(
            left_index=left.index,
            right_index=None,
            status=LineStatus.REMOVED,
            rendered_diff=removed_html(left.raw_content),
            format_changes=('Line removed',),
            content_changed=True
        )

    content_changed = left.raw_content != right.raw_content
    formatting_changed = left.formatting != right.formatting
    whitespace_changed = left.whitespace != right.whitespace

    # Content takes priority over formatting
    if content_changed:
        status = LineStatus.MODIFIED
        rendered = differ.render_combined(left.raw_content, right.raw_content)
    elif formatting_changed:
        status = LineStatus.FORMATTING_ONLY
        rendered = visible(right.raw_content)
    else:
        status = LineStatus.UNCHANGED
        rendered = visible(right.raw_content)

    return LineRow(
        left_index=left.index,
        right_index=right.index,
        status=status,
        rendered_diff=rendered,
        format_changes=tuple(describe_format_changes(left.formatting, right.formatting)),
        whitespace_changes=tuple(describe_whitespace_changes(left.whitespace, right.whitespace)),
        content_changed=content_changed,
        formatting_changed=formatting_changed,
        whitespace_changed=whitespace_changed
    )


def document_order(records: Sequence[AlignmentRecord]) -> List[AlignmentRecord]:
    """
    Sort records for display.

    Records with a right unit sort by its index; a removed record sorts
    right after the record of the nearest preceding matched left unit.
    """
    right_of_left = {r.left_unit.index: r.right_unit.index
                     for r in records if r.left_unit is not None and r.right_unit is not None}

    removed_anchor = {}
    last_right = 0
    for left_index in sorted(r.left_unit.index for r in records if r.left_unit is not None):
        if left_index in right_of_left:
            last_right = right_of_left[left_index]
        else:
            removed_anchor[left_index] = last_right

    def key(record: AlignmentRecord) -> Tuple[int, int, int]:
        if record.right_unit is not None:
            return (record.right_unit.index, 0, 0)
        return (removed_anchor[record.left_unit.index], 1, record.left_unit.index)

    return sorted(records, key=key)


def build_line_rows(records: Sequence[AlignmentRecord], differ: InlineDiffer) -> List[LineRow]:
    """Line rows for TEXT, BLOCK and BREAK records, in document order."""
    line_records = [r for r in records if r.unit_kind in LINE_KINDS]
    return [build_line_row(r, differ) for r in document_order(line_records)]


def line_summary(rows: Sequence[LineRow]) -> ChangeSummary:
    """
    Added rows count one addition, removed rows one deletion, modified
    and formatting-only rows one of each.
    """
    additions = deletions = 0
    for row in rows:
        if row.status == LineStatus.ADDED:
            additions += 1
        elif row.status == LineStatus.REMOVED:
            deletions += 1
        elif row.status in (LineStatus.MODIFIED, LineStatus.FORMATTING_ONLY):
            additions += 1
            deletions += 1
    return ChangeSummary(additions=additions, deletions=deletions)


def build_summary(*parts: ChangeSummary) -> ChangeSummary:
    total = ChangeSummary()
    for part in parts:
        total = total + part
    return total
