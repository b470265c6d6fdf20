"""
Tests for the Line Report Builder
=================================
"""

from html_compare.models import (
    AlignmentRecord, AlignmentKind, ComparableUnit, UnitKind, LineStatus,
    FormattingSnapshot, WhitespaceStats, ChangeSummary
)
from html_compare.report import (
    describe_format_changes, describe_whitespace_changes, build_line_row,
    build_line_rows, document_order, line_summary, build_summary
)


def unit(index, text='', kind=UnitKind.TEXT, **formatting):
    return ComparableUnit(
        index=index,
        kind=kind,
        raw_content=text,
        formatting=FormattingSnapshot(**formatting),
        whitespace=WhitespaceStats.from_text(text)
    )


def equal(left, right):
    return AlignmentRecord(AlignmentKind.EQUAL, left, right)


def modified(left, right):
    return AlignmentRecord(AlignmentKind.MODIFIED, left, right)


def added(right):
    return AlignmentRecord(AlignmentKind.ADDED, right_unit=right)


def removed(left):
    return AlignmentRecord(AlignmentKind.REMOVED, left_unit=left)


class TestDescriptions:
    """Tests for human-readable change descriptions."""

    def test_format_changes_in_fixed_order(self):
        left = FormattingSnapshot(color='red')
        right = FormattingSnapshot(bold=True, italic=True, font_size='14px', color='blue',
                                   font_family='Arial')
        assert describe_format_changes(left, right) == [
            'Bold: OFF → ON',
            'Italic: OFF → ON',
            'Font Size: default → 14px',
            'Color: red → blue',
            'Font: default → Arial',
        ]

    def test_untracked_attributes_not_described(self):
        left = FormattingSnapshot(text_align='left', line_height='1')
        right = FormattingSnapshot(text_align='center', line_height='2')
        assert describe_format_changes(left, right) == []

    def test_underline_off(self):
        assert describe_format_changes(FormattingSnapshot(underline=True),
                                       FormattingSnapshot()) == ['Underline: ON → OFF']

    def test_whitespace_changes(self):
        left = WhitespaceStats.from_text('a b\tc')
        right = WhitespaceStats.from_text('a  b\nc')
        assert describe_whitespace_changes(left, right) == [
            'Spaces: 1 → 2',
            'Tabs: 1 → 0',
            'Line breaks: 0 → 1',
        ]


class TestLineRow:
    """Tests for build_line_row."""

    def test_added_row(self, differ):
        row = build_line_row(added(unit(3, 'new')), differ)
        assert row.status == LineStatus.ADDED
        assert (row.left_index, row.right_index) == (None, 3)
        assert row.rendered_diff == '<span class="hc-inline-added">new</span>'
        assert row.format_changes == ('Line added',)

    def test_removed_row(self, differ):
        row = build_line_row(removed(unit(2, 'old')), differ)
        assert row.status == LineStatus.REMOVED
        assert (row.left_index, row.right_index) == (2, None)
        assert 'hc-inline-removed' in row.rendered_diff
        assert row.format_changes == ('Line removed',)

    def test_equal_row_is_unchanged(self, differ):
        row = build_line_row(equal(unit(1, 'a b'), unit(1, 'a b')), differ)
        assert row.status == LineStatus.UNCHANGED
        assert row.rendered_diff == 'a<span class="whitespace-space">·</span>b'
        assert not row.content_changed

    def test_whitespace_only_modification(self, differ):
        row = build_line_row(modified(unit(1, 'a b'), unit(1, 'a  b')), differ)
        assert row.status == LineStatus.MODIFIED
        assert row.whitespace_changes == ('Spaces: 1 → 2',)
        assert row.whitespace_changed

    def test_formatting_only(self, differ):
        row = build_line_row(modified(unit(1, 'text'), unit(1, 'text', bold=True)), differ)
        assert row.status == LineStatus.FORMATTING_ONLY
        assert row.format_changes == ('Bold: OFF → ON',)
        assert row.formatting_changed and not row.content_changed
        assert row.to_dict()['status'] == 'FORMATTING-ONLY'

    def test_content_takes_priority_over_formatting(self, differ):
        row = build_line_row(modified(unit(1, 'Hello world'),
                                      unit(1, 'Hello there', italic=True)), differ)
        assert row.status == LineStatus.MODIFIED
        assert row.format_changes == ('Italic: OFF → ON',)
        assert '<span class="hc-inline-removed">world</span>' in row.rendered_diff
        assert '<span class="hc-inline-added">there</span>' in row.rendered_diff


class TestDocumentOrder:
    """Tests for display ordering."""

    def test_removed_rows_follow_preceding_match(self):
        l1, l2, l3 = unit(1, 'a'), unit(2, 'b'), unit(3, 'c')
        r1, r2, r3 = unit(1, 'a'), unit(2, 'c'), unit(3, 'd')
        records = [equal(l1, r1), equal(l3, r2), removed(l2), added(r3)]
        ordered = document_order(records)
        assert [(r.left_unit.index if r.left_unit else None,
                 r.right_unit.index if r.right_unit else None) for r in ordered] == [
            (1, 1), (2, None), (3, 2), (None, 3)
        ]

    def test_leading_removal_comes_first(self):
        records = [equal(unit(2, 'b'), unit(1, 'b')), removed(unit(1, 'a'))]
        ordered = document_order(records)
        assert ordered[0].kind == AlignmentKind.REMOVED

    def test_image_and_table_records_excluded(self, differ):
        records = [
            added(unit(1, kind=UnitKind.IMAGE)),
            removed(unit(1, kind=UnitKind.TABLE)),
            added(unit(2, kind=UnitKind.BREAK)),
        ]
        rows = build_line_rows(records, differ)
        assert len(rows) == 1
        assert rows[0].right_index == 2


class TestSummary:
    """Tests for line counting."""

    def test_line_summary_counts(self, differ):
        records = [
            equal(unit(1, 'same'), unit(1, 'same')),
            modified(unit(2, 'Hello world'), unit(2, 'Hello there')),
            modified(unit(3, 'x'), unit(3, 'x', bold=True)),
            added(unit(4, 'new')),
            removed(unit(4, 'old')),
        ]
        summary = line_summary(build_line_rows(records, differ))
        assert (summary.additions, summary.deletions, summary.changes) == (3, 3, 6)

    def test_build_summary_adds_parts(self):
        total = build_summary(ChangeSummary(1, 0), ChangeSummary(2, 1), ChangeSummary())
        assert total.to_dict() == {'additions': 3, 'deletions': 1, 'changes': 4}
