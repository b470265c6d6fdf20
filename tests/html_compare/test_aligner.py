"""
Tests for the Alignment Engine
==============================
"""

from typing import List

import pytest

from html_compare.aligner import align_units
from html_compare.extractor import parse_markup, extract_units
from html_compare.models import (
    ComparableUnit, UnitKind, AlignmentKind, AlignmentRecord,
    FormattingSnapshot, WhitespaceStats
)


def units(*texts, kind=UnitKind.TEXT, formatting=None) -> List[ComparableUnit]:
    return [
        ComparableUnit(
            index=i,
            kind=kind,
            raw_content=text,
            formatting=formatting or FormattingSnapshot(),
            whitespace=WhitespaceStats.from_text(text)
        )
        for i, text in enumerate(texts, start=1)
    ]


def by_kind(records, kind):
    return [r for r in records if r.kind == kind]


def assert_coverage(records, left, right):
    left_seen = [r.left_unit.index for r in records if r.left_unit is not None]
    right_seen = [r.right_unit.index for r in records if r.right_unit is not None]
    assert sorted(left_seen) == [u.index for u in left]
    assert sorted(right_seen) == [u.index for u in right]


class TestExactPass:
    """Tests for exact matching."""

    def test_reordered_lines_match_exactly(self, differ):
        left, right = units('a', 'b'), units('b', 'a')
        records = align_units(left, right, differ)
        assert [r.kind for r in records] == [AlignmentKind.EQUAL, AlignmentKind.EQUAL]
        assert [(r.left_unit.index, r.right_unit.index) for r in records] == [(1, 2), (2, 1)]

    def test_first_unused_duplicate_wins(self, differ):
        left, right = units('x', 'x'), units('x', 'x', 'x')
        records = align_units(left, right, differ)
        equal = by_kind(records, AlignmentKind.EQUAL)
        assert [(r.left_unit.index, r.right_unit.index) for r in equal] == [(1, 1), (2, 2)]
        assert [r.right_unit.index for r in by_kind(records, AlignmentKind.ADDED)] == [3]

    def test_formatting_difference_is_not_exact(self, differ):
        left = units('same')
        right = units('same', formatting=FormattingSnapshot(bold=True))
        records = align_units(left, right, differ)
        assert [r.kind for r in records] == [AlignmentKind.MODIFIED]


class TestSimilarityPass:
    """Tests for similarity matching."""

    def test_similar_lines_are_modified(self, differ):
        records = align_units(units('Hello world'), units('Hello there'), differ)
        assert [r.kind for r in records] == [AlignmentKind.MODIFIED]

    def test_dissimilar_lines_are_removed_and_added(self, differ):
        records = align_units(units('abc'), units('xyz'), differ)
        assert [r.kind for r in records] == [AlignmentKind.REMOVED, AlignmentKind.ADDED]

    def test_score_must_exceed_threshold(self, differ):
        # similarity is exactly 0.5
        left, right = units('abcdef'), units('abcxyz')
        assert by_kind(align_units(left, right, differ, threshold=0.5), AlignmentKind.MODIFIED) == []
        assert len(by_kind(align_units(left, right, differ, threshold=0.3), AlignmentKind.MODIFIED)) == 1

    def test_highest_score_wins(self, differ):
        records = align_units(units('abcdefgh'), units('abcdxxxx', 'abcdefgx'), differ)
        modified = by_kind(records, AlignmentKind.MODIFIED)[0]
        assert modified.right_unit.raw_content == 'abcdefgx'

    def test_first_maximum_wins_ties(self, differ):
        records = align_units(units('abcd'), units('abcx', 'abcy'), differ)
        modified = by_kind(records, AlignmentKind.MODIFIED)[0]
        assert modified.right_unit.index == 1

    def test_kinds_must_match(self, differ):
        left = units('same text', kind=UnitKind.TEXT)
        right = units('same text', kind=UnitKind.BLOCK)
        records = align_units(left, right, differ)
        assert [r.kind for r in records] == [AlignmentKind.REMOVED, AlignmentKind.ADDED]


class TestLeftovers:
    """Tests for the leftover pass and overall invariants."""

    def test_empty_inputs(self, differ):
        assert align_units([], [], differ) == []

    def test_all_added(self, differ):
        records = align_units([], units('a', 'b'), differ)
        assert [r.kind for r in records] == [AlignmentKind.ADDED, AlignmentKind.ADDED]

    def test_all_removed(self, differ):
        records = align_units(units('a', 'b'), [], differ)
        assert [r.kind for r in records] == [AlignmentKind.REMOVED, AlignmentKind.REMOVED]

    def test_coverage_on_real_documents(self, differ):
        left = extract_units(parse_markup(
            '<h1>Title</h1><p>First paragraph here</p><span>a\nb</span><br>'
            '<img src="a.png"><table><tr><td>1</td></tr></table><p>Tail</p>'
        )).units
        right = extract_units(parse_markup(
            '<h1>Title v2</h1><span>b\nc</span><p>Inserted</p><img src="b.png">'
            '<img src="c.png"><p>First paragraph there</p>'
        )).units
        records = align_units(left, right, differ)
        assert_coverage(records, left, right)

    def test_deterministic(self, differ):
        left = units('one two', 'three four', 'five six')
        right = units('one too', 'five sex', 'seven')
        first = align_units(left, right, differ)
        second = align_units(left, right, differ)
        assert first == second


class TestAlignmentRecord:
    """Tests for record construction rules."""

    def test_added_requires_only_right(self):
        unit = units('a')[0]
        with pytest.raises(ValueError):
            AlignmentRecord(AlignmentKind.ADDED, left_unit=unit, right_unit=unit)

    def test_equal_requires_both(self):
        with pytest.raises(ValueError):
            AlignmentRecord(AlignmentKind.EQUAL, left_unit=units('a')[0])
