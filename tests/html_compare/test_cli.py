"""
Tests for the html-compare command
==================================
"""

import json

import pytest

from html_compare.cli import main, format_summary, EXIT_UNCHANGED, EXIT_CHANGED, EXIT_BAD_INPUT
from html_compare import compare_documents


@pytest.fixture
def documents(tmp_path):
    def write(left, right):
        left_path = tmp_path / 'left.html'
        right_path = tmp_path / 'right.html'
        left_path.write_text(left, encoding='utf-8')
        right_path.write_text(right, encoding='utf-8')
        return str(left_path), str(right_path)
    return write


class TestMain:
    """Tests for the command entry point."""

    def test_unchanged_exit_code(self, documents, capsys):
        left, right = documents('<p>a</p>', '<p>a</p>')
        assert main([left, right]) == EXIT_UNCHANGED
        data = json.loads(capsys.readouterr().out)
        assert data['summary']['changes'] == 0

    def test_changed_exit_code(self, documents, capsys):
        left, right = documents('<p>a</p>', '<p>a</p><p>b</p>')
        assert main([left, right]) == EXIT_CHANGED
        data = json.loads(capsys.readouterr().out)
        assert data['summary'] == {'additions': 1, 'deletions': 0, 'changes': 1}

    def test_summary_format(self, documents, capsys):
        left, right = documents('<p>a b</p>', '<p>a  b</p>')
        main([left, right, '--format', 'summary'])
        out = capsys.readouterr().out
        assert 'line 1 -> 1: MODIFIED (Spaces: 1 → 2)' in out
        assert out.strip().endswith('+1 -1 (2 changes)')

    def test_threshold_option(self, documents, capsys):
        left, right = documents('<p>abcdef</p>', '<p>abcxyz</p>')
        main([left, right, '--threshold', '0.3', '--format', 'summary'])
        assert 'MODIFIED' in capsys.readouterr().out

    def test_annotated_output(self, documents, tmp_path):
        left, right = documents('<p>Hello world</p>', '<p>Hello there</p>')
        out_dir = tmp_path / 'annotated'
        main([left, right, '--annotated-dir', str(out_dir)])
        right_html = (out_dir / 'right.html').read_text(encoding='utf-8')
        assert '<style>' in right_html
        assert 'hc-inline-added' in right_html
        assert (out_dir / 'left.html').exists()

    def test_missing_file(self, tmp_path, capsys):
        code = main([str(tmp_path / 'nope.html'), str(tmp_path / 'other.html')])
        assert code == EXIT_BAD_INPUT
        assert 'error:' in capsys.readouterr().err

    def test_invalid_threshold(self, documents, capsys):
        left, right = documents('<p>a</p>', '<p>b</p>')
        assert main([left, right, '--threshold', '3']) == EXIT_BAD_INPUT


class TestFormatSummary:
    """Tests for the plain-text summary."""

    def test_structural_changes_listed(self):
        result = compare_documents(
            '<table><tr><td>1</td></tr></table>',
            '<table><tr><td>2</td></tr></table><img src="a.png">'
        )
        text = format_summary(result)
        assert 'table 1: MODIFIED (1 cell changes)' in text
        assert 'image 1: ADDED' in text

    def test_no_changes(self):
        assert format_summary(compare_documents('<p>a</p>', '<p>a</p>')) == '+0 -0 (0 changes)'
