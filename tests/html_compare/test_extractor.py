"""
Tests for Unit Extraction and Style Resolution
==============================================
"""

import pytest
from bs4 import BeautifulSoup

from config_logging import ParseFailure
from html_compare.extractor import parse_markup, extract_units, plain_text, table_rows
from html_compare.models import UnitKind, FormattingSnapshot
from html_compare.styles import parse_style_attribute, resolve_style


def extract(markup: str):
    return extract_units(parse_markup(markup))


def contents(result, kind=None):
    return [u.raw_content for u in result.units if kind is None or u.kind == kind]


class TestParseMarkup:
    """Tests for parse_markup."""

    def test_parses_string(self):
        root = parse_markup('<p>Hello</p>')
        assert plain_text(root) == 'Hello'

    def test_none_is_empty_document(self):
        assert plain_text(parse_markup(None)) == ''

    def test_bytes_are_decoded(self):
        root = parse_markup('<p>Grüße</p>'.encode('utf-8'))
        assert plain_text(root) == 'Grüße'

    def test_invalid_utf8_raises_parse_failure(self):
        with pytest.raises(ParseFailure):
            parse_markup(b'\xff\xfe<p>x</p>', side='left')

    def test_non_text_raises_parse_failure(self):
        with pytest.raises(ParseFailure) as exc:
            parse_markup(123, side='right')
        assert exc.value.code == 'PARSE_FAILURE'
        assert exc.value.details['side'] == 'right'


class TestUnitExtraction:
    """Tests for extract_units."""

    def test_paragraphs_become_block_units(self):
        result = extract('<p>Hello world</p><p>Goodbye</p>')
        assert [u.kind for u in result.units] == [UnitKind.BLOCK, UnitKind.BLOCK]
        assert contents(result) == ['Hello world', 'Goodbye']
        assert [u.index for u in result.units] == [1, 2]

    def test_all_block_tags_are_recognized(self):
        result = extract('<h1>T</h1><h6>S</h6><ul><li>One</li></ul><div>D</div>')
        assert contents(result, UnitKind.BLOCK) == ['T', 'S', 'One', 'D']

    def test_block_uses_direct_text_only(self):
        result = extract('<p>Hello <b>world</b></p>')
        assert [(u.kind, u.raw_content) for u in result.units] == [
            (UnitKind.BLOCK, 'Hello '),
            (UnitKind.TEXT, 'world'),
        ]

    def test_nested_containers_do_not_double_emit(self):
        result = extract('<div>outer<div>inner</div></div>')
        assert contents(result) == ['outer', 'inner']

    def test_text_split_on_line_breaks(self):
        result = extract('<span>a\n\nb</span>')
        assert contents(result, UnitKind.TEXT) == ['a', '', 'b']

    def test_trailing_empty_segment_dropped(self):
        result = extract('<span>a\nb\n</span>')
        assert contents(result, UnitKind.TEXT) == ['a', 'b']
        assert result.unit_segments == {1: 0, 2: 1}

    def test_whitespace_only_text_ignored(self):
        result = extract('<div>\n  <p>a</p>\n</div>\n<span>  </span>')
        assert contents(result) == ['a']

    def test_line_break_unit(self):
        result = extract('<span>a</span><br><span>b</span>')
        assert [u.kind for u in result.units] == [UnitKind.TEXT, UnitKind.BREAK, UnitKind.TEXT]
        brk = result.units[1]
        assert brk.raw_content == ''
        assert brk.whitespace.line_break_count == 0

    def test_image_unit(self):
        result = extract('<img src="a.png" alt="Logo" width="100" style="height: 50px" class="x y">')
        unit = result.units[0]
        assert unit.kind == UnitKind.IMAGE
        image = unit.image_data
        assert image.source == 'a.png'
        assert image.alt_text == 'Logo'
        assert image.width == '100'
        assert image.height == '50px'
        assert image.css_class == 'x y'

    def test_table_is_atomic(self):
        result = extract(
            '<table><tr><th>A</th><th>B</th></tr>'
            '<tr><td> 1 </td><td colspan="2">2</td></tr></table>'
        )
        assert [u.kind for u in result.units] == [UnitKind.TABLE]
        table = result.units[0].table_data
        assert table.row_count == 2
        assert table.column_count == 2
        assert table.cells[1][0].content == '1'
        assert table.cells[1][1].colspan == 2
        assert table.cells[0][0].formatting == FormattingSnapshot()

    def test_nested_table_rows_not_counted(self):
        root = parse_markup(
            '<table><tbody><tr><td><table><tr><td>in</td></tr></table></td></tr></tbody></table>'
        )
        outer = root.find('table')
        assert len(table_rows(outer)) == 1
        result = extract_units(root)
        assert len(result.units) == 1
        assert result.units[0].table_data.row_count == 1

    def test_comments_and_scripts_ignored(self):
        result = extract('<!-- note --><script>var x = 1;</script><style>p{}</style><p>a</p>')
        assert contents(result) == ['a']

    def test_whitespace_stats_from_raw_content(self):
        result = extract('<p>a b\tc</p>')
        ws = result.units[0].whitespace
        assert (ws.space_count, ws.tab_count, ws.line_break_count) == (1, 1, 0)

    def test_indices_reset_per_call(self):
        first = extract('<p>a</p><p>b</p>')
        second = extract('<p>c</p>')
        assert [u.index for u in first.units] == [1, 2]
        assert [u.index for u in second.units] == [1]

    def test_unit_nodes_point_into_tree(self):
        result = extract('<p>a</p><img src="x.png">')
        assert result.unit_nodes[1].name == 'p'
        assert result.nodes_of_kind(UnitKind.IMAGE)[0].name == 'img'

    def test_images_inside_table_follow_the_table(self):
        result = extract('<table><tr><td>A</td><td><img src="a.png" width="100"></td></tr></table>')
        assert [u.kind for u in result.units] == [UnitKind.TABLE, UnitKind.IMAGE]
        assert result.units[1].image_data.source == 'a.png'
        assert result.unit_nodes[2].name == 'img'

    def test_empty_document(self):
        assert extract('').units == []


class TestStyleResolution:
    """Tests for inline style resolution."""

    def test_parse_style_attribute(self):
        css = parse_style_attribute('Font-Weight: bold; color: Red !important;; bogus')
        assert css == {'font-weight': 'bold', 'color': 'Red'}

    def test_inline_style_values(self):
        soup = BeautifulSoup(
            '<p style="font-size: 14px; color: #333; font-family: Arial; '
            'text-align: center; line-height: 1.5; background-color: yellow">x</p>',
            'html.parser'
        )
        fmt = resolve_style(soup.p)
        assert fmt.font_size == '14px'
        assert fmt.color == '#333'
        assert fmt.font_family == 'Arial'
        assert fmt.text_align == 'center'
        assert fmt.line_height == '1.5'
        assert fmt.background_color == 'yellow'
        assert not fmt.bold

    def test_numeric_font_weight_is_bold(self):
        soup = BeautifulSoup('<span style="font-weight: 700">x</span>', 'html.parser')
        assert resolve_style(soup.span).bold

    def test_emphasis_descendants_set_flags(self):
        soup = BeautifulSoup('<p><strong>a</strong><em>b</em><u>c</u></p>', 'html.parser')
        fmt = resolve_style(soup.p)
        assert (fmt.bold, fmt.italic, fmt.underline) == (True, True, True)

    def test_emphasis_tag_itself(self):
        soup = BeautifulSoup('<b>x</b>', 'html.parser')
        assert resolve_style(soup.b).bold

    def test_text_decoration_underline(self):
        soup = BeautifulSoup('<span style="text-decoration: underline dotted">x</span>', 'html.parser')
        assert resolve_style(soup.span).underline

    def test_legacy_font_attributes(self):
        soup = BeautifulSoup('<font color="red" size="4" face="Georgia">x</font>', 'html.parser')
        fmt = resolve_style(soup.font)
        assert fmt.color == 'red'
        assert fmt.font_size == 'large'
        assert fmt.font_family == 'Georgia'

    def test_document_root_has_default_formatting(self):
        soup = BeautifulSoup('<b>x</b>', 'html.parser')
        assert resolve_style(soup) == FormattingSnapshot()
