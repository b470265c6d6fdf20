"""
Unit Extractor v1.0.0
=====================
Parses markup with BeautifulSoup and walks the tree in document order,
emitting the comparable units of one document version.

Text nodes are split on embedded line breaks; block elements (p, h1-h6,
li, div) become one unit built from their direct text; images, tables and
line breaks become one unit each. Tables are atomic: their content is
described by a TableSnapshot, not by separate text units. Images inside
a table are emitted as IMAGE units right after the TABLE unit.
"""

import itertools
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Iterator, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from config_logging import get_logger, ParseFailure, ExtractionFailure, CompareError
from .models import (
    ComparableUnit, UnitKind, WhitespaceStats, FormattingSnapshot,
    ImageSnapshot, TableSnapshot, CellSnapshot
)
from .styles import resolve_style, parse_style_attribute

logger = get_logger('html_compare.extractor')

PARSER = 'html.parser'

BLOCK_TAGS = frozenset({'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'div'})
SKIPPED_TAGS = frozenset({'script', 'style', 'head', 'title', 'template'})
CELL_TAGS = ('td', 'th')


@dataclass(frozen=True)
class ExtractionResult:
    """
    Units of one side plus the tree positions they came from.

    Attributes:
        root: Parsed document tree (never mutated after parsing)
        units: Units in document order
        unit_nodes: Unit index -> tree node that produced it
        unit_segments: Unit index -> line segment position, TEXT units only
    """
    root: BeautifulSoup
    units: List[ComparableUnit] = field(default_factory=list)
    unit_nodes: Dict[int, Union[Tag, NavigableString]] = field(default_factory=dict)
    unit_segments: Dict[int, int] = field(default_factory=dict)

    def units_of_kind(self, kind: UnitKind) -> List[ComparableUnit]:
        return [u for u in self.units if u.kind == kind]

    def nodes_of_kind(self, kind: UnitKind) -> List[Tag]:
        return [self.unit_nodes[u.index] for u in self.units if u.kind == kind]


def parse_markup(markup: Union[str, bytes, None], side: Optional[str] = None) -> BeautifulSoup:
    """
    Parse markup into a document tree.

    Raises:
        ParseFailure: markup is not text or the parser rejected it
    """
    if markup is None:
        markup = ''
    if isinstance(markup, bytes):
        try:
            markup = markup.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ParseFailure(f"Markup is not valid UTF-8: {e}", side=side) from e
    if not isinstance(markup, str):
        raise ParseFailure(f"Markup must be a string, got {type(markup).__name__}", side=side)

    try:
        return BeautifulSoup(markup, PARSER)
    except Exception as e:
        raise ParseFailure(f"Could not parse markup: {e}", side=side) from e


def plain_text(root: BeautifulSoup) -> str:
    """Text content of a whole document."""
    return root.get_text()


def _is_text(node) -> bool:
    # Comments, doctypes, CDATA etc. are PreformattedString subclasses
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _walk(root: Tag) -> Iterator[Union[Tag, NavigableString]]:
    """Pre-order document walk without recursion; table contents are not entered."""
    stack = list(reversed(list(root.children)))
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, Tag) and node.name not in SKIPPED_TAGS and node.name != 'table':
            stack.extend(reversed(list(node.children)))


def direct_text(element: Tag) -> str:
    """Concatenated text of the element's own text children."""
    return ''.join(str(child) for child in element.children if _is_text(child))


def table_rows(table: Tag) -> List[Tag]:
    """Rows owned by this table (rows of nested tables excluded)."""
    return [tr for tr in table.find_all('tr') if tr.find_parent('table') is table]


def row_cells(row: Tag) -> List[Tag]:
    return row.find_all(CELL_TAGS, recursive=False)


def _span(value, default: int = 1) -> int:
    try:
        return max(1, int(str(value).strip()))
    except (TypeError, ValueError):
        return default


def build_table_snapshot(table: Tag) -> TableSnapshot:
    """Walk a table's rows and cells into a TableSnapshot."""
    rows = []
    for tr in table_rows(table):
        rows.append(tuple(
            CellSnapshot(
                content=cell.get_text().strip(),
                formatting=resolve_style(cell),
                colspan=_span(cell.get('colspan')),
                rowspan=_span(cell.get('rowspan'))
            )
            for cell in row_cells(tr)
        ))
    return TableSnapshot(
        row_count=len(rows),
        column_count=len(rows[0]) if rows else 0,
        cells=tuple(rows)
    )


def _attr(element: Tag, name: str) -> str:
    value = element.get(name, '')
    if isinstance(value, list):
        return ' '.join(value)
    return str(value)


def build_image_snapshot(img: Tag) -> ImageSnapshot:
    """Read an image's comparison attributes; dimensions fall back to inline style."""
    css = parse_style_attribute(img.get('style'))
    return ImageSnapshot(
        source=_attr(img, 'src'),
        alt_text=_attr(img, 'alt'),
        width=_attr(img, 'width') or css.get('width', ''),
        height=_attr(img, 'height') or css.get('height', ''),
        title=_attr(img, 'title'),
        css_class=_attr(img, 'class'),
        inline_style=_attr(img, 'style')
    )


def extract_units(root: BeautifulSoup, side: Optional[str] = None) -> ExtractionResult:
    """
    Emit the ordered comparable units of a parsed document.

    The index counter is local to this call, starting at 1.

    Raises:
        ExtractionFailure: the tree could not be walked
    """
    result = ExtractionResult(root=root)
    counter = itertools.count(1)

    def emit(node, kind: UnitKind, content: str = '',
             formatting: Optional[FormattingSnapshot] = None, **extra) -> ComparableUnit:
        unit = ComparableUnit(
            index=next(counter),
            kind=kind,
            raw_content=content,
            formatting=formatting or FormattingSnapshot(),
            whitespace=WhitespaceStats.from_text(content),
            **extra
        )
        result.units.append(unit)
        result.unit_nodes[unit.index] = node
        return unit

    try:
        for node in _walk(root):
            if isinstance(node, NavigableString):
                if not _is_text(node) or not node.strip():
                    continue
                parent = node.parent
                if parent is None or parent.name in BLOCK_TAGS:
                    continue
                formatting = resolve_style(parent)
                segments = str(node).split('\n')
                last = len(segments) - 1
                for position, segment in enumerate(segments):
                    # No spurious blank line after a trailing line break
                    if segment.strip() or position < last:
                        unit = emit(node, UnitKind.TEXT, segment, formatting)
                        result.unit_segments[unit.index] = position
                continue

            name = node.name
            if name == 'br':
                emit(node, UnitKind.BREAK)
            elif name == 'img':
                emit(node, UnitKind.IMAGE, image_data=build_image_snapshot(node))
            elif name == 'table':
                emit(node, UnitKind.TABLE, table_data=build_table_snapshot(node))
                # Table text is atomic, but its images are still compared by position
                for img in node.find_all('img'):
                    emit(img, UnitKind.IMAGE, image_data=build_image_snapshot(img))
            elif name in BLOCK_TAGS:
                text = direct_text(node)
                if text.strip():
                    emit(node, UnitKind.BLOCK, text, resolve_style(node))
    except CompareError:
        raise
    except Exception as e:
        raise ExtractionFailure(f"Unit extraction failed: {type(e).__name__}: {e}", side=side) from e

    logger.debug(f"Extracted {len(result.units)} units", side=side or 'unknown')
    return result
