"""
Annotated Markup Renderer v1.0.0
================================
Produces the annotated HTML of one document version from its parsed
tree and the comparison results.

The parsed tree is read, never modified: marks are collected per node
(keyed by node identity) and applied while serializing the tree into a
new string.
"""

from dataclasses import dataclass, field
from html import escape
from typing import List, Dict, Optional, Sequence, Tuple

from bs4 import NavigableString, Tag
from bs4.element import Doctype, PreformattedString

from .extractor import ExtractionResult, table_rows, row_cells
from .inline_diff import InlineDiffer, LEFT, RIGHT
from .models import (
    AlignmentRecord, AlignmentKind, UnitKind, LINE_KINDS, ImageSnapshot,
    TableSnapshot, TableReport, ImageReport, EntityStatus, CellChangeKind
)
from .structural import normalize_dimension

RAW_TEXT_TAGS = frozenset({'script', 'style'})

# Minimal stylesheet for standalone annotated documents
DIFF_STYLESHEET = """
.hc-line-added, .hc-inline-added, .hc-cell-added, .hc-row-added { background: #dcfce7; }
.hc-line-removed, .hc-inline-removed, .hc-cell-removed, .hc-row-removed { background: #fee2e2; }
.hc-inline-removed { text-decoration: line-through; }
.hc-line-modified, .hc-cell-modified { background: #fef9c3; }
.hc-inline-placeholder { font-style: italic; opacity: 0.7; padding: 1px 3px; border-radius: 2px; }
.hc-placeholder-added { color: #22c55e; background: #f0fdf4; }
.hc-placeholder-removed { color: #ef4444; background: #fef2f2; }
.hc-image-added, .hc-table-added { outline: 3px solid #22c55e; }
.hc-image-removed, .hc-table-removed { outline: 3px solid #ef4444; }
.hc-image-modified, .hc-table-modified { outline: 3px solid #eab308; }
.hc-image-placeholder, .hc-table-placeholder {
    display: flex; flex-direction: column; align-items: center; justify-content: center;
    border: 2px dashed currentColor; border-radius: 6px; margin: 8px 0; padding: 16px;
    box-sizing: border-box;
}
.whitespace-space, .whitespace-tab, .whitespace-newline { background: rgba(0,0,0,0.1); border-radius: 2px; }
""".strip()


@dataclass
class NodeMark:
    """
    Changes applied to one element while serializing.

    Attributes:
        classes: CSS classes appended to the element's own classes
        attrs: Extra attributes (data-*)
        replace_html: Replaces all children of the element
        direct_text_html: Replaces the element's direct text children
    """
    classes: List[str] = field(default_factory=list)
    attrs: Dict[str, str] = field(default_factory=dict)
    replace_html: Optional[str] = None
    direct_text_html: Optional[str] = None


@dataclass
class SideAnnotation:
    """All marks for one side of the comparison."""
    node_marks: Dict[int, NodeMark] = field(default_factory=dict)
    segment_marks: Dict[int, Dict[int, str]] = field(default_factory=dict)
    after_html: Dict[int, List[str]] = field(default_factory=dict)
    tail_html: List[str] = field(default_factory=list)

    def mark(self, node) -> NodeMark:
        return self.node_marks.setdefault(id(node), NodeMark())

    def insert_after(self, node, html: str):
        if node is None:
            self.tail_html.append(html)
        else:
            self.after_html.setdefault(id(node), []).append(html)


def _css_dimension(value: str, default: str) -> str:
    normalized = normalize_dimension(value)
    if not normalized:
        return default
    try:
        float(normalized)
    except ValueError:
        return escape(normalized)
    return f"{normalized}px"


def image_placeholder(image: ImageSnapshot, status: EntityStatus) -> str:
    """Stand-in for an image that only exists on the other side."""
    kind = status.value.lower()
    label = 'Image Added' if status == EntityStatus.ADDED else 'Image Removed'
    width = _css_dimension(image.width, '200px')
    height = _css_dimension(image.height, '150px')
    alt = (f'<span class="hc-placeholder-detail">Alt: {escape(image.alt_text)}</span>'
           if image.alt_text else '')
    return (f'<div class="hc-image-placeholder hc-placeholder-{kind}" data-change-type="{kind}" '
            f'style="width: {width}; height: {height};">'
            f'<span class="hc-placeholder-label">{label}</span>{alt}</div>')


def table_placeholder(table: TableSnapshot, status: EntityStatus) -> str:
    """Stand-in for a table that only exists on the other side."""
    kind = status.value.lower()
    label = 'Table Added' if status == EntityStatus.ADDED else 'Table Removed'
    return (f'<div class="hc-table-placeholder hc-placeholder-{kind}" data-change-type="{kind}">'
            f'<span class="hc-placeholder-label">{label}</span>'
            f'<span class="hc-placeholder-detail">{table.row_count} rows × '
            f'{table.column_count} columns</span></div>')


def _line_attrs(index: int, status: str, formatting_changed: bool = False,
                whitespace_changed: bool = False) -> Dict[str, str]:
    attrs = {'data-line-index': str(index), 'data-change-type': status}
    if formatting_changed:
        attrs['data-formatting-changed'] = 'true'
    if whitespace_changed:
        attrs['data-whitespace-changed'] = 'true'
    return attrs


def _segment_span(status: str, attrs: Dict[str, str], inner: str) -> str:
    rendered = ''.join(f' {k}="{escape(v)}"' for k, v in attrs.items())
    return f'<span class="hc-line-{status}"{rendered}>{inner}</span>'


class Annotator:
    """Collects marks from comparison results and renders both sides."""

    def __init__(self, left: ExtractionResult, right: ExtractionResult, differ: InlineDiffer):
        self.extractions = {LEFT: left, RIGHT: right}
        self.annotations = {LEFT: SideAnnotation(), RIGHT: SideAnnotation()}
        self.differ = differ

    # ------------------------------------------------------------------
    # Mark collection
    # ------------------------------------------------------------------

    def _mark_unit(self, side: str, unit, status: str, inner_html: Optional[str] = None,
                   formatting_changed: bool = False, whitespace_changed: bool = False):
        extraction = self.extractions[side]
        annotation = self.annotations[side]
        node = extraction.unit_nodes[unit.index]
        attrs = _line_attrs(unit.index, status, formatting_changed, whitespace_changed)

        if unit.kind == UnitKind.TEXT:
            inner = inner_html if inner_html is not None else escape(unit.raw_content, quote=False)
            position = extraction.unit_segments[unit.index]
            annotation.segment_marks.setdefault(id(node), {})[position] = \
                _segment_span(status, attrs, inner)
            return

        mark = annotation.mark(node)
        mark.classes.append(f'hc-line-{status}')
        mark.attrs.update(attrs)
        if unit.kind == UnitKind.BLOCK and inner_html is not None:
            mark.direct_text_html = inner_html

    def add_alignment(self, records: Sequence[AlignmentRecord]):
        for record in records:
            if record.unit_kind not in LINE_KINDS:
                continue
            left, right = record.left_unit, record.right_unit

            if record.kind == AlignmentKind.ADDED:
                self._mark_unit(RIGHT, right, 'added')
            elif record.kind == AlignmentKind.REMOVED:
                self._mark_unit(LEFT, left, 'removed')
            elif record.kind == AlignmentKind.MODIFIED:
                content_changed = left.raw_content != right.raw_content
                formatting_changed = left.formatting != right.formatting
                whitespace_changed = left.whitespace != right.whitespace
                if not (content_changed or formatting_changed or whitespace_changed):
                    continue
                for side, unit in ((LEFT, left), (RIGHT, right)):
                    inner = (self.differ.render(left.raw_content, right.raw_content, side)
                             if content_changed else None)
                    self._mark_unit(side, unit, 'modified', inner,
                                    formatting_changed, whitespace_changed)

    def _entity_nodes(self, side: str, kind: UnitKind) -> List[Tag]:
        return self.extractions[side].nodes_of_kind(kind)

    def _mark_entity(self, side: str, node: Tag, prefix: str, status: EntityStatus):
        kind = status.value.lower()
        mark = self.annotations[side].mark(node)
        mark.classes.append(f'hc-{prefix}-{kind}')
        mark.attrs['data-change-type'] = kind

    def _place_after_last(self, side: str, nodes: List[Tag], html: str):
        self.annotations[side].insert_after(nodes[-1] if nodes else None, html)

    def add_images(self, reports: Sequence[ImageReport]):
        left_nodes = self._entity_nodes(LEFT, UnitKind.IMAGE)
        right_nodes = self._entity_nodes(RIGHT, UnitKind.IMAGE)

        for report in reports:
            position = report.image_ordinal - 1
            if report.status == EntityStatus.REMOVED:
                self._mark_entity(LEFT, left_nodes[position], 'image', report.status)
                self._place_after_last(RIGHT, right_nodes,
                                       image_placeholder(report.left_image, report.status))
            elif report.status == EntityStatus.ADDED:
                self._mark_entity(RIGHT, right_nodes[position], 'image', report.status)
                self._place_after_last(LEFT, left_nodes,
                                       image_placeholder(report.right_image, report.status))
            else:
                self._mark_entity(LEFT, left_nodes[position], 'image', report.status)
                self._mark_entity(RIGHT, right_nodes[position], 'image', report.status)

    def _cell_node(self, table: Tag, row: int, col: int) -> Tuple[Optional[Tag], Optional[Tag]]:
        rows = table_rows(table)
        if row >= len(rows):
            return None, None
        cells = row_cells(rows[row])
        return rows[row], (cells[col] if col < len(cells) else None)

    def _mark_cell_changes(self, report: TableReport, left_table: Tag, right_table: Tag):
        for change in report.cell_changes:
            kind = change.kind
            if kind in (CellChangeKind.ROW_ADDED, CellChangeKind.ROW_REMOVED):
                side, table = (RIGHT, right_table) if kind.is_addition else (LEFT, left_table)
                row, _ = self._cell_node(table, change.row, change.col)
                mark = self.annotations[side].mark(row)
                css = f'hc-{kind.value}'
                if css not in mark.classes:
                    mark.classes.append(css)
                continue

            if kind in (CellChangeKind.CELL_ADDED, CellChangeKind.CELL_REMOVED):
                side, table = (RIGHT, right_table) if kind.is_addition else (LEFT, left_table)
                _, cell = self._cell_node(table, change.row, change.col)
                self.annotations[side].mark(cell).classes.append(f'hc-{kind.value}')
                continue

            for side, table, rendered in ((LEFT, left_table, change.left_html),
                                          (RIGHT, right_table, change.right_html)):
                _, cell = self._cell_node(table, change.row, change.col)
                mark = self.annotations[side].mark(cell)
                mark.classes.append('hc-cell-modified')
                if change.formatting_changed:
                    mark.attrs['data-formatting-changed'] = 'true'
                if change.content_changed:
                    mark.replace_html = rendered

    def add_tables(self, reports: Sequence[TableReport]):
        left_nodes = self._entity_nodes(LEFT, UnitKind.TABLE)
        right_nodes = self._entity_nodes(RIGHT, UnitKind.TABLE)

        for report in reports:
            position = report.table_ordinal - 1
            if report.status == EntityStatus.REMOVED:
                self._mark_entity(LEFT, left_nodes[position], 'table', report.status)
                self._place_after_last(RIGHT, right_nodes,
                                       table_placeholder(report.left_table, report.status))
            elif report.status == EntityStatus.ADDED:
                self._mark_entity(RIGHT, right_nodes[position], 'table', report.status)
                self._place_after_last(LEFT, left_nodes,
                                       table_placeholder(report.right_table, report.status))
            else:
                self._mark_entity(LEFT, left_nodes[position], 'table', report.status)
                self._mark_entity(RIGHT, right_nodes[position], 'table', report.status)
                self._mark_cell_changes(report, left_nodes[position], right_nodes[position])

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def render(self, side: str) -> str:
        """Serialize one side's tree with its marks applied."""
        annotation = self.annotations[side]
        root = self.extractions[side].root
        out: List[str] = []

        stack = list(reversed(list(root.children)))
        while stack:
            item = stack.pop()
            if isinstance(item, str) and not isinstance(item, NavigableString):
                out.append(item)
            elif isinstance(item, NavigableString):
                out.append(self._render_string(item, annotation))
            else:
                self._render_tag(item, annotation, out, stack)

        out.extend(annotation.tail_html)
        return ''.join(out)

    @staticmethod
    def _render_string(node: NavigableString, annotation: SideAnnotation) -> str:
        if isinstance(node, Doctype):
            # Doctype.SUFFIX appends a newline the input may not have
            return f'<!DOCTYPE {node}>'
        if isinstance(node, PreformattedString):
            return node.output_ready()
        if node.parent is not None and node.parent.name in RAW_TEXT_TAGS:
            return str(node)

        segments = annotation.segment_marks.get(id(node))
        if not segments:
            return escape(str(node), quote=False)
        return '\n'.join(segments.get(position, escape(segment, quote=False))
                         for position, segment in enumerate(str(node).split('\n')))

    @staticmethod
    def _start_tag(node: Tag, mark: Optional[NodeMark]) -> str:
        attrs = {}
        for key, value in node.attrs.items():
            attrs[key] = ' '.join(value) if isinstance(value, list) else str(value)
        if mark is not None:
            if mark.classes:
                existing = attrs.get('class', '')
                attrs['class'] = ' '.join(filter(None, [existing] + mark.classes))
            attrs.update(mark.attrs)
        rendered = ''.join(f' {k}="{escape(v)}"' for k, v in attrs.items())
        return f'<{node.name}{rendered}>'

    def _render_tag(self, node: Tag, annotation: SideAnnotation, out: List[str], stack: list):
        mark = annotation.node_marks.get(id(node))
        after = ''.join(annotation.after_html.get(id(node), []))
        out.append(self._start_tag(node, mark))

        if node.is_empty_element:
            if after:
                out.append(after)
            return

        stack.append(f'</{node.name}>{after}')
        if mark is not None and mark.replace_html is not None:
            stack.append(mark.replace_html)
            return

        children = list(node.children)
        if mark is not None and mark.direct_text_html is not None:
            items = []
            replaced = False
            for child in children:
                if isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                    if not replaced:
                        items.append(mark.direct_text_html)
                        replaced = True
                    continue
                items.append(child)
            children = items
        stack.extend(reversed(children))


def annotate_documents(
    left: ExtractionResult,
    right: ExtractionResult,
    records: Sequence[AlignmentRecord],
    tables: Sequence[TableReport],
    images: Sequence[ImageReport],
    differ: InlineDiffer
) -> Tuple[str, str]:
    """Render the annotated markup of both sides."""
    annotator = Annotator(left, right, differ)
    annotator.add_alignment(records)
    annotator.add_tables(tables)
    annotator.add_images(images)
    return annotator.render(LEFT), annotator.render(RIGHT)
