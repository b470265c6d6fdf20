#!/usr/bin/env python3
"""
HTML Compare command line interface.

    html-compare old.html new.html
    html-compare old.html new.html --format summary --threshold 0.3
    html-compare old.html new.html --annotated-dir out/

Exit codes: 0 no changes, 1 changes found, 2 bad input.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from config_logging import ValidationError
from .annotator import DIFF_STYLESHEET
from .comparator import HtmlComparator
from .models import ComparisonResult, LineStatus

EXIT_UNCHANGED = 0
EXIT_CHANGED = 1
EXIT_BAD_INPUT = 2


def format_summary(result: ComparisonResult) -> str:
    """One line per change plus a totals line."""
    lines = []
    for row in result.lines:
        if row.status == LineStatus.UNCHANGED:
            continue
        left = row.left_index if row.left_index is not None else '-'
        right = row.right_index if row.right_index is not None else '-'
        details = '; '.join(row.format_changes + row.whitespace_changes)
        lines.append(f"line {left} -> {right}: {row.status.value}" + (f" ({details})" if details else ""))
    for table in result.tables:
        lines.append(f"table {table.table_ordinal}: {table.status.value} "
                     f"({len(table.cell_changes)} cell changes)")
    for image in result.images:
        lines.append(f"image {image.image_ordinal}: {image.status.value}")

    s = result.summary
    lines.append(f"+{s.additions} -{s.deletions} ({s.changes} changes)")
    return '\n'.join(lines)


def _standalone(title: str, body: str) -> str:
    return (f'<!DOCTYPE html>\n<html><head><meta charset="utf-8"><title>{title}</title>'
            f'<style>{DIFF_STYLESHEET}</style></head><body>{body}</body></html>\n')


def write_annotated(result: ComparisonResult, directory: Path):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / 'left.html').write_text(
        _standalone('Original', result.left_diffs[0].content), encoding='utf-8')
    (directory / 'right.html').write_text(
        _standalone('Revised', result.right_diffs[0].content), encoding='utf-8')


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Compare two versions of an HTML document')
    parser.add_argument('left', type=Path, help='Original HTML file')
    parser.add_argument('right', type=Path, help='Revised HTML file')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Similarity threshold for pairing modified lines (0-1)')
    parser.add_argument('--format', choices=('json', 'summary'), default='json',
                        help='Output format')
    parser.add_argument('--annotated-dir', type=Path, default=None,
                        help='Write annotated left.html/right.html here')

    args = parser.parse_args(argv)

    try:
        left_html = args.left.read_text(encoding='utf-8')
        right_html = args.right.read_text(encoding='utf-8')
        comparator = HtmlComparator(similarity_threshold=args.threshold)
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    result = comparator.compare(left_html, right_html)

    if args.format == 'json':
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_summary(result))

    if args.annotated_dir is not None:
        write_annotated(result, args.annotated_dir)

    return EXIT_CHANGED if result.has_changes else EXIT_UNCHANGED


if __name__ == '__main__':
    sys.exit(main())
