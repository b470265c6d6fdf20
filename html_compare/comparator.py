"""
HTML Comparator v1.0.0
======================
Public entry point: compares two HTML documents and returns annotated
renderings of both plus a line / table / image change report.

A comparison is a pure, synchronous computation. Any failure (parse,
extraction, alignment, report or annotation) is logged and turned into
the "documents unchanged" fallback result; nothing is raised to the
caller.
"""

import asyncio
from typing import Optional, Union

from config_logging import (
    CompareConfig, CompareError, ComparisonFailure, ValidationError,
    StructuredLogger, get_config, get_logger, wrap_stage
)
from .aligner import align_units
from .annotator import annotate_documents
from .extractor import parse_markup, extract_units, plain_text
from .inline_diff import InlineDiffer, LEFT, RIGHT
from .models import (
    ComparisonResult, ChangeSummary, DocumentDiff, UnitKind
)
from .report import build_line_rows, line_summary, build_summary
from .structural import compare_tables, compare_images, table_summary, image_summary

logger = get_logger('html_compare.comparator')

Markup = Union[str, bytes, None]


def _as_text(markup: Markup) -> str:
    if isinstance(markup, bytes):
        return markup.decode('utf-8', errors='replace')
    return markup if isinstance(markup, str) else ''


def unchanged_result(left_html: Markup, right_html: Markup) -> ComparisonResult:
    """Result reporting both documents as equal with no changes."""
    return ComparisonResult(
        summary=ChangeSummary(),
        left_diffs=(DocumentDiff('equal', _as_text(left_html)),),
        right_diffs=(DocumentDiff('equal', _as_text(right_html)),)
    )


class HtmlComparator:
    """
    Document comparison engine.

    Each call to compare() builds its own trees, units and results; the
    comparator itself only holds configuration and the diff primitive.
    """

    def __init__(self, config: Optional[CompareConfig] = None, **overrides):
        """
        Initialize the comparator.

        Args:
            config: Base configuration (defaults to the environment config)
            **overrides: Individual CompareConfig fields to override,
                         e.g. similarity_threshold=0.3
        """
        config = (config or get_config()).with_overrides(**overrides)
        is_valid, errors = config.validate()
        if not is_valid:
            raise ValidationError("; ".join(errors), field='config')
        self.config = config
        self.differ = InlineDiffer(timeout=config.diff_timeout, edit_cost=config.diff_edit_cost)

    def compare(self, left_html: Markup, right_html: Markup) -> ComparisonResult:
        """
        Compare two documents.

        Never raises: on any internal failure the unchanged fallback is
        returned.
        """
        correlation_id = StructuredLogger.new_correlation_id()
        try:
            with logger.log_operation('compare', correlation=correlation_id):
                return self._compare(left_html, right_html)
        except CompareError as e:
            logger.error(f"Comparison fell back to unchanged result: {e.code}: {e.message}",
                         error_code=e.code)
        except Exception as e:
            failure = ComparisonFailure(f"{type(e).__name__}: {e}", stage='compare')
            logger.error(f"Comparison fell back to unchanged result: {failure.message}",
                         error_code=failure.code)
        return unchanged_result(left_html, right_html)

    async def compare_async(self, left_html: Markup, right_html: Markup) -> ComparisonResult:
        """Yield once to the event loop, then compare without further suspension."""
        await asyncio.sleep(0)
        return self.compare(left_html, right_html)

    def _compare(self, left_html: Markup, right_html: Markup) -> ComparisonResult:
        left_tree = parse_markup(left_html, side=LEFT)
        right_tree = parse_markup(right_html, side=RIGHT)

        identical_text = plain_text(left_tree).strip() == plain_text(right_tree).strip()

        left = extract_units(left_tree, side=LEFT)
        right = extract_units(right_tree, side=RIGHT)
        logger.debug(f"Units: left={len(left.units)}, right={len(right.units)}")

        records = self._align(left.units, right.units)
        lines = self._lines(records)

        tables = self._tables(left, right)
        images = compare_images(
            [u.image_data for u in left.units_of_kind(UnitKind.IMAGE)],
            [u.image_data for u in right.units_of_kind(UnitKind.IMAGE)]
        )

        summary = build_summary(line_summary(lines), table_summary(tables), image_summary(images))

        # Only the tag depends on text identity; formatting and image marks still apply
        diff_type = 'equal' if identical_text else 'modified'
        left_content, right_content = self._annotate(left, right, records, tables, images)

        logger.info(f"Comparison: +{summary.additions} -{summary.deletions} "
                    f"({len(lines)} lines, {len(tables)} tables, {len(images)} images changed)")

        return ComparisonResult(
            summary=summary,
            lines=tuple(lines),
            tables=tuple(tables),
            images=tuple(images),
            left_diffs=(DocumentDiff(diff_type, left_content),),
            right_diffs=(DocumentDiff(diff_type, right_content),)
        )

    @wrap_stage('alignment')
    def _align(self, left_units, right_units):
        return align_units(
            left_units, right_units, self.differ,
            threshold=self.config.similarity_threshold,
            large_document_pairs=self.config.large_document_pairs
        )

    @wrap_stage('line report')
    def _lines(self, records):
        return build_line_rows(records, self.differ)

    @wrap_stage('table comparison')
    def _tables(self, left, right):
        return compare_tables(
            [u.table_data for u in left.units_of_kind(UnitKind.TABLE)],
            [u.table_data for u in right.units_of_kind(UnitKind.TABLE)],
            self.differ
        )

    @wrap_stage('annotation')
    def _annotate(self, left, right, records, tables, images):
        return annotate_documents(left, right, records, tables, images, self.differ)


# Convenience function
def compare_documents(left_html: Markup, right_html: Markup, **overrides) -> ComparisonResult:
    """
    Compare two HTML documents with the default configuration.

    Args:
        left_html: Original document markup
        right_html: New document markup
        **overrides: CompareConfig fields to override

    Returns:
        ComparisonResult
    """
    return HtmlComparator(**overrides).compare(left_html, right_html)
