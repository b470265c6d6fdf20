"""
Intra-Unit Differ v1.0.0
========================
Character-level diff between two unit contents with side-specific HTML
rendering and visible whitespace markers.

Uses diff-match-patch for the raw diff and its semantic cleanup pass.
"""

import html
from typing import List, Tuple

import diff_match_patch as dmp_module

from config_logging import DEFAULT_DIFF_TIMEOUT, DEFAULT_DIFF_EDIT_COST

DIFF_DELETE = dmp_module.diff_match_patch.DIFF_DELETE
DIFF_INSERT = dmp_module.diff_match_patch.DIFF_INSERT
DIFF_EQUAL = dmp_module.diff_match_patch.DIFF_EQUAL

LEFT = 'left'
RIGHT = 'right'
SIDES = (LEFT, RIGHT)

# (operation, text) as returned by diff_main
DiffSegment = Tuple[int, str]

SPACE_MARKER = '<span class="whitespace-space">·</span>'
TAB_MARKER = '<span class="whitespace-tab">→</span>'
NEWLINE_MARKER = '<span class="whitespace-newline">↵</span><br>'


def escape_html(text: str) -> str:
    """Escape text for safe HTML display."""
    return html.escape(text) if text else ""


def highlight_whitespace(escaped: str) -> str:
    """
    Replace spaces, tabs and line breaks with visible marker glyphs.

    Input must already be HTML-escaped; the markers themselves contain
    spaces, so spaces are substituted first.
    """
    return (escaped
            .replace(' ', SPACE_MARKER)
            .replace('\t', TAB_MARKER)
            .replace('\n', NEWLINE_MARKER))


def visible(text: str) -> str:
    """Escape then mark whitespace."""
    return highlight_whitespace(escape_html(text))


def added_html(text: str) -> str:
    return f'<span class="hc-inline-added">{visible(text)}</span>'


def removed_html(text: str) -> str:
    return f'<span class="hc-inline-removed">{visible(text)}</span>'


def placeholder_html(text: str, operation: int) -> str:
    """Dimmed bracketed stand-in for content that only exists on the other side."""
    if operation == DIFF_INSERT:
        return (f'<span class="hc-inline-placeholder hc-placeholder-added">'
                f'[+{visible(text)}]</span>')
    return (f'<span class="hc-inline-placeholder hc-placeholder-removed">'
            f'[-{visible(text)}]</span>')


class InlineDiffer:
    """
    Wrapper around one diff_match_patch instance.

    The default timeout of 0 disables diff-match-patch's time limit so
    identical input always yields identical segments.
    """

    def __init__(self, timeout: float = DEFAULT_DIFF_TIMEOUT,
                 edit_cost: int = DEFAULT_DIFF_EDIT_COST):
        self.dmp = dmp_module.diff_match_patch()
        self.dmp.Diff_Timeout = timeout
        self.dmp.Diff_EditCost = edit_cost

    def raw_diff(self, left: str, right: str) -> List[DiffSegment]:
        """Uncleaned character diff."""
        return self.dmp.diff_main(left or "", right or "")

    def diff(self, left: str, right: str) -> List[DiffSegment]:
        """Character diff with trivial edits merged into neighbouring runs."""
        diffs = self.raw_diff(left, right)
        self.dmp.diff_cleanupSemantic(diffs)
        return diffs

    def similarity(self, left: str, right: str) -> float:
        """
        Share of unchanged characters relative to the longer text.

        Two empty texts are identical (1.0); one empty text shares
        nothing (0.0).
        """
        if not left and not right:
            return 1.0
        if not left or not right:
            return 0.0

        unchanged = sum(len(text) for op, text in self.raw_diff(left, right)
                        if op == DIFF_EQUAL)
        return unchanged / max(len(left), len(right))

    def render(self, left: str, right: str, side: str) -> str:
        """
        Render the diff as seen from one side.

        The right side shows insertions live and deletions as placeholders;
        the left side is the mirror image.
        """
        if side not in SIDES:
            raise ValueError(f"side must be 'left' or 'right', got {side!r}")

        live_op = DIFF_INSERT if side == RIGHT else DIFF_DELETE
        parts = []
        for op, text in self.diff(left, right):
            if op == DIFF_EQUAL:
                parts.append(visible(text))
            elif op == live_op:
                parts.append(added_html(text) if op == DIFF_INSERT else removed_html(text))
            else:
                parts.append(placeholder_html(text, op))
        return ''.join(parts)

    def render_combined(self, left: str, right: str) -> str:
        """Render insertions and deletions both live, for report rows."""
        parts = []
        for op, text in self.diff(left, right):
            if op == DIFF_INSERT:
                parts.append(added_html(text))
            elif op == DIFF_DELETE:
                parts.append(removed_html(text))
            else:
                parts.append(visible(text))
        return ''.join(parts)
