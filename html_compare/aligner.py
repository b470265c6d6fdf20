"""
Alignment Engine v1.0.0
=======================
Pairs the units of two document versions into EQUAL, MODIFIED, ADDED
and REMOVED records.

Three passes:
1. exact match: first unused right unit with identical content, kind
   and formatting
2. similarity match: best-scoring unused right unit of the same kind,
   accepted when the score exceeds the threshold (first maximum wins)
3. leftovers: unmatched left units are removed, unmatched right units
   are added

Every left and every right unit ends up in exactly one record. Scoring is
O(L*R) diff computations.
"""

from typing import List, Sequence, Optional

from config_logging import get_logger, DEFAULT_SIMILARITY_THRESHOLD, DEFAULT_LARGE_DOCUMENT_PAIRS
from .inline_diff import InlineDiffer
from .models import ComparableUnit, AlignmentRecord, AlignmentKind

logger = get_logger('html_compare.aligner')


def align_units(
    left_units: Sequence[ComparableUnit],
    right_units: Sequence[ComparableUnit],
    differ: Optional[InlineDiffer] = None,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    large_document_pairs: int = DEFAULT_LARGE_DOCUMENT_PAIRS
) -> List[AlignmentRecord]:
    """
    Align two unit sequences.

    Args:
        left_units: Units of the original version
        right_units: Units of the new version
        differ: Intra-unit differ used for similarity scoring
        threshold: Scores must be strictly greater than this to pair
        large_document_pairs: Pair count above which a scaling warning is logged

    Returns:
        Records in pass order: equal, modified, removed, added
    """
    differ = differ or InlineDiffer()
    records: List[AlignmentRecord] = []
    left_used = [False] * len(left_units)
    right_used = [False] * len(right_units)

    pairs = len(left_units) * len(right_units)
    if pairs > large_document_pairs:
        logger.warning(f"Aligning {len(left_units)} x {len(right_units)} units; "
                       f"similarity scoring is quadratic", unit_pairs=pairs)

    # Pass 1: exact matches
    for li, left in enumerate(left_units):
        for ri, right in enumerate(right_units):
            if right_used[ri]:
                continue
            if left.matches_exactly(right):
                records.append(AlignmentRecord(AlignmentKind.EQUAL, left, right))
                left_used[li] = right_used[ri] = True
                break

    # Pass 2: similarity matches
    modified = 0
    for li, left in enumerate(left_units):
        if left_used[li]:
            continue

        best_index = -1
        best_score = 0.0
        for ri, right in enumerate(right_units):
            if right_used[ri] or right.kind != left.kind:
                continue
            score = differ.similarity(left.raw_content, right.raw_content)
            if score > best_score:
                best_score = score
                best_index = ri

        if best_index >= 0 and best_score > threshold:
            records.append(AlignmentRecord(AlignmentKind.MODIFIED, left, right_units[best_index]))
            left_used[li] = right_used[best_index] = True
            modified += 1

    # Pass 3: leftovers
    for li, left in enumerate(left_units):
        if not left_used[li]:
            records.append(AlignmentRecord(AlignmentKind.REMOVED, left_unit=left))
    for ri, right in enumerate(right_units):
        if not right_used[ri]:
            records.append(AlignmentRecord(AlignmentKind.ADDED, right_unit=right))

    logger.debug(f"Aligned {len(left_units)} left / {len(right_units)} right units "
                 f"into {len(records)} records ({modified} modified)")
    return records
