"""
HTML Compare Flask Routes
=========================
API endpoints for document comparison.

v1.0.0: Initial implementation with compare and health endpoints
"""

import json
import time
from functools import wraps

from flask import Blueprint, request, jsonify, g

from config_logging import (
    get_config, get_logger, StructuredLogger, ValidationError, CompareError
)
from .comparator import HtmlComparator
from .extractor import PARSER

logger = get_logger('html_compare.routes')

hc_blueprint = Blueprint('html_compare', __name__)


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def _error_response(error: CompareError):
    body = error.to_dict()
    body['error']['correlation_id'] = getattr(g, 'correlation_id', 'unknown')
    return jsonify(body), error.status_code


def handle_hc_errors(f):
    """
    Decorator for standardized API error handling in HTML Compare routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        g.correlation_id = StructuredLogger.new_correlation_id()
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow HC API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except ValidationError as e:
            logger.warning(f"Validation error in {f.__name__}: {e}")
            return _error_response(e)
        except CompareError as e:
            logger.error(f"Comparison error in {f.__name__}: {e}")
            return _error_response(e)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in {f.__name__}: {e}")
            return _error_response(
                CompareError(f'Invalid JSON format: {e}', code='INVALID_JSON', status_code=400))
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return _error_response(
                CompareError('An unexpected error occurred', code='INTERNAL_ERROR'))

    return decorated


def _markup_field(data: dict, name: str, limit: int) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be a string of HTML markup", field=name)
    if len(value.encode('utf-8')) > limit:
        raise ValidationError(f"'{name}' exceeds the {limit} byte limit", field=name)
    return value


# =============================================================================
# ENDPOINTS
# =============================================================================

@hc_blueprint.route('/', methods=['POST'])
@handle_hc_errors
def compare():
    """
    Compare two HTML documents.

    Request body:
        { left_html: str, right_html: str, similarity_threshold?: float }

    Returns:
        {
            success: true,
            result: {
                summary: { additions, deletions, changes },
                detailed: { lines: [...], tables: [...], images: [...] },
                left_diffs: [...],
                right_diffs: [...]
            }
        }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    config = get_config()
    left_html = _markup_field(data, 'left_html', config.max_markup_bytes)
    right_html = _markup_field(data, 'right_html', config.max_markup_bytes)

    threshold = data.get('similarity_threshold')
    if threshold is not None and (isinstance(threshold, bool)
                                  or not isinstance(threshold, (int, float))):
        raise ValidationError("'similarity_threshold' must be a number",
                              field='similarity_threshold')

    comparator = HtmlComparator(config, similarity_threshold=threshold)
    result = comparator.compare(left_html, right_html)

    logger.info(f"Computed comparison: {result.summary.changes} changes")

    return jsonify({
        'success': True,
        'result': result.to_dict()
    })


@hc_blueprint.route('/health', methods=['GET'])
def health_check():
    """Report availability of the comparison engine."""
    config = get_config()
    is_valid, errors = config.validate()

    return jsonify({
        'success': True,
        'status': 'healthy' if is_valid else 'misconfigured',
        'config_errors': errors,
        'diff_engine': 'diff-match-patch',
        'parser': f'beautifulsoup4/{PARSER}',
        'similarity_threshold': config.similarity_threshold
    })
