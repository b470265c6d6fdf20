"""
Inline Style Resolution
=======================
Resolves a FormattingSnapshot from an element's inline ``style``
attribute and legacy presentational attributes. There is no cascade:
only what is written on the element (plus emphasis tags on the element
or its descendants) counts.
"""

import re
from typing import Dict, Optional

from bs4 import Tag

from .models import FormattingSnapshot

BOLD_TAGS = ('b', 'strong')
ITALIC_TAGS = ('i', 'em')
UNDERLINE_TAGS = ('u', 'ins')

# <font size="N"> legacy scale
FONT_SIZE_KEYWORDS = {
    '1': 'x-small', '2': 'small', '3': 'medium', '4': 'large',
    '5': 'x-large', '6': 'xx-large', '7': 'xxx-large'
}

_DECLARATION_RE = re.compile(r'\s*([-\w]+)\s*:\s*([^;]*)')


def parse_style_attribute(style: Optional[str]) -> Dict[str, str]:
    """
    Parse an inline CSS declaration list into a property dict.

    Property names are lower-cased; values keep their case but lose
    surrounding whitespace and ``!important``. Later declarations win.
    """
    declarations: Dict[str, str] = {}
    if not style:
        return declarations

    for chunk in style.split(';'):
        match = _DECLARATION_RE.match(chunk)
        if not match:
            continue
        value = match.group(2).replace('!important', '').strip()
        if value:
            declarations[match.group(1).lower()] = value
    return declarations


def _is_bold_weight(weight: str) -> bool:
    weight = weight.lower()
    if 'bold' in weight:
        return True
    return weight.isdigit() and int(weight) >= 600


def _has_tag(element: Tag, names) -> bool:
    return element.name in names or element.find(names) is not None


def resolve_style(element) -> FormattingSnapshot:
    """
    Resolve the formatting of an element.

    The document root (and anything that is not a real element) resolves
    to the default snapshot.
    """
    if not isinstance(element, Tag) or element.parent is None:
        return FormattingSnapshot()

    css = parse_style_attribute(element.get('style'))

    weight = css.get('font-weight', '')
    font_style = css.get('font-style', '').lower()
    decoration = (css.get('text-decoration-line') or css.get('text-decoration', '')).lower()

    font_size = css.get('font-size', '')
    color = css.get('color', '')
    font_family = css.get('font-family', '')
    if element.name == 'font':
        font_size = font_size or FONT_SIZE_KEYWORDS.get(str(element.get('size', '')).strip(), '')
        color = color or element.get('color', '')
        font_family = font_family or element.get('face', '')

    return FormattingSnapshot(
        bold=_is_bold_weight(weight) or _has_tag(element, BOLD_TAGS),
        italic=('italic' in font_style or 'oblique' in font_style
                or _has_tag(element, ITALIC_TAGS)),
        underline='underline' in decoration or _has_tag(element, UNDERLINE_TAGS),
        font_size=font_size,
        color=color,
        background_color=css.get('background-color', '') or element.get('bgcolor', ''),
        font_family=font_family,
        text_align=css.get('text-align', '') or element.get('align', ''),
        line_height=css.get('line-height', '')
    )
