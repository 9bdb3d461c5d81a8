"""Text cleanup primitives shared by the field extractors.

These are pattern heuristics, not a DOM parse: a captured span ends at the
first closing tag that follows it, so nested elements of the same name are
cut short.
"""

import re
from typing import Optional

# Applied in order; "&amp;" first so "&amp;lt;" ends up as "<".
ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
    ("&nbsp;", " "),
)

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_HSPACE_RE = re.compile(r"[^\S\n]+")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_OPEN_RE = re.compile(r"<p(?:\s[^>]*)?>", re.IGNORECASE)
_INLINE_TAG_RE = re.compile(r"</?(?:b|i|em|strong|span)(?:\s[^>]*)?>", re.IGNORECASE)
_TITLE_TAG_RE = re.compile(r"<title>([^<]+)</title>", re.IGNORECASE)


def decode_entities(text) -> str:
    """Decode the six entities the product pages actually use.

    Numeric references and other named entities are left as they are.
    """
    if not isinstance(text, str):
        return ""
    for entity, char in ENTITIES:
        text = text.replace(entity, char)
    return text


def clean_fragment(fragment: str) -> str:
    """Strip tags, collapse whitespace, trim and decode an HTML fragment."""
    text = _TAG_RE.sub(" ", fragment)
    text = _WS_RE.sub(" ", text).strip()
    return decode_entities(text)


def clean_multiline(fragment: str, paragraphs: bool = False) -> str:
    """Like clean_fragment, but keep <br> (and optionally <p>) as line breaks."""
    text = _BR_RE.sub("\n", fragment)
    if paragraphs:
        text = _P_OPEN_RE.sub("\n\n", text)
        text = _INLINE_TAG_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _HSPACE_RE.sub(" ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return decode_entities(text.strip())


def _selector_pattern(by_id: Optional[str], by_class_fragment: Optional[str],
                      by_tag: Optional[str]) -> Optional[re.Pattern]:
    if by_id:
        return re.compile(
            rf"""<[^>]+id=["']{re.escape(by_id)}["'][^>]*>([\s\S]*?)</[^>]+>""",
            re.IGNORECASE,
        )
    if by_class_fragment:
        return re.compile(
            rf"""<[^>]+class=["'][^"']*{re.escape(by_class_fragment)}[^"']*["'][^>]*>([\s\S]*?)</[^>]+>""",
            re.IGNORECASE,
        )
    if by_tag:
        tag = re.escape(by_tag)
        return re.compile(rf"<{tag}(?:\s[^>]*)?>([\s\S]*?)</{tag}\s*>", re.IGNORECASE)
    return None


def extract_text_content(html: str, by_id: Optional[str] = None,
                         by_class_fragment: Optional[str] = None,
                         by_tag: Optional[str] = None) -> str:
    """Inner text of the first element matching one selector.

    Only one selector is used: id wins over class fragment, which wins over
    tag name. Returns "" when nothing matches.
    """
    if not isinstance(html, str):
        return ""
    pattern = _selector_pattern(by_id, by_class_fragment, by_tag)
    if pattern is None:
        return ""
    match = pattern.search(html)
    if not match or not match.group(1):
        return ""
    return clean_fragment(match.group(1))


def page_title(html: str) -> Optional[str]:
    match = _TITLE_TAG_RE.search(html)
    if not match:
        return None
    return decode_entities(match.group(1).strip())
