"""Field extractors for book product pages.

Each extractor tries its patterns in a fixed order and returns the first
non-empty result, or the field's "not found" sentinel. Nothing here raises
on odd markup; a pattern that doesn't match just hands over to the next one.
"""

import json
import logging
import re
from typing import Callable, Iterable, Optional

from .html_text import clean_fragment, clean_multiline, decode_entities, extract_text_content
from .models import (
    AUTHOR_NOT_FOUND,
    DESCRIPTION_NOT_FOUND,
    FILE_SIZE_NOT_FOUND,
    PRINT_LENGTH_NOT_FOUND,
    PUBLICATION_DATE_NOT_FOUND,
    TITLE_NOT_FOUND,
)

logger = logging.getLogger("book_scraper")


# --- Title ---

TITLE_H1_RE = re.compile(
    r"""<h1[^>]*class=["'][^"']*a-size-extra-large[^"']*["'][^>]*>([\s\S]*?)</h1>""", re.I
)

# --- Author ---

BYLINE_RE = re.compile(
    r"""<div id=["']bylineInfo(?:_feature_div)?["'][^>]*>([\s\S]*?)</div>""", re.I
)
BYLINE_AUTHOR_RE = re.compile(
    r"""<span class=["']author notFaded["'][^>]*>\s*"""
    r"""<a class=["']a-link-normal["'][^>]*>([^<]+)</a>\s*"""
    r"""(?:<span class=["']contribution["'][^>]*>\s*<span class=["']a-color-secondary["']>"""
    r"""\s*\(([^)]+)\)\s*,?\s*</span>\s*</span>)?\s*</span>""",
    re.I,
)
AUTHOR_SPAN_RE = re.compile(
    r"""<span class=["']author notFaded["'][^>]*>([^<]*(?:<(?!/span>)[^<]*)*)""", re.I
)
LINK_TEXT_RE = re.compile(r"<a[^>]*>([^<]+)</a>", re.I)
AUTHOR_NAME_RE = re.compile(r"""class=["']authorName["'][^>]*><a[^>]*>([^<]+)</a>""", re.I)
CONTRIBUTOR_RE = re.compile(
    r"""<span class=["']a-declarative["'][^>]*>\s*"""
    r"""<a class=["']a-link-normal contributorNameID["'][^>]+>([^<]+)</a>\s*"""
    r"""<span class=["']a-color-secondary contribution["']>([^<]+)</span>""",
    re.I,
)

# --- Detail blocks ---

PUBLICATION_BOLD_RE = re.compile(r"<b>Publication date</b>\s*:\s*([^<]+)<", re.I)
PUBLISHER_BULLET_RE = re.compile(
    r"""<div id=["']detailBullets_feature_div["']>[\s\S]*?"""
    r"""<li><b>Publisher</b>:\s*[^<]+<span>\s*\(([^<]+)\)</span></li>""",
    re.I,
)
DIGITS_RE = re.compile(r"^\d+$")

# --- Description ---

DESCRIPTION_BLOCK_RE = re.compile(
    r"""<div id=["']bookDescription_feature_div["'][^>]*>([\s\S]*?)(?:<div class=["']a-expander-header|$)""",
    re.I,
)
NOSCRIPT_RE = re.compile(r"<noscript>([\s\S]*?)</noscript>", re.I)
DIV_RE = re.compile(r"<div[^>]*>([^<]*(?:<(?!/div>)[^<]*)*)</div>", re.I)
EXPANDER_RE = re.compile(
    r"""<div[^>]*data-a-expander-name=["']book_description_expander["'][^>]*>([\s\S]*?)</div>""", re.I
)
FULL_WIDTH_RE = re.compile(
    r"""<div class=["'][^"']*product-description-full-width[^"']*["'][^>]*>([\s\S]*?)</div>""", re.I
)

# --- Image ---

DYNAMIC_IMAGE_RE = re.compile(r"""data-a-dynamic-image=(["'])(.*?)\1""", re.I)
IMAGE_RES = (
    re.compile(r"""<img[^>]+class=["'][^"']*fullscreen[^"']*["'][^>]*src=["'](.*?)["']""", re.I),
    re.compile(r"""<img id=["']landingImage["'][^>]*src=["'](.*?)["']""", re.I),
    re.compile(r"""<img id=["']imgBlkFront["'][^>]*src=["'](.*?)["']""", re.I),
)
BOOK_ALT_IMAGE_RE = re.compile(
    r"""<img[^>]+src=["'](https?://[^"']+)["'][^>]*alt=["'][^"']*book[^"']*["']""", re.I
)


def _meta_property(html: str, prop: str) -> str:
    match = re.search(
        rf"""<meta property=["']{re.escape(prop)}["'] content=["'](.*?)["']""", html, re.I
    )
    return decode_entities(match.group(1).strip()) if match else ""


def _attribute_value(html: str, keys: Iterable[str], linked: bool = False) -> str:
    """Value of an rpi-attribute-book_details-<key> block."""
    key_alt = "|".join(re.escape(k) for k in keys)
    link = r"(?:<a[^>]*>)?\s*" if linked else ""
    match = re.search(
        rf"""<div id=["']rpi-attribute-book_details-(?:{key_alt})["'][^>]*>[\s\S]*?"""
        rf"""<div class=["'][^"']*rpi-attribute-value[^"']*["'][^>]*>\s*{link}<span>([^<]+)</span>""",
        html,
        re.I,
    )
    return decode_entities(match.group(1).strip()) if match else ""


def _detail_bullet(html: str, label: str) -> str:
    match = re.search(
        rf"<li><b>{re.escape(label)}</b>\s*:\s*<span[^>]*>\s*([^<]+)\s*</span></li>", html, re.I
    )
    return decode_entities(match.group(1).strip()) if match else ""


def _first(html: str, strategies: Iterable[Callable[[str], str]], sentinel: str) -> str:
    for strategy in strategies:
        value = strategy(html)
        if value:
            return value
        logger.debug(f"{strategy.__name__}: no match")
    return sentinel


# --- Title ---

def _title_by_id(html: str) -> str:
    return extract_text_content(html, by_id="productTitle")


def _title_by_h1_class(html: str) -> str:
    match = TITLE_H1_RE.search(html)
    return clean_fragment(match.group(1)) if match else ""


def extract_title(html: str) -> str:
    return _first(html, (_title_by_id, _title_by_h1_class), TITLE_NOT_FOUND)


# --- Author ---

def _author_byline(html: str) -> str:
    block = BYLINE_RE.search(html)
    if not block:
        return ""
    entries = []
    for match in BYLINE_AUTHOR_RE.finditer(block.group(1)):
        name = decode_entities(match.group(1).strip())
        if match.group(2):
            roles = [r.strip() for r in match.group(2).strip().split(",")]
            role_text = decode_entities(", ".join(r for r in roles if r))
        else:
            role_text = "Author"
        entries.append(f"{name} ({role_text})")
    return ", ".join(entries)


def _author_marked(html: str) -> str:
    """First author span whose own markup carries an "(Author)" role."""
    for span in AUTHOR_SPAN_RE.finditer(html):
        segment = span.group(1)
        link = LINK_TEXT_RE.search(segment)
        if link and "(author)" in segment[link.end():].lower():
            return decode_entities(link.group(1).strip())
    return ""


def _author_name_link(html: str) -> str:
    match = AUTHOR_NAME_RE.search(html)
    return decode_entities(match.group(1).strip()) if match else ""


def _author_contributors(html: str) -> str:
    names = [
        decode_entities(m.group(1).strip())
        for m in CONTRIBUTOR_RE.finditer(html)
        if "(author" in m.group(2).lower()
    ]
    return ", ".join(names)


def extract_author(html: str) -> str:
    """Authors as "Name (Role1, Role2), Name (Author)" or a single name.

    Product pages mark up contributors in several incompatible ways, so the
    byline block is tried first and cruder patterns after it.
    """
    return _first(
        html,
        (_author_byline, _author_marked, _author_name_link, _author_contributors),
        AUTHOR_NOT_FOUND,
    )


# --- Publication date ---

def _publication_attribute(html: str) -> str:
    return _attribute_value(html, ("publication_date",))


def _publication_bold(html: str) -> str:
    match = PUBLICATION_BOLD_RE.search(html)
    return decode_entities(match.group(1).strip()) if match else ""


def _publication_publisher_bullet(html: str) -> str:
    match = PUBLISHER_BULLET_RE.search(html)
    return decode_entities(match.group(1).strip()) if match else ""


def extract_publication_date(html: str) -> str:
    return _first(
        html,
        (_publication_attribute, _publication_bold, _publication_publisher_bullet),
        PUBLICATION_DATE_NOT_FOUND,
    )


# --- Print length / file size ---

def _print_length_attribute(html: str) -> str:
    value = _attribute_value(html, ("ebook_pages", "paperback_pages"), linked=True)
    if DIGITS_RE.match(value):
        value += " pages"
    return value


def _print_length_bullet(html: str) -> str:
    return _detail_bullet(html, "Print length")


def extract_print_length(html: str) -> str:
    return _first(html, (_print_length_attribute, _print_length_bullet), PRINT_LENGTH_NOT_FOUND)


def _file_size_attribute(html: str) -> str:
    return _attribute_value(html, ("file_size",))


def _file_size_bullet(html: str) -> str:
    return _detail_bullet(html, "File size")


def extract_file_size(html: str) -> str:
    return _first(html, (_file_size_attribute, _file_size_bullet), FILE_SIZE_NOT_FOUND)


# --- Description ---

def _description_feature(html: str) -> str:
    block = DESCRIPTION_BLOCK_RE.search(html)
    if not block or not block.group(1):
        return ""
    content = block.group(1)
    noscript = NOSCRIPT_RE.search(content)
    inner = DIV_RE.search(noscript.group(1)) if noscript else None
    if inner and inner.group(1):
        text = clean_multiline(inner.group(1))
        if text:
            return text
    inner = EXPANDER_RE.search(content)
    if inner and inner.group(1):
        return clean_multiline(inner.group(1), paragraphs=True)
    return ""


def _description_full_width(html: str) -> str:
    match = FULL_WIDTH_RE.search(html)
    return clean_multiline(match.group(1)) if match else ""


def _description_og(html: str) -> str:
    return _meta_property(html, "og:description")


def extract_description(html: str) -> str:
    return _first(
        html,
        (_description_feature, _description_full_width, _description_og),
        DESCRIPTION_NOT_FOUND,
    )


# --- Image URL ---

def largest_dynamic_image(payload: str) -> Optional[str]:
    """Pick the URL with the biggest width*height from a dynamic-image map.

    Returns None for malformed JSON or a map with no usable dimensions.
    """
    try:
        data = json.loads(decode_entities(payload))
    except ValueError as e:
        logger.debug(f"Malformed dynamic image data: {e}")
        return None
    if not isinstance(data, dict):
        return None

    best_url, best_area = None, 0
    for url, dims in data.items():
        if not isinstance(dims, list) or len(dims) != 2:
            continue
        if not all(isinstance(d, (int, float)) and not isinstance(d, bool) for d in dims):
            continue
        area = dims[0] * dims[1]
        if area > best_area:
            best_url, best_area = url, area
    return best_url


def _image_dynamic(html: str) -> str:
    match = DYNAMIC_IMAGE_RE.search(html)
    if not match or not match.group(2):
        return ""
    return largest_dynamic_image(match.group(2)) or ""


def _image_tags(html: str) -> str:
    for pattern in IMAGE_RES:
        match = pattern.search(html)
        if match and match.group(1):
            return decode_entities(match.group(1))
    return ""


def _image_og(html: str) -> str:
    return _meta_property(html, "og:image")


def _image_book_alt(html: str) -> str:
    match = BOOK_ALT_IMAGE_RE.search(html)
    return decode_entities(match.group(1)) if match else ""


def extract_image_url(html: str) -> str:
    """Best cover image URL, or "" when none is found."""
    return _first(html, (_image_dynamic, _image_tags, _image_og, _image_book_alt), "")
