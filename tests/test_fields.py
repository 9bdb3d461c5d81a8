import time

import pytest

from book_scraper import fields
from book_scraper.models import (
    AUTHOR_NOT_FOUND,
    DESCRIPTION_NOT_FOUND,
    FILE_SIZE_NOT_FOUND,
    PRINT_LENGTH_NOT_FOUND,
    PUBLICATION_DATE_NOT_FOUND,
    TITLE_NOT_FOUND,
)


# --- Title ---

def test_title_from_product_title_id(load_page):
    assert fields.extract_title(load_page("product_page.html")) == "The Example & Book"


def test_title_from_h1_class(load_page):
    assert fields.extract_title(load_page("detail_bullets_page.html")) == "Older Layout Book"


def test_title_class_fragment_ignored_outside_h1():
    html = '<div class="a-size-extra-large">Not a heading</div>'
    assert fields.extract_title(html) == TITLE_NOT_FOUND


# --- Author ---

def test_author_byline_with_roles(load_page):
    assert fields.extract_author(load_page("product_page.html")) == (
        "Jane Doe (Author, Illustrator), John Roe (Translator), Ann O'Poe (Author)"
    )


def test_author_byline_beats_author_name_link(load_page):
    html = load_page("product_page.html")
    assert 'class="authorName"' in html
    assert "Someone Else" not in fields.extract_author(html)


def test_author_byline_feature_div_variant():
    html = (
        '<div id="bylineInfo_feature_div">'
        '<span class="author notFaded"><a class="a-link-normal" href="#">Kim Lee</a>'
        '<span class="contribution"><span class="a-color-secondary">( Editor ,  , Author )</span></span>'
        '</span></div>'
    )
    assert fields.extract_author(html) == "Kim Lee (Editor, Author)"


def test_author_marked_single(load_page):
    assert fields.extract_author(load_page("detail_bullets_page.html")) == "Pat Smith"


def test_author_name_class_link():
    html = '<div class="authorName"><a href="/x">Simple &amp; Name</a></div>'
    assert fields.extract_author(html) == "Simple & Name"


def test_author_contributor_list_keeps_only_authors():
    html = (
        "<span class='a-declarative' data-action='a'>"
        '<a class="a-link-normal contributorNameID" href="/c1">First Author</a> '
        '<span class="a-color-secondary contribution">(Author)</span></span>'
        "<span class='a-declarative'>"
        '<a class="a-link-normal contributorNameID" href="/c2">Some Editor</a>'
        '<span class="a-color-secondary contribution">(Editor)</span></span>'
        "<span class='a-declarative'>"
        '<a class="a-link-normal contributorNameID" href="/c3">Second Author</a>'
        '<span class="a-color-secondary contribution">(AUTHOR, Foreword)</span></span>'
    )
    assert fields.extract_author(html) == "First Author, Second Author"


def test_author_not_found():
    assert fields.extract_author("<p>no byline</p>") == AUTHOR_NOT_FOUND


def test_author_marked_role_must_be_in_same_span():
    html = (
        '<span class="author notFaded"><a href="/a">Editor Person</a>'
        '<span class="contribution">(Editor)</span></span>'
        '<span class="author notFaded"><a href="/b">Real Author</a>'
        '<span class="contribution">(Author)</span></span>'
    )
    assert fields.extract_author(html) == "Real Author"


def test_author_large_page_without_role_is_fast():
    spans = '<span class="author notFaded"><a href="/x">Nobody</a></span>' * 3
    links = "".join(f'<a href="/l{i}">link {i}</a> ' for i in range(20000))
    html = f"<html><body>{spans}{links}</body></html>"
    start = time.perf_counter()
    assert fields.extract_author(html) == AUTHOR_NOT_FOUND
    assert time.perf_counter() - start < 2.0


# --- Publication date ---

def test_publication_date_attribute_block(load_page):
    assert fields.extract_publication_date(load_page("product_page.html")) == "March 5, 2021"


def test_publication_date_bold_label():
    html = "<ul><li><b>Publication date</b> : June 1, 2020</li></ul>"
    assert fields.extract_publication_date(html) == "June 1, 2020"


def test_publication_date_publisher_bullet(load_page):
    assert fields.extract_publication_date(load_page("detail_bullets_page.html")) == "May 2, 2019"


def test_publication_date_not_found():
    assert fields.extract_publication_date("<p>1999</p>") == PUBLICATION_DATE_NOT_FOUND


# --- Print length ---

def test_print_length_bare_number_gets_pages(load_page):
    assert fields.extract_print_length(load_page("product_page.html")) == "320 pages"


def test_print_length_with_unit_unchanged():
    html = (
        '<div id="rpi-attribute-book_details-paperback_pages">'
        '<div class="rpi-attribute-value"><span>320 pages</span></div></div>'
    )
    assert fields.extract_print_length(html) == "320 pages"


def test_print_length_detail_bullet(load_page):
    assert fields.extract_print_length(load_page("detail_bullets_page.html")) == "250 pages"


def test_print_length_not_found():
    assert fields.extract_print_length("<p></p>") == PRINT_LENGTH_NOT_FOUND


# --- File size ---

def test_file_size_attribute_block(load_page):
    assert fields.extract_file_size(load_page("product_page.html")) == "2.1 MB"


def test_file_size_detail_bullet(load_page):
    assert fields.extract_file_size(load_page("detail_bullets_page.html")) == "1.5 MB"


def test_file_size_not_found():
    assert fields.extract_file_size("") == FILE_SIZE_NOT_FOUND


# --- Description ---

def test_description_expander_keeps_paragraphs(load_page):
    assert fields.extract_description(load_page("product_page.html")) == (
        "A story about examples & tests.\n\nIt spans lines\nand paragraphs."
    )


def test_description_prefers_noscript():
    html = (
        '<div id="bookDescription_feature_div">'
        "<noscript><div>Line one<br/>Line two &amp; more</div></noscript>"
        '<div data-a-expander-name="book_description_expander">Expander text</div>'
        '<div class="a-expander-header">more</div></div>'
    )
    assert fields.extract_description(html) == "Line one\nLine two & more"


def test_description_full_width(load_page):
    assert fields.extract_description(load_page("detail_bullets_page.html")) == (
        "First line\nSecond line & more"
    )


def test_description_unclosed_noscript_is_fast():
    html = (
        '<div id="bookDescription_feature_div"><noscript>'
        + "<div>x</div>" * 5000
        + '<div data-a-expander-name="book_description_expander">Expander text</div>'
    )
    start = time.perf_counter()
    assert fields.extract_description(html) == "Expander text"
    assert time.perf_counter() - start < 2.0


def test_description_og_meta_only():
    html = '<head><meta property="og:description" content=" A &quot;great&quot; read "></head>'
    assert fields.extract_description(html) == 'A "great" read'


def test_description_not_found():
    assert fields.extract_description("<p>nothing</p>") == DESCRIPTION_NOT_FOUND


# --- Image URL ---

def test_image_largest_dynamic_image(load_page):
    assert fields.extract_image_url(load_page("product_page.html")) == "https://img.example.com/large.jpg"


def test_image_dynamic_map_picks_largest_area():
    html = """<img data-a-dynamic-image='{"urlA":[100,200], "urlB":[50,50]}'>"""
    assert fields.extract_image_url(html) == "urlA"


def test_image_malformed_json_falls_through(load_page):
    assert fields.extract_image_url(load_page("detail_bullets_page.html")) == (
        "https://img.example.com/front.jpg"
    )


@pytest.mark.parametrize("payload", [
    "[1, 2]",
    '{"a": [1]}',
    '{"a": ["x", "y"]}',
    '{"a": [0, 10]}',
])
def test_largest_dynamic_image_unusable(payload):
    assert fields.largest_dynamic_image(payload) is None


def test_largest_dynamic_image_first_wins_ties():
    assert fields.largest_dynamic_image('{"a": [10, 10], "b": [10, 10]}') == "a"


@pytest.mark.parametrize("html, expected", [
    ('<img alt="" class="a-dynamic fullscreen" src="https://img/full.jpg">', "https://img/full.jpg"),
    ('<img id="landingImage" alt="x" src="https://img/land.jpg">', "https://img/land.jpg"),
    ('<img id="imgBlkFront" src="https://img/front.jpg?a=1&amp;b=2">', "https://img/front.jpg?a=1&b=2"),
    ('<meta property="og:image" content="https://img/og.jpg">', "https://img/og.jpg"),
    ('<img src="https://img/cover.jpg" alt="Book cover">', "https://img/cover.jpg"),
    ('<img src="https://img/logo.png" alt="Logo">', ""),
])
def test_image_fallback_strategies(html, expected):
    assert fields.extract_image_url(html) == expected
