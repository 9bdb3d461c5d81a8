from book_scraper.html_text import (
    clean_fragment,
    clean_multiline,
    decode_entities,
    extract_text_content,
    page_title,
)


def test_decode_supported_entities():
    text = "Tom &amp; Jerry &lt;b&gt; &quot;quoted&quot; it&#039;s&nbsp;here"
    assert decode_entities(text) == 'Tom & Jerry <b> "quoted" it\'s here'


def test_decode_leaves_other_entities_alone():
    assert decode_entities("&copy; 2020 &#39;x&#39; &mdash;") == "&copy; 2020 &#39;x&#39; &mdash;"


def test_decode_non_string_is_empty():
    assert decode_entities(None) == ""
    assert decode_entities(42) == ""


def test_decode_is_sequential():
    assert decode_entities("&amp;lt;") == "<"


def test_extract_by_id_strips_tags_and_whitespace():
    html = '<span id="productTitle" class="x">\n  Big   <i>Title</i>\n</span>'
    assert extract_text_content(html, by_id="productTitle") == "Big Title"


def test_extract_stops_at_first_closing_tag():
    html = '<div id="box"><span>Inner</span> tail</div>'
    assert extract_text_content(html, by_id="box") == "Inner"


def test_extract_by_id_decodes():
    html = "<span id='productTitle'>  Salt &amp; Pepper  </span>"
    assert extract_text_content(html, by_id="productTitle") == "Salt & Pepper"


def test_extract_by_class_fragment():
    html = '<h1 class="a-size-extra-large other">Class Title</h1>'
    assert extract_text_content(html, by_class_fragment="extra-large") == "Class Title"


def test_extract_by_tag_matches_closing_tag():
    html = "<h2 class='head'>Hi <em>there</em> friend</h2>"
    assert extract_text_content(html, by_tag="h2") == "Hi there friend"


def test_extract_id_wins_over_class_and_tag():
    html = '<p class="pick">by class</p><span id="pick">by id</span>'
    assert extract_text_content(html, by_id="pick", by_class_fragment="pick", by_tag="p") == "by id"


def test_extract_no_selector_or_no_match():
    assert extract_text_content("<p>x</p>") == ""
    assert extract_text_content("<p>x</p>", by_id="missing") == ""
    assert extract_text_content(None, by_id="x") == ""


def test_clean_fragment():
    assert clean_fragment("<b>a</b>\n\t b &gt; c ") == "a b > c"


def test_clean_multiline_keeps_breaks():
    assert clean_multiline("one<br>two<BR/>  three") == "one\ntwo\nthree"


def test_clean_multiline_paragraphs():
    html = "<p>First <b>bold</b></p><p><span>Second</span></p>"
    assert clean_multiline(html, paragraphs=True) == "First bold\n\nSecond"


def test_page_title():
    assert page_title("<html><title> Robot &amp; Check </title></html>") == "Robot & Check"
    assert page_title("<html></html>") is None
