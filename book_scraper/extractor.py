"""Runs the field extractors over one document and classifies failures."""

import logging

from . import fields
from .errors import BotChallengeError, StructureMismatchError
from .html_text import page_title
from .models import (
    AUTHOR_NOT_FOUND,
    PUBLICATION_DATE_NOT_FOUND,
    TITLE_NOT_FOUND,
    ScrapedRecord,
)

logger = logging.getLogger("book_scraper")

DEFAULT_PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"
FALLBACK_PAGE_TITLE = "Possible Error Page"
CHALLENGE_MARKERS = ("captcha", "are you a robot")


def is_bot_challenge(html: str, title: str) -> bool:
    lowered = html.lower()
    return any(m in lowered for m in CHALLENGE_MARKERS) or "captcha" in title.lower()


def extract(html: str, source_url: str,
            placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE) -> ScrapedRecord:
    """Build a ScrapedRecord from a product page.

    Raises BotChallengeError or StructureMismatchError when title, author and
    publication date are all missing. Missing secondary fields come back as
    their "not found" strings instead.
    """
    if not isinstance(html, str):
        html = ""

    title = fields.extract_title(html)
    author = fields.extract_author(html)
    publication_date = fields.extract_publication_date(html)

    if (title == TITLE_NOT_FOUND and author == AUTHOR_NOT_FOUND
            and publication_date == PUBLICATION_DATE_NOT_FOUND):
        found_title = page_title(html) or FALLBACK_PAGE_TITLE
        if is_bot_challenge(html, found_title):
            logger.warning(f"Bot challenge page for {source_url}: {found_title}")
            raise BotChallengeError(found_title)
        logger.warning(f"Unrecognized page structure for {source_url}: {found_title}")
        raise StructureMismatchError(found_title)

    image_url = fields.extract_image_url(html)

    return ScrapedRecord(
        title=title,
        author=author,
        publication_date=publication_date,
        description=fields.extract_description(html),
        image_url=image_url or placeholder_image,
        source_url=source_url,
        print_length=fields.extract_print_length(html),
        file_size=fields.extract_file_size(html),
    )
