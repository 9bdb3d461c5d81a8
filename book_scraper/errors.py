"""Exception types raised by the scraper and its collaborators."""

from typing import Optional


class ScraperError(Exception):
    pass


class InputError(ScraperError):
    """Missing or unusable input (no URL, empty file, unsupported type)."""


class FetchError(ScraperError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class VisionError(ScraperError):
    """The image model call failed or returned something unparseable."""


class ItemNotFoundError(ScraperError):
    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class ExtractionError(ScraperError):
    """All primary fields were missing from the document."""

    kind = "extraction_error"

    def __init__(self, message: str, page_title: str):
        super().__init__(message)
        self.page_title = page_title


class BotChallengeError(ExtractionError):
    kind = "bot_challenge"

    def __init__(self, page_title: str):
        super().__init__(
            "Failed to parse content. CAPTCHA or security check encountered on the "
            "target page. Try a different URL or check the page in your browser. "
            f"Page title: {page_title}",
            page_title,
        )


class StructureMismatchError(ExtractionError):
    kind = "structure_mismatch"

    def __init__(self, page_title: str):
        super().__init__(
            "Failed to parse critical content (title, author, year). The website "
            "structure might be different, unsupported, or it's not a recognized "
            f"product page. Page title: {page_title}",
            page_title,
        )


class EmptyCollectionError(InputError):
    def __init__(self):
        super().__init__("No collected items to export.")
