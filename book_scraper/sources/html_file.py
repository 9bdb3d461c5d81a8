"""Saved HTML pages uploaded or read from disk."""

import os

from ..errors import InputError
from ..extractor import DEFAULT_PLACEHOLDER_IMAGE, extract
from ..models import ScrapedRecord
from .base import BaseSource

HTML_EXTENSIONS = (".html", ".htm")


def scrape_html(html: str, filename: str,
                placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE) -> ScrapedRecord:
    if not filename.lower().endswith(HTML_EXTENSIONS):
        raise InputError(f"Please select an HTML or HTM file, got {filename!r}.")
    if not html or not html.strip():
        raise InputError("Could not read file content.")
    return extract(html, f"File: {filename}", placeholder_image)


def decode_upload(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


class HtmlFileSource(BaseSource):
    name = "file"

    def label(self, item: str) -> str:
        return os.path.basename(item)

    def scrape(self, item: str) -> ScrapedRecord:
        with open(item, "rb") as f:
            html = decode_upload(f.read())
        return scrape_html(html, os.path.basename(item), self.config.placeholder_image_url)
