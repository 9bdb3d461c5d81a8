"""Live product-page fetch."""

from ..extractor import extract
from ..fetcher import Fetcher
from ..models import ScrapedRecord
from .base import BaseSource


class UrlSource(BaseSource):
    name = "url"

    def scrape(self, item: str) -> ScrapedRecord:
        if self.fetcher is None:
            self.fetcher = Fetcher(self.config.fetch)
        html = self.fetcher.fetch_html(item)
        return extract(html, item.strip(), self.config.placeholder_image_url)
