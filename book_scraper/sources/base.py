"""Abstract base class for all input sources."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from ..config import AppConfig
from ..errors import ScraperError
from ..fetcher import Fetcher
from ..models import ScrapedRecord

logger = logging.getLogger("book_scraper")


@dataclass
class BatchResult:
    records: List[Tuple[str, ScrapedRecord]] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class BaseSource(ABC):
    name: str = ""

    def __init__(self, config: AppConfig, fetcher: Optional[Fetcher] = None,
                 vision_client: Any = None, provider: Optional[str] = None):
        self.config = config
        self.fetcher = fetcher
        self.vision_client = vision_client
        self.provider = provider

    @abstractmethod
    def scrape(self, item: str) -> ScrapedRecord:
        """Produce one record from one input (a URL or a file path)."""
        ...

    def label(self, item: str) -> str:
        return item

    def run(self, items: Iterable[str]) -> BatchResult:
        """Scrape each input in turn. A failure is recorded and the batch goes on."""
        result = BatchResult()
        for item in items:
            label = self.label(item)
            try:
                record = self.scrape(item)
            except (ScraperError, OSError) as e:
                result.errors.append((label, str(e)))
                logger.error(f"[{self.name}] Failed: {label}: {e}")
                continue
            result.records.append((label, record))
            logger.info(f"[{self.name}] Extracted: {label} -> {record.title!r}")

        logger.info(
            f"[{self.name}] Done: {result.success_count} processed, "
            f"{result.error_count} failed"
        )
        return result
