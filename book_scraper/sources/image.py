"""Book cover photos, read by a vision model."""

import mimetypes
import os
from typing import Any, Optional

from ..config import VisionConfig
from ..models import ScrapedRecord
from ..vision import check_mime_type, describe_cover, to_data_uri
from .base import BaseSource


def scrape_image(data: bytes, mime_type: str, filename: str, config: VisionConfig,
                 provider: Optional[str] = None, client: Any = None) -> ScrapedRecord:
    mime = check_mime_type(mime_type)
    info = describe_cover(data, mime, config, provider=provider, client=client)
    return ScrapedRecord(
        title=info["title"],
        author=info["author"],
        publication_date=info["year"],
        description=info["description"],
        image_url=to_data_uri(data, mime),
        source_url=f"Image Upload: {filename}",
        # a cover photo says nothing about these
        print_length="",
        file_size="",
    )


class ImageSource(BaseSource):
    name = "image"

    def label(self, item: str) -> str:
        return os.path.basename(item)

    def scrape(self, item: str) -> ScrapedRecord:
        mime_type, _ = mimetypes.guess_type(item)
        with open(item, "rb") as f:
            data = f.read()
        return scrape_image(
            data, mime_type or "", os.path.basename(item), self.config.vision,
            provider=self.provider, client=self.vision_client,
        )
