"""Data models for scraped book records."""

import uuid
from dataclasses import asdict, dataclass

TITLE_NOT_FOUND = "Title not found"
AUTHOR_NOT_FOUND = "Author not found"
PUBLICATION_DATE_NOT_FOUND = "Publication date not found"
PRINT_LENGTH_NOT_FOUND = "Print length not found"
FILE_SIZE_NOT_FOUND = "File size not found"
DESCRIPTION_NOT_FOUND = "Description not found"

SENTINELS = frozenset({
    TITLE_NOT_FOUND,
    AUTHOR_NOT_FOUND,
    PUBLICATION_DATE_NOT_FOUND,
    PRINT_LENGTH_NOT_FOUND,
    FILE_SIZE_NOT_FOUND,
    DESCRIPTION_NOT_FOUND,
})

# attribute name -> JSON key
WIRE_NAMES = {
    "title": "title",
    "author": "author",
    "publication_date": "publicationDate",
    "description": "description",
    "image_url": "imageUrl",
    "source_url": "sourceUrl",
    "print_length": "printLength",
    "file_size": "fileSize",
}


def is_sentinel(value: str) -> bool:
    """True when a field value stands for absence rather than content."""
    return not value or value in SENTINELS


def new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ScrapedRecord:
    title: str
    author: str
    publication_date: str
    description: str
    image_url: str
    source_url: str
    print_length: str
    file_size: str

    def to_dict(self) -> dict:
        return {WIRE_NAMES[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict) -> "ScrapedRecord":
        values = {}
        for attr, key in WIRE_NAMES.items():
            value = data.get(key)
            if value is None and attr == "publication_date":
                value = data.get("year")  # older exports
            values[attr] = "" if value is None else str(value)
        return cls(**values)


@dataclass(frozen=True)
class CollectedItem:
    id: str
    record: ScrapedRecord

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CollectedItem":
        return cls(id=str(data["id"]), record=ScrapedRecord.from_dict(data))
