"""Source registry."""

from .html_file import HtmlFileSource
from .image import ImageSource
from .url import UrlSource

ALL_SOURCES = {
    "url": UrlSource,
    "file": HtmlFileSource,
    "image": ImageSource,
}
