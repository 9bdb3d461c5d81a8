"""Book details from a cover photo via a hosted vision model."""

import base64
import json
import logging
import os
import re
from typing import Optional

from .config import VisionConfig
from .errors import InputError, VisionError

logger = logging.getLogger("book_scraper")

SUPPORTED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")
NOT_FOUND = "Not found"
COVER_FIELDS = ("title", "author", "year", "description")

SYSTEM_PROMPT = """You are an expert librarian and book cover analyst. \
Your task is to extract information about a book from the provided image of its cover."""

USER_PROMPT = """Analyze the image carefully to identify the following details:
- Book Title
- Author(s)
- Publication Year or Date (if visible)

If a synopsis or description is present on the cover, extract it. If not, generate a \
plausible, brief description based on the title, author, and cover art. The description \
should be about 2-3 sentences.

If a detail like the year is not visible, make an educated guess based on the author and \
title, or state "Not found".

Respond with a single JSON object with the string keys "title", "author" (multiple \
authors separated with commas), "year" and "description", and nothing else."""

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def check_mime_type(mime_type: str) -> str:
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime not in SUPPORTED_MIME_TYPES:
        raise InputError(f"Unsupported image type: {mime_type or 'unknown'}")
    return mime


def parse_cover_reply(text: str) -> dict:
    """Pull the first JSON object out of a model reply."""
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise VisionError("Model reply did not contain a JSON object")
    try:
        data = json.loads(match.group(0))
    except ValueError as e:
        raise VisionError(f"Model reply was not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise VisionError("Model reply was not a JSON object")

    info = {}
    for key in COVER_FIELDS:
        value = data.get(key)
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        info[key] = str(value).strip() if value not in (None, "") else NOT_FOUND
    return info


def describe_anthropic(data: bytes, mime_type: str, config: VisionConfig, client=None) -> str:
    """Ask Claude about the cover. Returns the raw reply text."""
    if client is None:
        import anthropic

        client = anthropic.Anthropic(api_key=os.environ.get("ANTHROPIC_API_KEY"))

    response = client.messages.create(
        model=config.anthropic_model,
        max_tokens=config.max_tokens,
        system=SYSTEM_PROMPT,
        messages=[{
            "role": "user",
            "content": [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": mime_type,
                        "data": base64.b64encode(data).decode("ascii"),
                    },
                },
                {"type": "text", "text": USER_PROMPT},
            ],
        }],
    )
    return "".join(block.text for block in response.content if block.type == "text")


def describe_openai(data: bytes, mime_type: str, config: VisionConfig, client=None) -> str:
    """Ask an OpenAI model about the cover. Returns the raw reply text."""
    if client is None:
        from openai import OpenAI

        client = OpenAI(api_key=os.environ.get("OPENAI_API_KEY"))

    response = client.chat.completions.create(
        model=config.openai_model,
        max_tokens=config.max_tokens,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": to_data_uri(data, mime_type)}},
                ],
            },
        ],
    )
    return response.choices[0].message.content or ""


PROVIDERS = {
    "anthropic": describe_anthropic,
    "openai": describe_openai,
}


def describe_cover(data: bytes, mime_type: str, config: VisionConfig,
                   provider: Optional[str] = None, client=None) -> dict:
    """Return {title, author, year, description} for a book cover image.

    Raises InputError for empty or unsupported images and VisionError when the
    model call fails or its reply can't be parsed.
    """
    if not data:
        raise InputError("Image file is empty.")
    mime = check_mime_type(mime_type)

    name = provider or config.provider
    if name not in PROVIDERS:
        raise InputError(f"Unknown vision provider: {name}")

    try:
        reply = PROVIDERS[name](data, mime, config, client=client)
    except (InputError, VisionError):
        raise
    except Exception as e:
        raise VisionError(f"Image analysis failed ({name}): {e}") from e

    info = parse_cover_reply(reply)
    logger.info(f"Cover analysed with {name}: {info['title']!r}")
    return info
