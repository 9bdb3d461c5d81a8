"""YAML config loader."""

import os
from dataclasses import dataclass, field

import yaml


@dataclass
class FetchConfig:
    timeout: int = 30
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"


@dataclass
class VisionConfig:
    provider: str = "anthropic"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_model: str = "gpt-4o"
    max_tokens: int = 1024


@dataclass
class CollectionConfig:
    namespace: str = "webScraperCollectedItems"
    export_dir: str = "exports"


@dataclass
class AppConfig:
    data_dir: str = "data"
    db_path: str = "book_scraper.db"
    log_dir: str = "logs"
    placeholder_image_url: str = "https://placehold.co/600x400.png"
    fetch: FetchConfig = field(default_factory=FetchConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)
    collection: CollectionConfig = field(default_factory=CollectionConfig)


def _section(cls, raw: dict):
    return cls(**{k: v for k, v in (raw or {}).items() if k in cls.__dataclass_fields__})


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load config from YAML. A missing file yields the built-in defaults."""
    if not config_path or not os.path.exists(config_path):
        return AppConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    defaults = AppConfig()
    return AppConfig(
        data_dir=raw.get("data_dir", defaults.data_dir),
        db_path=raw.get("db_path", defaults.db_path),
        log_dir=raw.get("log_dir", defaults.log_dir),
        placeholder_image_url=raw.get("placeholder_image_url", defaults.placeholder_image_url),
        fetch=_section(FetchConfig, raw.get("fetch")),
        vision=_section(VisionConfig, raw.get("vision")),
        collection=_section(CollectionConfig, raw.get("collection")),
    )
