"""FastAPI server for the book scraper."""

import json
import os
from typing import List

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from book_scraper.config import AppConfig, load_config
from book_scraper.errors import (
    EmptyCollectionError,
    ExtractionError,
    FetchError,
    InputError,
    ItemNotFoundError,
    VisionError,
)
from book_scraper.exporter import collection_filename, filter_sentinels, record_filename, to_json
from book_scraper.extractor import extract
from book_scraper.fetcher import Fetcher
from book_scraper.logger import setup_logger
from book_scraper.models import ScrapedRecord
from book_scraper.sources.base import BatchResult
from book_scraper.sources.html_file import decode_upload, scrape_html
from book_scraper.sources.image import scrape_image
from book_scraper.store import CollectionStore

load_dotenv()

app = FastAPI(
    title="Book Scraper API",
    version="0.1.0",
    description=(
        "Extract book metadata from product pages, saved HTML files and cover "
        "photos, curate the results and export them as JSON."
    ),
)

# --- Rate limiting ---
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return Response(
        content=json.dumps({"error": "Rate limit exceeded. Please slow down."}),
        status_code=429,
        media_type="application/json",
    )


# --- Error mapping ---

@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    return JSONResponse(
        status_code=422,
        content={"error": str(exc), "kind": exc.kind, "page_title": exc.page_title},
    )


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    return JSONResponse(
        status_code=502,
        content={"error": str(exc), "status_code": exc.status_code},
    )


@app.exception_handler(VisionError)
async def vision_error_handler(request: Request, exc: VisionError):
    return JSONResponse(status_code=502, content={"error": str(exc)})


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(EmptyCollectionError)
async def empty_collection_handler(request: Request, exc: EmptyCollectionError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(ItemNotFoundError)
async def item_not_found_handler(request: Request, exc: ItemNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


# --- CORS ---
default_origins = "http://localhost:3000,http://127.0.0.1:3000"
cors_origins = os.environ.get("CORS_ORIGINS", default_origins).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def powered_by_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Powered-By"] = "book-scraper"
    return response


# --- Dependencies ---

_config = None
_store = None


def get_config() -> AppConfig:
    global _config
    if _config is None:
        _config = load_config(os.environ.get("BOOK_SCRAPER_CONFIG", "config.yaml"))
        setup_logger(_config.log_dir)
    return _config


def get_store(config: AppConfig = Depends(get_config)) -> CollectionStore:
    global _store
    if _store is None:
        _store = CollectionStore(config.db_path, config.collection.namespace)
    return _store


def get_fetcher(config: AppConfig = Depends(get_config)):
    fetcher = Fetcher(config.fetch)
    try:
        yield fetcher
    finally:
        fetcher.close()


def get_vision_client():
    """Provider client for cover analysis; None lets vision build its own."""
    return None


# --- Models ---

class ScrapeUrlRequest(BaseModel):
    url: str


class RecordBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    author: str = ""
    publication_date: str = Field("", alias="publicationDate")
    description: str = ""
    image_url: str = Field("", alias="imageUrl")
    source_url: str = Field("", alias="sourceUrl")
    print_length: str = Field("", alias="printLength")
    file_size: str = Field("", alias="fileSize")

    def to_record(self) -> ScrapedRecord:
        return ScrapedRecord(**self.model_dump())


def attachment(payload, filename: str) -> Response:
    return Response(
        content=to_json(payload),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def batch_to_dict(result: BatchResult) -> dict:
    return {
        "records": [record.to_dict() for _, record in result.records],
        "errors": [{"source": label, "error": message} for label, message in result.errors],
        "success_count": result.success_count,
        "error_count": result.error_count,
    }


# --- Routes ---

@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "book-scraper-api"}


@app.post("/api/scrape/url")
@limiter.limit("10/minute")
def scrape_url(request: Request, req: ScrapeUrlRequest,
               config: AppConfig = Depends(get_config),
               fetcher: Fetcher = Depends(get_fetcher)):
    """Fetch a product page and extract its book record."""
    html = fetcher.fetch_html(req.url)
    return extract(html, req.url.strip(), config.placeholder_image_url).to_dict()


@app.post("/api/scrape/html")
@limiter.limit("30/minute")
async def scrape_html_file(request: Request, file: UploadFile = File(...),
                           config: AppConfig = Depends(get_config)):
    """Extract a book record from an uploaded .html/.htm page."""
    content = decode_upload(await file.read())
    record = scrape_html(content, file.filename or "", config.placeholder_image_url)
    return record.to_dict()


@app.post("/api/scrape/image")
@limiter.limit("10/minute")
def scrape_images(request: Request, files: List[UploadFile] = File(...),
                  provider: str | None = None,
                  config: AppConfig = Depends(get_config),
                  client=Depends(get_vision_client)):
    """Read one or more cover photos. Per-file failures are reported, not raised."""
    result = BatchResult()
    for upload in files:
        name = upload.filename or "image"
        try:
            record = scrape_image(
                upload.file.read(), upload.content_type or "", name, config.vision,
                provider=provider, client=client,
            )
        except (InputError, VisionError) as e:
            result.errors.append((name, str(e)))
            continue
        result.records.append((name, record))
    return batch_to_dict(result)


@app.get("/api/items")
@limiter.limit("60/minute")
def list_items(request: Request, store: CollectionStore = Depends(get_store)):
    items = store.list_items()
    return {"items": [i.to_dict() for i in items], "total": len(items)}


@app.post("/api/items", status_code=201)
@limiter.limit("60/minute")
def add_item(request: Request, body: RecordBody, store: CollectionStore = Depends(get_store)):
    return store.add(body.to_record()).to_dict()


@app.get("/api/items/{item_id}")
@limiter.limit("60/minute")
def get_item(request: Request, item_id: str, store: CollectionStore = Depends(get_store)):
    return store.get(item_id).to_dict()


@app.put("/api/items/{item_id}")
@limiter.limit("60/minute")
def update_item(request: Request, item_id: str, body: RecordBody,
                store: CollectionStore = Depends(get_store)):
    return store.update(item_id, body.to_record()).to_dict()


@app.delete("/api/items/{item_id}")
@limiter.limit("60/minute")
def remove_item(request: Request, item_id: str, store: CollectionStore = Depends(get_store)):
    return store.remove(item_id).to_dict()


@app.get("/api/items/{item_id}/export")
@limiter.limit("60/minute")
def export_item(request: Request, item_id: str, skip_missing: bool = False,
                store: CollectionStore = Depends(get_store)):
    item = store.get(item_id)
    data = item.record.to_dict()
    if skip_missing:
        data = filter_sentinels(data)
    return attachment(data, record_filename(item.record.title))


@app.get("/api/export")
@limiter.limit("20/minute")
def export_collection(request: Request, skip_missing: bool = False,
                      store: CollectionStore = Depends(get_store)):
    """Download every collected item as one JSON file and clear the collection."""
    items = store.export_all()
    if skip_missing:
        items = [filter_sentinels(i) for i in items]
    return attachment(items, collection_filename())
