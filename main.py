"""FastAPI application for the Tranquil reading-view service.

Exports ``app`` for use with ``uvicorn main:app``.
"""

import json
import logging
import traceback
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Load .env from the service directory so TRANQUIL_* settings are set
load_dotenv(Path(__file__).resolve().parent / ".env")

from fetch.client import FetchError, PageFetcher
from models.request import SelectionRequest, TranquilizeRequest
from models.response import ErrorResponse, TranquilizeResponse
from reader.config import load_settings
from reader.pipeline import (
    EmptyDocumentError,
    EmptySelectionError,
    tranquilize,
    tranquilize_selection,
)

settings = load_settings()


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Include optional extra fields when present
        for key in (
            "url",
            "stage",
            "removed",
            "images",
            "more_links",
            "nav_links",
            "size",
            "status_code",
        ):
            val = getattr(record, key, None)
            if val is not None:
                log_data[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


_handler = logging.StreamHandler()
_handler.setFormatter(StructuredFormatter())

logger = logging.getLogger("reader")
logger.addHandler(_handler)
logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
# Prevent propagation to root logger to avoid duplicate output
logger.propagate = False


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="Tranquil Reader")

# Module-level singleton for the page fetcher (lazy init).
_fetcher: PageFetcher | None = None


def _get_fetcher() -> PageFetcher:
    """Return the module-level fetcher, creating it on first use."""
    global _fetcher  # noqa: PLW0603
    if _fetcher is None:
        _fetcher = PageFetcher(settings)
    return _fetcher


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(EmptyDocumentError)
async def empty_document_handler(request: Request, exc: EmptyDocumentError) -> JSONResponse:
    """No body content: nothing to extract."""
    logger.warning("empty document: %s", exc)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="empty_document", detail=str(exc)).model_dump(),
    )


@app.exception_handler(EmptySelectionError)
async def empty_selection_handler(request: Request, exc: EmptySelectionError) -> JSONResponse:
    """Empty selection is reported instead of returning an empty page."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="empty_selection", detail=str(exc)).model_dump(),
    )


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    """Upstream page could not be downloaded."""
    logger.warning(
        "fetch failed",
        extra={"url": exc.url, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=502,
        content=ErrorResponse(error="fetch_failed", detail=str(exc)).model_dump(),
    )


@app.exception_handler(Exception)
async def catch_all_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and report a 500."""
    logger.error(
        "Unhandled exception: %s: %s\n%s",
        type(exc).__name__,
        exc,
        traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="internal_error", detail=type(exc).__name__).model_dump(),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    """Health check."""
    return {"status": "healthy"}


@app.post("/tranquilize", response_model=TranquilizeResponse)
def tranquilize_page(request: TranquilizeRequest) -> TranquilizeResponse:
    """Build the reading view of a page.

    Uses ``request.html`` when given, otherwise fetches ``request.url`` and
    builds the view against the final URL after redirects.
    """
    html = request.html
    url = request.url
    if html is None:
        page = _get_fetcher().fetch(url, request.encoding)
        html = page.html
        url = page.url
        logger.info("fetched", extra={"url": page.url, "status_code": page.status_code})

    result = tranquilize(html, url, nav_words=settings.nav_words)
    return TranquilizeResponse.from_result(result)


@app.post("/tranquilize/selection", response_model=TranquilizeResponse)
def tranquilize_selected(request: SelectionRequest) -> TranquilizeResponse:
    """Build the reading view of a user-selected fragment."""
    result = tranquilize_selection(
        request.selection_html,
        request.url,
        page_html=request.page_html,
        nav_words=settings.nav_words,
    )
    return TranquilizeResponse.from_result(result)
