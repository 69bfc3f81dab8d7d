"""HTTP page fetcher with retry logic.

Downloads the page the reading view is built from.  Uses httpx for HTTP and
tenacity for retry-on-error.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from reader.config import Settings, load_settings

# Pages served as windows-1252 are decoded as iso-8859-1.
_ENCODING_OVERRIDES = {"windows-1252": "iso-8859-1"}


class FetchError(Exception):
    """The page could not be downloaded."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status_code = status_code


@dataclass
class FetchedPage:
    """A downloaded page: final URL, decoded text and the encoding used."""

    url: str
    html: str
    encoding: str | None
    status_code: int


def _is_retryable(exc: BaseException) -> bool:
    """Return True for transient errors that should be retried."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    if isinstance(exc, (httpx.ConnectError, httpx.ReadTimeout)):
        return True
    return False


def effective_encoding(hint: str | None) -> str | None:
    """Map a character-encoding hint to the codec used for decoding."""
    if not hint:
        return None
    hint = hint.strip().lower()
    return _ENCODING_OVERRIDES.get(hint, hint)


class PageFetcher:
    """Synchronous page fetcher.

    Reads its timeout and user agent from ``Settings``.  Retries on 429 /
    5xx and connection errors with exponential backoff.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._client: httpx.Client = httpx.Client(
            timeout=self.settings.fetch_timeout,
            follow_redirects=True,
            headers={"User-Agent": self.settings.user_agent},
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2.0),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    def _get(self, url: str) -> httpx.Response:
        resp = self._client.get(url)
        resp.raise_for_status()
        return resp

    def fetch(self, url: str, encoding_hint: str | None = None) -> FetchedPage:
        """Download *url* and decode it.

        Args:
            url: Absolute page URL.
            encoding_hint: Character encoding to decode with instead of the
                one the server declares.

        Returns:
            The decoded page.

        Raises:
            FetchError: On HTTP errors (after retries) and transport errors.
        """
        try:
            resp = self._get(url)
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                url, f"HTTP {exc.response.status_code}", exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

        encoding = effective_encoding(encoding_hint)
        if encoding is not None:
            resp.encoding = encoding
        return FetchedPage(
            url=str(resp.url),
            html=resp.text,
            encoding=resp.encoding,
            status_code=resp.status_code,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None:
            self._client.close()
