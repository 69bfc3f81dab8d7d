"""Page fetching over HTTP."""

from fetch.client import FetchedPage, FetchError, PageFetcher

__all__ = ["FetchError", "FetchedPage", "PageFetcher"]
