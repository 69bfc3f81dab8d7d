"""Response models for the reading-view endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from parsing.images import ImageRecord
    from parsing.links import LinkRecord
    from reader.pipeline import PipelineResult


class LinkOut(BaseModel):
    """A more-link or navigation link of the reading view."""

    href: str
    text: str

    @classmethod
    def from_record(cls, record: LinkRecord) -> LinkOut:
        return cls(href=record.href, text=record.text.strip())


class ImageOut(BaseModel):
    """An image put back into the reading view after pruning."""

    src: str
    alt: str
    index: int

    @classmethod
    def from_record(cls, record: ImageRecord) -> ImageOut:
        return cls(src=record.source, alt=record.alt, index=record.index)


class TranquilizeResponse(BaseModel):
    """Response body for both reading-view endpoints."""

    url: str
    title: str
    html: str
    more_links: list[LinkOut] = []
    nav_links: list[LinkOut] = []
    restored_images: list[ImageOut] = []

    @classmethod
    def from_result(cls, result: PipelineResult) -> TranquilizeResponse:
        return cls(
            url=result.url,
            title=result.title,
            html=result.html,
            more_links=[LinkOut.from_record(r) for r in result.more_links],
            nav_links=[LinkOut.from_record(r) for r in result.nav_links],
            restored_images=[ImageOut.from_record(r) for r in result.restored_images],
        )


class ErrorResponse(BaseModel):
    """Body of 4xx/5xx responses."""

    error: str
    detail: str
