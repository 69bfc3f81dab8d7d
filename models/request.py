"""Request models with strict validation (extra=forbid)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TranquilizeRequest(BaseModel):
    """Request body for ``POST /tranquilize``.

    ``html`` is the already fetched page.  When it is omitted the service
    fetches ``url`` itself.  Extra fields are rejected with a 422 response.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(min_length=1)
    html: Optional[str] = None
    encoding: Optional[str] = None


class SelectionRequest(BaseModel):
    """Request body for ``POST /tranquilize/selection``.

    ``selection_html`` replaces the body of ``page_html`` (when given)
    before the pipeline runs.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(min_length=1)
    selection_html: str
    page_html: Optional[str] = None
