"""Public re-exports of all model types."""

from models.request import SelectionRequest, TranquilizeRequest
from models.response import ErrorResponse, ImageOut, LinkOut, TranquilizeResponse

__all__ = [
    # Requests
    "TranquilizeRequest",
    "SelectionRequest",
    # Responses
    "TranquilizeResponse",
    "LinkOut",
    "ImageOut",
    "ErrorResponse",
]
