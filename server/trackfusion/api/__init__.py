"""Client for the Trackfusion REST API."""

from .base import ApiError, NetworkError, RequestDescriptor, RequestTimeoutError, TrackfusionError
from .client import TrackfusionClient
from .executor import RequestExecutor, build_query

__all__ = [
    "ApiError",
    "NetworkError",
    "RequestDescriptor",
    "RequestExecutor",
    "RequestTimeoutError",
    "TrackfusionClient",
    "TrackfusionError",
    "build_query",
]
