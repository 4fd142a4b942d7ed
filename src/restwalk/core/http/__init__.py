"""HTTP layer - admission control, typed requests, pagination."""

from .errors import (
    InvalidArgumentError,
    RemoteError,
    RestwalkError,
    UnknownStrategyError,
)
from .headers import first_header_value
from .paged import (
    MAX_ITEMS_PER_PAGE,
    FetchStrategy,
    PagedRequestor,
    paged_url,
    select_strategy,
)
from .requestor import Requestor
from .serialization import JsonSerializer
from .throttling import BATCH_THRESHOLD, AdmissionGate
from .uploads import Upload, UploadRequest

__all__ = [
    # Errors
    "RestwalkError",
    "RemoteError",
    "InvalidArgumentError",
    "UnknownStrategyError",
    # Admission control
    "AdmissionGate",
    "BATCH_THRESHOLD",
    # Requests
    "Requestor",
    "JsonSerializer",
    "Upload",
    "UploadRequest",
    # Pagination
    "PagedRequestor",
    "FetchStrategy",
    "MAX_ITEMS_PER_PAGE",
    "first_header_value",
    "paged_url",
    "select_strategy",
]
