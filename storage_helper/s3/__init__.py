"""S3 storage module: StorageHelper and its client factory."""

from .client import build_s3_client
from .errors import (
    BackendConnectionError,
    ListingError,
    ListingTimeoutError,
    LocalFileError,
    MissingClientError,
    SignedUrlError,
    StorageHelperError,
    TransferError,
)
from .helper import StorageHelper

__all__ = [
    "StorageHelper",
    "build_s3_client",
    "StorageHelperError",
    "MissingClientError",
    "LocalFileError",
    "BackendConnectionError",
    "TransferError",
    "ListingError",
    "ListingTimeoutError",
    "SignedUrlError",
]
