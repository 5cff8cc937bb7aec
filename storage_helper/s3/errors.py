"""Exceptions raised by StorageHelper operations."""

from typing import Optional


class StorageHelperError(Exception):
    """Base class for every error raised by the helper.

    Carries the object reference and the stage of the operation that failed
    so callers can tell e.g. a failed local write from a failed remote read.
    """

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        self.message = message
        self.bucket = bucket
        self.key = key
        self.stage = stage
        super().__init__(message)


class MissingClientError(StorageHelperError):
    """The helper was constructed without a storage client."""


class LocalFileError(StorageHelperError):
    """Creating, opening, writing or closing a local file failed."""


class BackendConnectionError(StorageHelperError):
    """The backend could not be reached or refused our credentials."""


class TransferError(StorageHelperError):
    """Reading or writing object data failed mid-transfer."""


class ListingError(TransferError):
    """Enumerating a bucket failed; partial results are discarded."""


class ListingTimeoutError(StorageHelperError, TimeoutError):
    """Enumerating a bucket did not finish before the deadline."""


class SignedUrlError(StorageHelperError):
    """Presigning a URL failed, usually for lack of signing credentials."""
