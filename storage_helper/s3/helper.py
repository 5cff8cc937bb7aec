"""Short convenience operations over an S3-compatible storage client."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FuturesTimeout
from contextlib import closing, suppress
from os import PathLike
from typing import List, Optional, Union

from boto3.exceptions import Boto3Error
from botocore.client import BaseClient
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
)

from storage_helper.s3.errors import (
    BackendConnectionError,
    ListingError,
    ListingTimeoutError,
    LocalFileError,
    MissingClientError,
    SignedUrlError,
    StorageHelperError,
    TransferError,
)

default_logger = logging.getLogger(__name__)

DEFAULT_LIST_TIMEOUT_SECONDS = 10.0
TEXT_CONTENT_TYPE = "text/plain"

# Anything the SDK raises for a remote call
REMOTE_ERRORS = (BotoCoreError, ClientError, Boto3Error)
CONNECTION_ERRORS = (EndpointConnectionError, NoCredentialsError, PartialCredentialsError)

FilePath = Union[str, PathLike]


class StorageHelper:
    """
    Facade over one externally owned, already authenticated S3 client.

    The helper never creates or closes the client. It keeps no mutable
    state, so one instance can be shared between threads.
    """

    def __init__(
        self,
        client: Optional[BaseClient],
        logger: Optional[logging.Logger] = None,
        list_timeout: float = DEFAULT_LIST_TIMEOUT_SECONDS,
    ):
        self.logger = logger or default_logger
        if client is None:
            self.logger.warning("Tried to instantiate StorageHelper with an empty storage client")
            raise MissingClientError("StorageHelper requires a storage client", stage="init")
        self.client = client
        self.list_timeout = list_timeout

    @classmethod
    def from_client(
        cls,
        client: Optional[BaseClient],
        logger: Optional[logging.Logger] = None,
        list_timeout: float = DEFAULT_LIST_TIMEOUT_SECONDS,
    ) -> Optional["StorageHelper"]:
        """
        Build a helper, returning None instead of raising when client is None.

        The warning still goes to the given logger.
        """
        if client is None:
            (logger or default_logger).warning(
                "Tried to instantiate StorageHelper with an empty storage client"
            )
            return None
        return cls(client, logger=logger, list_timeout=list_timeout)

    def _remote_error(self, message: str, exc: Exception, bucket: str, key: str, stage: str) -> StorageHelperError:
        """Pick the error class for an SDK failure and log it."""
        error_cls = BackendConnectionError if isinstance(exc, CONNECTION_ERRORS) else TransferError
        self.logger.error(f"{message} s3://{bucket}/{key} ({stage}): {exc}")
        return error_cls(f"{message} s3://{bucket}/{key}: {exc}", bucket=bucket, key=key, stage=stage)

    def _local_error(self, message: str, exc: Exception, path: FilePath, bucket: str, key: str, stage: str) -> LocalFileError:
        self.logger.error(f"{message} {path} ({stage}): {exc}")
        return LocalFileError(f"{message} {path}: {exc}", bucket=bucket, key=key, stage=stage)

    def download(self, bucket: str, key: str, destination_path: FilePath) -> None:
        """
        Copy an object into a local file.

        The whole object is read into memory before it is written. A
        partially written file is left in place if the copy fails.

        Args:
            bucket: Bucket name
            key: Object key
            destination_path: Local file to create or truncate; its parent
                directory must exist

        Raises:
            LocalFileError: creating, writing or closing the local file failed
            TransferError: opening or reading the object failed
            BackendConnectionError: the backend was unreachable or credentials are missing
        """
        self.logger.info(f"Downloading s3://{bucket}/{key} to {destination_path}")
        try:
            local_file = open(destination_path, "wb")
        except OSError as exc:
            raise self._local_error("Failed to create", exc, destination_path, bucket, key, "create") from exc

        try:
            try:
                response = self.client.get_object(Bucket=bucket, Key=key)
            except REMOTE_ERRORS as exc:
                raise self._remote_error("Failed to open", exc, bucket, key, "open") from exc

            with closing(response["Body"]) as body:
                try:
                    data = body.read()
                except (OSError, *REMOTE_ERRORS) as exc:
                    raise self._remote_error("Failed to read", exc, bucket, key, "read") from exc

            try:
                local_file.write(data)
            except OSError as exc:
                raise self._local_error("Failed to write", exc, destination_path, bucket, key, "write") from exc
        except BaseException:
            # The original failure wins over a failed close
            with suppress(OSError):
                local_file.close()
            raise

        try:
            local_file.close()
        except OSError as exc:
            raise self._local_error("Failed to close", exc, destination_path, bucket, key, "close") from exc
        self.logger.info(f"Downloaded s3://{bucket}/{key}, size: {len(data)} bytes")

    def upload_text(self, bucket: str, key: str, text: str) -> None:
        """
        Store text as a text/plain object.

        Args:
            bucket: Bucket name
            key: Object key
            text: Content, stored UTF-8 encoded

        Raises:
            TransferError: the upload was not committed; the object may be absent
            BackendConnectionError: the backend was unreachable or credentials are missing
        """
        data = text.encode("utf-8")
        self.logger.info(f"Uploading text to s3://{bucket}/{key}, size: {len(data)} bytes")
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=TEXT_CONTENT_TYPE,
            )
        except REMOTE_ERRORS as exc:
            raise self._remote_error("Failed to upload", exc, bucket, key, "commit") from exc
        self.logger.info(f"Successfully uploaded s3://{bucket}/{key}")

    def upload_file(self, bucket: str, source_path: FilePath, key: str) -> None:
        """
        Stream a local file into an object.

        The file is read in chunks, never as a whole. No content type is
        set, so the backend default applies.

        Args:
            bucket: Bucket name
            source_path: Local file to read
            key: Destination object key

        Raises:
            LocalFileError: the local file could not be opened
            TransferError: the copy or its finalisation failed; a partial upload may remain
            BackendConnectionError: the backend was unreachable or credentials are missing
        """
        self.logger.info(f"Uploading {source_path} to s3://{bucket}/{key}")
        try:
            source = open(source_path, "rb")
        except OSError as exc:
            raise self._local_error("Failed to open", exc, source_path, bucket, key, "open") from exc

        with source:
            try:
                self.client.upload_fileobj(source, bucket, key)
            except (OSError, *REMOTE_ERRORS) as exc:
                raise self._remote_error("Failed to upload", exc, bucket, key, "copy") from exc
        self.logger.info(f"Successfully uploaded {source_path} to s3://{bucket}/{key}")

    def list_objects_with_prefix(self, bucket: str, prefix: str) -> List[str]:
        """
        List keys starting with prefix, in the order the backend returns them.

        The whole enumeration must finish within list_timeout seconds.
        Enumeration runs on a worker thread. On timeout the caller gets
        ListingTimeoutError straight away, while a worker blocked inside an
        SDK call keeps running until that call returns (it is not a daemon,
        so interpreter exit waits for it). It then stops at the next page
        boundary and its outcome is only logged.

        Args:
            bucket: Bucket name
            prefix: Key prefix, "" lists the whole bucket

        Returns:
            Object keys, empty if nothing matches

        Raises:
            ListingTimeoutError: the deadline passed before enumeration finished
            ListingError: enumeration failed
            BackendConnectionError: the backend was unreachable or credentials are missing
        """
        self.logger.info(f"Listing s3://{bucket} objects with prefix: {prefix}")
        deadline = time.monotonic() + self.list_timeout

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="storage-list")
        try:
            future = executor.submit(self._collect_keys, bucket, prefix, deadline)
            try:
                keys = future.result(timeout=self.list_timeout)
            except FuturesTimeout as exc:
                future.add_done_callback(lambda f: self._log_abandoned_listing(f, bucket, prefix))
                raise self._listing_timeout(bucket, prefix) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        self.logger.info(f"Found {len(keys)} objects in s3://{bucket} with prefix '{prefix}'")
        return keys

    def _listing_timeout(self, bucket: str, prefix: str) -> ListingTimeoutError:
        self.logger.error(f"Listing s3://{bucket} with prefix '{prefix}' timed out after {self.list_timeout}s")
        return ListingTimeoutError(
            f"Bucket({bucket!r}).list_objects_v2: timed out after {self.list_timeout}s",
            bucket=bucket,
            key=prefix,
            stage="list",
        )

    def _log_abandoned_listing(self, future: Future, bucket: str, prefix: str) -> None:
        """Report how a listing finished after its caller timed out."""
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.logger.warning(f"Abandoned listing of s3://{bucket} with prefix '{prefix}' failed: {exc}")
        else:
            self.logger.warning(f"Abandoned listing of s3://{bucket} with prefix '{prefix}' finished late")

    def _collect_keys(self, bucket: str, prefix: str, deadline: float) -> List[str]:
        keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                # Partial results never count as a listing
                if time.monotonic() > deadline:
                    raise self._listing_timeout(bucket, prefix)
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except REMOTE_ERRORS as exc:
            self.logger.error(f"Listing s3://{bucket} with prefix '{prefix}' failed: {exc}")
            error_cls = BackendConnectionError if isinstance(exc, CONNECTION_ERRORS) else ListingError
            raise error_cls(
                f"Bucket({bucket!r}).list_objects_v2: {exc}",
                bucket=bucket,
                key=prefix,
                stage="list",
            ) from exc
        return keys

    def generate_signed_url(self, bucket: str, key: str, expiration_minutes: float) -> str:
        """
        Presign a GET URL for an object, valid from now for expiration_minutes.

        The value is passed through unchecked; zero or negative values give
        a URL the backend will treat as expired.

        Args:
            bucket: Bucket name
            key: Object key
            expiration_minutes: Lifetime of the URL in minutes

        Returns:
            Signed URL

        Raises:
            SignedUrlError: signing failed, e.g. no credentials are available
        """
        expires_in = int(expiration_minutes * 60)
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
                HttpMethod="GET",
            )
        except REMOTE_ERRORS as exc:
            self.logger.error(f"Failed to sign URL for s3://{bucket}/{key}: {exc}")
            raise SignedUrlError(
                f"Bucket({bucket!r}).generate_presigned_url: {exc}",
                bucket=bucket,
                key=key,
                stage="sign",
            ) from exc
        self.logger.info(f"Generated signed URL for s3://{bucket}/{key}, expires in {expires_in}s")
        return url
