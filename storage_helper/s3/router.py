"""FastAPI router exposing the remote-only StorageHelper operations."""

import logging
from functools import lru_cache
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from typing import List, Optional

from storage_helper.config.settings import settings
from storage_helper.s3.client import build_s3_client
from storage_helper.s3.errors import ListingTimeoutError, StorageHelperError
from storage_helper.s3.helper import StorageHelper

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/objects", tags=["Objects"])


@lru_cache
def get_helper() -> StorageHelper:
    """Shared helper wired from settings (overridden in tests)."""
    return StorageHelper(
        build_s3_client(settings.s3),
        logger=logging.getLogger("storage_helper.s3.helper"),
        list_timeout=settings.helper.list_timeout_seconds,
    )


# =======================
# Request/Response Models
# =======================
class ObjectList(BaseModel):
    """Keys found under a prefix."""
    bucket: str
    prefix: str
    keys: List[str]
    count: int


class SignedUrlResponse(BaseModel):
    """A presigned GET URL."""
    bucket: str
    key: str
    url: str
    expiration_minutes: float


class TextUploadResponse(BaseModel):
    """Response after uploading text."""
    bucket: str
    key: str
    size: int


# =======================
# GET Endpoints
# =======================
@router.get("", response_model=ObjectList)
def list_objects(
    bucket: str = Query(..., description="Bucket name"),
    prefix: str = Query("", description="Key prefix"),
    helper: StorageHelper = Depends(get_helper),
):
    """List object keys starting with prefix, in backend order."""
    try:
        keys = helper.list_objects_with_prefix(bucket, prefix)
    except ListingTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    except StorageHelperError as e:
        logger.error(f"Error listing objects: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Error listing objects: {str(e)}")
    return {"bucket": bucket, "prefix": prefix, "keys": keys, "count": len(keys)}


@router.get("/signed-url", response_model=SignedUrlResponse)
def signed_url(
    bucket: str = Query(..., description="Bucket name"),
    key: str = Query(..., description="Object key"),
    expiration_minutes: Optional[float] = Query(None, description="URL lifetime in minutes"),
    helper: StorageHelper = Depends(get_helper),
):
    """Presign a GET URL for an object."""
    if expiration_minutes is None:
        expiration_minutes = settings.helper.signed_url_expiration_minutes
    try:
        url = helper.generate_signed_url(bucket, key, expiration_minutes)
    except StorageHelperError as e:
        logger.error(f"Error signing URL: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Error signing URL: {str(e)}")
    return {"bucket": bucket, "key": key, "url": url, "expiration_minutes": expiration_minutes}


# =======================
# PUT Endpoints
# =======================
@router.put("/text", response_model=TextUploadResponse)
async def upload_text(
    request: Request,
    bucket: str = Query(..., description="Bucket name"),
    key: str = Query(..., description="Object key"),
    helper: StorageHelper = Depends(get_helper),
):
    """Store the raw request body as a text/plain object."""
    try:
        text = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Body must be UTF-8 text")
    try:
        await run_in_threadpool(helper.upload_text, bucket, key, text)
    except StorageHelperError as e:
        logger.error(f"Error uploading text: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Error uploading text: {str(e)}")
    return {"bucket": bucket, "key": key, "size": len(text.encode("utf-8"))}


__all__ = ["router", "get_helper"]
