"""Factory for boto3 S3 clients built from application settings."""

import boto3
import logging
from botocore.client import BaseClient
from botocore.config import Config
from typing import Optional

from storage_helper.config.settings import S3Settings, settings

logger = logging.getLogger(__name__)


def build_s3_client(s3_settings: Optional[S3Settings] = None) -> BaseClient:
    """
    Build an S3 client suitable for StorageHelper.

    The client signs with SigV4 (required for presigned GET URLs on every
    region and on MinIO). Credentials left unset fall back to the usual
    boto3 chain (environment, shared config, instance profile).

    Args:
        s3_settings: Connection settings, defaults to settings.s3

    Returns:
        boto3 S3 client
    """
    cfg = s3_settings or settings.s3
    logger.info(f"Initializing S3 client for region: {cfg.region}")

    client_kwargs = {
        "region_name": cfg.region,
        "config": Config(
            signature_version="s3v4",
            s3={
                "addressing_style": cfg.addressing_style,
            },
        ),
    }
    if cfg.endpoint_url:
        client_kwargs["endpoint_url"] = cfg.endpoint_url
    if cfg.access_key_id and cfg.secret_access_key:
        client_kwargs["aws_access_key_id"] = cfg.access_key_id
        client_kwargs["aws_secret_access_key"] = cfg.secret_access_key

    client = boto3.client("s3", **client_kwargs)
    logger.info(f"S3 client initialized, endpoint: {cfg.endpoint_url or 'AWS default'}")
    return client
