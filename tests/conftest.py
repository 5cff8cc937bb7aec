"""Shared fixtures: an in-memory stand-in for a boto3 S3 client."""

import io
from typing import Dict, Iterator, List, Tuple

import pytest
from botocore.exceptions import ClientError

from storage_helper.s3.helper import StorageHelper

CHUNK_SIZE = 8 * 1024


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class FakeBody(io.BytesIO):
    """StreamingBody look-alike that remembers whether it was closed."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.was_closed = False

    def close(self) -> None:
        self.was_closed = True
        super().close()


class FakePaginator:
    def __init__(self, client: "FakeS3Client"):
        self.client = client

    def paginate(self, Bucket: str, Prefix: str = "") -> Iterator[dict]:
        if Bucket not in self.client.buckets:
            raise client_error("NoSuchBucket", "ListObjectsV2")
        keys = sorted(k for (b, k) in self.client.objects if b == Bucket and k.startswith(Prefix))
        if not keys:
            yield {"KeyCount": 0}
            return
        size = self.client.page_size
        for start in range(0, len(keys), size):
            chunk = keys[start:start + size]
            yield {"KeyCount": len(chunk), "Contents": [{"Key": k} for k in chunk]}


class FakeS3Client:
    """Implements the handful of S3 client calls StorageHelper makes."""

    def __init__(self, buckets=("test-bucket",), page_size: int = 1000):
        self.buckets = set(buckets)
        self.page_size = page_size
        self.objects: Dict[Tuple[str, str], dict] = {}
        self.bodies: List[FakeBody] = []
        self.read_sizes: List[int] = []

    def put(self, bucket: str, key: str, data: bytes, content_type: str = "binary/octet-stream") -> None:
        self.objects[(bucket, key)] = {"Body": data, "ContentType": content_type}

    def get_object(self, Bucket: str, Key: str) -> dict:
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        obj = self.objects[(Bucket, Key)]
        body = FakeBody(obj["Body"])
        self.bodies.append(body)
        return {"Body": body, "ContentType": obj["ContentType"], "ContentLength": len(obj["Body"])}

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str = "binary/octet-stream") -> dict:
        if Bucket not in self.buckets:
            raise client_error("NoSuchBucket", "PutObject")
        self.put(Bucket, Key, Body, ContentType)
        return {"ETag": '"etag"'}

    def upload_fileobj(self, Fileobj, Bucket: str, Key: str) -> None:
        if Bucket not in self.buckets:
            raise client_error("NoSuchBucket", "PutObject")
        parts = []
        while True:
            chunk = Fileobj.read(CHUNK_SIZE)
            if not chunk:
                break
            self.read_sizes.append(len(chunk))
            parts.append(chunk)
        self.put(Bucket, Key, b"".join(parts))

    def get_paginator(self, operation_name: str) -> FakePaginator:
        assert operation_name == "list_objects_v2"
        return FakePaginator(self)

    def generate_presigned_url(self, ClientMethod: str, Params: dict, ExpiresIn: int, HttpMethod: str = None) -> str:
        return f"https://fake.example/{Params['Bucket']}/{Params['Key']}?Expires={ExpiresIn}"


@pytest.fixture
def fake_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def helper(fake_client: FakeS3Client) -> StorageHelper:
    return StorageHelper(fake_client)
