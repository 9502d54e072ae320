# Copyright 2025 s3sftp contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Object store interface consumed by the SFTP driver.

The driver needs exactly five capabilities from its storage backend: prefix
listing (with delimiter grouping, a key cap and continuation tokens), get,
put, delete and server-side copy. ``ObjectStore`` declares them; two
implementations are provided:

    - S3ObjectStore: boto3-backed, for AWS S3 and S3-compatible services
    - MemoryObjectStore: in-process dict emulating S3 listing semantics,
      for tests and local development

All keys handed to a store are already-translated canonical keys. Errors from
boto3/botocore are never wrapped; callers see the original ``ClientError``.

Usage:
    client = create_s3_client(region="eu-west-1")
    store = S3ObjectStore(client, bucket="sftp-uploads")

    page = store.list_objects("sftp/alice/", delimiter="/")
    for obj in page.objects:
        print(obj.key, obj.size)
"""

import io
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, BinaryIO, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

SSE_AES256 = "AES256"
SSE_KMS = "aws:kms"

# S3 returns at most this many keys per ListObjectsV2 page
DEFAULT_MAX_KEYS = 1000


@dataclass(frozen=True)
class Encryption:
    """
    Server-side encryption directive applied to every write.

    Fixed per driver instance: a KMS key id selects SSE-KMS with that key,
    otherwise the provider's default AES256 encryption is requested.
    """

    algorithm: str = SSE_AES256
    kms_key_id: Optional[str] = None

    @classmethod
    def for_kms_key(cls, kms_key_id: Optional[str]) -> "Encryption":
        if kms_key_id:
            return cls(algorithm=SSE_KMS, kms_key_id=kms_key_id)
        return cls()

    def to_request_args(self) -> Dict[str, str]:
        """Encryption parameters in boto3 request form."""
        args = {"ServerSideEncryption": self.algorithm}
        if self.kms_key_id:
            args["SSEKMSKeyId"] = self.kms_key_id
        return args


@dataclass(frozen=True)
class StoredObject:
    """One object as reported by a listing."""

    key: str
    size: int
    last_modified: datetime


@dataclass
class ListPage:
    """
    One page of a prefix listing.

    Attributes:
        objects: Objects directly matched, in key order
        common_prefixes: Grouped prefixes (each ending in the delimiter)
        is_truncated: True when more pages follow
        next_continuation_token: Opaque cursor for the next page
        key_count: Number of objects plus common prefixes on this page
    """

    objects: List[StoredObject] = field(default_factory=list)
    common_prefixes: List[str] = field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: Optional[str] = None
    key_count: int = 0


class ObjectStore(ABC):
    """Capabilities the driver needs from a flat key/value object store."""

    @abstractmethod
    def list_objects(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> ListPage:
        """
        List one page of objects whose keys start with ``prefix``.

        Args:
            prefix: Key prefix to match
            delimiter: Group keys sharing a prefix up to this string
            continuation_token: Cursor from a previous truncated page
            max_keys: Cap on objects plus common prefixes returned

        Returns:
            ListPage for the requested page
        """
        pass

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """Delete an object. Succeeds even if the key does not exist."""
        pass

    @abstractmethod
    def copy_object(self, source_key: str, dest_key: str, encryption: Encryption) -> None:
        """Copy an object server-side within the bucket."""
        pass

    @abstractmethod
    def put_object(self, key: str, body: bytes, encryption: Encryption) -> None:
        """Write an object with a fully-buffered body."""
        pass

    @abstractmethod
    def get_object(self, key: str) -> BinaryIO:
        """
        Open an object for reading.

        Returns:
            Readable binary stream over the object content. The caller
            closes it.
        """
        pass


def create_s3_client(
    region: str = "us-east-1",
    endpoint_url: Optional[str] = None,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
) -> "S3Client":
    """
    Build a boto3 S3 client.

    Static credentials are used when given; otherwise boto3 falls back to
    its default chain (environment, shared config, instance role).
    """
    client_kwargs: Dict[str, Any] = {
        "service_name": "s3",
        "region_name": region,
        "config": BotoConfig(
            signature_version="s3v4",
            retries={"max_attempts": 3, "mode": "adaptive"},
        ),
    }

    if endpoint_url:
        client_kwargs["endpoint_url"] = endpoint_url

    if access_key_id and secret_access_key:
        client_kwargs["aws_access_key_id"] = access_key_id
        client_kwargs["aws_secret_access_key"] = secret_access_key
        if session_token:
            client_kwargs["aws_session_token"] = session_token

    return boto3.client(**client_kwargs)


class S3ObjectStore(ObjectStore):
    """
    Amazon S3 implementation of ObjectStore.

    Each method issues exactly one boto3 call against ``bucket``.
    """

    def __init__(self, client: "S3Client", bucket: str):
        self._client = client
        self.bucket_name = bucket

    def list_objects(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> ListPage:
        request: Dict[str, Any] = {"Bucket": self.bucket_name, "Prefix": prefix}
        if delimiter:
            request["Delimiter"] = delimiter
        if continuation_token:
            request["ContinuationToken"] = continuation_token
        if max_keys is not None:
            request["MaxKeys"] = max_keys

        response = self._client.list_objects_v2(**request)

        return ListPage(
            objects=[
                StoredObject(key=obj["Key"], size=obj["Size"], last_modified=obj["LastModified"])
                for obj in response.get("Contents", [])
            ],
            common_prefixes=[cp["Prefix"] for cp in response.get("CommonPrefixes", [])],
            is_truncated=response.get("IsTruncated", False),
            next_continuation_token=response.get("NextContinuationToken"),
            key_count=response.get("KeyCount", 0),
        )

    def delete_object(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket_name, Key=key)

    def copy_object(self, source_key: str, dest_key: str, encryption: Encryption) -> None:
        self._client.copy_object(
            Bucket=self.bucket_name,
            CopySource=f"{self.bucket_name}/{source_key}",
            Key=dest_key,
            **encryption.to_request_args(),
        )

    def put_object(self, key: str, body: bytes, encryption: Encryption) -> None:
        self._client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            **encryption.to_request_args(),
        )

    def get_object(self, key: str) -> BinaryIO:
        response = self._client.get_object(Bucket=self.bucket_name, Key=key)
        return response["Body"]


@dataclass
class _MemoryObject:
    body: bytes
    last_modified: datetime
    encryption: Encryption


class MemoryObjectStore(ObjectStore):
    """
    In-memory ObjectStore emulating S3 semantics.

    Listing follows ListObjectsV2: keys in lexicographic order, delimiter
    grouping into common prefixes, a per-page cap and continuation tokens.
    Missing keys raise the same ``ClientError`` codes S3 would.

    Usage:
        store = MemoryObjectStore(page_size=2)
        store.put_object("home/a", b"1", Encryption())
    """

    def __init__(self, page_size: int = DEFAULT_MAX_KEYS):
        self.page_size = page_size
        self._lock = threading.Lock()
        self._objects: Dict[str, _MemoryObject] = {}

    @staticmethod
    def _no_such_key(key: str, operation: str) -> ClientError:
        return ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": f"The specified key does not exist: {key}"}},
            operation,
        )

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._objects)

    def read(self, key: str) -> bytes:
        """Return an object's content directly (test and debugging helper)."""
        with self._lock:
            if key not in self._objects:
                raise self._no_such_key(key, "GetObject")
            return self._objects[key].body

    def encryption_of(self, key: str) -> Encryption:
        with self._lock:
            return self._objects[key].encryption

    def list_objects(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> ListPage:
        limit = self.page_size if max_keys is None else min(max_keys, self.page_size)
        page = ListPage()
        last_emitted: Optional[str] = None

        for key in self.keys():
            if not key.startswith(prefix):
                continue
            if continuation_token is not None:
                if key <= continuation_token:
                    continue
                # Resuming after a common prefix skips everything grouped under it
                if delimiter and continuation_token.endswith(delimiter) and continuation_token != prefix:
                    if key.startswith(continuation_token):
                        continue

            rest = key[len(prefix) :]
            entry = key
            is_group = False
            if delimiter and delimiter in rest:
                entry = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                is_group = True
                if page.common_prefixes and page.common_prefixes[-1] == entry:
                    continue

            if page.key_count >= limit:
                page.is_truncated = True
                page.next_continuation_token = last_emitted
                break

            if is_group:
                page.common_prefixes.append(entry)
            else:
                with self._lock:
                    stored = self._objects.get(key)
                if stored is None:
                    continue
                page.objects.append(
                    StoredObject(key=key, size=len(stored.body), last_modified=stored.last_modified)
                )
            page.key_count += 1
            last_emitted = entry

        return page

    def delete_object(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)

    def copy_object(self, source_key: str, dest_key: str, encryption: Encryption) -> None:
        with self._lock:
            source = self._objects.get(source_key)
            if source is None:
                raise self._no_such_key(source_key, "CopyObject")
            self._objects[dest_key] = _MemoryObject(
                body=source.body,
                last_modified=datetime.now(timezone.utc),
                encryption=encryption,
            )

    def put_object(self, key: str, body: bytes, encryption: Encryption) -> None:
        with self._lock:
            self._objects[key] = _MemoryObject(
                body=bytes(body),
                last_modified=datetime.now(timezone.utc),
                encryption=encryption,
            )

    def get_object(self, key: str) -> BinaryIO:
        return io.BytesIO(self.read(key))
