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
Pytest fixtures for s3sftp tests.

Provides RecordingObjectStore, an in-memory store that remembers every call
made to it, so tests can assert both the resulting state and the exact
storage traffic an operation produced.
"""

from typing import Any, List, Optional, Tuple

import pytest

from s3sftp.core.object_store import Encryption, ListPage, MemoryObjectStore
from s3sftp.core.s3_driver import S3Driver


class RecordingObjectStore(MemoryObjectStore):
    """
    MemoryObjectStore that records calls.

    Each call is appended to ``calls`` as a tuple of the method name followed
    by its arguments. Use ``seed`` to add objects without recording.

    Usage:
        store = RecordingObjectStore()
        store.seed("home/dir/file", b"abc")
        driver.delete_file("dir/file")
        assert store.calls == [("delete_object", "home/dir/file")]
    """

    def __init__(self, page_size: int = 1000):
        super().__init__(page_size=page_size)
        self.calls: List[Tuple[Any, ...]] = []

    def seed(self, key: str, body: bytes = b"") -> None:
        super().put_object(key, body, Encryption())

    def list_objects(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> ListPage:
        self.calls.append(("list_objects", prefix, delimiter, continuation_token, max_keys))
        return super().list_objects(prefix, delimiter, continuation_token, max_keys)

    def delete_object(self, key: str) -> None:
        self.calls.append(("delete_object", key))
        super().delete_object(key)

    def copy_object(self, source_key: str, dest_key: str, encryption: Encryption) -> None:
        self.calls.append(("copy_object", source_key, dest_key, encryption))
        super().copy_object(source_key, dest_key, encryption)

    def put_object(self, key: str, body: bytes, encryption: Encryption) -> None:
        self.calls.append(("put_object", key, body, encryption))
        super().put_object(key, body, encryption)

    def get_object(self, key: str):
        self.calls.append(("get_object", key))
        return super().get_object(key)


@pytest.fixture
def store():
    """Empty recording store."""
    return RecordingObjectStore()


@pytest.fixture
def driver(store):
    """Driver with no prefix and home directory "home"."""
    return S3Driver(store=store, home_path="home")
