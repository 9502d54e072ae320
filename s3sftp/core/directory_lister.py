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

"""Synthesizes one directory level from a delimited S3 prefix listing."""

from typing import List, Optional

from structlog import get_logger

from ..models.file_info import FileInfo
from .object_store import ObjectStore
from .path_translator import SEPARATOR

logger = get_logger(__name__)


def _strip_prefix(key: str, prefix: str) -> str:
    if prefix and key.startswith(prefix):
        return key[len(prefix) :]
    return key


def list_directory(store: ObjectStore, directory: str) -> List[FileInfo]:
    """
    List the immediate children of a directory key.

    Follows continuation tokens until the store reports the last page, so
    the whole directory is materialized before returning. Per page, objects
    come first and common prefixes (subdirectories) after, in store order.

    Args:
        store: Object store to query
        directory: Canonical directory key; a trailing separator is added
                   if missing

    Returns:
        FileInfo entries named relative to ``directory``. The directory's
        own marker object is never included.
    """
    prefix = directory
    if prefix and not prefix.endswith(SEPARATOR):
        prefix += SEPARATOR

    files: List[FileInfo] = []
    continuation_token: Optional[str] = None
    pages = 0

    while True:
        page = store.list_objects(
            prefix,
            delimiter=SEPARATOR,
            continuation_token=continuation_token,
        )
        pages += 1

        for obj in page.objects:
            if obj.key == prefix:
                continue
            files.append(
                FileInfo(
                    name=_strip_prefix(obj.key, prefix),
                    size=obj.size,
                    modified_time=obj.last_modified,
                )
            )

        for common_prefix in page.common_prefixes:
            name = _strip_prefix(common_prefix, prefix)
            if name.endswith(SEPARATOR):
                name = name[: -len(SEPARATOR)]
            files.append(FileInfo.directory(name))

        if not page.is_truncated:
            logger.debug("Listed directory", prefix=prefix, entries=len(files), pages=pages)
            return files
        continuation_token = page.next_continuation_token
