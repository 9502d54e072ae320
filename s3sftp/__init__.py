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

"""S3-backed file system adapter for SFTP servers."""

from .core.access_gate import AccessGate, BlockList
from .core.object_store import Encryption, MemoryObjectStore, ObjectStore, S3ObjectStore
from .core.path_translator import translate_path
from .core.s3_driver import S3Driver, create_s3_driver
from .models.file_info import FileInfo
from .utils.exceptions import DownloadBlockedError, EntryNotFoundError, S3SftpError

__version__ = "0.1.0"

__all__ = [
    "AccessGate",
    "BlockList",
    "DownloadBlockedError",
    "Encryption",
    "EntryNotFoundError",
    "FileInfo",
    "MemoryObjectStore",
    "ObjectStore",
    "S3Driver",
    "S3ObjectStore",
    "S3SftpError",
    "create_s3_driver",
    "translate_path",
]
