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

"""File entry model returned by the driver's stat and listing operations."""

import stat
from dataclasses import dataclass
from datetime import datetime, timezone

# Inferred directories (common prefixes) have no metadata of their own
DIRECTORY_PLACEHOLDER_SIZE = 4096
DIRECTORY_PLACEHOLDER_MTIME = datetime.fromtimestamp(1, tz=timezone.utc)


@dataclass(frozen=True)
class FileInfo:
    """
    One logical file system entry synthesized from the object store.

    Entries are built per call and never cached. ``name`` is the segment
    relative to the listed directory for listings, and the full key for stat.

    Attributes:
        name: Entry name (see above)
        size: Size in bytes
        modified_time: Last modification time
        is_dir: True for directories (marker objects or common prefixes)
    """

    name: str
    size: int
    modified_time: datetime
    is_dir: bool = False

    @property
    def mode(self) -> int:
        """File type bits for protocol attributes; no permission bits are enforced."""
        if self.is_dir:
            return stat.S_IFDIR | 0o755
        return stat.S_IFREG | 0o644

    @property
    def modified_timestamp(self) -> float:
        """Get modified time as Unix timestamp."""
        return self.modified_time.timestamp()

    @classmethod
    def directory(cls, name: str) -> "FileInfo":
        """Build an entry for a directory that exists only as a common prefix."""
        return cls(
            name=name,
            size=DIRECTORY_PLACEHOLDER_SIZE,
            modified_time=DIRECTORY_PLACEHOLDER_MTIME,
            is_dir=True,
        )
