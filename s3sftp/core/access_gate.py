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
Download access control keyed on the client's network origin.

A single ``BlockList`` is shared by every session of a server process. An
operator can swap its contents at any time with ``replace``; the change is
visible to the very next download check because the gate never caches it.
"""

import threading
from typing import Any, FrozenSet, Iterable, Optional

from structlog import get_logger

from ..utils.config import Config
from ..utils.exceptions import DownloadBlockedError

logger = get_logger(__name__)


def split_host(address: str) -> str:
    """
    Return the host portion of a ``host:port`` address.

    Handles bracketed IPv6 (``[::1]:22``), bare IPv6 (``::1``) and addresses
    without a port.
    """
    if address.startswith("["):
        end = address.find("]")
        if end != -1:
            return address[1:end]
        return address
    if address.count(":") == 1:
        return address.split(":", 1)[0]
    return address


class BlockList:
    """
    Thread-safe set of blocked origin hosts.

    Reads take a consistent snapshot; updates replace the whole set.
    """

    def __init__(self, addresses: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._addresses: FrozenSet[str] = frozenset(addresses)

    @classmethod
    def from_config(cls, config: Config) -> "BlockList":
        return cls(config.blocked_download_addresses)

    def replace(self, addresses: Iterable[str]) -> None:
        """Replace the blocked set wholesale."""
        new_addresses = frozenset(addresses)
        with self._lock:
            self._addresses = new_addresses
        logger.info("Download block list replaced", blocked_count=len(new_addresses))

    def snapshot(self) -> FrozenSet[str]:
        """Current blocked addresses."""
        with self._lock:
            return self._addresses

    def __contains__(self, host: object) -> bool:
        return host in self.snapshot()

    def __len__(self) -> int:
        return len(self.snapshot())


class AccessGate:
    """
    Refuses downloads to clients whose host is on the block list.

    Args:
        block_list: Shared block list, read on every check
        events: Structlog-style logger that receives blocked-download events.
                Defaults to this module's logger.
    """

    def __init__(self, block_list: BlockList, events: Optional[Any] = None):
        self.block_list = block_list
        self._events = events if events is not None else logger

    def check_download(self, remote_address: Optional[str], path: Optional[str] = None) -> None:
        """
        Raise DownloadBlockedError if ``remote_address`` is blocked.

        Args:
            remote_address: Peer address as recorded by the server (host:port)
            path: Requested path, for the event report only
        """
        if not remote_address:
            return

        host = split_host(remote_address)
        if host not in self.block_list:
            return

        self._events.warning(
            "Blocked download attempt",
            remote_address=remote_address,
            host=host,
            path=path,
        )
        raise DownloadBlockedError(
            "Downloads are blocked for this address",
            remote_address=remote_address,
        )
