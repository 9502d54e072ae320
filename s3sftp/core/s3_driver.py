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
S3-backed file system driver for an SFTP server.

The SFTP server calls one ``S3Driver`` method per client request. Each
method translates the client path into a key jailed under the configured
prefix, then issues one or two object store calls. Nothing is cached and no
storage error is retried or wrapped.

Directories do not exist in S3. They are inferred from common prefixes when
listing, and an empty directory is represented by a zero-length "marker"
object whose key ends in "/".

Usage:
    driver = create_s3_driver(
        bucket="sftp-uploads",
        prefix="sftp",
        home_path="/alice",
        region="eu-west-1",
        remote_address="198.51.100.4:50022",
    )

    for entry in driver.list_dir("reports/"):
        print(entry.name, entry.size, entry.is_dir)

    with open("q3.csv", "rb") as f:
        driver.put_file("reports/q3.csv", f)
"""

from typing import Any, BinaryIO, List, Optional

from structlog import get_logger

from ..models.file_info import FileInfo
from ..utils.config import Config
from ..utils.exceptions import EntryNotFoundError
from .access_gate import AccessGate, BlockList
from .directory_lister import list_directory
from .object_store import Encryption, ObjectStore, S3ObjectStore, create_s3_client
from .path_translator import SEPARATOR, translate_path

logger = get_logger(__name__)


class S3Driver:
    """
    File system verbs over a flat object store.

    Construction fixes the jail prefix, home directory, encryption directive
    and the session's remote address; none of them change afterwards, so one
    instance can serve concurrent requests from its session safely.

    Args:
        store: Object store holding the bucket
        prefix: Key prefix the user can never leave
        home_path: Directory under ``prefix`` that relative paths resolve in
        kms_key_id: Managed key for SSE-KMS; AES256 is used when not set
        remote_address: Client address (host:port) recorded by the server
        access_gate: Download gate; downloads are unrestricted without one
        log: Optional bound logger, e.g. with session context attached
    """

    def __init__(
        self,
        store: ObjectStore,
        prefix: str = "",
        home_path: str = "",
        kms_key_id: Optional[str] = None,
        remote_address: Optional[str] = None,
        access_gate: Optional[AccessGate] = None,
        log: Optional[Any] = None,
    ):
        self._store = store
        self.prefix = prefix
        self.home_path = home_path
        self.kms_key_id = kms_key_id
        self.remote_address = remote_address
        self._access_gate = access_gate
        self._encryption = Encryption.for_kms_key(kms_key_id)
        self._log = log if log is not None else logger

    @classmethod
    def from_config(
        cls,
        config: Config,
        remote_address: Optional[str] = None,
        block_list: Optional[BlockList] = None,
        home_path: Optional[str] = None,
    ) -> "S3Driver":
        """
        Build a driver for one session from loaded configuration.

        Args:
            config: Loaded configuration
            remote_address: Client address for the download gate
            block_list: Process-wide block list; one is seeded from config if
                        not given
            home_path: Per-user home directory overriding config.home_path
        """
        client = create_s3_client(
            region=config.region,
            endpoint_url=config.endpoint_url,
            access_key_id=config.aws_access_key_id,
            secret_access_key=config.aws_secret_access_key,
            session_token=config.aws_session_token,
        )
        if block_list is None:
            block_list = BlockList.from_config(config)
        return cls(
            store=S3ObjectStore(client, config.bucket),
            prefix=config.prefix,
            home_path=config.home_path if home_path is None else home_path,
            kms_key_id=config.kms_key_id,
            remote_address=remote_address,
            access_gate=AccessGate(block_list),
        )

    def _translate(self, path: str) -> str:
        return translate_path(self.prefix, self.home_path, path)

    def stat(self, path: str) -> FileInfo:
        """
        Describe the entry at ``path``.

        The reported name is the full translated key, unlike list_dir which
        reports names relative to the directory.

        Raises:
            EntryNotFoundError: If no key starts with the translated path
        """
        key = self._translate(path)
        page = self._store.list_objects(key, max_keys=1)

        if not page.objects or page.key_count == 0:
            raise EntryNotFoundError("No such file or directory", path=key)

        obj = page.objects[0]
        if obj.key.endswith(SEPARATOR):
            return FileInfo(
                name=key.rstrip(SEPARATOR),
                size=obj.size,
                modified_time=obj.last_modified,
                is_dir=True,
            )
        return FileInfo(name=key, size=obj.size, modified_time=obj.last_modified)

    def list_dir(self, path: str) -> List[FileInfo]:
        """List the entries directly inside the directory at ``path``."""
        return list_directory(self._store, self._translate(path))

    def delete_dir(self, path: str) -> None:
        """
        Delete a directory's marker object.

        Objects under the directory are not touched; removing a non-empty
        directory leaves its children in place.
        """
        key = self._translate(path)
        if not key.endswith(SEPARATOR):
            key += SEPARATOR
        self._store.delete_object(key)

    def delete_file(self, path: str) -> None:
        """Delete the object at ``path``. No existence check is made."""
        self._store.delete_object(self._translate(path))

    def rename(self, old_path: str, new_path: str) -> None:
        """
        Move a single object by copying it and deleting the original.

        Not atomic. If the copy fails nothing has changed. If the delete
        fails both keys exist with the same content and the delete error is
        raised; no rollback is attempted.
        """
        old_key = self._translate(old_path)
        new_key = self._translate(new_path)

        self._store.copy_object(old_key, new_key, self._encryption)
        self._store.delete_object(old_key)
        self._log.debug("Renamed object", old_key=old_key, new_key=new_key)

    def make_dir(self, path: str) -> None:
        """Create a directory by writing an empty marker object."""
        key = self._translate(path)
        if not key.endswith(SEPARATOR):
            key += SEPARATOR
        self._store.put_object(key, b"", self._encryption)

    def get_file(self, path: str) -> BinaryIO:
        """
        Open the object at ``path`` for streaming.

        Raises:
            DownloadBlockedError: If the session's remote address is blocked;
                                  no storage call is made in that case
        """
        key = self._translate(path)
        if self._access_gate is not None:
            self._access_gate.check_download(self.remote_address, path=key)
        return self._store.get_object(key)

    def put_file(self, path: str, reader: BinaryIO) -> None:
        """
        Upload the content of ``reader`` to ``path``.

        The stream is read to completion into memory first; the store needs
        the full body for a single PUT.
        """
        key = self._translate(path)
        data = reader.read()
        self._store.put_object(key, data, self._encryption)
        self._log.debug("Uploaded object", key=key, size=len(data))


def create_s3_driver(
    bucket: str,
    prefix: str = "",
    home_path: str = "",
    region: str = "us-east-1",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    kms_key_id: Optional[str] = None,
    remote_address: Optional[str] = None,
    block_list: Optional[BlockList] = None,
) -> S3Driver:
    """
    Create an S3Driver talking to a real bucket.

    Args:
        bucket: Name of the S3 bucket
        prefix: Key within the bucket the user is jailed to, if any
        home_path: Default directory for the user (can differ from prefix)
        region: AWS region
        access_key_id: Static credentials; default chain is used if omitted
        secret_access_key: Static credentials
        session_token: Optional STS session token
        endpoint_url: Custom endpoint for S3-compatible services
        kms_key_id: Managed key for SSE-KMS
        remote_address: Client address for the download gate
        block_list: Shared block list for the download gate
    """
    client = create_s3_client(
        region=region,
        endpoint_url=endpoint_url,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
    )
    return S3Driver(
        store=S3ObjectStore(client, bucket),
        prefix=prefix,
        home_path=home_path,
        kms_key_id=kms_key_id,
        remote_address=remote_address,
        access_gate=AccessGate(block_list if block_list is not None else BlockList()),
    )
