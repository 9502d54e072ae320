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
Custom exception classes for the s3sftp adapter.

Only adapter-level failures get their own types. Errors raised by the
storage client (botocore ``ClientError`` and friends) are passed through
untouched so callers can inspect the original S3 error code.

The concrete errors also derive from the matching builtin ``OSError``
subclass, which lets protocol servers that map ``OSError`` to status codes
handle them without knowing about this package.

Example:
    try:
        info = driver.stat("reports/q3.csv")
    except EntryNotFoundError:
        # Translate to SSH_FX_NO_SUCH_FILE
        ...
    except DownloadBlockedError:
        # Translate to SSH_FX_PERMISSION_DENIED
        ...
"""


class S3SftpError(Exception):
    """
    Base exception for all s3sftp adapter errors.

    Attributes:
        message: Human-readable error message
        context: Optional dict of additional error context (path, key, etc.)

    Example:
        raise S3SftpError("Failed to list directory", path="reports/")
    """

    def __init__(self, message: str, **context):
        """
        Initialize S3SftpError.

        Args:
            message: Human-readable error message
            **context: Optional keyword arguments for error context
                      (e.g., path, key, remote_address)
        """
        super().__init__(message)
        self.message = message
        self.context = context if context else {}

    def __str__(self):
        """Return string representation of error."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self):
        """Return detailed representation for debugging."""
        name = type(self).__name__
        if self.context:
            return f"{name}(message={self.message!r}, context={self.context!r})"
        return f"{name}(message={self.message!r})"


class EntryNotFoundError(S3SftpError, FileNotFoundError):
    """
    Raised when no object in the store matches a requested path.

    Example:
        raise EntryNotFoundError("No such file or directory", path="home/missing")
    """

    pass


class DownloadBlockedError(S3SftpError, PermissionError):
    """
    Raised when a download is refused because the caller's origin is blocked.

    Example:
        raise DownloadBlockedError(
            "Downloads are blocked for this address",
            remote_address="203.0.113.7:52344",
        )
    """

    pass


__all__ = ["S3SftpError", "EntryNotFoundError", "DownloadBlockedError"]
