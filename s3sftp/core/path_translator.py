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
Translation of client-supplied SFTP paths into S3 object keys.

Every path a client sends goes through ``translate_path`` before it is used
as a key. The result is always relative (no leading slash) and always lies
inside the configured prefix: traversal that would climb above the prefix is
clamped back to the prefix itself rather than rejected.

Usage:
    translate_path("sftp", "/alice", "reports/q3.csv")   # "sftp/alice/reports/q3.csv"
    translate_path("sftp", "/alice", "/bob/")            # "sftp/bob/"
    translate_path("sftp", "/alice", "/../../etc")       # "sftp"
"""

import posixpath

SEPARATOR = "/"


def _clean(path: str) -> str:
    """Lexically normalize a path, collapsing '.', '..' and repeated separators."""
    cleaned = posixpath.normpath(path)
    # normpath keeps exactly two leading slashes (POSIX implementation-defined)
    if cleaned.startswith("//"):
        cleaned = SEPARATOR + cleaned.lstrip(SEPARATOR)
    return cleaned


def _confine(candidate: str, root: str) -> str:
    key = candidate.lstrip(SEPARATOR)
    if not root or key == root or key.startswith(root + SEPARATOR):
        return key
    return root


def translate_path(prefix: str, home: str, path: str) -> str:
    """
    Resolve an SFTP path to a key confined to ``prefix``.

    Args:
        prefix: Key prefix acting as the user's jail (may be empty)
        home: Home directory under the prefix, used for relative paths
        path: Raw path from the client; absolute, relative or empty

    Returns:
        Canonical key without a leading slash. A trailing slash on ``path``
        is kept so directory targets stay distinguishable from files.
    """
    root = _clean(SEPARATOR + prefix).lstrip(SEPARATOR)

    if path == "":
        return _confine(_clean(SEPARATOR + prefix + SEPARATOR + home), root)

    if path.startswith(SEPARATOR):
        candidate = _clean(prefix + path)
    else:
        candidate = _clean(SEPARATOR + prefix + SEPARATOR + home + _clean(SEPARATOR + path))

    translated = _confine(candidate, root)

    # Cleaning drops trailing separators; callers rely on them for directories
    if path.endswith(SEPARATOR):
        translated += SEPARATOR
    return translated.lstrip(SEPARATOR)
