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

"""Tests for synthesizing directory listings from prefix listings."""

from datetime import datetime, timezone
from unittest.mock import Mock

from s3sftp.core.directory_lister import list_directory
from s3sftp.core.object_store import ListPage, ObjectStore, StoredObject
from s3sftp.models.file_info import DIRECTORY_PLACEHOLDER_MTIME, DIRECTORY_PLACEHOLDER_SIZE

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_store(*pages: ListPage) -> Mock:
    """Helper to create a store mock returning the given pages in order."""
    store = Mock(spec=ObjectStore)
    store.list_objects.side_effect = list(pages)
    return store


class TestSinglePage:
    """Tests for a directory that fits in one listing page."""

    def test_files_then_directories(self):
        """Test the canonical listing: two files then one nested directory"""
        store = make_store(
            ListPage(
                objects=[
                    StoredObject(key="home/dir/file", size=123, last_modified=NOW),
                    StoredObject(key="home/dir/other_file", size=456, last_modified=NOW),
                ],
                common_prefixes=["home/dir/nested_dir/"],
                key_count=3,
            )
        )

        files = list_directory(store, "home/dir/")

        store.list_objects.assert_called_once_with("home/dir/", delimiter="/", continuation_token=None)
        assert [(f.name, f.is_dir) for f in files] == [
            ("file", False),
            ("other_file", False),
            ("nested_dir", True),
        ]
        assert files[0].size == 123
        assert files[1].size == 456

    def test_keys_outside_prefix_are_kept_verbatim(self):
        """Test that keys not carrying the prefix are reported unchanged"""
        store = make_store(
            ListPage(
                objects=[StoredObject(key="file", size=1, last_modified=NOW)],
                common_prefixes=["nested_dir/"],
            )
        )

        files = list_directory(store, "home/dir/")

        assert [f.name for f in files] == ["file", "nested_dir"]

    def test_marker_object_is_skipped(self):
        """Test that the directory's own marker object is not an entry"""
        store = make_store(
            ListPage(
                objects=[
                    StoredObject(key="home/dir/", size=0, last_modified=NOW),
                    StoredObject(key="home/dir/file", size=3, last_modified=NOW),
                ],
            )
        )

        files = list_directory(store, "home/dir")

        assert [f.name for f in files] == ["file"]

    def test_trailing_separator_added_to_query(self):
        store = make_store(ListPage())

        assert list_directory(store, "home/dir") == []
        store.list_objects.assert_called_once_with("home/dir/", delimiter="/", continuation_token=None)

    def test_bucket_root_uses_empty_prefix(self):
        store = make_store(ListPage())

        list_directory(store, "")

        store.list_objects.assert_called_once_with("", delimiter="/", continuation_token=None)

    def test_directory_entries_use_placeholders(self):
        """Test that inferred directories carry placeholder size and mtime"""
        store = make_store(ListPage(common_prefixes=["home/sub/"]))

        (entry,) = list_directory(store, "home/")

        assert entry.size == DIRECTORY_PLACEHOLDER_SIZE
        assert entry.modified_time == DIRECTORY_PLACEHOLDER_MTIME
        assert entry.modified_timestamp == 1.0


class TestPagination:
    """Tests for following continuation tokens."""

    def test_follows_tokens_until_last_page(self):
        store = make_store(
            ListPage(
                objects=[StoredObject(key="home/a", size=1, last_modified=NOW)],
                common_prefixes=["home/b/"],
                is_truncated=True,
                next_continuation_token="t1",
            ),
            ListPage(
                objects=[StoredObject(key="home/c", size=2, last_modified=NOW)],
                is_truncated=True,
                next_continuation_token="t2",
            ),
            ListPage(common_prefixes=["home/d/"]),
        )

        files = list_directory(store, "home/")

        assert [f.name for f in files] == ["a", "b", "c", "d"]
        tokens = [c.kwargs["continuation_token"] for c in store.list_objects.call_args_list]
        assert tokens == [None, "t1", "t2"]

    def test_against_memory_store(self, store):
        """Test a multi-page listing end to end against the in-memory store"""
        store.page_size = 2
        for key in ["home/", "home/a", "home/b/x", "home/c", "home/d/", "home/e"]:
            store.seed(key)

        files = list_directory(store, "home")

        assert sorted(f.name for f in files) == ["a", "b", "c", "d", "e"]
        assert {f.name for f in files if f.is_dir} == {"b", "d"}
