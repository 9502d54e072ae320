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

"""Tests for the s3sftp operator CLI."""

import logging
from unittest.mock import Mock

import pytest
import structlog
from click.testing import CliRunner

from s3sftp import cli
from s3sftp.core.access_gate import AccessGate, BlockList
from s3sftp.core.s3_driver import S3Driver
from s3sftp.utils.config import Config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def quiet_logs(monkeypatch):
    """Configure structlog the way the CLI does, but keep debug traces out of command output."""

    def configure():
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))

    monkeypatch.setattr(cli, "configure_structlog", configure)
    yield
    structlog.reset_defaults()


@pytest.fixture
def opened(monkeypatch, store, quiet_logs):
    """Route the CLI to a recording in-memory driver and record how it was opened."""
    opened_with = {}

    def fake_open_driver(config, home, remote_address):
        opened_with.update(config=config, home=home, remote_address=remote_address)
        gate = AccessGate(BlockList(["1.1.1.1"]), events=Mock())
        return S3Driver(
            store=store,
            home_path=home if home is not None else config.home_path,
            remote_address=remote_address,
            access_gate=gate,
        )

    monkeypatch.setattr(cli, "load_config", lambda env_file=None: Config(bucket="bucket", home_path="home"))
    monkeypatch.setattr(cli, "_open_driver", fake_open_driver)
    return opened_with


class TestListing:
    """Tests for ls and stat"""

    def test_ls(self, runner, opened, store):
        store.seed("home/file", b"abc")
        store.seed("home/sub/inner")

        result = runner.invoke(cli.main, ["ls"])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("-") and lines[0].endswith(" file")
        assert lines[1].startswith("d") and lines[1].endswith(" sub")

    def test_home_override(self, runner, opened, store):
        store.seed("bob/file")

        result = runner.invoke(cli.main, ["--home", "bob", "ls"])

        assert result.exit_code == 0, result.output
        assert opened["home"] == "bob"
        assert result.output.rstrip().endswith(" file")

    def test_stat_missing(self, runner, opened):
        result = runner.invoke(cli.main, ["stat", "missing"])

        assert result.exit_code == 1
        assert "No such file or directory" in result.output


class TestMutations:
    """Tests for mkdir, rmdir, rm and mv"""

    def test_mkdir_and_rmdir(self, runner, opened, store):
        assert runner.invoke(cli.main, ["mkdir", "new_dir"]).exit_code == 0
        assert store.keys() == ["home/new_dir/"]

        assert runner.invoke(cli.main, ["rmdir", "new_dir"]).exit_code == 0
        assert store.keys() == []

    def test_mv_and_rm(self, runner, opened, store):
        store.seed("home/a", b"x")

        assert runner.invoke(cli.main, ["mv", "a", "b"]).exit_code == 0
        assert store.keys() == ["home/b"]

        assert runner.invoke(cli.main, ["rm", "b"]).exit_code == 0
        assert store.keys() == []

    def test_mv_missing_source(self, runner, opened):
        result = runner.invoke(cli.main, ["mv", "missing", "b"])

        assert result.exit_code == 1
        assert "NoSuchKey" in result.output


class TestTransfers:
    """Tests for get and put"""

    def test_put_then_get(self, runner, opened, store, tmp_path):
        source = tmp_path / "upload.bin"
        source.write_bytes(b"payload")

        result = runner.invoke(cli.main, ["put", str(source), "dir/upload.bin"])
        assert result.exit_code == 0, result.output
        assert store.read("home/dir/upload.bin") == b"payload"

        target = tmp_path / "download.bin"
        result = runner.invoke(cli.main, ["get", "dir/upload.bin", str(target)])
        assert result.exit_code == 0, result.output
        assert target.read_bytes() == b"payload"

    def test_get_from_blocked_address(self, runner, opened, store):
        store.seed("home/file", b"secret")

        result = runner.invoke(cli.main, ["--remote-address", "1.1.1.1:22", "get", "file"])

        assert result.exit_code == 1
        assert "blocked" in result.output
        assert opened["remote_address"] == "1.1.1.1:22"
        assert ("get_object", "home/file") not in store.calls


def test_missing_bucket_reports_error(runner, monkeypatch, quiet_logs):
    def fail(env_file=None):
        raise ValueError("S3_BUCKET environment variable is required.")

    monkeypatch.setattr(cli, "load_config", fail)

    result = runner.invoke(cli.main, ["ls"])

    assert result.exit_code == 1
    assert "S3_BUCKET" in result.output
