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

import shutil
from typing import Optional

import click
from botocore.exceptions import BotoCoreError, ClientError

# This module can be executed in two ways:
# 1. Package mode (recommended): `s3sftp` command (defined in pyproject.toml entry point)
# 2. Module mode (development): `python -m s3sftp.cli` (uses __main__ guard at bottom)
from .core.s3_driver import S3Driver
from .logging import configure_structlog
from .models.file_info import FileInfo
from .utils.config import Config, load_config
from .utils.exceptions import S3SftpError

STORAGE_ERRORS = (S3SftpError, ClientError, BotoCoreError)


class CLIContext:
    """Container for CLI dependency injection."""

    def __init__(self, config: Config, home: Optional[str], remote_address: Optional[str]):
        self.config = config
        self.home = home
        self.remote_address = remote_address
        self._driver: Optional[S3Driver] = None

    @property
    def driver(self) -> S3Driver:
        if self._driver is None:
            self._driver = _open_driver(self.config, self.home, self.remote_address)
        return self._driver


def _open_driver(config: Config, home: Optional[str], remote_address: Optional[str]) -> S3Driver:
    return S3Driver.from_config(config, remote_address=remote_address, home_path=home)


def _format_entry(entry: FileInfo) -> str:
    kind = "d" if entry.is_dir else "-"
    return f"{kind} {entry.size:>12} {entry.modified_time:%Y-%m-%d %H:%M} {entry.name}"


@click.group()
@click.option("--config", "-c", help="Path to .env config file")
@click.option("--home", help="Home directory under the prefix (overrides SFTP_HOME_PATH)")
@click.option("--remote-address", help="Act as a client connecting from this host:port")
@click.pass_context
def main(ctx, config, home, remote_address):
    """s3sftp - browse an S3 bucket through the SFTP path and directory rules"""
    configure_structlog()

    try:
        loaded = load_config(config)
    except ValueError as e:
        raise click.ClickException(str(e))

    ctx.obj = CLIContext(loaded, home, remote_address)


@main.command("ls")
@click.argument("path", default="")
@click.pass_obj
def list_dir(obj: CLIContext, path):
    """List a directory (defaults to the home directory)"""
    try:
        entries = obj.driver.list_dir(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))

    for entry in entries:
        click.echo(_format_entry(entry))


@main.command()
@click.argument("path")
@click.pass_obj
def stat(obj: CLIContext, path):
    """Show the entry at PATH"""
    try:
        entry = obj.driver.stat(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))

    click.echo(_format_entry(entry))


@main.command()
@click.argument("path")
@click.pass_obj
def mkdir(obj: CLIContext, path):
    """Create a directory marker at PATH"""
    try:
        obj.driver.make_dir(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("path")
@click.pass_obj
def rmdir(obj: CLIContext, path):
    """Remove the directory marker at PATH (contents are left in place)"""
    try:
        obj.driver.delete_dir(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("path")
@click.pass_obj
def rm(obj: CLIContext, path):
    """Delete the file at PATH"""
    try:
        obj.driver.delete_file(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("old_path")
@click.argument("new_path")
@click.pass_obj
def mv(obj: CLIContext, old_path, new_path):
    """Rename a single file (copy then delete, not atomic)"""
    try:
        obj.driver.rename(old_path, new_path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("path")
@click.argument("output", type=click.File("wb"), default="-")
@click.pass_obj
def get(obj: CLIContext, path, output):
    """Download PATH to OUTPUT (stdout by default)"""
    try:
        body = obj.driver.get_file(path)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))

    try:
        shutil.copyfileobj(body, output)
    finally:
        body.close()


@main.command()
@click.argument("source", type=click.File("rb"))
@click.argument("path")
@click.pass_obj
def put(obj: CLIContext, source, path):
    """Upload SOURCE (a local file, or - for stdin) to PATH"""
    try:
        obj.driver.put_file(path, source)
    except STORAGE_ERRORS as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    main()
