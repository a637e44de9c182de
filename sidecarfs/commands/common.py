#
# sidecarfs: extended attributes for file systems that lack them
# Copyright (C) 2026  The sidecarfs authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>
#

import argparse
import json
import logging
import os
import typing

from sidecarfs import config
from sidecarfs.store import SidecarStore

from .cli import Parser

DEBUG_LOG_FORMAT = "{asctime}: {levelname}: {name}: {message}"
LOG_FORMAT = "{asctime}: {levelname}: {message}"


class CommandContext:
    """CLI Context for standard sidecarfs commands."""

    def __init__(self, cli_args: argparse.Namespace):
        self._cli = cli_args
        self._cdata: typing.Optional[config.ConfigData] = None
        self._store: typing.Optional[SidecarStore] = None

    @property
    def cli(self) -> argparse.Namespace:
        return self._cli

    @property
    def config_data(self) -> config.ConfigData:
        if self._cdata is None:
            cfgs = self.cli.config or []
            if cfgs:
                self._cdata = config.read_config_files(
                    cfgs, require_validation=self.require_validation
                )
            else:
                self._cdata = config.ConfigData()
        return self._cdata

    @property
    def mount_config(self) -> config.MountConfig:
        options = config.parse_fuse_options(
            getattr(self.cli, "fuse_options", None) or []
        )
        return self.config_data.mount_config(
            source_dir=getattr(self.cli, "source", None),
            show_sidecar=getattr(self.cli, "show_sidecar", None),
            fuse_options=options,
        )

    @property
    def require_validation(self) -> typing.Optional[bool]:
        if self.cli.validate_config in ("required", "true"):
            return True
        if self.cli.validate_config == "false":
            return False
        return None

    @property
    def store(self) -> SidecarStore:
        if self._store is None:
            self._store = SidecarStore()
        return self._store


def split_entries(value: str) -> list[str]:
    """Split a env var up into separate strings. The string can be
    an "old school" colon seperated list of values (like PATH).
    Or, it can be JSON-formatted if it starts and ends with square
    brackets ('[...]'). Strings are the only permitted type within
    this JSON-formatted list.
    """
    out: list[str] = []
    if not isinstance(value, str):
        raise ValueError(value)
    if not value:
        return out
    v = value.rstrip(None)  # permit trailing whitespace (trailing only!)
    if v[0] == "[" and v[-1] == "]":
        for item in json.loads(v):
            if not isinstance(item, str):
                raise ValueError("Variable JSON must be a list of strings")
            out.append(item)
    else:
        for part in value.split(":"):
            out.append(part)
    return out


def env_flag(value: typing.Union[str, bool, None]) -> bool:
    """Convert an environment variable string into a boolean."""
    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in ("1", "yes", "true", "on")


def from_env(
    ns: argparse.Namespace,
    var: str,
    ename: str,
    convert_env: typing.Optional[typing.Callable] = None,
    convert_value: typing.Optional[typing.Callable] = str,
) -> None:
    """Bind an environment variable to a command line option. This allows
    certain cli options to be set from env vars if the cli option is
    not directly provided.
    """
    value = getattr(ns, var, None)
    if not value:
        value = os.environ.get(ename, "")
        if convert_env is not None:
            value = convert_env(value)
    if convert_value is not None:
        value = convert_value(value)
    if value:
        setattr(ns, var, value)


def env_to_cli(cli: argparse.Namespace) -> None:
    """Configure the sidecarfs default command line option to environment
    variable mappings.
    """
    from_env(
        cli,
        "config",
        "SIDECARFS_CONFIG",
        convert_env=split_entries,
        convert_value=None,
    )
    from_env(cli, "debug", "SIDECARFS_DEBUG", convert_value=env_flag)
    from_env(cli, "validate_config", "SIDECARFS_VALIDATE_CONFIG")


def enable_logging(cli: argparse.Namespace) -> None:
    """Configure sidecarfs command line logging."""
    level = logging.DEBUG if cli.debug else logging.INFO
    fmt = DEBUG_LOG_FORMAT if cli.debug else LOG_FORMAT
    logger = logging.getLogger()
    logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt, style="{"))
    handler.setLevel(level)
    logger.addHandler(handler)


def global_args(parser: Parser) -> None:
    """Configure sidecarfs default global command line arguments."""
    parser.add_argument(
        "--config",
        action="append",
        help=(
            "Specify source configuration"
            " (can also be set in the environment by SIDECARFS_CONFIG)."
        ),
    )
    parser.add_argument(
        "--validate-config",
        choices=("auto", "required", "true", "false"),
        help="Perform schema based validation of configuration.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=(
            "Enable debug level logging"
            " (can also be set in the environment by SIDECARFS_DEBUG)."
        ),
    )
