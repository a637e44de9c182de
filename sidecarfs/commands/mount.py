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

import logging

from sidecarfs import passthrough

from .cli import commands, Context, Fail, toggle_option

_logger = logging.getLogger(__name__)


def _mount_args(parser):
    parser.add_argument(
        "mountpoint",
        help="Directory where the file system will be mounted.",
    )
    parser.add_argument(
        "--source",
        help=(
            "Directory whose contents are exposed by the mount"
            " (overrides the source in the configuration)."
        ),
    )
    toggle_option(
        parser,
        arg="--show-sidecar",
        dest="show_sidecar",
        helpfmt="{} access to sidecar files through the mount.",
    )
    parser.add_argument(
        "-o",
        "--option",
        dest="fuse_options",
        action="append",
        help="FUSE mount options, as in mount -o opt[=val][,...].",
    )
    parser.add_argument(
        "--background",
        action="store_true",
        help="Detach from the terminal once the file system is mounted.",
    )
    # leave show_sidecar unset so configuration files can supply it
    parser.set_defaults(show_sidecar=None)


@commands.command(name="mount", arg_func=_mount_args)
def mount(ctx: Context) -> None:
    """Mount a source directory with sidecar backed extended attributes."""
    try:
        mconfig = ctx.mount_config
    except ValueError as err:
        raise Fail(str(err))
    _logger.debug("mount config: %r", mconfig)
    passthrough.mount(
        mconfig,
        ctx.cli.mountpoint,
        foreground=not ctx.cli.background,
        store=ctx.store,
    )
