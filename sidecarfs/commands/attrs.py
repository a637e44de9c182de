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
"""Commands that read and modify attributes directly in the sidecar files
of a source directory, without a mounted file system.
"""

import binascii

from sidecarfs import const

from .cli import commands, Context, Fail


def _value_format_arg(parser):
    parser.add_argument(
        "--hex",
        action="store_true",
        help="Values are hex encoded instead of UTF-8 text.",
    )


def _path_arg(parser):
    parser.add_argument("path", help="Path to the (tracked) file.")


def _name_arg(parser):
    parser.add_argument("name", help="Name of the attribute.")


def _get_args(parser):
    _path_arg(parser)
    _name_arg(parser)
    _value_format_arg(parser)


def _set_args(parser):
    _path_arg(parser)
    _name_arg(parser)
    parser.add_argument("value", help="Value of the attribute.")
    _value_format_arg(parser)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--create",
        action="store_const",
        dest="flags",
        const=const.XATTR_CREATE,
        help="Fail if the attribute already exists.",
    )
    mode.add_argument(
        "--replace",
        action="store_const",
        dest="flags",
        const=const.XATTR_REPLACE,
        help="Fail if the attribute does not exist.",
    )
    parser.set_defaults(flags=0)


def _remove_args(parser):
    _path_arg(parser)
    _name_arg(parser)


@commands.command(name="get", arg_func=_get_args)
def get_attr(ctx: Context) -> None:
    """Print the value of an attribute."""
    value = ctx.store.get(ctx.cli.path, ctx.cli.name)
    if ctx.cli.hex:
        print(binascii.hexlify(value).decode("ascii"))
    else:
        print(value.decode("utf8", errors="backslashreplace"))


@commands.command(name="set", arg_func=_set_args)
def set_attr(ctx: Context) -> None:
    """Set the value of an attribute."""
    if ctx.cli.hex:
        try:
            value = binascii.unhexlify(ctx.cli.value)
        except binascii.Error as err:
            raise Fail(f"invalid hex value: {err}")
    else:
        value = ctx.cli.value.encode("utf8")
    ctx.store.write(ctx.cli.path, ctx.cli.name, value, ctx.cli.flags)


@commands.command(name="list", arg_func=_path_arg)
def list_attrs(ctx: Context) -> None:
    """List the names of all attributes of a file."""
    for name in ctx.store.names(ctx.cli.path):
        print(name.decode("utf8", errors="backslashreplace"))


@commands.command(name="remove", arg_func=_remove_args)
def remove_attr(ctx: Context) -> None:
    """Remove an attribute."""
    ctx.store.remove(ctx.cli.path, ctx.cli.name)
