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

from sidecarfs import paths

from .cli import commands, Context, Fail


def _check_args(parser):
    parser.add_argument(
        "paths",
        nargs="+",
        help="Tracked files, or their sidecar files, to check.",
    )


@commands.command(name="check", arg_func=_check_args)
def check(ctx: Context) -> None:
    """Check that sidecar files hold valid, unique attribute records."""
    suffix = ctx.store.suffix
    failed = []
    for path in ctx.cli.paths:
        if paths.is_sidecar_path(path, suffix):
            path = paths.tracked_path(path, suffix)
        spath = ctx.store.sidecar_path(path)
        try:
            count = ctx.store.check(path)
        except OSError as err:
            print(f"{spath}: FAILED: {err.strerror}")
            failed.append(spath)
            continue
        print(f"{spath}: ok ({count} attributes)")
    if failed:
        raise Fail(
            f"{len(failed)} of {len(ctx.cli.paths)} sidecar files are invalid"
        )
