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

import typing


from . import attrs  # noqa: F401
from . import check  # noqa: F401
from . import mount  # noqa: F401
from .cli import commands, Fail
from .common import (
    CommandContext,
    enable_logging,
    env_to_cli,
    global_args,
)


def main(args: typing.Optional[typing.Sequence[str]] = None) -> None:
    parser = commands.assemble(arg_func=global_args)
    cli = parser.parse_args(args)
    env_to_cli(cli)
    enable_logging(cli)
    cfunc = getattr(cli, "cfunc", None)
    if cfunc is None:
        parser.print_usage()
        raise Fail("no command given")
    ctx = CommandContext(cli)
    cfunc(ctx)
    return


if __name__ == "__main__":
    main()
