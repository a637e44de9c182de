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

import os
import typing

from .const import SIDECAR_EXT

PathType = typing.Union[str, "os.PathLike[str]"]


def sidecar_path(path: PathType, suffix: str = SIDECAR_EXT) -> str:
    """Return the path of the sidecar file holding the attributes
    of the given tracked file.
    """
    return os.fspath(path) + suffix


def is_sidecar_path(path: PathType, suffix: str = SIDECAR_EXT) -> bool:
    """Return true if the last component of path names a sidecar file.
    A file named exactly after the suffix (eg. ".xattr") does not count,
    there is no tracked file it could belong to.
    """
    name = os.path.basename(os.fspath(path).rstrip("/"))
    return len(name) > len(suffix) and name.endswith(suffix)


def tracked_path(path: PathType, suffix: str = SIDECAR_EXT) -> str:
    """Return the path of the tracked file for a sidecar path."""
    path = os.fspath(path)
    if not is_sidecar_path(path, suffix):
        raise ValueError(f"not a sidecar path: {path!r}")
    return path[: -len(suffix)]
