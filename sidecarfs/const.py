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
"""Fixed limits shared by the sidecar store and the xattr dispatch layer."""

import typing

# suffix appended to a tracked file's path to locate its sidecar file
SIDECAR_EXT: typing.Final[str] = ".xattr"

# the 8 MiB cap is arbitrary, it only needs to be larger than any sane
# set of attributes for a single file
MAX_METADATA_SIZE: typing.Final[int] = 8 * 1024 * 1024

XATTR_NAME_MAX: typing.Final[int] = 255  # bytes in an attribute name
XATTR_SIZE_MAX: typing.Final[int] = 65536  # bytes in an attribute value
XATTR_LIST_MAX: typing.Final[int] = 65536  # bytes in a list of names

# setxattr(2) flags, values as defined by linux/xattr.h
XATTR_CREATE: typing.Final[int] = 0x1
XATTR_REPLACE: typing.Final[int] = 0x2

USER_NAMESPACE: typing.Final[str] = "user."
SECURITY_NAMESPACE: typing.Final[str] = "security."
