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
"""Errors raised by the sidecar attribute store.

Every error is an OSError carrying the errno that an xattr system call
would report for the same condition. Failures of the underlying file
system are not wrapped, they propagate as the OSError raised by the OS.
"""

import errno
import os

# linux spells "no such attribute" ENODATA, the BSDs spell it ENOATTR
ENOATTR: int = getattr(errno, "ENOATTR", errno.ENODATA)


class SidecarError(OSError):
    errno_value: int = errno.EIO

    def __init__(self, path: str = "", detail: str = "") -> None:
        msg = os.strerror(self.errno_value)
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(self.errno_value, msg, path or None)


class AttributeNotFound(SidecarError):
    """No sidecar exists or no record in it has the requested name."""

    errno_value = ENOATTR


class AttributeExists(SidecarError):
    """A create-only write found the name already present."""

    errno_value = errno.EEXIST


class InsufficientBuffer(SidecarError):
    errno_value = errno.ERANGE


class ListTooBig(SidecarError):
    errno_value = errno.E2BIG


class SidecarTooLarge(SidecarError):
    errno_value = errno.ENOSPC


class CorruptSidecar(SidecarError):
    """The sidecar can not be decoded as an exact sequence of records, or
    it holds more than one record with the same name.
    """

    errno_value = errno.EILSEQ
