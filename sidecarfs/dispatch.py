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
"""Validation and routing of xattr calls into the sidecar store.

The dispatcher sits between the FUSE operations and the store. It enforces
the limits the kernel would normally enforce for a real file system
(namespace, name length and value size), keeps sidecar files out of reach
of clients unless they are configured to be visible, and translates mount
paths into paths within the source directory.
"""

import contextlib
import errno
import logging
import os
import typing

from . import paths
from .config import MountConfig
from .const import (
    SECURITY_NAMESPACE,
    USER_NAMESPACE,
    XATTR_NAME_MAX,
    XATTR_SIZE_MAX,
)
from .errors import CorruptSidecar, SidecarError
from .store import SidecarStore

_logger = logging.getLogger(__name__)


def fs_error(code: int, path: str = "") -> OSError:
    """Return an OSError for the given errno, suitable for raising from
    a FUSE operation.
    """
    return OSError(code, os.strerror(code), path or None)


@contextlib.contextmanager
def _store_errors(op: str, path: str) -> typing.Iterator[None]:
    try:
        yield
    except CorruptSidecar as err:
        _logger.warning("%s: corrupt sidecar for %r: %s", op, path, err)
        raise fs_error(err.errno, path) from err
    except SidecarError as err:
        _logger.debug("%s: %r: %s", op, path, err)
        raise fs_error(err.errno, path) from err


class XattrDispatcher:
    def __init__(
        self,
        config: MountConfig,
        store: typing.Optional[SidecarStore] = None,
    ) -> None:
        self.config = config
        self.store = store or SidecarStore()

    def is_hidden(self, path: str) -> bool:
        """Return true if path refers to a sidecar that clients must not
        see or touch.
        """
        if self.config.show_sidecar:
            return False
        return paths.is_sidecar_path(path, self.store.suffix)

    def real_path(self, path: str) -> str:
        if self.is_hidden(path):
            raise fs_error(errno.ENOENT, path)
        return self.config.real_path(path)

    def check_name(self, name: str) -> None:
        if not name.startswith(USER_NAMESPACE):
            _logger.debug("only the user namespace is supported: %r", name)
            if name.startswith(SECURITY_NAMESPACE):
                raise fs_error(errno.EPERM)
            raise fs_error(errno.ENOTSUP)
        if len(name.encode("utf8")) > XATTR_NAME_MAX:
            _logger.debug(
                "attribute name longer than %d bytes: %r",
                XATTR_NAME_MAX,
                name,
            )
            raise fs_error(errno.ERANGE)

    def setxattr(
        self,
        path: str,
        name: str,
        value: bytes,
        options: int,
        position: int = 0,
    ) -> int:
        self.check_name(name)
        if len(value) > XATTR_SIZE_MAX:
            _logger.debug(
                "attribute value larger than %d bytes: %d",
                XATTR_SIZE_MAX,
                len(value),
            )
            raise fs_error(errno.ENOSPC)
        real = self.real_path(path)
        with _store_errors("setxattr", path):
            self.store.write(real, name, value, options)
        return 0

    def getxattr(self, path: str, name: str, position: int = 0) -> bytes:
        self.check_name(name)
        real = self.real_path(path)
        with _store_errors("getxattr", path):
            return self.store.get(real, name)

    def listxattr(self, path: str) -> typing.List[str]:
        real = self.real_path(path)
        with _store_errors("listxattr", path):
            names = self.store.names(real)
        return [n.decode("utf8", errors="surrogateescape") for n in names]

    def removexattr(self, path: str, name: str) -> int:
        self.check_name(name)
        real = self.real_path(path)
        with _store_errors("removexattr", path):
            self.store.remove(real, name)
        return 0
