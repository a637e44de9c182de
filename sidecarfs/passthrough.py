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
"""A passthrough file system that adds extended attribute support.

Ordinary operations are forwarded to the source directory. The xattr
operations are routed through the XattrDispatcher to the sidecar store.
Sidecar files move and vanish along with the files they belong to.

The SidecarFS class follows the operations protocol of fusepy but does not
import fusepy itself (fusepy loads libfuse as soon as it is imported). The
mount function performs that import.
"""

import contextlib
import errno
import logging
import os
import stat
import threading
import typing

from .config import MountConfig
from .dispatch import XattrDispatcher, fs_error
from .store import SidecarStore

_logger = logging.getLogger(__name__)

_STAT_KEYS = (
    "st_atime",
    "st_ctime",
    "st_gid",
    "st_mode",
    "st_mtime",
    "st_nlink",
    "st_size",
    "st_uid",
    "st_blocks",
    "st_rdev",
)
_STATVFS_KEYS = (
    "f_bavail",
    "f_bfree",
    "f_blocks",
    "f_bsize",
    "f_favail",
    "f_ffree",
    "f_files",
    "f_flag",
    "f_frsize",
    "f_namemax",
)


class SidecarFS:
    def __init__(
        self,
        config: MountConfig,
        store: typing.Optional[SidecarStore] = None,
    ) -> None:
        self.config = config
        self.store = store or SidecarStore()
        self.xattrs = XattrDispatcher(config, self.store)
        self.rwlock = threading.RLock()

    def __call__(self, op: str, path: str, *args: typing.Any) -> typing.Any:
        _logger.debug("-> %s %r %r", op, path, args)
        if not hasattr(self, op):
            raise fs_error(errno.EFAULT, path)
        try:
            ret = getattr(self, op)(path, *args)
        except OSError as err:
            _logger.debug("<- %s %r: %s", op, path, err)
            raise
        _logger.debug("<- %s %r", op, path)
        return ret

    def _real(self, path: str) -> str:
        return self.xattrs.real_path(path)

    def _remove_sidecar(self, real: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self.store.sidecar_path(real))

    def _move_sidecar(self, real_old: str, real_new: str) -> None:
        try:
            os.rename(
                self.store.sidecar_path(real_old),
                self.store.sidecar_path(real_new),
            )
        except FileNotFoundError:
            # the destination may have had attributes of its own, they
            # were replaced along with the destination file
            self._remove_sidecar(real_new)

    def init(self, path: str) -> None:
        _logger.info(
            "sidecarfs ready: source=%r show_sidecar=%r",
            self.config.source_dir,
            self.config.show_sidecar,
        )

    def destroy(self, path: str) -> None:
        _logger.info("sidecarfs unmounted: source=%r", self.config.source_dir)

    def access(self, path: str, amode: int) -> int:
        if not os.access(self._real(path), amode):
            raise fs_error(errno.EACCES, path)
        return 0

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(self._real(path), mode)

    def chown(self, path: str, uid: int, gid: int) -> None:
        os.chown(self._real(path), uid, gid)

    def create(self, path: str, mode: int, fi: typing.Any = None) -> int:
        return os.open(self._real(path), os.O_RDWR | os.O_CREAT, mode)

    def fallocate(
        self, path: str, mode: int, offset: int, length: int, fh: int
    ) -> None:
        # only plain allocation is supported, no punching or zeroing
        if mode:
            raise fs_error(errno.EOPNOTSUPP, path)
        fd = os.open(self._real(path), os.O_WRONLY)
        try:
            os.posix_fallocate(fd, offset, length)
        finally:
            os.close(fd)

    def flush(self, path: str, fh: int) -> None:
        os.fsync(fh)

    def fsync(self, path: str, datasync: int, fh: int) -> None:
        if datasync:
            os.fdatasync(fh)
        else:
            os.fsync(fh)

    def getattr(
        self, path: str, fh: typing.Optional[int] = None
    ) -> dict[str, typing.Any]:
        st = os.lstat(self._real(path))
        return {key: getattr(st, key) for key in _STAT_KEYS}

    def link(self, target: str, source: str) -> None:
        os.link(self._real(source), self._real(target))

    def mkdir(self, path: str, mode: int) -> None:
        os.mkdir(self._real(path), mode)

    def mknod(self, path: str, mode: int, dev: int) -> None:
        real = self._real(path)
        if stat.S_ISREG(mode):
            flags = os.O_CREAT | os.O_EXCL | os.O_WRONLY
            os.close(os.open(real, flags, mode))
        elif stat.S_ISFIFO(mode):
            os.mkfifo(real, mode)
        else:
            os.mknod(real, mode, dev)

    def open(self, path: str, flags: int) -> int:
        return os.open(self._real(path), flags)

    def read(self, path: str, size: int, offset: int, fh: int) -> bytes:
        with self.rwlock:
            os.lseek(fh, offset, os.SEEK_SET)
            return os.read(fh, size)

    def readdir(self, path: str, fh: int) -> typing.List[str]:
        entries = os.listdir(self._real(path))
        if not self.config.show_sidecar:
            entries = [e for e in entries if not self.xattrs.is_hidden(e)]
        return [".", ".."] + entries

    def readlink(self, path: str) -> str:
        return os.readlink(self._real(path))

    def release(self, path: str, fh: int) -> None:
        os.close(fh)

    def rename(self, old: str, new: str) -> None:
        real_old, real_new = self._real(old), self._real(new)
        os.rename(real_old, real_new)
        self._move_sidecar(real_old, real_new)

    def rmdir(self, path: str) -> None:
        real = self._real(path)
        os.rmdir(real)
        self._remove_sidecar(real)

    def statfs(self, path: str) -> dict[str, int]:
        stv = os.statvfs(self._real(path))
        return {key: getattr(stv, key) for key in _STATVFS_KEYS}

    def symlink(self, target: str, source: str) -> None:
        os.symlink(source, self._real(target))

    def truncate(
        self, path: str, length: int, fh: typing.Optional[int] = None
    ) -> None:
        if fh is not None:
            os.ftruncate(fh, length)
        else:
            os.truncate(self._real(path), length)

    def unlink(self, path: str) -> None:
        real = self._real(path)
        os.unlink(real)
        self._remove_sidecar(real)

    def utimens(
        self,
        path: str,
        times: typing.Optional[typing.Tuple[float, float]] = None,
    ) -> None:
        os.utime(self._real(path), times, follow_symlinks=False)

    def write(self, path: str, data: bytes, offset: int, fh: int) -> int:
        with self.rwlock:
            os.lseek(fh, offset, os.SEEK_SET)
            return os.write(fh, data)

    def setxattr(
        self,
        path: str,
        name: str,
        value: bytes,
        options: int,
        position: int = 0,
    ) -> int:
        return self.xattrs.setxattr(path, name, value, options, position)

    def getxattr(self, path: str, name: str, position: int = 0) -> bytes:
        return self.xattrs.getxattr(path, name, position)

    def listxattr(self, path: str) -> typing.List[str]:
        return self.xattrs.listxattr(path)

    def removexattr(self, path: str, name: str) -> int:
        return self.xattrs.removexattr(path, name)


def mount(
    config: MountConfig,
    mountpoint: str,
    *,
    foreground: bool = True,
    store: typing.Optional[SidecarStore] = None,
) -> None:
    """Mount a sidecarfs file system and serve it until unmounted."""
    from fuse import FUSE  # type: ignore[import]

    operations = SidecarFS(config, store)
    options: dict[str, typing.Any] = {"fsname": "sidecarfs"}
    options.update(config.fuse_options)
    _logger.info(
        "mounting %r on %r (options: %r)",
        config.source_dir,
        mountpoint,
        options,
    )
    # modes passed in by the kernel were already masked for the caller
    os.umask(0)
    # the store does not serialize access to a sidecar, so neither may we
    FUSE(
        operations,
        mountpoint,
        foreground=foreground,
        nothreads=True,
        **options,
    )
