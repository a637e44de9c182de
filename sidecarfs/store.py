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
"""The sidecar attribute store.

Attributes of a tracked file live in a sidecar file next to it (see
sidecarfs.paths). Every operation reads the whole sidecar into memory,
scans it linearly and, when something changed, rewrites it completely.
Nothing is cached between calls so every operation costs O(sidecar size).

Rewrites go to a temporary file in the same directory that is then
renamed over the sidecar. Readers never see a partially written sidecar,
but the store does not serialize concurrent writers: callers must not
run two operations on the same tracked path at the same time.
"""

import contextlib
import io
import logging
import os
import stat
import tempfile
import typing

from .codec import (
    NameType,
    Record,
    c_name,
    encode,
    iter_records,
    write_record,
)
from .const import (
    MAX_METADATA_SIZE,
    SIDECAR_EXT,
    XATTR_CREATE,
    XATTR_LIST_MAX,
    XATTR_REPLACE,
)
from .errors import (
    AttributeExists,
    AttributeNotFound,
    CorruptSidecar,
    InsufficientBuffer,
    ListTooBig,
    SidecarTooLarge,
)
from .paths import PathType, sidecar_path

_logger = logging.getLogger(__name__)

WritableBuffer = typing.Union[bytearray, memoryview]


@contextlib.contextmanager
def _opendir(path: str) -> typing.Iterator[int]:
    dfd: int = os.open(path, os.O_DIRECTORY)
    try:
        yield dfd
        os.fsync(dfd)
    finally:
        os.close(dfd)


class SidecarStore:
    """Read and modify attributes kept in sidecar files.

    `path` arguments always name the tracked file, never the sidecar.
    Names may be str or bytes and are given without a NUL terminator.
    """

    def __init__(
        self,
        *,
        suffix: str = SIDECAR_EXT,
        max_size: int = MAX_METADATA_SIZE,
        list_max: int = XATTR_LIST_MAX,
        file_mode: int = 0o644,
    ) -> None:
        self.suffix = suffix
        self.max_size = max_size
        self.list_max = list_max
        self.file_mode = file_mode

    def sidecar_path(self, path: PathType) -> str:
        return sidecar_path(path, self.suffix)

    def load(self, path: PathType) -> typing.Optional[bytes]:
        """Return the raw contents of the sidecar for path. Returns None
        if the sidecar is missing or empty, meaning there are no attributes.
        """
        spath = self.sidecar_path(path)
        try:
            fh = open(spath, "rb")
        except FileNotFoundError:
            _logger.debug("no sidecar file: %r", spath)
            return None
        with fh:
            size = os.fstat(fh.fileno()).st_size
            if size > self.max_size:
                raise SidecarTooLarge(
                    spath, f"{size} bytes exceeds limit of {self.max_size}"
                )
            if size == 0:
                _logger.debug("empty sidecar file: %r", spath)
                return None
            # the sidecar may have grown since the fstat
            data = fh.read(self.max_size + 1)
            if len(data) > self.max_size:
                raise SidecarTooLarge(
                    spath, f"more than {self.max_size} bytes"
                )
            return data

    def _records(self, spath: str, data: bytes) -> typing.Iterator[Record]:
        try:
            yield from iter_records(data)
        except CorruptSidecar as err:
            err.filename = spath
            raise

    def _commit(self, spath: str, data: bytes) -> None:
        dirname = os.path.dirname(spath) or "."
        try:
            mode = stat.S_IMODE(os.stat(spath).st_mode)
        except FileNotFoundError:
            mode = self.file_mode
        # the temporary name ends with the suffix too so that it stays
        # hidden wherever sidecars are hidden, and stays short so that it
        # fits within NAME_MAX whenever the sidecar name does
        fd, tmp = tempfile.mkstemp(prefix=".", suffix=self.suffix, dir=dirname)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fchmod(fh.fileno(), mode)
                os.fsync(fh.fileno())
            with _opendir(dirname):
                os.replace(tmp, spath)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp)
            raise
        _logger.debug("wrote %d bytes to sidecar: %r", len(data), spath)

    def write(
        self,
        path: PathType,
        name: NameType,
        value: bytes,
        flags: int = 0,
    ) -> None:
        """Set attribute `name` to `value`.
        flags may contain XATTR_CREATE (fail if the attribute exists) and/or
        XATTR_REPLACE (fail if it does not).
        """
        cname = c_name(name)
        value = bytes(value)
        spath = self.sidecar_path(path)
        _logger.debug(
            "write: path=%r name=%r size=%d flags=%#x",
            path,
            cname,
            len(value),
            flags,
        )
        data = self.load(path)
        if data is None:
            if flags & XATTR_REPLACE:
                raise AttributeNotFound(spath, f"{cname[:-1]!r} (replace)")
            self._commit(spath, encode(cname, value))
            return

        out = io.BytesIO()
        matched = exists = False
        for record in self._records(spath, data):
            if record.name != cname:
                write_record(out, record.name, record.value)
                continue
            if matched:
                raise CorruptSidecar(
                    spath, f"duplicate attribute {record.key!r}"
                )
            matched = True
            if flags & XATTR_CREATE:
                exists = True
                write_record(out, record.name, record.value)
            else:
                write_record(out, cname, value)

        if exists:
            raise AttributeExists(spath, f"{cname[:-1]!r} (create)")
        if not matched:
            if flags & XATTR_REPLACE:
                raise AttributeNotFound(spath, f"{cname[:-1]!r} (replace)")
            write_record(out, cname, value)
        self._commit(spath, out.getvalue())

    def _find(self, path: PathType, name: NameType) -> Record:
        cname = c_name(name)
        spath = self.sidecar_path(path)
        data = self.load(path)
        if data is None:
            raise AttributeNotFound(spath, repr(cname[:-1]))
        for record in self._records(spath, data):
            # equal bytes implies equal stored length, terminator included
            if record.name == cname:
                return record
        raise AttributeNotFound(spath, repr(cname[:-1]))

    def read(
        self,
        path: PathType,
        name: NameType,
        buf: typing.Optional[WritableBuffer] = None,
    ) -> int:
        """Copy the value of attribute `name` into buf and return its size.
        If buf is None or empty nothing is copied and only the size of the
        value is returned.
        """
        _logger.debug("read: path=%r name=%r", path, name)
        record = self._find(path, name)
        size = len(record.value)
        if buf is None or len(buf) == 0:
            return size
        if size > len(buf):
            raise InsufficientBuffer(
                self.sidecar_path(path),
                f"value needs {size} bytes, buffer holds {len(buf)}",
            )
        buf[:size] = record.value
        return size

    def get(self, path: PathType, name: NameType) -> bytes:
        """Return the value of attribute `name`."""
        _logger.debug("get: path=%r name=%r", path, name)
        return self._find(path, name).value

    def list(
        self, path: PathType, buf: typing.Optional[WritableBuffer] = None
    ) -> int:
        """Copy the NUL terminated attribute names into buf, back to back,
        and return the number of bytes used. If buf is None or empty only
        the required size is returned.
        """
        _logger.debug("list: path=%r", path)
        spath = self.sidecar_path(path)
        data = self.load(path)
        if data is None:
            return 0
        dest = buf if buf is not None and len(buf) > 0 else None
        total = 0
        for record in self._records(spath, data):
            end = total + record.name_size
            if dest is not None:
                if end > len(dest):
                    raise InsufficientBuffer(
                        spath,
                        f"names need more than {len(dest)} bytes",
                    )
                dest[total:end] = record.name
            total = end
        if dest is None and total > self.list_max:
            raise ListTooBig(spath, f"names need {total} bytes")
        return total

    def names(self, path: PathType) -> typing.List[bytes]:
        """Return the attribute names, without terminators, in file order."""
        spath = self.sidecar_path(path)
        data = self.load(path)
        if data is None:
            return []
        records = list(self._records(spath, data))
        total = sum(r.name_size for r in records)
        if total > self.list_max:
            raise ListTooBig(spath, f"names need {total} bytes")
        return [r.key for r in records]

    def check(self, path: PathType) -> int:
        """Decode the whole sidecar and return the number of attributes.
        Raises CorruptSidecar if the sidecar can not be decoded exactly or
        if a name appears more than once.
        """
        spath = self.sidecar_path(path)
        data = self.load(path)
        if data is None:
            return 0
        seen: typing.Set[bytes] = set()
        for record in self._records(spath, data):
            if record.name in seen:
                raise CorruptSidecar(
                    spath, f"duplicate attribute {record.key!r}"
                )
            seen.add(record.name)
        return len(seen)

    def remove(self, path: PathType, name: NameType) -> None:
        """Remove attribute `name`. If the sidecar held more than one
        record with that name all of them are removed and CorruptSidecar
        is raised after the sidecar has been rewritten.
        """
        cname = c_name(name)
        spath = self.sidecar_path(path)
        _logger.debug("remove: path=%r name=%r", path, cname)
        data = self.load(path)
        if data is None:
            raise AttributeNotFound(spath, repr(cname[:-1]))

        out = io.BytesIO()
        removed = 0
        for record in self._records(spath, data):
            if record.name == cname:
                removed += 1
            else:
                write_record(out, record.name, record.value)
        if removed == 0:
            raise AttributeNotFound(spath, repr(cname[:-1]))

        self._commit(spath, out.getvalue())
        if removed > 1:
            raise CorruptSidecar(
                spath, f"removed {removed} records named {cname[:-1]!r}"
            )
