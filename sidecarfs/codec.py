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
"""Encoding and decoding of sidecar attribute records.

A sidecar file is a headerless run of records, each one laid out as:

    name_len   native unsigned short, counts the trailing NUL
    name       name_len bytes, NUL terminated
    value_len  native size_t
    value      value_len bytes

Sizes are stored in the byte order and width of the producing machine.
There is no checksum: a file is valid when decoding consumes it exactly.
"""

import dataclasses
import struct
import typing

from .errors import CorruptSidecar

NameType = typing.Union[str, bytes]
Buffer = typing.Union[bytes, bytearray, memoryview]

_NAME_LEN = struct.Struct("@H")
_VALUE_LEN = struct.Struct("@N")


@dataclasses.dataclass(frozen=True)
class Record:
    """A single attribute. The name keeps its NUL terminator so that it
    compares byte for byte with what is stored on disk.
    """

    name: bytes
    value: bytes

    @property
    def name_size(self) -> int:
        return len(self.name)

    @property
    def key(self) -> bytes:
        """Return the attribute name without the terminator."""
        return self.name[:-1]


def c_name(name: NameType) -> bytes:
    """Return the NUL terminated form of an attribute name."""
    if isinstance(name, str):
        name = name.encode("utf8")
    if b"\0" in name:
        raise ValueError(f"attribute name contains a NUL byte: {name!r}")
    return name + b"\0"


def encode(name: bytes, value: bytes) -> bytes:
    """Encode a record. `name` must already be NUL terminated (see c_name).
    Sizes are not validated here beyond what the wire format can hold.
    """
    return b"".join(
        [
            _NAME_LEN.pack(len(name)),
            name,
            _VALUE_LEN.pack(len(value)),
            value,
        ]
    )


def write_record(fh: typing.IO, name: bytes, value: bytes) -> None:
    """Write one encoded record to a binary file-like sink."""
    fh.write(encode(name, value))


def _take(buffer: Buffer, offset: int, size: int) -> int:
    end = offset + size
    if end > len(buffer):
        raise CorruptSidecar(
            detail=(
                f"record field at offset {offset} needs {size} bytes,"
                f" only {len(buffer) - offset} remain"
            )
        )
    return end


def decode(buffer: Buffer, offset: int = 0) -> typing.Tuple[Record, int]:
    """Decode the record starting at `offset`. Returns the record and the
    offset just past it. Raises CorruptSidecar if any declared size runs
    past the end of the buffer.
    """
    pos = _take(buffer, offset, _NAME_LEN.size)
    (name_size,) = _NAME_LEN.unpack_from(buffer, offset)
    name_start, pos = pos, _take(buffer, pos, name_size)
    name = bytes(buffer[name_start:pos])

    value_start = _take(buffer, pos, _VALUE_LEN.size)
    (value_size,) = _VALUE_LEN.unpack_from(buffer, pos)
    pos = _take(buffer, value_start, value_size)
    value = bytes(buffer[value_start:pos])
    return Record(name=name, value=value), pos


def iter_records(buffer: Buffer) -> typing.Iterator[Record]:
    """Yield every record in the buffer, in file order."""
    offset = 0
    while offset < len(buffer):
        record, offset = decode(buffer, offset)
        yield record
