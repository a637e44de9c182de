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

import pathlib

import pytest

import sidecarfs.paths


def test_sidecar_path():
    assert sidecarfs.paths.sidecar_path("/a/b.txt") == "/a/b.txt.xattr"
    assert sidecarfs.paths.sidecar_path(pathlib.Path("/a/b")) == "/a/b.xattr"
    assert sidecarfs.paths.sidecar_path("/a/b", ".meta") == "/a/b.meta"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/a/b.txt.xattr", True),
        ("b.xattr", True),
        ("/dir.xattr/", True),
        ("/a/b.txt", False),
        ("/a/.xattr", False),
        (".xattr", False),
        ("/a/b.xattr/c", False),
        ("/a/bxattr", False),
        ("/", False),
    ],
)
def test_is_sidecar_path(path, expected):
    assert sidecarfs.paths.is_sidecar_path(path) == expected


def test_is_sidecar_path_custom_suffix():
    assert sidecarfs.paths.is_sidecar_path("/a/b.meta", ".meta")
    assert not sidecarfs.paths.is_sidecar_path("/a/b.xattr", ".meta")


def test_tracked_path():
    assert sidecarfs.paths.tracked_path("/a/b.txt.xattr") == "/a/b.txt"
    with pytest.raises(ValueError):
        sidecarfs.paths.tracked_path("/a/b.txt")
