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

import errno

import pytest

from sidecarfs.config import MountConfig
from sidecarfs.const import XATTR_CREATE, XATTR_REPLACE
from sidecarfs.dispatch import XattrDispatcher
from sidecarfs.errors import ENOATTR


@pytest.fixture
def source(tmp_path):
    (tmp_path / "foo.txt").write_bytes(b"hello")
    return tmp_path


@pytest.fixture
def dispatcher(source):
    return XattrDispatcher(MountConfig(str(source)))


def _errno(excinfo):
    return excinfo.value.errno


def test_set_get_list_remove(dispatcher, source):
    assert dispatcher.setxattr("/foo.txt", "user.foo", b"bar", 0) == 0
    assert (source / "foo.txt.xattr").exists()
    assert dispatcher.getxattr("/foo.txt", "user.foo") == b"bar"
    assert dispatcher.listxattr("/foo.txt") == ["user.foo"]
    assert dispatcher.removexattr("/foo.txt", "user.foo") == 0
    assert dispatcher.listxattr("/foo.txt") == []
    with pytest.raises(OSError) as err:
        dispatcher.getxattr("/foo.txt", "user.foo")
    assert _errno(err) == ENOATTR


def test_unicode_names(dispatcher):
    name = "user.fooｼüßてЙĘ𝄠✠"
    dispatcher.setxattr("/foo.txt", name, b"bar", 0)
    assert dispatcher.listxattr("/foo.txt") == [name]
    assert dispatcher.getxattr("/foo.txt", name) == b"bar"
    dispatcher.removexattr("/foo.txt", name)


@pytest.mark.parametrize(
    "name,code",
    [
        ("system.foo", errno.ENOTSUP),
        ("trusted.foo", errno.ENOTSUP),
        ("trust.foo", errno.ENOTSUP),
        ("foo.foo", errno.ENOTSUP),
        ("security.foo", errno.EPERM),
    ],
)
def test_namespaces(dispatcher, name, code):
    with pytest.raises(OSError) as err:
        dispatcher.setxattr("/foo.txt", name, b"bar", 0)
    assert _errno(err) == code
    with pytest.raises(OSError) as err:
        dispatcher.getxattr("/foo.txt", name)
    assert _errno(err) == code
    with pytest.raises(OSError) as err:
        dispatcher.removexattr("/foo.txt", name)
    assert _errno(err) == code


def test_name_max_length(dispatcher):
    name = "user." + "x" * 250
    assert len(name) == 255
    dispatcher.setxattr("/foo.txt", name, b"x", 0)
    with pytest.raises(OSError) as err:
        dispatcher.setxattr("/foo.txt", name + "x", b"x", 0)
    assert _errno(err) == errno.ERANGE
    with pytest.raises(OSError) as err:
        dispatcher.getxattr("/foo.txt", name + "x")
    assert _errno(err) == errno.ERANGE


def test_value_max_size(dispatcher):
    dispatcher.setxattr("/foo.txt", "user.big", b"x" * 65536, 0)
    with pytest.raises(OSError) as err:
        dispatcher.setxattr("/foo.txt", "user.big", b"x" * 65537, 0)
    assert _errno(err) == errno.ENOSPC
    assert len(dispatcher.getxattr("/foo.txt", "user.big")) == 65536


def test_create_and_replace_flags(dispatcher):
    dispatcher.setxattr("/foo.txt", "user.foo", b"bar", XATTR_CREATE)
    with pytest.raises(OSError) as err:
        dispatcher.setxattr("/foo.txt", "user.foo", b"rab", XATTR_CREATE)
    assert _errno(err) == errno.EEXIST
    assert dispatcher.getxattr("/foo.txt", "user.foo") == b"bar"

    with pytest.raises(OSError) as err:
        dispatcher.setxattr("/foo.txt", "user.new", b"x", XATTR_REPLACE)
    assert _errno(err) == ENOATTR


def test_corrupt_sidecar(dispatcher, source):
    (source / "foo.txt.xattr").write_bytes(b"\x01")
    with pytest.raises(OSError) as err:
        dispatcher.listxattr("/foo.txt")
    assert _errno(err) == errno.EILSEQ


def test_hidden_sidecar(dispatcher):
    dispatcher.setxattr("/foo.txt", "user.foo", b"bar", 0)
    assert dispatcher.is_hidden("/foo.txt.xattr")
    for call in (
        lambda: dispatcher.getxattr("/foo.txt.xattr", "user.foo"),
        lambda: dispatcher.setxattr("/foo.txt.xattr", "user.foo", b"x", 0),
        lambda: dispatcher.listxattr("/foo.txt.xattr"),
        lambda: dispatcher.removexattr("/foo.txt.xattr", "user.foo"),
    ):
        with pytest.raises(OSError) as err:
            call()
        assert _errno(err) == errno.ENOENT


def test_visible_sidecar(source):
    dispatcher = XattrDispatcher(MountConfig(str(source), show_sidecar=True))
    assert not dispatcher.is_hidden("/foo.txt.xattr")
    assert dispatcher.real_path("/foo.txt.xattr") == str(
        source / "foo.txt.xattr"
    )


def test_real_path(dispatcher, source):
    assert dispatcher.real_path("/foo.txt") == str(source / "foo.txt")
    assert dispatcher.real_path("/") == str(source) + "/"
