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

import io
import sys

import pytest

import sidecarfs.config

config1 = """
{
    "sidecarfs-config": "v0",
    "source": "/srv/plain",
    "show_sidecar": false,
    "fuse_options": {
        "allow_other": true,
        "max_read": 131072
    }
}
"""

config2 = """
{
    "sidecarfs-config": "v0",
    "show_sidecar": true,
    "fuse_options": {
        "fsname": "plainfs"
    }
}
"""

config_toml = """
sidecarfs-config = "v0"
source = "/srv/toml"
show_sidecar = true

[fuse_options]
allow_other = true
"""

config_yaml = """
sidecarfs-config: v0
source: /srv/yaml
fuse_options:
  ro: true
"""


def test_load_json():
    cdata = sidecarfs.config.ConfigData(io.StringIO(config1))
    mc = cdata.mount_config()
    assert mc.source_dir == "/srv/plain"
    assert not mc.show_sidecar
    assert mc.fuse_options == {"allow_other": True, "max_read": 131072}


def test_mount_config_overrides():
    cdata = sidecarfs.config.ConfigData(io.StringIO(config1))
    mc = cdata.mount_config(
        source_dir="/srv/other",
        show_sidecar=True,
        fuse_options={"allow_other": False, "ro": True},
    )
    assert mc == sidecarfs.config.MountConfig(
        "/srv/other",
        show_sidecar=True,
        fuse_options={"allow_other": False, "max_read": 131072, "ro": True},
    )


def test_mount_config_no_source():
    cdata = sidecarfs.config.ConfigData()
    with pytest.raises(ValueError):
        cdata.mount_config()
    mc = cdata.mount_config(source_dir="/srv/x/")
    assert mc.source_dir == "/srv/x"
    assert not mc.show_sidecar
    assert mc.fuse_options == {}


@pytest.mark.parametrize(
    "text",
    [
        '{"source": "/srv"}',
        '{"sidecarfs-config": "v9", "source": "/srv"}',
    ],
)
def test_bad_version(text):
    with pytest.raises(ValueError):
        sidecarfs.config.ConfigData(io.StringIO(text))


def test_read_config_files(tmp_path):
    fname1 = tmp_path / "a.json"
    fname1.write_text(config1)
    fname2 = tmp_path / "b.json"
    fname2.write_text(config2)
    missing = tmp_path / "missing.json"
    cdata = sidecarfs.config.read_config_files(
        [str(fname1), str(missing), str(fname2)]
    )
    mc = cdata.mount_config()
    assert mc.source_dir == "/srv/plain"
    assert mc.show_sidecar
    assert mc.fuse_options == {
        "allow_other": True,
        "max_read": 131072,
        "fsname": "plainfs",
    }


def test_read_config_files_none_exist(tmp_path):
    with pytest.raises(ValueError):
        sidecarfs.config.read_config_files([str(tmp_path / "nope.json")])


def test_read_config_files_toml(tmp_path):
    if sys.version_info < (3, 11):
        pytest.importorskip("tomli")
    fname = tmp_path / "sample.toml"
    fname.write_text(config_toml)
    mc = sidecarfs.config.read_config_files([str(fname)]).mount_config()
    assert mc.source_dir == "/srv/toml"
    assert mc.show_sidecar
    assert mc.fuse_options == {"allow_other": True}


def test_read_config_files_yaml(tmp_path):
    pytest.importorskip("yaml")
    fname = tmp_path / "sample.yaml"
    fname.write_text(config_yaml)
    mc = sidecarfs.config.read_config_files([str(fname)]).mount_config()
    assert mc.source_dir == "/srv/yaml"
    assert not mc.show_sidecar
    assert mc.fuse_options == {"ro": True}


def test_validation_rejects_bad_types(tmp_path):
    jsonschema = pytest.importorskip("jsonschema")
    fname = tmp_path / "bad.json"
    fname.write_text(
        '{"sidecarfs-config": "v0", "source": "/srv", "show_sidecar": "yes"}'
    )
    with pytest.raises(jsonschema.ValidationError):
        sidecarfs.config.read_config_files(
            [str(fname)], require_validation=True
        )
    # validation can be turned off
    cdata = sidecarfs.config.read_config_files(
        [str(fname)], require_validation=False
    )
    assert cdata.data["show_sidecar"] == "yes"


def test_validation_rejects_unknown_keys(tmp_path):
    jsonschema = pytest.importorskip("jsonschema")
    fname = tmp_path / "bad.json"
    fname.write_text('{"sidecarfs-config": "v0", "wibble": 1}')
    with pytest.raises(jsonschema.ValidationError):
        sidecarfs.config.read_config_files([str(fname)])


def test_parse_fuse_options():
    opts = sidecarfs.config.parse_fuse_options(
        ["allow_other,max_read=4096", "ro", " , fsname=x=y"]
    )
    assert opts == {
        "allow_other": True,
        "max_read": "4096",
        "ro": True,
        "fsname": "x=y",
    }
    assert sidecarfs.config.parse_fuse_options([]) == {}


def test_real_path():
    mc = sidecarfs.config.MountConfig("/srv/data/")
    assert mc.real_path("/") == "/srv/data/"
    assert mc.real_path("/a/b") == "/srv/data/a/b"
    root = sidecarfs.config.MountConfig("/")
    assert root.real_path("/a/b") == "/a/b"
