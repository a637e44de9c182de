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

from __future__ import annotations

import enum
import errno
import json
import sys
import typing

_VALID_VERSIONS = ["v0"]
_VERSION_KEY = "sidecarfs-config"

# JSONData is not really a completely valid representation of json in
# the type system, but it's good enough for now.
JSONData = dict[str, typing.Any]
FuseOptionValue = typing.Union[bool, int, str]

# cache for json schema data
_JSON_SCHEMA: dict[str, typing.Any] = {}


class ConfigFormat(enum.Enum):
    JSON = "json"
    TOML = "toml"
    YAML = "yaml"


class ValidationUnsupported(Exception):
    pass


class _FakeRefResolutionError(Exception):
    pass


class ConfigFormatUnsupported(Exception):
    pass


if sys.version_info >= (3, 11):

    def _load_toml(source: typing.IO) -> JSONData:
        try:
            import tomllib
        except ImportError:
            raise ConfigFormatUnsupported(ConfigFormat.TOML)
        return tomllib.load(source)

else:

    def _load_toml(source: typing.IO) -> JSONData:
        try:
            import tomli
        except ImportError:
            raise ConfigFormatUnsupported(ConfigFormat.TOML)
        if typing.TYPE_CHECKING:
            assert isinstance(source, typing.BinaryIO)
        return tomli.load(source)


def _load_yaml(source: typing.IO) -> JSONData:
    try:
        import yaml
    except ImportError:
        raise ConfigFormatUnsupported(ConfigFormat.YAML)
    return yaml.safe_load(source) or {}


def _detect_format(fname: str) -> ConfigFormat:
    if fname.endswith(".toml"):
        return ConfigFormat.TOML
    if fname.endswith((".yaml", ".yml")):
        return ConfigFormat.YAML
    return ConfigFormat.JSON


def _schema_validate(data: dict[str, typing.Any], version: str) -> None:
    try:
        import jsonschema  # type: ignore[import]
    except ImportError:
        raise ValidationUnsupported()
    try:
        _refreserror = getattr(jsonschema, "RefResolutionError")
    except AttributeError:
        _refreserror = _FakeRefResolutionError

    if version == "v0" and version not in _JSON_SCHEMA:
        try:
            import sidecarfs.schema.conf_v0_schema

            _JSON_SCHEMA[version] = sidecarfs.schema.conf_v0_schema.SCHEMA
        except ImportError:
            raise ValidationUnsupported()
    try:
        jsonschema.validate(instance=data, schema=_JSON_SCHEMA[version])
    except _refreserror:
        raise ValidationUnsupported()


def _check_config_version(data: JSONData) -> str:
    """Return the config version or raise a ValueError if the config
    is invalid or incomplete.
    """
    version = data.get(_VERSION_KEY)
    if version is None:
        raise ValueError(f"Invalid config: no {_VERSION_KEY} key")
    elif version not in _VALID_VERSIONS:
        raise ValueError(f"Invalid config: unknown version {version}")
    return version


def _check_config_valid(
    data: JSONData, version: str, required: typing.Optional[bool] = None
) -> None:
    if required or required is None:
        try:
            _schema_validate(data, version)
        except ValidationUnsupported:
            if required:
                raise


def read_config_files(
    fnames: typing.Sequence[str],
    *,
    require_validation: typing.Optional[bool] = None,
) -> ConfigData:
    """Read the sidecarfs config from the given filenames.
    At least one of the files from the fnames list must exist and contain
    a valid config. Values from later files replace those of earlier ones.
    """
    cdata = ConfigData()
    readfiles = set()
    for fname in fnames:
        config_format = _detect_format(str(fname))
        try:
            with open(fname, "rb") as fh:
                cdata.load(
                    fh,
                    require_validation=require_validation,
                    config_format=config_format,
                )
            readfiles.add(fname)
        except OSError as err:
            if getattr(err, "errno", 0) != errno.ENOENT:
                raise
    if not readfiles:
        # we read nothing! don't proceed
        raise ValueError(f"None of the config file paths exist: {fnames}")
    return cdata


class ConfigData:
    def __init__(
        self,
        source: typing.Optional[typing.IO] = None,
        *,
        initial_data: typing.Optional[JSONData] = None,
    ) -> None:
        self.data: JSONData = {} if initial_data is None else initial_data
        if source is not None:
            self.load(source)

    def load(
        self,
        source: typing.IO,
        *,
        require_validation: typing.Optional[bool] = None,
        config_format: typing.Optional[ConfigFormat] = None,
    ) -> None:
        config_format = config_format or ConfigFormat.JSON
        if config_format == ConfigFormat.TOML:
            data = _load_toml(source)
        elif config_format == ConfigFormat.YAML:
            data = _load_yaml(source)
        else:
            data = json.load(source)
        _check_config_valid(
            data, _check_config_version(data), require_validation
        )
        fuse_options = dict(self.data.get("fuse_options", {}))
        fuse_options.update(data.get("fuse_options", {}))
        self.data.update(data)
        if fuse_options:
            self.data["fuse_options"] = fuse_options

    def mount_config(
        self,
        source_dir: typing.Optional[str] = None,
        show_sidecar: typing.Optional[bool] = None,
        fuse_options: typing.Optional[dict[str, FuseOptionValue]] = None,
    ) -> MountConfig:
        """Return a mount configuration. Non-None arguments take precedence
        over values from the configuration data.
        """
        source_dir = source_dir or self.data.get("source")
        if not source_dir:
            raise ValueError("Invalid config: no source directory")
        if show_sidecar is None:
            show_sidecar = bool(self.data.get("show_sidecar", False))
        options = dict(self.data.get("fuse_options", {}))
        options.update(fuse_options or {})
        return MountConfig(
            source_dir, show_sidecar=show_sidecar, fuse_options=options
        )


class MountConfig:
    """Settings of a single sidecarfs mount. Instances are passed to the
    components that need them rather than kept in module state.
    """

    def __init__(
        self,
        source_dir: str,
        *,
        show_sidecar: bool = False,
        fuse_options: typing.Optional[dict[str, FuseOptionValue]] = None,
    ) -> None:
        # paths from FUSE always start with a slash
        self.source_dir = source_dir.rstrip("/") or "/"
        self.show_sidecar = show_sidecar
        self.fuse_options: dict[str, FuseOptionValue] = dict(
            fuse_options or {}
        )

    def real_path(self, path: str) -> str:
        """Translate a path within the mount to a path in the source dir."""
        if self.source_dir == "/":
            return path
        return self.source_dir + path

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, MountConfig):
            return NotImplemented
        return (
            self.source_dir == other.source_dir
            and self.show_sidecar == other.show_sidecar
            and self.fuse_options == other.fuse_options
        )

    def __repr__(self) -> str:
        return (
            f"MountConfig({self.source_dir!r},"
            f" show_sidecar={self.show_sidecar!r},"
            f" fuse_options={self.fuse_options!r})"
        )


def parse_fuse_options(
    values: typing.Iterable[str],
) -> dict[str, FuseOptionValue]:
    """Parse mount -o style options ("a,b=c") into a dict. Options given
    without a value are treated as boolean flags.
    """
    out: dict[str, FuseOptionValue] = {}
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            if "=" in part:
                key, val = part.split("=", 1)
                out[key] = val
            else:
                out[part] = True
    return out
