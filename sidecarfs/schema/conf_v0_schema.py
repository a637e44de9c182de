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
"""JSON schema for version v0 of the sidecarfs configuration."""

SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "$id": "sidecarfs-config-v0",
    "title": "sidecarfs configuration",
    "description": (
        "The configuration for mounting a sidecarfs file system. sidecarfs"
        " passes file\noperations through to a source directory and keeps"
        " extended attributes\nin sidecar files next to the files they"
        " belong to.\n"
    ),
    "type": "object",
    "$defs": {
        "fuse_option_value": {
            "description": (
                "A value for a FUSE mount option. Boolean options are passed"
                " by name\nwhen true and omitted when false.\n"
            ),
            "type": ["boolean", "integer", "string"],
        },
    },
    "properties": {
        "sidecarfs-config": {
            "description": "The configuration format version.",
            "type": "string",
            "enum": ["v0"],
        },
        "source": {
            "description": (
                "Path to the directory whose contents are exposed by the"
                " mount.\n"
            ),
            "type": "string",
        },
        "show_sidecar": {
            "description": (
                "If true, sidecar files are visible (and accessible) through"
                " the mount.\n"
            ),
            "type": "boolean",
        },
        "fuse_options": {
            "description": "Additional options passed to FUSE.",
            "type": "object",
            "additionalProperties": {"$ref": "#/$defs/fuse_option_value"},
        },
    },
    "additionalProperties": False,
    "required": ["sidecarfs-config"],
}
