# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

"""On-disk formats."""

from .metadata import (
    METADATA_FILENAME,
    METADATA_VERSION,
    BackupMetadata,
    decode_metadata,
    encode_metadata,
    metadata_path,
    read_metadata,
    write_metadata,
)

__all__ = [
    "BackupMetadata",
    "METADATA_FILENAME",
    "METADATA_VERSION",
    "decode_metadata",
    "encode_metadata",
    "metadata_path",
    "read_metadata",
    "write_metadata",
]
