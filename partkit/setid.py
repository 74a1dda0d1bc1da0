"""The "set id" command: change the type of the selected partition."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from partkit.diskselect import MSG_INVALID_ARGS, MSG_NO_DISK
from partkit.guid import parse_guid
from partkit.layout import update_gpt_layout, update_mbr_layout
from partkit.partselect import MSG_NO_PARTITION
from partkit.session import CommandError, Session
from partkit.text import has_prefix
from partkit.model import PartitionStyle

__all__ = [
    "MSG_SETID_FAIL",
    "MSG_SETID_SUCCESS",
    "MSG_SETID_INVALID_FORMAT",
    "MSG_SETID_INVALID_TYPE",
    "MSG_NOERR_UNSUPPORTED",
    "MSG_OVERRIDE_UNSUPPORTED",
    "RESERVED_PARTITION_TYPE",
    "set_id",
]

MSG_SETID_FAIL = "DiskPart failed to set the partition ID."
MSG_SETID_SUCCESS = "DiskPart successfully set the partition ID."
MSG_SETID_INVALID_FORMAT = "The specified type is not in the correct format."
MSG_SETID_INVALID_TYPE = "The specified type is not valid for this partition."
MSG_NOERR_UNSUPPORTED = "The NOERR option is not supported yet!"
MSG_OVERRIDE_UNSUPPORTED = "The OVERRIDE option is not supported yet!"

# Type used by dynamic disks; it cannot be set by hand.
RESERVED_PARTITION_TYPE = 0x42

_LEADING_HEX = re.compile(r"[0-9A-Fa-f]*")


def _parse_type_byte(text: str) -> int:
    """Value of the leading hex digits of text; zero when there are none."""
    digits = _LEADING_HEX.match(text).group()
    return int(digits, 16) if digits else 0


def set_id(session: Session, args: Sequence[str]) -> str:
    """Set the type of the selected partition from id=<byte> or id=<GUID>.

    Returns the message to show; raises CommandError on failure.
    """
    disk = session.current_disk
    if disk is None:
        return MSG_NO_DISK
    partition = session.current_partition
    if partition is None:
        return MSG_NO_PARTITION

    args = list(args)
    notices = [MSG_NOERR_UNSUPPORTED for arg in args if arg.lower() == "noerr"]

    identifier: Optional[str] = None
    for arg in args:
        suffix = has_prefix(arg, "id=")
        if suffix is not None:
            identifier = suffix
        elif arg.lower() == "noerr":
            continue
        elif arg.lower() == "override":
            notices.append(MSG_OVERRIDE_UNSUPPORTED)
        else:
            raise CommandError(MSG_INVALID_ARGS)

    if disk.partition_style == PartitionStyle.GPT:
        try:
            partition.gpt_type = parse_guid(identifier)
        except ValueError:
            raise CommandError(MSG_INVALID_ARGS) from None
        disk.dirty = True
        update_gpt_layout(disk, False)
        try:
            session.write_partitions(disk)
        except OSError:
            raise CommandError(MSG_SETID_FAIL) from None

    elif disk.partition_style == PartitionStyle.MBR:
        if not identifier:
            raise CommandError(MSG_INVALID_ARGS)
        if len(identifier) > 2:
            raise CommandError(MSG_SETID_INVALID_FORMAT)
        partition_type = _parse_type_byte(identifier)
        if partition_type == RESERVED_PARTITION_TYPE:
            raise CommandError(MSG_SETID_INVALID_TYPE)
        partition.partition_type = partition_type
        disk.dirty = True
        update_mbr_layout(disk)
        try:
            session.write_partitions(disk)
        except OSError:
            raise CommandError(MSG_SETID_FAIL) from None

    return "\n".join([*notices, MSG_SETID_SUCCESS])