"""The "uniqueid disk" command: show or change a disk's identifier."""

from __future__ import annotations

from typing import Sequence

from partkit.diskselect import MSG_INVALID_ARGS, MSG_NO_DISK
from partkit.guid import format_guid, parse_guid
from partkit.layout import update_gpt_layout, update_mbr_layout
from partkit.model import PartitionStyle
from partkit.session import CommandError, Session
from partkit.text import has_prefix, is_hex_string

__all__ = ["MSG_DISK_ID", "MSG_INVALID_STYLE", "unique_id_disk"]

MSG_DISK_ID = "Disk ID: {0}"
MSG_INVALID_STYLE = "The selected disk has no partition style that carries an ID."


def _write(session: Session, disk) -> None:
    try:
        session.write_partitions(disk)
    except OSError:
        # A failed write leaves the disk dirty; the command reports nothing.
        pass


def unique_id_disk(session: Session, args: Sequence[str]) -> str:
    """Show the current disk's ID, or set it from id=<signature>|<GUID>.

    Returns the message to show; raises CommandError on failure.
    """
    disk = session.current_disk
    if disk is None:
        return MSG_NO_DISK

    args = list(args)
    if not args:
        layout = disk.layout
        if layout.style == PartitionStyle.GPT:
            text = format_guid(layout.gpt_disk_id)
        elif layout.style == PartitionStyle.MBR:
            text = f"{layout.mbr_signature & 0xFFFFFFFF:08x}"
        else:
            text = "00000000"
        return MSG_DISK_ID.format(text)

    if len(args) != 1:
        raise CommandError(MSG_INVALID_ARGS)

    identifier = has_prefix(args[0], "id=")
    if identifier is None:
        raise CommandError(MSG_INVALID_ARGS)

    if disk.partition_style == PartitionStyle.GPT:
        try:
            disk.layout.gpt_disk_id = parse_guid(identifier)
        except ValueError:
            raise CommandError(MSG_INVALID_ARGS) from None
        disk.dirty = True
        update_gpt_layout(disk, False)
        _write(session, disk)
        return ""

    if disk.partition_style == PartitionStyle.MBR:
        if len(identifier) != 8 or not is_hex_string(identifier):
            raise CommandError(MSG_INVALID_ARGS)
        disk.layout.mbr_signature = int(identifier, 16)
        disk.dirty = True
        update_mbr_layout(disk)
        _write(session, disk)
        return ""

    return MSG_INVALID_STYLE