"""The "select disk" command."""

from __future__ import annotations

from typing import Sequence

from partkit.session import CommandError, Session
from partkit.text import is_dec_string

__all__ = [
    "MSG_INVALID_ARGS",
    "MSG_NO_DISK",
    "MSG_DISK_SELECTED",
    "MSG_DISK_INVALID",
    "MSG_ENUM_NO_START",
    "MSG_ENUM_FINISHED",
    "select_disk",
]

MSG_INVALID_ARGS = "The arguments specified for this command are not valid."
MSG_NO_DISK = "There is no disk selected."
MSG_DISK_SELECTED = "Disk {0} is now the selected disk."
MSG_DISK_INVALID = "The disk you specified is not valid."
MSG_ENUM_NO_START = "There is no selected disk to continue the enumeration from."
MSG_ENUM_FINISHED = "The enumeration of disks has finished."


def _selected(session: Session) -> str:
    assert session.current_disk is not None
    return MSG_DISK_SELECTED.format(session.current_disk.disk_number)


def select_disk(session: Session, args: Sequence[str]) -> str:
    """Select a disk by number, "system" or "next"; with no argument, report the selection.

    Returns the message to show; raises CommandError on failure.
    """
    args = list(args)
    if len(args) > 1:
        raise CommandError(MSG_INVALID_ARGS)

    if not args:
        if session.current_disk is None:
            return MSG_NO_DISK
        return _selected(session)

    choice = args[0]
    keyword = choice.lower()

    if keyword == "system":
        if not session.disks:
            session.current_disk = None
            raise CommandError(MSG_DISK_INVALID)
        session.current_disk = session.disks[0]
        session.current_partition = None
        return _selected(session)

    if keyword == "next":
        current = session.current_disk
        if current is None:
            session.current_partition = None
            raise CommandError(MSG_ENUM_NO_START)
        position = next(
            (index for index, disk in enumerate(session.disks) if disk is current), None
        )
        if position is None or position + 1 >= len(session.disks):
            session.current_disk = None
            session.current_partition = None
            raise CommandError(MSG_ENUM_FINISHED)
        session.current_disk = session.disks[position + 1]
        session.current_partition = None
        return _selected(session)

    if is_dec_string(choice):
        number = int(choice)
        session.current_disk = None
        for disk in session.disks:
            if disk.disk_number == number:
                session.current_disk = disk
                session.current_partition = None
                return _selected(session)
        raise CommandError(MSG_DISK_INVALID)

    raise CommandError(MSG_INVALID_ARGS)