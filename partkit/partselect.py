"""The "select partition" and "select volume" commands."""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

from partkit.diskselect import MSG_INVALID_ARGS
from partkit.model import PARTITION_ENTRY_UNUSED, Partition, PartitionStyle
from partkit.session import CommandError, Session
from partkit.text import is_dec_string

__all__ = [
    "MSG_PARTITION_NO_DISK",
    "MSG_NO_PARTITION",
    "MSG_PARTITION_SELECTED",
    "MSG_PARTITION_INVALID",
    "MSG_NO_VOLUME",
    "MSG_VOLUME_SELECTED",
    "MSG_VOLUME_INVALID",
    "select_partition",
    "select_volume",
]

MSG_PARTITION_NO_DISK = "There is no disk selected to set the partition."
MSG_NO_PARTITION = "There is no partition selected."
MSG_PARTITION_SELECTED = "Partition {0} is now the selected partition."
MSG_PARTITION_INVALID = "The partition you specified is not valid."
MSG_NO_VOLUME = "There is no volume selected."
MSG_VOLUME_SELECTED = "Volume {0} is the selected volume."
MSG_VOLUME_INVALID = "The volume you specified is not valid."


def _numbered_partitions(session: Session) -> Iterator[tuple[int, Partition]]:
    """Yield (number, partition) for the selectable partitions of the current disk."""
    disk = session.current_disk
    assert disk is not None
    if disk.partition_style == PartitionStyle.MBR:
        candidates = [
            partition
            for partition in disk.partitions()
            if partition.partition_type != PARTITION_ENTRY_UNUSED
        ]
    elif disk.partition_style == PartitionStyle.GPT:
        candidates = [partition for partition in disk.primary if not partition.gpt_type.is_null]
    else:
        candidates = []
    yield from enumerate(candidates, start=1)


def _number_of(session: Session, partition: Partition) -> Optional[int]:
    for number, candidate in _numbered_partitions(session):
        if candidate is partition:
            return number
    return None


def select_partition(session: Session, args: Sequence[str]) -> str:
    """Select a partition of the current disk by number; with no argument, report it.

    Returns the message to show; raises CommandError on failure.
    """
    args = list(args)
    if len(args) > 1:
        raise CommandError(MSG_INVALID_ARGS)

    if session.current_disk is None:
        return MSG_PARTITION_NO_DISK

    if not args:
        current = session.current_partition
        if current is None:
            return MSG_NO_PARTITION
        number = _number_of(session, current)
        if number is None:
            number = current.partition_number
        return MSG_PARTITION_SELECTED.format(number)

    if not is_dec_string(args[0]):
        raise CommandError(MSG_INVALID_ARGS)
    wanted = int(args[0])

    for number, partition in _numbered_partitions(session):
        if number == wanted:
            session.current_partition = partition
            return MSG_PARTITION_SELECTED.format(number)

    raise CommandError(MSG_PARTITION_INVALID)


def select_volume(session: Session, args: Sequence[str]) -> str:
    """Select a volume by number; with no argument, report the selection.

    Returns the message to show; raises CommandError on failure.
    """
    args = list(args)
    if len(args) > 1:
        raise CommandError(MSG_INVALID_ARGS)

    if not args:
        if session.current_volume is None:
            return MSG_NO_VOLUME
        return MSG_VOLUME_SELECTED.format(session.current_volume.volume_number)

    if not is_dec_string(args[0]):
        raise CommandError(MSG_INVALID_ARGS)
    wanted = int(args[0])

    session.current_volume = None
    for volume in session.volumes:
        if volume.volume_number == wanted:
            session.current_volume = volume
            return MSG_VOLUME_SELECTED.format(volume.volume_number)

    raise CommandError(MSG_VOLUME_INVALID)