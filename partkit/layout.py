"""Keep a disk's drive layout in step with its partition lists."""

from __future__ import annotations

from typing import Optional

from partkit.model import (
    PARTITION_ENTRY_UNUSED,
    PARTITION_EXTENDED,
    Disk,
    LayoutEntry,
    Partition,
    PartitionStyle,
    is_container_partition,
    is_recognized_partition,
)

__all__ = [
    "primary_partition_count",
    "logical_partition_count",
    "update_mbr_layout",
    "update_gpt_layout",
    "previous_unpartitioned",
    "next_unpartitioned",
]

_LOW_32 = 0xFFFFFFFF


def primary_partition_count(disk: Disk) -> int:
    """Number of real partitions in the primary list."""
    return sum(1 for partition in disk.primary if partition.is_partitioned)


def logical_partition_count(disk: Disk) -> int:
    """Number of real partitions in the logical list."""
    return sum(1 for partition in disk.logical if partition.is_partitioned)


def _resize_mbr_layout(disk: Disk) -> None:
    """Give the layout four primary slots plus four per logical partition."""
    layout = disk.layout
    current = layout.partition_count
    wanted = 4 + logical_partition_count(disk) * 4
    if current == wanted:
        return
    layout.resize(wanted)
    for entry in layout.entries[current:]:
        entry.rewrite_partition = True


def _wipe(entry: LayoutEntry) -> None:
    entry.style = PartitionStyle.MBR
    entry.starting_offset = 0
    entry.partition_length = 0
    entry.hidden_sectors = 0
    entry.partition_number = 0
    entry.partition_type = PARTITION_ENTRY_UNUSED
    entry.boot_indicator = False
    entry.recognized_partition = False
    entry.rewrite_partition = True


def _same_primary_entry(entry: LayoutEntry, disk: Disk, partition: Partition) -> bool:
    return (
        entry.starting_offset == partition.start_sector * disk.bytes_per_sector
        and entry.partition_length == partition.sector_count * disk.bytes_per_sector
    )


def update_mbr_layout(disk: Disk) -> None:
    """Rewrite the MBR layout slots from the disk's partition lists and mark it dirty.

    Raises ValueError if there are more than four primary partitions, or
    logical partitions without an extended partition to chain them in.
    """
    primaries = [partition for partition in disk.primary if partition.is_partitioned]
    logicals = [partition for partition in disk.logical if partition.is_partitioned]
    if len(primaries) > 4:
        raise ValueError("an MBR disk holds at most four primary partitions")
    if len(logicals) > 1 and disk.extended_partition is None:
        raise ValueError("logical partitions need an extended partition")

    _resize_mbr_layout(disk)
    layout = disk.layout
    layout.style = PartitionStyle.MBR
    bytes_per_sector = disk.bytes_per_sector
    alignment = disk.sector_alignment
    partition_number = 1

    for index, partition in enumerate(primaries):
        entry = layout.entries[index]
        partition.partition_index = index
        if partition.new:
            partition.partition_number = 0
        container = is_container_partition(partition.partition_type)
        partition.on_disk_partition_number = 0 if container else partition_number

        if not _same_primary_entry(entry, disk, partition):
            entry.style = PartitionStyle.MBR
            entry.starting_offset = partition.start_sector * bytes_per_sector
            entry.partition_length = partition.sector_count * bytes_per_sector
            entry.hidden_sectors = partition.start_sector & _LOW_32
            entry.partition_number = partition.partition_number
            entry.partition_type = partition.partition_type
            entry.boot_indicator = partition.boot_indicator
            entry.recognized_partition = is_recognized_partition(partition.partition_type)
            entry.rewrite_partition = True

        if not container:
            partition_number += 1

    link: Optional[LayoutEntry] = None
    for position, partition in enumerate(logicals):
        index = 4 + position * 4
        entry = layout.entries[index]
        partition.partition_index = index
        if partition.new:
            partition.partition_number = 0
        partition.on_disk_partition_number = partition_number

        entry.style = PartitionStyle.MBR
        entry.starting_offset = partition.start_sector * bytes_per_sector
        entry.partition_length = partition.sector_count * bytes_per_sector
        entry.hidden_sectors = alignment
        entry.partition_number = partition.partition_number
        entry.partition_type = partition.partition_type
        entry.boot_indicator = False
        entry.recognized_partition = is_recognized_partition(partition.partition_type)
        entry.rewrite_partition = True

        if link is not None:
            assert disk.extended_partition is not None
            link.style = PartitionStyle.MBR
            link.starting_offset = (partition.start_sector - alignment) * bytes_per_sector
            link.partition_length = (partition.start_sector + alignment) * bytes_per_sector
            hidden = (
                partition.start_sector - alignment - disk.extended_partition.start_sector
            )
            link.hidden_sectors = hidden & _LOW_32
            link.partition_number = 0
            link.partition_type = PARTITION_EXTENDED
            link.boot_indicator = False
            link.recognized_partition = False
            link.rewrite_partition = True

        link = layout.entries[index + 1]
        partition_number += 1

    for index in range(primary_partition_count(disk), 4):
        entry = layout.entries[index]
        if not entry.is_empty():
            _wipe(entry)

    for index in range(4, layout.partition_count):
        if index % 4 >= 2:
            entry = layout.entries[index]
            if not entry.is_empty():
                _wipe(entry)

    disk.dirty = True


def update_gpt_layout(disk: Disk, delete_entry: bool) -> None:
    """Rewrite the GPT layout from the primary list.

    With delete_entry an extra zeroed slot is kept at the end so the
    removed partition is erased on disk.
    """
    used = [partition for partition in disk.primary if not partition.gpt_type.is_null]
    count = len(used) + (1 if delete_entry else 0)
    layout = disk.layout
    if count != layout.partition_count:
        layout.resize(count)

    bytes_per_sector = disk.bytes_per_sector
    for index, partition in enumerate(used):
        entry = layout.entries[index]
        partition.partition_index = index
        entry.style = PartitionStyle.GPT
        entry.starting_offset = partition.start_sector * bytes_per_sector
        entry.partition_length = partition.sector_count * bytes_per_sector
        entry.partition_number = index + 1
        entry.rewrite_partition = True
        entry.gpt_type = partition.gpt_type
        entry.gpt_id = partition.gpt_id
        entry.gpt_attributes = partition.gpt_attributes
        entry.gpt_name = ""
        partition.partition_number = entry.partition_number

    if delete_entry:
        entry = layout.entries[len(used)]
        entry.clear()
        entry.rewrite_partition = True


def _neighbours(partition: Partition) -> list[Partition]:
    disk = partition.disk
    if disk is None:
        raise ValueError("partition belongs to no disk")
    entries = disk.logical if partition.logical else disk.primary
    for position, known in enumerate(entries):
        if known is partition:
            return [
                entries[position - 1] if position > 0 else None,
                entries[position + 1] if position + 1 < len(entries) else None,
            ]
    raise ValueError("partition is not listed on its disk")


def previous_unpartitioned(partition: Partition) -> Optional[Partition]:
    """The free-space entry just before partition, if there is one."""
    before, _ = _neighbours(partition)
    if before is not None and not before.is_partitioned:
        return before
    return None


def next_unpartitioned(partition: Partition) -> Optional[Partition]:
    """The free-space entry just after partition, if there is one."""
    _, after = _neighbours(partition)
    if after is not None and not after.is_partitioned:
        return after
    return None