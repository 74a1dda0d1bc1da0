"""Build a disk's partition lists from its drive layout."""

from __future__ import annotations

from typing import Optional

from partkit.model import (
    PARTITION_ENTRY_UNUSED,
    PARTITION_FAT32,
    PARTITION_FAT32_XINT13,
    PARTITION_FAT_12,
    PARTITION_FAT_16,
    PARTITION_HUGE,
    PARTITION_IFS,
    PARTITION_LINUX,
    PARTITION_XINT13,
    Disk,
    FormatState,
    Partition,
    PartitionStyle,
    align_down,
    is_container_partition,
)

__all__ = [
    "MBR_SECTOR_LIMIT",
    "add_mbr_partition",
    "add_gpt_partition",
    "scan_mbr_free_space",
    "scan_gpt_free_space",
    "load_partitions",
]

MBR_SECTOR_LIMIT = 0x100000000

_PREFORMATTED_TYPES = frozenset(
    {
        PARTITION_FAT_12,
        PARTITION_FAT_16,
        PARTITION_HUGE,
        PARTITION_XINT13,
        PARTITION_FAT32,
        PARTITION_FAT32_XINT13,
        PARTITION_LINUX,
        PARTITION_IFS,
    }
)


def _free_space(disk: Disk, start: int, unused: int, logical: bool) -> Partition:
    count = align_down(start + unused, disk.sector_alignment) - start
    return Partition(
        disk=disk,
        start_sector=start,
        sector_count=count,
        logical=logical,
        is_partitioned=False,
        format_state=FormatState.UNFORMATTED,
    )


def add_mbr_partition(disk: Disk, index: int, logical: bool) -> Optional[Partition]:
    """Add the MBR layout slot at index to the disk's lists.

    Unused slots, and container slots in the logical chain, are skipped
    and give None.
    """
    entry = disk.layout.entries[index]
    if entry.partition_type == PARTITION_ENTRY_UNUSED or (
        logical and is_container_partition(entry.partition_type)
    ):
        return None

    partition = Partition(
        disk=disk,
        start_sector=entry.starting_offset // disk.bytes_per_sector,
        sector_count=entry.partition_length // disk.bytes_per_sector,
        partition_type=entry.partition_type,
        boot_indicator=entry.boot_indicator,
        logical=logical,
        is_partitioned=True,
        partition_number=entry.partition_number,
        partition_index=index,
    )

    if is_container_partition(partition.partition_type):
        partition.format_state = FormatState.UNFORMATTED
        if not logical and disk.extended_partition is None:
            disk.extended_partition = partition
    elif partition.partition_type in _PREFORMATTED_TYPES:
        partition.format_state = FormatState.PREFORMATTED
    else:
        partition.format_state = FormatState.UNKNOWN_FORMAT

    (disk.logical if logical else disk.primary).append(partition)
    return partition


def add_gpt_partition(disk: Disk, index: int) -> Optional[Partition]:
    """Add the GPT layout slot at index; unused slots give None."""
    entry = disk.layout.entries[index]
    if entry.gpt_type.is_null:
        return None

    partition = Partition(
        disk=disk,
        start_sector=entry.starting_offset // disk.bytes_per_sector,
        sector_count=entry.partition_length // disk.bytes_per_sector,
        gpt_type=entry.gpt_type,
        gpt_id=entry.gpt_id,
        gpt_attributes=entry.gpt_attributes,
        logical=False,
        is_partitioned=True,
        partition_number=entry.partition_number,
        partition_index=index,
        format_state=FormatState.UNFORMATTED,
    )
    disk.primary.append(partition)
    return partition


def _fill_gaps(
    disk: Disk,
    partitions: list[Partition],
    first_start: int,
    lead: int,
    limit: int,
    logical: bool,
    in_use,
) -> list[Partition]:
    """Return partitions with free-space entries inserted between them and at the end."""
    alignment = disk.sector_alignment
    result: list[Partition] = []
    last_end = first_start
    for partition in partitions:
        if in_use(partition):
            gap_start = partition.start_sector - lead
            if gap_start > last_end and gap_start - last_end >= alignment:
                result.append(_free_space(disk, last_end, gap_start - last_end, logical))
            last_end = partition.start_sector + partition.sector_count
        result.append(partition)

    if last_end < limit:
        unused = align_down(limit - last_end, alignment)
        if unused >= alignment:
            result.append(_free_space(disk, last_end, unused, logical))
    return result


def _mbr_in_use(partition: Partition) -> bool:
    return partition.partition_type != PARTITION_ENTRY_UNUSED or partition.sector_count != 0


def _gpt_in_use(partition: Partition) -> bool:
    return not partition.gpt_type.is_null or partition.sector_count != 0


def scan_mbr_free_space(disk: Disk) -> None:
    """Insert entries for unpartitioned space on an MBR disk."""
    alignment = disk.sector_alignment
    start_sector = alignment
    end_sector = min(disk.sector_count, MBR_SECTOR_LIMIT) - 1

    if not disk.primary:
        disk.primary.append(_free_space(disk, start_sector, end_sector + 1 - start_sector, False))
        return

    disk.primary = _fill_gaps(
        disk, disk.primary, start_sector, 0, end_sector + 1, False, _mbr_in_use
    )

    extended = disk.extended_partition
    if extended is None:
        return

    if not disk.logical:
        disk.logical.append(
            Partition(
                disk=disk,
                start_sector=extended.start_sector + alignment,
                sector_count=extended.sector_count - alignment,
                logical=True,
                is_partitioned=False,
                format_state=FormatState.UNFORMATTED,
            )
        )
        return

    disk.logical = _fill_gaps(
        disk,
        disk.logical,
        extended.start_sector + alignment,
        alignment,
        extended.start_sector + extended.sector_count,
        True,
        _mbr_in_use,
    )


def scan_gpt_free_space(disk: Disk) -> None:
    """Insert entries for unpartitioned space on a GPT disk."""
    if not disk.primary:
        disk.primary.append(
            Partition(
                disk=disk,
                start_sector=disk.start_sector,
                sector_count=disk.end_sector - disk.start_sector + 1,
                is_partitioned=False,
                format_state=FormatState.UNFORMATTED,
            )
        )
        return

    disk.primary = _fill_gaps(
        disk, disk.primary, disk.start_sector, 0, disk.end_sector + 1, False, _gpt_in_use
    )


def load_partitions(disk: Disk) -> None:
    """Fill the disk's usable range and partition lists from its layout."""
    disk.primary = []
    disk.logical = []
    disk.extended_partition = None
    layout = disk.layout
    alignment = disk.sector_alignment

    if disk.partition_style == PartitionStyle.MBR:
        disk.start_sector = alignment
        disk.end_sector = min(disk.sector_count, MBR_SECTOR_LIMIT) - 1

        if layout.partition_count == 0:
            disk.new_disk = True
            layout.resize(4)
            for entry in layout.entries:
                entry.rewrite_partition = True
        else:
            for index in range(min(4, layout.partition_count)):
                add_mbr_partition(disk, index, False)
            for index in range(4, layout.partition_count, 4):
                add_mbr_partition(disk, index, True)

        scan_mbr_free_space(disk)

    elif disk.partition_style == PartitionStyle.GPT:
        bytes_per_sector = disk.bytes_per_sector
        disk.start_sector = (
            align_down(layout.gpt_starting_usable_offset // bytes_per_sector, alignment)
            + alignment
        )
        disk.end_sector = align_down(
            disk.start_sector + layout.gpt_usable_length // bytes_per_sector - 1,
            alignment,
        )

        if layout.partition_count == 0:
            disk.new_disk = True
        else:
            for index in range(layout.partition_count):
                add_gpt_partition(disk, index)

        scan_gpt_free_space(disk)