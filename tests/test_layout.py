import pytest

from partkit.guid import Guid
from partkit.layout import (
    logical_partition_count,
    next_unpartitioned,
    previous_unpartitioned,
    primary_partition_count,
    update_gpt_layout,
    update_mbr_layout,
)
from partkit.model import (
    PARTITION_ENTRY_UNUSED,
    PARTITION_EXTENDED,
    PARTITION_IFS,
    Disk,
    LayoutEntry,
    Partition,
    PartitionStyle,
)

TYPE_GUID = Guid(0xEBD0A0A2, 0xB9E5, 0x4433, bytes.fromhex("87c068b6b72699c7"))
ID_GUID = Guid(0x12345678, 0x1111, 0x2222, bytes(range(8)))


def _mbr_disk():
    return Disk(
        partition_style=PartitionStyle.MBR,
        bytes_per_sector=512,
        sector_alignment=2048,
        sector_count=1_000_000,
    )


def _part(disk, start, count, ptype=PARTITION_IFS, logical=False, **kw):
    partition = Partition(
        disk=disk,
        start_sector=start,
        sector_count=count,
        partition_type=ptype,
        is_partitioned=True,
        logical=logical,
        **kw,
    )
    (disk.logical if logical else disk.primary).append(partition)
    return partition


def _free(disk, start, count, logical=False):
    partition = Partition(disk=disk, start_sector=start, sector_count=count, logical=logical)
    (disk.logical if logical else disk.primary).append(partition)
    return partition


def test_counts_skip_free_space():
    disk = _mbr_disk()
    _part(disk, 2048, 4096)
    _free(disk, 6144, 2048)
    _part(disk, 8192, 4096, PARTITION_EXTENDED)
    _part(disk, 10240, 1000, logical=True)
    assert primary_partition_count(disk) == 2
    assert logical_partition_count(disk) == 1


def test_update_mbr_fills_primary_entry():
    disk = _mbr_disk()
    part = _part(disk, 2048, 4096, partition_number=3)
    update_mbr_layout(disk)
    assert disk.layout.partition_count == 4
    entry = disk.layout.entries[0]
    assert entry.starting_offset == part.start_sector * disk.bytes_per_sector
    assert entry.partition_length == part.sector_count * disk.bytes_per_sector
    assert entry.hidden_sectors == part.start_sector
    assert entry.partition_type == PARTITION_IFS
    assert entry.partition_number == 3
    assert entry.recognized_partition is True
    assert entry.rewrite_partition is True
    assert part.partition_index == 0
    assert part.on_disk_partition_number == 1
    assert disk.dirty is True
    assert disk.layout.style == PartitionStyle.MBR


def test_new_partition_number_reset():
    disk = _mbr_disk()
    part = _part(disk, 2048, 4096, partition_number=5, new=True)
    update_mbr_layout(disk)
    assert part.partition_number == 0
    assert disk.layout.entries[0].partition_number == 0


def test_matching_entry_left_alone():
    disk = _mbr_disk()
    part = _part(disk, 2048, 4096)
    disk.layout.resize(4)
    disk.layout.entries[0] = LayoutEntry(
        starting_offset=part.start_sector * 512,
        partition_length=part.sector_count * 512,
        partition_type=PARTITION_IFS,
    )
    update_mbr_layout(disk)
    assert disk.layout.entries[0].rewrite_partition is False


def test_unused_primary_entries_wiped():
    disk = _mbr_disk()
    _part(disk, 2048, 4096)
    disk.layout.resize(4)
    disk.layout.entries[2] = LayoutEntry(
        starting_offset=4096, partition_length=8192, partition_type=PARTITION_IFS
    )
    update_mbr_layout(disk)
    wiped = disk.layout.entries[2]
    assert wiped.is_empty()
    assert wiped.partition_type == PARTITION_ENTRY_UNUSED
    assert wiped.rewrite_partition is True
    assert disk.layout.entries[3].rewrite_partition is False


def test_logical_chain():
    disk = _mbr_disk()
    _part(disk, 2048, 4096)
    extended = _part(disk, 8192, 100_000, PARTITION_EXTENDED)
    disk.extended_partition = extended
    first = _part(disk, 10240, 10_000, logical=True)
    second = _part(disk, 30720, 10_000, logical=True)
    update_mbr_layout(disk)

    layout = disk.layout
    assert layout.partition_count == 12
    assert extended.on_disk_partition_number == 0
    assert first.partition_index == 4
    assert second.partition_index == 8
    assert first.on_disk_partition_number == 2
    assert second.on_disk_partition_number == 3
    assert layout.entries[4].starting_offset == first.start_sector * 512
    assert layout.entries[4].hidden_sectors == disk.sector_alignment
    link = layout.entries[5]
    assert link.partition_type == PARTITION_EXTENDED
    assert link.starting_offset == (second.start_sector - disk.sector_alignment) * 512
    assert link.hidden_sectors == (
        second.start_sector - disk.sector_alignment - extended.start_sector
    )
    assert layout.entries[9].is_empty()


def test_too_many_primaries():
    disk = _mbr_disk()
    for number in range(5):
        _part(disk, 2048 * (number + 1) * 4, 2048)
    with pytest.raises(ValueError):
        update_mbr_layout(disk)


def _gpt_disk():
    disk = Disk(partition_style=PartitionStyle.GPT, bytes_per_sector=512)
    first = Partition(
        disk=disk, start_sector=2048, sector_count=4096,
        gpt_type=TYPE_GUID, gpt_id=ID_GUID, is_partitioned=True,
    )
    gap = Partition(disk=disk, start_sector=6144, sector_count=2048)
    second = Partition(
        disk=disk, start_sector=8192, sector_count=4096,
        gpt_type=TYPE_GUID, gpt_attributes=1, is_partitioned=True,
    )
    disk.primary = [first, gap, second]
    return disk, first, second


def test_update_gpt_numbers_entries():
    disk, first, second = _gpt_disk()
    update_gpt_layout(disk, False)
    layout = disk.layout
    assert layout.partition_count == 2
    assert [first.partition_number, second.partition_number] == [1, 2]
    assert layout.entries[0].gpt_id == ID_GUID
    assert layout.entries[1].gpt_attributes == 1
    assert layout.entries[1].starting_offset == second.start_sector * 512
    assert all(entry.style == PartitionStyle.GPT for entry in layout.entries)
    assert second.partition_index == 1


def test_update_gpt_delete_entry_appends_blank():
    disk, _, _ = _gpt_disk()
    disk.layout.resize(3)
    disk.layout.entries[2].starting_offset = 99
    update_gpt_layout(disk, True)
    assert disk.layout.partition_count == 3
    last = disk.layout.entries[2]
    assert last.is_empty()
    assert last.gpt_type.is_null
    assert last.rewrite_partition is True


def test_neighbouring_free_space():
    disk = _mbr_disk()
    before = _free(disk, 2048, 2048)
    part = _part(disk, 4096, 4096)
    after = _free(disk, 8192, 2048)
    assert previous_unpartitioned(part) is before
    assert next_unpartitioned(part) is after
    assert previous_unpartitioned(before) is None
    assert next_unpartitioned(after) is None


def test_partitioned_neighbour_is_not_free():
    disk = _mbr_disk()
    first = _part(disk, 2048, 2048)
    second = _part(disk, 4096, 2048)
    assert previous_unpartitioned(second) is None
    assert next_unpartitioned(first) is None


def test_neighbours_use_logical_list():
    disk = _mbr_disk()
    _free(disk, 2048, 2048)
    logical = _part(disk, 10240, 2048, logical=True)
    trailing = _free(disk, 12288, 2048, logical=True)
    assert previous_unpartitioned(logical) is None
    assert next_unpartitioned(logical) is trailing