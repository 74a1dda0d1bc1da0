import pytest

from partkit.model import (
    PARTITION_IFS,
    BiosDisk,
    Disk,
    DriveLayout,
    LayoutEntry,
    Partition,
    PartitionStyle,
    Volume,
)
from partkit.session import CommandError, DiskBackend, Session


class RecordingBackend(DiskBackend):
    def __init__(self, numbers=None, fail=False, grow_to=None):
        self.written = []
        self.numbers = numbers or {}
        self.fail = fail
        self.grow_to = grow_to

    def write_layout(self, disk):
        self.written.append(disk)
        if self.grow_to is not None:
            disk.layout.resize(self.grow_to)
        if self.fail:
            raise OSError("device refused the layout")
        for index, number in self.numbers.items():
            disk.layout.entries[index].partition_number = number


def _mbr_disk():
    layout = DriveLayout(style=PartitionStyle.MBR, entries=[LayoutEntry() for _ in range(4)])
    disk = Disk(disk_number=0, partition_style=PartitionStyle.MBR, layout=layout)
    partitioned = Partition(
        disk=disk,
        start_sector=2048,
        sector_count=4096,
        partition_type=PARTITION_IFS,
        is_partitioned=True,
        partition_index=1,
    )
    free = Partition(disk=disk, start_sector=6144, sector_count=2048, partition_number=9)
    disk.primary = [partitioned, free]
    disk.dirty = True
    return disk, partitioned, free


def test_add_disk_keeps_ascending_order():
    session = Session()
    for number in (3, 0, 2, 1):
        session.add_disk(Disk(disk_number=number))
    assert [disk.disk_number for disk in session.disks] == [0, 1, 2, 3]


def test_add_disk_places_equal_number_before_existing():
    session = Session()
    first = Disk(disk_number=1)
    second = Disk(disk_number=1)
    session.add_disk(first)
    session.add_disk(second)
    assert session.disks[0] is second
    assert session.disks[1] is first


def test_match_bios_disk_records_both_sides():
    session = Session()
    bios = BiosDisk(disk_number=5, signature=0xABCD, checksum=0x1234)
    session.add_bios_disk(bios)
    disk = Disk()
    assert session.match_bios_disk(disk, 0x1234, 0xABCD) is bios
    assert disk.bios_found is True
    assert disk.bios_disk_number == 5
    assert bios.recognized is True


def test_match_bios_disk_skips_claimed_and_mismatched():
    session = Session()
    claimed = BiosDisk(disk_number=0, signature=1, checksum=2, recognized=True)
    other = BiosDisk(disk_number=1, signature=1, checksum=3)
    free = BiosDisk(disk_number=2, signature=1, checksum=2)
    for bios in (claimed, other, free):
        session.add_bios_disk(bios)
    disk = Disk()
    assert session.match_bios_disk(disk, 2, 1) is free
    assert disk.bios_disk_number == 2
    assert other.recognized is False


def test_match_bios_disk_without_match():
    session = Session()
    session.add_bios_disk(BiosDisk(signature=1, checksum=1))
    disk = Disk()
    assert session.match_bios_disk(disk, 9, 9) is None
    assert disk.bios_found is False


def test_write_partitions_clean_disk_does_nothing():
    backend = RecordingBackend()
    session = Session(backend)
    disk, _, _ = _mbr_disk()
    disk.dirty = False
    session.write_partitions(disk)
    assert backend.written == []


def test_write_partitions_mbr_updates_numbers():
    backend = RecordingBackend(numbers={1: 2})
    session = Session(backend)
    disk, partitioned, free = _mbr_disk()
    session.write_partitions(disk)
    assert backend.written == [disk]
    assert partitioned.partition_number == 2
    assert free.partition_number == 9
    assert disk.dirty is False


def test_write_partitions_mbr_restores_slot_count():
    backend = RecordingBackend(grow_to=8)
    session = Session(backend)
    disk, _, _ = _mbr_disk()
    session.write_partitions(disk)
    assert disk.layout.partition_count == 4


def test_write_partitions_failure_leaves_disk_dirty():
    backend = RecordingBackend(fail=True, grow_to=1)
    session = Session(backend)
    disk, _, _ = _mbr_disk()
    with pytest.raises(OSError):
        session.write_partitions(disk)
    assert disk.dirty is True
    assert disk.layout.partition_count == 4


def test_write_partitions_gpt():
    backend = RecordingBackend()
    session = Session(backend)
    disk = Disk(partition_style=PartitionStyle.GPT, dirty=True)
    session.write_partitions(disk)
    assert backend.written == [disk]
    assert disk.dirty is False


def test_write_partitions_without_backend():
    session = Session()
    disk, _, _ = _mbr_disk()
    with pytest.raises(RuntimeError):
        session.write_partitions(disk)


def test_clear_forgets_everything():
    session = Session()
    disk = Disk()
    volume = Volume()
    session.add_disk(disk)
    session.add_bios_disk(BiosDisk())
    session.add_volume(volume)
    session.current_disk = disk
    session.current_volume = volume
    session.current_partition = Partition(disk=disk)
    session.clear()
    assert session.disks == []
    assert session.bios_disks == []
    assert session.volumes == []
    assert session.current_disk is None
    assert session.current_partition is None
    assert session.current_volume is None


def test_command_error_keeps_message():
    error = CommandError("bad")
    assert error.message == "bad"
    assert str(error) == "bad"