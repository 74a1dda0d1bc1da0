"""Data model for disks, partitions, layouts and volumes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional

from partkit.guid import NULL_GUID, Guid

__all__ = [
    "PARTITION_ENTRY_UNUSED",
    "PARTITION_FAT_12",
    "PARTITION_FAT_16",
    "PARTITION_EXTENDED",
    "PARTITION_HUGE",
    "PARTITION_IFS",
    "PARTITION_FAT32",
    "PARTITION_FAT32_XINT13",
    "PARTITION_XINT13",
    "PARTITION_XINT13_EXTENDED",
    "PARTITION_LINUX",
    "PARTITION_GPT",
    "PARTITION_NTFT",
    "PartitionStyle",
    "FormatState",
    "VolumeType",
    "LayoutEntry",
    "DriveLayout",
    "Partition",
    "Disk",
    "BiosDisk",
    "DiskExtent",
    "Volume",
    "align_down",
    "is_container_partition",
    "is_recognized_partition",
]

PARTITION_ENTRY_UNUSED = 0x00
PARTITION_FAT_12 = 0x01
PARTITION_FAT_16 = 0x04
PARTITION_EXTENDED = 0x05
PARTITION_HUGE = 0x06
PARTITION_IFS = 0x07
PARTITION_FAT32 = 0x0B
PARTITION_FAT32_XINT13 = 0x0C
PARTITION_XINT13 = 0x0E
PARTITION_XINT13_EXTENDED = 0x0F
PARTITION_LINUX = 0x83
PARTITION_GPT = 0xEE
PARTITION_NTFT = 0x80

_RECOGNIZED_TYPES = frozenset(
    {
        PARTITION_FAT_12,
        PARTITION_FAT_16,
        PARTITION_HUGE,
        PARTITION_IFS,
        PARTITION_FAT32,
        PARTITION_FAT32_XINT13,
        PARTITION_XINT13,
    }
)


class PartitionStyle(enum.IntEnum):
    MBR = 0
    GPT = 1
    RAW = 2


class FormatState(enum.Enum):
    UNFORMATTED = "unformatted"
    PREFORMATTED = "preformatted"
    UNKNOWN_FORMAT = "unknown"


class VolumeType(enum.Enum):
    UNKNOWN = "unknown"
    PARTITION = "partition"
    CDROM = "cdrom"
    REMOVABLE = "removable"


def align_down(value: int, alignment: int) -> int:
    """Round value down to a multiple of alignment."""
    if alignment <= 0:
        raise ValueError("alignment must be positive")
    return value // alignment * alignment


def is_container_partition(partition_type: int) -> bool:
    """True for MBR types that hold logical partitions."""
    return partition_type in (PARTITION_EXTENDED, PARTITION_XINT13_EXTENDED)


def is_recognized_partition(partition_type: int) -> bool:
    """True for MBR types whose file systems the system can mount."""
    if partition_type & PARTITION_NTFT and (partition_type & ~0xC0) in _RECOGNIZED_TYPES:
        return True
    return partition_type in _RECOGNIZED_TYPES


@dataclass
class LayoutEntry:
    """One slot of a drive layout table."""

    style: PartitionStyle = PartitionStyle.MBR
    starting_offset: int = 0
    partition_length: int = 0
    partition_number: int = 0
    rewrite_partition: bool = False
    partition_type: int = PARTITION_ENTRY_UNUSED
    boot_indicator: bool = False
    recognized_partition: bool = False
    hidden_sectors: int = 0
    gpt_type: Guid = NULL_GUID
    gpt_id: Guid = NULL_GUID
    gpt_attributes: int = 0
    gpt_name: str = ""

    def is_empty(self) -> bool:
        """True if the slot covers no part of the disk."""
        return self.starting_offset == 0 and self.partition_length == 0

    def clear(self) -> None:
        """Reset every field to its zero value."""
        for name, value in vars(LayoutEntry()).items():
            setattr(self, name, value)


@dataclass
class DriveLayout:
    """The partition table of a disk as exchanged with the storage driver."""

    style: PartitionStyle = PartitionStyle.MBR
    entries: list[LayoutEntry] = field(default_factory=list)
    mbr_signature: int = 0
    gpt_disk_id: Guid = NULL_GUID
    gpt_starting_usable_offset: int = 0
    gpt_usable_length: int = 0
    gpt_max_partition_count: int = 0

    @property
    def partition_count(self) -> int:
        return len(self.entries)

    def resize(self, count: int) -> None:
        """Grow or shrink the table to count slots; new slots are zeroed."""
        if count < 0:
            raise ValueError("partition count cannot be negative")
        del self.entries[count:]
        self.entries.extend(LayoutEntry() for _ in range(count - len(self.entries)))


@dataclass(eq=False)
class Partition:
    """A partition or a region of unpartitioned space on a disk."""

    disk: Optional["Disk"] = field(default=None, repr=False)
    start_sector: int = 0
    sector_count: int = 0
    partition_type: int = PARTITION_ENTRY_UNUSED
    boot_indicator: bool = False
    gpt_type: Guid = NULL_GUID
    gpt_id: Guid = NULL_GUID
    gpt_attributes: int = 0
    logical: bool = False
    is_partitioned: bool = False
    partition_number: int = 0
    on_disk_partition_number: int = 0
    partition_index: int = 0
    format_state: FormatState = FormatState.UNFORMATTED
    new: bool = False
    is_system: bool = False
    is_boot: bool = False

    @property
    def end_sector(self) -> int:
        """Last sector covered by the partition."""
        return self.start_sector + self.sector_count - 1


@dataclass(eq=False)
class Disk:
    """A physical disk with its geometry, layout and partition lists."""

    disk_number: int = 0
    cylinders: int = 0
    tracks_per_cylinder: int = 0
    sectors_per_track: int = 0
    bytes_per_sector: int = 512
    sector_count: int = 0
    sector_alignment: int = 2048
    cylinder_alignment: int = 2048
    start_sector: int = 0
    end_sector: int = 0
    partition_style: PartitionStyle = PartitionStyle.RAW
    layout: DriveLayout = field(default_factory=DriveLayout)
    primary: list[Partition] = field(default_factory=list)
    logical: list[Partition] = field(default_factory=list)
    extended_partition: Optional[Partition] = field(default=None, repr=False)
    description: str = ""
    location: str = ""
    bus_type: int = 0
    port: int = 0
    path_id: int = 0
    target_id: int = 0
    lun: int = 0
    driver_name: str = ""
    bios_disk_number: int = 0
    bios_found: bool = False
    new_disk: bool = False
    dirty: bool = False
    is_boot: bool = False

    def partitions(self) -> Iterator[Partition]:
        """Yield the primary entries, then the logical ones."""
        yield from self.primary
        yield from self.logical


@dataclass(eq=False)
class BiosDisk:
    """A disk as the firmware reported it."""

    disk_number: int = 0
    signature: int = 0
    checksum: int = 0
    recognized: bool = False
    bytes_per_sector: int = 0
    number_of_cylinders: int = 0
    number_of_heads: int = 0
    sectors_per_track: int = 0
    drive_select: int = 0
    max_cylinders: int = 0
    int13_sectors_per_track: int = 0
    max_heads: int = 0
    number_drives: int = 0


@dataclass(frozen=True)
class DiskExtent:
    """A contiguous run of bytes on a disk that belongs to a volume."""

    disk_number: int
    starting_offset: int
    extent_length: int


@dataclass(eq=False)
class Volume:
    """A mounted or mountable volume."""

    volume_number: int = 0
    volume_name: str = ""
    device_name: str = ""
    drive_letter: str = ""
    label: str = ""
    filesystem: str = ""
    serial_number: int = 0
    volume_type: VolumeType = VolumeType.UNKNOWN
    extents: Optional[list[DiskExtent]] = None
    total_allocation_units: int = 0
    sectors_per_allocation_unit: int = 0
    bytes_per_sector: int = 0
    is_system: bool = False
    is_boot: bool = False

    @property
    def size(self) -> int:
        """Total length in bytes of all extents."""
        return sum(extent.extent_length for extent in self.extents or ())