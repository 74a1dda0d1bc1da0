"""Session state: the known disks, firmware disks and volumes, and the selection."""

from __future__ import annotations

import abc
import bisect
from typing import Optional

from partkit.model import BiosDisk, Disk, Partition, PartitionStyle, Volume

__all__ = ["CommandError", "DiskBackend", "Session"]


class CommandError(Exception):
    """A command could not be carried out; the message says why."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DiskBackend(abc.ABC):
    """Writes drive layouts to the storage they describe."""

    @abc.abstractmethod
    def write_layout(self, disk: Disk) -> None:
        """Store disk.layout on the device and refresh its partition numbers.

        Implementations raise OSError when the layout cannot be written.
        """


class Session:
    """Everything a partitioning session knows and has selected."""

    def __init__(self, backend: Optional[DiskBackend] = None) -> None:
        self.backend = backend
        self.disks: list[Disk] = []
        self.bios_disks: list[BiosDisk] = []
        self.volumes: list[Volume] = []
        self.current_disk: Optional[Disk] = None
        self.current_partition: Optional[Partition] = None
        self.current_volume: Optional[Volume] = None

    def add_disk(self, disk: Disk) -> None:
        """Insert disk, keeping the list in ascending disk-number order."""
        position = bisect.bisect_left(
            [known.disk_number for known in self.disks], disk.disk_number
        )
        self.disks.insert(position, disk)

    def add_bios_disk(self, bios_disk: BiosDisk) -> None:
        """Remember a disk that the firmware reported."""
        self.bios_disks.append(bios_disk)

    def add_volume(self, volume: Volume) -> None:
        """Remember a volume."""
        self.volumes.append(volume)

    def match_bios_disk(self, disk: Disk, checksum: int, signature: int) -> Optional[BiosDisk]:
        """Pair disk with the first unclaimed firmware disk of the same identity.

        The match is recorded on both sides and returned; None means no
        firmware disk matched.
        """
        for bios_disk in self.bios_disks:
            if (
                bios_disk.signature == signature
                and bios_disk.checksum == checksum
                and not bios_disk.recognized
                and not disk.bios_found
            ):
                disk.bios_disk_number = bios_disk.disk_number
                disk.bios_found = True
                bios_disk.recognized = True
                return bios_disk
        return None

    def write_partitions(self, disk: Disk) -> None:
        """Write the layout of a dirty disk through the backend.

        For MBR disks the layout keeps its slot count and the partition
        numbers chosen by the backend are copied onto the partitions.
        Errors from the backend propagate and leave the disk dirty.
        """
        if not disk.dirty:
            return
        if self.backend is None:
            raise RuntimeError("no disk backend configured")

        if disk.partition_style == PartitionStyle.MBR:
            count = disk.layout.partition_count
            try:
                self.backend.write_layout(disk)
            finally:
                disk.layout.resize(count)
            for partition in disk.partitions():
                if partition.is_partitioned:
                    entry = disk.layout.entries[partition.partition_index]
                    partition.partition_number = entry.partition_number
        else:
            self.backend.write_layout(disk)

        disk.dirty = False

    def clear(self) -> None:
        """Forget every disk, firmware disk and volume, and the selection."""
        self.current_disk = None
        self.current_partition = None
        self.current_volume = None
        self.disks.clear()
        self.bios_disks.clear()
        self.volumes.clear()