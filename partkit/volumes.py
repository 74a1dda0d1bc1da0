"""Relate volumes to the disks and partitions they live on."""

from __future__ import annotations

from typing import Optional

from partkit.model import Disk, DiskExtent, Partition, Volume
from partkit.session import Session
from partkit.text import has_prefix

__all__ = [
    "disk_for_volume",
    "partition_for_volume",
    "volume_for_partition",
    "remove_volume",
    "mark_system_volume",
    "mark_boot_volume",
]


def _covers(extent: DiskExtent, partition: Partition) -> bool:
    """True if extent spans exactly the bytes of partition."""
    disk = partition.disk
    if disk is None:
        return False
    bytes_per_sector = disk.bytes_per_sector
    return (
        extent.starting_offset == partition.start_sector * bytes_per_sector
        and extent.extent_length == partition.sector_count * bytes_per_sector
    )


def disk_for_volume(session: Session, volume: Volume) -> Optional[Disk]:
    """The first known disk that holds one of the volume's extents."""
    if volume.extents is None:
        return None
    for disk in session.disks:
        if any(extent.disk_number == disk.disk_number for extent in volume.extents):
            return disk
    return None


def partition_for_volume(session: Session, volume: Volume) -> Optional[Partition]:
    """The partition whose bytes one of the volume's extents covers exactly."""
    if volume.extents is None:
        return None
    for disk in session.disks:
        for extent in volume.extents:
            if extent.disk_number != disk.disk_number:
                continue
            for partition in disk.partitions():
                if _covers(extent, partition):
                    return partition
    return None


def volume_for_partition(session: Session, partition: Optional[Partition]) -> Optional[Volume]:
    """The volume with an extent that covers partition exactly.

    The search stops at the first volume whose extents are unknown.
    """
    if partition is None or partition.disk is None:
        return None
    disk_number = partition.disk.disk_number
    for volume in session.volumes:
        if volume.extents is None:
            return None
        for extent in volume.extents:
            if extent.disk_number == disk_number and _covers(extent, partition):
                return volume
    return None


def remove_volume(session: Session, volume: Optional[Volume]) -> None:
    """Forget volume, clearing the selection if it was selected."""
    if volume is None:
        return
    if session.current_volume is volume:
        session.current_volume = None
    session.volumes = [known for known in session.volumes if known is not volume]


def mark_system_volume(
    session: Session, volume: Volume, system_partition: Optional[str]
) -> bool:
    """Flag volume, and its partition, as the system volume if its device matches.

    system_partition is the device name of the system partition; None
    means it is unknown. Returns the resulting flag.
    """
    volume.is_system = False
    if system_partition is None:
        return False
    if has_prefix(volume.device_name, system_partition) is None:
        return False
    volume.is_system = True
    partition = partition_for_volume(session, volume)
    if partition is not None:
        partition.is_system = True
    return True


def mark_boot_volume(session: Session, volume: Volume, system_directory: str) -> bool:
    """Flag volume, its partition and disk as boot if the system directory is on it.

    Returns the resulting flag.
    """
    volume.is_boot = False
    if not volume.drive_letter:
        return False
    if not system_directory or system_directory[0] != volume.drive_letter:
        return False
    volume.is_boot = True
    partition = partition_for_volume(session, volume)
    if partition is not None:
        partition.is_boot = True
    disk = disk_for_volume(session, volume)
    if disk is not None:
        disk.is_boot = True
    return True