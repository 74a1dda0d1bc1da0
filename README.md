# partkit

`partkit` models disks, partitions and volumes in memory and carries the
logic of an interactive partitioning tool on top of that model: building a
disk's partition lists, with entries for unpartitioned gaps, from its drive
layout; rebuilding MBR and GPT drive layouts from those lists; relating
volumes to disks and partitions; and the `select disk`, `select partition`,
`select volume`, `setid` and `uniqueid disk` commands.

It uses only the standard library and never touches a device by itself.
Writing a layout goes through a `partkit.session.DiskBackend` that you supply.

## Installation

```
pip install partkit
```

To run the test suite:

```
pip install "partkit[test]"
pytest
```

## Modules

| Module | What it holds |
| --- | --- |
| `partkit.guid` | `Guid`, `NULL_GUID`, `create_guid()`, `format_guid()`, `parse_guid()` |
| `partkit.text` | argument helpers: `is_dec_string`, `is_hex_string`, `has_prefix`, `rounding_divide`, `duplicate_quoted_string`, `create_signature` |
| `partkit.model` | `PartitionStyle`, `FormatState`, `VolumeType`, `LayoutEntry`, `DriveLayout`, `Partition`, `Disk`, `BiosDisk`, `DiskExtent`, `Volume`, MBR partition type constants, and `align_down`, `is_container_partition`, `is_recognized_partition` |
| `partkit.scan` | `load_partitions`, `add_mbr_partition`, `add_gpt_partition`, `scan_mbr_free_space`, `scan_gpt_free_space` |
| `partkit.layout` | `update_mbr_layout`, `update_gpt_layout`, `primary_partition_count`, `logical_partition_count`, `previous_unpartitioned`, `next_unpartitioned` |
| `partkit.session` | `Session` (disks, BIOS disks, volumes and the current selection), `DiskBackend`, `CommandError` |
| `partkit.volumes` | `disk_for_volume`, `partition_for_volume`, `volume_for_partition`, `remove_volume`, `mark_system_volume`, `mark_boot_volume` |
| `partkit.diskselect` | `select_disk` |
| `partkit.partselect` | `select_partition`, `select_volume` |
| `partkit.setid` | `set_id` |
| `partkit.uniqueid` | `unique_id_disk` |

## Examples

GUIDs are parsed from and printed in the 8-4-4-4-12 hexadecimal form;
`parse_guid` raises `ValueError` for anything else:

```python
from partkit.guid import create_guid, format_guid, parse_guid

guid = parse_guid("EBD0A0A2-B9E5-4433-87C0-68B6B72699C7")
print(format_guid(guid))      # ebd0a0a2-b9e5-4433-87c0-68b6b72699c7

fresh = create_guid()         # random, version 4
```

Helpers used when reading command arguments:

```python
from partkit.model import align_down
from partkit.text import has_prefix, is_dec_string, is_hex_string, rounding_divide

is_dec_string("12")           # True
is_hex_string("0x1f")         # False
has_prefix("ID=0c", "id=")    # "0c"  (None when the prefix is absent)
rounding_divide(7, 2)         # 4
align_down(2047, 1024)        # 1024
```

A disk is described by its geometry and its drive layout;
`load_partitions` fills in its usable range and partition lists, adding
free-space entries for gaps:

```python
from partkit.model import Disk, DriveLayout, LayoutEntry, PartitionStyle
from partkit.scan import load_partitions

disk = Disk(
    disk_number=0,
    sector_count=8 * 1024 * 1024,           # 4 GiB of 512-byte sectors
    partition_style=PartitionStyle.MBR,
    layout=DriveLayout(entries=[
        LayoutEntry(starting_offset=2048 * 512,
                    partition_length=2 * 1024 * 1024 * 512,
                    partition_type=0x07,
                    partition_number=1),
        LayoutEntry(), LayoutEntry(), LayoutEntry(),
    ]),
)
load_partitions(disk)
[p.is_partitioned for p in disk.primary]   # [True, False]
```

Commands work on a `Session`. Give it a backend whose `write_layout(disk)`
stores `disk.layout` wherever you keep it (raising `OSError` on failure),
add the disks and volumes you know about, and pass the command's arguments
without the command words. Each command returns the message to show and
raises `CommandError` when it fails:

```python
from partkit.diskselect import select_disk
from partkit.partselect import select_partition
from partkit.session import CommandError, DiskBackend, Session
from partkit.setid import set_id
from partkit.uniqueid import unique_id_disk


class MemoryBackend(DiskBackend):
    def __init__(self):
        self.written = []

    def write_layout(self, disk):
        self.written.append(disk.disk_number)


session = Session(MemoryBackend())
session.add_disk(disk)

select_disk(session, ["0"])        # "Disk 0 is now the selected disk."
select_partition(session, ["1"])   # "Partition 1 is now the selected partition."
set_id(session, ["id=0c"])         # changes the type to 0x0C and writes the layout
unique_id_disk(session, [])        # "Disk ID: 00000000"

try:
    select_disk(session, ["7"])
except CommandError as error:
    print(error.message)           # "The disk you specified is not valid."
```

## What partkit does not do

- It does not discover disks or volumes, read sectors or parse a raw MBR
  sector. You build `Disk`, `BiosDisk` and `Volume` objects yourself and add
  them to a `Session`.
- It writes nothing to storage on its own; `Session.write_partitions` only
  calls the `DiskBackend` you provide.
- It has no interactive prompt and no command-line program. The commands are
  plain functions; the only ones provided are `select_disk`,
  `select_partition`, `select_volume`, `set_id` and `unique_id_disk`.
  Creating, deleting, formatting partitions and assigning drive letters are
  not part of the package.