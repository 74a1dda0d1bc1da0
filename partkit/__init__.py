"""In-memory disk, partition and volume model with MBR/GPT layout handling and selection commands."""

__version__ = "0.1.0"