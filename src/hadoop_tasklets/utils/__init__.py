"""Utils module."""

from hadoop_tasklets.utils.helpers import (
    format_size,
    parse_memory_size,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "parse_memory_size",
    "format_size",
]
