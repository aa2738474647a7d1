"""Utility functions and helpers."""

import logging
import re
import sys

from hadoop_tasklets.errors import ConfigurationError

_MEMORY_RE = re.compile(r"^(\d+)([kmgtp]?)b?$", re.IGNORECASE)
_MEMORY_UNITS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3, "t": 1024**4, "p": 1024**5}


def setup_logging(
    level: str = "INFO",
    format_str: str | None = None,
) -> logging.Logger:
    """Setup logging configuration."""
    if format_str is None:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    return logging.getLogger("hadoop_tasklets")


def parse_memory_size(literal: str) -> int:
    """Parse a JVM-style memory literal ("1G", "512m", "2048") into bytes."""
    match = _MEMORY_RE.match(str(literal).strip())
    if not match:
        raise ConfigurationError(f"Malformed memory size: {literal!r}")
    value, unit = match.groups()
    size = int(value) * _MEMORY_UNITS[unit.lower()]
    if size <= 0:
        raise ConfigurationError(f"Memory size must be positive: {literal!r}")
    return size


def format_size(size_bytes: float) -> str:
    """Format bytes to human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size_bytes) < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"
