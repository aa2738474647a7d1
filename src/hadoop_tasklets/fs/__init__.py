"""Filesystem clients for HDFS and local namespaces."""

from hadoop_tasklets.fs.backends import (
    DistributedFileSystem,
    HdfsShellFileSystem,
    InMemoryFileSystem,
    LocalFileSystem,
    create_filesystem,
    normalize_path,
)

__all__ = [
    "DistributedFileSystem",
    "HdfsShellFileSystem",
    "InMemoryFileSystem",
    "LocalFileSystem",
    "create_filesystem",
    "normalize_path",
]
