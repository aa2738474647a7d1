"""Distributed filesystem clients used by init scripts."""

import logging
import posixpath
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

from hadoop_tasklets.errors import FilesystemError
from hadoop_tasklets.utils.helpers import format_size

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Reduce ``hdfs://host:port/a/b`` or ``file:///a/b`` to ``/a/b``."""
    parsed = urlparse(str(path))
    raw = parsed.path if parsed.scheme else str(path)
    if not raw:
        raise FilesystemError(f"Empty path: {path!r}")
    normalized = posixpath.normpath("/" + raw.lstrip("/"))
    return normalized


class DistributedFileSystem(ABC):
    """Abstract base class for filesystem namespaces a tasklet can mutate."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if a file or directory exists at path."""
        pass

    @abstractmethod
    def remove_recursive(self, path: str) -> None:
        """Delete path and everything beneath it. Missing paths are ignored."""
        pass

    @abstractmethod
    def copy_from_local(self, local_path: str, remote_path: str) -> None:
        """Copy a local file or directory into the namespace.

        When ``remote_path`` is an existing directory the source is copied
        into it under its own name, otherwise it is written as ``remote_path``.
        """
        pass

    @abstractmethod
    def mkdirs(self, path: str) -> None:
        """Create a directory and any missing parents."""
        pass

    @abstractmethod
    def list_dir(self, path: str) -> list[str]:
        """List the direct children of a directory as full paths."""
        pass


class InMemoryFileSystem(DistributedFileSystem):
    """In-memory namespace for testing and dry runs."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = {"/"}

    def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path in self.files or path in self.dirs

    def remove_recursive(self, path: str) -> None:
        path = normalize_path(path)
        if path == "/":
            raise FilesystemError("Refusing to remove the namespace root")
        prefix = path + "/"
        self.files = {p: d for p, d in self.files.items() if p != path and not p.startswith(prefix)}
        self.dirs = {p for p in self.dirs if p != path and not p.startswith(prefix)}

    def mkdirs(self, path: str) -> None:
        path = normalize_path(path)
        if path in self.files:
            raise FilesystemError(f"Cannot create directory {path}: a file exists there")
        while path not in self.dirs:
            self.dirs.add(path)
            path = posixpath.dirname(path)

    def copy_from_local(self, local_path: str, remote_path: str) -> None:
        source = Path(local_path)
        if not source.exists():
            raise FilesystemError(f"Local path does not exist: {local_path}")

        target = normalize_path(remote_path)
        if target in self.dirs:
            target = posixpath.join(target, source.name)
        self.mkdirs(posixpath.dirname(target))

        if source.is_file():
            self.files[target] = source.read_bytes()
            return

        self.mkdirs(target)
        for f in sorted(source.rglob("*")):
            dest = posixpath.join(target, f.relative_to(source).as_posix())
            if f.is_dir():
                self.mkdirs(dest)
            else:
                self.mkdirs(posixpath.dirname(dest))
                self.files[dest] = f.read_bytes()

    def list_dir(self, path: str) -> list[str]:
        path = normalize_path(path)
        if path not in self.dirs:
            raise FilesystemError(f"No such directory: {path}")
        children = {p for p in self.files if posixpath.dirname(p) == path}
        children |= {p for p in self.dirs if p != path and posixpath.dirname(p) == path}
        return sorted(children)

    def read(self, path: str) -> bytes:
        path = normalize_path(path)
        if path not in self.files:
            raise FilesystemError(f"No such file: {path}")
        return self.files[path]


class LocalFileSystem(DistributedFileSystem):
    """Maps the namespace onto a directory on the local disk ("local" mode)."""

    def __init__(self, root: str = "/"):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / normalize_path(path).lstrip("/")

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def remove_recursive(self, path: str) -> None:
        target = self._resolve(path)
        if target == self.root:
            raise FilesystemError("Refusing to remove the namespace root")
        try:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to remove {path}: {e}") from e

    def mkdirs(self, path: str) -> None:
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to create {path}: {e}") from e

    def copy_from_local(self, local_path: str, remote_path: str) -> None:
        source = Path(local_path)
        if not source.exists():
            raise FilesystemError(f"Local path does not exist: {local_path}")

        target = self._resolve(remote_path)
        if target.is_dir():
            target = target / source.name

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                shutil.copy2(source, target)
        except OSError as e:
            raise FilesystemError(f"Failed to copy {local_path} to {remote_path}: {e}") from e

        if source.is_file():
            logger.debug(f"Copied {local_path} ({format_size(source.stat().st_size)}) to {target}")

    def list_dir(self, path: str) -> list[str]:
        target = self._resolve(path)
        if not target.is_dir():
            raise FilesystemError(f"No such directory: {path}")
        base = normalize_path(path)
        return sorted(posixpath.join(base, child.name) for child in target.iterdir())


class HdfsShellFileSystem(DistributedFileSystem):
    """HDFS client backed by the ``hdfs dfs`` command-line tool."""

    def __init__(
        self,
        fs_uri: str | None = None,
        hdfs_command: str = "hdfs",
        skip_trash: bool = False,
        command_runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.fs_uri = fs_uri
        self.hdfs_command = hdfs_command
        self.skip_trash = skip_trash
        self._run_command = command_runner

    def _dfs(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.hdfs_command, "dfs"]
        if self.fs_uri:
            cmd.extend(["-fs", self.fs_uri])
        cmd.extend(args)

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return self._run_command(cmd, capture_output=True, text=True)
        except OSError as e:
            raise FilesystemError(f"Could not run {self.hdfs_command}: {e}") from e

    def _check(self, result: subprocess.CompletedProcess, action: str) -> None:
        if result.returncode != 0:
            message = (result.stderr or result.stdout or "").strip()
            raise FilesystemError(f"{action} failed (exit {result.returncode}): {message}")

    def exists(self, path: str) -> bool:
        result = self._dfs("-test", "-e", path)
        if result.returncode == 0:
            return True
        if result.returncode == 1 and not (result.stderr or "").strip():
            return False
        self._check(result, f"test {path}")
        return False

    def remove_recursive(self, path: str) -> None:
        args = ["-rm", "-r", "-f"]
        if self.skip_trash:
            args.append("-skipTrash")
        self._check(self._dfs(*args, path), f"rmr {path}")

    def mkdirs(self, path: str) -> None:
        self._check(self._dfs("-mkdir", "-p", path), f"mkdir {path}")

    def copy_from_local(self, local_path: str, remote_path: str) -> None:
        if not Path(local_path).exists():
            raise FilesystemError(f"Local path does not exist: {local_path}")
        self._check(self._dfs("-put", "-f", local_path, remote_path), f"put {local_path}")

    def list_dir(self, path: str) -> list[str]:
        result = self._dfs("-ls", "-C", path)
        self._check(result, f"ls {path}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def create_filesystem(
    backend_type: str,
    **kwargs,
) -> DistributedFileSystem:
    """Factory function to create filesystem clients."""
    backends = {
        "hdfs": HdfsShellFileSystem,
        "local": LocalFileSystem,
        "memory": InMemoryFileSystem,
    }

    if backend_type not in backends:
        raise ValueError(f"Unknown backend: {backend_type}. Available: {list(backends.keys())}")

    return backends[backend_type](**kwargs)
