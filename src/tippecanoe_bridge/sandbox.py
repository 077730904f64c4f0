"""Engine-private sandbox filesystem.

Virtual paths are POSIX-style and resolve under the sandbox root: ``in.geojson``
and ``/in.geojson`` name the same file. Paths that would resolve outside the
root raise :class:`SandboxPathError`.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePosixPath

from .errors import SandboxPathError


class MkdirResult(str, Enum):
    CREATED = "CREATED"
    ALREADY_PRESENT = "ALREADY_PRESENT"


class RemoveResult(str, Enum):
    REMOVED = "REMOVED"
    ALREADY_ABSENT = "ALREADY_ABSENT"


class SandboxFS:
    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def resolve(self, virtual_path: str) -> Path:
        parts = [part for part in PurePosixPath(virtual_path).parts if part not in ("/", "")]
        if not parts:
            raise SandboxPathError(virtual_path)
        candidate = self.root.joinpath(*parts).resolve()
        if self.root not in candidate.parents:
            raise SandboxPathError(virtual_path)
        return candidate

    def mkdir(self, virtual_path: str) -> MkdirResult:
        path = self.resolve(virtual_path)
        if path.is_dir():
            return MkdirResult.ALREADY_PRESENT
        path.mkdir()
        return MkdirResult.CREATED

    def mkdirs(self, virtual_dir: str) -> list[MkdirResult]:
        """Create every missing directory along ``virtual_dir``."""
        results: list[MkdirResult] = []
        current = ""
        for part in PurePosixPath(virtual_dir).parts:
            if part in ("/", ""):
                continue
            current = f"{current}/{part}"
            results.append(self.mkdir(current))
        return results

    def write_file(self, virtual_path: str, content: str | bytes) -> Path:
        path = self.resolve(virtual_path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return path

    def read_file(self, virtual_path: str) -> bytes:
        return self.resolve(virtual_path).read_bytes()

    def exists(self, virtual_path: str) -> bool:
        try:
            return self.resolve(virtual_path).exists()
        except SandboxPathError:
            return False

    def remove(self, virtual_path: str) -> RemoveResult:
        path = self.resolve(virtual_path)
        if not path.exists() and not path.is_symlink():
            return RemoveResult.ALREADY_ABSENT
        path.unlink()
        return RemoveResult.REMOVED
