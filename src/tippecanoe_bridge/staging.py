"""Input staging into the sandbox and post-run cleanup."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any, Mapping

from .engine import EngineHandle
from .errors import IgnorableCleanupFailure, SandboxPathError, UnsupportedInputType
from .sandbox import RemoveResult, SandboxFS

logger = logging.getLogger(__name__)


def normalize_content(path: str, value: Any) -> str | bytes:
    """Return text or bytes for ``value``; other buffer types are copied to bytes."""
    if isinstance(value, (str, bytes)):
        return value
    try:
        return bytes(memoryview(value))
    except TypeError:
        raise UnsupportedInputType(path, type(value)) from None


def stage_inputs(
    fs: SandboxFS,
    files: Mapping[str, Any],
    staged: list[str] | None = None,
) -> list[str]:
    """Write every input into ``fs`` and return the staged virtual paths.

    All values are normalized before the first write, so an unsupported value
    leaves the sandbox untouched. Paths are appended to ``staged`` as they are
    written so a caller can clean up after a partial failure.
    """
    normalized = [(path, normalize_content(path, value)) for path, value in files.items()]
    if staged is None:
        staged = []
    for path, content in normalized:
        if "/" in path:
            fs.mkdirs(str(PurePosixPath(path).parent))
        staged.append(path)
        fs.write_file(path, content)
    logger.debug("Bridge: inputs staged (count=%s)", len(staged))
    return staged


def _remove_input(fs: SandboxFS, path: str) -> RemoveResult:
    try:
        return fs.remove(path)
    except (OSError, SandboxPathError) as exc:
        raise IgnorableCleanupFailure(path, exc) from exc


def cleanup_run(handle: EngineHandle, staged: list[str]) -> dict[str, RemoveResult | None]:
    """Remove staged inputs and release the output buffer. Never raises."""
    outcomes: dict[str, RemoveResult | None] = {}
    for path in staged:
        try:
            outcomes[path] = _remove_input(handle.fs, path)
        except IgnorableCleanupFailure as exc:
            logger.debug("Bridge: input cleanup skipped (path=%s, error=%s)", path, exc.cause)
            outcomes[path] = None
    try:
        handle.free_output()
    except OSError as exc:
        logger.debug("Bridge: output buffer release failed (error=%s)", exc)
    return outcomes

