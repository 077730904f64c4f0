"""Artifact extraction after a successful engine run."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .engine import EngineHandle
from .errors import SandboxPathError
from .models import OutputSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedOutput:
    artifact: bytes | None
    source: OutputSource | None


def read_named_output(handle: EngineHandle, output_path: str) -> bytes | None:
    """Read and delete ``output_path`` from the sandbox; None if it cannot be read."""
    try:
        data = handle.fs.read_file(output_path)
    except (OSError, SandboxPathError) as exc:
        logger.info("Bridge: named output unreadable, using handoff (path=%s, error=%s)", output_path, exc)
        return None
    try:
        handle.fs.remove(output_path)
    except OSError as exc:
        logger.warning("Bridge: named output not removed (path=%s, error=%s)", output_path, exc)
    return data


def extract_output(handle: EngineHandle, output_path: str | None) -> ExtractedOutput:
    """Named path first, then the engine's output handoff buffer."""
    if output_path is not None:
        data = read_named_output(handle, output_path)
        if data is not None:
            return ExtractedOutput(artifact=data, source=OutputSource.NAMED_PATH)
    data = handle.copy_output()
    if data is not None:
        return ExtractedOutput(artifact=data, source=OutputSource.HANDOFF)
    return ExtractedOutput(artifact=None, source=None)
