"""Bridge request/result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_MEMORY_CEILING_BYTES = 2 * 1024 * 1024 * 1024
# Bump on every engine rebuild so cached builds are not reused.
DEFAULT_BUILD_VERSION = 6

LineSink = Callable[[str], None]


@dataclass(frozen=True)
class ProgressEvent:
    phase: str
    percent: float
    message: str


ProgressSink = Callable[[ProgressEvent], None]


class EngineVariant(str, Enum):
    PARALLEL = "PARALLEL"
    SINGLE_THREAD = "SINGLE_THREAD"


class OutputSource(str, Enum):
    NAMED_PATH = "named_path"
    HANDOFF = "handoff"


class CreateOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    enable_parallel: bool = True
    memory_ceiling_bytes: int = Field(DEFAULT_MEMORY_CEILING_BYTES, gt=0)
    enforce_memory_limit: bool = False
    on_stdout: Optional[LineSink] = None
    on_stderr: Optional[LineSink] = None
    build_root: Optional[str] = None
    build_version: int = DEFAULT_BUILD_VERSION
    cache_root: Optional[str] = None
    parallel_command: Optional[list[str]] = None
    single_thread_command: Optional[list[str]] = None


class RunOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    on_progress: Optional[ProgressSink] = None
    on_stdout: Optional[LineSink] = None
    on_stderr: Optional[LineSink] = None


class RunResult(BaseModel):
    artifact: Optional[bytes] = None
    output_size: int = Field(0, ge=0)
    source: Optional[OutputSource] = None
    output_path: Optional[str] = None

    @model_validator(mode="after")
    def _check_size(self) -> "RunResult":
        expected = len(self.artifact) if self.artifact is not None else 0
        if self.output_size != expected:
            raise ValueError("output_size must equal len(artifact), or 0 when artifact is absent")
        return self

    @classmethod
    def from_artifact(
        cls,
        artifact: bytes | None,
        source: OutputSource | None = None,
        output_path: str | None = None,
    ) -> "RunResult":
        return cls(
            artifact=artifact,
            output_size=len(artifact) if artifact is not None else 0,
            source=source,
            output_path=output_path,
        )
