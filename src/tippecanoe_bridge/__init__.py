"""Async, sandboxed bridge to a pre-built tippecanoe engine."""

from .errors import (
    BridgeError,
    EngineConstructionFailure,
    EngineExitFailure,
    IgnorableCleanupFailure,
    SandboxPathError,
    UnsupportedInputType,
)
from .instance import TippecanoeInstance, create
from .models import CreateOptions, EngineVariant, ProgressEvent, RunOptions, RunResult

__all__ = [
    "BridgeError",
    "CreateOptions",
    "EngineConstructionFailure",
    "EngineExitFailure",
    "EngineVariant",
    "IgnorableCleanupFailure",
    "ProgressEvent",
    "RunOptions",
    "RunResult",
    "SandboxPathError",
    "TippecanoeInstance",
    "UnsupportedInputType",
    "create",
]
