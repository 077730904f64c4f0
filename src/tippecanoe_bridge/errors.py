"""Error taxonomy for the tippecanoe bridge."""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for bridge failures."""


class UnsupportedInputType(BridgeError, TypeError):
    def __init__(self, path: str, value_type: type) -> None:
        self.path = path
        self.value_type = value_type
        super().__init__(f"Unsupported data type for file {path}: {value_type.__name__}")


class EngineExitFailure(BridgeError):
    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"tippecanoe exited with code {code}")


class EngineConstructionFailure(BridgeError):
    pass


class IgnorableCleanupFailure(BridgeError):
    """Raised inside cleanup only; never escapes it."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"cleanup failed for {path}: {cause}")


class SandboxPathError(BridgeError, ValueError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"path escapes sandbox root: {path}")
