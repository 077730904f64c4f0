"""Engine handle: one loaded build, its sandbox and its output handoff."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .args import unmarshal_args
from .assets import EngineBuild
from .models import EngineVariant, LineSink, ProgressEvent, ProgressSink
from .sandbox import SandboxFS

logger = logging.getLogger(__name__)
engine_logger = logging.getLogger("tippecanoe_bridge.engine.stream")

LAUNCH_FAILURE_STATUS = 127
_STREAM_LIMIT = 8 * 1024 * 1024

ENV_MAX_MEMORY = "TIPPECANOE_MAX_MEMORY"
ENV_NO_THREADS = "TIPPECANOE_NO_THREADS"
ENV_OUTPUT_HANDOFF = "TIPPECANOE_OUTPUT_HANDOFF"


def _console_stdout(line: str) -> None:
    engine_logger.info("%s", line)


def _console_stderr(line: str) -> None:
    engine_logger.warning("%s", line)


@dataclass(frozen=True)
class InvocationHooks:
    """Per-call subscribers; unset stream sinks fall back to the handle's."""

    on_progress: Optional[ProgressSink] = None
    on_stdout: Optional[LineSink] = None
    on_stderr: Optional[LineSink] = None


def parse_progress(line: str) -> ProgressEvent | None:
    """Translate a JSON progress record (``{"progress": 42, ...}``) into an event."""
    text = line.strip()
    if not text.startswith("{"):
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict) or "progress" not in payload:
        return None
    try:
        percent = float(payload["progress"])
    except (TypeError, ValueError):
        return None
    return ProgressEvent(
        phase=str(payload.get("phase") or ""),
        percent=min(100.0, max(0.0, percent)),
        message=str(payload.get("message") or ""),
    )


def _memory_limiter(limit: int) -> Callable[[], None] | None:
    """Return a preexec hook capping the child's address space at ``limit`` (opt-in)."""
    try:
        import resource
    except ImportError:
        return None
    _, hard = resource.getrlimit(resource.RLIMIT_AS)
    if hard != resource.RLIM_INFINITY:
        limit = min(limit, hard)

    def apply() -> None:
        try:
            resource.setrlimit(resource.RLIMIT_AS, (limit, hard))
        except (ValueError, OSError):
            pass

    return apply


class EngineHandle:
    def __init__(
        self,
        build: EngineBuild,
        *,
        memory_ceiling_bytes: int,
        enforce_memory_limit: bool = False,
        on_stdout: LineSink | None = None,
        on_stderr: LineSink | None = None,
        state_root: Path | None = None,
    ) -> None:
        self.build = build
        self.memory_ceiling_bytes = memory_ceiling_bytes
        self.enforce_memory_limit = enforce_memory_limit
        self.on_stdout = on_stdout or _console_stdout
        self.on_stderr = on_stderr or _console_stderr
        self._state_root = state_root or Path(tempfile.mkdtemp(prefix="tippecanoe-"))
        fs_root = self._state_root / "fs"
        fs_root.mkdir(parents=True, exist_ok=True)
        self.fs = SandboxFS(fs_root)
        self.handoff_path = self._state_root / "output.handoff"
        self.closed = False

    @property
    def variant(self) -> EngineVariant:
        return self.build.variant

    def environment(self) -> dict[str, str]:
        env = os.environ.copy()
        env[ENV_MAX_MEMORY] = str(self.memory_ceiling_bytes)
        env[ENV_OUTPUT_HANDOFF] = str(self.handoff_path)
        if self.build.variant == EngineVariant.SINGLE_THREAD:
            env[ENV_NO_THREADS] = "1"
        else:
            env.pop(ENV_NO_THREADS, None)
        return env

    async def run_args(self, args_str: str, hooks: InvocationHooks | None = None) -> int:
        """Run the engine with a newline-delimited argument string; return its exit status."""
        hooks = hooks or InvocationHooks()
        stdout_sink = hooks.on_stdout or self.on_stdout
        stderr_sink = hooks.on_stderr or self.on_stderr
        argv = unmarshal_args(args_str)
        self.free_output()
        command = [*self.build.command, *argv]
        logger.info(
            "Bridge: invoking engine (build=%s, argc=%s, sandbox=%s)",
            self.build.identifier,
            len(argv),
            self.fs.root,
        )
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(self.fs.root),
                env=self.environment(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_STREAM_LIMIT,
                preexec_fn=_memory_limiter(self.memory_ceiling_bytes) if self.enforce_memory_limit else None,
            )
        except OSError as exc:
            logger.error("Bridge: engine launch failed (build=%s, error=%s)", self.build.identifier, exc)
            return LAUNCH_FAILURE_STATUS

        try:
            await asyncio.gather(
                self._pump(process.stdout, stdout_sink, None),
                self._pump(process.stderr, stderr_sink, hooks.on_progress),
            )
        except BaseException:
            if process.returncode is None:
                process.kill()
            await process.wait()
            raise
        status = await process.wait()
        logger.info("Bridge: engine finished (build=%s, status=%s)", self.build.identifier, status)
        return status

    @staticmethod
    async def _pump(
        stream: asyncio.StreamReader | None,
        sink: LineSink,
        on_progress: ProgressSink | None,
    ) -> None:
        if stream is None:
            return
        while True:
            raw = await stream.readline()
            if not raw:
                return
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if on_progress is not None:
                event = parse_progress(line)
                if event is not None:
                    on_progress(event)
                    continue
            sink(line)

    def output_size(self) -> int:
        try:
            return self.handoff_path.stat().st_size
        except FileNotFoundError:
            return 0

    def copy_output(self) -> bytes | None:
        """Return a copy of the engine's last output buffer, or None when empty."""
        if self.output_size() == 0:
            return None
        return self.handoff_path.read_bytes()

    def free_output(self) -> None:
        self.handoff_path.unlink(missing_ok=True)

    def close(self) -> None:
        if self.closed:
            return
        self.free_output()
        shutil.rmtree(self._state_root, ignore_errors=True)
        self.closed = True
