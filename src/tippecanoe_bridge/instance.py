"""Async facade: ``create()`` and :class:`TippecanoeInstance`."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from .args import marshal_args, resolve_output_path
from .engine import EngineHandle, InvocationHooks
from .errors import EngineExitFailure
from .extract import extract_output
from .models import CreateOptions, EngineVariant, RunOptions, RunResult
from .staging import cleanup_run, stage_inputs
from .variant import load_engine

logger = logging.getLogger(__name__)


class TippecanoeInstance:
    """One loaded engine build.

    Not safe for concurrent ``run()`` calls: the sandbox and the output
    handoff are shared by every call on the instance. Serialize calls, or
    create one instance per concurrent job.
    """

    def __init__(self, handle: EngineHandle, options: CreateOptions) -> None:
        self._handle = handle
        self.options = options

    @property
    def variant(self) -> EngineVariant:
        return self._handle.variant

    @property
    def handle(self) -> EngineHandle:
        return self._handle

    async def run(
        self,
        args: Sequence[str],
        files: Mapping[str, Any] | None = None,
        options: RunOptions | None = None,
    ) -> RunResult:
        """Stage ``files``, run the engine with ``args`` and return the artifact.

        Raises UnsupportedInputType before invocation and EngineExitFailure
        after a nonzero exit. Staged inputs are removed in every case.

        File keys are sandbox paths: ``/in.geojson`` and ``in.geojson`` stage
        the same file. ``args`` reach the engine unchanged and the engine runs
        with the sandbox as its working directory, so refer to inputs and the
        output with relative paths there. An absolute argument such as
        ``-o /out.bin`` points outside the sandbox, at the host filesystem.
        """
        if self._handle.closed:
            raise RuntimeError("tippecanoe instance is closed")
        args = list(args)
        run_options = options or RunOptions()
        staged: list[str] = []
        try:
            stage_inputs(self._handle.fs, files or {}, staged)
            output_path = resolve_output_path(args)
            hooks = InvocationHooks(
                on_progress=run_options.on_progress,
                on_stdout=run_options.on_stdout,
                on_stderr=run_options.on_stderr,
            )
            status = await self._handle.run_args(marshal_args(args), hooks)
            if status != 0:
                logger.warning("Bridge: engine run failed (status=%s, output_path=%s)", status, output_path)
                raise EngineExitFailure(status)
            extracted = extract_output(self._handle, output_path)
        finally:
            cleanup_run(self._handle, staged)
        result = RunResult.from_artifact(extracted.artifact, extracted.source, output_path)
        logger.info(
            "Bridge: run complete (output_size=%s, source=%s)",
            result.output_size,
            result.source.value if result.source else None,
        )
        return result

    def dispose(self) -> None:
        """Release the engine's output buffer. The instance stays usable."""
        self._handle.free_output()

    def close(self) -> None:
        """Release the output buffer and tear down the engine sandbox."""
        self._handle.close()

    async def __aenter__(self) -> "TippecanoeInstance":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


async def create(
    options: CreateOptions | None = None,
    *,
    detector: Callable[[], bool] | None = None,
    **overrides: Any,
) -> TippecanoeInstance:
    """Load an engine build and return an instance bound to it.

    Keyword overrides are applied on top of ``options``. Raises
    EngineConstructionFailure when the build cannot be loaded.
    """
    if options is None:
        options = CreateOptions(**overrides)
    elif overrides:
        options = CreateOptions(**{**options.model_dump(), **overrides})
    handle = await load_engine(options, detector)
    return TippecanoeInstance(handle, options)
