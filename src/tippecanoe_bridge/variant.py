"""Engine build selection and loading."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .assets import resolve_build
from .capability import has_shared_memory
from .engine import EngineHandle
from .errors import EngineConstructionFailure
from .models import CreateOptions, EngineVariant

logger = logging.getLogger(__name__)


def select_variant(
    enable_parallel: bool = True,
    detector: Callable[[], bool] | None = None,
) -> EngineVariant:
    # The detector is only consulted when parallelism was not disabled.
    probe = detector or has_shared_memory
    if enable_parallel and probe():
        return EngineVariant.PARALLEL
    return EngineVariant.SINGLE_THREAD


def _build_handle(options: CreateOptions, variant: EngineVariant) -> EngineHandle:
    override = options.parallel_command if variant == EngineVariant.PARALLEL else options.single_thread_command
    build = resolve_build(
        variant,
        build_root=options.build_root,
        version=options.build_version,
        cache_root=options.cache_root,
        command_override=override,
    )
    try:
        return EngineHandle(
            build,
            memory_ceiling_bytes=options.memory_ceiling_bytes,
            enforce_memory_limit=options.enforce_memory_limit,
            on_stdout=options.on_stdout,
            on_stderr=options.on_stderr,
        )
    except OSError as exc:
        raise EngineConstructionFailure(f"failed to create engine sandbox: {exc}") from exc


async def load_engine(
    options: CreateOptions,
    detector: Callable[[], bool] | None = None,
) -> EngineHandle:
    variant = select_variant(options.enable_parallel, detector)
    logger.info(
        "Bridge: loading engine (variant=%s, memory_ceiling_bytes=%s)",
        variant.value,
        options.memory_ceiling_bytes,
    )
    handle = await asyncio.to_thread(_build_handle, options, variant)
    logger.info("Bridge: engine loaded (build=%s)", handle.build.identifier)
    return handle
