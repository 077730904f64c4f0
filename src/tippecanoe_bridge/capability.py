"""Host capability probes used for engine build selection."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def has_shared_memory() -> bool:
    """Return True when the host can allocate a shared-memory block.

    The probe allocates one byte and releases it immediately. Any failure
    counts as "unsupported".
    """
    try:
        from multiprocessing import shared_memory
    except ImportError:
        return False
    try:
        block = shared_memory.SharedMemory(create=True, size=1)
    except (OSError, ValueError) as exc:
        logger.debug("Bridge: shared memory probe failed (error=%s)", exc)
        return False
    try:
        block.close()
        block.unlink()
    except OSError:
        pass
    return True
