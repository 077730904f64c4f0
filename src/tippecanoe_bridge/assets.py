"""Engine build naming, versioned identifiers and build resolution."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path

import requests

from .errors import EngineConstructionFailure
from .models import DEFAULT_BUILD_VERSION, EngineVariant

logger = logging.getLogger(__name__)

BUILD_NAMES = {
    EngineVariant.PARALLEL: "tippecanoe",
    EngineVariant.SINGLE_THREAD: "tippecanoe-st",
}


@dataclass(frozen=True)
class EngineBuild:
    variant: EngineVariant
    identifier: str
    command: tuple[str, ...]


def versioned_identifier(variant: EngineVariant, version: int = DEFAULT_BUILD_VERSION) -> str:
    return f"{BUILD_NAMES[variant]}?v={version}"


def default_cache_root() -> Path:
    base = os.getenv("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / "tippecanoe-bridge"


def _is_remote(root: str) -> bool:
    return root.startswith("http://") or root.startswith("https://")


def _fetch_build(base_url: str, identifier: str, dest: Path) -> Path:
    if dest.exists():
        return dest
    url = f"{base_url.rstrip('/')}/{identifier}"
    logger.info("Bridge: fetching engine build (url=%s)", url)
    try:
        response = requests.get(url, timeout=120)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise EngineConstructionFailure(f"failed to fetch engine build {url}: {exc}") from exc
    tmp_path = dest.with_suffix(dest.suffix + ".tmp")
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(response.content)
        tmp_path.chmod(tmp_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        os.replace(tmp_path, dest)
    except OSError as exc:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Bridge: partial build not removed (path=%s)", tmp_path)
        raise EngineConstructionFailure(f"failed to cache engine build {url} at {dest}: {exc}") from exc
    return dest


def _check_launchable(command: tuple[str, ...], identifier: str) -> None:
    if not command or shutil.which(command[0]) is None:
        raise EngineConstructionFailure(f"engine build {identifier} is missing or not executable: {command}")


def resolve_build(
    variant: EngineVariant,
    *,
    build_root: str | None = None,
    version: int = DEFAULT_BUILD_VERSION,
    cache_root: str | None = None,
    command_override: list[str] | None = None,
) -> EngineBuild:
    identifier = versioned_identifier(variant, version)
    name = BUILD_NAMES[variant]
    if command_override:
        command = tuple(command_override)
    elif build_root and _is_remote(build_root):
        cache = Path(cache_root) if cache_root else default_cache_root()
        dest = _fetch_build(build_root, identifier, cache / f"v{version}" / name)
        command = (str(dest),)
    elif build_root:
        command = (str(Path(build_root) / name),)
    else:
        command = (name,)
    _check_launchable(command, identifier)
    return EngineBuild(variant=variant, identifier=identifier, command=command)
