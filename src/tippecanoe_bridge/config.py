"""Configuration loader for bridge profiles."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .models import DEFAULT_BUILD_VERSION, DEFAULT_MEMORY_CEILING_BYTES, CreateOptions

_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class BridgeProfile(BaseModel):
    profile_id: str = "local"
    enable_parallel: bool = True
    memory_ceiling_bytes: int = Field(DEFAULT_MEMORY_CEILING_BYTES, gt=0)
    enforce_memory_limit: bool = False
    build_root: str | None = None
    build_version: int = DEFAULT_BUILD_VERSION
    cache_root: str | None = None
    parallel_command: list[str] | None = None
    single_thread_command: list[str] | None = None
    log_path: str | None = None

    def to_create_options(self, **overrides: Any) -> CreateOptions:
        payload = self.model_dump(exclude={"profile_id", "log_path"})
        payload.update(overrides)
        return CreateOptions(**payload)


def _expand_str(value: str) -> str:
    def replacer(match: re.Match[str]) -> str:
        token = match.group(1)
        if ":-" in token:
            key, default = token.split(":-", 1)
            actual = os.getenv(key, "")
            return actual if actual.strip() else default
        actual = os.getenv(token, "")
        if not actual.strip():
            raise ValueError(f"missing environment variable: {token}")
        return actual

    return _VAR_PATTERN.sub(replacer, value)


def _expand_payload(value: Any) -> Any:
    if isinstance(value, str):
        return _expand_str(value)
    if isinstance(value, list):
        return [_expand_payload(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _expand_payload(item) for key, item in value.items()}
    return value


def load_profile(path: Path) -> BridgeProfile:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    expanded = _expand_payload(data)
    return BridgeProfile(**expanded)
