from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tippecanoe_bridge.config import BridgeProfile, load_profile
from tippecanoe_bridge.models import DEFAULT_MEMORY_CEILING_BYTES


def _write_profile(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "bridge.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_profile_defaults(tmp_path: Path) -> None:
    profile = load_profile(_write_profile(tmp_path, ""))
    assert profile.enable_parallel is True
    assert profile.memory_ceiling_bytes == DEFAULT_MEMORY_CEILING_BYTES
    assert profile.build_version == 6
    assert profile.enforce_memory_limit is False


def test_profile_env_expansion(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIPPECANOE_BUILDS", "/opt/tippecanoe/builds")
    monkeypatch.delenv("TIPPECANOE_CACHE", raising=False)
    path = _write_profile(
        tmp_path,
        "\n".join(
            [
                "profile_id: ci",
                "enable_parallel: false",
                "memory_ceiling_bytes: 1073741824",
                "build_root: ${TIPPECANOE_BUILDS}",
                "cache_root: ${TIPPECANOE_CACHE:-/tmp/tippecanoe-cache}",
                "build_version: 7",
            ]
        ),
    )
    profile = load_profile(path)
    assert profile.profile_id == "ci"
    assert profile.enable_parallel is False
    assert profile.build_root == "/opt/tippecanoe/builds"
    assert profile.cache_root == "/tmp/tippecanoe-cache"

    options = profile.to_create_options()
    assert options.enable_parallel is False
    assert options.memory_ceiling_bytes == 1073741824
    assert options.build_version == 7


def test_missing_env_var_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TIPPECANOE_BUILDS", raising=False)
    path = _write_profile(tmp_path, "build_root: ${TIPPECANOE_BUILDS}\n")
    with pytest.raises(ValueError, match="TIPPECANOE_BUILDS"):
        load_profile(path)


def test_overrides_and_validation() -> None:
    options = BridgeProfile(enable_parallel=True).to_create_options(enable_parallel=False)
    assert options.enable_parallel is False
    with pytest.raises(ValidationError):
        BridgeProfile(memory_ceiling_bytes=0)
