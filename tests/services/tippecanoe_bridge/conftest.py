from __future__ import annotations

import sys
from pathlib import Path

import pytest

from tippecanoe_bridge.models import CreateOptions

STUB_ENGINE = Path(__file__).resolve().parent / "stub_engine.py"


@pytest.fixture()
def stub_command() -> list[str]:
    return [sys.executable, str(STUB_ENGINE)]


@pytest.fixture()
def stub_options(stub_command: list[str]) -> CreateOptions:
    return CreateOptions(parallel_command=stub_command, single_thread_command=stub_command)
