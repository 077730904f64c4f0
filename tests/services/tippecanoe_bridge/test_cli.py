from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from tippecanoe_bridge.cli import EXIT_CONSTRUCTION_FAILURE, main, parse_args


def _write_profile(tmp_path: Path, command: list[str]) -> Path:
    path = tmp_path / "bridge.yaml"
    payload = {"enable_parallel": False, "parallel_command": command, "single_thread_command": command}
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_parse_args_splits_engine_args() -> None:
    args = parse_args(["--no-parallel", "--input", "in.geojson=/data/x.geojson", "--", "-o", "out.bin", "in.geojson"])
    assert args.no_parallel is True
    assert args.enforce_memory_limit is False
    assert args.input == ["in.geojson=/data/x.geojson"]
    assert args.engine_args == ["-o", "out.bin", "in.geojson"]


def test_cli_writes_artifact(tmp_path: Path, stub_command: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    host_input = tmp_path / "points.geojson"
    host_input.write_text('{"type":"FeatureCollection","features":[]}', encoding="utf-8")
    artifact = tmp_path / "points.pmtiles"
    code = main(
        [
            "--profile",
            str(_write_profile(tmp_path, stub_command)),
            "--input",
            f"in.geojson={host_input}",
            "--artifact",
            str(artifact),
            "--",
            "-o",
            "out.pmtiles",
            "in.geojson",
        ]
    )
    assert code == 0
    assert artifact.read_bytes() == b"PMTiles" + host_input.read_bytes()
    summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert summary["output_size"] == artifact.stat().st_size
    assert summary["source"] == "named_path"


def test_cli_propagates_engine_exit_code(tmp_path: Path, stub_command: list[str]) -> None:
    host_input = tmp_path / "in.geojson"
    host_input.write_text("{}", encoding="utf-8")
    code = main(
        [
            "--profile",
            str(_write_profile(tmp_path, stub_command)),
            "--input",
            str(host_input),
            "--",
            "-o",
            "out.pmtiles",
            "--stub-exit=4",
            "in.geojson",
        ]
    )
    assert code == 4


def test_cli_reports_construction_failure(tmp_path: Path) -> None:
    profile = _write_profile(tmp_path, [str(tmp_path / "missing" / "tippecanoe")])
    code = main(["--profile", str(profile), "--no-parallel", "--", "-o", "out.pmtiles", "in.geojson"])
    assert code == EXIT_CONSTRUCTION_FAILURE
