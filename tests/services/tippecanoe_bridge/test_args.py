from __future__ import annotations

import pytest

from tippecanoe_bridge.args import marshal_args, resolve_output_path, unmarshal_args


@pytest.mark.parametrize(
    "args",
    [
        ["-o", "out.pmtiles", "in.geojson"],
        ["--output", "out.pmtiles", "in.geojson"],
        ["-oout.pmtiles", "in.geojson"],
        ["--output=out.pmtiles", "in.geojson"],
        ["-z14", "in.geojson", "-o", "out.pmtiles"],
        ["-zg", "--drop-densest-as-needed", "--output=out.pmtiles"],
    ],
)
def test_output_flag_forms_resolve_to_value(args: list[str]) -> None:
    assert resolve_output_path(args) == "out.pmtiles"


def test_first_output_flag_wins() -> None:
    args = ["--output=first.pmtiles", "-o", "second.pmtiles", "-othird.pmtiles"]
    assert resolve_output_path(args) == "first.pmtiles"


def test_nested_output_path_kept_verbatim() -> None:
    assert resolve_output_path(["--output=a/b/out.bin", "in.geojson"]) == "a/b/out.bin"


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["-z14", "in.geojson"],
        ["in.geojson", "-o"],
        ["--output=", "in.geojson"],
        ["--output-dir", "tiles"],
    ],
)
def test_missing_or_empty_output_is_none(args: list[str]) -> None:
    assert resolve_output_path(args) is None


def test_resolution_does_not_mutate_args() -> None:
    args = ["-o", "out.pmtiles", "-z", "14", "in.geojson"]
    resolve_output_path(args)
    assert args == ["-o", "out.pmtiles", "-z", "14", "in.geojson"]


def test_marshal_joins_with_newlines() -> None:
    assert marshal_args(["-o", "out.bin", "in.geojson"]) == "-o\nout.bin\nin.geojson"


def test_unmarshal_drops_empty_tokens() -> None:
    assert unmarshal_args("-o\nout.bin\n\nin.geojson\n") == ["-o", "out.bin", "in.geojson"]
    assert unmarshal_args(marshal_args(["-z", "", "14"])) == ["-z", "14"]
