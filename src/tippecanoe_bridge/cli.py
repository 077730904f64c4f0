"""CLI for running tippecanoe through the bridge."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from .config import BridgeProfile, load_profile
from .errors import EngineConstructionFailure, EngineExitFailure, UnsupportedInputType
from .instance import create
from .logging_utils import configure_logging
from .models import ProgressEvent, RunOptions

EXIT_UNSUPPORTED_INPUT = 2
EXIT_CONSTRUCTION_FAILURE = 3


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run tippecanoe inside a private sandbox")
    parser.add_argument("--profile", default=None, help="Path to bridge profile YAML")
    parser.add_argument("--no-parallel", action="store_true", help="Force the single-threaded build")
    parser.add_argument("--max-memory", type=int, default=None, help="Memory ceiling in bytes")
    parser.add_argument(
        "--enforce-memory-limit",
        action="store_true",
        help="Also cap the engine address space at the memory ceiling",
    )
    parser.add_argument("--build-root", default=None, help="Directory or URL holding the engine builds")
    parser.add_argument(
        "--input",
        action="append",
        default=[],
        metavar="VIRTUAL=HOSTPATH",
        help="Stage a host file into the sandbox (repeatable)",
    )
    parser.add_argument("--artifact", default=None, help="Write the artifact to this host path")
    parser.add_argument("--progress", action="store_true", help="Print progress events to stderr")
    parser.add_argument("--log-path", default=None)
    parser.add_argument("engine_args", nargs=argparse.REMAINDER, help="Arguments passed to tippecanoe")
    args = parser.parse_args(argv)
    if args.engine_args and args.engine_args[0] == "--":
        args.engine_args = args.engine_args[1:]
    return args


def _parse_input(value: str) -> tuple[str, Path]:
    if "=" in value:
        virtual, host = value.split("=", 1)
        return virtual, Path(host)
    host_path = Path(value)
    return host_path.name, host_path


def _print_progress(event: ProgressEvent) -> None:
    print(f"{event.phase} {event.percent:.1f}% {event.message}".rstrip(), file=sys.stderr)


async def _run(args: argparse.Namespace, profile: BridgeProfile) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.no_parallel:
        overrides["enable_parallel"] = False
    if args.max_memory is not None:
        overrides["memory_ceiling_bytes"] = args.max_memory
    if args.enforce_memory_limit:
        overrides["enforce_memory_limit"] = True
    if args.build_root:
        overrides["build_root"] = args.build_root
    files = {virtual: host.read_bytes() for virtual, host in map(_parse_input, args.input)}
    run_options = RunOptions(on_progress=_print_progress if args.progress else None)
    async with await create(profile.to_create_options(**overrides)) as instance:
        result = await instance.run(args.engine_args, files, run_options)
    if args.artifact and result.artifact is not None:
        Path(args.artifact).write_bytes(result.artifact)
    return {
        "output_size": result.output_size,
        "source": result.source.value if result.source else None,
        "output_path": result.output_path,
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    profile = load_profile(Path(args.profile)) if args.profile else BridgeProfile()
    configure_logging(log_path=args.log_path or profile.log_path)
    try:
        summary = asyncio.run(_run(args, profile))
    except EngineExitFailure as exc:
        print(str(exc), file=sys.stderr)
        return exc.code if 0 < exc.code < 256 else 1
    except UnsupportedInputType as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_UNSUPPORTED_INPUT
    except EngineConstructionFailure as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_CONSTRUCTION_FAILURE
    print(json.dumps(summary, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
