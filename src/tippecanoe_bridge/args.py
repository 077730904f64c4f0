"""Argument marshaling between callers and the engine entry point."""

from __future__ import annotations

from typing import Sequence

_OUTPUT_FLAGS = ("-o", "--output")
_OUTPUT_PREFIX = "--output="


def resolve_output_path(args: Sequence[str]) -> str | None:
    """Return the output path declared in ``args``, or None.

    Recognises ``-o PATH``, ``--output PATH``, ``-oPATH`` and
    ``--output=PATH``; the first match wins. The arguments are not modified.
    """
    for index, token in enumerate(args):
        if token in _OUTPUT_FLAGS:
            if index + 1 < len(args):
                return args[index + 1] or None
            return None
        if token.startswith("-o"):
            return token[2:] or None
        if token.startswith(_OUTPUT_PREFIX):
            return token[len(_OUTPUT_PREFIX):] or None
    return None


def marshal_args(args: Sequence[str]) -> str:
    # The engine entry point takes a single newline-delimited string.
    return "\n".join(args)


def unmarshal_args(args_str: str) -> list[str]:
    return [token for token in args_str.split("\n") if token]
