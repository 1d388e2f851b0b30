"""Chain commands, feeding each one's output to the next."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence


class PipelineError(Exception):
    """A pipeline is malformed or one of its commands failed."""

    def __init__(self, message: str, step: int = 0, command: str = "") -> None:
        super().__init__(message)
        self.step = step
        self.command = command


def parse_pipe_segments(args: Sequence[str]) -> list[list[str]]:
    """Split arguments on ``|`` into commands, each argument split on whitespace."""
    segments: list[list[str]] = []
    current: list[str] = []
    for arg in args:
        if arg == "|":
            if current:
                segments.append(current)
                current = []
        else:
            current.extend(arg.split())
    if current:
        segments.append(current)
    return segments


def run_pipeline(
    segments: Sequence[Sequence[str]],
    env: Mapping[str, str] | None = None,
) -> str:
    """Run the commands in turn and return the last one's standard output.

    The first command reads nothing; each later one reads the previous
    command's output. Standard error is passed through. Raises
    :class:`PipelineError` when there are fewer than two commands or when
    one of them cannot start or exits unsuccessfully.
    """
    commands = [list(segment) for segment in segments if segment]
    if len(commands) < 2:
        raise PipelineError("provide at least 2 commands separated by |")

    total = len(commands)
    previous: bytes | None = None
    for number, argv in enumerate(commands, start=1):
        label = f"[{number}/{total}] {argv[0]}"
        try:
            if previous is None:
                completed = subprocess.run(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    env=dict(env) if env is not None else None,
                    check=False,
                )
            else:
                completed = subprocess.run(
                    argv,
                    input=previous,
                    stdout=subprocess.PIPE,
                    env=dict(env) if env is not None else None,
                    check=False,
                )
        except OSError as exc:
            raise PipelineError(f"{label} failed: {exc}", number, argv[0]) from exc
        if completed.returncode != 0:
            raise PipelineError(
                f"{label} failed: exit status {completed.returncode}", number, argv[0]
            )
        previous = completed.stdout

    return (previous or b"").decode("utf-8", "replace")