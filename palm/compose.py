"""Multi-step tool workflows described in a TOML file."""

from __future__ import annotations

import os
import signal
import subprocess
import threading
import time
import tomllib
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_COMPOSE_FILE = ".palm-compose.toml"
VERBOSE_OUTPUT_LIMIT = 500

SAMPLE_WORKFLOW = """# palm compose workflow
# Run with: palm compose

name = "code-review"
description = "Multi-tool code review pipeline"

# Step 1: Read the source file
[[steps]]
name = "read-code"
run = "cat main.go"

# Step 2: AI reviews the code (depends on step 1)
[[steps]]
name = "ai-review"
tool = "ollama"
args = ["run", "llama3.3", "Review this Go code for bugs and improvements:"]
input = "step:read-code"
depends_on = ["read-code"]

# Step 3: Run tests in parallel with review (no dependency on review)
[[steps]]
name = "run-tests"
run = "go test ./..."
timeout = 60

# Step 4: Generate summary after both review and tests
[[steps]]
name = "summary"
tool = "ollama"
args = ["run", "llama3.3", "Summarize the code review and test results:"]
input = "step:ai-review,step:run-tests"
depends_on = ["ai-review", "run-tests"]
"""


class ComposeError(Exception):
    """A workflow file is missing, malformed or inconsistent."""


@dataclass
class ComposeStep:
    """One step of a workflow: a shell command or a tool with arguments."""

    name: str
    run: str = ""
    tool: str = ""
    args: list[str] = field(default_factory=list)
    input: str = ""
    depends_on: list[str] = field(default_factory=list)
    on_fail: str = ""
    timeout: int = 0

    def command_line(self) -> str:
        """The command as it would be shown to a user."""
        if self.tool:
            return " ".join([self.tool, *self.args])
        return self.run


@dataclass
class ComposeFile:
    """A named workflow made of steps."""

    name: str = ""
    description: str = ""
    steps: list[ComposeStep] = field(default_factory=list)


@dataclass
class ComposeResult:
    """Outcome of one step; ``duration`` is in seconds."""

    step: str
    output: str = ""
    duration: float = 0.0
    exit_code: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


_STRING_FIELDS = ("name", "run", "tool", "input", "on_fail")
_LIST_FIELDS = ("args", "depends_on")


def _step_from_table(table: object) -> ComposeStep:
    if not isinstance(table, dict):
        raise ComposeError("each entry of 'steps' must be a table")
    values: dict[str, object] = {}
    for key in _STRING_FIELDS:
        if key in table:
            if not isinstance(table[key], str):
                raise ComposeError(f"step field '{key}' must be a string")
            values[key] = table[key]
    for key in _LIST_FIELDS:
        if key in table:
            items = table[key]
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise ComposeError(f"step field '{key}' must be a list of strings")
            values[key] = list(items)
    if "timeout" in table:
        timeout = table["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, int):
            raise ComposeError("step field 'timeout' must be an integer")
        values["timeout"] = timeout
    values.setdefault("name", "")
    return ComposeStep(**values)  # type: ignore[arg-type]


def _find_file(file: str | os.PathLike) -> Path:
    path = Path(file)
    if path.is_absolute():
        return path
    directory = Path.cwd()
    while True:
        candidate = directory / path
        if candidate.exists():
            return candidate
        parent = directory.parent
        if parent == directory:
            raise ComposeError(
                f"{os.fspath(file)} not found (run 'palm compose init' to create one)"
            )
        directory = parent


def _validate(workflow: ComposeFile) -> None:
    names: set[str] = set()
    for step in workflow.steps:
        if not step.name:
            raise ComposeError("step missing 'name'")
        if not step.run and not step.tool:
            raise ComposeError(f"step '{step.name}': must have 'run' or 'tool'")
        if step.name in names:
            raise ComposeError(f"duplicate step name: '{step.name}'")
        names.add(step.name)
    for step in workflow.steps:
        for dep in step.depends_on:
            if dep not in names:
                raise ComposeError(f"step '{step.name}' depends on unknown step '{dep}'")


def load_compose_file(file: str | os.PathLike = DEFAULT_COMPOSE_FILE) -> ComposeFile:
    """Load and validate a workflow.

    A relative name is looked for in the working directory and then in each
    parent directory in turn.
    """
    path = _find_file(file)
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ComposeError(str(exc)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ComposeError(f"{path}: {exc}") from exc

    name = data.get("name", "")
    description = data.get("description", "")
    if not isinstance(name, str) or not isinstance(description, str):
        raise ComposeError("'name' and 'description' must be strings")
    raw_steps = data.get("steps", [])
    if not isinstance(raw_steps, list):
        raise ComposeError("'steps' must be an array of tables")

    workflow = ComposeFile(
        name=name,
        description=description,
        steps=[_step_from_table(table) for table in raw_steps],
    )
    _validate(workflow)
    return workflow


def resolve_execution_order(workflow: ComposeFile) -> list[list[ComposeStep]]:
    """Group steps into levels that can run in parallel.

    Every step's dependencies belong to earlier levels. Steps caught in a
    dependency cycle are put together in one final level.
    """
    remaining = list(workflow.steps)
    resolved: set[str] = set()
    levels: list[list[ComposeStep]] = []

    while remaining:
        level = [s for s in remaining if all(dep in resolved for dep in s.depends_on)]
        if not level:
            levels.append(remaining)
            break
        resolved.update(s.name for s in level)
        remaining = [s for s in remaining if s.name not in resolved]
        levels.append(level)

    return levels


def _git_output(args: list[str]) -> str | None:
    try:
        completed = subprocess.run(
            ["git", *args], capture_output=True, check=False, stdin=subprocess.DEVNULL
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout.decode("utf-8", "replace")


def resolve_input(input_spec: str, outputs: Mapping[str, str]) -> str:
    """Build a step's standard input from a comma-separated specification.

    Parts are ``step:<name>`` (output of an earlier step), ``file:<path>``,
    ``git:diff``, ``git:log``, or literal text. Parts that cannot be
    resolved are left out; the rest are joined by blank lines.
    """
    resolved: list[str] = []
    for part in (p.strip() for p in input_spec.split(",")):
        if part.startswith("step:"):
            output = outputs.get(part.removeprefix("step:"))
            if output is not None:
                resolved.append(output)
        elif part.startswith("file:"):
            try:
                resolved.append(Path(part.removeprefix("file:")).read_text())
            except (OSError, UnicodeDecodeError):
                pass
        elif part.startswith("git:"):
            git_cmd = part.removeprefix("git:")
            output = None
            if git_cmd == "diff":
                output = _git_output(["diff"])
            elif git_cmd == "log":
                output = _git_output(["log", "--oneline", "-10"])
            if output is not None:
                resolved.append(output)
        else:
            resolved.append(part)
    return "\n\n".join(resolved)


def _kill_tree(process: subprocess.Popen) -> None:
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except (AttributeError, ProcessLookupError, PermissionError):
        try:
            process.kill()
        except ProcessLookupError:
            pass


def _exit_error(returncode: int) -> str:
    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"


def execute_compose_step(
    step: ComposeStep,
    env: Mapping[str, str] | None = None,
    stdin_data: str = "",
) -> ComposeResult:
    """Run one step and capture its result.

    On success the output is the step's standard output; on failure it is
    its standard error. A step whose ``timeout`` runs out is killed.
    """
    if step.run:
        argv = ["sh", "-c", step.run]
    elif step.tool:
        argv = [step.tool, *step.args]
    else:
        raise ComposeError(f"step '{step.name}': must have 'run' or 'tool'")

    start = time.perf_counter()
    try:
        process = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE if stdin_data else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(env) if env is not None else None,
            start_new_session=True,
        )
    except OSError as exc:
        return ComposeResult(
            step=step.name,
            duration=time.perf_counter() - start,
            exit_code=1,
            error=str(exc),
        )

    data = stdin_data.encode() if stdin_data else None
    try:
        stdout, stderr = process.communicate(
            input=data, timeout=step.timeout if step.timeout > 0 else None
        )
    except subprocess.TimeoutExpired:
        _kill_tree(process)
        process.communicate()
        return ComposeResult(
            step=step.name,
            duration=float(step.timeout),
            exit_code=-1,
            error="timeout",
        )
    elapsed = time.perf_counter() - start

    if process.returncode != 0:
        return ComposeResult(
            step=step.name,
            output=stderr.decode("utf-8", "replace"),
            duration=elapsed,
            exit_code=1,
            error=_exit_error(process.returncode),
        )
    return ComposeResult(
        step=step.name,
        output=stdout.decode("utf-8", "replace"),
        duration=elapsed,
        exit_code=0,
    )


def _truncated_block(text: str, limit: int) -> str:
    if len(text) > limit:
        text = text[:limit] + "\n... (truncated)"
    return "\n".join("    " + line for line in text.rstrip("\n").split("\n"))


def run_compose(
    workflow: ComposeFile,
    env: Mapping[str, str] | None = None,
    verbose: bool = False,
) -> list[ComposeResult]:
    """Run a workflow level by level, steps of one level in parallel.

    Execution stops after a level in which a step failed, unless that step
    sets ``on_fail = "continue"``.
    """
    outputs: dict[str, str] = {}
    lock = threading.Lock()
    all_results: list[ComposeResult] = []

    def say(text: str) -> None:
        with lock:
            print(text, flush=True)

    def run_one(step: ComposeStep) -> ComposeResult:
        say(f"  \u2192 Running {step.name}...")
        stdin_data = ""
        if step.input:
            with lock:
                snapshot = dict(outputs)
            stdin_data = resolve_input(step.input, snapshot)
        result = execute_compose_step(step, env, stdin_data)
        with lock:
            outputs[step.name] = result.output
        if result.error:
            say(f"  \u2717 {step.name} failed: {result.error}")
        else:
            say(f"  \u2713 {step.name} completed in {result.duration:.2f}s")
        if verbose and result.output:
            say("\n" + _truncated_block(result.output, VERBOSE_OUTPUT_LIMIT) + "\n")
        return result

    for number, level in enumerate(resolve_execution_order(workflow), start=1):
        if len(level) > 1:
            say(f"  \u26a1 Parallel group {number} ({len(level)} steps)")
        with ThreadPoolExecutor(max_workers=len(level)) as pool:
            level_results = list(pool.map(run_one, level))

        stop = False
        for step, result in zip(level, level_results):
            all_results.append(result)
            if result.error and step.on_fail != "continue":
                stop = True
                break
        if stop:
            return all_results

    return all_results


def compose_init(directory: str | os.PathLike = ".") -> Path:
    """Write a sample workflow file into ``directory`` and return its path.

    Raises ``FileExistsError`` if the file is already there.
    """
    path = Path(directory) / DEFAULT_COMPOSE_FILE
    with open(path, "x", encoding="utf-8") as handle:
        handle.write(SAMPLE_WORKFLOW)
    return path


def _format_level(number: int, level: Iterable[ComposeStep], parallel: bool) -> list[str]:
    if parallel:
        lines = [f"  \u26a1 Parallel group {number}:"]
    else:
        lines = [f"  \u2192 Step {number}:"]
    for step in level:
        lines.append(f"    {step.name}  {step.command_line()}")
        if step.input:
            lines.append(f"           input: {step.input}")
        if step.depends_on:
            lines.append(f"           after: {', '.join(step.depends_on)}")
    lines.append("")
    return lines


def format_dry_run(workflow: ComposeFile) -> str:
    """Describe the execution plan of a workflow without running it."""
    lines = ["  \U0001f4cb Dry run \u2014 showing execution plan", ""]
    for number, level in enumerate(resolve_execution_order(workflow), start=1):
        lines.extend(_format_level(number, level, len(level) > 1))
    return "\n".join(lines)