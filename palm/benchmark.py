"""Time shell commands over repeated runs."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass, field


def _run_once(command: str) -> tuple[float, bool]:
    start = time.perf_counter()
    try:
        completed = subprocess.run(
            ["sh", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        ok = completed.returncode == 0
    except OSError:
        ok = False
    return time.perf_counter() - start, ok


@dataclass
class BenchmarkReport:
    """Timings, in seconds, of repeated runs of one command."""

    command: str
    iterations: int
    durations: list[float] = field(default_factory=list)
    successes: int = 0

    def _require_runs(self) -> None:
        if not self.durations:
            raise ValueError("benchmark has no recorded runs")

    def fastest(self) -> float:
        self._require_runs()
        return min(self.durations)

    def slowest(self) -> float:
        self._require_runs()
        return max(self.durations)

    def average(self) -> float:
        self._require_runs()
        return sum(self.durations) / len(self.durations)

    def success_rate(self) -> float:
        """Percentage of iterations that exited successfully."""
        if self.iterations <= 0:
            return 0.0
        return self.successes / self.iterations * 100


def run_benchmark(command: str, iterations: int = 3) -> BenchmarkReport:
    """Run ``command`` through ``sh -c`` ``iterations`` times and time each run."""
    report = BenchmarkReport(command=command, iterations=iterations)
    for _ in range(iterations):
        elapsed, ok = _run_once(command)
        report.durations.append(elapsed)
        if ok:
            report.successes += 1
    return report


def bench_run(command: str, n: int = 3) -> float:
    """Average wall time in seconds of ``n`` runs, regardless of exit status."""
    if n < 1:
        raise ValueError("number of runs must be at least 1")
    return sum(_run_once(command)[0] for _ in range(n)) / n


def split_compare_args(args: Sequence[str]) -> tuple[str, str]:
    """Split ``cmd1 ... -- cmd2 ...`` into two command strings."""
    first: list[str] = []
    second: list[str] = []
    current = first
    for arg in args:
        if arg == "--":
            current = second
            continue
        current.append(arg)
    if not first or not second:
        raise ValueError("usage: palm benchmark compare <cmd1> -- <cmd2>")
    return " ".join(first), " ".join(second)


def compare(first: str, second: str, n: int = 3) -> tuple[float, float]:
    """Average times in seconds of two commands, each run ``n`` times."""
    return bench_run(first, n), bench_run(second, n)