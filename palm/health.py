"""Health checks for palm's configuration directory and environment."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

DATA_FILES: dict[str, str] = {
    "vault.enc": "API key vault",
    "graph.enc": "Knowledge graph",
    "sessions.jsonl": "Session history",
    "activity.jsonl": "Activity log",
    "budget.json": "Budget config",
    "state.json": "State tracking",
}

DISK_LIMIT = 100 * 1024 * 1024


@dataclass(frozen=True)
class HealthCheck:
    """The outcome of one check."""

    name: str
    ok: bool
    detail: str


def _default_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return Path(base) / "palm"


def dir_size(path: str | os.PathLike) -> int:
    """Total size in bytes of the files under ``path``; unreadable parts count as 0."""
    total = 0
    try:
        if not os.path.isdir(path):
            return os.path.getsize(path) if os.path.isfile(path) else 0
    except OSError:
        return 0
    for directory, _dirs, files in os.walk(path):
        for name in files:
            try:
                total += os.path.getsize(os.path.join(directory, name))
            except OSError:
                continue
    return total


def data_files(config_dir: str | os.PathLike | None = None) -> list[tuple[str, str, int]]:
    """The known data files present in ``config_dir`` as ``(name, description, size)``."""
    root = Path(config_dir) if config_dir is not None else _default_config_dir()
    found = []
    for name, description in DATA_FILES.items():
        try:
            size = (root / name).stat().st_size
        except OSError:
            continue
        found.append((name, description, size))
    return found


def _git_version() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            stdin=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout.decode("utf-8", "replace").strip()


def run_health_checks(config_dir: str | os.PathLike | None = None) -> list[HealthCheck]:
    """Run every health check against ``config_dir`` and the environment."""
    root = Path(config_dir) if config_dir is not None else _default_config_dir()
    checks = [HealthCheck("Config directory", root.exists(), str(root))]

    try:
        vault_size = (root / "vault.enc").stat().st_size
    except OSError:
        checks.append(HealthCheck("Vault encryption", False, "no vault file"))
    else:
        checks.append(
            HealthCheck("Vault encryption", vault_size > 0, f"{vault_size / 1024:.1f} KB")
        )

    checks.append(
        HealthCheck("Graph encryption", (root / "graph.enc").exists(), "graph.enc exists")
    )

    version = _git_version()
    checks.append(
        HealthCheck("Git available", version is not None, version or "not found")
    )

    shell = os.environ.get("SHELL", "")
    if shell:
        checks.append(HealthCheck("Shell completion", True, os.path.basename(shell)))
    else:
        checks.append(HealthCheck("Shell completion", False, "SHELL not set"))

    size = dir_size(root)
    checks.append(
        HealthCheck("Disk space", size < DISK_LIMIT, f"{size / (1024 * 1024):.1f} MB used")
    )
    return checks