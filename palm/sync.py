"""Back up palm's state to a directory and restore it on another machine."""

from __future__ import annotations

import os
from pathlib import Path

STATE_FILES = (
    "vault.enc",
    "graph.enc",
    "sessions.jsonl",
    "activity.jsonl",
    "budget.json",
    "state.json",
)
PROMPTS_DIR = "prompts"


def palm_config_dir() -> Path:
    """palm's configuration directory, under ``$XDG_CONFIG_HOME`` or ``~/.config``."""
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return Path(base) / "palm"


def _root(config_dir: str | os.PathLike | None) -> Path:
    return Path(config_dir) if config_dir is not None else palm_config_dir()


def _write(path: Path, data: bytes, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def _prompt_files(directory: Path) -> list[Path]:
    try:
        return sorted(p for p in directory.iterdir() if p.is_file())
    except OSError:
        return []


def sync_status(
    config_dir: str | os.PathLike | None = None,
) -> tuple[dict[str, int | None], int]:
    """Sizes in bytes of the state files (``None`` if absent) and the prompt count."""
    root = _root(config_dir)
    sizes: dict[str, int | None] = {}
    for name in STATE_FILES:
        try:
            sizes[name] = (root / name).stat().st_size
        except OSError:
            sizes[name] = None
    return sizes, len(_prompt_files(root / PROMPTS_DIR))


def _copy_state(source: Path, target: Path) -> list[str]:
    copied: list[str] = []
    for name in STATE_FILES:
        src = source / name
        if not src.exists():
            continue
        try:
            _write(target / name, src.read_bytes(), 0o600)
        except OSError:
            continue
        copied.append(name)

    prompts = _prompt_files(source / PROMPTS_DIR)
    if prompts:
        dest_prompts = target / PROMPTS_DIR
        dest_prompts.mkdir(parents=True, exist_ok=True)
        for prompt in prompts:
            try:
                _write(dest_prompts / prompt.name, prompt.read_bytes(), 0o644)
            except OSError:
                continue
        copied.append(PROMPTS_DIR + "/")
    return copied


def export_state(
    dest: str | os.PathLike, config_dir: str | os.PathLike | None = None
) -> list[str]:
    """Copy palm's state into ``dest`` and return the items copied.

    Files that cannot be read or written are skipped.
    """
    target = Path(dest)
    target.mkdir(parents=True, exist_ok=True)
    return _copy_state(_root(config_dir), target)


def import_state(
    src: str | os.PathLike, config_dir: str | os.PathLike | None = None
) -> list[str]:
    """Restore palm's state from the backup ``src`` and return the items restored.

    Raises ``FileNotFoundError`` when the backup does not exist.
    """
    source = Path(src)
    if not source.exists():
        raise FileNotFoundError(f"Backup not found: {source}")
    root = _root(config_dir)
    root.mkdir(parents=True, exist_ok=True)
    return _copy_state(source, root)