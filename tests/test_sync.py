import os
import stat
from pathlib import Path

import pytest

from palm.sync import (
    STATE_FILES,
    export_state,
    import_state,
    palm_config_dir,
    sync_status,
)


@pytest.fixture
def config(tmp_path):
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "vault.enc").write_bytes(b"0123456789")
    (directory / "budget.json").write_text('{"monthly_limit": 5}')
    prompts = directory / "prompts"
    prompts.mkdir()
    (prompts / "review.md").write_text("Review {{file}}")
    (prompts / "explain.md").write_text("Explain {{topic}}")
    return directory


def test_config_dir_uses_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert palm_config_dir() == tmp_path / "palm"


def test_config_dir_falls_back_to_home(tmp_path, monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert palm_config_dir() == tmp_path / ".config" / "palm"


def test_status_reports_sizes_and_prompts(config):
    sizes, prompts = sync_status(config)
    assert set(sizes) == set(STATE_FILES)
    assert sizes["vault.enc"] == 10
    assert sizes["graph.enc"] is None
    assert prompts == 2


def test_status_of_empty_dir(tmp_path):
    sizes, prompts = sync_status(tmp_path)
    assert all(size is None for size in sizes.values())
    assert prompts == 0


def test_export_copies_existing_items(config, tmp_path):
    dest = tmp_path / "backup" / "nested"
    copied = export_state(dest, config)
    assert copied == ["vault.enc", "budget.json", "prompts/"]
    assert (dest / "vault.enc").read_bytes() == b"0123456789"
    assert (dest / "prompts" / "review.md").read_text() == "Review {{file}}"


def test_export_state_files_are_private(config, tmp_path):
    dest = tmp_path / "backup"
    export_state(dest, config)
    assert stat.S_IMODE(os.stat(dest / "vault.enc").st_mode) == 0o600


def test_export_of_empty_config(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    dest = tmp_path / "backup"
    assert export_state(dest, empty) == []
    assert dest.is_dir()


def test_round_trip(config, tmp_path):
    backup = tmp_path / "backup"
    export_state(backup, config)
    restored = tmp_path / "restored"
    names = import_state(backup, restored)
    assert names == ["vault.enc", "budget.json", "prompts/"]
    for name in ("vault.enc", "budget.json", "prompts/review.md", "prompts/explain.md"):
        assert (restored / name).read_bytes() == (config / name).read_bytes()
    assert sync_status(restored) == sync_status(config)


def test_import_missing_backup(tmp_path):
    with pytest.raises(FileNotFoundError):
        import_state(tmp_path / "nope", tmp_path / "config")
    assert not Path(tmp_path / "config").exists()