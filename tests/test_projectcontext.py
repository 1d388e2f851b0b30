import json

import pytest

from palm.projectcontext import (
    CONTEXT_SOURCE,
    detect_project,
    generate_context,
    generate_tool_context,
    init_context,
    sync_context,
    wrap_for_tool,
)


def test_detect_go(tmp_path):
    (tmp_path / "go.mod").write_text("module x\n")
    assert detect_project(tmp_path) == ("Go", "")


def test_detect_unknown(tmp_path):
    assert detect_project(tmp_path) == ("Unknown", "")


def test_detect_maven(tmp_path):
    (tmp_path / "pom.xml").write_text("<project/>")
    assert detect_project(tmp_path) == ("Java", "Maven")


def test_detect_marker_order(tmp_path):
    (tmp_path / "go.mod").write_text("module x\n")
    (tmp_path / "package.json").write_text('{"dependencies": {"react": "1"}}')
    assert detect_project(tmp_path) == ("Go", "")


@pytest.mark.parametrize(
    "content, framework",
    [
        ('{"dependencies": {"react": "1"}}', "React"),
        ('{"dependencies": {"next": "1"}}', "Next.js"),
        ('{"dependencies": {"express": "1"}}', "Express"),
        ("{}", ""),
    ],
)
def test_detect_js_framework(tmp_path, content, framework):
    (tmp_path / "package.json").write_text(content)
    assert detect_project(tmp_path) == ("JavaScript/TypeScript", framework)


def test_detect_python_framework(tmp_path):
    (tmp_path / "pyproject.toml").write_text('dependencies = ["fastapi"]\n')
    assert detect_project(tmp_path) == ("Python", "FastAPI")


def test_generate_context_go():
    text = generate_context("Go", "")
    assert text.startswith("# Project Context\n\nLanguage: Go\n")
    assert "- Use `gofmt` for formatting\n" in text
    assert "Framework:" not in text
    assert text.endswith("<!-- List important files and their purpose -->\n")


def test_generate_context_with_framework():
    text = generate_context("JavaScript/TypeScript", "React")
    assert "Framework: React\n" in text
    assert "- Prefer functional patterns\n" in text


def test_wrap_for_tool_known_and_unknown():
    wrapped = wrap_for_tool("cursor", "body")
    assert wrapped.startswith("# Cursor Rules\n")
    assert wrapped.endswith("body")
    assert wrap_for_tool("aider", "body") == "body"


def test_generate_tool_context_special_tools():
    assert json.loads(generate_tool_context("continue", "Go", ""))["models"] == []
    assert "map-tokens: 2048" in generate_tool_context("aider", "Go", "")


def test_generate_tool_context_wraps_base():
    assert generate_tool_context("claude-code", "Go", "") == wrap_for_tool(
        "claude-code", generate_context("Go", "")
    )


def test_init_context_defaults(tmp_path):
    report = init_context(tmp_path)
    created = {p.relative_to(tmp_path).as_posix() for p in report["created"]}
    assert created == {
        CONTEXT_SOURCE,
        "CLAUDE.md",
        ".cursorrules",
        ".github/copilot-instructions.md",
    }
    assert report["unknown"] == []
    assert (tmp_path / "CLAUDE.md").read_text() == generate_tool_context(
        "claude-code", "Unknown", ""
    )


def test_init_context_twice_skips(tmp_path):
    init_context(tmp_path, ["codex"])
    report = init_context(tmp_path, ["codex"])
    assert report["created"] == []
    assert len(report["skipped"]) == 2


def test_init_context_unknown_tool(tmp_path):
    report = init_context(tmp_path, ["nonexistent"])
    assert report["unknown"] == ["nonexistent"]


def test_sync_without_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        sync_context(tmp_path)


def test_sync_rewrites_existing_files(tmp_path):
    init_context(tmp_path, ["claude-code", "windsurf"])
    (tmp_path / CONTEXT_SOURCE).write_text("new instructions\n")
    synced = sync_context(tmp_path)
    assert {p.name for p in synced} == {"CLAUDE.md", ".windsurfrules"}
    assert (tmp_path / "CLAUDE.md").read_text() == wrap_for_tool(
        "claude-code", "new instructions\n"
    )
    assert not (tmp_path / "AGENTS.md").exists()