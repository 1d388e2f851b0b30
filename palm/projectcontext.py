"""Keep one project context file and the per-tool instruction files in step."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

CONTEXT_SOURCE = ".palm-context.md"

CONTEXT_FILES: dict[str, str] = {
    "claude-code": "CLAUDE.md",
    "cursor": ".cursorrules",
    "aider": ".aider.conf.yml",
    "continue": ".continuerc.json",
    "copilot": ".github/copilot-instructions.md",
    "windsurf": ".windsurfrules",
    "codex": "AGENTS.md",
}

DEFAULT_TOOLS = ("claude-code", "cursor", "copilot")

_PROJECT_MARKERS = (
    ("go.mod", "Go", ""),
    ("Cargo.toml", "Rust", ""),
    ("package.json", "JavaScript/TypeScript", ""),
    ("pyproject.toml", "Python", ""),
    ("requirements.txt", "Python", ""),
    ("Gemfile", "Ruby", ""),
    ("pom.xml", "Java", "Maven"),
    ("build.gradle", "Java", "Gradle"),
    ("mix.exs", "Elixir", ""),
)

_JS_FRAMEWORKS = (
    ('"react"', "React"),
    ('"next"', "Next.js"),
    ('"vue"', "Vue"),
    ('"svelte"', "Svelte"),
    ('"express"', "Express"),
)

_PYTHON_FRAMEWORKS = (
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("flask", "Flask"),
)

_LANGUAGE_GUIDELINES: dict[str, tuple[str, ...]] = {
    "Go": (
        "- Use `gofmt` for formatting",
        "- Handle errors explicitly, don't ignore them",
        "- Follow Go naming conventions (camelCase for unexported)",
    ),
    "Python": (
        "- Use type hints",
        "- Follow PEP 8 style guide",
    ),
    "JavaScript/TypeScript": (
        "- Use TypeScript when possible",
        "- Prefer functional patterns",
    ),
    "Rust": (
        "- Use `cargo fmt` for formatting",
        "- Handle errors with Result, avoid unwrap in production code",
    ),
}

_GENERATED_NOTE = (
    "# Generated by palm context — edit .palm-context.md and run `palm context sync`\n\n"
)

_TOOL_HEADERS = {
    "cursor": "# Cursor Rules\n",
    "copilot": "# GitHub Copilot Instructions\n",
    "claude-code": "# Claude Code Instructions\n",
    "codex": "# OpenAI Codex Agent Instructions\n",
    "windsurf": "# Windsurf Rules\n",
}

_AIDER_CONFIG = "# aider configuration\n\nauto-commits: false\nmap-tokens: 2048\n"

_CONTINUE_CONFIG = """{
  "models": [],
  "customCommands": [],
  "contextProviders": [],
  "slashCommands": []
}
"""


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def _first_match(content: str, table: Iterable[tuple[str, str]]) -> str:
    for needle, name in table:
        if needle in content:
            return name
    return ""


def detect_project(root: str | os.PathLike = ".") -> tuple[str, str]:
    """Guess the project's language and framework from files in ``root``."""
    root = Path(root)
    lang, framework = "", ""
    for marker, marker_lang, marker_framework in _PROJECT_MARKERS:
        if (root / marker).exists():
            lang, framework = marker_lang, marker_framework
            break
    if not lang:
        lang = "Unknown"

    if lang == "JavaScript/TypeScript":
        content = _read(root / "package.json")
        if content is not None:
            framework = _first_match(content, _JS_FRAMEWORKS) or framework
    elif lang == "Python":
        content = _read(root / "pyproject.toml")
        if content is not None:
            framework = _first_match(content, _PYTHON_FRAMEWORKS) or framework

    return lang, framework


def generate_context(lang: str, framework: str = "") -> str:
    """The starting text of a project context file."""
    lines = ["# Project Context", "", f"Language: {lang}"]
    if framework:
        lines.append(f"Framework: {framework}")
    lines += [
        "",
        "## Guidelines",
        "",
        "- Follow existing code patterns and conventions",
        "- Write tests for new functionality",
        "- Keep changes focused and minimal",
    ]
    lines.extend(_LANGUAGE_GUIDELINES.get(lang, ()))
    lines += [
        "",
        "## Project Structure",
        "",
        "<!-- Describe your project structure here -->",
        "",
        "## Key Files",
        "",
        "<!-- List important files and their purpose -->",
    ]
    return "\n".join(lines) + "\n"


def wrap_for_tool(tool: str, content: str) -> str:
    """Prefix ``content`` with the header a tool's instruction file uses."""
    header = _TOOL_HEADERS.get(tool)
    if header is None:
        return content
    return header + _GENERATED_NOTE + content


def generate_tool_context(tool: str, lang: str, framework: str = "") -> str:
    """The initial content of ``tool``'s own context file."""
    if tool == "aider":
        return _AIDER_CONFIG
    if tool == "continue":
        return _CONTINUE_CONFIG
    return wrap_for_tool(tool, generate_context(lang, framework))


def init_context(
    root: str | os.PathLike = ".", tools: Iterable[str] | None = None
) -> dict[str, list]:
    """Create the context file and tool files that do not exist yet.

    Returns ``{"created": [...], "skipped": [...], "unknown": [...]}``: the
    paths written, the paths already present, and tool names with no known
    context file. Without ``tools`` the common tools are used.
    """
    root = Path(root)
    lang, framework = detect_project(root)
    report: dict[str, list] = {"created": [], "skipped": [], "unknown": []}

    source = root / CONTEXT_SOURCE
    if source.exists():
        report["skipped"].append(source)
    else:
        source.write_text(generate_context(lang, framework), encoding="utf-8")
        report["created"].append(source)

    for tool in list(tools) if tools else list(DEFAULT_TOOLS):
        name = CONTEXT_FILES.get(tool)
        if name is None:
            report["unknown"].append(tool)
            continue
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            report["skipped"].append(path)
            continue
        path.write_text(generate_tool_context(tool, lang, framework), encoding="utf-8")
        report["created"].append(path)

    return report


def sync_context(root: str | os.PathLike = ".") -> list[Path]:
    """Rewrite every existing tool file from the project context file.

    Returns the paths rewritten. Raises ``FileNotFoundError`` when the
    context file is missing.
    """
    root = Path(root)
    base = (root / CONTEXT_SOURCE).read_text(encoding="utf-8", errors="replace")
    synced: list[Path] = []
    for tool, name in CONTEXT_FILES.items():
        path = root / name
        if not path.exists():
            continue
        path.write_text(wrap_for_tool(tool, base), encoding="utf-8")
        synced.append(path)
    return synced