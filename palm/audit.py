"""Scan source files for issues common in machine-generated code."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum

AUDITED_EXTENSIONS = frozenset({".go", ".py", ".js", ".ts", ".tsx"})
MAX_AUDITED_SIZE = 512 * 1024


class Severity(StrEnum):
    """How serious an audit finding is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class AuditIssue:
    """One finding at a given line of a file."""

    file: str
    line: int
    severity: Severity
    message: str


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogateescape"))


def _looks_commented(trimmed: str) -> bool:
    return "//" in trimmed or "#" in trimmed or trimmed.startswith("*")


def _relative(path: str | os.PathLike, root: str | os.PathLike) -> str:
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return os.fspath(path)


def _check_line(line: str, ext: str) -> Iterator[tuple[Severity, str]]:
    trimmed = line.strip()

    if "TODO: implement" in trimmed or "TODO: add" in trimmed:
        yield Severity.WARNING, "Placeholder TODO — likely unimplemented AI suggestion"
    if "// This function" in trimmed and "..." in trimmed:
        yield Severity.WARNING, "Truncated AI comment"
    if ("pass  #" in trimmed or trimmed == "pass") and ext == ".py":
        yield Severity.INFO, "Empty pass statement — may be AI placeholder"
    if "console.log(" in trimmed and ext in (".ts", ".tsx", ".js"):
        yield Severity.INFO, "Debug console.log left in code"
    if 'fmt.Println("debug' in trimmed or 'fmt.Println("DEBUG' in trimmed:
        yield Severity.INFO, "Debug print statement"

    if "password" in line and "=" in line and '"' in line and not _looks_commented(trimmed):
        yield Severity.ERROR, "Possible hardcoded password"
    if "api_key" in line and '"sk-' in line:
        yield Severity.ERROR, "Possible hardcoded API key"
    if (
        "secret" in line
        and "=" in line
        and _byte_len(line) > 50
        and not _looks_commented(trimmed)
        and not trimmed.startswith("os.")
        and not trimmed.startswith("env")
    ):
        yield Severity.WARNING, "Possible hardcoded secret"

    if ext == ".go" and trimmed.startswith("_ = "):
        yield Severity.INFO, "Blank identifier assignment — possibly suppressing unused error"

    length = _byte_len(line)
    if length > 200:
        yield Severity.INFO, f"Very long line ({length} chars) — consider breaking up"


def audit_file(path: str | os.PathLike, root: str | os.PathLike = ".") -> list[AuditIssue]:
    """Audit one file; paths in the findings are relative to ``root``.

    A file that cannot be read yields no findings.
    """
    try:
        with open(path, "rb") as handle:
            content = handle.read().decode("utf-8", "surrogateescape")
    except OSError:
        return []

    ext = os.path.splitext(os.fspath(path))[1].lower()
    rel_path = _relative(path, root)
    return [
        AuditIssue(rel_path, number, severity, message)
        for number, line in enumerate(content.split("\n"), start=1)
        for severity, message in _check_line(line, ext)
    ]


def _walk_files(directory: str) -> Iterator[os.DirEntry]:
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                yield from _walk_files(entry.path)
            elif entry.is_file():
                yield entry
        except OSError:
            continue


def audit_target(target: str | os.PathLike = ".") -> list[AuditIssue]:
    """Audit a single file, or every source file under a directory.

    Raises ``FileNotFoundError`` (or another ``OSError``) when the target
    cannot be examined.
    """
    target = os.fspath(target)
    if not os.path.isdir(os.stat(target) and target):
        return audit_file(target)

    issues: list[AuditIssue] = []
    for entry in _walk_files(target):
        try:
            if entry.stat().st_size > MAX_AUDITED_SIZE:
                continue
        except OSError:
            continue
        if os.path.splitext(entry.name)[1].lower() in AUDITED_EXTENSIONS:
            issues.extend(audit_file(entry.path))
    return issues


def summarize(issues: Iterable[AuditIssue]) -> tuple[int, int, int]:
    """Count findings as ``(errors, warnings, infos)``."""
    errors = warnings = infos = 0
    for issue in issues:
        if issue.severity == Severity.WARNING:
            warnings += 1
        elif issue.severity == Severity.INFO:
            infos += 1
        else:
            errors += 1
    return errors, warnings, infos