"""Score AI answers with a judge tool and present the results."""

from __future__ import annotations

import re
import subprocess
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

BAR_WIDTH = 20
FALLBACK_VERDICT = "Could not parse judge output — showing estimates"

_RESET = "\x1b[0m"
_GOOD = "\x1b[32m"
_WARN = "\x1b[33m"
_BAD = "\x1b[31m"
_BRAND = "\x1b[1;32m"
_SUBTLE = "\x1b[90m"

_INTEGER = re.compile(r"\s*([+-]?\d+)")
_FIELDS = {
    "ACCURACY:": "accuracy",
    "HALLUCINATION:": "hallucination",
    "COMPLETENESS:": "completeness",
    "CLARITY:": "clarity",
}

_PROMPT_TEMPLATE = """You are an AI output evaluator. Score the following AI response on these criteria.

Question: "{question}"{context}

AI Response:
---
{response}
---

Score each criterion from 0 to 100. Reply in EXACTLY this format (just the numbers and verdict, nothing else):

ACCURACY: [0-100]
HALLUCINATION: [0-100]
COMPLETENESS: [0-100]
CLARITY: [0-100]
VERDICT: [one sentence summary]

Scoring guide:
- ACCURACY: How factually correct is the response? 100 = perfectly accurate
- HALLUCINATION: How much fabricated/false info? 0 = no hallucination, 100 = entirely made up
- COMPLETENESS: Does it fully answer the question? 100 = thorough answer
- CLARITY: How clear and well-structured? 100 = crystal clear"""


def _paint(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}" if text else text


EVAL_HEADER = "\n".join(
    [
        _paint("  ╔═══════════════════════════════════════════════════╗", _BRAND),
        _paint("  ║", _BRAND)
        + "   🔬  "
        + _paint("palm eval", _BRAND)
        + " — AI Accuracy & Trust Scanner     "
        + _paint("║", _BRAND),
        _paint("  ╚═══════════════════════════════════════════════════╝", _BRAND),
    ]
)


@dataclass
class EvalScore:
    """Judge scores, each from 0 to 100, for one tool's answer."""

    tool: str
    accuracy: int = 0
    hallucination: int = 0
    completeness: int = 0
    clarity: int = 0
    overall: int = 0
    verdict: str = ""

    @property
    def failed(self) -> bool:
        return (
            self.accuracy == 0
            and self.hallucination == 0
            and self.verdict.startswith("FAILED")
        )


def build_eval_prompt(question: str, context: str, response: str) -> str:
    """Ask a judge to score ``response`` as an answer to ``question``."""
    context_part = f"\nContext: {context}\n" if context else ""
    return _PROMPT_TEMPLATE.format(
        question=question, context=context_part, response=response
    )


def _leading_int(text: str) -> int | None:
    match = _INTEGER.match(text)
    return int(match.group(1)) if match else None


def parse_eval_score(tool: str, output: str) -> EvalScore:
    """Read a judge's reply into an :class:`EvalScore`.

    When no accuracy or hallucination score can be read from a non-empty
    reply, every score is set to 50 and the verdict says so.
    """
    score = EvalScore(tool=tool)
    for raw in output.split("\n"):
        line = raw.strip()
        for prefix, attr in _FIELDS.items():
            if line.startswith(prefix):
                value = _leading_int(line.removeprefix(prefix))
                if value is not None:
                    setattr(score, attr, value)
                break
        else:
            if line.startswith("VERDICT:"):
                score.verdict = line.removeprefix("VERDICT:").strip()

    if score.accuracy == 0 and score.hallucination == 0 and output:
        score.accuracy = score.hallucination = 50
        score.completeness = score.clarity = 50
        score.verdict = FALLBACK_VERDICT

    if score.accuracy > 0 or score.completeness > 0:
        raw_score = (
            score.accuracy * 0.4 + score.completeness * 0.3 + score.clarity * 0.3
        ) - score.hallucination * 0.5
        score.overall = int(max(0.0, min(100.0, raw_score)))
    return score


def grade_from_score(score: int) -> str:
    """Letter grade for an overall score."""
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    if score >= 50:
        return "D"
    return "F"


def _tone(score: int, higher_is_better: bool = True) -> str:
    if higher_is_better:
        if score >= 70:
            return _GOOD
        if score >= 40:
            return _WARN
        return _BAD
    if score <= 20:
        return _GOOD
    if score <= 50:
        return _WARN
    return _BAD


def _score_num(score: int) -> str:
    return _paint(f"{score:3d}", _tone(score))


def score_bar(score: int, higher_is_better: bool = True) -> str:
    """A coloured bar of ``BAR_WIDTH`` cells showing ``score`` out of 100."""
    filled = max(0, min(BAR_WIDTH, score * BAR_WIDTH // 100))
    return _paint("█" * filled, _tone(score, higher_is_better)) + _paint(
        "░" * (BAR_WIDTH - filled), _SUBTLE
    )


def best_tool(scores: Iterable[EvalScore]) -> tuple[str, int] | None:
    """The tool with the highest positive overall score, first one on ties."""
    best: tuple[str, int] | None = None
    for score in scores:
        if score.overall > (best[1] if best else 0):
            best = (score.tool, score.overall)
    return best


def _grade_painted(score: int) -> str:
    return _paint(grade_from_score(score), _tone(score if score >= 60 else min(score, 69) - 30 if score >= 50 else 0))


def render_scorecard(scores: Sequence[EvalScore]) -> str:
    """Render the evaluation scorecard followed by the most trusted tool."""
    edge = _paint("  │", _BRAND)
    right = _paint("│", _BRAND)
    blank = edge + " " * 66 + right
    lines = [
        _paint("  ┌" + "─" * 66 + "┐", _BRAND),
        edge + "  " + _paint("EVALUATION SCORECARD", _BRAND) + " " * 44 + right,
        _paint("  ├" + "─" * 66 + "┤", _BRAND),
    ]

    for score in scores:
        lines.append(blank)
        if score.failed:
            pad = max(0, 64 - len(score.tool) - 2 - len(score.verdict) - 2)
            body = f"  {score.tool:<14}  {_paint(score.verdict, _BAD)}"
            lines.append(edge + body + " " * pad + right)
            continue

        grade = grade_from_score(score.overall)
        grade_pad = max(0, 60 - len(score.tool) - len(grade) - 4)
        lines.append(
            edge
            + "  "
            + _paint(score.tool, _BRAND)
            + " " * grade_pad
            + _paint(grade, _tone(score.overall))
            + "  "
            + right
        )
        for label, value, higher in (
            ("Accuracy", score.accuracy, True),
            ("Hallucination", score.hallucination, False),
            ("Completeness", score.completeness, True),
            ("Clarity", score.clarity, True),
        ):
            lines.append(
                edge + f"  {'  ' + label:<16} {score_bar(value, higher)} {_score_num(value)}"
            )
        lines.append(edge + f"  Overall: {_score_num(score.overall)}  " + " " * 46 + right)

        if score.verdict:
            verdict_line = f"  💬 {score.verdict}"
            if len(verdict_line) > 62:
                verdict_line = verdict_line[:62] + "..."
            pad = max(0, 66 - len(verdict_line))
            lines.append(edge + verdict_line + " " * pad + right)

    lines.append(blank)
    lines.append(_paint("  └" + "─" * 66 + "┘", _BRAND))
    lines.append("")
    best = best_tool(scores)
    if best is not None:
        tool, value = best
        lines.append(
            f"  {_paint('🏆', _BRAND)} Most trusted: {_paint(tool, _BRAND)} (score: {value}/100)"
        )
    return "\n".join(lines)


def run_judge_tool(
    judge: str,
    prompt: str,
    env: Mapping[str, str] | None = None,
    timeout: float = 60,
) -> str:
    """Ask ``judge`` to score ``prompt``; an empty string on any failure."""
    if judge == "ollama":
        argv = ["ollama", "run", "llama3.3", prompt]
    else:
        argv = [judge, prompt]
    try:
        completed = subprocess.run(
            argv,
            input=prompt.encode(),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            env=dict(env) if env is not None else None,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return ""
    if completed.returncode != 0:
        return ""
    return completed.stdout.decode("utf-8", "replace")